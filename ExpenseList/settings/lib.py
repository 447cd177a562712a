"""Settings library for the Firestore connection, display and identity configuration.

Provides:
    - Schema validation for the settings.json structure.
    - Loading, saving, and reverting application settings.
    - The module level :data:`settings` instance used throughout the application.
"""

import json
import logging
import pathlib
import shutil
from typing import Dict, Any, Optional

from PySide6 import QtCore, QtWidgets

from ..status import status

app_name: str = 'ExpenseList'

SETTINGS_SCHEMA: Dict[str, Any] = {
    'firestore': {
        'type': dict,
        'required': True,
        'item_schema': {
            'project': {'type': str, 'required': True},
            'database': {'type': str, 'required': True},
            'credentials': {'type': str, 'required': True},
        }
    },
    'display': {
        'type': dict,
        'required': True,
        'item_schema': {
            'locale': {'type': str, 'required': True},
            'currency': {'type': str, 'required': False},
        }
    },
    'identity': {
        'type': dict,
        'required': True,
        'item_schema': {
            'uid': {'type': str, 'required': True},
        }
    },
}


def _validate_section(section_name: str, section: Any, item_schema: Dict[str, Any]) -> None:
    """Validate one settings section against its item schema.

    Args:
        section_name: Name of the section, used in error messages.
        section: The section data.
        item_schema: Mapping of key -> {'type', 'required'}.

    Raises:
        TypeError: If the section is not a dict or a value has the wrong type.
        ValueError: If a required key is missing or an unknown key is present.
    """
    logging.debug(f'Validating "{section_name}" section.')
    if not isinstance(section, dict):
        msg: str = f'{section_name} must be a dict.'
        logging.error(msg)
        raise TypeError(msg)

    for key, spec in item_schema.items():
        if key not in section:
            if spec.get('required', False):
                msg = f'{section_name} is missing required key "{key}".'
                logging.error(msg)
                raise ValueError(msg)
            continue
        if not isinstance(section[key], spec['type']):
            msg = f'{section_name}.{key} must be of type {spec["type"].__name__}, got {type(section[key]).__name__}.'
            logging.error(msg)
            raise TypeError(msg)

    unknown = set(section.keys()) - set(item_schema.keys())
    if unknown:
        msg = f'{section_name} contains unknown keys: {sorted(unknown)}'
        logging.error(msg)
        raise ValueError(msg)


class ConfigPaths:
    """Manage application file paths and ensure the default settings template is in place."""

    def __init__(self) -> None:
        QtWidgets.QApplication.setApplicationName(app_name)
        QtWidgets.QApplication.setOrganizationName('')
        logging.debug(f'Setting application name: {app_name}')

        p = QtCore.QStandardPaths.writableLocation(QtCore.QStandardPaths.AppDataLocation)
        app_data_dir = pathlib.Path(p)
        logging.debug(f'Using app data directory: {app_data_dir}')

        self.template_dir: pathlib.Path = pathlib.Path(__file__).parent.parent / 'config'
        self.settings_template: pathlib.Path = self.template_dir / 'settings.json.template'

        self.config_dir: pathlib.Path = app_data_dir / 'config'
        self.settings_path: pathlib.Path = self.config_dir / 'settings.json'

        self._verify_and_prepare()

    def _verify_and_prepare(self) -> None:
        """Verify the template exists and copy it into the config directory if needed.

        Raises:
            FileNotFoundError: If the settings template is missing.
        """
        logging.debug(f'Verifying settings template in {self.template_dir}')
        if not self.settings_template.exists():
            msg: str = f'Missing settings template: {self.settings_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)

        if not self.config_dir.exists():
            logging.debug(f'Creating config directory: {self.config_dir}')
            self.config_dir.mkdir(parents=True, exist_ok=True)

        if not self.settings_path.exists():
            logging.debug(f'Copying default settings from template to {self.settings_path}')
            shutil.copy(self.settings_template, self.settings_path)

    def revert_to_template(self) -> None:
        """Restore settings.json from the default template file.

        Raises:
            FileNotFoundError: If the template file is missing.
        """
        logging.debug(f'Reverting settings to template: {self.settings_template}')
        if not self.settings_template.exists():
            msg: str = f'Settings template not found: {self.settings_template}'
            logging.error(msg)
            raise FileNotFoundError(msg)
        shutil.copy(self.settings_template, self.settings_path)


class SettingsAPI(ConfigPaths):
    """
    Provides an interface to get/set/save settings.json sections.
    """

    def __init__(self, settings_path: Optional[str] = None) -> None:
        """Initialize SettingsAPI and load the settings data.

        Args:
            settings_path: Optional path to a custom settings.json file.
        """
        super().__init__()

        self.settings_path: pathlib.Path = pathlib.Path(settings_path) if settings_path else self.settings_path

        self.settings_data: Dict[str, Any] = {k: {} for k in SETTINGS_SCHEMA}

        self.load_settings()

    def load_settings(self) -> Dict[str, Any]:
        """Load settings.json from disk and validate against schema.

        Returns:
            The loaded settings dictionary.

        Raises:
            status.SettingsNotFoundException: If settings.json is missing.
            status.SettingsInvalidException: If JSON parsing or validation fails.
        """
        logging.debug(f'Loading settings from "{self.settings_path}"')
        if not self.settings_path.exists():
            raise status.SettingsNotFoundException(str(self.settings_path))

        try:
            with self.settings_path.open('r', encoding='utf-8') as f:
                data: Dict[str, Any] = json.load(f)
            self.validate_settings_data(data)
        except Exception as ex:
            raise status.SettingsInvalidException(str(ex)) from ex

        self.settings_data = data
        return self.settings_data

    def validate_settings_data(self, data: Dict[str, Any] = None) -> None:
        """Validate settings data against :data:`SETTINGS_SCHEMA`.

        Args:
            data: Data to validate. Defaults to the loaded settings.

        Raises:
            TypeError, ValueError: On the first schema violation.
        """
        data = self.settings_data if data is None else data
        if not isinstance(data, dict):
            raise TypeError('Settings data must be a dict.')

        for section_name, specs in SETTINGS_SCHEMA.items():
            if section_name not in data:
                if specs['required']:
                    msg: str = f'Missing required section: "{section_name}"'
                    logging.error(msg)
                    raise ValueError(msg)
                continue
            _validate_section(section_name, data[section_name], specs['item_schema'])

        logging.debug('Settings data is valid.')

    def get_section(self, section_name: str) -> Dict[str, Any]:
        """Retrieve a copy of a settings section.

        Raises:
            KeyError: If section_name is unknown.
        """
        return self.settings_data[section_name].copy()

    def set_section(self, section_name: str, new_data: Dict[str, Any]) -> None:
        """Replace, validate and persist a settings section.

        The previous section data is restored if validation fails.

        Raises:
            ValueError: If section_name is unrecognized or new_data is invalid.
            TypeError: If new_data has values of the wrong type.
        """
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for set: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        current_section_data: Dict[str, Any] = self.settings_data[section_name]
        self.settings_data[section_name] = new_data
        try:
            self.validate_settings_data()
        except (ValueError, TypeError) as e:
            logging.error(f'Validation error on set_section("{section_name}"): {e}')
            self.settings_data[section_name] = current_section_data
            raise

        self.save_section(section_name)

        from ..ui.actions import signals
        signals.configSectionChanged.emit(section_name)

    def save_section(self, section_name: str) -> None:
        """Write a single section back into settings.json, leaving other sections as they are on disk."""
        if section_name not in SETTINGS_SCHEMA:
            msg: str = f'Unknown section_name for save: "{section_name}"'
            logging.error(msg)
            raise ValueError(msg)

        original_data: Dict[str, Any] = {}
        if self.settings_path.exists():
            with self.settings_path.open('r', encoding='utf-8') as f:
                original_data = json.load(f)

        new_data: Dict[str, Any] = original_data.copy()
        new_data[section_name] = self.settings_data[section_name]

        with self.settings_path.open('w', encoding='utf-8') as f:
            json.dump(new_data, f, indent=4, ensure_ascii=False)
        logging.debug(f'Saved section "{section_name}" to {self.settings_path}')

    def current_user(self):
        """Return the configured development identity.

        Returns:
            ExpenseList.core.models.User or None when no uid is configured.
        """
        from ..core.models import User

        uid: str = self.settings_data.get('identity', {}).get('uid', '')
        return User(uid) if uid else None


settings: SettingsAPI = SettingsAPI()
