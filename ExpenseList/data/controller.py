"""Edit/delete controller for the expense list.

At most one expense is in edit mode at a time. Its pending input lives in an
:class:`~ExpenseList.core.models.EditBuffer` until it is saved or cancelled.
Saves and deletes are sent to the store on a worker thread. Local view state is
never patched: the store's next live snapshot is what shows a successful write.
Failures are logged and nothing else; the only thing the user sees is the
success message that does not appear.
"""
import logging
import math
import re
from typing import Any, Dict, Optional

from PySide6 import QtCore

from .feedback import FeedbackMessage, MESSAGE_TIMEOUT_MS
from ..core import store
from ..core import worker
from ..core.models import EditBuffer, Expense, User
from ..status import status

UPDATED_MESSAGE: str = 'Expense updated successfully!'
DELETED_MESSAGE: str = 'Expense deleted successfully!'

EDIT_FIELDS = ('amount', 'category', 'date', 'note')

_FLOAT_PREFIX = re.compile(r'\s*([+-]?(?:Infinity|(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?))')


def parse_amount(text: Any) -> float:
    """Convert amount input to a float the way a browser's ``parseFloat`` does.

    The longest leading numeric prefix is used (``'12abc'`` is 12.0). Input with
    no numeric prefix yields NaN rather than an error.
    """
    if isinstance(text, (int, float)) and not isinstance(text, bool):
        return float(text)
    match = _FLOAT_PREFIX.match(str(text or ''))
    if not match:
        return math.nan
    return float(match.group(1).replace('Infinity', 'inf'))


def amount_to_text(value: Any) -> str:
    """Render a stored amount as editable text, e.g. ``50.0`` as ``'50'``."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


class EditController(QtCore.QObject):
    """Track the expense in edit mode and send confirmed writes to the store.

    Signals:
        editStateChanged (): Edit mode was entered, left, or moved to another expense.
        messageChanged (str): Forwarded from the owned :class:`FeedbackMessage`.
        updateFinished (str, bool): An update request for the given id resolved.
        deleteFinished (str, bool): A delete request for the given id resolved.
    """
    editStateChanged = QtCore.Signal()
    messageChanged = QtCore.Signal(str)
    updateFinished = QtCore.Signal(str, bool)
    deleteFinished = QtCore.Signal(str, bool)

    def __init__(self, document_store: store.DocumentStore, user: Optional[User] = None,
                 message_timeout: int = MESSAGE_TIMEOUT_MS,
                 parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._store = document_store
        self._user: Optional[User] = user

        self._edit_id: Optional[str] = None
        self._buffer: EditBuffer = EditBuffer()

        self._disposed = False

        self.feedback = FeedbackMessage(timeout=message_timeout, parent=self)
        self.feedback.messageChanged.connect(self.messageChanged)

    @property
    def edit_id(self) -> Optional[str]:
        return self._edit_id

    @property
    def edit_buffer(self) -> EditBuffer:
        return self._buffer

    @property
    def message(self) -> str:
        return self.feedback.message

    @property
    def user(self) -> Optional[User]:
        return self._user

    def set_user(self, user: Optional[User]) -> None:
        self._user = user

    def start_editing(self, expense: Expense) -> None:
        """Put ``expense`` in edit mode, replacing any edit in progress."""
        if self._edit_id is not None and self._edit_id != expense.id:
            logging.debug(f'Discarding edit of "{self._edit_id}"')
        self._edit_id = expense.id
        self._buffer = EditBuffer(
            amount=amount_to_text(expense.amount),
            category=expense.category or '',
            date=expense.date or '',
            note=expense.note or '',
        )
        self.editStateChanged.emit()

    def edit_field(self, name: str, value: str) -> None:
        """Store user input for one field. No validation is done here.

        Raises:
            KeyError: If ``name`` is not an editable field.
        """
        if name not in EDIT_FIELDS:
            raise KeyError(f'Invalid edit field: {name}, must be one of {EDIT_FIELDS}')
        setattr(self._buffer, name, value)

    def cancel_edit(self) -> None:
        self._reset_edit()

    def _reset_edit(self) -> None:
        self._edit_id = None
        self._buffer = EditBuffer()
        self.editStateChanged.emit()

    def save_edit(self) -> Optional[QtCore.QThread]:
        """Send the edit buffer to the store.

        The amount is coerced with :func:`parse_amount` and may be NaN. An empty
        date clears the stored date. Edit mode is left only once the store confirms.

        Returns:
            The worker running the request, or None when the request could not be built.
        """
        if self._edit_id is None:
            logging.debug('save_edit called without an expense in edit mode.')
            return None

        edit_id = self._edit_id
        try:
            path = self._document_path(edit_id)
            fields: Dict[str, Any] = {
                'amount': parse_amount(self._buffer.amount),
                'category': self._buffer.category,
                'date': store.date_string_to_timestamp(self._buffer.date),
                'note': self._buffer.note,
            }
        except status.BaseStatusException as ex:
            logging.error(f'Error updating expense: {ex}')
            self.updateFinished.emit(edit_id, False)
            return None

        return worker.start_asynchronous(
            self._store.update, path, fields,
            on_result=lambda _: self._on_update_succeeded(edit_id),
            on_error=lambda ex: self._on_update_failed(edit_id, ex),
        )

    def handle_delete(self, expense_id: str) -> Optional[QtCore.QThread]:
        """Ask the store to delete an expense.

        Returns:
            The worker running the request, or None when the request could not be built.
        """
        try:
            path = self._document_path(expense_id)
        except status.BaseStatusException as ex:
            logging.error(f'Error deleting expense: {ex}')
            self.deleteFinished.emit(expense_id, False)
            return None

        return worker.start_asynchronous(
            self._store.delete, path,
            on_result=lambda _: self._on_delete_succeeded(expense_id),
            on_error=lambda ex: self._on_delete_failed(expense_id, ex),
        )

    def show_message(self, text: str) -> None:
        self.feedback.show_message(text)

    def _document_path(self, expense_id: str) -> str:
        if self._user is None:
            raise status.NotSignedInException()
        return store.expense_path(self._user.uid, expense_id)

    def _on_update_succeeded(self, edit_id: str) -> None:
        if self._disposed:
            logging.debug(f'Update of "{edit_id}" finished after disposal, ignoring.')
            return
        # The user may have moved on to another expense while the request was in flight
        if self._edit_id == edit_id:
            self._reset_edit()
        self.show_message(UPDATED_MESSAGE)
        self.updateFinished.emit(edit_id, True)

    def _on_update_failed(self, edit_id: str, ex: Exception) -> None:
        logging.error(f'Error updating expense: {ex}')
        if self._disposed:
            return
        self.updateFinished.emit(edit_id, False)

    def _on_delete_succeeded(self, expense_id: str) -> None:
        if self._disposed:
            logging.debug(f'Delete of "{expense_id}" finished after disposal, ignoring.')
            return
        self.show_message(DELETED_MESSAGE)
        self.deleteFinished.emit(expense_id, True)

    def _on_delete_failed(self, expense_id: str, ex: Exception) -> None:
        logging.error(f'Error deleting expense: {ex}')
        if self._disposed:
            return
        self.deleteFinished.emit(expense_id, False)

    def dispose(self) -> None:
        """Stop reacting to in-flight requests. Their results are discarded when they arrive."""
        self._disposed = True
        self.feedback.stop()
