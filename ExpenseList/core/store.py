"""Document store access for the expense list.

Provides:
    - :class:`DocumentStore`: the operations the expense list needs from a remote document database.
    - :class:`Subscription`: a scoped handle for a live query.
    - :class:`FirestoreStore`: the Google Cloud Firestore implementation.
    - Path and timestamp helpers shared by the subscription manager and the controller.

Collection layout::

    users/{uid}/expenses/{expense_id}

Dates are stored as Firestore timestamps at midnight UTC and shown as ``YYYY-MM-DD``.
"""
import abc
import contextlib
import datetime
import logging
import threading
from typing import Any, Callable, Dict, Iterator, List, Optional

from google.api_core import exceptions as api_exceptions
from google.auth import exceptions as auth_exceptions
from google.cloud import firestore
from google.oauth2 import service_account
from PySide6 import QtCore

from .models import Document
from ..status import status
from ..ui.actions import signals

USERS_COLLECTION: str = 'users'
EXPENSES_COLLECTION: str = 'expenses'
ORDER_BY_FIELD: str = 'createdAt'

ASCENDING: str = 'ASCENDING'
DESCENDING: str = 'DESCENDING'

DATE_FORMAT: str = '%Y-%m-%d'

SnapshotCallback = Callable[[List[Document]], None]
ErrorCallback = Callable[[Exception], None]

# Cached Firestore client shared by every store instance
_cached_client: Any = None
_client_lock = threading.Lock()


def expenses_path(uid: str) -> str:
    """Return the collection path holding the expenses of ``uid``."""
    return f'{USERS_COLLECTION}/{uid}/{EXPENSES_COLLECTION}'


def expense_path(uid: str, expense_id: str) -> str:
    """Return the document path of a single expense."""
    return f'{expenses_path(uid)}/{expense_id}'


def timestamp_to_date_string(value: Any) -> str:
    """Convert a stored timestamp to a ``YYYY-MM-DD`` string in UTC.

    Firestore returns timestamps as timezone-aware datetimes. Naive datetimes are
    taken to be UTC. Values that are not timestamps yield an empty string.
    """
    if isinstance(value, datetime.datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        return value.astimezone(datetime.timezone.utc).strftime(DATE_FORMAT)
    if isinstance(value, datetime.date):
        return value.strftime(DATE_FORMAT)
    return ''


def date_string_to_timestamp(text: str) -> Optional[datetime.datetime]:
    """Convert a ``YYYY-MM-DD`` string to a timestamp at midnight UTC.

    An empty string yields None, which clears the stored date.

    Raises:
        status.DateInvalidException: If the text is not a valid date.
    """
    if not text:
        return None
    try:
        parsed = datetime.datetime.strptime(text.strip(), DATE_FORMAT)
    except ValueError as ex:
        raise status.DateInvalidException(f'Got "{text}".') from ex
    return parsed.replace(tzinfo=datetime.timezone.utc)


class Subscription:
    """Handle for a live query.

    Closing is idempotent. Use as a context manager to tie the live query to a scope.
    """

    def __init__(self, unsubscribe: Callable[[], None], path: str = '') -> None:
        self._unsubscribe = unsubscribe
        self.path = path
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        logging.debug(f'Releasing subscription to "{self.path}"')
        self._unsubscribe()

    def __enter__(self) -> 'Subscription':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class DocumentStore(abc.ABC):
    """The operations the expense list needs from a remote document database."""

    @abc.abstractmethod
    def subscribe(self, collection_path: str, order_by: str, direction: str,
                  on_next: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        """Open a live query on a collection.

        ``on_next`` receives the full, ordered list of documents every time the
        collection changes. Either callback may be invoked from a background thread.
        """

    @abc.abstractmethod
    def update(self, document_path: str, fields: Dict[str, Any]) -> None:
        """Update fields of an existing document. Blocks until the store confirms."""

    @abc.abstractmethod
    def delete(self, document_path: str) -> None:
        """Delete a document. Blocks until the store confirms."""


def _translate_error(ex: Exception) -> Exception:
    """Map Google API errors onto status exceptions. Other errors are returned unchanged."""
    if isinstance(ex, api_exceptions.PermissionDenied):
        return status.PermissionDeniedException(str(ex))
    if isinstance(ex, api_exceptions.NotFound):
        return status.DocumentNotFoundException(str(ex))
    if isinstance(ex, api_exceptions.GoogleAPICallError):
        return status.ServiceUnavailableException(str(ex))
    return ex


@contextlib.contextmanager
def _translated_errors() -> Iterator[None]:
    """Re-raise Google API errors raised in the block as status exceptions."""
    try:
        yield
    except api_exceptions.GoogleAPICallError as ex:
        raise _translate_error(ex) from ex


def clear_client() -> None:
    """
    Clears the cached Firestore client.
    """
    global _cached_client

    with _client_lock:
        try:
            if _cached_client:
                _cached_client.close()
        except Exception as ex:
            logging.debug(f'Failed closing cached Firestore client: {ex}')

        _cached_client = None


def _build_client() -> Any:
    from ..settings import lib
    config = lib.settings.get_section('firestore')

    credentials = None
    if config.get('credentials'):
        try:
            credentials = service_account.Credentials.from_service_account_file(config['credentials'])
        except (OSError, ValueError) as ex:
            raise status.CredentialsInvalidException(str(ex)) from ex

    try:
        client = firestore.Client(
            project=config.get('project') or None,
            credentials=credentials,
            database=config.get('database') or None,
        )
    except auth_exceptions.DefaultCredentialsError as ex:
        raise status.CredentialsInvalidException(str(ex)) from ex
    except Exception as ex:
        raise status.ServiceUnavailableException(str(ex)) from ex

    logging.debug('Firestore client created successfully.')
    return client


def get_client() -> Any:
    """
    Builds (or returns cached) Firestore client from the ``firestore`` settings section.

    Safe to call from worker threads: concurrent first calls share a single client.

    Returns:
        google.cloud.firestore.Client

    Raises:
        status.CredentialsInvalidException: If the service account file cannot be loaded.
        status.ServiceUnavailableException: If the client cannot be created.
    """
    global _cached_client

    with _client_lock:
        if _cached_client is None:
            _cached_client = _build_client()
        return _cached_client


class FirestoreStore(DocumentStore):
    """Google Cloud Firestore implementation of :class:`DocumentStore`.

    Args:
        client: Optional ``firestore.Client``. The cached client built from settings is used when omitted.
    """

    def __init__(self, client: Any = None) -> None:
        self._client = client

    @property
    def client(self) -> Any:
        return self._client if self._client is not None else get_client()

    def subscribe(self, collection_path: str, order_by: str, direction: str,
                  on_next: SnapshotCallback, on_error: ErrorCallback) -> Subscription:
        query = self.client.collection(collection_path).order_by(
            order_by,
            direction=firestore.Query.DESCENDING if direction == DESCENDING else firestore.Query.ASCENDING
        )

        # The Firestore watch has no error callback. A failed listen stream is
        # only logged by the client library and the watch stops delivering, so
        # on_error sees document conversion failures and nothing else.
        def _on_snapshot(docs, changes, read_time) -> None:
            try:
                documents = [Document(doc.id, doc.to_dict() or {}) for doc in docs]
            except Exception as ex:
                on_error(_translate_error(ex))
                return
            on_next(documents)

        with _translated_errors():
            watch = query.on_snapshot(_on_snapshot)

        logging.debug(f'Subscribed to "{collection_path}" ordered by {order_by} {direction}')
        return Subscription(watch.unsubscribe, path=collection_path)

    def update(self, document_path: str, fields: Dict[str, Any]) -> None:
        logging.debug(f'Updating "{document_path}": {fields}')
        with _translated_errors():
            self.client.document(document_path).update(fields)

    def delete(self, document_path: str) -> None:
        logging.debug(f'Deleting "{document_path}"')
        with _translated_errors():
            self.client.document(document_path).delete()


@QtCore.Slot(str)
def _reset_cached_client(section: str) -> None:
    """Clear the cached Firestore client when the firestore section changes."""
    if section == 'firestore':
        logging.debug('Clearing cached Firestore client due to settings change')
        clear_client()


signals.configSectionChanged.connect(_reset_cached_client)
