"""Live query management scoped to the signed-in user.

:class:`SubscriptionManager` keeps at most one live query open, on
``users/{uid}/expenses`` ordered by ``createdAt`` descending. Each snapshot is
re-emitted on the GUI thread through :attr:`SubscriptionManager.snapshotReceived`,
in the order the store delivered them.
"""
import contextlib
import logging
from typing import List, Optional

from PySide6 import QtCore

from . import store
from .models import Document, User


class SubscriptionManager(QtCore.QObject):
    """Open and release the live expense query as the identity changes.

    Signals:
        snapshotReceived (list): Full, ordered list of :class:`Document` items.
        cleared (): The user signed out, the view state must be emptied.
        errorOccurred (object): The live query failed. The last snapshot stays valid.
    """
    snapshotReceived = QtCore.Signal(object)
    cleared = QtCore.Signal()
    errorOccurred = QtCore.Signal(object)

    # Store callbacks may arrive on any thread, these carry them to ours
    _snapshotDelivered = QtCore.Signal(int, object)
    _errorDelivered = QtCore.Signal(int, object)

    def __init__(self, document_store: store.DocumentStore, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._store = document_store
        self._user: Optional[User] = None
        self._current: Optional[store.Subscription] = None
        self._scope = contextlib.ExitStack()
        self._generation = 0
        self._disposed = False

        self._connect_signals()

    def _connect_signals(self) -> None:
        self._snapshotDelivered.connect(self._on_snapshot)
        self._errorDelivered.connect(self._on_error)
        self.errorOccurred.connect(self._log_error)

    @property
    def user(self) -> Optional[User]:
        return self._user

    @property
    def active(self) -> bool:
        """True while a live query is open."""
        return self._current is not None

    def set_user(self, user: Optional[User]) -> None:
        """Point the live query at ``user``'s expenses.

        The previous query is released before a new one is opened. Passing None
        clears the view state immediately and opens nothing.
        """
        if self._disposed:
            logging.debug('set_user called on a disposed subscription manager, ignoring.')
            return
        if user is not None and user == self._user and self.active:
            return

        self._release()
        self._user = user

        if user is None:
            logging.debug('No user signed in, clearing expenses.')
            self.cleared.emit()
            return

        generation = self._generation
        path = store.expenses_path(user.uid)

        def _on_next(documents: List[Document]) -> None:
            self._snapshotDelivered.emit(generation, list(documents))

        def _on_error(ex: Exception) -> None:
            self._errorDelivered.emit(generation, ex)

        try:
            subscription = self._store.subscribe(
                path, store.ORDER_BY_FIELD, store.DESCENDING, _on_next, _on_error
            )
        except Exception as ex:
            self.errorOccurred.emit(ex)
            return

        self._current = self._scope.enter_context(subscription)
        logging.debug(f'Listening to expenses of user "{user.uid}"')

    @QtCore.Slot(int, object)
    def _on_snapshot(self, generation: int, documents: List[Document]) -> None:
        # Deliveries queued before the query was released are dropped
        if generation != self._generation or self._disposed:
            logging.debug('Dropping snapshot of a released subscription.')
            return
        self.snapshotReceived.emit(documents)

    @QtCore.Slot(int, object)
    def _on_error(self, generation: int, ex: Exception) -> None:
        if generation != self._generation or self._disposed:
            return
        self.errorOccurred.emit(ex)

    @QtCore.Slot(object)
    def _log_error(self, ex: Exception) -> None:
        logging.error(f'Error fetching expenses: {ex}')

    def _release(self) -> None:
        self._generation += 1
        self._current = None
        self._scope.close()
        self._scope = contextlib.ExitStack()

    def dispose(self) -> None:
        """Release the live query. Every later call and delivery is ignored."""
        if self._disposed:
            return
        self._release()
        self._disposed = True
        logging.debug('Subscription manager disposed.')
