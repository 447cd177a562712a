"""Transient status message shown after a successful write."""
import logging
from typing import Optional

from PySide6 import QtCore

MESSAGE_TIMEOUT_MS: int = 6000


class FeedbackMessage(QtCore.QObject):
    """A single status message that clears itself.

    The clear timer is owned by the instance and restarted by every new
    message, so at most one clear is ever pending and it fires
    ``timeout`` milliseconds after the most recent :meth:`show_message` call.

    Signals:
        messageChanged (str): The current message. Empty when cleared.
    """
    messageChanged = QtCore.Signal(str)

    def __init__(self, timeout: int = MESSAGE_TIMEOUT_MS, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent)
        self._message: str = ''

        self._timer = QtCore.QTimer(self)
        self._timer.setSingleShot(True)
        self._timer.setInterval(timeout)
        self._timer.timeout.connect(self.clear)

    @property
    def message(self) -> str:
        return self._message

    @property
    def pending(self) -> bool:
        """True while a clear is scheduled."""
        return self._timer.isActive()

    def remaining_time(self) -> int:
        """Milliseconds until the message clears, or -1 when nothing is scheduled."""
        return self._timer.remainingTime()

    def show_message(self, text: str) -> None:
        self._timer.stop()
        self._message = text
        self.messageChanged.emit(text)
        self._timer.start()

    def stop(self) -> None:
        """Cancel the pending clear. The current message is kept and nothing is emitted."""
        self._timer.stop()

    @QtCore.Slot()
    def clear(self) -> None:
        self._timer.stop()
        if not self._message:
            return
        logging.debug(f'Clearing message "{self._message}"')
        self._message = ''
        self.messageChanged.emit('')
