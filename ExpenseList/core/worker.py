"""Thread worker for blocking document store requests.

Writes to the store block until the server confirms them, so they run on an
:class:`AsyncWorker` thread and report back through queued Qt signals. Requests
are never retried.
"""
import logging
from typing import Any, Callable, Optional, Set

from PySide6 import QtCore

# Workers must stay referenced until their thread finishes, even when the
# object that started them has been disposed.
_running_workers: Set['AsyncWorker'] = set()


class AsyncWorker(QtCore.QThread):
    """
    Generic worker thread running a single blocking call.

    Signals:
        resultReady (object): Emitted with the function's result on success.
        errorOccurred (object): Emitted with the raised exception on failure.
    """
    resultReady = QtCore.Signal(object)
    errorOccurred = QtCore.Signal(object)

    def __init__(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.func = func
        self.args = args
        self.kwargs = kwargs

    def run(self) -> None:
        try:
            result = self.func(*self.args, **self.kwargs)
        except Exception as ex:
            self.errorOccurred.emit(ex)
            return
        self.resultReady.emit(result)


class _Relay(QtCore.QObject):
    """Receives worker signals on the thread that created it and forwards them to plain callables."""

    def __init__(self, worker: AsyncWorker,
                 on_result: Optional[Callable[[Any], None]],
                 on_error: Optional[Callable[[Exception], None]]) -> None:
        super().__init__()
        self._worker = worker
        self._on_result = on_result
        self._on_error = on_error

        worker.resultReady.connect(self.result)
        worker.errorOccurred.connect(self.error)
        worker.finished.connect(self.finished)

    @QtCore.Slot(object)
    def result(self, value: Any) -> None:
        if self._on_result:
            self._on_result(value)

    @QtCore.Slot(object)
    def error(self, ex: Exception) -> None:
        if self._on_error:
            self._on_error(ex)

    @QtCore.Slot()
    def finished(self) -> None:
        # The thread must be fully stopped before its last reference goes
        self._worker.wait()
        _running_workers.discard(self._worker)
        logging.debug(f'Worker finished, {len(_running_workers)} still running.')


def start_asynchronous(func: Callable[..., Any], *args: Any,
                       on_result: Callable[[Any], None] = None,
                       on_error: Callable[[Exception], None] = None,
                       **kwargs: Any) -> AsyncWorker:
    """
    Run ``func`` on a worker thread without blocking the caller.

    The callbacks are invoked on the calling thread's event loop.

    Args:
        func: The blocking function to run.
        *args, **kwargs: Arguments passed to func.
        on_result: Called with the return value on success.
        on_error: Called with the exception on failure.

    Returns:
        The started worker.
    """
    worker: AsyncWorker = AsyncWorker(func, *args, **kwargs)
    worker.relay = _Relay(worker, on_result, on_error)

    _running_workers.add(worker)
    worker.start()
    return worker


def running_workers() -> int:
    """Return the number of workers whose thread has not finished yet."""
    return len(_running_workers)
