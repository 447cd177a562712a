"""
ExpenseList: live-synchronized expense list backed by Google Cloud Firestore.

This package provides:

- :mod:`ExpenseList.core` – Firestore document store adapter, live subscriptions, and write workers.
- :mod:`ExpenseList.data` – The view-state model, the edit/delete controller, and transient feedback messages.
- :mod:`ExpenseList.ui` – Application signals, the custom QApplication, and the expense list widget.
- :mod:`ExpenseList.settings` – Settings management and locale-aware formatting.
- :mod:`ExpenseList.log` – Logging setup with an in-memory diagnostics handler.

Use :func:`ExpenseList.exec_` to launch the application.
"""

import sys

from PySide6 import QtCore

# Fail on Python < 3.11
if not (sys.version_info.major == 3 and sys.version_info.minor >= 11):
    raise RuntimeError('ExpenseList requires Python 3.11 or higher.')

__version__ = '0.1.0'
__description__ = 'ExpenseList: live-synchronized expense list backed by Google Cloud Firestore.'

from .log import log

log.setup_logging()


def exec_() -> None:
    """Launch the ExpenseList GUI application and enter its event loop.

    Shows the expense list and hands it the configured identity once the
    event loop is running.
    """
    from .settings import lib
    from .ui import app
    from .ui.actions import signals
    from .ui.view import ExpenseListView

    application = app.Application(sys.argv)

    view = ExpenseListView()
    signals.userChanged.connect(view.set_user)
    view.show()

    user = lib.settings.current_user()
    QtCore.QTimer.singleShot(100, lambda: signals.userChanged.emit(user))

    sys.exit(application.exec())


if __name__ == '__main__':
    exec_()
