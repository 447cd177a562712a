"""
UI package: application signals, application setup, and widgets.

This package provides:

- :mod:`ExpenseList.ui.actions` – Application-wide Qt signals.
- :mod:`ExpenseList.ui.app` – QApplication subclass and setup functions.
- :mod:`ExpenseList.ui.view` – The expense list widget and its row widgets.
"""
