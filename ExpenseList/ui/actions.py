"""Application-wide Qt signals for ExpenseList.

Signals:
    - configSectionChanged: a settings section was replaced and saved
    - userChanged: the identity provider reports a new user (or None when signed out)
"""
from PySide6 import QtCore


class Signals(QtCore.QObject):
    """Centralized Qt signals for application config and identity events."""
    configSectionChanged = QtCore.Signal(str)

    userChanged = QtCore.Signal(object)

    def __init__(self):
        super().__init__()


signals = Signals()
