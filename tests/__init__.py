"""Test package. Qt runs headless and writes its settings to the test locations."""
import os

os.environ.setdefault('QT_QPA_PLATFORM', 'offscreen')

from PySide6 import QtCore

QtCore.QStandardPaths.setTestModeEnabled(True)
