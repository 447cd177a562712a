"""The expense list widget.

:class:`ExpenseListView` takes a single input, the signed-in user, and wires the
three parts of the expense list together:

- :class:`~ExpenseList.core.subscription.SubscriptionManager` feeds live snapshots into
- :class:`~ExpenseList.data.model.ExpensesModel`, which the rows are built from, while
- :class:`~ExpenseList.data.controller.EditController` handles edit, save, cancel, and delete.
"""
import functools
import logging
from typing import Dict, Optional

from PySide6 import QtCore, QtGui, QtWidgets

from ..core import store
from ..core.models import Expense, User
from ..core.subscription import SubscriptionManager
from ..data.controller import EditController
from ..data.feedback import MESSAGE_TIMEOUT_MS
from ..data.model import ExpensesModel, Roles
from ..settings import lib
from ..settings import locale

TITLE: str = 'Your Expenses'
EMPTY_TEXT: str = 'No expenses found.'


def _format_amount(value) -> str:
    display = lib.settings.get_section('display')
    return locale.format_currency_value(
        value,
        display.get('locale', locale.DEFAULT_LOCALE),
        display.get('currency', ''),
    )


def _dispose_parts(subscription: SubscriptionManager, controller: EditController, *args) -> None:
    """Release the live query and stop reacting to in-flight writes."""
    subscription.dispose()
    controller.dispose()


class ExpenseItemWidget(QtWidgets.QFrame):
    """Read-only row showing one expense with Edit and Delete buttons."""
    editRequested = QtCore.Signal(object)
    deleteRequested = QtCore.Signal(str)

    def __init__(self, expense: Expense, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.expense = expense
        self.setFrameShape(QtWidgets.QFrame.StyledPanel)

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)

        self.amount_label = QtWidgets.QLabel(f'<b>Amount:</b> {_format_amount(self.expense.amount)}', parent=self)
        self.category_label = QtWidgets.QLabel(f'<b>Category:</b> {self.expense.category}', parent=self)
        self.date_label = QtWidgets.QLabel(f'<b>Date:</b> {self.expense.date}', parent=self)
        self.layout().addWidget(self.amount_label)
        self.layout().addWidget(self.category_label)
        self.layout().addWidget(self.date_label)

        self.note_label = None
        if self.expense.note:
            self.note_label = QtWidgets.QLabel(f'<b>Note:</b> {self.expense.note}', parent=self)
            self.layout().addWidget(self.note_label)

        row = QtWidgets.QHBoxLayout()
        self.edit_button = QtWidgets.QPushButton('Edit', parent=self)
        self.delete_button = QtWidgets.QPushButton('Delete', parent=self)
        row.addWidget(self.edit_button, 1)
        row.addWidget(self.delete_button, 1)
        self.layout().addLayout(row)

    def _connect_signals(self) -> None:
        self.edit_button.clicked.connect(lambda: self.editRequested.emit(self.expense))
        self.delete_button.clicked.connect(lambda: self.deleteRequested.emit(self.expense.id))


class ExpenseEditorWidget(QtWidgets.QFrame):
    """Row in edit mode, bound to the controller's edit buffer."""

    def __init__(self, controller: EditController, parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.controller = controller
        self.setFrameShape(QtWidgets.QFrame.StyledPanel)

        self.editors: Dict[str, QtWidgets.QLineEdit] = {}

        self._create_ui()
        self._connect_signals()

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)
        buffer = self.controller.edit_buffer

        placeholders = {
            'amount': 'Amount',
            'category': 'Category',
            'date': 'YYYY-MM-DD',
            'note': 'Note',
        }
        for name, placeholder in placeholders.items():
            editor = QtWidgets.QLineEdit(getattr(buffer, name), parent=self)
            editor.setObjectName(name)
            editor.setPlaceholderText(placeholder)
            self.editors[name] = editor
            self.layout().addWidget(editor)

        row = QtWidgets.QHBoxLayout()
        self.save_button = QtWidgets.QPushButton('Save', parent=self)
        self.cancel_button = QtWidgets.QPushButton('Cancel', parent=self)
        row.addWidget(self.save_button, 1)
        row.addWidget(self.cancel_button, 1)
        self.layout().addLayout(row)

    def _connect_signals(self) -> None:
        for name, editor in self.editors.items():
            editor.textEdited.connect(functools.partial(self.controller.edit_field, name))
        self.save_button.clicked.connect(self.controller.save_edit)
        self.cancel_button.clicked.connect(self.controller.cancel_edit)


class ExpenseListView(QtWidgets.QWidget):
    """Live list of the signed-in user's expenses with inline editing.

    Args:
        document_store: Store to read and write expenses. Defaults to Firestore.
        user: The signed-in user, or None.
        message_timeout: Milliseconds a feedback message stays visible.
    """

    def __init__(self, document_store: Optional[store.DocumentStore] = None,
                 user: Optional[User] = None,
                 message_timeout: int = MESSAGE_TIMEOUT_MS,
                 parent: Optional[QtWidgets.QWidget] = None) -> None:
        super().__init__(parent=parent)
        self.setWindowTitle(TITLE)

        document_store = document_store if document_store is not None else store.FirestoreStore()

        self.model = ExpensesModel(parent=self)
        # Not children of the view: they must still exist when its destroyed signal fires
        self.subscription = SubscriptionManager(document_store)
        self.controller = EditController(document_store, message_timeout=message_timeout)
        self.destroyed.connect(functools.partial(_dispose_parts, self.subscription, self.controller))

        self._disposed = False

        self._create_ui()
        self._connect_signals()

        self.set_user(user)

    def _create_ui(self) -> None:
        QtWidgets.QVBoxLayout(self)

        self.title_label = QtWidgets.QLabel(TITLE, parent=self)
        font = self.title_label.font()
        font.setBold(True)
        self.title_label.setFont(font)
        self.layout().addWidget(self.title_label)

        self.message_label = QtWidgets.QLabel(parent=self)
        self.message_label.setStyleSheet('color: #16a34a;')
        self.message_label.setHidden(True)
        self.layout().addWidget(self.message_label)

        self.empty_label = QtWidgets.QLabel(EMPTY_TEXT, parent=self)
        self.layout().addWidget(self.empty_label)

        self.scroll_area = QtWidgets.QScrollArea(parent=self)
        self.scroll_area.setWidgetResizable(True)
        self.rows_widget = QtWidgets.QWidget(parent=self.scroll_area)
        QtWidgets.QVBoxLayout(self.rows_widget)
        self.rows_widget.layout().setAlignment(QtCore.Qt.AlignTop)
        self.scroll_area.setWidget(self.rows_widget)
        self.layout().addWidget(self.scroll_area, 1)

        self.rebuild_rows()

    def _connect_signals(self) -> None:
        self.subscription.snapshotReceived.connect(self.model.init_data)
        self.subscription.cleared.connect(self.model.clear_data)

        self.model.modelReset.connect(self.rebuild_rows)
        self.controller.editStateChanged.connect(self.rebuild_rows)
        self.controller.messageChanged.connect(self.on_message_changed)

    @property
    def user(self) -> Optional[User]:
        return self.subscription.user

    @QtCore.Slot(object)
    def set_user(self, user: Optional[User]) -> None:
        """The single input of the view: the signed-in user, or None."""
        if self._disposed:
            return
        self.controller.set_user(user)
        self.subscription.set_user(user)

    @QtCore.Slot(str)
    def on_message_changed(self, message: str) -> None:
        self.message_label.setText(message)
        self.message_label.setHidden(not message)

    def rows(self):
        """Return the row widgets in display order."""
        layout = self.rows_widget.layout()
        return [layout.itemAt(i).widget() for i in range(layout.count()) if layout.itemAt(i).widget()]

    @QtCore.Slot()
    def rebuild_rows(self) -> None:
        layout = self.rows_widget.layout()
        while layout.count():
            item = layout.takeAt(0)
            widget = item.widget()
            if widget:
                widget.hide()
                widget.deleteLater()

        count = self.model.rowCount()
        self.empty_label.setHidden(bool(count))
        self.scroll_area.setHidden(not count)

        for row_index in range(count):
            index = self.model.index(row_index, 0)
            if self.model.data(index, Roles.Id) == self.controller.edit_id:
                row = ExpenseEditorWidget(self.controller, parent=self.rows_widget)
            else:
                row = ExpenseItemWidget(self.model.data(index, Roles.Expense), parent=self.rows_widget)
                row.editRequested.connect(self.controller.start_editing)
                row.deleteRequested.connect(self.controller.handle_delete)
            layout.addWidget(row)

        logging.debug(f'Rebuilt {count} expense rows.')

    def dispose(self) -> None:
        """Release the live query and ignore the results of writes still in flight.

        Called when the view is closed. A view destroyed without being closed,
        e.g. together with its parent, is disposed through its destroyed signal.
        """
        if self._disposed:
            return
        self._disposed = True
        _dispose_parts(self.subscription, self.controller)

    def closeEvent(self, event: QtGui.QCloseEvent) -> None:
        self.dispose()
        super().closeEvent(event)
