import enum
from typing import Any, List, Optional, Tuple

from PySide6 import QtCore

from ..core.models import Document, Expense
from ..core.store import timestamp_to_date_string


class Roles(enum.IntEnum):
    Expense = int(QtCore.Qt.UserRole) + 1
    Id = int(QtCore.Qt.UserRole) + 2


def project(document: Document) -> Expense:
    """Project a stored expense document into its display form.

    The stored ``date`` timestamp becomes a ``YYYY-MM-DD`` string.
    """
    data = document.data
    return Expense(
        id=document.id,
        amount=data.get('amount'),
        category=data.get('category', ''),
        date=timestamp_to_date_string(data.get('date')),
        note=data.get('note'),
    )


class ExpensesModel(QtCore.QAbstractListModel):
    """
    ExpensesModel holds the projection of the latest live snapshot.

    Every snapshot replaces the previous contents entirely, in snapshot order.
    Writes never touch the model, only the next snapshot does.
    """

    def __init__(self, parent: Optional[QtCore.QObject] = None) -> None:
        super().__init__(parent=parent)
        self._data: Tuple[Expense, ...] = ()

    @QtCore.Slot(object)
    def init_data(self, documents: List[Document]) -> None:
        self.beginResetModel()
        try:
            self._data = tuple(project(doc) for doc in documents)
        finally:
            self.endResetModel()

    @QtCore.Slot()
    def clear_data(self) -> None:
        self.beginResetModel()
        self._data = ()
        self.endResetModel()

    def expenses(self) -> Tuple[Expense, ...]:
        """Return the current view state."""
        return self._data

    def expense(self, expense_id: str) -> Optional[Expense]:
        return next((e for e in self._data if e.id == expense_id), None)

    def rowCount(self, parent: QtCore.QModelIndex = QtCore.QModelIndex()) -> int:
        if parent.isValid():
            return 0
        return len(self._data)

    def data(self, index: QtCore.QModelIndex, role: int = QtCore.Qt.DisplayRole) -> Any:
        if not index.isValid() or not 0 <= index.row() < len(self._data):
            return None

        expense = self._data[index.row()]
        if role == Roles.Expense:
            return expense
        if role == Roles.Id:
            return expense.id
        return None
