import datetime

from PySide6 import QtCore

from ExpenseList.core.models import Document, Expense
from ExpenseList.data import model
from tests.base import BaseTestCase

UTC = datetime.timezone.utc


def _document(doc_id, amount=10, category='Food', date=datetime.datetime(2024, 3, 15, tzinfo=UTC), note=None):
    data = {'amount': amount, 'category': category, 'date': date, 'createdAt': date}
    if note is not None:
        data['note'] = note
    return Document(doc_id, data)


class ProjectTest(BaseTestCase):

    def test_project_converts_timestamp(self):
        expense = model.project(_document('a', amount=50, note='lunch'))
        self.assertEqual(expense, Expense(id='a', amount=50, category='Food', date='2024-03-15', note='lunch'))

    def test_project_missing_fields(self):
        expense = model.project(Document('a', {}))
        self.assertIsNone(expense.amount)
        self.assertEqual(expense.category, '')
        self.assertEqual(expense.date, '')
        self.assertIsNone(expense.note)


class ExpensesModelTest(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.model = model.ExpensesModel()

    def test_starts_empty(self):
        self.assertEqual(self.model.rowCount(), 0)
        self.assertEqual(self.model.expenses(), ())

    def test_snapshot_fills_model_in_order(self):
        self.model.init_data([
            _document('a', amount=50, date=datetime.datetime(2024, 1, 1, tzinfo=UTC)),
        ])
        self.assertEqual(self.model.rowCount(), 1)
        self.assertEqual(self.model.expenses()[0].date, '2024-01-01')
        self.assertEqual(self.model.expenses()[0].amount, 50)

        self.model.init_data([_document('c'), _document('b'), _document('a')])
        self.assertEqual([e.id for e in self.model.expenses()], ['c', 'b', 'a'])

    def test_snapshot_replaces_previous_contents(self):
        self.model.init_data([_document('a'), _document('b')])
        self.model.init_data([_document('b', amount=99)])
        self.assertEqual([e.id for e in self.model.expenses()], ['b'])
        self.assertEqual(self.model.expense('b').amount, 99)
        self.assertIsNone(self.model.expense('a'))

    def test_empty_snapshot(self):
        self.model.init_data([_document('a')])
        self.model.init_data([])
        self.assertEqual(self.model.rowCount(), 0)

    def test_every_snapshot_resets_model(self):
        resets = []
        self.model.modelReset.connect(lambda: resets.append(True))
        self.model.init_data([_document('a')])
        self.model.init_data([_document('a')])
        self.model.clear_data()
        self.assertEqual(len(resets), 3)

    def test_clear_data(self):
        self.model.init_data([_document('a')])
        self.model.clear_data()
        self.assertEqual(self.model.expenses(), ())

    def test_roles(self):
        self.model.init_data([_document('a', amount=50, note='lunch'), _document('b')])
        index = self.model.index(0, 0)

        self.assertEqual(self.model.data(index, model.Roles.Id), 'a')
        self.assertEqual(self.model.data(index, model.Roles.Expense).note, 'lunch')
        self.assertEqual(self.model.data(self.model.index(1, 0), model.Roles.Id), 'b')
        self.assertIsNone(self.model.data(index, QtCore.Qt.DisplayRole))

    def test_invalid_index(self):
        self.assertIsNone(self.model.data(self.model.index(5, 0), model.Roles.Id))
