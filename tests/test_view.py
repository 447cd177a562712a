import datetime

from PySide6 import QtCore, QtTest, QtWidgets

from ExpenseList.core.models import Document, User
from ExpenseList.data import controller
from ExpenseList.ui import view
from tests.base import BaseTestCase, FakeStore, process_events, wait_until

UTC = datetime.timezone.utc
U1 = 'users/u1/expenses'


def _documents():
    return [
        Document('b', {
            'amount': 20, 'category': 'Travel', 'note': 'taxi',
            'date': datetime.datetime(2024, 1, 2, tzinfo=UTC),
        }),
        Document('a', {
            'amount': 50, 'category': 'Food',
            'date': datetime.datetime(2024, 1, 1, tzinfo=UTC),
        }),
    ]


class ExpenseListViewTest(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.store = FakeStore()
        self.view = view.ExpenseListView(document_store=self.store, message_timeout=60000)
        self.view.show()

    def tearDown(self) -> None:
        self.view.close()
        self.view.deleteLater()
        super().tearDown()

    def _sign_in(self):
        self.view.set_user(User('u1'))
        self.store.push(U1, _documents())
        self.assertTrue(wait_until(lambda: len(self.view.rows()) == 2))

    def test_empty_without_user(self):
        self.assertEqual(self.view.title_label.text(), 'Your Expenses')
        self.assertEqual(self.view.rows(), [])
        self.assertFalse(self.view.empty_label.isHidden())
        self.assertEqual(self.view.empty_label.text(), 'No expenses found.')
        self.assertTrue(self.view.message_label.isHidden())
        self.assertEqual(self.store.subscribe_calls, [])

    def test_rows_follow_snapshot_order(self):
        self._sign_in()
        rows = self.view.rows()

        self.assertTrue(self.view.empty_label.isHidden())
        self.assertEqual([row.expense.id for row in rows], ['b', 'a'])
        self.assertIn('₹', rows[1].amount_label.text())
        self.assertIn('Food', rows[1].category_label.text())
        self.assertIn('2024-01-01', rows[1].date_label.text())
        self.assertIn('taxi', rows[0].note_label.text())
        self.assertIsNone(rows[1].note_label)

    def test_edit_and_save(self):
        self._sign_in()
        self.view.rows()[1].edit_button.click()

        editor = self.view.rows()[1]
        self.assertIsInstance(editor, view.ExpenseEditorWidget)
        self.assertIsInstance(self.view.rows()[0], view.ExpenseItemWidget)
        self.assertEqual(editor.editors['amount'].text(), '50')
        self.assertEqual(editor.editors['date'].text(), '2024-01-01')

        amount = editor.editors['amount']
        amount.selectAll()
        QtTest.QTest.keyClicks(amount, '75')
        self.assertEqual(self.view.controller.edit_buffer.amount, '75')

        editor.save_button.click()

        self.assertTrue(wait_until(
            lambda: self.view.message_label.text() == controller.UPDATED_MESSAGE
        ))
        self.assertTrue(wait_until(lambda: isinstance(self.view.rows()[1], view.ExpenseItemWidget)))
        self.assertIn('75', self.view.rows()[1].amount_label.text())
        self.assertFalse(self.view.message_label.isHidden())
        self.assertEqual(self.store.updates[0][0], 'users/u1/expenses/a')

    def test_cancel(self):
        self._sign_in()
        self.view.rows()[0].edit_button.click()
        self.view.rows()[0].cancel_button.click()

        self.assertIsInstance(self.view.rows()[0], view.ExpenseItemWidget)
        self.assertEqual(self.store.updates, [])

    def test_delete(self):
        self._sign_in()
        self.view.rows()[0].delete_button.click()

        self.assertTrue(wait_until(lambda: len(self.view.rows()) == 1))
        self.assertEqual(self.view.rows()[0].expense.id, 'a')
        self.assertTrue(wait_until(
            lambda: self.view.message_label.text() == controller.DELETED_MESSAGE
        ))

    def test_sign_out_clears_rows(self):
        self._sign_in()
        self.view.set_user(None)

        self.assertEqual(self.view.rows(), [])
        self.assertFalse(self.view.empty_label.isHidden())
        self.assertEqual(self.store.listeners, {})

    def test_close_releases_subscription(self):
        self._sign_in()
        self.view.close()

        self.assertEqual(self.store.listeners, {})
        self.view.set_user(User('u2'))
        self.assertEqual(len(self.store.subscribe_calls), 1)


class EmbeddedViewLifetimeTest(BaseTestCase):

    def setUp(self) -> None:
        super().setUp()
        self.store = FakeStore()
        self.host = QtWidgets.QWidget()
        self.view = view.ExpenseListView(document_store=self.store, message_timeout=60000, parent=self.host)
        self.host.show()

        self.view.set_user(User('u1'))
        self.store.push(U1, _documents())
        self.assertTrue(wait_until(lambda: len(self.view.rows()) == 2))

    def _destroy_host(self):
        self.host.close()
        self.host.deleteLater()
        QtCore.QCoreApplication.sendPostedEvents(None, QtCore.QEvent.DeferredDelete)
        wait_until(lambda: not self.store.listeners)

    def test_destroying_parent_releases_subscription(self):
        subscription = self.view.subscription
        self._destroy_host()

        self.assertEqual(self.store.listeners, {})
        self.assertFalse(subscription.active)

    def test_write_resolving_after_parent_destroyed_is_ignored(self):
        edit_controller = self.view.controller
        finished = []
        edit_controller.updateFinished.connect(lambda i, ok: finished.append((i, ok)))

        self.view.rows()[1].edit_button.click()
        self.view.rows()[1].save_button.click()
        self._destroy_host()

        self.assertTrue(wait_until(lambda: len(self.store.updates) == 1))
        process_events(0.1)

        self.assertEqual(finished, [])
        self.assertEqual(edit_controller.edit_id, 'a')
        self.assertEqual(edit_controller.message, '')
        self.assertEqual(self.store.listeners, {})
