"""
ExpenseList data package: view state, edit state, and feedback.

This package provides:

- :mod:`ExpenseList.data.model` – Qt list model holding the latest projected snapshot of expenses.
- :mod:`ExpenseList.data.controller` – Edit/delete controller issuing confirmed writes to the store.
- :mod:`ExpenseList.data.feedback` – Self-clearing status message.
"""
