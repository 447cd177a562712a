"""
Core package for ExpenseList.

This package includes:

- :mod:`ExpenseList.core.models` – Identity, document, and expense value types.
- :mod:`ExpenseList.core.store` – Document store interface, timestamp helpers, and the Firestore adapter.
- :mod:`ExpenseList.core.subscription` – Live query management scoped to the current user.
- :mod:`ExpenseList.core.worker` – Thread worker running blocking store requests off the GUI thread.
"""
