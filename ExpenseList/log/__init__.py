"""
Logging subsystem.

Modules:

- :mod:`ExpenseList.log.log` – Logging setup, the in-memory diagnostics handler, and the Qt message bridge.
"""
