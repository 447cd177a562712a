"""
Settings package: configuration API and formatting helpers.

This package provides:

- :mod:`ExpenseList.settings.lib` – Settings management and schema validation.
- :mod:`ExpenseList.settings.locale` – Localization utilities for formatting amounts.
"""
