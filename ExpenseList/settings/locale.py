"""
Module for formatting amounts using Babel.

"""
import logging
import math

from babel import Locale, numbers

DEFAULT_LOCALE: str = 'en_IN'

CURRENCY_MAP: dict[str, str] = {
    'US': 'USD',
    'GB': 'GBP',
    'DE': 'EUR',
    'FR': 'EUR',
    'IT': 'EUR',
    'ES': 'EUR',
    'NL': 'EUR',
    'JP': 'JPY',
    'CA': 'CAD',
    'AU': 'AUD',
    'IN': 'INR',
    'BR': 'BRL',
    'CN': 'CNY',
    'HU': 'HUF',
    'MX': 'MXN',
}


def get_currency_from_locale(locale: str) -> str:
    """
    Retrieve the default currency code based on the locale's territory.

    Args:
        locale (str): Locale string, e.g. 'en_IN'.

    Returns:
        str: Currency code such as 'INR'. Defaults to 'INR' if the territory is unknown.
    """
    parts = locale.split('_')
    if len(parts) < 2:
        return 'INR'
    return CURRENCY_MAP.get(parts[1], 'INR')


def format_currency_value(value, locale: str = DEFAULT_LOCALE, currency: str = '') -> str:
    """
    Format an amount as a currency string.

    Amounts that are not finite numbers are returned as plain strings.

    Args:
        value: The stored amount.
        locale (str): Locale string, e.g. 'en_IN'.
        currency (str): Currency code. Derived from the locale when empty.

    Returns:
        str: The formatted currency string.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not math.isfinite(value):
        return '' if value is None else str(value)

    try:
        currency_code = currency or get_currency_from_locale(locale)
        return numbers.format_currency(value, currency=currency_code, locale=Locale.parse(locale))
    except Exception as ex:
        logging.debug(f'Error formatting currency: {ex}')
        return str(value)
