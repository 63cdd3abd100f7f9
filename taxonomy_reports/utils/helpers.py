"""
Helper utilities
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Optional

CURRENCY_SYMBOLS = {"USD": "$", "EUR": "€", "GBP": "£", "AUD": "A$", "CAD": "C$", "JPY": "¥"}


def to_money(value: Any, decimals: int = 2) -> Decimal:
    """Coerce a numeric store value (None, float, str, Decimal) to a fixed-point Decimal"""
    if value is None:
        value = 0
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal(1).scaleb(-decimals), rounding=ROUND_HALF_UP)


def format_amount(amount: Any, decimals: int = 2) -> str:
    """Format a number with thousands separators and fixed decimals"""
    return f"{to_money(amount, decimals):,.{decimals}f}"


def format_currency(amount: Any, currency: str = "USD", decimals: int = 2) -> str:
    """Format amount as currency"""
    symbol = CURRENCY_SYMBOLS.get(currency, currency)
    formatted = format_amount(abs(to_money(amount, decimals)), decimals)
    sign = "-" if to_money(amount, decimals) < 0 else ""
    if symbol == currency:
        return f"{sign}{formatted} {currency}"
    return f"{sign}{symbol}{formatted}"


def parse_csv_setting(value: Optional[str]) -> list[str]:
    """Split a comma-separated setting into stripped, non-empty entries"""
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]
