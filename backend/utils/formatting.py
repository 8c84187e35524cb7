"""
Display helpers for addresses and balances.
"""
from decimal import Decimal, InvalidOperation


def format_address(address: str | None) -> str:
    """Shorten an address to ``0x1234...abcd``. Empty input gives an empty string."""
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"


def format_balance(balance) -> str:
    """
    Format a token balance for display.

    Zero shows as ``0``, dust below 0.0001 as ``<0.0001``, anything else
    with four decimals.
    """
    try:
        value = Decimal(str(balance))
    except InvalidOperation:
        return "0"
    if value == 0:
        return "0"
    if value < Decimal("0.0001"):
        return "<0.0001"
    return f"{value:.4f}"
