"""Display helpers for amounts and totals."""

from __future__ import annotations

from decimal import Decimal

CURRENCY_SYMBOL = "₹"


def _grouped(amount: Decimal) -> str:
    whole, fraction = f"{abs(amount):,.2f}".split(".")
    # Mirror locale formatting: 1,234.50 -> 1,234.5 and 50.00 -> 50.
    fraction = fraction.rstrip("0")
    return f"{whole}.{fraction}" if fraction else whole


def format_amount(amount: Decimal) -> str:
    """Signed amount for a transaction row, e.g. ``+₹5,000`` or ``-₹50``."""
    sign = "+" if amount > 0 else "-"
    return f"{sign}{CURRENCY_SYMBOL}{_grouped(amount)}"


def format_total(amount: Decimal) -> str:
    """Total without a plus sign; a negative balance keeps its minus."""
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY_SYMBOL}{_grouped(amount)}"
