"""Money / rounding helpers.

Centralized so analytics, summary cards and the expenses table use identical
rounding and formatting semantics.
"""

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP

from app.models.currencies import get_currency_symbol


def round2(value: float) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_amount(value: float) -> str:
    return f"{round2(value):.2f}"


def format_money(value: float, currency: str) -> str:
    """Render ``value`` with the display symbol of ``currency`` (e.g. "€ 12.50")."""
    return f"{get_currency_symbol(currency)} {format_amount(value)}"
