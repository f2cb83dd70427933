"""Pydantic domain models for the expense dashboard."""

from .constants import (
    ALL_CATEGORIES,
    CATEGORIES,
    PAGES,
    PAYMENT_METHODS,
)  # re-export
from .currencies import CURRENCY_SYMBOLS, SUPPORTED_CURRENCIES, get_currency_symbol
from .expense import Expense, ExpenseIn

__all__ = [
    "ALL_CATEGORIES",
    "CATEGORIES",
    "PAGES",
    "PAYMENT_METHODS",
    "CURRENCY_SYMBOLS",
    "SUPPORTED_CURRENCIES",
    "get_currency_symbol",
    "Expense",
    "ExpenseIn",
]
