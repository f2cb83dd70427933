"""Domain constants and enumerations for validation.

Kept as plain tuples so templates can iterate them in display order.
"""

from typing import Tuple

CATEGORIES: Tuple[str, ...] = (
    "Food",
    "Transport",
    "Utilities",
    "Shopping",
    "Entertainment",
    "Health",
    "Education",
    "Other",
)

# Labels used by the form and table filter dropdowns
CATEGORY_LABELS = {
    "Food": "Food & Dining",
    "Transport": "Transport",
    "Utilities": "Utilities",
    "Shopping": "Shopping",
    "Entertainment": "Entertainment",
    "Health": "Health & Medical",
    "Education": "Education",
    "Other": "Other",
}

PAYMENT_METHODS: Tuple[str, ...] = (
    "Cash",
    "Credit Card",
    "Debit Card",
    "Bank Transfer",
    "Mobile Wallet",
)

# Category filter value that passes every record
ALL_CATEGORIES = "all"

PAGES: Tuple[str, ...] = ("dashboard", "expenses", "analytics")
DEFAULT_PAGE = "dashboard"

HOME_CURRENCY = "INR"
