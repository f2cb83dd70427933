"""Session-scoped UI state shared by the dashboard views.

One ``AppContext`` lives on ``app.state`` for the lifetime of the process;
it resets on restart and is never persisted.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List

from app.models.constants import DEFAULT_PAGE, HOME_CURRENCY, PAGES
from app.models.currencies import get_currency_symbol, is_supported_currency
from .expense_store import Notification


@dataclass
class AppContext:
    current_page: str = DEFAULT_PAGE
    selected_currency: str = HOME_CURRENCY
    _notifications: Deque[Notification] = field(default_factory=deque, repr=False)

    @property
    def currency_symbol(self) -> str:
        return get_currency_symbol(self.selected_currency)

    def set_page(self, page: str) -> None:
        if page not in PAGES:
            raise ValueError(f"Unknown page '{page}'. Allowed: {PAGES}")
        self.current_page = page

    def set_currency(self, currency: str) -> None:
        code = currency.upper()
        if not is_supported_currency(code):
            raise ValueError(f"Unsupported currency '{currency}'")
        self.selected_currency = code

    def notify(self, note: Notification | None) -> None:
        if note is not None:
            self._notifications.append(note)

    def drain_notifications(self) -> List[Notification]:
        """Return pending notifications and forget them (shown once)."""
        notes = list(self._notifications)
        self._notifications.clear()
        return notes


__all__ = ["AppContext"]
