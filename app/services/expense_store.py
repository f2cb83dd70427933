"""Session-scoped working collection of expenses.

Every mutation goes through the remote service first; whatever happens there,
the store ends up with a usable local state and a ``Notification`` for the
user. ``HttpError`` never escapes this module.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

from app.models.expense import Expense, ExpenseIn
from .expense_api import ExpenseApiClient
from .http_client import HttpError

logger = logging.getLogger("app.store")


@dataclass(frozen=True)
class Notification:
    level: str  # success | error | info
    message: str

    def as_dict(self) -> Dict[str, str]:
        return {"level": self.level, "message": self.message}


def utc_now_iso() -> str:
    """Current UTC time in the ``2026-02-01T12:30:00.000Z`` shape."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_expense_id() -> int:
    return int(time.time() * 1000)


class ExpenseStore:
    def __init__(self, api: ExpenseApiClient):
        self._api = api
        self._expenses: List[Expense] = []
        self.loaded = False

    @property
    def expenses(self) -> List[Expense]:
        return list(self._expenses)

    def __len__(self) -> int:
        return len(self._expenses)

    @property
    def converted_currency(self) -> Optional[str]:
        """Target currency of the converted records, if any are held."""
        return next(
            (e.target_currency for e in self._expenses if e.is_converted), None
        )

    def get(self, expense_id: int) -> Optional[Expense]:
        return next((e for e in self._expenses if e.id == expense_id), None)

    # Load ------------------------------------------------------------
    async def load(self) -> Notification:
        self.loaded = True
        self._expenses = await self._api.fetch_expenses()
        count = len(self._expenses)
        logger.info("loaded %d expenses", count, extra={"operation": "load"})
        if count == 0:
            return Notification("info", "No expenses yet")
        return Notification("info", f"Loaded {count} expenses")

    async def ensure_loaded(self) -> Optional[Notification]:
        if self.loaded:
            return None
        return await self.load()

    # Create ----------------------------------------------------------
    async def create(
        self, fields: ExpenseIn
    ) -> Tuple[Optional[Expense], Notification]:
        try:
            created = await self._api.create_expense(fields)
            note = Notification("success", "Expense added successfully")
        except HttpError as e:
            if e.accepted:
                return None, await self._reload_after_accepted_create(e)
            logger.warning(
                "Create failed, storing locally: %s",
                e,
                extra={"operation": "create", "fallback": "local_record"},
            )
            stamp = utc_now_iso()
            created = Expense(
                id=local_expense_id(),
                created_at=stamp,
                updated_at=stamp,
                **fields.to_payload(),
            )
            note = Notification(
                "error", "Failed to add the expense on the server; kept locally"
            )
        self._expenses.append(created)
        return created, note

    async def _reload_after_accepted_create(self, error: HttpError) -> Notification:
        # the service stored the record, so a local copy would duplicate it
        logger.warning(
            "Create accepted but reply unusable, reloading: %s",
            error,
            extra={
                "operation": "create",
                "status_code": error.status_code,
                "fallback": "reload",
            },
        )
        refreshed = await self._api.fetch_expenses()
        if refreshed:
            self._expenses = refreshed
        return Notification("info", "Expense added; list refreshed from the server")

    # Update ----------------------------------------------------------
    async def update(
        self, expense_id: Optional[int], fields: ExpenseIn
    ) -> Tuple[Optional[Expense], Notification]:
        if expense_id is None:
            return None, Notification("error", "Cannot update an expense without an id")
        stamp = utc_now_iso()
        try:
            updated = await self._api.update_expense(expense_id, fields, stamp)
            note = Notification("success", "Expense updated successfully")
        except HttpError as e:
            logger.warning(
                "Update failed, updating locally: %s",
                e,
                extra={
                    "operation": "update",
                    "expense_id": expense_id,
                    "fallback": "local_record",
                },
            )
            existing = self.get(expense_id)
            created_at = existing.created_at if existing and existing.created_at else stamp
            updated = Expense(
                id=expense_id,
                created_at=created_at,
                updated_at=stamp,
                **fields.to_payload(),
            )
            note = Notification(
                "error", "Failed to update the expense on the server; updated locally"
            )
        self._expenses = [
            updated if e.id == expense_id else e for e in self._expenses
        ]
        return updated, note

    # Delete ----------------------------------------------------------
    async def delete(self, expense_id: int) -> Notification:
        try:
            await self._api.delete_expense(expense_id)
            note = Notification("success", "Expense deleted successfully")
        except HttpError as e:
            logger.warning(
                "Delete failed, removing locally: %s",
                e,
                extra={
                    "operation": "delete",
                    "expense_id": expense_id,
                    "fallback": "local_removal",
                },
            )
            note = Notification(
                "error", "Failed to delete the expense on the server; removed locally"
            )
        self._expenses = [e for e in self._expenses if e.id != expense_id]
        return note

    # Conversion ------------------------------------------------------
    async def convert(self, target_currency: str) -> bool:
        """Swap in the service's converted records; False when none came back."""
        converted = await self._api.convert_currency(target_currency)
        if not converted:
            return False
        self._expenses = converted
        logger.info(
            "applied conversion to %d expenses",
            len(converted),
            extra={"operation": "convert", "currency": target_currency.upper()},
        )
        return True
