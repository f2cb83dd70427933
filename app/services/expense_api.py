"""Client for the remote expense service (``/api/v1``).

Reads (list, convert) never raise: a 404 means "no data" and any other
failure is logged and reported as an empty list. Writes (create, update,
delete) raise ``HttpError`` so the store can choose its local fallback;
``HttpError.accepted`` marks a 2xx reply whose body was empty or unusable.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

import httpx
from pydantic import ValidationError

from app.core.config import Settings, get_settings
from app.models.expense import Expense, ExpenseIn
from .http_client import HttpError, request_json, unwrap_data

logger = logging.getLogger("app.expense_api")


def _parse_expense(item: Any, accepted: bool = False) -> Expense:
    try:
        return Expense.model_validate(item)
    except ValidationError as e:
        raise HttpError(
            f"Malformed expense record: {e.error_count()} error(s)", accepted=accepted
        ) from e


def _parse_expense_list(payload: Any) -> List[Expense]:
    items = unwrap_data(payload)
    if not isinstance(items, list):
        return []
    expenses: List[Expense] = []
    for item in items:
        try:
            expenses.append(_parse_expense(item))
        except HttpError:
            logger.warning("skipping malformed expense record from service")
    return expenses


class ExpenseApiClient:
    def __init__(
        self,
        settings: Settings | None = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = settings or get_settings()
        self.base_url = settings.api_base_url
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=settings.http_timeout_seconds,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    # Reads -------------------------------------------------------------
    async def _fetch_list(self, path: str, fallback_msg: str) -> List[Expense]:
        try:
            payload = await request_json(self._client, "GET", path)
        except HttpError as e:
            if e.is_not_found:
                logger.info("no data at %s", path, extra={"status_code": 404})
                return []
            logger.warning(
                "%s: %s", fallback_msg, e, extra={"status_code": e.status_code}
            )
            return []
        return _parse_expense_list(payload)

    async def fetch_expenses(self) -> List[Expense]:
        return await self._fetch_list(
            "/expenses", "API not available, using local data only"
        )

    async def convert_currency(self, target_currency: str) -> List[Expense]:
        code = target_currency.upper()
        return await self._fetch_list(
            f"/expenses/convert/{code}",
            "Currency conversion failed, using non-converted data",
        )

    # Writes ------------------------------------------------------------
    async def create_expense(self, fields: ExpenseIn) -> Expense:
        payload = await request_json(
            self._client, "POST", "/expenses", json=fields.to_payload()
        )
        return _parse_expense(unwrap_data(payload), accepted=True)

    async def update_expense(
        self, expense_id: int, fields: ExpenseIn, updated_at: str
    ) -> Expense:
        body = fields.to_payload()
        body["updated_at"] = updated_at
        payload = await request_json(
            self._client, "PUT", f"/expenses/{expense_id}", json=body
        )
        return _parse_expense(unwrap_data(payload), accepted=True)

    async def delete_expense(self, expense_id: int) -> None:
        await request_json(
            self._client, "DELETE", f"/expenses/{expense_id}", expect_body=False
        )
