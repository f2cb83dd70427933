"""Shared fixtures: an in-memory stand-in for the remote expense service."""

import json
from typing import Any, Dict, List, Optional

import httpx
import pytest

from app.core.config import Settings
from app.main import create_app
from app.services.expense_api import ExpenseApiClient
from app.services.expense_store import ExpenseStore

BASE_URL = "http://expenses.test/api/v1"
PREFIX = "/api/v1/expenses"


def make_settings(**overrides: Any) -> Settings:
    settings = Settings(api_base_url=BASE_URL, **overrides)
    settings.init_post_load()
    return settings


class FakeExpenseService:
    """Minimal REST fake for ``/api/v1/expenses``.

    ``wrap`` answers with the ``{"data": ...}`` envelope, ``missing`` makes the
    collection routes answer 404 and ``rates`` drives the convert route.
    """

    def __init__(
        self,
        records: Optional[List[Dict[str, Any]]] = None,
        wrap: bool = False,
        missing: bool = False,
        rates: Optional[Dict[str, float]] = None,
    ):
        self.records: List[Dict[str, Any]] = [dict(r) for r in records or []]
        self.wrap = wrap
        self.missing = missing
        self.rates = rates or {}
        self.next_id = max([r.get("id", 0) for r in self.records] + [0]) + 1
        self.requests: List[httpx.Request] = []

    def _json(self, payload: Any, status_code: int = 200) -> httpx.Response:
        if self.wrap:
            payload = {"success": True, "data": payload}
        return httpx.Response(status_code, json=payload)

    def _find(self, expense_id: int) -> Optional[Dict[str, Any]]:
        return next((r for r in self.records if r["id"] == expense_id), None)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        if not path.startswith(PREFIX):
            return httpx.Response(404)
        rest = path[len(PREFIX):].strip("/")
        body = json.loads(request.content) if request.content else None

        if request.method == "GET" and rest == "":
            if self.missing:
                return httpx.Response(404, json={"error": "not found"})
            return self._json(self.records)
        if request.method == "GET" and rest.startswith("convert/"):
            code = rest.split("/", 1)[1]
            if self.missing or code not in self.rates:
                return httpx.Response(404)
            converted = []
            for r in self.records:
                converted.append(
                    {
                        **r,
                        "original_amount": r["amount"],
                        "original_currency": "INR",
                        "converted_amount": round(r["amount"] * self.rates[code], 2),
                        "target_currency": code,
                    }
                )
            return self._json(converted)
        if request.method == "POST" and rest == "":
            record = {
                **body,
                "id": self.next_id,
                "created_at": "2026-03-01T09:00:00.000Z",
                "updated_at": "2026-03-01T09:00:00.000Z",
            }
            self.next_id += 1
            self.records.append(record)
            return self._json(record, 201)
        if rest.isdigit():
            existing = self._find(int(rest))
            if existing is None:
                return httpx.Response(404)
            if request.method == "PUT":
                existing.update(body)
                return self._json(existing)
            if request.method == "DELETE":
                self.records.remove(existing)
                return httpx.Response(204)
        return httpx.Response(405)


def failing_handler(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


def server_error_handler(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, json={"error": "boom"})


SAMPLE_RECORDS = [
    {
        "id": 1,
        "amount": 45.5,
        "category": "Food",
        "description": "Lunch at restaurant",
        "date": "2026-02-01",
        "payment_method": "Credit Card",
        "created_at": "2026-02-01T12:30:00Z",
        "updated_at": "2026-02-01T12:30:00Z",
    },
    {
        "id": 2,
        "amount": 120.0,
        "category": "Transport",
        "description": "Gas",
        "date": "2026-02-02",
        "payment_method": "Debit Card",
        "created_at": "2026-02-02T08:00:00Z",
        "updated_at": "2026-02-02T08:00:00Z",
    },
    {
        "id": 3,
        "amount": 65.75,
        "category": "Shopping",
        "description": "Groceries",
        "date": "2026-03-03",
        "payment_method": "Debit Card",
        "created_at": "2026-03-03T16:45:00Z",
        "updated_at": "2026-03-03T16:45:00Z",
    },
]


def make_client(handler) -> ExpenseApiClient:
    return ExpenseApiClient(make_settings(), transport=httpx.MockTransport(handler))


@pytest.fixture
def fake_service() -> FakeExpenseService:
    return FakeExpenseService(SAMPLE_RECORDS, rates={"EUR": 2.0, "USD": 0.5})


@pytest.fixture
def store(fake_service) -> ExpenseStore:
    return ExpenseStore(make_client(fake_service))


@pytest.fixture
def failing_store() -> ExpenseStore:
    return ExpenseStore(make_client(failing_handler))


@pytest.fixture
def app_factory():
    def _factory(handler, **settings_overrides):
        settings = make_settings(**settings_overrides)
        client = ExpenseApiClient(settings, transport=httpx.MockTransport(handler))
        return create_app(settings_override=settings, api_client=client)

    return _factory
