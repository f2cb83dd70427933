import asyncio
import json

import httpx
import pytest

from app.models.expense import ExpenseIn
from app.services.http_client import HttpError, unwrap_data
from conftest import (
    SAMPLE_RECORDS,
    FakeExpenseService,
    failing_handler,
    make_client,
    server_error_handler,
)


def run(coro):
    return asyncio.run(coro)


def new_fields(**overrides):
    data = {
        "amount": 20,
        "category": "Food",
        "date": "2026-03-01",
        "payment_method": "Cash",
    }
    data.update(overrides)
    return ExpenseIn(**data)


def test_unwrap_data_handles_both_shapes():
    assert unwrap_data([1, 2]) == [1, 2]
    assert unwrap_data({"data": [1]}) == [1]
    assert unwrap_data({"id": 3}) == {"id": 3}


def test_fetch_expenses_plain_and_enveloped():
    plain = make_client(FakeExpenseService(SAMPLE_RECORDS))
    wrapped = make_client(FakeExpenseService(SAMPLE_RECORDS, wrap=True))
    assert [e.id for e in run(plain.fetch_expenses())] == [1, 2, 3]
    assert [e.id for e in run(wrapped.fetch_expenses())] == [1, 2, 3]


def test_fetch_expenses_404_is_empty():
    client = make_client(FakeExpenseService(SAMPLE_RECORDS, missing=True))
    assert run(client.fetch_expenses()) == []


def test_fetch_expenses_failures_are_empty():
    assert run(make_client(failing_handler).fetch_expenses()) == []
    assert run(make_client(server_error_handler).fetch_expenses()) == []


def test_fetch_expenses_skips_malformed_records():
    records = SAMPLE_RECORDS + [{"id": 9, "category": "Food"}]
    client = make_client(FakeExpenseService(records))
    assert [e.id for e in run(client.fetch_expenses())] == [1, 2, 3]


def test_convert_currency_returns_enriched_records():
    client = make_client(FakeExpenseService(SAMPLE_RECORDS, rates={"EUR": 2.0}))
    converted = run(client.convert_currency("eur"))
    assert [e.converted_amount for e in converted] == [91.0, 240.0, 131.5]
    assert {e.target_currency for e in converted} == {"EUR"}
    assert converted[0].original_amount == 45.5


def test_convert_currency_404_or_failure_is_empty():
    client = make_client(FakeExpenseService(SAMPLE_RECORDS, rates={}))
    assert run(client.convert_currency("JPY")) == []
    assert run(make_client(failing_handler).convert_currency("EUR")) == []


def test_create_sends_fields_without_id_and_returns_server_record():
    service = FakeExpenseService(wrap=True)
    created = run(make_client(service).create_expense(new_fields(description="Tea")))
    assert created.id == 1
    assert created.created_at == "2026-03-01T09:00:00.000Z"
    sent = service.requests[-1]
    assert sent.method == "POST"
    assert sent.url.path == "/api/v1/expenses"
    body = json.loads(sent.content)
    assert body == {
        "amount": 20.0,
        "category": "Food",
        "description": "Tea",
        "date": "2026-03-01",
        "payment_method": "Cash",
    }


def test_update_sends_fresh_updated_at():
    service = FakeExpenseService(SAMPLE_RECORDS)
    updated = run(
        make_client(service).update_expense(
            2, new_fields(amount=99.5), "2026-03-02T10:00:00.000Z"
        )
    )
    assert updated.id == 2
    assert updated.amount == 99.5
    assert updated.updated_at == "2026-03-02T10:00:00.000Z"
    assert service.requests[-1].method == "PUT"
    assert service.requests[-1].url.path == "/api/v1/expenses/2"


def test_writes_raise_http_error():
    client = make_client(server_error_handler)
    with pytest.raises(HttpError) as exc:
        run(client.create_expense(new_fields()))
    assert exc.value.status_code == 500
    with pytest.raises(HttpError):
        run(make_client(failing_handler).delete_expense(1))
    with pytest.raises(HttpError) as missing:
        run(make_client(FakeExpenseService()).delete_expense(42))
    assert missing.value.is_not_found


def test_create_with_empty_success_reply_is_marked_accepted():
    def empty_reply(request):
        return httpx.Response(201)

    with pytest.raises(HttpError) as exc:
        run(make_client(empty_reply).create_expense(new_fields()))
    assert exc.value.accepted
    with pytest.raises(HttpError) as failed:
        run(make_client(server_error_handler).create_expense(new_fields()))
    assert not failed.value.accepted
