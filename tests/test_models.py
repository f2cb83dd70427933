import pytest
from pydantic import ValidationError

from app.core.config import Settings
from app.models.currencies import SUPPORTED_CURRENCIES, get_currency_symbol
from app.models.expense import Expense, ExpenseIn
from app.services.app_context import AppContext
from app.services.expense_store import Notification
from app.services.money import format_money, round2


def test_expense_in_normalizes_date_and_description():
    e = ExpenseIn(
        amount="12.5",
        category="Food",
        date="2026-02-06T00:00:00",
        payment_method="Mobile Wallet",
        description="   ",
    )
    assert e.date == "2026-02-06"
    assert e.description is None
    assert e.amount == 12.5


@pytest.mark.parametrize(
    "field,value",
    [("category", "Rent"), ("payment_method", "Cheque"), ("date", "06/02/2026")],
)
def test_expense_in_rejects_unknown_values(field, value):
    data = {"amount": 1, "category": "Food", "date": "2026-02-06", "payment_method": "Cash"}
    data[field] = value
    with pytest.raises(ValidationError):
        ExpenseIn(**data)


def test_expense_accepts_server_extras():
    e = Expense.model_validate(
        {
            "id": 7,
            "amount": 10,
            "category": "Other",
            "date": "2026-01-01",
            "payment_method": "Cash",
            "user_id": 99,
        }
    )
    assert e.id == 7
    assert not e.is_converted


def test_currency_table():
    assert len(SUPPORTED_CURRENCIES) >= 150
    assert SUPPORTED_CURRENCIES[:5] == ["USD", "EUR", "GBP", "JPY", "INR"]
    assert get_currency_symbol("inr") == "₹"
    assert get_currency_symbol("ABC") == "ABC"
    assert format_money(1234.5, "USD") == "$ 1234.50"
    assert round2(2.675) == 2.68


def test_settings_validation():
    s = Settings(api_base_url="http://api.local/api/v1/", home_currency="usd")
    s.init_post_load()
    assert s.api_base_url == "http://api.local/api/v1"
    assert s.home_currency == "USD"
    with pytest.raises(ValueError):
        Settings(home_currency="XYZ").init_post_load()
    with pytest.raises(ValueError):
        Settings(page_size=0).init_post_load()


def test_app_context_defaults_and_notifications():
    ctx = AppContext()
    assert (ctx.current_page, ctx.selected_currency) == ("dashboard", "INR")
    ctx.set_page("analytics")
    assert ctx.current_page == "analytics"
    with pytest.raises(ValueError):
        ctx.set_page("settings")
    with pytest.raises(ValueError):
        ctx.set_currency("XYZ")
    ctx.notify(Notification("success", "saved"))
    ctx.notify(None)
    assert [n.message for n in ctx.drain_notifications()] == ["saved"]
    assert ctx.drain_notifications() == []
