from __future__ import annotations

from typing import Optional

from app.models.currencies import get_currency_symbol, is_supported_currency
from .app_context import AppContext
from .expense_store import ExpenseStore, Notification

"""Display currency switching.

Responsibilities:
    - Ignore a switch to the already-selected currency.
    - Ask the store to pull converted records for the new currency.
    - Keep the selected label in step with converted amounts.

When the service returns nothing and the working collection still holds
amounts converted to another currency, the previous selection stays so those
amounts keep their own label. With no converted records the new selection is
recorded anyway and the original amounts carry the new symbol.
"""


async def select_display_currency(
    ctx: AppContext, store: ExpenseStore, currency: str
) -> Optional[Notification]:
    code = currency.upper()
    if code == ctx.selected_currency:
        return None
    if not is_supported_currency(code):
        raise ValueError(f"Unsupported currency '{currency}'")
    if await store.convert(code):
        ctx.set_currency(code)
        return Notification("success", f"Converted to {code} {get_currency_symbol(code)}")
    held = store.converted_currency
    if held is not None:
        return Notification(
            "info", f"Conversion to {code} unavailable; still showing {held} amounts"
        )
    ctx.set_currency(code)
    return Notification(
        "info", f"Conversion to {code} unavailable; showing original amounts"
    )
