from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from app.models.currencies import (
    SUPPORTED_CURRENCIES,
    get_currency_symbol,
    is_supported_currency,
)
from app.services.app_context import AppContext
from app.services.conversion import select_display_currency
from app.services.expense_store import ExpenseStore
from .deps import get_app_context, get_store
from .expenses import NotificationOut

router = APIRouter(prefix="/currency", tags=["currency"])


class CurrencyState(BaseModel):
    selected_currency: str
    symbol: str
    supported: List[str]


class CurrencySelectResponse(BaseModel):
    selected_currency: str
    symbol: str
    notification: Optional[NotificationOut] = None


@router.get("", response_model=CurrencyState, summary="Selected display currency")
async def get_currency(ctx: AppContext = Depends(get_app_context)):
    return CurrencyState(
        selected_currency=ctx.selected_currency,
        symbol=ctx.currency_symbol,
        supported=SUPPORTED_CURRENCIES,
    )


@router.post(
    "/{code}",
    response_model=CurrencySelectResponse,
    summary="Switch display currency (converts the working collection)",
)
async def select_currency(
    code: str,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    if not is_supported_currency(code):
        raise HTTPException(status_code=400, detail="unsupported currency")
    note = await select_display_currency(ctx, store, code)
    return CurrencySelectResponse(
        selected_currency=ctx.selected_currency,
        symbol=get_currency_symbol(ctx.selected_currency),
        notification=NotificationOut(**note.as_dict()) if note else None,
    )
