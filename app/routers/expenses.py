from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from app.core.config import Settings
from app.models.constants import ALL_CATEGORIES, CATEGORIES
from app.models.currencies import get_currency_symbol
from app.models.expense import Expense, ExpenseIn
from app.services.analytics_utils import (
    SORT_KEYS,
    display_amount,
    display_currency,
    filter_expenses,
    paginate,
    sort_expenses,
)
from app.services.app_context import AppContext
from app.services.expense_store import ExpenseStore, Notification
from .deps import get_app_context, get_app_settings, get_store

router = APIRouter(prefix="/expenses", tags=["expenses"])


# Request / Response Models ----------------------------------------
class ExpenseOut(Expense):
    display_amount: float
    display_currency: str
    display_symbol: str


class NotificationOut(BaseModel):
    level: str
    message: str


class ExpensePageOut(BaseModel):
    items: List[ExpenseOut]
    page_index: int
    page_count: int
    page_size: int
    total: int


class ExpenseMutationResponse(BaseModel):
    expense: Optional[ExpenseOut] = None
    notification: NotificationOut


# Helpers ----------------------------------------------------------
def to_expense_out(expense: Expense, selected_currency: str) -> ExpenseOut:
    currency = display_currency(expense, selected_currency)
    return ExpenseOut(
        **expense.model_dump(),
        display_amount=display_amount(expense),
        display_currency=currency,
        display_symbol=get_currency_symbol(currency),
    )


def _mutation_response(
    ctx: AppContext, note: Notification, expense: Optional[Expense] = None
) -> ExpenseMutationResponse:
    return ExpenseMutationResponse(
        expense=to_expense_out(expense, ctx.selected_currency) if expense else None,
        notification=NotificationOut(**note.as_dict()),
    )


# Routes -----------------------------------------------------------
@router.get(
    "", response_model=ExpensePageOut, summary="List expenses (filtered, sorted, paged)"
)
async def list_expenses_endpoint(
    q: str = Query("", description="Case-insensitive text in description/category/payment method"),
    category: str = Query(ALL_CATEGORIES, description="Exact category or 'all'"),
    sort: str = Query("date", description=f"One of {', '.join(SORT_KEYS)}"),
    desc: bool = Query(True, description="Descending order"),
    page: int = Query(0, ge=0, description="Zero-based page index"),
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    if category != ALL_CATEGORIES and category not in CATEGORIES:
        raise HTTPException(status_code=400, detail="unsupported category")
    if sort not in SORT_KEYS:
        raise HTTPException(status_code=400, detail="unsupported sort key")
    rows = sort_expenses(filter_expenses(store.expenses, q, category), sort, desc)
    result = paginate(rows, page, settings.page_size)
    return ExpensePageOut(
        items=[to_expense_out(e, ctx.selected_currency) for e in result.items],
        page_index=result.page_index,
        page_count=result.page_count,
        page_size=result.page_size,
        total=result.total,
    )


@router.get("/{expense_id}", response_model=ExpenseOut, summary="Get one expense")
async def get_expense(
    expense_id: int,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    expense = store.get(expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="expense not found")
    return to_expense_out(expense, ctx.selected_currency)


@router.post(
    "",
    response_model=ExpenseMutationResponse,
    status_code=201,
    summary="Create an expense",
)
async def create_expense(
    payload: ExpenseIn,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    created, note = await store.create(payload)
    return _mutation_response(ctx, note, created)


@router.put(
    "/{expense_id}",
    response_model=ExpenseMutationResponse,
    summary="Replace an expense's fields",
)
async def update_expense(
    expense_id: int,
    payload: ExpenseIn,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    if store.get(expense_id) is None:
        raise HTTPException(status_code=404, detail="expense not found")
    updated, note = await store.update(expense_id, payload)
    return _mutation_response(ctx, note, updated)


@router.delete(
    "/{expense_id}",
    response_model=ExpenseMutationResponse,
    summary="Delete an expense (always removed locally)",
)
async def delete_expense(
    expense_id: int,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    note = await store.delete(expense_id)
    return _mutation_response(ctx, note)
