from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from app.services.analytics_utils import (
    BreakdownItem,
    compute_category_breakdown,
    compute_monthly_breakdown,
    compute_payment_method_breakdown,
    compute_summary,
    compute_trend_data,
)
from app.services.app_context import AppContext
from app.services.expense_store import ExpenseStore
from .deps import get_app_context, get_store

router = APIRouter(prefix="/analytics", tags=["analytics"])


class Summary(BaseModel):
    currency: str
    total: float
    count: int
    this_month: float
    last_month: float
    percent_change: float
    trend_direction: str
    top_category: str
    top_category_total: float
    category_count: int
    average_expense: float


class BreakdownItemOut(BaseModel):
    name: str
    total: float
    percent: float


class Breakdown(BaseModel):
    currency: str
    items: List[BreakdownItemOut]


class TrendPointOut(BaseModel):
    label: str
    amount: float


class Trend(BaseModel):
    currency: str
    points: List[TrendPointOut]


def _breakdown(ctx: AppContext, items: List[BreakdownItem]) -> Breakdown:
    return Breakdown(
        currency=ctx.selected_currency,
        items=[
            BreakdownItemOut(name=i.name, total=i.total, percent=i.percent)
            for i in items
        ],
    )


@router.get("/summary", response_model=Summary, summary="Summary card metrics")
async def summary_endpoint(
    as_of: Optional[date] = Query(
        None, description="Reference day for this/last month (defaults to today)"
    ),
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    """Totals, month-over-month change, top category and average expense.

    percent_change is 0 whenever last month has no spend.
    """
    m = compute_summary(store.expenses, as_of=as_of)
    return Summary(
        currency=ctx.selected_currency,
        total=m.total,
        count=m.count,
        this_month=m.this_month,
        last_month=m.last_month,
        percent_change=m.percent_change,
        trend_direction=m.trend_direction,
        top_category=m.top_category,
        top_category_total=m.top_category_total,
        category_count=m.category_count,
        average_expense=m.average_expense,
    )


@router.get(
    "/categories", response_model=Breakdown, summary="Totals per category (ranked)"
)
async def categories_endpoint(
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    return _breakdown(ctx, compute_category_breakdown(store.expenses))


@router.get(
    "/payment-methods",
    response_model=Breakdown,
    summary="Totals per payment method (ranked)",
)
async def payment_methods_endpoint(
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    return _breakdown(ctx, compute_payment_method_breakdown(store.expenses))


@router.get("/monthly", response_model=Breakdown, summary="Totals per calendar month")
async def monthly_endpoint(
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    return _breakdown(ctx, compute_monthly_breakdown(store.expenses))


@router.get("/trend", response_model=Trend, summary="Daily totals in date order")
async def trend_endpoint(
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    points = compute_trend_data(store.expenses)
    return Trend(
        currency=ctx.selected_currency,
        points=[TrendPointOut(label=p.label, amount=p.amount) for p in points],
    )
