from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from app.core.config import Settings
from app.models.constants import (
    ALL_CATEGORIES,
    CATEGORIES,
    CATEGORY_LABELS,
    PAYMENT_METHODS,
)
from app.models.currencies import SUPPORTED_CURRENCIES, get_currency_symbol
from app.models.expense import Expense, ExpenseIn
from app.services.analytics_utils import (
    SORT_KEYS,
    compute_category_breakdown,
    compute_monthly_breakdown,
    compute_payment_method_breakdown,
    compute_summary,
    compute_trend_data,
    display_amount,
    display_currency,
    filter_expenses,
    paginate,
    sort_expenses,
)
from app.services.app_context import AppContext
from app.services.conversion import select_display_currency
from app.services.expense_store import ExpenseStore, Notification
from app.services.money import format_amount, format_money
from .deps import get_app_context, get_app_settings, get_store

router = APIRouter(tags=["ui"])

templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))
templates.env.filters["money"] = format_money
templates.env.filters["amount"] = format_amount


def _base_context(ctx: AppContext, settings: Settings) -> Dict[str, Any]:
    return {
        "version": settings.version,
        "app_name": settings.app_name,
        "current_page": ctx.current_page,
        "selected_currency": ctx.selected_currency,
        "currency_symbol": ctx.currency_symbol,
        "currencies": SUPPORTED_CURRENCIES,
        "currency_symbols": {c: get_currency_symbol(c) for c in SUPPORTED_CURRENCIES},
        "notifications": ctx.drain_notifications(),
    }


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_303_SEE_OTHER)


def _breakdown_chart(items) -> Dict[str, List[Any]]:
    return {"labels": [i.name for i in items], "values": [i.total for i in items]}


@router.get("/ui", response_class=HTMLResponse)
async def ui_dashboard(
    request: Request,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    ctx.set_page("dashboard")
    expenses = store.expenses
    trend = compute_trend_data(expenses)
    context = _base_context(ctx, settings)
    context.update(
        {
            "summary": compute_summary(expenses),
            "has_expenses": bool(expenses),
            "trend_chart": {
                "labels": [p.label for p in trend],
                "values": [p.amount for p in trend],
            },
            "category_chart": _breakdown_chart(compute_category_breakdown(expenses)),
            "method_chart": _breakdown_chart(
                compute_payment_method_breakdown(expenses)
            ),
        }
    )
    return templates.TemplateResponse(request, "dashboard.html", context)


def _table_rows(expenses: List[Expense], selected_currency: str) -> List[Dict[str, Any]]:
    rows = []
    for e in expenses:
        rows.append(
            {
                "id": e.id,
                "date": e.date,
                "description": e.description,
                "category": e.category,
                "payment_method": e.payment_method,
                "created_at": e.created_at,
                "amount": display_amount(e),
                "currency": display_currency(e, selected_currency),
            }
        )
    return rows


@router.get("/ui/expenses", response_class=HTMLResponse)
async def ui_expenses_list(
    request: Request,
    q: str = "",
    category: str = ALL_CATEGORIES,
    sort: str = "date",
    desc: bool = True,
    page: int = 0,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    ctx.set_page("expenses")
    if category != ALL_CATEGORIES and category not in CATEGORIES:
        category = ALL_CATEGORIES
    if sort not in SORT_KEYS:
        sort = "date"
    rows = sort_expenses(filter_expenses(store.expenses, q, category), sort, desc)
    result = paginate(rows, page, settings.page_size)
    context = _base_context(ctx, settings)
    context.update(
        {
            "rows": _table_rows(result.items, ctx.selected_currency),
            "page": result,
            "filters": {"q": q, "category": category, "sort": sort, "desc": desc},
            "categories": CATEGORIES,
            "category_labels": CATEGORY_LABELS,
            "all_categories": ALL_CATEGORIES,
        }
    )
    return templates.TemplateResponse(request, "expenses.html", context)


def _form_context(
    ctx: AppContext,
    settings: Settings,
    form: Dict[str, Any],
    errors: List[str],
    expense_id: Optional[int] = None,
) -> Dict[str, Any]:
    context = _base_context(ctx, settings)
    context.update(
        {
            "categories": CATEGORIES,
            "category_labels": CATEGORY_LABELS,
            "payment_methods": PAYMENT_METHODS,
            "errors": errors,
            "form": form,
            "expense_id": expense_id,
            "editing": expense_id is not None,
        }
    )
    return context


def _validate_form(form_state: Dict[str, Any]):
    """Build ``ExpenseIn`` from raw form strings; returns (model, errors)."""
    errors: List[str] = []
    amount_raw = (form_state.get("amount") or "").strip()
    if not amount_raw:
        errors.append("Amount is required")
    for field, label in (
        ("category", "Category"),
        ("date", "Date"),
        ("payment_method", "Payment method"),
    ):
        if not (form_state.get(field) or "").strip():
            errors.append(f"{label} is required")
    if errors:
        return None, errors
    try:
        expense_in = ExpenseIn(
            amount=amount_raw,
            category=form_state["category"],
            description=form_state.get("description") or None,
            date=form_state["date"],
            payment_method=form_state["payment_method"],
        )
    except ValidationError as ve:
        for err in ve.errors():
            loc = ".".join([str(p) for p in err.get("loc", [])])
            msg = err.get("msg", "invalid")
            errors.append(f"{loc}: {msg}")
        return None, errors
    return expense_in, errors


@router.get("/ui/expenses/new", response_class=HTMLResponse)
async def ui_expense_form(
    request: Request,
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    ctx.set_page("expenses")
    context = _form_context(ctx, settings, form={}, errors=[])
    return templates.TemplateResponse(request, "expense_form.html", context)


@router.post("/ui/expenses/new", response_class=HTMLResponse)
async def ui_expense_form_submit(
    request: Request,
    amount: str = Form(""),
    category: str = Form(""),
    payment_method: str = Form(""),
    date: str = Form(""),
    description: str = Form(""),
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    form_state = {
        "amount": amount,
        "category": category,
        "payment_method": payment_method,
        "date": date,
        "description": description,
    }
    expense_in, errors = _validate_form(form_state)
    if errors or expense_in is None:
        context = _form_context(ctx, settings, form=form_state, errors=errors)
        return templates.TemplateResponse(
            request,
            "expense_form.html",
            context,
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    _, note = await store.create(expense_in)
    ctx.notify(note)
    return _redirect("/ui/expenses")


@router.get("/ui/expenses/{expense_id}/edit", response_class=HTMLResponse)
async def ui_expense_edit_form(
    request: Request,
    expense_id: int,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    expense = store.get(expense_id)
    if expense is None:
        raise HTTPException(status_code=404, detail="expense not found")
    ctx.set_page("expenses")
    form = {
        "amount": format_amount(expense.amount),
        "category": expense.category,
        "payment_method": expense.payment_method,
        "date": expense.date.split("T", 1)[0],
        "description": expense.description or "",
    }
    context = _form_context(ctx, settings, form=form, errors=[], expense_id=expense_id)
    return templates.TemplateResponse(request, "expense_form.html", context)


@router.post("/ui/expenses/{expense_id}/edit", response_class=HTMLResponse)
async def ui_expense_edit_submit(
    request: Request,
    expense_id: int,
    amount: str = Form(""),
    category: str = Form(""),
    payment_method: str = Form(""),
    date: str = Form(""),
    description: str = Form(""),
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    if store.get(expense_id) is None:
        raise HTTPException(status_code=404, detail="expense not found")
    form_state = {
        "amount": amount,
        "category": category,
        "payment_method": payment_method,
        "date": date,
        "description": description,
    }
    expense_in, errors = _validate_form(form_state)
    if errors or expense_in is None:
        context = _form_context(
            ctx, settings, form=form_state, errors=errors, expense_id=expense_id
        )
        return templates.TemplateResponse(
            request,
            "expense_form.html",
            context,
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    _, note = await store.update(expense_id, expense_in)
    ctx.notify(note)
    return _redirect("/ui/expenses")


@router.post("/ui/expenses/{expense_id}/delete", response_class=RedirectResponse)
async def ui_expense_delete(
    expense_id: int,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    ctx.notify(await store.delete(expense_id))
    return _redirect("/ui/expenses")


@router.get("/ui/analytics", response_class=HTMLResponse)
async def ui_analytics(
    request: Request,
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
    settings: Settings = Depends(get_app_settings),
):
    ctx.set_page("analytics")
    expenses = store.expenses
    context = _base_context(ctx, settings)
    context.update(
        {
            "summary": compute_summary(expenses),
            "has_expenses": bool(expenses),
            "category_breakdown": compute_category_breakdown(expenses),
            "method_breakdown": compute_payment_method_breakdown(expenses),
            "monthly_breakdown": compute_monthly_breakdown(expenses),
        }
    )
    return templates.TemplateResponse(request, "analytics.html", context)


_PAGE_URLS = {
    "dashboard": "/ui",
    "expenses": "/ui/expenses",
    "analytics": "/ui/analytics",
}


@router.post("/ui/currency", response_class=RedirectResponse)
async def ui_currency_select(
    currency: str = Form(...),
    store: ExpenseStore = Depends(get_store),
    ctx: AppContext = Depends(get_app_context),
):
    target = _PAGE_URLS.get(ctx.current_page, "/ui")
    try:
        note = await select_display_currency(ctx, store, currency)
    except ValueError:
        ctx.notify(Notification("error", f"Unsupported currency '{currency}'"))
        return _redirect(target)
    ctx.notify(note)
    return _redirect(target)
