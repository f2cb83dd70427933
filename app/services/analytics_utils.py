from __future__ import annotations

import calendar
from dataclasses import dataclass
from datetime import date
from typing import Callable, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from app.models.constants import ALL_CATEGORIES
from app.models.expense import Expense
from app.services.money import round2

"""Aggregation helpers for the dashboard, expenses table and analytics views.

Scopes implemented:
    - Display amount / currency resolution
    - Category, payment method, month and day groupings
    - Summary metrics (total, this/last month, change, top category, average)
    - Table filtering, ordering and pagination

Design notes:
    Every function takes the working collection and re-derives its result;
    nothing is cached. All sums go through ``display_amount`` so converted and
    unconverted values are never mixed inside a single record.
"""

INVALID_DATE_LABEL = "Invalid Date"
NO_CATEGORY = "None"

T = TypeVar("T")


# ---------------- Display amount -----------------
def display_amount(expense: Expense) -> float:
    if expense.converted_amount is not None:
        return expense.converted_amount
    return expense.amount


def display_currency(expense: Expense, selected_currency: str) -> str:
    """Currency label for ``display_amount``.

    Unconverted records borrow the selected currency label even though the
    stored amount may be in another currency.
    """
    if expense.converted_amount is not None and expense.target_currency:
        return expense.target_currency
    return selected_currency


def parse_expense_date(value: str) -> Optional[date]:
    text = (value or "").strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    try:
        return date.fromisoformat(text)
    except ValueError:
        return None


def day_label(d: date) -> str:
    return f"{calendar.month_abbr[d.month]} {d.day}"


def month_label(d: date) -> str:
    return f"{calendar.month_name[d.month]} {d.year}"


# ---------------- Grouping -----------------
def group_totals(
    expenses: Iterable[Expense], key: Callable[[Expense], str]
) -> Dict[str, float]:
    """Sum display amounts per key, keeping first-seen key order."""
    totals: Dict[str, float] = {}
    for exp in expenses:
        k = key(exp)
        totals[k] = totals.get(k, 0.0) + display_amount(exp)
    return totals


def category_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
    return group_totals(expenses, lambda e: e.category)


def payment_method_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
    return group_totals(expenses, lambda e: e.payment_method)


def _month_key(expense: Expense) -> str:
    d = parse_expense_date(expense.date)
    return month_label(d) if d else INVALID_DATE_LABEL


def monthly_totals(expenses: Iterable[Expense]) -> Dict[str, float]:
    return group_totals(expenses, _month_key)


@dataclass(frozen=True)
class BreakdownItem:
    name: str
    total: float
    percent: float


def _breakdown(totals: Dict[str, float], ranked: bool) -> List[BreakdownItem]:
    grand = sum(totals.values())
    items = [
        BreakdownItem(
            name=name,
            total=round2(value),
            percent=round2(value / grand * 100) if grand > 0 else 0.0,
        )
        for name, value in totals.items()
    ]
    if ranked:
        # stable: equal totals keep first-seen order
        items.sort(key=lambda i: i.total, reverse=True)
    return items


def compute_category_breakdown(expenses: Sequence[Expense]) -> List[BreakdownItem]:
    return _breakdown(category_totals(expenses), ranked=True)


def compute_payment_method_breakdown(
    expenses: Sequence[Expense],
) -> List[BreakdownItem]:
    return _breakdown(payment_method_totals(expenses), ranked=True)


def compute_monthly_breakdown(expenses: Sequence[Expense]) -> List[BreakdownItem]:
    return _breakdown(monthly_totals(expenses), ranked=False)


# ---------------- Trend Data -----------------
@dataclass(frozen=True)
class TrendPoint:
    label: str
    amount: float


def _chronological_key(expense: Expense) -> Tuple[int, date]:
    d = parse_expense_date(expense.date)
    # unparseable dates sort after every real date
    return (0, d) if d else (1, date.max)


def compute_trend_data(expenses: Sequence[Expense]) -> List[TrendPoint]:
    """Daily totals in chronological order, labelled like "Feb 1".

    Days from different years share a label and therefore a bucket.
    """
    ordered = sorted(expenses, key=_chronological_key)

    def _key(e: Expense) -> str:
        d = parse_expense_date(e.date)
        return day_label(d) if d else INVALID_DATE_LABEL

    totals = group_totals(ordered, _key)
    return [TrendPoint(label=k, amount=round2(v)) for k, v in totals.items()]


# ---------------- Summary Metrics -----------------
def previous_month(year: int, month: int) -> Tuple[int, int]:
    if month == 1:
        return year - 1, 12
    return year, month - 1


def month_total(expenses: Iterable[Expense], year: int, month: int) -> float:
    total = 0.0
    for exp in expenses:
        d = parse_expense_date(exp.date)
        if d and d.year == year and d.month == month:
            total += display_amount(exp)
    return total


def percent_change(this_month: float, last_month: float) -> float:
    """Month-over-month change in percent; 0 when there is no prior spend."""
    if last_month == 0:
        return 0.0
    return (this_month - last_month) / last_month * 100


def top_category(totals: Dict[str, float]) -> Tuple[str, float]:
    """Category with the largest total; first-seen wins ties."""
    best: Optional[Tuple[str, float]] = None
    for name, value in totals.items():
        if best is None or value > best[1]:
            best = (name, value)
    return best if best is not None else (NO_CATEGORY, 0.0)


def average_expense(total: float, count: int) -> float:
    if count == 0:
        return 0.0
    return round2(total / count)


@dataclass(frozen=True)
class SummaryMetrics:
    total: float
    count: int
    this_month: float
    last_month: float
    percent_change: float
    top_category: str
    top_category_total: float
    category_count: int
    average_expense: float

    @property
    def trend_direction(self) -> str:
        return "Increased" if self.this_month > self.last_month else "Decreased"


def compute_summary(
    expenses: Sequence[Expense], as_of: date | None = None
) -> SummaryMetrics:
    as_of = as_of or date.today()
    total = sum(display_amount(e) for e in expenses)
    this_month = month_total(expenses, as_of.year, as_of.month)
    last_month = month_total(expenses, *previous_month(as_of.year, as_of.month))
    by_category = category_totals(expenses)
    top_name, top_value = top_category(by_category)
    return SummaryMetrics(
        total=round2(total),
        count=len(expenses),
        this_month=round2(this_month),
        last_month=round2(last_month),
        percent_change=round(percent_change(this_month, last_month), 1),
        top_category=top_name,
        top_category_total=round2(top_value),
        category_count=len(by_category),
        average_expense=average_expense(total, len(expenses)),
    )


# ---------------- Table: filter / sort / paginate -----------------
def matches_query(expense: Expense, query: str) -> bool:
    needle = query.lower()
    haystacks = (expense.description or "", expense.category, expense.payment_method)
    return any(needle in h.lower() for h in haystacks)


def filter_expenses(
    expenses: Iterable[Expense],
    query: str = "",
    category: str = ALL_CATEGORIES,
) -> List[Expense]:
    result = list(expenses)
    if category and category != ALL_CATEGORIES:
        result = [e for e in result if e.category == category]
    if query:
        result = [e for e in result if matches_query(e, query)]
    return result


SORT_KEYS = ("date", "amount", "created_at")


def sort_expenses(
    expenses: Iterable[Expense], key: str = "date", descending: bool = True
) -> List[Expense]:
    """Return a new ordering for display; the input is left as-is."""
    if key not in SORT_KEYS:
        raise ValueError(f"Unsupported sort key '{key}'. Allowed: {SORT_KEYS}")
    if key == "amount":
        return sorted(expenses, key=display_amount, reverse=descending)
    if key == "created_at":
        return sorted(expenses, key=lambda e: e.created_at or "", reverse=descending)

    # date first, created_at breaks ties within the same day
    def _date_key(e: Expense) -> Tuple[str, str]:
        d = parse_expense_date(e.date)
        return (d.isoformat() if d else "", e.created_at or "")

    return sorted(expenses, key=_date_key, reverse=descending)


@dataclass(frozen=True)
class Page(Generic[T]):
    items: List[T]
    page_index: int
    page_count: int
    page_size: int
    total: int

    @property
    def has_previous(self) -> bool:
        return self.page_index > 0

    @property
    def has_next(self) -> bool:
        return self.page_index < self.page_count - 1


def paginate(items: Sequence[T], page_index: int, page_size: int) -> Page[T]:
    if page_size < 1:
        raise ValueError("page_size must be at least 1")
    total = len(items)
    page_count = max(1, -(-total // page_size))
    index = min(max(page_index, 0), page_count - 1)
    start = index * page_size
    return Page(
        items=list(items[start : start + page_size]),
        page_index=index,
        page_count=page_count,
        page_size=page_size,
        total=total,
    )
