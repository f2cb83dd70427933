from __future__ import annotations

from datetime import date as date_cls
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import CATEGORIES, PAYMENT_METHODS


def normalize_date_string(value: Any) -> str:
    """Return the ISO calendar date part of ``value``.

    Accepts ``date`` objects and strings such as ``2026-02-06`` or
    ``2026-02-06T00:00:00``.
    """
    if isinstance(value, date_cls):
        return value.isoformat()
    text = str(value).strip()
    if "T" in text:
        text = text.split("T", 1)[0]
    return date_cls.fromisoformat(text).isoformat()


class ExpenseIn(BaseModel):
    """Client-authored expense fields (create form / full update).

    Amount positivity is not enforced, only presence and finiteness.
    """

    amount: float = Field(allow_inf_nan=False)
    category: str
    description: Optional[str] = None
    date: str
    payment_method: str

    @field_validator("category")
    @classmethod
    def valid_category(cls, v: str) -> str:
        v = v.strip()
        if v not in CATEGORIES:
            raise ValueError("unsupported category")
        return v

    @field_validator("payment_method")
    @classmethod
    def valid_payment_method(cls, v: str) -> str:
        v = v.strip()
        if v not in PAYMENT_METHODS:
            raise ValueError("unsupported payment method")
        return v

    @field_validator("date", mode="before")
    @classmethod
    def valid_date(cls, v: Any) -> str:
        if v is None or (isinstance(v, str) and not v.strip()):
            raise ValueError("date is required")
        try:
            return normalize_date_string(v)
        except ValueError:
            raise ValueError("date must be YYYY-MM-DD")

    @field_validator("description")
    @classmethod
    def blank_description_is_null(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump()


class Expense(BaseModel):
    """Expense record as exchanged with the remote service.

    ``converted_amount``/``target_currency`` travel together; when set they
    are the display value for the record.
    """

    model_config = ConfigDict(extra="ignore")

    id: Optional[int] = None
    amount: float = Field(allow_inf_nan=False)
    category: str
    description: Optional[str] = None
    date: str
    payment_method: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None
    original_amount: Optional[float] = None
    original_currency: Optional[str] = None
    converted_amount: Optional[float] = Field(default=None, allow_inf_nan=False)
    target_currency: Optional[str] = None

    @model_validator(mode="after")
    def converted_pair(self) -> "Expense":
        if self.converted_amount is not None and not self.target_currency:
            raise ValueError("converted_amount requires target_currency")
        return self

    @property
    def is_converted(self) -> bool:
        return self.converted_amount is not None

