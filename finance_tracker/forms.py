"""Form schemas for transactions, budgets and accounts.

Raw form input (strings from Streamlit widgets or dicts in tests) is
validated and coerced with Pydantic before anything reaches the store.
"""

from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .config import MAX_MONTH, MAX_YEAR, MIN_MONTH, MIN_PASSWORD_LENGTH, MIN_YEAR
from .models import TransactionType

FormT = TypeVar("FormT", bound=BaseModel)

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class TransactionForm(BaseModel):
    """Create/edit transaction input."""
    model_config = ConfigDict(str_strip_whitespace=True)

    amount: Decimal = Field(..., gt=0, description="Amount must be positive")
    type: TransactionType
    date: dt.date
    category: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BudgetForm(BaseModel):
    """Monthly budget for one category."""
    model_config = ConfigDict(str_strip_whitespace=True)

    category: str = Field(..., min_length=1, max_length=100)
    amount: Decimal = Field(..., gt=0)
    month: int = Field(..., ge=MIN_MONTH, le=MAX_MONTH)
    year: int = Field(..., ge=MIN_YEAR, le=MAX_YEAR)


class SignupForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=150)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=254)
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()

    @field_validator("password")
    @classmethod
    def password_long_enough(cls, v: str) -> str:
        if len(v) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")
        return v


class LoginForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def normalize_email(cls, v: str) -> str:
        return v.lower()


def flatten_errors(exc: ValidationError) -> Dict[str, List[str]]:
    """Group validation messages by top-level field name."""
    errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ("__root__",)
        errors.setdefault(str(loc[0]), []).append(err.get("msg", "Invalid value"))
    return errors


def validate_form(
    model: Type[FormT],
    data: Mapping[str, Any],
) -> Tuple[Optional[FormT], Dict[str, List[str]]]:
    """Validate raw form data against ``model``.

    Returns:
        ``(instance, {})`` on success, ``(None, errors)`` otherwise.
    """
    try:
        return model.model_validate(dict(data)), {}
    except ValidationError as exc:
        return None, flatten_errors(exc)
