"""Presentation boundary: money formatting, tables and CSV export.

This is the only module that turns ``Decimal`` amounts into floats.
Everything upstream accumulates in exact decimal arithmetic.
"""

from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional, Sequence, Union

import pandas as pd

from .models import BudgetStatus, CategoryTotal, SpendingTrendPoint, Transaction

CENT = Decimal("0.01")

REPORT_CSV_COLUMNS = [
    "date", "type", "category", "description", "amount", "id", "created_at", "updated_at", "user_id",
]

Number = Union[Decimal, float, int]


def to_display(amount: Optional[Number]) -> float:
    """Convert an exact amount to a float rounded to cents.

    Example:
        >>> to_display(Decimal("10.005"))
        10.01
    """
    if amount is None:
        return 0.0
    return float(Decimal(str(amount)).quantize(CENT, rounding=ROUND_HALF_UP))


def format_currency(amount: Number, include_sign: bool = True) -> str:
    """Format a currency amount with proper formatting.

    Args:
        amount: The amount to format
        include_sign: Whether to include the dollar sign

    Returns:
        Formatted currency string (e.g., "$1,234.56" or "-$12.00")
    """
    value = to_display(amount)
    formatted = f"{abs(value):,.2f}"
    if include_sign:
        formatted = f"${formatted}"
    return f"-{formatted}" if value < 0 else formatted


def escape_dollar_for_markdown(amount: Number) -> str:
    """Format an amount for ``st.markdown`` without triggering LaTeX italics."""
    return format_currency(amount).replace("$", "\\$")


def progress_color(progress: int) -> str:
    """Bar color for a budget progress percentage."""
    if progress > 100:
        return "red"
    if progress >= 85:
        return "orange"
    if progress >= 50:
        return "green"
    return "blue"


def progress_width(progress: int) -> int:
    """Progress clamped to ``[0, 100]`` for a bar width."""
    return max(0, min(progress, 100))


def budget_status_frame(statuses: Sequence[BudgetStatus]) -> pd.DataFrame:
    columns = ["Category", "Budgeted", "Spent", "Remaining", "Progress", "Raw Progress"]
    if not statuses:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([
        {
            "Category": s.category,
            "Budgeted": to_display(s.budgeted),
            "Spent": to_display(s.spent),
            "Remaining": to_display(s.remaining),
            "Progress": s.progress,
            "Raw Progress": None if s.raw_progress is None else float(s.raw_progress),
        }
        for s in statuses
    ], columns=columns)


def trend_frame(points: Sequence[SpendingTrendPoint]) -> pd.DataFrame:
    columns = ["Month", "Total Expenses"]
    if not points:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(
        [{"Month": p.month_year, "Total Expenses": to_display(p.total_expenses)} for p in points],
        columns=columns,
    )


def category_frame(totals: Iterable[CategoryTotal]) -> pd.DataFrame:
    columns = ["Category", "Amount"]
    rows = [{"Category": t.name, "Amount": to_display(t.value)} for t in totals]
    return pd.DataFrame(rows, columns=columns)


def transactions_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Table of transactions for ``st.dataframe``."""
    columns = ["ID", "Date", "Type", "Category", "Description", "Amount"]
    rows = [
        {
            "ID": t.id,
            "Date": t.date,
            "Type": t.type.value.title(),
            "Category": t.category,
            "Description": t.description or "",
            "Amount": to_display(t.amount),
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=columns)


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


def report_frame(transactions: Sequence[Transaction]) -> pd.DataFrame:
    """Detailed report rows in export column order, amounts as floats."""
    rows = [
        {
            "date": _iso(t.date),
            "type": t.type.value,
            "category": t.category,
            "description": t.description or "",
            "amount": to_display(t.amount),
            "id": t.id,
            "created_at": _iso(t.created_at),
            "updated_at": _iso(t.updated_at),
            "user_id": t.user_id,
        }
        for t in transactions
    ]
    return pd.DataFrame(rows, columns=REPORT_CSV_COLUMNS)


def report_to_csv(transactions: Sequence[Transaction]) -> str:
    return report_frame(transactions).to_csv(index=False)


def report_filename(start_date: date, end_date: date) -> str:
    return f"finance_report_{start_date.isoformat()}_to_{end_date.isoformat()}.csv"
