"""Budget status, spending trend and dashboard reductions.

Every function here is a pure reduction over records that were already
fetched from the store.  Accumulation is done in exact ``Decimal``
arithmetic; nothing in this module converts to floats.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import structlog

from .config import PROGRESS_CAP
from .models import (
    Budget,
    BudgetStatus,
    BudgetTotals,
    CategoryTotal,
    DashboardSummary,
    SpendingTrendPoint,
    Transaction,
    TransactionFilter,
    TransactionType,
    category_sort_key,
)

logger = structlog.get_logger(__name__)

ZERO = Decimal("0")
HUNDRED = Decimal("100")
_RAW_PROGRESS_QUANTUM = Decimal("0.01")


def month_bounds(month: int, year: int) -> Tuple[date, date]:
    """Return the first and last calendar day of a month (inclusive).

    Example:
        >>> month_bounds(2, 2024)
        (datetime.date(2024, 2, 1), datetime.date(2024, 2, 29))
    """
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def month_key(value: date) -> str:
    """Bucket key for a date, e.g. ``"2025-01"``."""
    return f"{value.year:04d}-{value.month:02d}"


def progress_for(spent: Decimal, budgeted: Decimal) -> int:
    """Percentage of ``budgeted`` consumed by ``spent``, capped for display.

    Unbudgeted spending is shown at the cap; an unbudgeted, unspent
    category is at zero.
    """
    if budgeted > 0:
        percent = (spent / budgeted * HUNDRED).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        return min(int(percent), PROGRESS_CAP)
    return PROGRESS_CAP if spent > 0 else 0


def raw_progress_for(spent: Decimal, budgeted: Decimal) -> Optional[Decimal]:
    if budgeted <= 0:
        return None
    return (spent / budgeted * HUNDRED).quantize(_RAW_PROGRESS_QUANTUM, rounding=ROUND_HALF_UP)


def sum_by_category(transactions: Iterable[Transaction]) -> Dict[str, Decimal]:
    totals: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in transactions:
        totals[txn.category] += txn.amount
    return dict(totals)


def budget_status(budgets: Sequence[Budget], expenses: Iterable[Transaction]) -> List[BudgetStatus]:
    """Merge one month's budgets with that month's expense transactions.

    Args:
        budgets: Budget records for a single (user, month, year).
        expenses: EXPENSE transactions of the same user dated within the month.

    Returns:
        One ``BudgetStatus`` per category that has a budget or any spending,
        sorted by category name in locale order.
    """
    spent_by_category = sum_by_category(expenses)

    statuses: Dict[str, BudgetStatus] = {
        b.category: BudgetStatus(
            category=b.category,
            budgeted=b.amount,
            spent=ZERO,
            progress=0,
            remaining=b.amount,
            raw_progress=raw_progress_for(ZERO, b.amount),
        )
        for b in budgets
    }

    for category, spent in spent_by_category.items():
        seeded = statuses.get(category)
        if seeded is not None:
            budgeted = seeded.budgeted
            statuses[category] = BudgetStatus(
                category=category,
                budgeted=budgeted,
                spent=spent,
                progress=progress_for(spent, budgeted),
                remaining=budgeted - spent,
                raw_progress=raw_progress_for(spent, budgeted),
            )
        else:
            statuses[category] = BudgetStatus(
                category=category,
                budgeted=ZERO,
                spent=spent,
                progress=PROGRESS_CAP,
                remaining=-spent,
                raw_progress=None,
            )

    return sorted(statuses.values(), key=lambda s: category_sort_key(s.category))


def budget_totals(statuses: Iterable[BudgetStatus]) -> BudgetTotals:
    total_budgeted = ZERO
    total_spent = ZERO
    for status in statuses:
        total_budgeted += status.budgeted
        total_spent += status.spent
    return BudgetTotals(
        total_budgeted=total_budgeted,
        total_spent=total_spent,
        overall_remaining=total_budgeted - total_spent,
    )


def spending_trend(expenses: Iterable[Transaction]) -> List[SpendingTrendPoint]:
    """Bucket expenses by calendar month and total each bucket.

    Transactions without a usable date are skipped rather than guessed.
    Keys are ``YYYY-MM`` so a lexicographic sort is chronological.
    """
    monthly: Dict[str, Decimal] = defaultdict(lambda: ZERO)
    for txn in expenses:
        if not isinstance(txn.date, date):
            logger.warning("trend_skipped_invalid_date", transaction_id=txn.id, value=repr(txn.date))
            continue
        monthly[month_key(txn.date)] += txn.amount

    return [
        SpendingTrendPoint(month_year=key, total_expenses=monthly[key])
        for key in sorted(monthly)
    ]


def dashboard_summary(transactions: Iterable[Transaction]) -> DashboardSummary:
    """Reduce transactions to income, expense and per-category totals in one pass."""
    total_income = ZERO
    total_expenses = ZERO
    category_totals: Dict[str, Decimal] = {}

    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            total_income += txn.amount
        else:
            total_expenses += txn.amount
            category_totals[txn.category] = category_totals.get(txn.category, ZERO) + txn.amount

    return DashboardSummary(
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=total_income - total_expenses,
        expenses_by_category=[
            CategoryTotal(name=name, value=value) for name, value in category_totals.items()
        ],
    )


def quick_summary(transactions: Iterable[Transaction]) -> Decimal:
    """Net balance (income minus expenses) of the given transactions."""
    return dashboard_summary(transactions).net_balance


def _date_sort_key(txn: Transaction) -> Tuple[date, int]:
    return (txn.date or date.min, txn.id)


def detailed_report(
    transactions: Iterable[Transaction],
    txn_filter: Optional[TransactionFilter] = None,
) -> List[Transaction]:
    """Every matching transaction of either type, newest first."""
    rows = [t for t in transactions if txn_filter is None or txn_filter.matches(t)]
    return sorted(rows, key=_date_sort_key, reverse=True)


def recent_transactions(transactions: Iterable[Transaction], limit: int) -> List[Transaction]:
    return detailed_report(transactions)[:max(limit, 0)]
