"""Domain records for transactions, budgets and the views derived from them.

Stored records (``Transaction``, ``Budget``, ``User``) are frozen
dataclasses produced by :mod:`finance_tracker.db`.  Derived records
(``BudgetStatus``, ``SpendingTrendPoint``, ``DashboardSummary``) are
computed fresh by :mod:`finance_tracker.aggregation` and never persisted.

All money values are :class:`decimal.Decimal`.  Conversion to floats for
display happens in :mod:`finance_tracker.display` only.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional, Sequence, Tuple


class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "INCOME"
    EXPENSE = "EXPENSE"


def category_sort_key(name: str) -> Tuple[str, str]:
    """Locale-style ordering for category names.

    Letters compare case-insensitively first; names differing only by
    case put the lowercase form first ("auto" < "groceries" < "Rent",
    "a" < "A").
    """
    return name.casefold(), name.swapcase()


@dataclass(frozen=True)
class User:
    id: int
    name: str
    email: str
    password_hash: str
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Transaction:
    id: int
    user_id: int
    type: TransactionType
    amount: Decimal
    date: Optional[date]  # None when the stored value could not be parsed
    category: str
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def is_expense(self) -> bool:
        return self.type == TransactionType.EXPENSE


@dataclass(frozen=True)
class Budget:
    id: int
    user_id: int
    category: str
    month: int
    year: int
    amount: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    """Budgeted vs. spent for one category in one month.

    ``progress`` is the display percentage, capped at
    :data:`finance_tracker.config.PROGRESS_CAP`.  ``raw_progress`` keeps the
    uncapped percentage (``None`` when nothing was budgeted) so consumers
    can still see how far over budget a category went.
    """
    category: str
    budgeted: Decimal
    spent: Decimal
    progress: int
    remaining: Decimal
    raw_progress: Optional[Decimal] = None


@dataclass(frozen=True)
class SpendingTrendPoint:
    month_year: str  # "YYYY-MM"
    total_expenses: Decimal


@dataclass(frozen=True)
class CategoryTotal:
    name: str
    value: Decimal


@dataclass(frozen=True)
class DashboardSummary:
    total_income: Decimal
    total_expenses: Decimal
    net_balance: Decimal
    expenses_by_category: List[CategoryTotal] = field(default_factory=list)


@dataclass(frozen=True)
class BudgetTotals:
    total_budgeted: Decimal
    total_spent: Decimal
    overall_remaining: Decimal


@dataclass(frozen=True)
class TransactionFilter:
    """Predicate shared by the store query and in-memory report filtering.

    Date bounds are inclusive.  An empty or absent ``categories`` sequence
    means every category matches.
    """
    type: Optional[TransactionType] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    categories: Optional[Tuple[str, ...]] = None

    @classmethod
    def build(
        cls,
        type: Optional[TransactionType] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        categories: Optional[Sequence[str]] = None,
    ) -> "TransactionFilter":
        cats = tuple(categories) if categories else None
        return cls(type=type, start_date=start_date, end_date=end_date, categories=cats)

    @property
    def has_valid_range(self) -> bool:
        if self.start_date is None or self.end_date is None:
            return True
        return self.start_date <= self.end_date

    def matches(self, txn: Transaction) -> bool:
        if self.type is not None and txn.type != self.type:
            return False
        if self.start_date is not None or self.end_date is not None:
            if txn.date is None:
                return False
            if self.start_date is not None and txn.date < self.start_date:
                return False
            if self.end_date is not None and txn.date > self.end_date:
                return False
        if self.categories and txn.category not in self.categories:
            return False
        return True
