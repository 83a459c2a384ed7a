"""Per-request finance operations.

``FinanceService`` is the seam between pages and the store.  Every method
takes the caller's user id explicitly, validates its input, fetches the
records it needs, runs the pure reductions from
:mod:`finance_tracker.aggregation`, and returns a :class:`Result`.
"""

from __future__ import annotations

from datetime import date
from typing import Any, List, Mapping, Optional, Sequence

import structlog

from . import aggregation
from .config import MAX_MONTH, MAX_YEAR, MIN_MONTH, MIN_YEAR, RECENT_TRANSACTION_LIMIT
from .db import StoreError, TransactionStore
from .forms import BudgetForm, TransactionForm, validate_form
from .models import TransactionFilter, TransactionType
from .results import Result

logger = structlog.get_logger(__name__)


class FinanceService:
    """Facade over the store and the aggregation functions."""

    def __init__(self, store: TransactionStore):
        self.store = store

    # ---- budgets -----------------------------------------------------------

    def budget_status_for_month(self, user_id: Optional[int], month: int, year: int) -> Result:
        """Budget status per category for one month.

        Invalid month/year is reported as ``INVALID_INPUT`` with an empty
        list, never as a plain empty result.
        """
        if not user_id:
            return Result.unauthorized(data=[])
        if not (MIN_MONTH <= month <= MAX_MONTH) or not (MIN_YEAR <= year <= MAX_YEAR):
            logger.warning("budget_status_invalid_period", user_id=user_id, month=month, year=year)
            return Result.invalid(f"Invalid month/year requested: {month}/{year}", data=[])

        start, end = aggregation.month_bounds(month, year)
        try:
            budgets = self.store.list_budgets(user_id, month, year)
            expenses = self.store.list_transactions(
                user_id,
                TransactionFilter.build(type=TransactionType.EXPENSE, start_date=start, end_date=end),
            )
        except StoreError as e:
            logger.error("budget_status_failed", user_id=user_id, month=month, year=year, error=str(e))
            return Result.store_error(f"Error fetching budget status ({month}/{year}).")

        return Result.ok(aggregation.budget_status(budgets, expenses))

    def upsert_budget(self, user_id: Optional[int], form_data: Mapping[str, Any]) -> Result:
        if not user_id:
            return Result.unauthorized()
        form, errors = validate_form(BudgetForm, form_data)
        if form is None:
            logger.info("budget_validation_failed", user_id=user_id, errors=errors)
            return Result.invalid("Validation failed.", errors)
        try:
            budget = self.store.upsert_budget(user_id, form.category, form.month, form.year, form.amount)
        except StoreError as e:
            logger.error("budget_upsert_failed", user_id=user_id, error=str(e))
            return Result.store_error("Database Error: Failed to save budget.")
        logger.info("budget_saved", user_id=user_id, category=form.category, month=form.month, year=form.year)
        return Result.ok(budget, f"Budget for {form.category} ({form.month}/{form.year}) saved.")

    # ---- reports -----------------------------------------------------------

    def _range_filter(
        self,
        start_date: Optional[date],
        end_date: Optional[date],
        categories: Optional[Sequence[str]],
        txn_type: Optional[TransactionType] = None,
    ) -> Optional[TransactionFilter]:
        if start_date is None or end_date is None:
            return None
        txn_filter = TransactionFilter.build(
            type=txn_type, start_date=start_date, end_date=end_date, categories=categories
        )
        return txn_filter if txn_filter.has_valid_range else None

    def spending_trend(
        self,
        user_id: Optional[int],
        start_date: Optional[date],
        end_date: Optional[date],
        categories: Optional[Sequence[str]] = None,
    ) -> Result:
        if not user_id:
            return Result.unauthorized(data=[])
        txn_filter = self._range_filter(start_date, end_date, categories, TransactionType.EXPENSE)
        if txn_filter is None:
            logger.warning("spending_trend_invalid_range", user_id=user_id, start=str(start_date), end=str(end_date))
            return Result.invalid("Invalid date range for spending trend.", data=[])
        try:
            expenses = self.store.list_transactions(user_id, txn_filter)
        except StoreError as e:
            logger.error("spending_trend_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching spending trend.")
        return Result.ok(aggregation.spending_trend(expenses))

    def detailed_report(
        self,
        user_id: Optional[int],
        start_date: Optional[date],
        end_date: Optional[date],
        categories: Optional[Sequence[str]] = None,
    ) -> Result:
        if not user_id:
            return Result.unauthorized(data=[])
        txn_filter = self._range_filter(start_date, end_date, categories)
        if txn_filter is None:
            logger.warning("detailed_report_invalid_range", user_id=user_id, start=str(start_date), end=str(end_date))
            return Result.invalid("Invalid date range for detailed report.", data=[])
        try:
            transactions = self.store.list_transactions(user_id, txn_filter)
        except StoreError as e:
            logger.error("detailed_report_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching detailed transactions.")
        return Result.ok(aggregation.detailed_report(transactions, txn_filter))

    def user_categories(self, user_id: Optional[int]) -> Result:
        if not user_id:
            return Result.unauthorized(data=[])
        try:
            return Result.ok(self.store.list_categories(user_id))
        except StoreError as e:
            logger.error("user_categories_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching categories.")

    # ---- dashboard ---------------------------------------------------------

    def dashboard_summary(
        self,
        user_id: Optional[int],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Result:
        if not user_id:
            return Result.unauthorized()
        txn_filter = TransactionFilter.build(start_date=start_date, end_date=end_date)
        if not txn_filter.has_valid_range:
            return Result.invalid("Invalid date range for dashboard summary.")
        try:
            transactions = self.store.list_transactions(user_id, txn_filter)
        except StoreError as e:
            logger.error("dashboard_summary_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching dashboard summary.")
        return Result.ok(aggregation.dashboard_summary(transactions))

    def quick_summary(self, user_id: Optional[int], today: Optional[date] = None) -> Result:
        """Net balance of the calendar month containing ``today``."""
        if not user_id:
            return Result.unauthorized()
        today = today or date.today()
        start, end = aggregation.month_bounds(today.month, today.year)
        try:
            transactions = self.store.list_transactions(
                user_id, TransactionFilter.build(start_date=start, end_date=end)
            )
        except StoreError as e:
            logger.error("quick_summary_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching quick summary.")
        return Result.ok(aggregation.quick_summary(transactions))

    def recent_transactions(self, user_id: Optional[int], limit: int = RECENT_TRANSACTION_LIMIT) -> Result:
        if not user_id:
            return Result.unauthorized(data=[])
        try:
            transactions = self.store.list_transactions(user_id)
        except StoreError as e:
            logger.error("recent_transactions_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching recent transactions.")
        return Result.ok(aggregation.recent_transactions(transactions, limit))

    # ---- transactions ------------------------------------------------------

    def list_transactions(self, user_id: Optional[int]) -> Result:
        """All of a user's transactions, newest first."""
        if not user_id:
            return Result.unauthorized(data=[])
        try:
            transactions = self.store.list_transactions(user_id)
        except StoreError as e:
            logger.error("list_transactions_failed", user_id=user_id, error=str(e))
            return Result.store_error("Error fetching transactions.")
        return Result.ok(aggregation.detailed_report(transactions))

    def get_transaction(self, user_id: Optional[int], transaction_id: int) -> Result:
        if not user_id:
            return Result.unauthorized()
        try:
            txn = self.store.get_transaction(user_id, transaction_id)
        except StoreError as e:
            logger.error("get_transaction_failed", user_id=user_id, transaction_id=transaction_id, error=str(e))
            return Result.store_error("Error fetching transaction.")
        if txn is None:
            return Result.not_found("Error: Transaction not found or access denied.")
        return Result.ok(txn)

    def create_transaction(self, user_id: Optional[int], form_data: Mapping[str, Any]) -> Result:
        if not user_id:
            return Result.unauthorized()
        form, errors = validate_form(TransactionForm, form_data)
        if form is None:
            logger.info("transaction_validation_failed", user_id=user_id, errors=errors)
            return Result.invalid("Validation failed. Please check the form.", errors)
        try:
            txn = self.store.create_transaction(
                user_id, form.type, form.amount, form.date, form.category, form.description
            )
        except StoreError as e:
            logger.error("create_transaction_failed", user_id=user_id, error=str(e))
            return Result.store_error("Database Error: Failed to create transaction.")
        logger.info("transaction_created", user_id=user_id, transaction_id=txn.id)
        return Result.ok(txn, "Transaction created successfully!")

    def update_transaction(self, user_id: Optional[int], transaction_id: int, form_data: Mapping[str, Any]) -> Result:
        if not user_id:
            return Result.unauthorized()
        existing = self.get_transaction(user_id, transaction_id)
        if not existing.is_ok:
            return existing
        form, errors = validate_form(TransactionForm, form_data)
        if form is None:
            logger.info("transaction_validation_failed", user_id=user_id, errors=errors)
            return Result.invalid("Validation failed. Please check the form.", errors)
        try:
            updated = self.store.update_transaction(
                user_id, transaction_id, form.type, form.amount, form.date, form.category, form.description
            )
        except StoreError as e:
            logger.error("update_transaction_failed", user_id=user_id, transaction_id=transaction_id, error=str(e))
            return Result.store_error("Database Error: Failed to update transaction.")
        if not updated:
            return Result.not_found("Error: Transaction not found or access denied.")
        return Result.ok(transaction_id, "Transaction updated successfully!")

    def delete_transaction(self, user_id: Optional[int], transaction_id: Optional[int]) -> Result:
        if not user_id:
            return Result.unauthorized()
        if not transaction_id:
            return Result.invalid("Error: Missing transaction ID.")
        try:
            deleted = self.store.delete_transaction(user_id, transaction_id)
        except StoreError as e:
            logger.error("delete_transaction_failed", user_id=user_id, transaction_id=transaction_id, error=str(e))
            return Result.store_error("Database Error: Failed to delete transaction.")
        if not deleted:
            return Result.not_found("Error: Transaction not found or access denied.")
        logger.info("transaction_deleted", user_id=user_id, transaction_id=transaction_id)
        return Result.ok(transaction_id, "Transaction deleted successfully.")
