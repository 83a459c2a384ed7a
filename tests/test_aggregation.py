from datetime import date
from decimal import Decimal

from finance_tracker import aggregation as agg
from finance_tracker.models import Budget, Transaction, TransactionFilter, TransactionType


def _txn(id, amount, on, category="Food", type=TransactionType.EXPENSE, user_id=1):
    return Transaction(
        id=id,
        user_id=user_id,
        type=type,
        amount=Decimal(str(amount)),
        date=on,
        category=category,
    )


def _budget(category, amount, month=1, year=2025):
    return Budget(id=0, user_id=1, category=category, month=month, year=year, amount=Decimal(str(amount)))


def _by_category(statuses):
    return {s.category: s for s in statuses}


def test_budget_without_spending_is_untouched():
    status = _by_category(agg.budget_status([_budget("Rent", 500)], []))["Rent"]
    assert status.spent == 0
    assert status.progress == 0
    assert status.remaining == Decimal("500")


def test_overspent_budget_reports_progress_and_negative_remaining():
    statuses = agg.budget_status(
        [_budget("Food", 500)],
        [_txn(1, 400, date(2025, 1, 3)), _txn(2, 200, date(2025, 1, 9))],
    )
    status = _by_category(statuses)["Food"]
    assert status.spent == Decimal("600")
    assert status.progress == 120
    assert status.remaining == Decimal("-100")
    assert status.raw_progress == Decimal("120.00")


def test_unbudgeted_spending_is_flagged_at_cap():
    status = _by_category(agg.budget_status([], [_txn(1, 50, date(2025, 1, 5), "Games")]))["Games"]
    assert status.budgeted == 0
    assert status.spent == Decimal("50")
    assert status.progress == 150
    assert status.remaining == Decimal("-50")
    assert status.raw_progress is None


def test_progress_is_capped_but_raw_progress_is_kept():
    status = agg.budget_status([_budget("Food", 100)], [_txn(1, 1000, date(2025, 1, 5))])[0]
    assert status.progress == 150
    assert status.raw_progress == Decimal("1000.00")
    assert status.remaining == Decimal("-900")


def test_progress_rounds_half_up():
    assert agg.progress_for(Decimal("1"), Decimal("8")) == 13  # 12.5%
    assert agg.progress_for(Decimal("5"), Decimal("200")) == 3  # 2.5%


def test_progress_is_monotonic_in_spent():
    budgeted = Decimal("300")
    values = [agg.progress_for(Decimal(spent), budgeted) for spent in range(0, 1000, 7)]
    assert values == sorted(values)
    assert max(values) == 150


def test_zero_budget_progress():
    assert agg.progress_for(Decimal("0"), Decimal("0")) == 0
    assert agg.progress_for(Decimal("1"), Decimal("0")) == 150


def test_budget_status_sorted_by_category_in_locale_order():
    statuses = agg.budget_status(
        [_budget("b", 10), _budget("a", 10)],
        [_txn(1, 5, date(2025, 1, 1), "B")],
    )
    assert [s.category for s in statuses] == ["a", "b", "B"]

    statuses = agg.budget_status([_budget("groceries", 1), _budget("Rent", 1), _budget("auto", 1)], [])
    assert [s.category for s in statuses] == ["auto", "groceries", "Rent"]


def test_remaining_is_exact_decimal():
    statuses = agg.budget_status(
        [_budget("Food", "1.00")],
        [_txn(1, "0.1", date(2025, 1, 1)), _txn(2, "0.2", date(2025, 1, 2))],
    )
    assert statuses[0].spent == Decimal("0.3")
    assert statuses[0].remaining == Decimal("0.70")


def test_budget_totals():
    statuses = agg.budget_status(
        [_budget("Food", 200), _budget("Rent", 1000)],
        [_txn(1, 250, date(2025, 1, 1)), _txn(2, 30, date(2025, 1, 2), "Fun")],
    )
    totals = agg.budget_totals(statuses)
    assert totals.total_budgeted == Decimal("1200")
    assert totals.total_spent == Decimal("280")
    assert totals.overall_remaining == Decimal("920")


def test_month_bounds():
    assert agg.month_bounds(2, 2024) == (date(2024, 2, 1), date(2024, 2, 29))
    assert agg.month_bounds(12, 2025) == (date(2025, 12, 1), date(2025, 12, 31))


def test_spending_trend_single_month():
    points = agg.spending_trend([
        _txn(1, 30, date(2025, 1, 15)),
        _txn(2, 20, date(2025, 1, 20)),
    ])
    assert len(points) == 1
    assert points[0].month_year == "2025-01"
    assert points[0].total_expenses == Decimal("50")


def test_spending_trend_is_chronological_and_skips_missing_dates():
    points = agg.spending_trend([
        _txn(1, 10, date(2025, 3, 1)),
        _txn(2, 5, None),
        _txn(3, 7, date(2024, 12, 31)),
        _txn(4, 3, date(2025, 3, 30)),
    ])
    assert [(p.month_year, p.total_expenses) for p in points] == [
        ("2024-12", Decimal("7")),
        ("2025-03", Decimal("13")),
    ]


def test_spending_trend_empty():
    assert agg.spending_trend([]) == []


def test_dashboard_summary_example():
    summary = agg.dashboard_summary([
        _txn(1, 100, date(2025, 1, 1), "Salary", TransactionType.INCOME),
        _txn(2, 40, date(2025, 1, 2), "Food"),
        _txn(3, 10, date(2025, 1, 3), "Food"),
    ])
    assert summary.total_income == Decimal("100")
    assert summary.total_expenses == Decimal("50")
    assert summary.net_balance == Decimal("50")
    assert [(c.name, c.value) for c in summary.expenses_by_category] == [("Food", Decimal("50"))]


def test_dashboard_summary_ignores_income_in_categories():
    summary = agg.dashboard_summary([
        _txn(1, 100, date(2025, 1, 1), "Salary", TransactionType.INCOME),
    ])
    assert summary.expenses_by_category == []
    assert summary.net_balance == Decimal("100")


def test_quick_summary_is_net_balance():
    net = agg.quick_summary([
        _txn(1, 20, date(2025, 1, 1), "Gift", TransactionType.INCOME),
        _txn(2, 45, date(2025, 1, 2)),
    ])
    assert net == Decimal("-25")


def test_detailed_report_filters_and_orders_newest_first():
    rows = [
        _txn(1, 10, date(2025, 1, 1), "Food"),
        _txn(2, 99, date(2025, 2, 1), "Salary", TransactionType.INCOME),
        _txn(3, 12, date(2025, 1, 31), "Rent"),
        _txn(4, 5, date(2025, 3, 1), "Food"),
    ]
    txn_filter = TransactionFilter.build(start_date=date(2025, 1, 1), end_date=date(2025, 2, 1))
    report = agg.detailed_report(rows, txn_filter)
    assert [t.id for t in report] == [2, 3, 1]

    only_food = TransactionFilter.build(start_date=date(2025, 1, 1), end_date=date(2025, 12, 31), categories=["Food"])
    assert [t.id for t in agg.detailed_report(rows, only_food)] == [4, 1]


def test_empty_category_list_means_no_filter():
    txn_filter = TransactionFilter.build(categories=[])
    assert txn_filter.categories is None
    assert txn_filter.matches(_txn(1, 1, date(2025, 1, 1), "Anything"))


def test_recent_transactions_limit():
    rows = [_txn(i, i, date(2025, 1, i)) for i in range(1, 9)]
    assert [t.id for t in agg.recent_transactions(rows, 5)] == [8, 7, 6, 5, 4]


def test_aggregations_are_idempotent():
    rows = [
        _txn(1, 30, date(2025, 1, 15)),
        _txn(2, 70, date(2025, 2, 1), "Rent"),
        _txn(3, 500, date(2025, 1, 1), "Salary", TransactionType.INCOME),
    ]
    budgets = [_budget("Food", 100)]
    assert agg.budget_status(budgets, rows) == agg.budget_status(budgets, rows)
    assert agg.spending_trend(rows) == agg.spending_trend(rows)
    assert agg.dashboard_summary(rows) == agg.dashboard_summary(rows)
