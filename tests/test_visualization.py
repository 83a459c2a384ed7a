from decimal import Decimal

import plotly.graph_objects as go

from finance_tracker.models import BudgetStatus, CategoryTotal, DashboardSummary, SpendingTrendPoint
from finance_tracker.visualization import (
    create_budget_chart,
    create_category_pie_chart,
    create_income_expense_chart,
    create_spending_trend_chart,
)


def test_empty_inputs_give_placeholder_figures():
    for fig in [
        create_category_pie_chart([]),
        create_spending_trend_chart([]),
        create_budget_chart([]),
        create_income_expense_chart(DashboardSummary(Decimal("0"), Decimal("0"), Decimal("0"))),
    ]:
        assert isinstance(fig, go.Figure)
        assert len(fig.data) == 0


def test_spending_trend_chart_plots_each_month():
    fig = create_spending_trend_chart([
        SpendingTrendPoint("2025-01", Decimal("50")),
        SpendingTrendPoint("2025-02", Decimal("12.25")),
    ])
    assert list(fig.data[0].x) == ["2025-01", "2025-02"]
    assert list(fig.data[0].y) == [50.0, 12.25]


def test_category_pie_chart():
    fig = create_category_pie_chart([CategoryTotal("Food", Decimal("50")), CategoryTotal("Rent", Decimal("25"))])
    assert list(fig.data[0].labels) == ["Food", "Rent"]


def test_budget_chart_has_budgeted_and_spent():
    fig = create_budget_chart([BudgetStatus("Food", Decimal("500"), Decimal("600"), 120, Decimal("-100"))])
    assert len(fig.data) == 2
