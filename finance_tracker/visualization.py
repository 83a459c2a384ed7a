"""Plotly visualisation helpers for the Finance Tracker.

Each function accepts a derived record (or a list of them) produced by
:mod:`finance_tracker.aggregation` and returns a
``plotly.graph_objects.Figure`` that Streamlit renders via
``st.plotly_chart``.  Amounts are converted through
:func:`finance_tracker.display.to_display` before plotting.
"""

from __future__ import annotations

from typing import Sequence

import plotly.express as px
import plotly.graph_objects as go

from .display import budget_status_frame, category_frame, to_display, trend_frame
from .models import BudgetStatus, CategoryTotal, DashboardSummary, SpendingTrendPoint


def _empty_figure(title: str = "No data to display") -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title=title)
    return fig


def create_category_pie_chart(totals: Sequence[CategoryTotal], title: str | None = None) -> go.Figure:
    """Pie chart of expenses by category.

    Parameters
    ----------
    totals : sequence of CategoryTotal
        Per-category expense totals.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Pie chart, or an empty figure when there is nothing to show.
    """
    df = category_frame(totals)
    if df.empty or df["Amount"].sum() <= 0:
        return _empty_figure()
    fig = px.pie(df, names="Category", values="Amount", hole=0.3)
    fig.update_layout(title=title or "Expenses by category")
    return fig


def create_income_expense_chart(summary: DashboardSummary, title: str | None = None) -> go.Figure:
    """Bar chart comparing total income and total expenses."""
    income = to_display(summary.total_income)
    expenses = to_display(summary.total_expenses)
    if income == 0 and expenses == 0:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(
        x=["Income", "Expenses"],
        y=[income, expenses],
        marker_color=["#2ca02c", "#d62728"],
    ))
    fig.update_layout(title=title or "Income vs. expenses", yaxis_title="Amount ($)", showlegend=False)
    return fig


def create_spending_trend_chart(points: Sequence[SpendingTrendPoint], title: str | None = None) -> go.Figure:
    """Line chart of monthly expense totals."""
    df = trend_frame(points)
    if df.empty:
        return _empty_figure()
    fig = px.line(df, x="Month", y="Total Expenses", markers=True)
    fig.update_layout(
        title=title or "Spending trend",
        xaxis_title="Month",
        yaxis_title="Total Expenses ($)",
    )
    fig.update_xaxes(type="category")
    return fig


def create_budget_chart(statuses: Sequence[BudgetStatus], title: str | None = None) -> go.Figure:
    """Grouped bars of budgeted vs. spent per category."""
    df = budget_status_frame(statuses)
    if df.empty:
        return _empty_figure()
    fig = go.Figure()
    fig.add_trace(go.Bar(name="Budgeted", x=df["Category"], y=df["Budgeted"], marker_color="#1f77b4"))
    fig.add_trace(go.Bar(name="Spent", x=df["Category"], y=df["Spent"], marker_color="#ff7f0e"))
    fig.update_layout(title=title or "Budget vs. spent", barmode="group", xaxis_tickangle=-30)
    return fig
