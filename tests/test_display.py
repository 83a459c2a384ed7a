import io
from datetime import date, datetime
from decimal import Decimal

import pandas as pd

from finance_tracker import display
from finance_tracker.models import BudgetStatus, SpendingTrendPoint, Transaction, TransactionType


def test_format_currency():
    assert display.format_currency(Decimal("1234.5")) == "$1,234.50"
    assert display.format_currency(Decimal("-12")) == "-$12.00"
    assert display.format_currency(Decimal("0.005")) == "$0.01"
    assert display.format_currency(Decimal("7"), include_sign=False) == "7.00"


def test_escape_dollar_for_markdown():
    assert display.escape_dollar_for_markdown(Decimal("5")) == "\\$5.00"


def test_progress_color_thresholds():
    assert display.progress_color(150) == "red"
    assert display.progress_color(101) == "red"
    assert display.progress_color(100) == "orange"
    assert display.progress_color(85) == "orange"
    assert display.progress_color(84) == "green"
    assert display.progress_color(50) == "green"
    assert display.progress_color(0) == "blue"


def test_progress_width_is_clamped():
    assert display.progress_width(150) == 100
    assert display.progress_width(42) == 42


def test_frames_convert_amounts_to_floats():
    trend = display.trend_frame([SpendingTrendPoint("2025-01", Decimal("10.10"))])
    assert list(trend.columns) == ["Month", "Total Expenses"]
    assert trend.iloc[0]["Total Expenses"] == 10.10

    status = display.budget_status_frame([
        BudgetStatus("Games", Decimal("0"), Decimal("50"), 150, Decimal("-50"), None),
    ])
    assert status.iloc[0]["Progress"] == 150
    assert status.iloc[0]["Remaining"] == -50.0

    assert display.trend_frame([]).empty
    assert display.budget_status_frame([]).empty


def test_report_csv():
    txn = Transaction(
        id=3,
        user_id=1,
        type=TransactionType.EXPENSE,
        amount=Decimal("19.99"),
        date=date(2025, 1, 31),
        category="Food",
        description=None,
        created_at=datetime(2025, 1, 31, 12, 0, 0),
        updated_at=datetime(2025, 1, 31, 12, 0, 0),
    )
    frame = pd.read_csv(io.StringIO(display.report_to_csv([txn])))
    assert list(frame.columns) == display.REPORT_CSV_COLUMNS
    row = frame.iloc[0]
    assert row["date"] == "2025-01-31"
    assert row["type"] == "EXPENSE"
    assert row["amount"] == 19.99
    assert row["id"] == 3


def test_report_filename():
    name = display.report_filename(date(2025, 1, 1), date(2025, 3, 31))
    assert name == "finance_report_2025-01-01_to_2025-03-31.csv"
