"""
Period-over-period comparisons of financial statements.

Percent changes are relative to the previous value and are 0 when the
previous value is 0.
"""

import calendar
from datetime import date
from typing import Literal

from estate_office.models.reports import (
    BalanceSheet,
    ComparisonRanges,
    DateRange,
    MetricChange,
    ProfitAndLoss,
    ReportComparison,
)

ComparisonType = Literal["YoY", "MoM", "Custom"]


def calculate_change(current: float, previous: float) -> MetricChange:
    change = current - previous
    return MetricChange(
        current=current,
        previous=previous,
        change=change,
        change_percentage=(change / previous * 100) if previous != 0 else 0.0,
    )


def compare_profit_and_loss(
    current: ProfitAndLoss,
    previous: ProfitAndLoss,
    comparison_type: ComparisonType = "YoY",
) -> ReportComparison:
    return ReportComparison(
        comparison_type=comparison_type,
        current_id=current.id,
        previous_id=previous.id,
        changes={
            "total_revenue": calculate_change(
                current.revenue.total_revenue, previous.revenue.total_revenue
            ),
            "total_expenses": calculate_change(
                current.expenses.total_expenses, previous.expenses.total_expenses
            ),
            "net_income": calculate_change(current.net_income, previous.net_income),
            "commission_revenue": calculate_change(
                current.revenue.commission_revenue, previous.revenue.commission_revenue
            ),
            "operating_income": calculate_change(
                current.operating_income, previous.operating_income
            ),
        },
    )


def compare_balance_sheets(
    current: BalanceSheet,
    previous: BalanceSheet,
    comparison_type: ComparisonType = "YoY",
) -> ReportComparison:
    return ReportComparison(
        comparison_type=comparison_type,
        current_id=current.id,
        previous_id=previous.id,
        changes={
            "total_assets": calculate_change(
                current.assets.total_assets, previous.assets.total_assets
            ),
            "total_liabilities": calculate_change(
                current.liabilities.total_liabilities, previous.liabilities.total_liabilities
            ),
            "total_equity": calculate_change(
                current.equity.total_equity, previous.equity.total_equity
            ),
            "cash_and_bank": calculate_change(
                current.assets.current_assets.cash_and_bank,
                previous.assets.current_assets.cash_and_bank,
            ),
            "current_assets": calculate_change(
                current.assets.current_assets.total_current_assets,
                previous.assets.current_assets.total_current_assets,
            ),
        },
    )


def shift_months(day: date, months: int) -> date:
    """Move a date by whole months, clamping the day to the target month's end."""
    month_index = day.year * 12 + (day.month - 1) + months
    year, month = divmod(month_index, 12)
    month += 1
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, min(day.day, last_day))


def get_yoy_date_ranges(start: date, end: date) -> ComparisonRanges:
    """The same range one year earlier. 29 February maps to 28 February."""
    return ComparisonRanges(
        current=DateRange(start=start, end=end),
        previous=DateRange(start=shift_months(start, -12), end=shift_months(end, -12)),
    )


def get_mom_date_ranges(start: date, end: date) -> ComparisonRanges:
    """The same range one month earlier. 31 March maps to 28/29 February."""
    return ComparisonRanges(
        current=DateRange(start=start, end=end),
        previous=DateRange(start=shift_months(start, -1), end=shift_months(end, -1)),
    )
