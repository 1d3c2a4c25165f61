"""
Accounting Package

Chart of accounts, financial statements, performance and tax reports,
period comparisons and CSV export.
"""

from estate_office.accounting.analytics import PerformanceReports
from estate_office.accounting.chart import (
    CHART_OF_ACCOUNTS,
    AccountInfo,
    get_account_info,
)
from estate_office.accounting.comparisons import (
    compare_balance_sheets,
    compare_profit_and_loss,
    get_mom_date_ranges,
    get_yoy_date_ranges,
)
from estate_office.accounting.export import (
    export_aged_report_csv,
    export_balance_sheet_csv,
    export_cash_flow_csv,
    export_changes_in_equity_csv,
    export_commission_report_csv,
    export_expense_summary_csv,
    export_profit_and_loss_csv,
    export_trial_balance_csv,
)
from estate_office.accounting.statements import AccountTotals, FinancialStatements
from estate_office.accounting.tax import TaxReports, bucket_aged_items

__all__ = [
    # Chart
    "CHART_OF_ACCOUNTS",
    "AccountInfo",
    "get_account_info",
    # Reports
    "AccountTotals",
    "FinancialStatements",
    "PerformanceReports",
    "TaxReports",
    "bucket_aged_items",
    # Comparisons
    "compare_balance_sheets",
    "compare_profit_and_loss",
    "get_mom_date_ranges",
    "get_yoy_date_ranges",
    # Export
    "export_aged_report_csv",
    "export_balance_sheet_csv",
    "export_cash_flow_csv",
    "export_changes_in_equity_csv",
    "export_commission_report_csv",
    "export_expense_summary_csv",
    "export_profit_and_loss_csv",
    "export_trial_balance_csv",
]
