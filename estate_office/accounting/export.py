"""
CSV export of generated reports.

The trial balance and the statement of changes in equity keep the
fixed layouts accountants already import. Every other report is
written as Section,Line,Amount rows.
"""

import csv
import io
from typing import Iterable

from estate_office.models.accounting import EQUITY_INCREASING_TYPES
from estate_office.models.reports import (
    AgedReport,
    BalanceSheet,
    CashFlowStatement,
    ChangesInEquity,
    CommissionReport,
    ExpenseSummaryReport,
    ProfitAndLoss,
    TrialBalance,
)

Row = tuple[str, str, float]


def _money(value: float) -> str:
    return f"{value:.2f}"


def _writer(buffer: io.StringIO):
    return csv.writer(buffer, lineterminator="\n")


def export_trial_balance_csv(trial_balance: TrialBalance) -> str:
    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow(["Account Code", "Account Name", "Account Type", "Debit Balance", "Credit Balance"])
    for account in trial_balance.accounts:
        writer.writerow([
            account.account_code,
            account.account_name,
            account.account_type.value,
            _money(account.debit_balance),
            _money(account.credit_balance),
        ])
    writer.writerow([])
    writer.writerow(["Total", "", "", _money(trial_balance.total_debits), _money(trial_balance.total_credits)])
    writer.writerow(["Difference", "", "", _money(trial_balance.difference), ""])
    writer.writerow(["Balanced?", "", "", "Yes" if trial_balance.is_balanced else "No", ""])
    return buffer.getvalue()


def export_changes_in_equity_csv(report: ChangesInEquity) -> str:
    period = report.period
    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerows([
        ["Statement of Changes in Equity"],
        [f"Period: {period.start_date.isoformat()} to {period.end_date.isoformat()}"],
        [],
        ["Description", "Amount"],
        ["Beginning Balance", _money(report.beginning_balance)],
        ["Net Income for Period", _money(report.net_income)],
        ["Owner Contributions", _money(report.contributions)],
        ["Owner Withdrawals", f"({_money(report.withdrawals)})"],
        ["Dividends Paid", f"({_money(report.dividends)})"],
        ["Ending Balance", _money(report.ending_balance)],
        [],
        [],
        ["Detailed Transactions"],
        ["Date", "Type", "Description", "Amount"],
    ])
    for transaction in report.transactions:
        sign = "" if transaction.transaction_type in EQUITY_INCREASING_TYPES else "-"
        writer.writerow([
            transaction.date.isoformat(),
            transaction.transaction_type.value,
            transaction.description,
            f"{sign}{_money(transaction.amount)}",
        ])
    return buffer.getvalue()


# ============================================================================
# SECTION / LINE / AMOUNT EXPORTS
# ============================================================================

def _rows_to_csv(title: str, rows: Iterable[Row]) -> str:
    buffer = io.StringIO()
    writer = _writer(buffer)
    writer.writerow([title])
    writer.writerow(["Section", "Line", "Amount"])
    for section, line, amount in rows:
        writer.writerow([section, line, _money(amount)])
    return buffer.getvalue()


def export_profit_and_loss_csv(report: ProfitAndLoss) -> str:
    revenue = report.revenue
    expenses = report.expenses
    rows: list[Row] = [
        ("Revenue", "Commission Revenue", revenue.commission_revenue),
        ("Revenue", "Rental Income", revenue.rental_income),
        ("Revenue", "Consulting Fees", revenue.consulting_fees),
        ("Revenue", "Other Income", revenue.other_income),
        ("Revenue", "Total Revenue", revenue.total_revenue),
        ("Expenses", "Salaries & Wages", expenses.salaries_wages),
        ("Expenses", "Marketing & Advertising", expenses.marketing_advertising),
        ("Expenses", "Office Expenses", expenses.office_expenses),
        ("Expenses", "Utilities", expenses.utilities),
        ("Expenses", "Depreciation", expenses.depreciation),
        ("Expenses", "Other Expenses", expenses.other_expenses),
        ("Expenses", "Total Expenses", expenses.total_expenses),
        ("Result", "Gross Profit", report.gross_profit),
        ("Result", "Operating Income", report.operating_income),
        ("Result", "Net Income", report.net_income),
    ]
    title = f"Profit & Loss {report.period.start_date.isoformat()} to {report.period.end_date.isoformat()}"
    return _rows_to_csv(title, rows)


def export_balance_sheet_csv(report: BalanceSheet) -> str:
    current = report.assets.current_assets
    non_current = report.assets.non_current_assets
    liabilities = report.liabilities.current_liabilities
    long_term = report.liabilities.long_term_liabilities
    equity = report.equity
    rows: list[Row] = [
        ("Current Assets", "Cash & Bank", current.cash_and_bank),
        ("Current Assets", "Accounts Receivable", current.accounts_receivable),
        ("Current Assets", "Prepaid Expenses", current.prepaid_expenses),
        ("Current Assets", "Total Current Assets", current.total_current_assets),
        ("Non-Current Assets", "Property Inventory", non_current.property_inventory),
        ("Non-Current Assets", "Fixed Assets", non_current.fixed_assets),
        ("Non-Current Assets", "Total Non-Current Assets", non_current.total_non_current_assets),
        ("Assets", "Total Assets", report.assets.total_assets),
        ("Current Liabilities", "Accounts Payable", liabilities.accounts_payable),
        ("Current Liabilities", "Accrued Expenses", liabilities.accrued_expenses),
        ("Current Liabilities", "Customer Deposits", liabilities.customer_deposits),
        ("Current Liabilities", "Total Current Liabilities", liabilities.total_current_liabilities),
        ("Long-Term Liabilities", "Loans Payable", long_term.loans_payable),
        ("Liabilities", "Total Liabilities", report.liabilities.total_liabilities),
        ("Equity", "Owner's Capital", equity.owners_capital),
        ("Equity", "Retained Earnings", equity.retained_earnings),
        ("Equity", "Current Year Earnings", equity.current_year_earnings),
        ("Equity", "Total Equity", equity.total_equity),
        ("Total", "Total Liabilities & Equity", report.total_liabilities_and_equity),
    ]
    return _rows_to_csv(f"Balance Sheet as of {report.as_of_date.isoformat()}", rows)


def export_cash_flow_csv(report: CashFlowStatement) -> str:
    operating = report.operating_activities
    adjustments = operating.adjustments
    investing = report.investing_activities
    financing = report.financing_activities
    rows: list[Row] = [
        ("Operating", "Net Income", operating.net_income),
        ("Operating", "Depreciation", adjustments.depreciation),
        ("Operating", "Change in Accounts Receivable", adjustments.accounts_receivable_change),
        ("Operating", "Change in Accounts Payable", adjustments.accounts_payable_change),
        ("Operating", "Net Cash from Operating", operating.net_cash_from_operating),
        ("Investing", "Property Purchases", -investing.property_purchases),
        ("Investing", "Property Disposals", investing.property_disposals),
        ("Investing", "Net Cash from Investing", investing.net_cash_from_investing),
        ("Financing", "Owner Contributions", financing.owner_contributions),
        ("Financing", "Owner Withdrawals", -financing.owner_withdrawals),
        ("Financing", "Net Cash from Financing", financing.net_cash_from_financing),
        ("Cash", "Net Change in Cash", report.net_cash_change),
        ("Cash", "Beginning Cash", report.beginning_cash),
        ("Cash", "Ending Cash", report.ending_cash),
    ]
    title = f"Cash Flow {report.period.start_date.isoformat()} to {report.period.end_date.isoformat()}"
    return _rows_to_csv(title, rows)


def export_commission_report_csv(report: CommissionReport) -> str:
    rows: list[Row] = [
        ("Commission", f"{line.agent_name} - {line.property_title}", line.commission_amount)
        for line in report.commissions
    ]
    rows.extend(
        ("By Agent", f"{agent.agent_name} ({agent.deals_count} deals)", agent.total_commission)
        for agent in report.by_agent
    )
    rows.append(("Summary", "Total Deal Value", report.summary.total_deal_value))
    rows.append(("Summary", "Total Commission", report.summary.total_commission))
    rows.append(("Summary", "Average Commission Rate", report.summary.average_commission_rate))
    return _rows_to_csv(f"Commission Report {report.id}", rows)


def export_expense_summary_csv(report: ExpenseSummaryReport) -> str:
    rows: list[Row] = [
        ("By Category", category.category, category.total)
        for category in report.by_category
    ]
    rows.extend(("By Month", month.month, month.total) for month in report.by_month)
    rows.append(("Summary", "Total Expenses", report.summary.total_expenses))
    rows.append(("Summary", "Average Expense", report.summary.average_expense))
    return _rows_to_csv(f"Expense Summary {report.id}", rows)


def export_aged_report_csv(report: AgedReport) -> str:
    rows: list[Row] = []
    for label, bucket in report.buckets():
        rows.extend((label, f"{item.contact_name} - {item.description}", item.amount) for item in bucket.items)
        rows.append((label, "Total", bucket.total))
    rows.append(("Summary", "Grand Total", report.grand_total))
    rows.append(("Summary", "Overdue Total", report.overdue_total))
    rows.append(("Summary", "Overdue Percentage", report.overdue_percentage))
    title = f"Aged {report.report_type.title()} as of {report.as_of_date.isoformat()}"
    return _rows_to_csv(title, rows)
