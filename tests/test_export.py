"""Tests for CSV export."""

import csv
import io
from datetime import date

import pytest

from estate_office.accounting import (
    export_aged_report_csv,
    export_balance_sheet_csv,
    export_cash_flow_csv,
    export_changes_in_equity_csv,
    export_commission_report_csv,
    export_expense_summary_csv,
    export_profit_and_loss_csv,
    export_trial_balance_csv,
)

START = date(2024, 1, 1)
END = date(2024, 12, 31)


@pytest.fixture
def ledger(office, admin):
    for debit, credit, amount in [
        ("Cash & Bank", "Owner's Capital", 100_000),
        ("Cash & Bank", "Commission Revenue", 25_000),
        ("Utilities & Communication", "Cash & Bank", 1_500),
    ]:
        office.journal.create(
            date="2024-02-01", debit_account=debit, credit_account=credit,
            amount=amount, created_by=admin.user_id,
        )
    return office


def parse(text):
    return list(csv.reader(io.StringIO(text)))


class TestTrialBalanceExport:
    """The trial balance keeps its fixed layout."""

    def test_layout(self, ledger, admin):
        text = export_trial_balance_csv(ledger.statements.generate_trial_balance(END, admin))
        lines = text.splitlines()
        assert lines[0] == "Account Code,Account Name,Account Type,Debit Balance,Credit Balance"
        assert "1000,Cash & Bank,asset,125000.00,1500.00" in lines
        assert "9999,Utilities & Communication,expense,1500.00,0.00" in lines
        assert lines[-3:] == [
            "Total,,,126500.00,126500.00",
            "Difference,,,0.00,",
            "Balanced?,,,Yes,",
        ]

    def test_names_with_quotes_and_commas(self, office, admin):
        office.journal.create(
            date="2024-02-01", debit_account='Deposits, "Block A"', credit_account="Cash & Bank",
            amount=300, created_by=admin.user_id,
        )
        rows = parse(export_trial_balance_csv(office.statements.generate_trial_balance(END, admin)))
        assert ["9999", 'Deposits, "Block A"', "expense", "300.00", "0.00"] in rows
        assert all(len(row) == 5 for row in rows if row)


class TestChangesInEquityExport:
    """The equity statement keeps its fixed layout."""

    def test_layout(self, office, admin):
        office.statements.add_equity_transaction(
            date="2024-02-01", type="owner-contribution", amount=10_000,
            description="Capital injection", created_by=admin.user_id,
        )
        office.statements.add_equity_transaction(
            date="2024-03-01", type="owner-withdrawal", amount=2_500, created_by=admin.user_id,
        )
        report = office.statements.generate_changes_in_equity(START, END, admin, net_income=1_000)
        lines = export_changes_in_equity_csv(report).splitlines()

        assert lines[0] == "Statement of Changes in Equity"
        assert lines[1] == "Period: 2024-01-01 to 2024-12-31"
        assert "Owner Withdrawals,(2500.00)" in lines
        assert "Ending Balance,8500.00" in lines
        assert lines[-2] == "2024-02-01,owner-contribution,Capital injection,10000.00"
        assert lines[-1] == "2024-03-01,owner-withdrawal,,-2500.00"

    def test_descriptions_are_escaped(self, office, admin):
        office.statements.add_equity_transaction(
            date="2024-02-01", type="owner-contribution", amount=1_000,
            description='Top-up, "bridge" loan', created_by=admin.user_id,
        )
        report = office.statements.generate_changes_in_equity(START, END, admin, net_income=0)
        rows = parse(export_changes_in_equity_csv(report))
        assert rows[-1] == ["2024-02-01", "owner-contribution", 'Top-up, "bridge" loan', "1000.00"]


class TestSectionExports:
    """Reports written as Section,Line,Amount rows."""

    def test_profit_and_loss(self, ledger, admin):
        rows = parse(export_profit_and_loss_csv(
            ledger.statements.generate_profit_and_loss(START, END, admin)
        ))
        assert rows[0] == ["Profit & Loss 2024-01-01 to 2024-12-31"]
        assert rows[1] == ["Section", "Line", "Amount"]
        assert ["Revenue", "Commission Revenue", "25000.00"] in rows
        assert ["Expenses", "Utilities", "1500.00"] in rows
        assert rows[-1] == ["Result", "Net Income", "23500.00"]

    def test_balance_sheet_quotes_names(self, ledger, admin):
        text = export_balance_sheet_csv(ledger.statements.generate_balance_sheet(END, admin))
        rows = parse(text)
        assert ["Equity", "Owner's Capital", "100000.00"] in rows
        assert rows[-1] == ["Total", "Total Liabilities & Equity", "100000.00"]

    def test_cash_flow(self, ledger, admin):
        rows = parse(export_cash_flow_csv(
            ledger.statements.generate_cash_flow_statement(START, END, admin)
        ))
        assert rows[-1][:2] == ["Cash", "Ending Cash"]

    def test_commission_report(self, office, admin, open_deal):
        office.pipeline.complete_deal(open_deal.id, admin)
        report = office.performance.generate_commission_report(START, date(2100, 1, 1), admin)
        rows = parse(export_commission_report_csv(report))
        assert ["Commission", "Ayesha Khan - Corner House", "108000.00"] in rows
        assert ["By Agent", "Bilal Ahmed (1 deals)", "72000.00"] in rows
        assert ["Summary", "Total Commission", "180000.00"] in rows

    def test_expense_summary(self, office, admin):
        office.expenses.create(date="2024-01-05", category="Rent", amount=30_000, agent_id=admin.user_id)
        report = office.performance.generate_expense_summary_report(START, END, admin)
        rows = parse(export_expense_summary_csv(report))
        assert ["By Category", "Rent", "30000.00"] in rows
        assert ["By Month", "Jan 2024", "30000.00"] in rows

    def test_aged_report(self, office, admin):
        office.expenses.create(date="2024-01-05", category="Rent", amount=30_000,
                               status="pending", vendor="Plaza Estates", agent_id=admin.user_id)
        report = office.tax.generate_aged_payables(date(2024, 6, 30), admin)
        rows = parse(export_aged_report_csv(report))
        assert rows[0] == ["Aged Payables as of 2024-06-30"]
        assert ["90+ Days", "Plaza Estates - Rent", "30000.00"] in rows
        assert ["Summary", "Overdue Percentage", "100.00"] in rows
