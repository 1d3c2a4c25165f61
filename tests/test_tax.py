"""Tests for the tax summary and the ageing reports."""

from datetime import date

import pytest

from estate_office.accounting.tax import bucket_aged_items
from estate_office.models.reports import AgedLine

YEAR_START = date(2024, 1, 1)
YEAR_END = date(2024, 12, 31)


def aged(item_id, due, amount=100.0):
    return AgedLine(
        id=item_id,
        entity_type="expense",
        entity_id=item_id,
        description="",
        amount=amount,
        due_date=due,
        days_overdue=0,
        contact_id="v",
        contact_name="Vendor",
    )


class TestTaxSummary:
    """Tests for the estimated tax position."""

    @pytest.fixture
    def taxed(self, office, admin):
        office.journal.create(
            date="2024-04-10",
            created_by=admin.user_id,
            entries=[
                {"accountName": "Accounts Receivable", "accountType": "asset", "debit": 20_000},
                {"accountName": "Commission Revenue", "accountType": "revenue", "credit": 20_000},
            ],
        )
        office.journal.create(
            date="2023-04-10",
            created_by=admin.user_id,
            entries=[
                {"accountName": "Commission Revenue", "accountType": "revenue", "credit": 90_000},
            ],
        )
        for category, amount, deductible in [
            ("Office Expenses", 5_000, True),
            ("Entertainment", 1_000, False),
            ("Salaries & Wages", 10_000, True),
        ]:
            office.expenses.create(
                date="2024-05-01", category=category, amount=amount,
                deductible=deductible, agent_id=admin.user_id,
            )
        office.properties.create(address="1 Main", created_by=admin.user_id, price=2_000_000)
        office.properties.create(address="2 Main", created_by=admin.user_id, price=5_000_000, status="sold")
        return office

    def test_income_tax(self, taxed, admin):
        report = taxed.tax.generate_tax_summary_report(YEAR_START, YEAR_END, admin)
        assert report.income_tax.gross_income == 20_000
        assert report.income_tax.allowable_deductions == 15_000
        assert report.income_tax.taxable_income == 5_000
        assert report.income_tax.tax_owed == pytest.approx(1_500)

    def test_taxable_income_never_negative(self, office, admin):
        office.expenses.create(date="2024-05-01", category="Office Expenses", amount=5_000,
                               agent_id=admin.user_id)
        report = office.tax.generate_tax_summary_report(YEAR_START, YEAR_END, admin)
        assert report.income_tax.taxable_income == 0

    def test_property_tax_skips_sold(self, taxed, admin):
        report = taxed.tax.generate_tax_summary_report(YEAR_START, YEAR_END, admin)
        assert [p.property_title for p in report.property_tax.by_property] == ["1 Main"]
        assert report.property_tax.total == pytest.approx(20_000)

    def test_capital_gains_are_estimated_long_term(self, taxed, admin):
        report = taxed.tax.generate_tax_summary_report(YEAR_START, YEAR_END, admin)
        gains = report.capital_gains_tax
        assert gains.short_term == []
        assert len(gains.long_term) == 1
        line = gains.long_term[0]
        assert line.property_id == "estimated"
        assert line.sale_price == pytest.approx(1_000_000)
        assert line.gain == pytest.approx(300_000)
        assert gains.total_long_term_tax == pytest.approx(45_000)

    def test_short_term_when_holding_is_short(self, taxed, admin, monkeypatch):
        monkeypatch.setenv("ESTATE_ACCOUNTING_ASSUMED_HOLDING_PERIOD_DAYS", "100")
        from estate_office.accounting import TaxReports

        reports = TaxReports(taxed.journal, taxed.properties, taxed.expenses, taxed.payments)
        report = reports.generate_tax_summary_report(YEAR_START, YEAR_END, admin)
        assert report.capital_gains_tax.long_term == []
        assert report.capital_gains_tax.total_short_term_tax == pytest.approx(90_000)

    def test_withholding_and_total(self, taxed, admin):
        report = taxed.tax.generate_tax_summary_report(YEAR_START, YEAR_END, admin)
        assert report.withholding_tax.salaries == pytest.approx(1_000)
        assert report.total_tax_liability == pytest.approx(20_000 + 1_500 + 45_000)
        assert report.balance_due == report.total_tax_liability
        assert report.period.fiscal_year == 2024


class TestBucketAgedItems:
    """Tests for the ageing buckets."""

    def test_bucket_boundaries(self):
        as_of = date(2024, 6, 30)
        items = [
            aged("a", date(2024, 7, 15)),
            aged("b", date(2024, 6, 30)),
            aged("c", date(2024, 5, 31)),
            aged("d", date(2024, 5, 30)),
            aged("e", date(2024, 4, 1)),
            aged("f", date(2024, 3, 1)),
        ]
        report = bucket_aged_items(items, as_of, "payables")
        assert [i.id for i in report.current.items] == ["a", "b"]
        assert [i.id for i in report.days_1_to_30.items] == ["c"]
        assert [i.id for i in report.days_31_to_60.items] == ["d"]
        assert [i.id for i in report.days_61_to_90.items] == ["e"]
        assert [i.id for i in report.days_90_plus.items] == ["f"]

    def test_totals(self):
        report = bucket_aged_items(
            [aged("a", date(2024, 7, 1), 300), aged("b", date(2024, 1, 1), 100)],
            date(2024, 6, 30),
            "receivables",
        )
        assert report.grand_total == 400
        assert report.overdue_total == 100
        assert report.overdue_percentage == 25
        assert report.days_90_plus.count == 1

    def test_empty(self):
        report = bucket_aged_items([], date(2024, 6, 30), "receivables")
        assert report.grand_total == 0
        assert report.overdue_percentage == 0


class TestAgedReports:
    """Tests for receivables and payables."""

    def test_receivables_from_pending_payments(self, office, admin):
        office.payments.create(date="2024-05-01", type="receivable", amount=5_000,
                               payee="Sadia Malik", agent_id=admin.user_id)
        office.payments.create(date="2024-05-01", type="receivable", amount=7_000,
                               status="completed", agent_id=admin.user_id)
        office.payments.create(date="2024-05-01", type="payable", amount=9_000,
                               agent_id=admin.user_id)

        report = office.tax.generate_aged_receivables(date(2024, 6, 15), admin)
        assert report.grand_total == 5_000
        line = report.days_31_to_60.items[0]
        assert line.entity_type == "commission"
        assert line.contact_name == "Sadia Malik"
        assert line.description == "Payment - general"

    def test_payables_from_pending_expenses(self, office, admin):
        office.expenses.create(date="2024-06-01", due_date="2024-06-20", category="Rent",
                               amount=40_000, status="pending", agent_id=admin.user_id)
        office.expenses.create(date="2024-06-01", category="Rent", amount=1_000,
                               agent_id=admin.user_id)

        report = office.tax.generate_aged_payables(date(2024, 6, 15), admin)
        assert report.current.count == 1
        line = report.current.items[0]
        assert line.entity_type == "expense"
        assert line.contact_name == "Unknown Vendor"
        assert line.description == "Rent"
        assert report.overdue_total == 0
