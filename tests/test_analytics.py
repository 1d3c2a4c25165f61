"""Tests for the commission, expense, property and investor reports."""

from datetime import date

import pytest

from estate_office.models.deal import DealAgents, DealFinancial, DealParties, DealParty

ALL_TIME = (date(2000, 1, 1), date(2100, 12, 31))


def completed_deal(office, number, commission, agents=None, completed_at="2024-06-10T12:00:00"):
    return office.deals.create(
        deal_number=number,
        agents=DealAgents(
            primary=DealParty(id="agent-1", name="Ayesha Khan"),
            secondary=agents,
        ),
        parties=DealParties(buyer=DealParty(id="b"), seller=DealParty(id="s")),
        financial=DealFinancial(agreed_price=5_000_000, commission=commission),
        lifecycle={"stage": "completed", "status": "completed"},
        completed_at=completed_at,
    )


class TestCommissionReport:
    """Tests for the commission report."""

    def test_completed_pipeline_deal(self, office, admin, open_deal):
        office.pipeline.complete_deal(open_deal.id, admin)
        report = office.performance.generate_commission_report(*ALL_TIME, admin)

        assert [c.commission_amount for c in report.commissions] == [108_000, 72_000]
        assert report.commissions[0].property_title == "Corner House"
        assert report.summary.total_deals == 1
        assert report.summary.total_deal_value == 9_000_000
        assert report.summary.total_commission == 180_000
        assert report.summary.average_commission_rate == pytest.approx(2.0)
        assert [a.agent_id for a in report.by_agent] == ["agent-1", "agent-2"]

    def test_active_deals_are_excluded(self, office, admin, open_deal):
        report = office.performance.generate_commission_report(*ALL_TIME, admin)
        assert report.commissions == []
        assert report.summary.total_deals == 0

    def test_agent_list_used_without_split(self, office, admin):
        completed_deal(office, "DEAL-2024-001", {
            "total": 100_000,
            "agents": [
                {"id": "agent-1", "name": "Ayesha Khan", "percentage": 50, "amount": 50_000},
                {"id": "broker-9", "type": "external", "name": "Zeeshan Realty",
                 "percentage": 30, "amount": 30_000},
            ],
        })
        report = office.performance.generate_commission_report(*ALL_TIME, admin)
        assert {c.agent_id for c in report.commissions} == {"agent-1", "broker-9"}
        assert report.commissions[0].property_title == "Deal DEAL-2024-001"

    def test_total_goes_to_primary_as_last_resort(self, office, admin):
        completed_deal(office, "DEAL-2024-002", {"total": 40_000})
        report = office.performance.generate_commission_report(*ALL_TIME, admin)
        assert len(report.commissions) == 1
        assert report.commissions[0].agent_id == "agent-1"
        assert report.commissions[0].commission_amount == 40_000

    def test_period_filter(self, office, admin):
        completed_deal(office, "DEAL-2024-003", {"total": 40_000}, completed_at="2023-06-10T12:00:00")
        report = office.performance.generate_commission_report(date(2024, 1, 1), date(2024, 12, 31), admin)
        assert report.commissions == []


class TestExpenseSummaryReport:
    """Tests for the expense summary."""

    @pytest.fixture
    def expenses(self, office, admin):
        for day, category, amount in [
            ("2024-01-05", "Marketing & Advertising", 12_000),
            ("2024-01-20", "Office Expenses", 3_000),
            ("2024-02-02", "Marketing & Advertising", 6_000),
            ("2023-12-30", "Office Expenses", 99_000),
        ]:
            office.expenses.create(date=day, category=category, amount=amount, agent_id=admin.user_id)
        return office

    def test_totals(self, expenses, admin):
        report = expenses.performance.generate_expense_summary_report(
            date(2024, 1, 1), date(2024, 12, 31), admin
        )
        assert report.summary.total_expenses == 21_000
        assert report.summary.transaction_count == 3
        assert report.summary.average_expense == 7_000
        assert report.summary.largest_category == "Marketing & Advertising"
        assert report.summary.largest_category_amount == 18_000

    def test_by_category_and_month(self, expenses, admin):
        report = expenses.performance.generate_expense_summary_report(
            date(2024, 1, 1), date(2024, 12, 31), admin
        )
        assert report.by_category[0].count == 2
        assert report.by_category[0].percentage == pytest.approx(18_000 / 21_000 * 100)
        assert [(m.month, m.total) for m in report.by_month] == [("Jan 2024", 15_000), ("Feb 2024", 6_000)]

    def test_missing_payment_method(self, expenses, admin):
        report = expenses.performance.generate_expense_summary_report(
            date(2024, 1, 1), date(2024, 12, 31), admin
        )
        assert report.expenses[0].payment_method == "Unknown"

    def test_empty_period(self, office, admin):
        report = office.performance.generate_expense_summary_report(
            date(2024, 1, 1), date(2024, 12, 31), admin
        )
        assert report.summary.largest_category == "N/A"
        assert report.summary.average_expense == 0


class TestPropertyPerformanceReport:
    """Tests for listing performance."""

    def test_sold_property(self, office, admin):
        office.properties.create(
            address="1 Main",
            created_by=admin.user_id,
            created_at="2024-01-01T00:00:00",
            status="sold",
            price=1_000_000,
            final_sale_price=1_100_000,
            sold_date="2024-01-31T00:00:00",
            commission_earned=22_000,
            agent_name="Ayesha Khan",
        )
        office.properties.create(address="2 Main", created_by=admin.user_id, created_at="2024-02-01T00:00:00")

        report = office.performance.generate_property_performance_report(
            date(2024, 1, 1), date(2024, 12, 31), admin
        )
        sold = next(p for p in report.properties if p.status == "sold")
        assert sold.days_on_market == 30
        assert sold.price_change == 100_000
        assert sold.price_change_percentage == pytest.approx(10.0)
        assert report.summary.sold_properties == 1
        assert report.summary.active_listings == 1
        assert report.summary.conversion_rate == 50
        assert [t.id for t in report.top_performers] == [sold.id]

    def test_top_performers_limit(self, office, admin, monkeypatch):
        monkeypatch.setenv("TOP_PERFORMERS_LIMIT", "2")
        for n in range(4):
            office.properties.create(
                address=f"{n} Main",
                created_by=admin.user_id,
                created_at="2024-01-01T00:00:00",
                commission_earned=1_000 * (n + 1),
            )
        from estate_office.accounting import PerformanceReports

        reports = PerformanceReports(
            office.deals, office.properties, office.expenses, office.investors, office.investments
        )
        report = reports.generate_property_performance_report(date(2024, 1, 1), date(2024, 12, 31), admin)
        assert [t.commission_earned for t in report.top_performers] == [4_000, 3_000]


class TestInvestorDistributionReport:
    """Tests for sale proceeds paid to investors."""

    def test_sold_investments_distribute(self, office, admin):
        investor = office.investors.create(name="Zara Sheikh", managing_agent_id=admin.user_id)
        investment = office.portfolios.add_investment(
            investor_id=investor.id,
            property_id="PROP-1",
            property_address="7 Canal View",
            share_percentage=40,
            investment_amount=4_000_000,
            acquisition_price=10_000_000,
        )
        office.portfolios.close_investment(investment.id, sale_price=12_000_000)

        report = office.performance.generate_investor_distribution_report(*ALL_TIME, admin)
        line = report.distributions[0]
        assert line.distribution_amount == 4_800_000
        assert line.property_title == "7 Canal View"
        assert line.roi == pytest.approx(20.0)
        assert report.by_investor[0].total_distributed == 4_800_000
        assert report.summary.total_investors == 1
        assert report.summary.largest_distribution == 4_800_000

    def test_active_investments_are_not_distributions(self, office, admin):
        investor = office.investors.create(name="Zara Sheikh", managing_agent_id=admin.user_id)
        office.portfolios.add_investment(
            investor_id=investor.id,
            property_id="PROP-1",
            property_address="7 Canal View",
            share_percentage=40,
            investment_amount=4_000_000,
            acquisition_price=10_000_000,
        )
        report = office.performance.generate_investor_distribution_report(*ALL_TIME, admin)
        assert report.distributions == []
        assert report.summary.average_roi == 0
