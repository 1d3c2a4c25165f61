"""
Performance Reports

Commission, expense, property and investor reports. Unlike the
financial statements these read operational records (deals, expenses,
properties, investments) rather than the journal.
"""

import math
from datetime import date, datetime
from typing import Optional

from estate_office.accounting.common import ReportService, in_period, percentage, report_id
from estate_office.audit.logger import AuditLogger
from estate_office.config import get_settings
from estate_office.models.base import UserContext, utcnow
from estate_office.models.deal import Deal, DealStatus
from estate_office.models.investment import InvestmentStatus
from estate_office.models.property import PropertyStatus
from estate_office.models.reports import (
    AgentCommissionTotal,
    CategoryTotal,
    CommissionLine,
    CommissionReport,
    CommissionSummary,
    DistributionLine,
    DistributionSummary,
    ExpenseLine,
    ExpenseSummary,
    ExpenseSummaryReport,
    InvestorDistributionReport,
    InvestorDistributionTotal,
    MonthTotal,
    PropertyPerformanceLine,
    PropertyPerformanceReport,
    PropertyPerformanceSummary,
    ReportPeriod,
    StatusCount,
    TopPerformer,
)
from estate_office.repositories import (
    DealRepository,
    ExpenseRepository,
    InvestmentRepository,
    InvestorRepository,
    PropertyRepository,
)

UNKNOWN_AGENT = "Unknown Agent"


def _days_between(start: datetime, end: datetime) -> int:
    return math.floor((end - start).total_seconds() / 86400)


class PerformanceReports(ReportService):
    """Generates the agency's performance reports."""

    def __init__(
        self,
        deals: DealRepository,
        properties: PropertyRepository,
        expenses: ExpenseRepository,
        investors: InvestorRepository,
        investments: InvestmentRepository,
        audit_logger: Optional[AuditLogger] = None,
    ):
        super().__init__(audit_logger)
        self._deals = deals
        self._properties = properties
        self._expenses = expenses
        self._investors = investors
        self._investments = investments
        self._settings = get_settings().app

    # ========================================================================
    # COMMISSIONS
    # ========================================================================

    def _property_title(self, deal: Deal) -> str:
        if deal.property_id:
            prop = self._properties.get(deal.property_id)
            if prop is not None and prop.title:
                return prop.title
            return f"Property {deal.property_id}"
        return f"Deal {deal.deal_number}"

    def _commission_lines(self, deal: Deal) -> list[CommissionLine]:
        """
        Commission lines for one completed deal.

        The legacy primary/secondary split wins when it carries
        amounts. Otherwise the per-agent list is used, and when that
        is empty too the whole commission goes to the primary agent.
        """
        commission = deal.financial.commission
        base = dict(
            property_id=deal.property_id or "",
            property_title=self._property_title(deal),
            deal_type="sale",
            deal_value=deal.financial.agreed_price,
            commission_rate=commission.rate,
            closed_date=deal.closing_date,
        )

        lines = []
        split = commission.split
        if split.primary_agent and split.primary_agent.amount > 0:
            primary = deal.agents.primary
            lines.append(CommissionLine(
                **base,
                commission_amount=split.primary_agent.amount,
                agent_id=primary.id,
                agent_name=primary.name or UNKNOWN_AGENT,
            ))
        secondary = deal.agents.secondary
        if secondary and split.secondary_agent and split.secondary_agent.amount > 0:
            lines.append(CommissionLine(
                **base,
                commission_amount=split.secondary_agent.amount,
                agent_id=secondary.id,
                agent_name=secondary.name or UNKNOWN_AGENT,
            ))
        if lines:
            return lines

        if commission.agents:
            return [
                CommissionLine(
                    **base,
                    commission_amount=agent.amount,
                    agent_id=agent.id,
                    agent_name=agent.name or UNKNOWN_AGENT,
                )
                for agent in commission.agents
                if agent.amount > 0
            ]

        if commission.total > 0:
            primary = deal.agents.primary
            return [CommissionLine(
                **base,
                commission_amount=commission.total,
                agent_id=primary.id,
                agent_name=primary.name or UNKNOWN_AGENT,
            )]
        return []

    def generate_commission_report(self, start: date, end: date, user: UserContext) -> CommissionReport:
        """Commission earned on deals completed in a period, per line and per agent."""
        completed = [
            d for d in self._deals.list_for(user)
            if d.lifecycle.status == DealStatus.COMPLETED and in_period(d.closing_date, start, end)
        ]

        commissions: list[CommissionLine] = []
        reported: dict[str, Deal] = {}
        agent_deals: dict[str, set[str]] = {}
        for deal in completed:
            lines = self._commission_lines(deal)
            if lines or deal.financial.commission.agents:
                reported[deal.id] = deal
            for line in lines:
                agent_deals.setdefault(line.agent_id, set()).add(deal.id)
            commissions.extend(lines)

        total_value = sum(d.financial.agreed_price for d in reported.values())
        total_commission = sum(c.commission_amount for c in commissions)
        summary = CommissionSummary(
            total_deals=len(reported),
            total_deal_value=total_value,
            total_commission=total_commission,
            average_commission_rate=percentage(total_commission, total_value),
            sales_commission=total_commission,
            rental_commission=0.0,
        )

        by_agent = []
        for agent_id, deal_ids in agent_deals.items():
            rows = [c for c in commissions if c.agent_id == agent_id]
            by_agent.append(AgentCommissionTotal(
                agent_id=agent_id,
                agent_name=rows[0].agent_name,
                deals_count=len(deal_ids),
                total_commission=sum(c.commission_amount for c in rows),
            ))
        by_agent.sort(key=lambda a: a.total_commission, reverse=True)

        report = CommissionReport(
            id=report_id("CR"),
            period=ReportPeriod(start_date=start, end_date=end),
            commissions=commissions,
            summary=summary,
            by_agent=by_agent,
            generated_by=user.user_id,
        )
        self._generated("commission", report.id, user)
        return report

    # ========================================================================
    # EXPENSES
    # ========================================================================

    def generate_expense_summary_report(self, start: date, end: date, user: UserContext) -> ExpenseSummaryReport:
        """Expenses in a period, grouped by category and by month."""
        lines = [
            ExpenseLine(
                id=e.id,
                date=e.date,
                category=e.category,
                description=e.description,
                amount=e.amount,
                payment_method=e.payment_method or "Unknown",
            )
            for e in self._expenses.list_for(user)
            if start <= e.date <= end
        ]
        total = sum(line.amount for line in lines)

        categories: dict[str, list[ExpenseLine]] = {}
        months: dict[tuple[int, int], float] = {}
        for line in lines:
            categories.setdefault(line.category, []).append(line)
            month_key = (line.date.year, line.date.month)
            months[month_key] = months.get(month_key, 0.0) + line.amount

        by_category = sorted(
            (
                CategoryTotal(
                    category=category,
                    count=len(rows),
                    total=sum(r.amount for r in rows),
                    percentage=percentage(sum(r.amount for r in rows), total),
                )
                for category, rows in categories.items()
            ),
            key=lambda c: c.total,
            reverse=True,
        )
        by_month = [
            MonthTotal(month=date(year, month, 1).strftime("%b %Y"), total=amount)
            for (year, month), amount in sorted(months.items())
        ]

        summary = ExpenseSummary(
            total_expenses=total,
            transaction_count=len(lines),
            average_expense=total / len(lines) if lines else 0.0,
        )
        if by_category:
            summary.largest_category = by_category[0].category
            summary.largest_category_amount = by_category[0].total

        report = ExpenseSummaryReport(
            id=report_id("ES"),
            period=ReportPeriod(start_date=start, end_date=end),
            expenses=lines,
            by_category=by_category,
            by_month=by_month,
            summary=summary,
            generated_by=user.user_id,
        )
        self._generated("expense_summary", report.id, user)
        return report

    # ========================================================================
    # PROPERTY PERFORMANCE
    # ========================================================================

    def generate_property_performance_report(
        self,
        start: date,
        end: date,
        user: UserContext,
    ) -> PropertyPerformanceReport:
        """
        Listing performance of properties created in a period.

        Unsold properties are measured up to now. The price change
        compares the final sale price with the list price.
        """
        now = utcnow()
        lines = []
        for prop in self._properties.list_for(user):
            if not in_period(prop.created_at, start, end):
                continue
            sold = prop.status == PropertyStatus.SOLD
            sold_price = (prop.final_sale_price or prop.price) if sold else None
            price_change = (sold_price - prop.price) if sold_price else 0.0
            lines.append(PropertyPerformanceLine(
                id=prop.id,
                title=prop.display_title,
                property_type=prop.property_type.value,
                status=prop.status.value,
                listing_date=prop.created_at.date(),
                sold_date=prop.sold_date.date() if prop.sold_date else None,
                days_on_market=_days_between(prop.created_at, prop.sold_date or now),
                list_price=prop.price,
                sold_price=sold_price,
                price_change=price_change,
                price_change_percentage=percentage(price_change, prop.price),
                commission_earned=prop.commission_earned,
                agent_name=prop.agent_name or "Unknown",
            ))

        count = len(lines)
        sold_count = sum(1 for p in lines if p.status == PropertyStatus.SOLD.value)
        summary = PropertyPerformanceSummary(
            total_properties=count,
            active_listings=sum(1 for p in lines if p.status == PropertyStatus.AVAILABLE.value),
            sold_properties=sold_count,
            average_days_on_market=sum(p.days_on_market for p in lines) / count if count else 0.0,
            average_price_change=sum(p.price_change for p in lines) / count if count else 0.0,
            total_commission_earned=sum(p.commission_earned for p in lines),
            conversion_rate=percentage(sold_count, count),
        )

        status_counts: dict[str, int] = {}
        for line in lines:
            status_counts[line.status] = status_counts.get(line.status, 0) + 1
        by_status = [
            StatusCount(status=status, count=n, percentage=percentage(n, count))
            for status, n in status_counts.items()
        ]

        earners = sorted(
            (p for p in lines if p.commission_earned > 0),
            key=lambda p: p.commission_earned,
            reverse=True,
        )
        top_performers = [
            TopPerformer(
                id=p.id,
                title=p.title,
                commission_earned=p.commission_earned,
                days_on_market=p.days_on_market,
            )
            for p in earners[:self._settings.top_performers_limit]
        ]

        report = PropertyPerformanceReport(
            id=report_id("PP"),
            period=ReportPeriod(start_date=start, end_date=end),
            properties=lines,
            summary=summary,
            by_status=by_status,
            top_performers=top_performers,
            generated_by=user.user_id,
        )
        self._generated("property_performance", report.id, user)
        return report

    # ========================================================================
    # INVESTOR DISTRIBUTIONS
    # ========================================================================

    def generate_investor_distribution_report(
        self,
        start: date,
        end: date,
        user: UserContext,
    ) -> InvestorDistributionReport:
        """
        Sale proceeds paid out to investors in a period.

        Each investment sold in the period distributes the investor's
        share of the sale price.
        """
        investors = {i.id: i for i in self._investors.list_for(user)}

        lines = []
        for investment in self._investments.list_all():
            investor = investors.get(investment.investor_id)
            if investor is None or investment.status != InvestmentStatus.SOLD:
                continue
            if not in_period(investment.sold_date, start, end):
                continue
            prop = self._properties.get(investment.property_id)
            title = prop.display_title if prop else (investment.property_address or investment.property_id)
            lines.append(DistributionLine(
                investor_id=investor.id,
                investor_name=investor.name,
                property_id=investment.property_id,
                property_title=title,
                investment_amount=investment.investment_amount,
                ownership_percentage=investment.share_percentage,
                distribution_amount=(investment.sold_price or 0.0) * investment.share_fraction,
                distribution_date=investment.sold_date,
                roi=percentage(investment.realized_profit or 0.0, investment.investment_amount),
            ))

        grouped: dict[str, list[DistributionLine]] = {}
        for line in lines:
            grouped.setdefault(line.investor_id, []).append(line)

        by_investor = []
        for investor_id, rows in grouped.items():
            distributed = sum(r.distribution_amount for r in rows)
            invested = sum(r.investment_amount for r in rows)
            by_investor.append(InvestorDistributionTotal(
                investor_id=investor_id,
                investor_name=rows[0].investor_name,
                distributions_count=len(rows),
                total_distributed=distributed,
                total_invested=invested,
                roi=percentage(distributed - invested, invested),
            ))
        by_investor.sort(key=lambda i: i.total_distributed, reverse=True)

        summary = DistributionSummary(
            total_investors=len(grouped),
            total_distributed=sum(line.distribution_amount for line in lines),
            total_investment_capital=sum(line.investment_amount for line in lines),
            average_roi=sum(line.roi for line in lines) / len(lines) if lines else 0.0,
            largest_distribution=max((line.distribution_amount for line in lines), default=0.0),
        )

        report = InvestorDistributionReport(
            id=report_id("ID"),
            period=ReportPeriod(start_date=start, end_date=end),
            distributions=lines,
            summary=summary,
            by_investor=by_investor,
            generated_by=user.user_id,
        )
        self._generated("investor_distribution", report.id, user)
        return report
