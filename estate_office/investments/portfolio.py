"""
Investor Portfolios

DESIGN DECISION: Investor totals are a CACHE of the investments.
Every change to an investment recalculates the owning investor's
totals from scratch, so the stored totals always equal what the
investments say.

VALUE CONVENTIONS:
- current_value and acquisition_price are WHOLE-PROPERTY values
- An investor's share of a value is value x share_percentage / 100
- investment_amount is what the investor actually paid in
"""

from typing import Optional

import structlog

from estate_office.accounting.common import percentage
from estate_office.config import get_settings
from estate_office.models.base import UserContext, utcnow
from estate_office.models.investment import (
    BestPerformingProperty,
    InvestmentStatus,
    Investor,
    InvestorInvestment,
    InvestorStats,
    InvestorStatus,
    PortfolioSummary,
)
from estate_office.repositories import InvestmentRepository, InvestorRepository

logger = structlog.get_logger(__name__)


class PortfolioService:
    """Investments and the portfolio totals derived from them."""

    def __init__(self, investors: InvestorRepository, investments: InvestmentRepository):
        self._investors = investors
        self._investments = investments

    # ========================================================================
    # INVESTMENTS
    # ========================================================================

    def add_investment(
        self,
        investor_id: str,
        property_id: str,
        property_address: str,
        share_percentage: float,
        investment_amount: float,
        acquisition_price: float,
        purchase_cycle_id: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> InvestorInvestment:
        """Record a new active stake. Current value starts at the acquisition price."""
        investment = self._investments.create(
            investor_id=investor_id,
            property_id=property_id,
            property_address=property_address,
            share_percentage=share_percentage,
            investment_amount=investment_amount,
            investment_date=utcnow().date(),
            acquisition_price=acquisition_price,
            status=InvestmentStatus.ACTIVE,
            current_value=acquisition_price,
            purchase_cycle_id=purchase_cycle_id,
            notes=notes,
        )
        self.recalculate_portfolio(investor_id)
        return investment

    def update_investment_value(self, investment_id: str, new_value: float) -> Optional[InvestorInvestment]:
        """Revalue the whole property and refresh appreciation and ROI."""
        investment = self._investments.get(investment_id)
        if investment is None:
            return None

        acquisition_share = investment.acquisition_price * investment.share_fraction
        current_share = new_value * investment.share_fraction
        unrealized = current_share - investment.investment_amount
        updated = self._investments.update(
            investment_id,
            current_value=new_value,
            appreciation_value=current_share - acquisition_share,
            unrealized_profit=unrealized,
            roi=percentage(unrealized, investment.investment_amount),
        )
        self.recalculate_portfolio(investment.investor_id)
        return updated

    def close_investment(
        self,
        investment_id: str,
        sale_price: float,
        sell_cycle_id: Optional[str] = None,
    ) -> Optional[InvestorInvestment]:
        """Mark a stake sold at a whole-property sale price and realize the profit."""
        investment = self._investments.get(investment_id)
        if investment is None:
            return None

        profit = sale_price * investment.share_fraction - investment.investment_amount
        updated = self._investments.update(
            investment_id,
            status=InvestmentStatus.SOLD,
            sold_date=utcnow().date(),
            sold_price=sale_price,
            realized_profit=profit,
            roi=percentage(profit, investment.investment_amount),
            sell_cycle_id=sell_cycle_id,
        )
        logger.info(
            "investment_closed",
            investment_id=investment_id,
            investor_id=investment.investor_id,
            realized_profit=profit,
        )
        self.recalculate_portfolio(investment.investor_id)
        return updated

    def add_rental_income(self, investment_id: str, amount: float) -> Optional[InvestorInvestment]:
        investment = self._investments.get(investment_id)
        if investment is None:
            return None
        updated = self._investments.update(
            investment_id,
            rental_income=investment.rental_income + amount,
        )
        self.recalculate_portfolio(investment.investor_id)
        return updated

    # ========================================================================
    # PORTFOLIO TOTALS
    # ========================================================================

    def recalculate_portfolio(self, investor_id: str) -> Optional[Investor]:
        """Rebuild an investor's totals from their investments."""
        if self._investors.get(investor_id) is None:
            logger.warning("portfolio_investor_missing", investor_id=investor_id)
            return None

        investments = self._investments.for_investor(investor_id)
        active = [i for i in investments if i.status == InvestmentStatus.ACTIVE]
        sold = [i for i in investments if i.status == InvestmentStatus.SOLD]

        total_invested = sum(i.investment_amount for i in investments)
        realized = sum(i.realized_profit or 0.0 for i in sold)
        unrealized = sum(i.current_share_value - i.investment_amount for i in active)

        return self._investors.update(
            investor_id,
            total_invested=total_invested,
            current_portfolio_value=sum(i.current_share_value for i in active),
            realized_gains=realized,
            unrealized_gains=unrealized,
            total_roi=percentage(realized + unrealized, total_invested),
            active_properties=len(active),
            sold_properties=len(sold),
        )

    def portfolio_summary(self, investor_id: str) -> PortfolioSummary:
        """Totals for one investor. An unknown investor gets an all-zero summary."""
        investor = self._investors.get(investor_id)
        if investor is None:
            return PortfolioSummary()

        investments = self._investments.for_investor(investor_id)
        profitable = sorted(
            (i for i in investments if i.roi > 0),
            key=lambda i: i.roi,
            reverse=True,
        )
        best = None
        if profitable:
            best = BestPerformingProperty(
                address=profitable[0].property_address,
                roi=profitable[0].roi,
            )

        return PortfolioSummary(
            total_invested=investor.total_invested,
            current_value=investor.current_portfolio_value,
            realized_gains=investor.realized_gains,
            unrealized_gains=investor.unrealized_gains,
            total_roi=investor.total_roi,
            active_properties=investor.active_properties,
            sold_properties=investor.sold_properties,
            average_investment=(
                investor.total_invested / len(investments) if investments else 0.0
            ),
            best_performing_property=best,
        )

    # ========================================================================
    # STATISTICS
    # ========================================================================

    def investor_stats(self, user: UserContext) -> InvestorStats:
        investors = self._investors.list_for(user)
        active = [i for i in investors if i.status == InvestorStatus.ACTIVE]
        return InvestorStats(
            total_investors=len(investors),
            active_investors=len(active),
            total_capital_invested=sum(i.total_invested for i in investors),
            total_portfolio_value=sum(i.current_portfolio_value for i in investors),
            average_roi=(
                sum(i.total_roi for i in active) / len(active) if active else 0.0
            ),
            total_active_properties=sum(i.active_properties for i in investors),
            total_sold_properties=sum(i.sold_properties for i in investors),
        )

    def top_performing_investors(self, limit: Optional[int] = None) -> list[Investor]:
        """Active investors with money in, best total ROI first."""
        if limit is None:
            limit = get_settings().app.top_performers_limit
        candidates = [
            i for i in self._investors.list_all()
            if i.status == InvestorStatus.ACTIVE and i.total_invested > 0
        ]
        candidates.sort(key=lambda i: i.total_roi, reverse=True)
        return candidates[:limit]
