"""
Multi-Agent Commissions

A deal's commission can be shared by any number of agents, internal
(users) or external (broker contacts), with the agency keeping the
rest. Each agent's amount is always total x percentage / 100, so
amounts are recomputed whenever the total or a percentage changes.

Older deals only carry the fixed primary/secondary/agency split;
migrate_legacy_commission turns that split into agent entries.
"""

from typing import NamedTuple, Optional

import structlog

from estate_office.audit.logger import AuditLogger
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import utcnow
from estate_office.models.deal import AgentKind, CommissionAgent, CommissionStatus, Deal
from estate_office.repositories import DealRepository

logger = structlog.get_logger(__name__)

SPLIT_TOLERANCE = 0.01


class SplitCheck(NamedTuple):
    valid: bool
    message: str = ""


def calculate_commission_amount(total_commission: float, percentage: float) -> float:
    return total_commission * percentage / 100


def validate_commission_splits(
    agents: list[CommissionAgent],
    agency_percentage: float,
) -> SplitCheck:
    """Agent percentages plus the agency's must come to 100%."""
    total = sum(agent.percentage for agent in agents) + agency_percentage
    if abs(total - 100) > SPLIT_TOLERANCE:
        return SplitCheck(False, f"Commission splits must total 100% (currently {total:.1f}%)")
    if agency_percentage < 0 or agency_percentage > 100:
        return SplitCheck(False, "Agency percentage must be between 0% and 100%")
    return SplitCheck(True)


class CommissionBook:
    """Adds, removes, re-weights and pays commission agents on deals."""

    def __init__(self, deals: DealRepository, audit_logger: Optional[AuditLogger] = None):
        self._deals = deals
        self._audit = audit_logger

    def _find_agent(self, deal: Deal, agent_id: str) -> CommissionAgent:
        for agent in deal.financial.commission.agents:
            if agent.id == agent_id:
                return agent
        raise ValueError(f"Agent {agent_id} not found")

    def add_agent(
        self,
        deal_id: str,
        agent_id: str,
        name: str,
        percentage: float,
        agent_type: AgentKind = AgentKind.INTERNAL,
        notes: Optional[str] = None,
    ) -> Deal:
        """
        Add an agent to the deal's commission.

        Raises:
            NotFoundError: If the deal does not exist
            ValueError: If the agent is already on the commission
        """
        deal = self._deals.require(deal_id)
        commission = deal.financial.commission
        if any(a.id == agent_id for a in commission.agents):
            raise ValueError("Agent is already added to commission")

        commission.agents.append(CommissionAgent(
            id=agent_id,
            agent_type=agent_type,
            name=name,
            percentage=percentage,
            amount=calculate_commission_amount(commission.total, percentage),
            notes=notes,
        ))
        self._deals.save(deal)
        self._log_agent_change(deal_id, agent_id, added=True, percentage=percentage)
        return deal

    def remove_agent(self, deal_id: str, agent_id: str) -> Deal:
        deal = self._deals.require(deal_id)
        self._find_agent(deal, agent_id)
        commission = deal.financial.commission
        commission.agents = [a for a in commission.agents if a.id != agent_id]
        self._deals.save(deal)
        self._log_agent_change(deal_id, agent_id, added=False)
        return deal

    def update_agent_percentage(self, deal_id: str, agent_id: str, percentage: float) -> Deal:
        deal = self._deals.require(deal_id)
        agent = self._find_agent(deal, agent_id)
        agent.percentage = percentage
        agent.amount = calculate_commission_amount(deal.financial.commission.total, percentage)
        self._deals.save(deal)
        return deal

    def recalculate_amounts(self, deal_id: str) -> Deal:
        """Recompute every agent amount and the agency amount from the total."""
        deal = self._deals.require(deal_id)
        commission = deal.financial.commission
        for agent in commission.agents:
            agent.amount = calculate_commission_amount(commission.total, agent.percentage)
        agency = commission.split.agency
        agency.amount = calculate_commission_amount(commission.total, agency.percentage)
        self._deals.save(deal)
        return deal

    def mark_agent_paid(self, deal_id: str, agent_id: str) -> Deal:
        deal = self._deals.require(deal_id)
        agent = self._find_agent(deal, agent_id)
        agent.status = CommissionStatus.PAID
        agent.paid_date = utcnow()
        self._deals.save(deal)

        logger.info("commission_paid", deal_id=deal_id, agent_id=agent_id, amount=agent.amount)
        if self._audit:
            self._audit.log(AuditEventBuilder.commission_paid(
                deal_id=deal_id,
                agent_id=agent_id,
                amount=agent.amount,
            ))
        return deal

    def migrate_legacy_commission(self, deal_id: str) -> Deal:
        """
        Build agent entries from the fixed split when a deal has none.

        The secondary agent is only carried over when the deal names one.
        """
        deal = self._deals.require(deal_id)
        commission = deal.financial.commission
        if commission.agents:
            return deal

        split = commission.split
        migrated = []
        if split.primary_agent is not None:
            primary = deal.agents.primary
            migrated.append(CommissionAgent(
                id=primary.id,
                agent_type=AgentKind.INTERNAL,
                name=primary.name,
                percentage=split.primary_agent.percentage,
                amount=split.primary_agent.amount,
                status=split.primary_agent.status,
                paid_date=split.primary_agent.paid_date,
            ))
        secondary = deal.agents.secondary
        if split.secondary_agent is not None and secondary is not None:
            migrated.append(CommissionAgent(
                id=secondary.id,
                agent_type=AgentKind.INTERNAL,
                name=secondary.name,
                percentage=split.secondary_agent.percentage,
                amount=split.secondary_agent.amount,
                status=split.secondary_agent.status,
                paid_date=split.secondary_agent.paid_date,
            ))

        commission.agents = migrated
        self._deals.save(deal)
        logger.info("legacy_commission_migrated", deal_id=deal_id, agents=len(migrated))
        return deal

    def _log_agent_change(
        self,
        deal_id: str,
        agent_id: str,
        added: bool,
        percentage: Optional[float] = None,
    ) -> None:
        if self._audit:
            self._audit.log(AuditEventBuilder.commission_agent_changed(
                deal_id=deal_id,
                agent_id=agent_id,
                added=added,
                percentage=percentage,
            ))
