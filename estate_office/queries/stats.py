"""
Dashboard Statistics

DESIGN DECISION: Statistics are computed from the records they are
given. Callers decide visibility by passing list_for(user) results,
so the same function serves an agent's dashboard and the admin view.

Rates are percentages and are 0 when there is nothing to divide by.
"""

from pydantic import BaseModel, Field

from estate_office.accounting.common import percentage
from estate_office.deals.pipeline import stage_stats, status_stats
from estate_office.models.crm import (
    Contact,
    ContactStatus,
    Farm,
    Lead,
    LeadIntent,
    LeadPriority,
    LeadStatus,
)
from estate_office.models.deal import Deal, DealStatus


class LeadStats(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_intent: dict[str, int] = Field(default_factory=dict)
    by_source: dict[str, int] = Field(default_factory=dict)
    average_score: float = 0.0
    conversion_rate: float = 0.0
    average_hours_to_conversion: float = 0.0


class DealPipelineSummary(BaseModel):
    total_deals: int = 0
    by_stage: dict[str, int] = Field(default_factory=dict)
    by_status: dict[str, int] = Field(default_factory=dict)
    active_pipeline_value: float = 0.0
    completed_value: float = 0.0
    total_commission: float = 0.0
    total_collected: float = 0.0
    outstanding_balance: float = 0.0


class FarmAnalytics(BaseModel):
    total_contacts: int = 0
    active_prospects: int = 0
    converted_prospects: int = 0
    conversion_rate: float = 0.0
    total_revenue: float = 0.0
    average_revenue_per_contact: float = 0.0


def lead_statistics(leads: list[Lead]) -> LeadStats:
    """
    Lead funnel counts.

    A lead counts as converted only when its status is converted and
    it carries a conversion time; hours to conversion run from
    created_at to converted_at.
    """
    stats = LeadStats(
        total=len(leads),
        by_status={s.value: 0 for s in LeadStatus},
        by_priority={p.value: 0 for p in LeadPriority},
        by_intent={i.value: 0 for i in LeadIntent},
    )
    if not leads:
        return stats

    converted = 0
    conversion_hours = 0.0
    for lead in leads:
        stats.by_status[lead.status.value] += 1
        stats.by_priority[lead.priority.value] += 1
        stats.by_intent[lead.intent.value] += 1
        stats.by_source[lead.source] = stats.by_source.get(lead.source, 0) + 1

        if lead.status == LeadStatus.CONVERTED and lead.converted_at:
            converted += 1
            conversion_hours += (lead.converted_at - lead.created_at).total_seconds() / 3600

    stats.average_score = sum(lead.qualification_score for lead in leads) / len(leads)
    stats.conversion_rate = percentage(converted, len(leads))
    stats.average_hours_to_conversion = conversion_hours / converted if converted else 0.0
    return stats


def deal_pipeline_summary(deals: list[Deal]) -> DealPipelineSummary:
    """Counts and money across the deal pipeline. Cancelled deals carry no value."""
    active = [d for d in deals if d.lifecycle.status in (DealStatus.ACTIVE, DealStatus.ON_HOLD)]
    completed = [d for d in deals if d.lifecycle.status == DealStatus.COMPLETED]
    live = active + completed

    return DealPipelineSummary(
        total_deals=len(deals),
        by_stage=stage_stats(deals),
        by_status=status_stats(deals),
        active_pipeline_value=sum(d.financial.agreed_price for d in active),
        completed_value=sum(d.financial.agreed_price for d in completed),
        total_commission=sum(d.financial.commission.total for d in completed),
        total_collected=sum(d.financial.total_paid for d in live),
        outstanding_balance=sum(d.financial.balance_remaining or 0.0 for d in active),
    )


def farm_analytics(farm: Farm, contacts: list[Contact]) -> FarmAnalytics:
    """How a farm's contacts are converting and what they have earned."""
    members = set(farm.contact_ids)
    farm_contacts = [c for c in contacts if c.id in members]
    total = len(farm_contacts)
    converted = sum(1 for c in farm_contacts if c.total_transactions > 0)
    revenue = sum(c.total_commission_earned for c in farm_contacts)

    return FarmAnalytics(
        total_contacts=total,
        active_prospects=sum(1 for c in farm_contacts if c.status == ContactStatus.ACTIVE),
        converted_prospects=converted,
        conversion_rate=percentage(converted, total),
        total_revenue=revenue,
        average_revenue_per_contact=revenue / total if total else 0.0,
    )
