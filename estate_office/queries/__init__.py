"""Dashboard statistics over leads, deals and farms."""

from estate_office.queries.stats import (
    DealPipelineSummary,
    FarmAnalytics,
    LeadStats,
    deal_pipeline_summary,
    farm_analytics,
    lead_statistics,
)

__all__ = [
    "DealPipelineSummary",
    "FarmAnalytics",
    "LeadStats",
    "deal_pipeline_summary",
    "farm_analytics",
    "lead_statistics",
]
