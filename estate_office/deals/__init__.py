"""
Deals Package

The deal pipeline and multi-agent commissions.
"""

from estate_office.deals.commissions import (
    CommissionBook,
    SplitCheck,
    calculate_commission_amount,
    validate_commission_splits,
)
from estate_office.deals.pipeline import DealPipeline, stage_key, stage_stats, status_stats

__all__ = [
    "CommissionBook",
    "DealPipeline",
    "SplitCheck",
    "calculate_commission_amount",
    "stage_key",
    "stage_stats",
    "status_stats",
    "validate_commission_splits",
]
