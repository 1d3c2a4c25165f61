"""
Properties Package

Ownership history, re-listing and buyer matching.
"""

from estate_office.properties.matching import PropertyMatch, PropertyMatcher, score_property
from estate_office.properties.ownership import (
    CurrentOwner,
    OwnershipService,
    RelistCheck,
    ownership_duration_days,
    sales_count,
)

__all__ = [
    "CurrentOwner",
    "OwnershipService",
    "PropertyMatch",
    "PropertyMatcher",
    "RelistCheck",
    "ownership_duration_days",
    "sales_count",
    "score_property",
]
