"""
Land acquisition scoring and pipeline statistics.

The feasibility score is a weighted sum of six 0..100 factor scores,
rounded half up. A parcel "passes" feasibility at 60 or more.
"""

import math

from estate_office.models.base import UserContext
from estate_office.models.investment import (
    FeasibilityFactors,
    LandAcquisitionStats,
    LandFinancialTotals,
    LandStage,
    LegalStatus,
)
from estate_office.repositories import LandParcelRepository

FEASIBILITY_WEIGHTS = {
    "location": 0.25,
    "accessibility": 0.15,
    "legal_clearance": 0.20,
    "market_potential": 0.20,
    "infrastructure": 0.10,
    "price_value": 0.10,
}

FEASIBILITY_PASS_SCORE = 60

REVIEW_STAGES = frozenset({
    LandStage.INITIAL_REVIEW,
    LandStage.DETAILED_ANALYSIS,
    LandStage.DUE_DILIGENCE,
})


def calculate_feasibility_score(factors: FeasibilityFactors) -> int:
    weighted = sum(
        getattr(factors, name) * weight
        for name, weight in FEASIBILITY_WEIGHTS.items()
    )
    return math.floor(weighted + 0.5)


def _feasibility_band(score: float) -> str:
    if score >= 80:
        return "excellent"
    if score >= 60:
        return "good"
    if score >= 40:
        return "fair"
    return "poor"


def land_acquisition_stats(parcels: LandParcelRepository, user: UserContext) -> LandAcquisitionStats:
    """Pipeline counts and financial totals over the parcels a user can see."""
    visible = parcels.list_for(user)

    by_stage = {stage.value: 0 for stage in LandStage}
    by_legal = {status.value: 0 for status in LegalStatus}
    bands = {"excellent": 0, "good": 0, "fair": 0, "poor": 0}
    for parcel in visible:
        by_stage[parcel.process.stage.value] += 1
        by_legal[parcel.legal.status.value] += 1
        bands[_feasibility_band(parcel.feasibility.score)] += 1

    count = len(visible)
    financial = LandFinancialTotals(
        total_investment=sum(p.financial.total_cost for p in visible),
        average_price_per_unit=(
            sum(p.financial.price_per_unit for p in visible) / count if count else 0.0
        ),
        estimated_total_value=sum(
            p.financial.market_value or p.financial.asking_price for p in visible
        ),
    )

    return LandAcquisitionStats(
        total_parcels=count,
        parcels_under_review=sum(1 for p in visible if p.process.stage in REVIEW_STAGES),
        feasibility_passed=sum(
            1 for p in visible if p.feasibility.score >= FEASIBILITY_PASS_SCORE
        ),
        deals_closed=by_stage[LandStage.ACQUIRED.value],
        by_stage=by_stage,
        by_legal_status=by_legal,
        by_feasibility_score=bands,
        financial=financial,
    )
