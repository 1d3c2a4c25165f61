"""
Investment Models for Estate Office

Investors syndicate property purchases. Each investor's stake in a
property is an InvestorInvestment; the investor record carries the
portfolio totals recalculated from those stakes.

Land parcels are tracked separately through an acquisition pipeline
with a weighted feasibility score.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from estate_office.models.base import CamelModel, IsoDate, StoredRecord


# ============================================================================
# INVESTORS
# ============================================================================

class InvestorType(str, Enum):
    INDIVIDUAL = "individual"
    COMPANY = "company"
    INSTITUTIONAL = "institutional"


class RiskProfile(str, Enum):
    CONSERVATIVE = "conservative"
    MODERATE = "moderate"
    AGGRESSIVE = "aggressive"


class InvestorStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class InvestmentStatus(str, Enum):
    ACTIVE = "active"
    SOLD = "sold"


class Investor(StoredRecord):
    """An investor and their portfolio totals."""

    name: str = Field(..., min_length=1)
    phone: str = Field(default="")
    email: Optional[str] = None
    cnic: Optional[str] = Field(default=None, description="National identity card number")
    address: Optional[str] = None
    city: Optional[str] = None

    investor_type: InvestorType = Field(default=InvestorType.INDIVIDUAL)
    risk_profile: RiskProfile = Field(default=RiskProfile.MODERATE)
    preferred_locations: list[str] = Field(default_factory=list)

    managing_agent_id: str = Field(..., min_length=1)
    managing_agent_name: Optional[str] = None
    status: InvestorStatus = Field(default=InvestorStatus.ACTIVE)
    joined_date: Optional[IsoDate] = None
    notes: Optional[str] = None

    # Portfolio totals, derived from investments
    total_invested: float = Field(default=0.0)
    current_portfolio_value: float = Field(default=0.0)
    realized_gains: float = Field(default=0.0)
    unrealized_gains: float = Field(default=0.0)
    total_roi: float = Field(default=0.0, alias="totalROI")
    active_properties: int = Field(default=0, ge=0)
    sold_properties: int = Field(default=0, ge=0)


class InvestorInvestment(StoredRecord):
    """One investor's share in one property."""

    investor_id: str = Field(..., min_length=1)
    property_id: str = Field(..., min_length=1)
    property_address: str = Field(default="")

    share_percentage: float = Field(..., gt=0, le=100)
    investment_amount: float = Field(..., ge=0)
    investment_date: Optional[IsoDate] = None
    acquisition_price: float = Field(..., ge=0)

    status: InvestmentStatus = Field(default=InvestmentStatus.ACTIVE)
    current_value: Optional[float] = Field(default=None, ge=0)

    rental_income: float = Field(default=0.0, ge=0)
    appreciation_value: float = Field(default=0.0)
    unrealized_profit: float = Field(default=0.0)
    realized_profit: Optional[float] = None
    roi: float = Field(default=0.0)

    sold_date: Optional[IsoDate] = None
    sold_price: Optional[float] = Field(default=None, ge=0)
    purchase_cycle_id: Optional[str] = None
    sell_cycle_id: Optional[str] = None
    notes: Optional[str] = None

    @property
    def share_fraction(self) -> float:
        return self.share_percentage / 100

    @property
    def current_share_value(self) -> float:
        """Share-weighted current value, falling back to acquisition price."""
        return (self.current_value or self.acquisition_price) * self.share_fraction


# ============================================================================
# LAND PARCELS
# ============================================================================

class LandStage(str, Enum):
    SCOUTING = "scouting"
    INITIAL_REVIEW = "initial-review"
    DETAILED_ANALYSIS = "detailed-analysis"
    NEGOTIATION = "negotiation"
    DUE_DILIGENCE = "due-diligence"
    FINALIZATION = "finalization"
    ACQUIRED = "acquired"
    REJECTED = "rejected"


class LegalStatus(str, Enum):
    PENDING = "pending"
    VERIFIED = "verified"
    REJECTED = "rejected"
    UNDER_REVIEW = "under-review"
    DISPUTED = "disputed"


class LandLocation(CamelModel):
    address: str = Field(default="")
    city: str = Field(default="")
    state: Optional[str] = None
    country: Optional[str] = None


class LandArea(CamelModel):
    total_area: float = Field(default=0.0, ge=0)
    unit: str = Field(default="sq-yards")
    usable_area: Optional[float] = Field(default=None, ge=0)


class LandLegal(CamelModel):
    status: LegalStatus = Field(default=LegalStatus.PENDING)
    ownership_type: Optional[str] = None
    title_deed_status: Optional[str] = None


class LandFinancial(CamelModel):
    asking_price: float = Field(default=0.0, ge=0)
    price_per_unit: float = Field(default=0.0, ge=0)
    valuation_amount: Optional[float] = Field(default=None, ge=0)
    market_value: Optional[float] = Field(default=None, ge=0)
    total_cost: float = Field(default=0.0, ge=0)


class FeasibilityFactors(CamelModel):
    """Factor scores, each 0..100."""

    location: float = Field(default=0, ge=0, le=100)
    accessibility: float = Field(default=0, ge=0, le=100)
    legal_clearance: float = Field(default=0, ge=0, le=100)
    market_potential: float = Field(default=0, ge=0, le=100)
    infrastructure: float = Field(default=0, ge=0, le=100)
    price_value: float = Field(default=0, ge=0, le=100)


class LandFeasibility(CamelModel):
    score: float = Field(default=0, ge=0, le=100)
    factors: FeasibilityFactors = Field(default_factory=FeasibilityFactors)
    recommendation: Optional[str] = None


class LandProcess(CamelModel):
    stage: LandStage = Field(default=LandStage.SCOUTING)
    priority: str = Field(default="medium")


class LandParcel(StoredRecord):
    """A parcel of land being evaluated for acquisition."""

    parcel_name: str = Field(..., min_length=1)
    description: Optional[str] = None
    location: LandLocation = Field(default_factory=LandLocation)
    area: LandArea = Field(default_factory=LandArea)
    legal: LandLegal = Field(default_factory=LandLegal)
    financial: LandFinancial = Field(default_factory=LandFinancial)
    feasibility: LandFeasibility = Field(default_factory=LandFeasibility)
    process: LandProcess = Field(default_factory=LandProcess)

    tags: list[str] = Field(default_factory=list)
    notes: Optional[str] = None
    created_by: str = Field(..., min_length=1)
    assigned_to: list[str] = Field(default_factory=list)


# ============================================================================
# PORTFOLIO AND PIPELINE SUMMARIES (derived, never stored)
# ============================================================================

class BestPerformingProperty(BaseModel):
    address: str
    roi: float


class PortfolioSummary(BaseModel):
    total_invested: float = 0.0
    current_value: float = 0.0
    realized_gains: float = 0.0
    unrealized_gains: float = 0.0
    total_roi: float = 0.0
    active_properties: int = 0
    sold_properties: int = 0
    average_investment: float = 0.0
    best_performing_property: Optional[BestPerformingProperty] = None


class InvestorStats(BaseModel):
    total_investors: int = 0
    active_investors: int = 0
    total_capital_invested: float = 0.0
    total_portfolio_value: float = 0.0
    average_roi: float = 0.0
    total_active_properties: int = 0
    total_sold_properties: int = 0


class LandFinancialTotals(BaseModel):
    total_investment: float = 0.0
    average_price_per_unit: float = 0.0
    estimated_total_value: float = 0.0


class LandAcquisitionStats(BaseModel):
    total_parcels: int = 0
    parcels_under_review: int = 0
    feasibility_passed: int = 0
    deals_closed: int = 0
    by_stage: dict[str, int] = Field(default_factory=dict)
    by_legal_status: dict[str, int] = Field(default_factory=dict)
    by_feasibility_score: dict[str, int] = Field(default_factory=dict)
    financial: LandFinancialTotals = Field(default_factory=LandFinancialTotals)
