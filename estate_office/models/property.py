"""
Property Models for Estate Office

A property is the central asset. Ownership is tracked as a history of
owner records so a property can be sold, bought back by the agency and
re-listed without losing its past.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from estate_office.models.base import CamelModel, StoredRecord, Timestamp


# ============================================================================
# ENUMS
# ============================================================================

class PropertyStatus(str, Enum):
    """Listing status of a property."""
    AVAILABLE = "available"
    UNDER_CONTRACT = "under-contract"
    SOLD = "sold"
    RENTED = "rented"
    OFF_MARKET = "off-market"


class PropertyType(str, Enum):
    """Kinds of property the agency lists."""
    HOUSE = "house"
    APARTMENT = "apartment"
    PLOT = "plot"
    COMMERCIAL = "commercial"
    LAND = "land"
    INDUSTRIAL = "industrial"


class OwnerType(str, Enum):
    """Who holds a property."""
    CLIENT = "client"
    AGENCY = "agency"
    INVESTOR = "investor"
    EXTERNAL = "external"


class SellCycleStatus(str, Enum):
    """Stages of a sale listing."""
    LISTED = "listed"
    OFFER_RECEIVED = "offer-received"
    NEGOTIATION = "negotiation"
    UNDER_CONTRACT = "under-contract"
    SOLD = "sold"
    CANCELLED = "cancelled"


AGENCY_OWNER_ID = "AGENCY"


# ============================================================================
# OWNERSHIP
# ============================================================================

class OwnershipRecord(CamelModel):
    """One owner's tenure of a property."""

    owner_id: str = Field(..., min_length=1)
    owner_name: str = Field(default="")
    acquired_date: Timestamp
    sold_date: Optional[Timestamp] = None
    transaction_id: Optional[str] = None
    sale_price: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self.sold_date is None


class InvestorShare(CamelModel):
    """An investor's slice of a jointly held property."""

    investor_id: str = Field(..., min_length=1)
    investor_name: str = Field(default="")
    share_percentage: float = Field(..., gt=0, le=100)
    notes: Optional[str] = None


# ============================================================================
# PROPERTY
# ============================================================================

class Property(StoredRecord):
    """A listed property."""

    title: Optional[str] = Field(default=None, description="Listing title")
    address: str = Field(..., min_length=1, description="Street address")
    city: Optional[str] = None
    area: Optional[str] = None
    block: Optional[str] = None

    property_type: PropertyType = Field(default=PropertyType.HOUSE)
    status: PropertyStatus = Field(default=PropertyStatus.AVAILABLE)
    price: float = Field(default=0.0, ge=0, description="List price")
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: Optional[int] = Field(default=None, ge=0)
    area_size: Optional[float] = Field(default=None, ge=0)
    features: list[str] = Field(default_factory=list)

    # Ownership of the record (who may see it)
    created_by: str = Field(..., min_length=1)
    shared_with: list[str] = Field(default_factory=list)
    agent_id: Optional[str] = None
    agent_name: Optional[str] = None

    # Sale results
    commission_earned: float = Field(default=0.0, ge=0)
    sold_date: Optional[Timestamp] = None
    final_sale_price: Optional[float] = Field(default=None, ge=0)

    # Ownership of the asset
    current_owner_id: Optional[str] = None
    current_owner_name: Optional[str] = None
    current_owner_type: Optional[OwnerType] = None
    ownership_history: list[OwnershipRecord] = Field(default_factory=list)
    investor_shares: Optional[list[InvestorShare]] = None

    # Archive
    is_archived: bool = Field(default=False)
    archived_at: Optional[Timestamp] = None

    @model_validator(mode='after')
    def validate_investor_shares(self) -> 'Property':
        if self.investor_shares:
            total = sum(share.share_percentage for share in self.investor_shares)
            if abs(total - 100) > 0.01:
                raise ValueError(
                    f"Investor shares must total 100% (currently {total:.1f}%)"
                )
        return self

    @property
    def display_title(self) -> str:
        return self.title or self.address

    @property
    def location_text(self) -> str:
        """Address parts joined for substring matching."""
        parts = [self.address, self.block, self.area, self.city]
        return ", ".join(part for part in parts if part)


class SellCycle(StoredRecord):
    """A property put up for sale at an asking price."""

    property_id: str = Field(..., min_length=1)
    agent_id: str = Field(..., min_length=1)
    asking_price: float = Field(default=0.0, ge=0)
    status: SellCycleStatus = Field(default=SellCycleStatus.LISTED)
    linked_deal_id: Optional[str] = None
    sold_price: Optional[float] = Field(default=None, ge=0)
    shared_with: list[str] = Field(default_factory=list)

    @property
    def is_active(self) -> bool:
        return self.status not in (SellCycleStatus.SOLD, SellCycleStatus.CANCELLED)
