"""
CRM Models for Estate Office

Leads, contacts, buyer requirements and farms (groups of prospects
an agent works over time).
"""

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from estate_office.models.base import CamelModel, StoredRecord, Timestamp, utcnow
from estate_office.models.property import PropertyType


# ============================================================================
# LEADS
# ============================================================================

class LeadStatus(str, Enum):
    NEW = "new"
    QUALIFYING = "qualifying"
    QUALIFIED = "qualified"
    CONVERTED = "converted"
    LOST = "lost"
    ARCHIVED = "archived"


class LeadPriority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class LeadIntent(str, Enum):
    BUYING = "buying"
    SELLING = "selling"
    RENTING = "renting"
    LEASING_OUT = "leasing-out"
    INVESTING = "investing"
    UNKNOWN = "unknown"


class LeadInteraction(CamelModel):
    """A touchpoint with a lead."""

    interaction_type: str = Field(
        ...,
        pattern="^(call|sms|whatsapp|email|meeting|note)$",
        alias="type",
    )
    summary: str = Field(..., min_length=1, max_length=1000)
    occurred_at: Timestamp = Field(default_factory=utcnow)
    agent_id: Optional[str] = None


class Lead(StoredRecord):
    """An inbound enquiry not yet turned into a contact or deal."""

    name: str = Field(..., min_length=1)
    phone: str = Field(default="")
    email: Optional[str] = None
    source: str = Field(default="other", description="Where the lead came from")
    intent: LeadIntent = Field(default=LeadIntent.UNKNOWN)
    status: LeadStatus = Field(default=LeadStatus.NEW)
    priority: LeadPriority = Field(default=LeadPriority.MEDIUM)
    qualification_score: int = Field(default=0, ge=0, le=100)

    agent_id: str = Field(..., min_length=1)
    agent_name: Optional[str] = None
    created_by: Optional[str] = None

    interactions: list[LeadInteraction] = Field(default_factory=list)
    notes: str = Field(default="")
    converted_at: Optional[Timestamp] = None
    lost_reason: Optional[str] = None


# ============================================================================
# CONTACTS
# ============================================================================

class ContactType(str, Enum):
    CLIENT = "client"
    PROSPECT = "prospect"
    INVESTOR = "investor"
    VENDOR = "vendor"
    EXTERNAL_BROKER = "external-broker"


class ContactStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    ARCHIVED = "archived"


class Contact(StoredRecord):
    """A person or company the agency deals with."""

    name: str = Field(..., min_length=1)
    phone: Optional[str] = None
    email: Optional[str] = None
    contact_type: ContactType = Field(default=ContactType.CLIENT, alias="type")
    status: ContactStatus = Field(default=ContactStatus.ACTIVE)
    agent_id: str = Field(..., min_length=1)
    tags: list[str] = Field(default_factory=list)
    total_transactions: int = Field(default=0, ge=0)
    total_commission_earned: float = Field(default=0.0, ge=0)
    notes: Optional[str] = None


# ============================================================================
# BUYER REQUIREMENTS
# ============================================================================

class RequirementStatus(str, Enum):
    ACTIVE = "active"
    MATCHED = "matched"
    ON_HOLD = "on-hold"
    CLOSED = "closed"


class BuyerRequirement(StoredRecord):
    """What a buyer is looking for; drives property matching."""

    buyer_id: Optional[str] = None
    buyer_name: str = Field(default="")
    agent_id: str = Field(..., min_length=1)

    min_budget: float = Field(default=0.0, ge=0)
    max_budget: float = Field(..., ge=0)
    property_types: list[PropertyType] = Field(default_factory=list)
    min_bedrooms: int = Field(default=0, ge=0)
    max_bedrooms: Optional[int] = Field(default=None, ge=0)
    min_bathrooms: Optional[int] = Field(default=None, ge=0)
    preferred_locations: list[str] = Field(default_factory=list)
    must_have_features: list[str] = Field(default_factory=list)

    status: RequirementStatus = Field(default=RequirementStatus.ACTIVE)
    notes: Optional[str] = None

    @model_validator(mode='after')
    def validate_ranges(self) -> 'BuyerRequirement':
        if self.max_budget < self.min_budget:
            raise ValueError("Maximum budget cannot be below minimum budget")
        if self.max_bedrooms is not None and self.max_bedrooms < self.min_bedrooms:
            raise ValueError("Maximum bedrooms cannot be below minimum bedrooms")
        return self


# ============================================================================
# FARMS
# ============================================================================

class FarmType(str, Enum):
    GEOGRAPHIC = "geographic"
    DEMOGRAPHIC = "demographic"
    CUSTOM = "custom"


class Farm(StoredRecord):
    """A group of contacts an agent prospects as one market."""

    name: str = Field(..., min_length=1)
    farm_type: FarmType = Field(default=FarmType.CUSTOM, alias="type")
    criteria: str = Field(default="")
    contact_ids: list[str] = Field(default_factory=list)
    agent_id: str = Field(..., min_length=1)
    active_prospects: int = Field(default=0, ge=0)
    converted_prospects: int = Field(default=0, ge=0)
    total_interactions: int = Field(default=0, ge=0)
    tags: list[str] = Field(default_factory=list)
