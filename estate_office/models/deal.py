"""
Deal Models for Estate Office

A deal follows an accepted offer through to handover. It carries the
agreed price, the commission and how it is split between agents and
the agency, the buyer's payment schedule and the stage timeline.
"""

from enum import Enum
from typing import Optional

from pydantic import Field, model_validator

from estate_office.models.base import CamelModel, IsoDate, StoredRecord, Timestamp, utcnow


# ============================================================================
# ENUMS
# ============================================================================

class DealStage(str, Enum):
    """Pipeline stages, in the order a deal moves through them."""
    OFFER_ACCEPTED = "offer-accepted"
    AGREEMENT_SIGNING = "agreement-signing"
    DOCUMENTATION = "documentation"
    PAYMENT_PROCESSING = "payment-processing"
    HANDOVER_PREP = "handover-prep"
    TRANSFER_REGISTRATION = "transfer-registration"
    FINAL_HANDOVER = "final-handover"
    COMPLETED = "completed"


DEAL_STAGE_ORDER: list[DealStage] = list(DealStage)


class DealStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class CommissionStatus(str, Enum):
    PENDING = "pending"
    PENDING_APPROVAL = "pending-approval"
    APPROVED = "approved"
    PAID = "paid"
    CANCELLED = "cancelled"
    ON_HOLD = "on-hold"


class AgentKind(str, Enum):
    """Internal agents are users; external ones are broker contacts."""
    INTERNAL = "internal"
    EXTERNAL = "external"


class DealPaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    OVERDUE = "overdue"
    CANCELLED = "cancelled"


# ============================================================================
# PARTIES & COMMISSION
# ============================================================================

class DealParty(CamelModel):
    """A named participant: agent, buyer or seller."""

    id: str = Field(..., min_length=1)
    name: str = Field(default="")


class DealAgents(CamelModel):
    primary: DealParty
    secondary: Optional[DealParty] = None


class DealParties(CamelModel):
    buyer: DealParty
    seller: DealParty


class SplitShare(CamelModel):
    """One party's slice of the commission."""

    percentage: float = Field(default=0.0, ge=0, le=100)
    amount: float = Field(default=0.0, ge=0)
    status: CommissionStatus = Field(default=CommissionStatus.PENDING)
    paid_date: Optional[Timestamp] = None


class CommissionSplit(CamelModel):
    """Legacy fixed split between primary agent, secondary agent and agency."""

    primary_agent: Optional[SplitShare] = None
    secondary_agent: Optional[SplitShare] = None
    agency: SplitShare = Field(default_factory=SplitShare)


class CommissionAgent(CamelModel):
    """An agent or external broker sharing in a deal's commission."""

    id: str = Field(..., min_length=1)
    agent_type: AgentKind = Field(default=AgentKind.INTERNAL, alias="type")
    name: str = Field(default="")
    percentage: float = Field(..., ge=0, le=100)
    amount: float = Field(default=0.0, ge=0)
    status: CommissionStatus = Field(default=CommissionStatus.PENDING)
    paid_date: Optional[Timestamp] = None
    notes: Optional[str] = None


class DealCommission(CamelModel):
    total: float = Field(default=0.0, ge=0)
    rate: float = Field(default=0.0, ge=0, description="Commission rate in percent")
    split: CommissionSplit = Field(default_factory=CommissionSplit)
    agents: list[CommissionAgent] = Field(default_factory=list)


class DealPayment(CamelModel):
    """One instalment of the buyer's payment schedule."""

    id: str = Field(..., min_length=1)
    description: str = Field(default="")
    amount: float = Field(..., gt=0)
    due_date: Optional[IsoDate] = None
    status: DealPaymentStatus = Field(default=DealPaymentStatus.PENDING)
    paid_date: Optional[Timestamp] = None
    payment_method: Optional[str] = None
    reference_number: Optional[str] = None
    receipt_number: Optional[str] = None
    recorded_by: Optional[str] = None
    notes: Optional[str] = None


class DealFinancial(CamelModel):
    agreed_price: float = Field(..., ge=0)
    commission: DealCommission = Field(default_factory=DealCommission)
    payments: list[DealPayment] = Field(default_factory=list)
    total_paid: float = Field(default=0.0, ge=0)
    balance_remaining: Optional[float] = None

    @model_validator(mode='after')
    def default_balance(self) -> 'DealFinancial':
        if self.balance_remaining is None:
            self.balance_remaining = self.agreed_price - self.total_paid
        return self


# ============================================================================
# LIFECYCLE
# ============================================================================

class StageProgress(CamelModel):
    status: str = Field(
        default="pending",
        pattern="^(pending|in-progress|completed)$"
    )
    started_at: Optional[Timestamp] = None
    completed_at: Optional[Timestamp] = None
    completion_percentage: int = Field(default=0, ge=0, le=100)


class DealTimeline(CamelModel):
    offer_accepted_date: Optional[IsoDate] = None
    expected_closing_date: Optional[IsoDate] = None
    actual_closing_date: Optional[IsoDate] = None
    stages: dict[str, StageProgress] = Field(default_factory=dict)


class DealLifecycle(CamelModel):
    stage: DealStage = Field(default=DealStage.OFFER_ACCEPTED)
    status: DealStatus = Field(default=DealStatus.ACTIVE)
    timeline: DealTimeline = Field(default_factory=DealTimeline)


class DealNote(CamelModel):
    id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)
    created_by: str = Field(default="")
    created_by_name: Optional[str] = None
    created_at: Timestamp = Field(default_factory=utcnow)


# ============================================================================
# DEAL
# ============================================================================

class Deal(StoredRecord):
    """A property transaction being driven to completion."""

    deal_number: str = Field(..., min_length=1)
    property_id: Optional[str] = None
    sell_cycle_id: Optional[str] = None

    agents: DealAgents
    parties: DealParties
    financial: DealFinancial
    lifecycle: DealLifecycle = Field(default_factory=DealLifecycle)

    notes: list[DealNote] = Field(default_factory=list)
    completed_at: Optional[Timestamp] = None
    last_action: Optional[str] = None
    created_by: Optional[str] = None

    @property
    def closing_date(self):
        """
        The date a completed deal is reported under.

        First of: completion time, actual closing, expected closing,
        offer acceptance.
        """
        if self.completed_at:
            return self.completed_at.date()
        timeline = self.lifecycle.timeline
        return (
            timeline.actual_closing_date
            or timeline.expected_closing_date
            or timeline.offer_accepted_date
        )

    def involves_agent(self, agent_id: str) -> bool:
        if self.agents.primary.id == agent_id:
            return True
        return self.agents.secondary is not None and self.agents.secondary.id == agent_id
