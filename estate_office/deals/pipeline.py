"""
Deal Pipeline

DESIGN DECISION: Deals only move FORWARD.
A deal walks the eight stages in DEAL_STAGE_ORDER. Skipping ahead is
allowed, going back is not, and only active deals move. The final
stage is reached through complete_deal, never progress_stage, because
completing a deal also hands the property to the buyer.

Every transition:
- Stamps the stage timeline (the stage left is completed at 100%,
  the stage entered is in progress)
- Records last_action on the deal
- Emits an audit event
"""

from datetime import date, timedelta
from typing import Optional

import structlog

from estate_office.audit.logger import AuditLogger, create_correlation_id
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import UserContext, new_record_id, utcnow
from estate_office.models.deal import (
    DEAL_STAGE_ORDER,
    CommissionSplit,
    Deal,
    DealAgents,
    DealCommission,
    DealFinancial,
    DealLifecycle,
    DealNote,
    DealParties,
    DealParty,
    DealPayment,
    DealPaymentStatus,
    DealStage,
    DealStatus,
    DealTimeline,
    SplitShare,
    StageProgress,
)
from estate_office.models.property import OwnerType, PropertyStatus, SellCycleStatus
from estate_office.properties.ownership import OwnershipService
from estate_office.repositories import DealRepository, PropertyRepository, SellCycleRepository

logger = structlog.get_logger(__name__)

EXPECTED_CLOSING_DAYS = 60

# Split between listing and buying agent when a deal has two agents
PRIMARY_SPLIT_WITH_SECONDARY = 60.0
SECONDARY_SPLIT = 40.0


def stage_key(stage: DealStage) -> str:
    """Timeline key for a stage: offer-accepted -> offerAccepted."""
    if stage == DealStage.COMPLETED:
        stage = DealStage.FINAL_HANDOVER
    head, *rest = stage.value.split("-")
    return head + "".join(part.capitalize() for part in rest)


class DealPipeline:
    """Creates deals and drives them from offer to completion."""

    def __init__(
        self,
        deals: DealRepository,
        properties: PropertyRepository,
        sell_cycles: SellCycleRepository,
        ownership: OwnershipService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._deals = deals
        self._properties = properties
        self._sell_cycles = sell_cycles
        self._ownership = ownership
        self._audit = audit_logger

    # ========================================================================
    # CREATION
    # ========================================================================

    def next_deal_number(self, today: Optional[date] = None) -> str:
        """DEAL-<year>-<nnn>, numbered per calendar year."""
        year = (today or utcnow().date()).year
        prefix = f"DEAL-{year}"
        count = sum(1 for d in self._deals.list_all() if d.deal_number.startswith(prefix))
        return f"{prefix}-{count + 1:03d}"

    def create_deal(
        self,
        sell_cycle_id: str,
        agreed_price: float,
        buyer: DealParty,
        seller: DealParty,
        primary_agent: DealParty,
        secondary_agent: Optional[DealParty] = None,
        commission_rate: float = 0.0,
    ) -> Deal:
        """
        Open a deal on an accepted offer.

        The commission is agreed_price x commission_rate %. With a second
        agent it is split 60/40, otherwise the primary agent takes it all.
        """
        cycle = self._sell_cycles.require(sell_cycle_id)
        now = utcnow()

        total = agreed_price * commission_rate / 100
        primary_pct = PRIMARY_SPLIT_WITH_SECONDARY if secondary_agent else 100.0
        split = CommissionSplit(
            primary_agent=SplitShare(percentage=primary_pct, amount=total * primary_pct / 100),
            secondary_agent=(
                SplitShare(percentage=SECONDARY_SPLIT, amount=total * SECONDARY_SPLIT / 100)
                if secondary_agent else None
            ),
        )

        stages = {stage_key(s): StageProgress() for s in DEAL_STAGE_ORDER[:-1]}
        stages[stage_key(DealStage.OFFER_ACCEPTED)] = StageProgress(
            status="in-progress", started_at=now
        )

        deal = self._deals.create(
            deal_number=self.next_deal_number(now.date()),
            property_id=cycle.property_id,
            sell_cycle_id=cycle.id,
            agents=DealAgents(primary=primary_agent, secondary=secondary_agent),
            parties=DealParties(buyer=buyer, seller=seller),
            financial=DealFinancial(
                agreed_price=agreed_price,
                commission=DealCommission(total=total, rate=commission_rate, split=split),
            ),
            lifecycle=DealLifecycle(
                stage=DealStage.OFFER_ACCEPTED,
                status=DealStatus.ACTIVE,
                timeline=DealTimeline(
                    offer_accepted_date=now.date(),
                    expected_closing_date=now.date() + timedelta(days=EXPECTED_CLOSING_DAYS),
                    stages=stages,
                ),
            ),
            last_action="deal-created",
            created_by=primary_agent.id,
        )
        self._sell_cycles.update(cycle.id, linked_deal_id=deal.id)

        logger.info("deal_created", deal_id=deal.id, deal_number=deal.deal_number)
        return deal

    # ========================================================================
    # STAGES
    # ========================================================================

    def progress_stage(self, deal_id: str, new_stage: DealStage, agent: UserContext) -> Deal:
        """
        Move a deal forward to new_stage.

        Raises:
            NotFoundError: If the deal does not exist
            ValueError: If the deal is not active or the move is not forward
        """
        new_stage = DealStage(new_stage)
        deal = self._deals.require(deal_id)
        if deal.lifecycle.status != DealStatus.ACTIVE:
            raise ValueError(
                f"Only active deals can progress (deal is {deal.lifecycle.status.value})"
            )
        if new_stage == DealStage.COMPLETED:
            raise ValueError("Use complete_deal to complete a deal")

        current = deal.lifecycle.stage
        if DEAL_STAGE_ORDER.index(new_stage) <= DEAL_STAGE_ORDER.index(current):
            raise ValueError(
                f"Cannot move deal from {current.value} to {new_stage.value}"
            )

        now = utcnow()
        self._close_stage(deal, current, now)
        deal.lifecycle.timeline.stages[stage_key(new_stage)] = StageProgress(
            status="in-progress", started_at=now
        )
        deal.lifecycle.stage = new_stage
        deal.last_action = f"progressed-to-{new_stage.value}"
        self._deals.save(deal)

        logger.info(
            "deal_stage_progressed",
            deal_id=deal_id,
            from_stage=current.value,
            to_stage=new_stage.value,
        )
        if self._audit:
            self._audit.log(AuditEventBuilder.deal_stage_progressed(
                deal_id=deal_id,
                from_stage=current.value,
                to_stage=new_stage.value,
                user_id=agent.user_id,
            ))
        return deal

    @staticmethod
    def _close_stage(deal: Deal, stage: DealStage, now) -> None:
        key = stage_key(stage)
        progress = deal.lifecycle.timeline.stages.get(key) or StageProgress(started_at=now)
        deal.lifecycle.timeline.stages[key] = progress.model_copy(update={
            "status": "completed",
            "completed_at": now,
            "completion_percentage": 100,
        })

    # ========================================================================
    # PAYMENTS
    # ========================================================================

    def schedule_payment(
        self,
        deal_id: str,
        amount: float,
        description: str = "",
        due_date: Optional[date] = None,
    ) -> DealPayment:
        """Add a pending instalment to the deal's payment schedule."""
        deal = self._deals.require(deal_id)
        payment = DealPayment(
            id=new_record_id("PMT"),
            description=description,
            amount=amount,
            due_date=due_date,
        )
        deal.financial.payments.append(payment)
        deal.last_action = "payment-scheduled"
        self._deals.save(deal)
        return payment

    def record_payment(
        self,
        deal_id: str,
        payment_id: str,
        agent: UserContext,
        paid_date=None,
        method: Optional[str] = None,
        reference: Optional[str] = None,
        notes: Optional[str] = None,
    ) -> Deal:
        """
        Mark a scheduled payment as paid and issue a receipt.

        Raises:
            NotFoundError: If the deal does not exist
            ValueError: If the payment is unknown or already paid
        """
        deal = self._deals.require(deal_id)
        payment = next((p for p in deal.financial.payments if p.id == payment_id), None)
        if payment is None:
            raise ValueError(f"Payment {payment_id} not found")
        if payment.status == DealPaymentStatus.PAID:
            raise ValueError(f"Payment {payment_id} is already paid")

        payment.status = DealPaymentStatus.PAID
        payment.paid_date = paid_date or utcnow()
        payment.payment_method = method
        payment.reference_number = reference
        payment.receipt_number = new_record_id("RCP")
        payment.recorded_by = agent.user_id
        payment.notes = notes

        financial = deal.financial
        financial.total_paid += payment.amount
        financial.balance_remaining = (financial.balance_remaining or 0.0) - payment.amount
        deal.last_action = "payment-recorded"
        self._deals.save(deal)

        if self._audit:
            self._audit.log(AuditEventBuilder.deal_payment_recorded(
                deal_id=deal_id,
                payment_id=payment_id,
                amount=payment.amount,
                receipt_number=payment.receipt_number,
                user_id=agent.user_id,
            ))
        return deal

    # ========================================================================
    # COMPLETION & CANCELLATION
    # ========================================================================

    def complete_deal(self, deal_id: str, agent: UserContext) -> Deal:
        """
        Close a deal: the buyer becomes the owner and the property is sold.

        Raises:
            NotFoundError: If the deal does not exist
            ValueError: If the deal is not active
        """
        deal = self._deals.require(deal_id)
        if deal.lifecycle.status != DealStatus.ACTIVE:
            raise ValueError(
                f"Only active deals can be completed (deal is {deal.lifecycle.status.value})"
            )

        correlation_id = create_correlation_id()
        now = utcnow()
        price = deal.financial.agreed_price
        buyer = deal.parties.buyer
        seller = deal.parties.seller

        if deal.property_id:
            transferred = self._ownership.transfer_ownership(
                deal.property_id,
                buyer.id,
                buyer.name,
                OwnerType.CLIENT,
                transaction_id=deal.id,
                sale_price=price,
                notes=(
                    f"Sold via deal {deal.deal_number}. Seller: {seller.name}. "
                    f"Buyer: {buyer.name}. Price: {price:g}"
                ),
                correlation_id=correlation_id,
            )
            if transferred is None:
                raise ValueError(f"Property {deal.property_id} not found")
            self._properties.update(
                deal.property_id,
                status=PropertyStatus.SOLD,
                final_sale_price=price,
                sold_date=now,
                commission_earned=deal.financial.commission.total,
            )

        if deal.sell_cycle_id and self._sell_cycles.get(deal.sell_cycle_id):
            self._sell_cycles.update(
                deal.sell_cycle_id,
                status=SellCycleStatus.SOLD,
                sold_price=price,
                linked_deal_id=deal.id,
            )

        self._close_stage(deal, deal.lifecycle.stage, now)
        self._close_stage(deal, DealStage.FINAL_HANDOVER, now)
        deal.lifecycle.stage = DealStage.COMPLETED
        deal.lifecycle.status = DealStatus.COMPLETED
        deal.lifecycle.timeline.actual_closing_date = now.date()
        deal.completed_at = now
        deal.last_action = "deal-completed"
        self._deals.save(deal)

        logger.info(
            "deal_completed",
            deal_id=deal_id,
            deal_number=deal.deal_number,
            correlation_id=str(correlation_id),
        )
        if self._audit:
            self._audit.log(AuditEventBuilder.deal_completed(
                deal_id=deal_id,
                deal_number=deal.deal_number,
                agreed_price=price,
                user_id=agent.user_id,
                correlation_id=correlation_id,
            ))
        return deal

    def cancel_deal(self, deal_id: str, reason: str, agent: UserContext) -> Deal:
        """
        Cancel a deal and leave a note saying why.

        Raises:
            NotFoundError: If the deal does not exist
            ValueError: If the deal is already completed or cancelled
        """
        deal = self._deals.require(deal_id)
        if deal.lifecycle.status == DealStatus.COMPLETED:
            raise ValueError("A completed deal cannot be cancelled")
        if deal.lifecycle.status == DealStatus.CANCELLED:
            raise ValueError("Deal is already cancelled")

        deal.lifecycle.status = DealStatus.CANCELLED
        deal.notes.append(DealNote(
            id=new_record_id("note", "_"),
            content=f"Deal cancelled: {reason}",
            created_by=agent.user_id,
            created_by_name=agent.display_name,
        ))
        deal.last_action = "deal-cancelled"
        self._deals.save(deal)

        if self._audit:
            self._audit.log(AuditEventBuilder.deal_cancelled(
                deal_id=deal_id,
                reason=reason,
                user_id=agent.user_id,
            ))
        return deal


# ============================================================================
# STATISTICS
# ============================================================================

def stage_stats(deals: list[Deal]) -> dict[str, int]:
    """Deal count per pipeline stage, every stage present."""
    counts = {stage.value: 0 for stage in DEAL_STAGE_ORDER}
    for deal in deals:
        counts[deal.lifecycle.stage.value] += 1
    return counts


def status_stats(deals: list[Deal]) -> dict[str, int]:
    counts = {status.value: 0 for status in DealStatus}
    for deal in deals:
        counts[deal.lifecycle.status.value] += 1
    return counts
