"""
Property Ownership

DESIGN DECISION: Ownership is an APPEND-ONLY history.
A transfer never edits who owned the property before; it closes the
open record of the current owner (sold date and sale price) and
appends a new one. The current_owner_* fields on the property are a
pointer to the last open record.

The agency itself is an owner with id AGENCY. A property the agency
owns can be sold; a sold property owned by anyone else can be bought
back by the agency and re-listed.
"""

import math
from datetime import datetime
from typing import NamedTuple, Optional
from uuid import UUID

import structlog

from estate_office.audit.logger import AuditLogger
from estate_office.investments.portfolio import PortfolioService
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import UserContext, utcnow
from estate_office.models.property import (
    AGENCY_OWNER_ID,
    InvestorShare,
    OwnerType,
    OwnershipRecord,
    Property,
    PropertyStatus,
)
from estate_office.repositories import PropertyRepository

logger = structlog.get_logger(__name__)

AGENCY_OWNER_NAME = "Agency Inventory"
UNKNOWN_OWNER_NAME = "Unknown Owner"


class CurrentOwner(NamedTuple):
    owner_id: str
    owner_name: str
    ownership_start: datetime


class RelistCheck(NamedTuple):
    allowed: bool
    reason: Optional[str] = None


class OwnershipService:
    """Ownership transfers, re-listing and sale finalization."""

    def __init__(
        self,
        properties: PropertyRepository,
        portfolios: PortfolioService,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._properties = properties
        self._portfolios = portfolios
        self._audit = audit_logger

    # ========================================================================
    # TRANSFERS
    # ========================================================================

    def transfer_ownership(
        self,
        property_id: str,
        owner_id: str,
        owner_name: str,
        owner_type: OwnerType,
        transaction_id: Optional[str] = None,
        investor_shares: Optional[list[InvestorShare]] = None,
        sale_price: Optional[float] = None,
        notes: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Property]:
        """
        Move a property to a new owner.

        For investor owners with shares and a price, one investment is
        recorded per share, paid in at price x share %.

        Returns:
            The updated property, or None if the property does not exist
        """
        owner_type = OwnerType(owner_type)
        prop = self._properties.get(property_id)
        if prop is None:
            logger.warning("ownership_transfer_property_missing", property_id=property_id)
            return None

        now = utcnow()
        history = list(prop.ownership_history)
        previous_owner = prop.current_owner_id
        if previous_owner:
            for index, record in enumerate(history):
                if record.owner_id == previous_owner and record.is_open:
                    history[index] = record.model_copy(
                        update={"sold_date": now, "sale_price": sale_price}
                    )
                    break

        history.append(OwnershipRecord(
            owner_id=owner_id,
            owner_name=owner_name,
            acquired_date=now,
            transaction_id=transaction_id,
            sale_price=sale_price,
            notes=notes,
        ))

        # Validates the share total before any investment is recorded
        updated = self._properties.update(
            property_id,
            current_owner_id=owner_id,
            current_owner_name=owner_name,
            current_owner_type=owner_type,
            investor_shares=investor_shares or None,
            ownership_history=history,
        )

        if owner_type == OwnerType.INVESTOR and investor_shares and sale_price:
            for share in investor_shares:
                self._portfolios.add_investment(
                    investor_id=share.investor_id,
                    property_id=property_id,
                    property_address=prop.address,
                    share_percentage=share.share_percentage,
                    investment_amount=sale_price * share.share_percentage / 100,
                    acquisition_price=sale_price,
                    notes=share.notes,
                )

        logger.info(
            "ownership_transferred",
            property_id=property_id,
            from_owner_id=previous_owner,
            to_owner_id=owner_id,
            owner_type=owner_type.value,
        )
        if self._audit:
            self._audit.log(AuditEventBuilder.ownership_transferred(
                property_id=property_id,
                from_owner_id=previous_owner,
                to_owner_id=owner_id,
                sale_price=sale_price,
                correlation_id=correlation_id,
            ))
        return updated

    # ========================================================================
    # OWNER LOOKUPS
    # ========================================================================

    def get_current_owner(self, property_id: str) -> Optional[CurrentOwner]:
        prop = self._properties.get(property_id)
        if prop is None or not prop.current_owner_id:
            return None

        for record in prop.ownership_history:
            if record.owner_id == prop.current_owner_id and record.is_open:
                return CurrentOwner(record.owner_id, record.owner_name, record.acquired_date)
        return CurrentOwner(prop.current_owner_id, UNKNOWN_OWNER_NAME, prop.created_at)

    def get_ownership_history(self, property_id: str) -> list[OwnershipRecord]:
        prop = self._properties.get(property_id)
        if prop is None:
            return []
        return list(prop.ownership_history)

    # ========================================================================
    # RE-LISTING
    # ========================================================================

    def can_relist(self, property_id: str) -> RelistCheck:
        prop = self._properties.get(property_id)
        if prop is None:
            return RelistCheck(False, "Property not found")
        return self._relist_check(prop)

    @staticmethod
    def _relist_check(prop: Property) -> RelistCheck:
        if prop.current_owner_id == AGENCY_OWNER_ID:
            return RelistCheck(False, "Property already owned by agency")
        if prop.status != PropertyStatus.SOLD:
            return RelistCheck(False, "Property is not in a sold state")
        return RelistCheck(True)

    def relist_property(
        self,
        property_id: str,
        purchase_price: float,
        seller_name: str,
        transaction_id: Optional[str] = None,
    ) -> Property:
        """
        Buy a sold property back into agency inventory and make it available.

        Raises:
            ValueError: If the property cannot be re-listed
        """
        check = self.can_relist(property_id)
        if not check.allowed:
            raise ValueError(check.reason)

        self.transfer_ownership(
            property_id,
            AGENCY_OWNER_ID,
            AGENCY_OWNER_NAME,
            OwnerType.AGENCY,
            transaction_id=transaction_id,
            sale_price=purchase_price,
            notes=f"Re-purchased from {seller_name} for {purchase_price:g}",
        )
        return self._properties.update(property_id, status=PropertyStatus.AVAILABLE)

    def relistable_properties(self, user: UserContext) -> list[Property]:
        return [
            p for p in self._properties.list_for(user)
            if self._relist_check(p).allowed
        ]

    # ========================================================================
    # SALES
    # ========================================================================

    def finalize_sale(
        self,
        property_id: str,
        buyer_id: str,
        buyer_name: str,
        final_sale_price: Optional[float] = None,
        transaction_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> Optional[Property]:
        """Transfer a property to its buyer and mark it sold."""
        prop = self._properties.get(property_id)
        if prop is None:
            return None

        price = final_sale_price or prop.price
        self.transfer_ownership(
            property_id,
            buyer_id,
            buyer_name,
            OwnerType.CLIENT,
            transaction_id=transaction_id,
            sale_price=final_sale_price,
            notes=f"Sold to {buyer_name} for {price:g}",
            correlation_id=correlation_id,
        )
        return self._properties.update(
            property_id,
            status=PropertyStatus.SOLD,
            final_sale_price=price,
            sold_date=utcnow(),
        )


def ownership_duration_days(record: OwnershipRecord, now: Optional[datetime] = None) -> int:
    """Whole days of a tenure, rounded up. Open tenures run to now."""
    end = record.sold_date or now or utcnow()
    seconds = abs((end - record.acquired_date).total_seconds())
    return math.ceil(seconds / 86400)


def sales_count(prop: Property) -> int:
    """Number of closed tenures in a property's history."""
    return sum(1 for record in prop.ownership_history if not record.is_open)
