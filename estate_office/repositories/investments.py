"""Investor, investment and land parcel repositories."""

from estate_office.models.base import UserContext
from estate_office.models.investment import (
    InvestmentStatus,
    Investor,
    InvestorInvestment,
    InvestorStatus,
    LandParcel,
)
from estate_office.repositories.base import RecordRepository


class InvestorRepository(RecordRepository[Investor]):
    """Investors under estate_investors, visible to their managing agent."""

    key = "estate_investors"
    model = Investor
    id_prefix = "investor"
    id_separator = "_"
    entity_type = "investor"

    def is_visible(self, record: Investor, user: UserContext) -> bool:
        return record.managing_agent_id == user.user_id

    def delete(self, record_id: str) -> bool:
        """Investors are archived, never removed."""
        if self.get(record_id) is None:
            return False
        self.update(record_id, status=InvestorStatus.ARCHIVED)
        return True


class InvestmentRepository(RecordRepository[InvestorInvestment]):
    """Investor stakes under estate_investor_investments."""

    key = "estate_investor_investments"
    model = InvestorInvestment
    id_prefix = "investment"
    id_separator = "_"
    entity_type = "investment"

    def is_visible(self, record: InvestorInvestment, user: UserContext) -> bool:
        return True

    def for_investor(self, investor_id: str) -> list[InvestorInvestment]:
        return [i for i in self.list_all() if i.investor_id == investor_id]

    def for_property(self, property_id: str) -> list[InvestorInvestment]:
        return [i for i in self.list_all() if i.property_id == property_id]

    def active_for_property(self, property_id: str) -> list[InvestorInvestment]:
        return [
            i for i in self.for_property(property_id)
            if i.status == InvestmentStatus.ACTIVE
        ]


class LandParcelRepository(RecordRepository[LandParcel]):
    """Land parcels under land_parcels."""

    key = "land_parcels"
    model = LandParcel
    id_prefix = "land"
    entity_type = "land_parcel"

    def is_visible(self, record: LandParcel, user: UserContext) -> bool:
        return record.created_by == user.user_id or user.user_id in record.assigned_to
