"""Deal repository."""

from estate_office.models.base import UserContext
from estate_office.models.deal import Deal, DealStage, DealStatus
from estate_office.repositories.base import RecordRepository


class DealRepository(RecordRepository[Deal]):
    """Deals under estate_deals, visible to their primary and secondary agents."""

    key = "estate_deals"
    model = Deal
    id_prefix = "DEAL"
    entity_type = "deal"

    def is_visible(self, record: Deal, user: UserContext) -> bool:
        return record.involves_agent(user.user_id)

    def by_stage(self, stage: DealStage, user: UserContext) -> list[Deal]:
        return [d for d in self.list_for(user) if d.lifecycle.stage == stage]

    def by_status(self, status: DealStatus, user: UserContext) -> list[Deal]:
        return [d for d in self.list_for(user) if d.lifecycle.status == status]

    def for_property(self, property_id: str) -> list[Deal]:
        return [d for d in self.list_all() if d.property_id == property_id]
