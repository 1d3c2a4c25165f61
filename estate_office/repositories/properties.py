"""Property and sell cycle repositories."""

from typing import Optional

from estate_office.models.base import UserContext, utcnow
from estate_office.models.property import Property, SellCycle
from estate_office.repositories.base import RecordRepository


class PropertyRepository(RecordRepository[Property]):
    """
    Properties under estate_properties.

    Agents see properties they created or that were shared with them.
    Records without an address or creator fail validation and are
    never listed.
    """

    key = "estate_properties"
    model = Property
    id_prefix = "PROP"
    entity_type = "property"

    def is_visible(self, record: Property, user: UserContext) -> bool:
        return record.created_by == user.user_id or user.user_id in record.shared_with

    def list_active(self, user: UserContext) -> list[Property]:
        return [p for p in self.list_for(user) if not p.is_archived]

    def list_archived(self, user: UserContext) -> list[Property]:
        return [p for p in self.list_for(user) if p.is_archived]

    def archive(self, property_id: str) -> Property:
        return self.update(property_id, is_archived=True, archived_at=utcnow())

    def unarchive(self, property_id: str) -> Property:
        return self.update(property_id, is_archived=False, archived_at=None)


class SellCycleRepository(RecordRepository[SellCycle]):
    """Sale listings under sell_cycles_v3."""

    key = "sell_cycles_v3"
    model = SellCycle
    id_prefix = "SC"
    entity_type = "sell_cycle"

    def is_visible(self, record: SellCycle, user: UserContext) -> bool:
        return record.agent_id == user.user_id or user.user_id in record.shared_with

    def for_property(self, property_id: str) -> list[SellCycle]:
        return [c for c in self.list_all() if c.property_id == property_id]

    def active_for_property(self, property_id: str) -> Optional[SellCycle]:
        """The most recent cycle for the property that is not sold or cancelled."""
        active = [c for c in self.for_property(property_id) if c.is_active]
        if not active:
            return None
        return max(active, key=lambda c: c.created_at)
