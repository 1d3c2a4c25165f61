"""Lead, contact, buyer requirement and farm repositories."""

from typing import Any, Iterable

from estate_office.models.base import utcnow
from estate_office.models.crm import (
    BuyerRequirement,
    Contact,
    ContactStatus,
    Farm,
    Lead,
    LeadInteraction,
    LeadStatus,
    RequirementStatus,
)
from estate_office.repositories.base import RecordRepository


class LeadRepository(RecordRepository[Lead]):
    """Leads under estate_leads, visible to their agent."""

    key = "estate_leads"
    model = Lead
    id_prefix = "lead"
    id_separator = "_"
    entity_type = "lead"

    def create(self, **fields: Any) -> Lead:
        fields["status"] = LeadStatus.NEW
        return super().create(**fields)

    def update_status(self, lead_id: str, status: LeadStatus) -> Lead:
        changes: dict[str, Any] = {"status": status}
        if status == LeadStatus.CONVERTED:
            changes["converted_at"] = utcnow()
        return self.update(lead_id, **changes)

    def add_interaction(self, lead_id: str, interaction: LeadInteraction) -> Lead:
        lead = self.require(lead_id)
        return self.update(lead_id, interactions=[*lead.interactions, interaction])

    def mark_lost(self, lead_id: str, reason: str) -> Lead:
        return self.update(lead_id, status=LeadStatus.LOST, lost_reason=reason)


class ContactRepository(RecordRepository[Contact]):
    """Contacts under crm_contacts, visible to their agent."""

    key = "crm_contacts"
    model = Contact
    id_prefix = "contact"
    id_separator = "_"
    entity_type = "contact"

    def create(self, **fields: Any) -> Contact:
        if not str(fields.get("name") or "").strip():
            raise ValueError("Contact name is required")
        if not str(fields.get("agent_id") or "").strip():
            raise ValueError("Contact agent is required")
        return super().create(**fields)

    def by_ids(self, contact_ids: Iterable[str]) -> list[Contact]:
        wanted = set(contact_ids)
        return [c for c in self.list_all() if c.id in wanted]


class BuyerRequirementRepository(RecordRepository[BuyerRequirement]):
    """Buyer requirements under buyer_requirements_v3."""

    key = "buyer_requirements_v3"
    model = BuyerRequirement
    id_prefix = "req"
    id_separator = "_"
    entity_type = "buyer_requirement"

    def create(self, **fields: Any) -> BuyerRequirement:
        fields["status"] = RequirementStatus.ACTIVE
        return super().create(**fields)

    def active(self) -> list[BuyerRequirement]:
        return [r for r in self.list_all() if r.status == RequirementStatus.ACTIVE]


class FarmRepository(RecordRepository[Farm]):
    """Prospecting farms under crm_farms."""

    key = "crm_farms"
    model = Farm
    id_prefix = "FARM"
    entity_type = "farm"

    def add_contacts(self, farm_id: str, contact_ids: Iterable[str]) -> Farm:
        """Add contacts, keeping ids unique and the existing order."""
        farm = self.require(farm_id)
        merged = list(farm.contact_ids)
        for contact_id in contact_ids:
            if contact_id not in merged:
                merged.append(contact_id)
        return self.update(farm_id, contact_ids=merged)

    def remove_contact(self, farm_id: str, contact_id: str) -> Farm:
        farm = self.require(farm_id)
        return self.update(
            farm_id,
            contact_ids=[c for c in farm.contact_ids if c != contact_id],
        )

    def refresh_stats(self, farm_id: str, contacts: list[Contact]) -> Farm:
        """
        Recount prospects from the farm's contacts.

        Active prospects are contacts with status active; converted ones
        have at least one transaction.
        """
        farm = self.require(farm_id)
        members = [c for c in contacts if c.id in farm.contact_ids]
        return self.update(
            farm_id,
            active_prospects=sum(1 for c in members if c.status == ContactStatus.ACTIVE),
            converted_prospects=sum(1 for c in members if c.total_transactions > 0),
        )
