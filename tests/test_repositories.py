"""Tests for the record repositories."""

import pytest

from estate_office.models.audit import AuditEventType
from estate_office.models.crm import LeadInteraction, LeadStatus, RequirementStatus
from estate_office.models.investment import InvestorStatus
from estate_office.models.property import Property
from estate_office.repositories import (
    BuyerRequirementRepository,
    ContactRepository,
    FarmRepository,
    InvestorRepository,
    JournalEntryRepository,
    LeadRepository,
    PropertyRepository,
    SellCycleRepository,
)
from estate_office.services.storage import DuplicateError, NotFoundError


class TestRecordRepository:
    """Tests for the generic CRUD behaviour."""

    def test_create_assigns_prefixed_id(self, storage):
        repo = PropertyRepository(storage)
        prop = repo.create(address="1 Main", created_by="agent-1")
        assert prop.id.startswith("PROP-")
        assert repo.get(prop.id) == prop

    def test_records_stored_camel_case(self, storage):
        PropertyRepository(storage).create(address="1 Main", created_by="agent-1")
        assert "createdBy" in storage.read("estate_properties")[0]

    def test_add_rejects_duplicate_id(self, storage):
        repo = PropertyRepository(storage)
        repo.add(Property(id="P1", address="1 Main", created_by="a"))
        with pytest.raises(DuplicateError):
            repo.add(Property(id="P1", address="2 Main", created_by="a"))

    def test_update_revalidates(self, storage):
        repo = PropertyRepository(storage)
        prop = repo.create(address="1 Main", created_by="a")
        with pytest.raises(ValueError):
            repo.update(prop.id, price=-5)
        assert repo.require(prop.id).price == 0

    def test_update_refreshes_updated_at(self, storage):
        repo = PropertyRepository(storage)
        prop = repo.create(address="1 Main", created_by="a")
        updated = repo.update(prop.id, price=100)
        assert updated.price == 100
        assert updated.updated_at >= prop.updated_at
        assert updated.created_at == prop.created_at

    def test_update_missing_record(self, storage):
        with pytest.raises(NotFoundError):
            PropertyRepository(storage).update("nope", price=1)

    def test_require_missing_record(self, storage):
        with pytest.raises(NotFoundError, match="nope"):
            PropertyRepository(storage).require("nope")

    def test_invalid_stored_records_are_skipped(self, storage):
        """A record that fails validation is hidden but never lost."""
        storage.write("estate_properties", [
            {"id": "P1", "address": "1 Main", "createdBy": "a"},
            {"id": "P2", "createdBy": "a"},
        ])
        repo = PropertyRepository(storage)
        assert [p.id for p in repo.list_all()] == ["P1"]

        repo.update("P1", price=5)
        assert {r["id"] for r in storage.read("estate_properties")} == {"P1", "P2"}

    def test_save_is_upsert(self, storage):
        repo = PropertyRepository(storage)
        prop = Property(id="P1", address="1 Main", created_by="a")
        repo.save(prop)
        prop.price = 500
        repo.save(prop)
        assert len(repo.list_all()) == 1
        assert repo.require("P1").price == 500

    def test_delete(self, storage):
        repo = PropertyRepository(storage)
        prop = repo.create(address="1 Main", created_by="a")
        assert repo.delete(prop.id)
        assert not repo.delete(prop.id)
        assert repo.get(prop.id) is None

    def test_writes_are_audited(self, storage, audit_logger):
        repo = PropertyRepository(storage, audit_logger)
        prop = repo.create(address="1 Main", created_by="a")
        repo.update(prop.id, price=1)
        repo.delete(prop.id)
        types = [e.event_type for e in audit_logger.recent_events()]
        assert AuditEventType.RECORD_CREATED in types
        assert AuditEventType.RECORD_UPDATED in types
        assert AuditEventType.RECORD_DELETED in types


class TestVisibility:
    """Tests for who sees which records."""

    def test_admin_sees_everything(self, storage, admin):
        repo = PropertyRepository(storage)
        repo.create(address="1 Main", created_by="agent-1")
        repo.create(address="2 Main", created_by="agent-2")
        assert len(repo.list_for(admin)) == 2

    def test_agent_sees_own_and_shared(self, storage, agent):
        repo = PropertyRepository(storage)
        repo.create(address="1 Main", created_by="agent-1")
        repo.create(address="2 Main", created_by="agent-2", shared_with=["agent-1"])
        repo.create(address="3 Main", created_by="agent-2")
        assert {p.address for p in repo.list_for(agent)} == {"1 Main", "2 Main"}

    def test_archived_properties(self, storage, agent):
        repo = PropertyRepository(storage)
        prop = repo.create(address="1 Main", created_by="agent-1")
        repo.archive(prop.id)
        assert repo.list_active(agent) == []
        assert [p.id for p in repo.list_archived(agent)] == [prop.id]
        repo.unarchive(prop.id)
        assert repo.require(prop.id).archived_at is None

    def test_journal_visible_to_creator(self, storage, agent, other_agent):
        repo = JournalEntryRepository(storage)
        repo.create(date="2024-01-01", debit_account="Cash & Bank", credit_account="Other Income",
                    amount=10, created_by="agent-1")
        assert len(repo.list_for(agent)) == 1
        assert repo.list_for(other_agent) == []

    def test_investor_visible_to_managing_agent(self, storage, agent, other_agent):
        repo = InvestorRepository(storage)
        repo.create(name="Zara", managing_agent_id="agent-2")
        assert repo.list_for(agent) == []
        assert len(repo.list_for(other_agent)) == 1


class TestPropertyRepositories:
    """Tests for sell cycles."""

    def test_active_cycle_is_most_recent(self, storage):
        cycles = SellCycleRepository(storage)
        cycles.create(property_id="P1", agent_id="a", asking_price=100, status="sold")
        cycles.create(property_id="P1", agent_id="a", asking_price=200,
                      created_at="2024-01-01T00:00:00")
        newest = cycles.create(property_id="P1", agent_id="a", asking_price=300)
        assert cycles.active_for_property("P1").id == newest.id

    def test_no_active_cycle(self, storage):
        cycles = SellCycleRepository(storage)
        cycles.create(property_id="P1", agent_id="a", status="cancelled")
        assert cycles.active_for_property("P1") is None


class TestCrmRepositories:
    """Tests for leads, contacts, requirements and farms."""

    def test_lead_starts_new(self, storage):
        lead = LeadRepository(storage).create(name="Ali", agent_id="a", status="qualified")
        assert lead.status == LeadStatus.NEW
        assert lead.id.startswith("lead_")

    def test_lead_conversion_is_stamped(self, storage):
        repo = LeadRepository(storage)
        lead = repo.create(name="Ali", agent_id="a")
        converted = repo.update_status(lead.id, LeadStatus.CONVERTED)
        assert converted.converted_at is not None

    def test_lead_interactions_and_loss(self, storage):
        repo = LeadRepository(storage)
        lead = repo.create(name="Ali", agent_id="a")
        repo.add_interaction(lead.id, LeadInteraction(type="call", summary="Asked for DHA listings"))
        lost = repo.mark_lost(lead.id, "Bought elsewhere")
        assert len(lost.interactions) == 1
        assert lost.status == LeadStatus.LOST
        assert lost.lost_reason == "Bought elsewhere"

    def test_contact_requires_name_and_agent(self, storage):
        repo = ContactRepository(storage)
        with pytest.raises(ValueError, match="name is required"):
            repo.create(name="  ", agent_id="a")
        with pytest.raises(ValueError, match="agent is required"):
            repo.create(name="Kamran", agent_id="")

    def test_requirement_starts_active(self, storage):
        repo = BuyerRequirementRepository(storage)
        req = repo.create(agent_id="a", max_budget=10, status="closed")
        assert req.status == RequirementStatus.ACTIVE
        assert repo.active() == [req]

    def test_farm_contacts_stay_unique(self, storage):
        contacts = ContactRepository(storage)
        farms = FarmRepository(storage)
        c1 = contacts.create(name="Kamran", agent_id="a", total_transactions=2)
        c2 = contacts.create(name="Nadia", agent_id="a", status="inactive")
        farm = farms.create(name="Bahria Town", agent_id="a")

        farm = farms.add_contacts(farm.id, [c1.id, c2.id, c1.id])
        assert farm.contact_ids == [c1.id, c2.id]

        farm = farms.refresh_stats(farm.id, contacts.list_all())
        assert farm.active_prospects == 1
        assert farm.converted_prospects == 1

        farm = farms.remove_contact(farm.id, c1.id)
        assert farm.contact_ids == [c2.id]


class TestInvestorRepository:
    """Investors are archived instead of removed."""

    def test_delete_archives(self, storage):
        repo = InvestorRepository(storage)
        investor = repo.create(name="Zara", managing_agent_id="a")
        assert repo.delete(investor.id)
        assert repo.require(investor.id).status == InvestorStatus.ARCHIVED
        assert not repo.delete("missing")
