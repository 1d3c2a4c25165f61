"""
Tests for Estate Office models

Test strategy:
1. Unit tests for the pydantic models (aliases, validators, defaults)
2. Service tests run against InMemoryStorage (see conftest.py)
3. No network or real data directory in tests
"""

from datetime import date, datetime, timezone

import pytest
from pydantic import ValidationError

from estate_office.models.accounting import (
    EquityTransaction,
    EquityTransactionType,
    JournalEntry,
    LedgerEntry,
)
from estate_office.models.audit import AuditEvent, AuditEventBuilder, AuditEventType, AuditSeverity
from estate_office.models.base import UserContext, UserRole, new_record_id
from estate_office.models.crm import BuyerRequirement, Lead
from estate_office.models.deal import (
    Deal,
    DealAgents,
    DealFinancial,
    DealParties,
    DealParty,
)
from estate_office.models.investment import Investor, InvestorInvestment
from estate_office.models.property import InvestorShare, Property


class TestBaseModels:
    """Tests for the shared model plumbing."""

    def test_record_id_format(self):
        """Ids are PREFIX-<millis>-<6 hex>."""
        record_id = new_record_id("PROP")
        prefix, millis, suffix = record_id.split("-")
        assert prefix == "PROP"
        assert millis.isdigit()
        assert len(suffix) == 6

    def test_record_id_custom_separator(self):
        assert new_record_id("lead", "_").startswith("lead_")

    def test_storage_keys_are_camel_case(self):
        """Records are written with camelCase keys."""
        prop = Property(id="P1", address="1 Main", created_by="agent-1", current_owner_id="AGENCY")
        stored = prop.to_storage()
        assert stored["createdBy"] == "agent-1"
        assert stored["currentOwnerId"] == "AGENCY"
        assert "created_by" not in stored

    def test_reads_camel_and_snake_case(self):
        from_camel = Property.model_validate({"id": "P1", "address": "1 Main", "createdBy": "a"})
        from_snake = Property.model_validate({"id": "P1", "address": "1 Main", "created_by": "a"})
        assert from_camel.created_by == from_snake.created_by == "a"

    def test_unknown_fields_are_kept(self):
        """Fields written by other clients survive a read/write cycle."""
        prop = Property.model_validate(
            {"id": "P1", "address": "1 Main", "createdBy": "a", "virtualTourUrl": "https://x"}
        )
        assert prop.to_storage()["virtualTourUrl"] == "https://x"

    def test_timestamps_are_naive_utc(self):
        aware = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
        prop = Property(id="P1", address="1 Main", created_by="a", created_at=aware)
        assert prop.created_at.tzinfo is None
        assert prop.created_at.hour == 12

    def test_iso_date_accepts_timestamp_string(self):
        entry = LedgerEntry(date="2024-03-15T10:30:00.000Z", account_name="Cash", debit=10)
        assert entry.date == date(2024, 3, 15)

    def test_ledger_entry_gets_id_when_missing(self):
        entry = LedgerEntry.model_validate({"date": "2024-01-01", "accountName": "Cash"})
        assert entry.id.startswith("GL-")


class TestUserContext:
    """Tests for the requesting user."""

    def test_admin_roles(self):
        assert UserContext(user_id="u", role=UserRole.ADMIN).is_admin
        assert UserContext(user_id="u", role="super-admin").is_admin
        assert not UserContext(user_id="u", role="agent").is_admin

    def test_superadmin_spelling_is_accepted(self):
        assert UserContext(user_id="u", role="superadmin").role == UserRole.SUPER_ADMIN

    def test_display_name_falls_back_to_id(self):
        assert UserContext(user_id="agent-9").display_name == "agent-9"
        assert UserContext(user_id="agent-9", name="Hina").display_name == "Hina"


class TestPropertyModels:
    """Tests for property validation."""

    def test_address_is_required(self):
        with pytest.raises(ValidationError):
            Property(id="P1", address="", created_by="a")

    def test_investor_shares_must_total_100(self):
        """Shares of 60% and 30% are rejected."""
        with pytest.raises(ValidationError, match="must total 100%"):
            Property(
                id="P1",
                address="1 Main",
                created_by="a",
                investor_shares=[
                    InvestorShare(investor_id="i1", share_percentage=60),
                    InvestorShare(investor_id="i2", share_percentage=30),
                ],
            )

    def test_investor_shares_allow_rounding(self):
        prop = Property(
            id="P1",
            address="1 Main",
            created_by="a",
            investor_shares=[
                InvestorShare(investor_id="i1", share_percentage=33.33),
                InvestorShare(investor_id="i2", share_percentage=33.33),
                InvestorShare(investor_id="i3", share_percentage=33.34),
            ],
        )
        assert len(prop.investor_shares) == 3

    def test_location_text_joins_parts(self):
        prop = Property(id="P1", address="12 Street 4", block="F-7/2", city="Islamabad", created_by="a")
        assert prop.location_text == "12 Street 4, F-7/2, Islamabad"
        assert prop.display_title == "12 Street 4"


class TestCrmModels:
    """Tests for leads and buyer requirements."""

    def test_lead_score_bounds(self):
        with pytest.raises(ValidationError):
            Lead(id="L1", name="Ali", agent_id="a", qualification_score=120)

    def test_requirement_budget_range(self):
        with pytest.raises(ValidationError, match="Maximum budget"):
            BuyerRequirement(id="R1", agent_id="a", min_budget=5_000_000, max_budget=1_000_000)

    def test_requirement_bedroom_range(self):
        with pytest.raises(ValidationError, match="Maximum bedrooms"):
            BuyerRequirement(id="R1", agent_id="a", max_budget=1, min_bedrooms=4, max_bedrooms=2)


class TestDealModels:
    """Tests for deal models."""

    def _deal(self, **financial):
        return Deal(
            id="D1",
            deal_number="DEAL-2024-001",
            agents=DealAgents(primary=DealParty(id="agent-1")),
            parties=DealParties(buyer=DealParty(id="b"), seller=DealParty(id="s")),
            financial=DealFinancial(**financial),
        )

    def test_balance_defaults_to_price_less_paid(self):
        deal = self._deal(agreed_price=1_000_000, total_paid=250_000)
        assert deal.financial.balance_remaining == 750_000

    def test_closing_date_prefers_completion(self):
        deal = self._deal(agreed_price=1)
        deal.lifecycle.timeline.expected_closing_date = date(2024, 6, 1)
        assert deal.closing_date == date(2024, 6, 1)
        deal.completed_at = datetime(2024, 5, 20, 9, 0)
        assert deal.closing_date == date(2024, 5, 20)

    def test_involves_agent(self):
        deal = self._deal(agreed_price=1)
        assert deal.involves_agent("agent-1")
        assert not deal.involves_agent("agent-2")


class TestAccountingModels:
    """Tests for journal and equity models."""

    def test_bare_amount_fills_both_sides(self):
        entry = JournalEntry(
            id="JE1",
            date="2024-01-01",
            debit_account="Cash & Bank",
            credit_account="Commission Revenue",
            amount=5000,
            created_by="a",
        )
        assert entry.flat_debit == 5000
        assert entry.flat_credit == 5000
        assert entry.is_posted

    def test_debit_amount_needs_account(self):
        with pytest.raises(ValidationError, match="Debit account is required"):
            JournalEntry(id="JE1", date="2024-01-01", debit_amount=100, created_by="a")

    def test_equity_signed_amount(self):
        contribution = EquityTransaction(
            id="EQ1", date="2024-01-01", type="owner-contribution", amount=100, created_by="a"
        )
        withdrawal = EquityTransaction(
            id="EQ2", date="2024-01-01",
            transaction_type=EquityTransactionType.OWNER_WITHDRAWAL, amount=40, created_by="a",
        )
        assert contribution.signed_amount == 100
        assert withdrawal.signed_amount == -40


class TestInvestmentModels:
    """Tests for investor models."""

    def test_total_roi_alias(self):
        investor = Investor.model_validate(
            {"id": "i1", "name": "Zara", "managingAgentId": "a", "totalROI": 12.5}
        )
        assert investor.total_roi == 12.5
        assert investor.to_storage()["totalROI"] == 12.5

    def test_current_share_value_falls_back_to_acquisition(self):
        investment = InvestorInvestment(
            id="inv1",
            investor_id="i1",
            property_id="P1",
            share_percentage=25,
            investment_amount=2_500_000,
            acquisition_price=10_000_000,
        )
        assert investment.current_share_value == 2_500_000


class TestAuditModels:
    """Tests for audit event models."""

    def test_audit_event_creation(self):
        event = AuditEvent(event_type=AuditEventType.SYSTEM_ERROR, description="boom")
        assert event.severity == AuditSeverity.INFO
        assert event.event_id is not None

    def test_audit_event_to_log_dict(self):
        event = AuditEventBuilder.deal_cancelled(deal_id="D1", reason="Buyer withdrew", user_id="a")
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "deal_cancelled"
        assert log_dict["entity_id"] == "D1"
        assert log_dict["correlation_id"] is None

    def test_storage_record_is_json_safe(self):
        event = AuditEventBuilder.report_exported(report_type="pl", report_id="PL-1", size_bytes=10)
        record = event.to_storage_record()
        assert isinstance(record["event_id"], str)
        assert isinstance(record["timestamp"], str)

    def test_validation_failed_is_a_warning(self):
        event = AuditEventBuilder.validation_failed("lead", None, [{"field": "name"}])
        assert event.severity == AuditSeverity.WARNING
        assert "1 issues" in event.description
