"""Tests for ownership transfers, re-listing and buyer matching."""

from datetime import datetime

import pytest

from estate_office.models.audit import AuditEventType
from estate_office.models.crm import BuyerRequirement
from estate_office.models.investment import InvestmentStatus
from estate_office.models.property import (
    AGENCY_OWNER_ID,
    InvestorShare,
    OwnershipRecord,
    OwnerType,
    PropertyStatus,
)
from estate_office.properties import (
    PropertyMatcher,
    ownership_duration_days,
    sales_count,
    score_property,
)


def requirement(**overrides):
    fields = dict(
        id="req_1",
        agent_id="agent-1",
        min_budget=8_000_000,
        max_budget=10_000_000,
        property_types=["house"],
        min_bedrooms=3,
        max_bedrooms=5,
        min_bathrooms=2,
        preferred_locations=["f-7"],
        must_have_features=["garage", "garden"],
    )
    fields.update(overrides)
    return BuyerRequirement(**fields)


class TestOwnershipTransfer:
    """Ownership history is append-only."""

    def test_first_owner(self, office, listed_property):
        prop, _ = listed_property
        assert prop.current_owner_id == "seller-1"
        assert prop.current_owner_type == OwnerType.CLIENT
        assert len(prop.ownership_history) == 1
        assert prop.ownership_history[0].is_open

    def test_transfer_closes_previous_record(self, office, listed_property):
        prop, _ = listed_property
        updated = office.ownership.transfer_ownership(
            prop.id, "buyer-1", "Usman Tariq", "client", sale_price=9_000_000
        )
        previous, current = updated.ownership_history
        assert previous.sold_date is not None
        assert previous.sale_price == 9_000_000
        assert current.owner_id == "buyer-1"
        assert current.is_open
        assert sales_count(updated) == 1

    def test_transfer_is_audited(self, office, listed_property):
        events = office.audit_logger.recent_events(limit=100)
        assert any(e.event_type == AuditEventType.OWNERSHIP_TRANSFERRED for e in events)

    def test_missing_property(self, office):
        assert office.ownership.transfer_ownership("nope", "x", "X", "client") is None

    def test_investor_shares_record_investments(self, office, listed_property):
        prop, _ = listed_property
        first = office.investors.create(name="Zara Sheikh", managing_agent_id="agent-1")
        second = office.investors.create(name="Omar Farooq", managing_agent_id="agent-1")
        office.ownership.transfer_ownership(
            prop.id,
            "INVESTORS",
            "Investor Group",
            OwnerType.INVESTOR,
            investor_shares=[
                InvestorShare(investor_id=first.id, share_percentage=60),
                InvestorShare(investor_id=second.id, share_percentage=40),
            ],
            sale_price=10_000_000,
        )
        stakes = office.investments.for_property(prop.id)
        assert sorted(s.investment_amount for s in stakes) == [4_000_000, 6_000_000]
        assert all(s.status == InvestmentStatus.ACTIVE for s in stakes)
        assert office.investors.require(first.id).total_invested == 6_000_000

    def test_bad_share_total_records_nothing(self, office, listed_property):
        prop, _ = listed_property
        investor = office.investors.create(name="Zara Sheikh", managing_agent_id="agent-1")
        with pytest.raises(ValueError, match="must total 100%"):
            office.ownership.transfer_ownership(
                prop.id,
                "INVESTORS",
                "Investor Group",
                OwnerType.INVESTOR,
                investor_shares=[InvestorShare(investor_id=investor.id, share_percentage=60)],
                sale_price=10_000_000,
            )
        assert office.investments.list_all() == []
        assert office.properties.require(prop.id).current_owner_id == "seller-1"


class TestOwnerLookups:
    def test_current_owner(self, office, listed_property):
        prop, _ = listed_property
        owner = office.ownership.get_current_owner(prop.id)
        assert owner.owner_id == "seller-1"
        assert owner.owner_name == "Sadia Malik"

    def test_no_owner(self, office, agent):
        prop = office.properties.create(address="1 Main", created_by=agent.user_id)
        assert office.ownership.get_current_owner(prop.id) is None
        assert office.ownership.get_ownership_history(prop.id) == []

    def test_duration_rounds_up(self):
        record = OwnershipRecord(
            owner_id="o",
            acquired_date=datetime(2024, 1, 1),
            sold_date=datetime(2024, 1, 3, 0, 0, 1),
        )
        assert ownership_duration_days(record) == 3

    def test_open_duration_runs_to_now(self):
        record = OwnershipRecord(owner_id="o", acquired_date=datetime(2024, 1, 1))
        assert ownership_duration_days(record, now=datetime(2024, 1, 11)) == 10


class TestRelisting:
    """The agency buys sold properties back."""

    def test_unsold_property_cannot_be_relisted(self, office, listed_property):
        prop, _ = listed_property
        check = office.ownership.can_relist(prop.id)
        assert not check.allowed
        assert check.reason == "Property is not in a sold state"
        with pytest.raises(ValueError, match="not in a sold state"):
            office.ownership.relist_property(prop.id, 8_000_000, "Sadia Malik")

    def test_relist_sold_property(self, office, listed_property, admin):
        prop, _ = listed_property
        office.ownership.finalize_sale(prop.id, "buyer-1", "Usman Tariq", 9_000_000)
        assert [p.id for p in office.ownership.relistable_properties(admin)] == [prop.id]

        relisted = office.ownership.relist_property(prop.id, 8_500_000, "Usman Tariq")
        assert relisted.status == PropertyStatus.AVAILABLE
        assert relisted.current_owner_id == AGENCY_OWNER_ID
        assert relisted.current_owner_type == OwnerType.AGENCY
        assert relisted.ownership_history[-1].notes == "Re-purchased from Usman Tariq for 8.5e+06"
        assert sales_count(relisted) == 2

    def test_agency_property_cannot_be_relisted(self, office, listed_property):
        prop, _ = listed_property
        office.ownership.finalize_sale(prop.id, "buyer-1", "Usman Tariq", 9_000_000)
        office.ownership.relist_property(prop.id, 8_500_000, "Usman Tariq")
        office.properties.update(prop.id, status=PropertyStatus.SOLD)
        with pytest.raises(ValueError, match="already owned by agency"):
            office.ownership.relist_property(prop.id, 1, "Agency")

    def test_relist_missing_property(self, office):
        with pytest.raises(ValueError, match="Property not found"):
            office.ownership.relist_property("nope", 1, "x")


class TestFinalizeSale:
    def test_defaults_to_list_price(self, office, listed_property):
        prop, _ = listed_property
        sold = office.ownership.finalize_sale(prop.id, "buyer-1", "Usman Tariq")
        assert sold.status == PropertyStatus.SOLD
        assert sold.final_sale_price == 10_000_000
        assert sold.sold_date is not None
        assert sold.ownership_history[-1].notes == "Sold to Usman Tariq for 1e+07"

    def test_missing_property(self, office):
        assert office.ownership.finalize_sale("nope", "b", "B") is None


class TestScoreProperty:
    """Tests for the additive match score."""

    def test_perfect_match(self, listed_property):
        prop, _ = listed_property
        score, reasons, mismatches = score_property(prop, 9_500_000, requirement())
        assert score == 110
        assert mismatches == []
        assert "Matching property type" in reasons
        assert "Located in preferred area" in reasons
        assert "All must-have features available" in reasons

    def test_over_budget(self, listed_property):
        prop, _ = listed_property
        score, _, mismatches = score_property(prop, 11_000_000, requirement())
        assert score == 70
        assert mismatches == ["Price above budget (10% more)"]

    def test_below_budget(self, listed_property):
        prop, _ = listed_property
        _, _, mismatches = score_property(prop, 6_000_000, requirement())
        assert mismatches == ["Price below budget (25% less)"]

    def test_more_bedrooms_than_needed(self, listed_property):
        prop, _ = listed_property
        score, reasons, _ = score_property(prop, 9_500_000, requirement(max_bedrooms=3))
        assert score == 100
        assert "More bedrooms than needed" in reasons

    def test_no_location_preference_gives_partial_points(self, listed_property):
        prop, _ = listed_property
        score, _, _ = score_property(prop, 9_500_000, requirement(preferred_locations=[]))
        assert score == 102

    def test_empty_type_list_is_no_criterion(self, listed_property):
        prop, _ = listed_property
        score, _, mismatches = score_property(prop, 9_500_000, requirement(property_types=[]))
        assert score == 90
        assert mismatches == []

    def test_misses(self, listed_property):
        prop, _ = listed_property
        req = requirement(
            property_types=["apartment"],
            min_bathrooms=4,
            preferred_locations=["DHA"],
            must_have_features=["garage", "pool"],
        )
        score, reasons, mismatches = score_property(prop, 9_500_000, req)
        assert score == 40 + 15 + 5
        assert "1/2 must-have features" in reasons
        assert mismatches == [
            "Property type does not match",
            "Not enough bathrooms (has 3, needs 4)",
            "Location not in preferred areas",
            "Missing: pool",
        ]


class TestPropertyMatcher:
    """Tests for ranking listed properties."""

    def test_finds_listed_property(self, office, listed_property, agent):
        prop, cycle = listed_property
        matches = office.matcher.find_matches_for_buyer(requirement(), agent)
        assert [m.property_id for m in matches] == [prop.id]
        assert matches[0].sell_cycle_id == cycle.id
        assert matches[0].asking_price == 9_500_000

    def test_threshold_filters(self, office, listed_property, agent):
        matcher = PropertyMatcher(office.properties, office.sell_cycles, threshold=111)
        assert matcher.find_matches_for_buyer(requirement(), agent) == []

    def test_needs_active_cycle(self, office, listed_property, agent):
        _, cycle = listed_property
        office.sell_cycles.update(cycle.id, status="cancelled")
        assert office.matcher.find_matches_for_buyer(requirement(), agent) == []

    def test_archived_properties_are_skipped(self, office, listed_property, agent):
        prop, _ = listed_property
        office.properties.archive(prop.id)
        assert office.matcher.find_matches_for_buyer(requirement(), agent) == []

    def test_best_match_first(self, office, listed_property, agent):
        other = office.properties.create(
            address="9 Street 1", city="Lahore", property_type="house", price=9_000_000,
            bedrooms=3, bathrooms=2, created_by=agent.user_id,
        )
        office.sell_cycles.create(property_id=other.id, agent_id=agent.user_id, asking_price=9_000_000)
        matches = office.matcher.find_matches_for_buyer(requirement(), agent)
        assert matches[0].property_id == listed_property[0].id
        assert matches[0].match_score > matches[1].match_score
