"""
Shared fixtures.

Every test runs against InMemoryStorage unless it asks for the
JSON-file backend, so no test touches the real data directory.
"""

import pytest

from estate_office.audit import AuditLogger
from estate_office.config import get_settings
from estate_office.models.base import UserContext, UserRole
from estate_office.models.deal import DealParty
from estate_office.orchestrator import create_app_components
from estate_office.services.storage import InMemoryStorage, LocalJsonStorage, RecordAuditStorage


@pytest.fixture(autouse=True)
def fresh_settings():
    """Settings are re-read for every test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def json_storage(tmp_path):
    return LocalJsonStorage(data_dir=str(tmp_path / "data"), retry_wait=lambda _: 0)


@pytest.fixture
def audit_logger(storage):
    return AuditLogger(RecordAuditStorage(storage))


@pytest.fixture
def office(storage):
    return create_app_components(storage)


@pytest.fixture
def admin():
    return UserContext(user_id="admin-1", role=UserRole.ADMIN, name="Office Admin")


@pytest.fixture
def agent():
    return UserContext(user_id="agent-1", role=UserRole.AGENT, name="Ayesha Khan")


@pytest.fixture
def other_agent():
    return UserContext(user_id="agent-2", role=UserRole.AGENT, name="Bilal Ahmed")


@pytest.fixture
def listed_property(office, agent):
    """A house listed by agent-1 with an active sell cycle at 10M."""
    prop = office.properties.create(
        title="Corner House",
        address="12 Street 4",
        block="F-7/2",
        area="F-7",
        city="Islamabad",
        property_type="house",
        price=10_000_000,
        bedrooms=4,
        bathrooms=3,
        features=["Garage", "Garden", "Servant Quarter"],
        created_by=agent.user_id,
        agent_id=agent.user_id,
        agent_name=agent.name,
    )
    prop = office.ownership.transfer_ownership(prop.id, "seller-1", "Sadia Malik", "client")
    cycle = office.sell_cycles.create(
        property_id=prop.id,
        agent_id=agent.user_id,
        asking_price=9_500_000,
    )
    return prop, cycle


@pytest.fixture
def open_deal(office, agent, listed_property):
    """A deal on the listed property with a 2% commission and two agents."""
    prop, cycle = listed_property
    return office.pipeline.create_deal(
        sell_cycle_id=cycle.id,
        agreed_price=9_000_000,
        buyer=DealParty(id="buyer-1", name="Usman Tariq"),
        seller=DealParty(id="seller-1", name="Sadia Malik"),
        primary_agent=DealParty(id=agent.user_id, name=agent.name),
        secondary_agent=DealParty(id="agent-2", name="Bilal Ahmed"),
        commission_rate=2.0,
    )
