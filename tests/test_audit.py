"""Tests for the audit logger, settings and application wiring."""

from estate_office.audit import AuditLogger, create_correlation_id
from estate_office.config import get_settings, validate_all_settings
from estate_office.models.audit import AuditEventBuilder, AuditEventType, AuditSeverity
from estate_office.orchestrator import EstateOffice, create_app_components
from estate_office.services.storage import InMemoryStorage, LocalJsonStorage, RecordAuditStorage


class TestAuditLogger:
    """A failed audit write never blocks the caller."""

    def test_log_persists(self, audit_logger):
        assert audit_logger.log(AuditEventBuilder.record_created("deal", "D1", user_id="agent-1"))
        events = audit_logger.recent_events()
        assert events[0].entity_id == "D1"
        assert events[0].user_id == "agent-1"

    def test_log_without_storage(self):
        logger = AuditLogger()
        assert logger.log(AuditEventBuilder.record_created("deal", "D1"))
        assert logger.recent_events() == []

    def test_storage_failure_returns_false(self):
        tiny = InMemoryStorage(max_value_bytes=100)
        logger = AuditLogger(RecordAuditStorage(tiny))
        assert logger.log(AuditEventBuilder.record_created("deal", "D1")) is False

    def test_log_error(self, audit_logger):
        correlation_id = create_correlation_id()
        audit_logger.log_error("StorageError", "disk full", {"key": "estate_deals"}, correlation_id)
        event = audit_logger.recent_events()[0]
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.severity == AuditSeverity.ERROR
        assert event.correlation_id == correlation_id

    def test_recent_events_limit(self, audit_logger):
        for n in range(5):
            audit_logger.log(AuditEventBuilder.record_created("deal", f"D{n}"))
        assert len(audit_logger.recent_events(limit=3)) == 3


class TestSettings:
    """Configuration from the environment."""

    def test_defaults(self):
        settings = get_settings()
        assert settings.accounting.currency == "PKR"
        assert settings.accounting.balance_tolerance == 0.01
        assert settings.app.match_score_threshold == 30
        assert settings.storage.write_retry_attempts == 3

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("ESTATE_ACCOUNTING_INCOME_TAX_RATE", "0.25")
        assert get_settings().accounting.income_tax_rate == 0.25

    def test_validate_all_settings(self):
        assert validate_all_settings() == {"storage": True, "accounting": True, "app": True}

    def test_invalid_setting_is_reported(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "LOUD")
        results = validate_all_settings()
        assert results["app"] is False
        assert "app_error" in results
        assert results["storage"] is True


class TestCreateAppComponents:
    """Everything shares one storage backend and one audit logger."""

    def test_wires_given_storage(self, storage):
        office = create_app_components(storage)
        assert isinstance(office, EstateOffice)
        assert office.storage is storage

        office.properties.create(address="1 Main", created_by="agent-1")
        assert storage.read("estate_properties")
        assert office.audit_logger.recent_events()[0].event_type == AuditEventType.RECORD_CREATED

    def test_defaults_to_json_files(self, tmp_path, monkeypatch):
        monkeypatch.setenv("ESTATE_STORAGE_DATA_DIR", str(tmp_path / "office"))
        office = create_app_components()
        assert isinstance(office.storage, LocalJsonStorage)

        office.leads.create(name="Ali Raza", agent_id="agent-1")
        assert (tmp_path / "office" / "estate_leads.json").exists()
