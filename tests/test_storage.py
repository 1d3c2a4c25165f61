"""Tests for the storage backends and the audit log storage."""

import json
from uuid import uuid4

import pytest

from estate_office.audit import AuditLogger
from estate_office.models.audit import AuditEventBuilder
from estate_office.services.storage import (
    AUDIT_LOG_KEY,
    InMemoryStorage,
    LocalJsonStorage,
    QuotaExceededError,
    RecordAuditStorage,
    StorageConnectionError,
)


class TestInMemoryStorage:
    """Tests for the in-memory backend."""

    def test_missing_key_reads_empty(self, storage):
        assert storage.read("estate_properties") == []

    def test_write_then_read(self, storage):
        storage.write("crm_farms", [{"id": "FARM-1", "name": "DHA Phase 6"}])
        assert storage.read("crm_farms") == [{"id": "FARM-1", "name": "DHA Phase 6"}]
        assert storage.keys() == ["crm_farms"]

    def test_corrupt_value_reads_empty(self, storage):
        """Unparseable JSON is reported, never raised."""
        storage.set_raw("estate_leads", "{not json")
        assert storage.read("estate_leads") == []

    def test_non_array_value_reads_empty(self, storage):
        storage.set_raw("estate_leads", json.dumps({"id": "lead_1"}))
        assert storage.read("estate_leads") == []

    def test_non_object_items_are_dropped(self, storage):
        storage.set_raw("estate_leads", json.dumps([{"id": "lead_1"}, 7, "x"]))
        assert storage.read("estate_leads") == [{"id": "lead_1"}]

    def test_quota_is_enforced(self):
        small = InMemoryStorage(max_value_bytes=64)
        with pytest.raises(QuotaExceededError) as exc_info:
            small.write("notes", [{"text": "x" * 200}])
        assert exc_info.value.key == "notes"
        assert small.get_raw("notes") is None

    def test_default_quota_comes_from_settings(self):
        with pytest.raises(QuotaExceededError):
            InMemoryStorage().write("big", [{"text": "x" * (6 * 1024 * 1024)}])

    def test_quota_setting_from_environment(self, monkeypatch):
        monkeypatch.setenv("ESTATE_STORAGE_MAX_VALUE_BYTES", "2048")
        storage = InMemoryStorage()
        storage.write("notes", [{"text": "x" * 1000}])
        with pytest.raises(QuotaExceededError):
            storage.write("notes", [{"text": "x" * 4000}])
        assert len(storage.read("notes")[0]["text"]) == 1000

    def test_remove(self, storage):
        storage.write("crm_farms", [])
        assert storage.remove("crm_farms")
        assert not storage.remove("crm_farms")


class TestLocalJsonStorage:
    """Tests for the JSON-file backend."""

    def test_one_file_per_key(self, json_storage):
        json_storage.write("estate_deals", [{"id": "DEAL-1"}])
        path = json_storage.root / "estate_deals.json"
        assert path.exists()
        assert json.loads(path.read_text(encoding="utf-8")) == [{"id": "DEAL-1"}]

    def test_read_back(self, json_storage):
        json_storage.write("estate_deals", [{"id": "DEAL-1", "notes": "Ünïcode"}])
        assert json_storage.read("estate_deals") == [{"id": "DEAL-1", "notes": "Ünïcode"}]

    def test_corrupt_file_reads_empty(self, json_storage):
        (json_storage.root / "estate_leads.json").write_text("[{", encoding="utf-8")
        assert json_storage.read("estate_leads") == []

    def test_no_temp_files_left_behind(self, json_storage):
        json_storage.write("estate_deals", [{"id": "DEAL-1"}])
        json_storage.write("estate_deals", [{"id": "DEAL-2"}])
        assert json_storage.keys() == ["estate_deals"]
        assert not list(json_storage.root.glob(".tmp-*"))

    def test_invalid_key_is_rejected(self, json_storage):
        with pytest.raises(ValueError, match="Invalid storage key"):
            json_storage.read("../etc/passwd")
        with pytest.raises(ValueError, match="Invalid storage key"):
            json_storage.write("estate_deals\n", [])

    def test_quota_is_enforced(self, tmp_path):
        storage = LocalJsonStorage(data_dir=str(tmp_path), max_value_bytes=1024)
        with pytest.raises(QuotaExceededError):
            storage.write("big", [{"text": "x" * 2000}])
        assert storage.read("big") == []

    def test_data_dir_that_is_a_file(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(StorageConnectionError):
            LocalJsonStorage(data_dir=str(blocker))

    def test_remove(self, json_storage):
        json_storage.write("estate_deals", [])
        assert json_storage.remove("estate_deals")
        assert json_storage.keys() == []


class TestRecordAuditStorage:
    """Tests for the append-only audit log."""

    def test_events_are_appended(self, storage):
        audit = RecordAuditStorage(storage)
        audit.append_event(AuditEventBuilder.record_created("deal", "D1"))
        audit.append_event(AuditEventBuilder.record_deleted("deal", "D1"))
        assert len(storage.read(AUDIT_LOG_KEY)) == 2

    def test_lookup_by_entity(self, storage):
        audit = RecordAuditStorage(storage)
        audit.append_event(AuditEventBuilder.record_created("deal", "D1"))
        audit.append_event(AuditEventBuilder.record_created("deal", "D2"))
        events = audit.get_events_by_entity("deal", "D1")
        assert [e.entity_id for e in events] == ["D1"]

    def test_lookup_by_correlation_id(self, storage):
        audit = RecordAuditStorage(storage)
        correlation_id = uuid4()
        audit.append_event(AuditEventBuilder.record_created("deal", "D1", correlation_id=correlation_id))
        audit.append_event(AuditEventBuilder.record_created("property", "P1", correlation_id=correlation_id))
        audit.append_event(AuditEventBuilder.record_created("property", "P2"))
        assert len(audit.get_events_by_correlation_id(correlation_id)) == 2

    def test_recent_events_newest_first(self, storage):
        audit = RecordAuditStorage(storage)
        for deal_id in ("D1", "D2", "D3"):
            audit.append_event(AuditEventBuilder.record_created("deal", deal_id))
        recent = audit.get_recent_events(limit=2)
        assert len(recent) == 2
        assert recent[0].timestamp >= recent[1].timestamp

    def test_invalid_events_are_skipped(self, storage):
        storage.write(AUDIT_LOG_KEY, [{"description": "no type"}])
        assert RecordAuditStorage(storage).get_recent_events() == []

    def test_log_keeps_most_recent_events(self, storage):
        audit = RecordAuditStorage(storage, max_events=3)
        for n in range(5):
            audit.append_event(AuditEventBuilder.record_created("deal", f"D{n}"))
        assert len(storage.read(AUDIT_LOG_KEY)) == 3
        assert {e.entity_id for e in audit.get_recent_events()} == {"D2", "D3", "D4"}

    def test_cap_from_environment(self, storage, monkeypatch):
        monkeypatch.setenv("ESTATE_STORAGE_AUDIT_MAX_EVENTS", "2")
        audit = RecordAuditStorage(storage)
        for n in range(4):
            audit.append_event(AuditEventBuilder.record_created("deal", f"D{n}"))
        assert len(storage.read(AUDIT_LOG_KEY)) == 2

    def test_capped_log_stays_under_quota(self):
        """Auditing keeps working long after an uncapped log would overflow the key."""
        audit_logger = AuditLogger(RecordAuditStorage(InMemoryStorage(max_value_bytes=10_000), max_events=5))
        results = [
            audit_logger.log(AuditEventBuilder.record_created("deal", f"D{n}"))
            for n in range(200)
        ]
        assert all(results)
        assert len(audit_logger.recent_events()) == 5
