"""
Audit log storage on top of record storage.

Audit events are appended to the audit_log key. Nothing here updates
an existing event. The log keeps the most recent max_events events;
older ones are dropped on append so the key stays under its quota.
"""

from typing import Optional
from uuid import UUID

import structlog
from pydantic import ValidationError

from estate_office.config import get_settings
from estate_office.models.audit import AuditEvent
from estate_office.services.storage.interface import (
    AuditStorageInterface,
    RecordStorageInterface,
)

logger = structlog.get_logger(__name__)

AUDIT_LOG_KEY = "audit_log"


class RecordAuditStorage(AuditStorageInterface):
    """Audit storage that keeps events as records under one key."""

    def __init__(
        self,
        storage: RecordStorageInterface,
        key: str = AUDIT_LOG_KEY,
        max_events: Optional[int] = None,
    ):
        self._storage = storage
        self._key = key
        self._max_events = max_events or get_settings().storage.audit_max_events

    def _load(self) -> list[AuditEvent]:
        events = []
        for raw in self._storage.read(self._key):
            try:
                events.append(AuditEvent.model_validate(raw))
            except ValidationError as e:
                logger.warning(
                    "invalid_record_skipped",
                    key=self._key,
                    record_id=raw.get("event_id"),
                    error=str(e),
                )
        return events

    def append_event(self, event: AuditEvent) -> bool:
        """Append an audit event. Storage errors propagate to the caller."""
        records = self._storage.read(self._key)
        records.append(event.to_storage_record())
        if len(records) > self._max_events:
            dropped = len(records) - self._max_events
            records = records[dropped:]
            logger.info("audit_log_trimmed", key=self._key, dropped=dropped)
        self._storage.write(self._key, records)
        return True

    def get_events_by_correlation_id(self, correlation_id: UUID) -> list[AuditEvent]:
        events = [e for e in self._load() if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    def get_events_by_entity(self, entity_type: str, entity_id: str) -> list[AuditEvent]:
        events = [
            e for e in self._load()
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    def get_recent_events(self, limit: int = 100) -> list[AuditEvent]:
        events = sorted(self._load(), key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
