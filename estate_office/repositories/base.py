"""
Generic record repository.

DESIGN DECISION: Repositories work on the raw stored dicts when they
write. A stored record that no longer validates is skipped when
listing, but it is carried through untouched on every write, so
reading can never destroy data.
"""

from typing import Any, ClassVar, Generic, Optional, TypeVar

import structlog
from pydantic import ValidationError

from estate_office.audit.logger import AuditLogger
from estate_office.models.audit import AuditEventBuilder
from estate_office.models.base import StoredRecord, UserContext, new_record_id, utcnow
from estate_office.services.storage import (
    DuplicateError,
    NotFoundError,
    RecordStorageInterface,
)

logger = structlog.get_logger(__name__)

T = TypeVar("T", bound=StoredRecord)


class RecordRepository(Generic[T]):
    """
    CRUD over the JSON array stored under one key.

    Subclasses set `key`, `model` and `id_prefix`, and override
    `is_visible` when agents should only see part of the data.
    """

    key: ClassVar[str] = ""
    model: ClassVar[type[StoredRecord]] = StoredRecord
    id_prefix: ClassVar[str] = "REC"
    id_separator: ClassVar[str] = "-"
    entity_type: ClassVar[str] = "record"

    def __init__(
        self,
        storage: RecordStorageInterface,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._storage = storage
        self._audit = audit_logger

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def _parse(self, raw: dict) -> Optional[T]:
        try:
            return self.model.model_validate(raw)
        except ValidationError as e:
            logger.warning(
                "invalid_record_skipped",
                key=self.key,
                record_id=raw.get("id"),
                errors=e.error_count(),
            )
            return None

    def list_all(self) -> list[T]:
        """Every valid record under the key, in stored order."""
        records = []
        for raw in self._storage.read(self.key):
            record = self._parse(raw)
            if record is not None:
                records.append(record)
        return records

    def is_visible(self, record: T, user: UserContext) -> bool:
        """Whether a non-admin user may see the record."""
        return getattr(record, "agent_id", None) == user.user_id

    def list_for(self, user: UserContext) -> list[T]:
        """Records the user may see. Admins see everything."""
        records = self.list_all()
        if user.is_admin:
            return records
        return [r for r in records if self.is_visible(r, user)]

    def get(self, record_id: str) -> Optional[T]:
        for record in self.list_all():
            if record.id == record_id:
                return record
        return None

    def require(self, record_id: str) -> T:
        record = self.get(record_id)
        if record is None:
            raise NotFoundError(self.key, record_id)
        return record

    # ------------------------------------------------------------------
    # Writing
    # ------------------------------------------------------------------

    def new_id(self) -> str:
        return new_record_id(self.id_prefix, self.id_separator)

    def _index_of(self, raw_records: list[dict], record_id: str) -> int:
        for index, raw in enumerate(raw_records):
            if raw.get("id") == record_id:
                return index
        return -1

    def create(self, **fields: Any) -> T:
        """Build a record with a fresh id from keyword fields and add it."""
        fields.setdefault("id", self.new_id())
        record = self.model.model_validate(fields)
        return self.add(record)

    def add(self, record: T) -> T:
        """
        Append a record.

        Raises:
            DuplicateError: If a record with the same id exists
        """
        raw_records = self._storage.read(self.key)
        if self._index_of(raw_records, record.id) >= 0:
            raise DuplicateError(self.key, record.id)
        raw_records.append(record.to_storage())
        self._storage.write(self.key, raw_records)
        self._log_created(record)
        return record

    def update(self, record_id: str, **changes: Any) -> T:
        """
        Apply field changes to a record and refresh updated_at.

        Raises:
            NotFoundError: If no record has the id
        """
        raw_records = self._storage.read(self.key)
        index = self._index_of(raw_records, record_id)
        if index < 0:
            raise NotFoundError(self.key, record_id)

        current = self.model.model_validate(raw_records[index])
        data = current.model_dump()
        data.update(changes)
        data["id"] = record_id
        data["updated_at"] = utcnow()
        updated = self.model.model_validate(data)

        raw_records[index] = updated.to_storage()
        self._storage.write(self.key, raw_records)

        if self._audit:
            self._audit.log(AuditEventBuilder.record_updated(
                entity_type=self.entity_type,
                entity_id=record_id,
                changed_fields=sorted(changes),
            ))
        return updated

    def save(self, record: T) -> T:
        """Insert or replace a whole record."""
        raw_records = self._storage.read(self.key)
        index = self._index_of(raw_records, record.id)
        if index < 0:
            raw_records.append(record.to_storage())
        else:
            record.updated_at = utcnow()
            raw_records[index] = record.to_storage()
        self._storage.write(self.key, raw_records)
        if index < 0:
            self._log_created(record)
        return record

    def delete(self, record_id: str) -> bool:
        raw_records = self._storage.read(self.key)
        remaining = [raw for raw in raw_records if raw.get("id") != record_id]
        if len(remaining) == len(raw_records):
            return False
        self._storage.write(self.key, remaining)
        if self._audit:
            self._audit.log(AuditEventBuilder.record_deleted(
                entity_type=self.entity_type,
                entity_id=record_id,
            ))
        return True

    def replace_all(self, records: list[T]) -> None:
        self._storage.write(self.key, [r.to_storage() for r in records])

    def _log_created(self, record: T) -> None:
        if self._audit:
            self._audit.log(AuditEventBuilder.record_created(
                entity_type=self.entity_type,
                entity_id=record.id,
            ))
