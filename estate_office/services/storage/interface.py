"""
Abstract Storage Interface

DESIGN DECISION: Storage is a key/value store where each key holds a
JSON array of records, the same layout the agency's data has always
had. This allows us to:
1. Keep existing data files readable without migration
2. Use in-memory storage for testing
3. Keep business logic decoupled from where the bytes live

The interface is intentionally simple - repositories do the filtering.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from estate_office.models.audit import AuditEvent


class RecordStorageInterface(ABC):
    """
    Abstract interface for keyed record storage.

    Any storage implementation (JSON files, memory, a database later)
    must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> list[dict]:
        """
        Read every record stored under a key.

        Args:
            key: Storage key (e.g., 'estate_properties')

        Returns:
            The stored records, or [] when the key is missing or its
            content cannot be parsed as a JSON array
        """
        pass

    @abstractmethod
    def write(self, key: str, records: list[dict]) -> None:
        """
        Replace the records stored under a key.

        Raises:
            QuotaExceededError: If the serialized value is too large
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    def remove(self, key: str) -> bool:
        """
        Remove a key entirely.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List the keys currently holding data."""
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Get all events sharing a correlation ID, in chronological order."""
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """Get all events for a specific record, in chronological order."""
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Get the most recent audit events (newest first)."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Record not found in storage."""

    def __init__(self, key: str, record_id: str):
        self.key = key
        self.record_id = record_id
        super().__init__(f"Record {record_id} not found in {key}")


class DuplicateError(StorageError):
    """Attempted to insert a record whose id already exists."""

    def __init__(self, key: str, record_id: str):
        self.key = key
        self.record_id = record_id
        super().__init__(f"Record {record_id} already exists in {key}")


class StorageConnectionError(StorageError):
    """The storage location is not usable."""
    pass


class QuotaExceededError(StorageError):
    """Serialized value is larger than the configured limit."""

    def __init__(self, key: str, size: int, limit: Optional[int]):
        self.key = key
        self.size = size
        self.limit = limit
        super().__init__(f"Value for {key} is {size} bytes, limit is {limit}")
