"""Services package."""

from estate_office.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryStorage,
    LocalJsonStorage,
    NotFoundError,
    QuotaExceededError,
    RecordAuditStorage,
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryStorage",
    "LocalJsonStorage",
    "NotFoundError",
    "QuotaExceededError",
    "RecordAuditStorage",
    "RecordStorageInterface",
    "StorageConnectionError",
    "StorageError",
]
