"""
Storage Services Package

Provides the abstract storage interfaces and the local JSON-file and
in-memory backends.
"""

from estate_office.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    QuotaExceededError,
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)
from estate_office.services.storage.local_json import LocalJsonStorage
from estate_office.services.storage.memory import InMemoryStorage
from estate_office.services.storage.audit import AUDIT_LOG_KEY, RecordAuditStorage

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "RecordStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "QuotaExceededError",
    "StorageConnectionError",
    "StorageError",
    # Implementations
    "AUDIT_LOG_KEY",
    "InMemoryStorage",
    "LocalJsonStorage",
    "RecordAuditStorage",
]
