"""
In-memory record storage.

Holds each key as the serialized JSON string, exactly as a file or the
browser would, so parse and quota behaviour match LocalJsonStorage.
"""

from typing import Optional

from estate_office.config import get_settings
from estate_office.services.storage.codec import parse_records, serialize_records
from estate_office.services.storage.interface import RecordStorageInterface


class InMemoryStorage(RecordStorageInterface):
    """Record storage that lives for the life of the process."""

    def __init__(self, max_value_bytes: Optional[int] = None):
        self._values: dict[str, str] = {}
        self._max_bytes = max_value_bytes or get_settings().storage.max_value_bytes

    def read(self, key: str) -> list[dict]:
        return parse_records(key, self._values.get(key))

    def write(self, key: str, records: list[dict]) -> None:
        self._values[key] = serialize_records(key, records, self._max_bytes)

    def remove(self, key: str) -> bool:
        return self._values.pop(key, None) is not None

    def keys(self) -> list[str]:
        return sorted(self._values)

    def set_raw(self, key: str, text: str) -> None:
        """Store an unvalidated string, as an older client might have left it."""
        self._values[key] = text

    def get_raw(self, key: str) -> Optional[str]:
        return self._values.get(key)
