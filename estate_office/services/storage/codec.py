"""
Serialization shared by the storage backends.

A key's value is a JSON array of objects. Anything else found under a
key is treated as unreadable and reported, never raised, so one bad
key cannot take the whole back office down.
"""

import json
from typing import Optional

import structlog

from estate_office.services.storage.interface import QuotaExceededError

logger = structlog.get_logger(__name__)


def serialize_records(key: str, records: list[dict], max_bytes: Optional[int]) -> str:
    """
    Encode records for storage.

    Raises:
        QuotaExceededError: If the encoded value is larger than max_bytes
    """
    text = json.dumps(records, ensure_ascii=False, separators=(",", ":"))
    size = len(text.encode("utf-8"))
    if max_bytes is not None and size > max_bytes:
        raise QuotaExceededError(key, size, max_bytes)
    return text


def parse_records(key: str, text: Optional[str]) -> list[dict]:
    """Decode a stored value, yielding [] for anything that is not a JSON array."""
    if text is None or not text.strip():
        return []
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning("storage_parse_failed", key=key, error=str(e))
        return []
    if not isinstance(value, list):
        logger.warning(
            "storage_parse_failed",
            key=key,
            error=f"expected a JSON array, found {type(value).__name__}",
        )
        return []
    return [item for item in value if isinstance(item, dict)]
