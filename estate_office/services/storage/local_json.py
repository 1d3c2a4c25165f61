"""
Local JSON File Storage Implementation

DESIGN DECISION: Each storage key is one JSON file in a data directory:
1. Files can be inspected and backed up with ordinary tools
2. No database setup required
3. The key layout matches the browser storage the data came from

TRADEOFFS:
- Single user, last write wins (fine for one back office)
- Every write rewrites the whole key (keys stay small)

Writes go to a temporary file which is then renamed over the target,
so a crash mid-write never leaves a half-written key behind.
"""

import os
import re
import tempfile
from pathlib import Path
from typing import Optional

import structlog
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from estate_office.config import get_settings
from estate_office.services.storage.codec import parse_records, serialize_records
from estate_office.services.storage.interface import (
    RecordStorageInterface,
    StorageConnectionError,
    StorageError,
)

logger = structlog.get_logger(__name__)

_KEY_PATTERN = re.compile(r"[A-Za-z0-9_.-]+")
_SUFFIX = ".json"


def _check_key(key: str) -> str:
    if not _KEY_PATTERN.fullmatch(key) or key.startswith("."):
        raise ValueError(f"Invalid storage key: {key!r}")
    return key


class LocalJsonStorage(RecordStorageInterface):
    """
    JSON-file implementation of record storage.

    Each key is stored as <data_dir>/<key>.json holding a JSON array.
    """

    def __init__(
        self,
        data_dir: Optional[str] = None,
        max_value_bytes: Optional[int] = None,
        retry_attempts: Optional[int] = None,
        retry_wait=None,
    ):
        settings = get_settings().storage
        self._root = Path(data_dir or settings.data_dir)
        self._max_bytes = max_value_bytes or settings.max_value_bytes
        self._attempts = retry_attempts or settings.write_retry_attempts
        self._wait = retry_wait or wait_exponential(multiplier=1, min=2, max=10)

        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageConnectionError(
                f"Storage directory {self._root} is not usable: {e}"
            )
        if not self._root.is_dir():
            raise StorageConnectionError(f"Storage path {self._root} is not a directory")

    @property
    def root(self) -> Path:
        return self._root

    def _path(self, key: str) -> Path:
        return self._root / f"{_check_key(key)}{_SUFFIX}"

    def read(self, key: str) -> list[dict]:
        path = self._path(key)
        if not path.exists():
            return []
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as e:
            logger.warning("storage_parse_failed", key=key, error=str(e))
            return []
        except OSError as e:
            raise StorageError(f"Failed to read {key}: {e}")
        return parse_records(key, text)

    def write(self, key: str, records: list[dict]) -> None:
        path = self._path(key)
        text = serialize_records(key, records, self._max_bytes)

        retrying = Retrying(
            stop=stop_after_attempt(self._attempts),
            wait=self._wait,
            retry=retry_if_exception_type(OSError),
            reraise=True,
        )
        try:
            retrying(self._atomic_write, path, text)
        except OSError as e:
            logger.error("storage_write_failed", key=key, error=str(e))
            raise StorageError(f"Failed to write {key}: {e}")

        logger.debug("storage_written", key=key, records=len(records))

    def _atomic_write(self, path: Path, text: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=self._root, prefix=".tmp-", suffix=_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(text)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def remove(self, key: str) -> bool:
        path = self._path(key)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to remove {key}: {e}")
        return True

    def keys(self) -> list[str]:
        return sorted(
            path.stem
            for path in self._root.glob(f"*{_SUFFIX}")
            if not path.name.startswith(".")
        )
