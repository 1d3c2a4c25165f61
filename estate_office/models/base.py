"""
Shared model plumbing for stored records.

DESIGN DECISION: Records are persisted with camelCase keys so the
storage layout stays identical to the browser key/value layout the
data originally lived in. Python code only ever sees snake_case
attributes; aliases are applied at the storage boundary.
"""

import secrets
import time
from datetime import date, datetime, timezone
from enum import Enum
from typing import Annotated, Any, Union

from pydantic import AfterValidator, BaseModel, BeforeValidator, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


def utcnow() -> datetime:
    """Current UTC time as a naive datetime."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def new_record_id(prefix: str, separator: str = "-") -> str:
    """
    Build a record id of the form PREFIX-<epoch ms>-<6 hex>.

    The millisecond stamp keeps ids roughly sortable by creation time,
    the random suffix keeps ids created in the same millisecond apart.
    """
    return f"{prefix}{separator}{int(time.time() * 1000)}{separator}{secrets.token_hex(3)}"


def _coerce_date(value: Any) -> Any:
    # Stored dates are sometimes full ISO timestamps; keep the day part
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and len(value) > 10 and value[4] == "-":
        return value[:10]
    return value


def _naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


IsoDate = Annotated[date, BeforeValidator(_coerce_date)]
Timestamp = Annotated[datetime, AfterValidator(_naive_utc)]


def as_date(value: Union[date, datetime]) -> date:
    """Normalize a date or datetime to a date."""
    if isinstance(value, datetime):
        return value.date()
    return value


class CamelModel(BaseModel):
    """Base for every model that is written to storage."""

    model_config = ConfigDict(
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_storage(self) -> dict:
        """Serialize to the JSON-compatible dict written to storage."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class StoredRecord(CamelModel):
    """A record living in a storage key's JSON array."""

    id: str = Field(..., min_length=1, description="Record identifier")
    created_at: Timestamp = Field(
        default_factory=utcnow,
        description="When the record was created (UTC)"
    )
    updated_at: Timestamp = Field(
        default_factory=utcnow,
        description="When the record was last modified (UTC)"
    )


class UserRole(str, Enum):
    """Roles that drive record visibility."""
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"
    AGENT = "agent"


ADMIN_ROLES = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})


class UserContext(BaseModel):
    """
    The user on whose behalf records are read.

    Admins see everything; agents see what they own or what
    has been shared with them.
    """

    model_config = ConfigDict(str_strip_whitespace=True)

    user_id: str = Field(..., min_length=1)
    role: UserRole = Field(default=UserRole.AGENT)
    name: str = Field(default="")

    @field_validator('role', mode='before')
    @classmethod
    def normalize_role(cls, v: Any) -> Any:
        if isinstance(v, str) and v.strip().lower() == "superadmin":
            return UserRole.SUPER_ADMIN
        return v

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    @property
    def display_name(self) -> str:
        return self.name or self.user_id
