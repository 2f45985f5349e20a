"""Memory entry schema: the shape of one journal line.

Unknown keys are ignored on validation and dropped on serialization, so
journal lines written by richer producers (e.g. with an ``id``) still load.
``createdAt`` is kept as the original string so a loaded entry re-serializes
byte-for-byte.
"""

from __future__ import annotations

import re
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from src.infra.errors import EntryValidationError

# Date, "T", time with optional seconds/fraction, then "Z" or a ±HH:MM offset.
_ISO_DATETIME = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}(:\d{2}(\.\d+)?)?(Z|[+-]\d{2}:\d{2})$"
)
_FRACTION = re.compile(r"\.(\d+)")


def parse_iso_datetime(value: str) -> datetime:
    """Parse a strict ISO-8601 date-time string.

    Fractions of any precision are accepted; digits past microseconds are
    truncated for the datetime, never for the stored string.
    """
    if not _ISO_DATETIME.match(value):
        raise ValueError(f"createdAt must be an ISO-8601 date-time (got {value!r})")
    normalized = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), value, count=1)
    try:
        return datetime.fromisoformat(normalized)
    except ValueError as e:
        raise ValueError(f"createdAt is not a valid date-time: {e}") from e


def utc_timestamp(now: datetime | None = None) -> str:
    """Render a UTC instant as ``YYYY-MM-DDTHH:MM:SS.mmmZ``."""
    now = (now or datetime.now(UTC)).astimezone(UTC)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class MemoryEntry(BaseModel):
    """One remembered fact."""

    model_config = ConfigDict(strict=True, frozen=True, extra="ignore")

    content: str = Field(min_length=1)
    tags: tuple[str, ...]
    created_at: str = Field(alias="createdAt")

    @field_validator("tags", mode="before")
    @classmethod
    def _tags_from_list(cls, v: Any) -> Any:
        # JSON arrays arrive as lists; stored as a tuple so entries stay immutable.
        if isinstance(v, list):
            return tuple(v)
        return v

    @field_validator("created_at")
    @classmethod
    def _validate_created_at(cls, v: str) -> str:
        parse_iso_datetime(v)
        return v

    @classmethod
    def new(cls, content: str, tags: Iterable[str] = ()) -> Self:
        """Build an entry stamped with the current UTC time."""
        return cls(content=content, tags=tuple(tags), createdAt=utc_timestamp())

    @property
    def created_at_datetime(self) -> datetime:
        return parse_iso_datetime(self.created_at)


def _describe(exc: ValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err["loc"]) or "<entry>"
        parts.append(f"{loc}: {err['msg']}")
    return "; ".join(parts)


def validate_entry(candidate: Any) -> MemoryEntry:
    """Validate a candidate against the entry schema.

    Returns the parsed entry if valid.
    Raises: EntryValidationError naming every offending field.
    """
    try:
        return MemoryEntry.model_validate(candidate)
    except ValidationError as e:
        raise EntryValidationError(f"Invalid memory entry: {_describe(e)}") from e


def serialize_entry(entry: MemoryEntry) -> str:
    """Single-line JSON for one entry, without the trailing newline."""
    return entry.model_dump_json(by_alias=True)
