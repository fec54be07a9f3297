"""Record models for lookup table rows."""

import hashlib
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def resolve_field(row: Mapping[str, Any], aliases: Sequence[str]) -> str:
    """
    Read a logical field from a row using the first alias key present.

    Args:
        row: Source row
        aliases: Header spellings to try, in priority order

    Returns:
        Field text, or an empty string when no alias is present
    """
    for key in aliases:
        if key in row:
            return _as_text(row[key])
    return ""


class Record(BaseModel):
    """One row of the lookup table."""

    model_config = ConfigDict(frozen=True)

    code: str = Field(default="", description="Reference code, e.g. a norm code")
    description: str = Field(default="", description="Free-text description")
    raw: Mapping[str, str] = Field(
        default_factory=dict, validate_default=True, description="All source columns, read-only"
    )

    @field_validator("raw", mode="after")
    @classmethod
    def freeze_raw(cls, value: Mapping[str, str]) -> Mapping[str, str]:
        return MappingProxyType(dict(value))

    @field_serializer("raw")
    def serialize_raw(self, value: Mapping[str, str]) -> Dict[str, str]:
        return dict(value)

    @classmethod
    def from_row(
        cls,
        row: Optional[Mapping[str, Any]],
        code_aliases: Sequence[str],
        description_aliases: Sequence[str]
    ) -> "Record":
        """
        Build a record from a plain key/text mapping.

        Missing or malformed values degrade to empty text; a missing row
        produces an empty record rather than an error.
        """
        if not row or not isinstance(row, Mapping):
            return cls()

        raw = {_as_text(key): _as_text(value) for key, value in row.items()}
        return cls(
            code=resolve_field(raw, code_aliases),
            description=resolve_field(raw, description_aliases),
            raw=raw
        )

    @property
    def content_key(self) -> str:
        """Stable hash of the full original row, used to spot duplicate rows."""
        source = self.raw or {"code": self.code, "description": self.description}
        joined = "|".join(f"{key}={source[key]}" for key in sorted(source))
        return hashlib.sha1(joined.encode("utf-8")).hexdigest()

    def get(self, key: str, default: str = "") -> str:
        """Read a pass-through column from the original row."""
        return self.raw.get(key, default)


class NormalizedRecord(BaseModel):
    """Normalized field texts of a record, computed once at index time."""

    model_config = ConfigDict(frozen=True)

    position: int = Field(..., ge=0, description="Position in the corpus list")
    code: str = Field(default="")
    description: str = Field(default="")
