"""Data models for the norm code lookup engine."""

from .record import NormalizedRecord, Record, resolve_field
from .response import (
    Algorithm,
    EngineStats,
    MatchType,
    SearchResult,
    SearchScope,
)

__all__ = [
    "Record",
    "NormalizedRecord",
    "resolve_field",
    "SearchResult",
    "SearchScope",
    "MatchType",
    "Algorithm",
    "EngineStats",
]
