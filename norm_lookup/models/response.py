"""Result models returned by the search engine."""

from enum import Enum
from typing import Union

from pydantic import BaseModel, ConfigDict, Field

from .record import Record


class SearchScope(str, Enum):
    """Which record field(s) a query is matched against."""

    BOTH = "both"
    CODE = "code"
    DESCRIPTION = "description"

    @classmethod
    def coerce(cls, value: Union["SearchScope", str, int]) -> "SearchScope":
        """
        Accept an enum member, its value, or a legacy integer selector.

        Integers follow the lookup form's combo box: 0 both, 1 code, 2 description.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            if 0 <= value < len(members):
                return members[value]
            raise ValueError(f"Invalid search scope: {value}")
        return cls(str(value).lower())


class MatchType(str, Enum):
    """How a result matched the query."""

    EXACT = "exact"
    WORD = "word"
    PREFIX = "prefix"
    CONTAINS = "contains"
    PATTERN = "pattern"
    FUZZY = "fuzzy"
    ALL = "all"


class Algorithm(str, Enum):
    """Scoring algorithm that produced a result."""

    EXACT = "exact"
    LEVENSHTEIN = "levenshtein"
    JARO_WINKLER = "jaro_winkler"


class SearchResult(BaseModel):
    """Individual search result."""

    model_config = ConfigDict(frozen=True)

    record: Record = Field(..., description="The matched record")
    score: int = Field(..., ge=0, le=100, description="Match score (0-100)")
    match_type: MatchType = Field(..., description="Type of match")
    algorithm: Algorithm = Field(..., description="Algorithm that produced the score")


class EngineStats(BaseModel):
    """Index and cache figures for diagnostics."""

    total_rows: int
    cache_size: int
    fuzzy_threshold: int
    trigram_entries: int
    bigram_entries: int
    exact_entries: int
    word_entries: int
