"""
Norm Code Lookup - fuzzy search over code/description reference tables.

This package locates a record (a short code plus a free-text description) in a
lookup table of several thousand rows from partial, misspelled or
accent-stripped queries, with ranked results fast enough for search-as-you-type.
"""

__version__ = "1.0.0"

from .core.engine import SearchEngine
from .models.record import Record
from .models.response import Algorithm, MatchType, SearchResult, SearchScope

__all__ = [
    "SearchEngine",
    "Record",
    "SearchResult",
    "SearchScope",
    "MatchType",
    "Algorithm",
]
