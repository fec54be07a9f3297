"""Autocomplete suggestions drawn from the n-gram index."""

from typing import Dict, List, Sequence

from ..models.record import Record
from .index import NGramIndex


class SuggestionGenerator:
    """Suggests original code and description texts containing a typed prefix."""

    def __init__(self, index: NGramIndex, records: Sequence[Record], min_length: int = 2) -> None:
        """
        Args:
            index: Index built over ``records``
            records: Corpus records, in corpus order
            min_length: Shortest normalized prefix that gets suggestions
        """
        self.index = index
        self.records = records
        self.min_length = min_length

    def suggestions(self, prefix: str, max_count: int = 5) -> List[str]:
        """
        Get autocomplete suggestions for a partial query.

        Args:
            prefix: Text typed so far
            max_count: Maximum number of suggestions

        Returns:
            Unique original field texts, in corpus order
        """
        prefix_norm = self.index.normalizer.normalize(prefix)
        if len(prefix_norm) < self.min_length or max_count <= 0:
            return []

        found: Dict[str, None] = {}

        for position in sorted(self.index.get_candidates(prefix_norm)):
            record = self.records[position]
            normalized = self.index.records[position]

            if record.code and prefix_norm in normalized.code:
                found.setdefault(record.code)
            if record.description and prefix_norm in normalized.description:
                found.setdefault(record.description)

            if len(found) >= max_count:
                break

        return list(found)[:max_count]
