"""Per-engine memo of search results."""

from collections import OrderedDict
from typing import Dict, Hashable, List, Optional

from ..models.response import SearchResult


class ResultCache:
    """
    Maps ``(normalized query, scope)`` to a ranked result list.

    Entries never expire on their own. With ``max_entries`` set, the least
    recently used entry is dropped once the cache is full; with ``None`` the
    cache grows until :meth:`clear`.
    """

    def __init__(self, max_entries: Optional[int] = None) -> None:
        self.max_entries = max_entries
        self._entries: "OrderedDict[Hashable, List[SearchResult]]" = OrderedDict()
        self._stats = {"hits": 0, "misses": 0, "evictions": 0}

    def get(self, key: Hashable) -> Optional[List[SearchResult]]:
        """Return a copy of the cached list, or None on a miss."""
        results = self._entries.get(key)
        if results is None:
            self._stats["misses"] += 1
            return None

        self._entries.move_to_end(key)
        self._stats["hits"] += 1
        return list(results)

    def put(self, key: Hashable, results: List[SearchResult]) -> None:
        """Store a copy of ``results`` under ``key``."""
        self._entries[key] = list(results)
        self._entries.move_to_end(key)

        if self.max_entries is not None:
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                self._stats["evictions"] += 1

    def clear(self) -> None:
        """Drop every entry."""
        self._entries.clear()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get_stats(self) -> Dict[str, int]:
        """Get hit, miss and eviction counters."""
        stats = self._stats.copy()
        stats["size"] = len(self._entries)
        return stats
