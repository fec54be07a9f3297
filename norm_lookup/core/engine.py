"""Main search engine implementation."""

import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Tuple, Union

import structlog

from ..config import Settings, get_settings
from ..models.record import NormalizedRecord, Record
from ..models.response import (
    Algorithm,
    EngineStats,
    MatchType,
    SearchResult,
    SearchScope,
)
from .cache import ResultCache
from .index import NGramIndex
from .matchers import FuzzyMatcher, StructuralMatcher
from .normalizer import TextNormalizer
from .suggestions import SuggestionGenerator

logger = structlog.get_logger(__name__)

ScopeLike = Union[SearchScope, str, int]


class SearchEngine:
    """
    Tiered lookup over a fixed table of code/description records.

    Tier 1 scores every record with cheap structural rules. When it finds
    fewer than ``tier1_short_circuit`` records, tier 2 scores the n-gram
    candidates with Levenshtein and Jaro-Winkler similarity and appends the
    rows tier 1 missed. Results are memoized per ``(query, scope)`` until
    :meth:`clear_cache`.
    """

    def __init__(
        self,
        corpus: Optional[Iterable[Any]] = None,
        settings: Optional[Settings] = None,
        fuzzy_threshold: Optional[int] = None,
        tiers: Optional[int] = None,
        max_results: Optional[int] = None,
        cache_max_entries: Optional[int] = None
    ) -> None:
        """
        Build the engine and its index.

        Args:
            corpus: Records (or plain row mappings) in table order
            settings: Settings to use (the cached defaults if None)
            fuzzy_threshold: Minimum tier-2 score, overrides settings
            tiers: 1 for structural matching only, 2 to add fuzzy matching
            max_results: Result list cap, overrides settings
            cache_max_entries: Cache bound, overrides settings
        """
        self.settings = settings or get_settings()

        if fuzzy_threshold is None:
            fuzzy_threshold = self.settings.fuzzy_threshold
        self.fuzzy_threshold = max(0, min(100, int(fuzzy_threshold)))
        self.tiers = self.settings.search_tiers if tiers is None else tiers
        self.max_results = self.settings.max_results if max_results is None else max_results
        self.tier1_short_circuit = self.settings.tier1_short_circuit

        self.normalizer = TextNormalizer()
        self.records: List[Record] = [self._coerce_record(item) for item in (corpus or [])]
        self.index = NGramIndex(self.records, self.normalizer)
        self.fuzzy_matcher = FuzzyMatcher(self.fuzzy_threshold, self.settings.levenshtein_exact_limit)
        self.suggestion_generator = SuggestionGenerator(
            self.index, self.records, self.settings.suggestion_min_length
        )
        self.cache = ResultCache(
            cache_max_entries if cache_max_entries is not None else self.settings.cache_max_entries
        )

        self._stats = self._empty_stats()

        logger.info(
            "Search engine ready",
            total_rows=len(self.records),
            fuzzy_threshold=self.fuzzy_threshold,
            tiers=self.tiers
        )

    @classmethod
    def build(cls, corpus: Iterable[Any], settings: Optional[Settings] = None, **overrides: Any) -> "SearchEngine":
        """
        Build an engine from a corpus of records.

        Args:
            corpus: Records in table order
            settings: Settings to use
            **overrides: Constructor overrides (fuzzy_threshold, tiers, ...)

        Returns:
            Ready-to-query engine
        """
        return cls(corpus, settings=settings, **overrides)

    @classmethod
    def from_rows(
        cls,
        rows: Iterable[Optional[Mapping[str, Any]]],
        code_aliases: Optional[Sequence[str]] = None,
        description_aliases: Optional[Sequence[str]] = None,
        settings: Optional[Settings] = None,
        **overrides: Any
    ) -> "SearchEngine":
        """
        Build an engine from plain key/text rows, e.g. parsed CSV lines.

        Args:
            rows: Row mappings in table order
            code_aliases: Header spellings of the code column
            description_aliases: Header spellings of the description column
            settings: Settings to use
            **overrides: Constructor overrides

        Returns:
            Ready-to-query engine
        """
        settings = settings or get_settings()
        code_aliases = code_aliases or settings.code_aliases
        description_aliases = description_aliases or settings.description_aliases

        records = [Record.from_row(row, code_aliases, description_aliases) for row in rows or []]
        return cls(records, settings=settings, **overrides)

    def search(self, query: Optional[str], scope: ScopeLike = SearchScope.BOTH) -> List[SearchResult]:
        """
        Search the table for records matching a query.

        Args:
            query: Text typed by the user
            scope: Field(s) to match against

        Returns:
            Results in descending score order, at most ``max_results`` long
        """
        scope = SearchScope.coerce(scope)
        start_time = time.time()
        self._stats["total_queries"] += 1

        if query is None or not str(query).strip():
            self._stats["empty_queries"] += 1
            return [
                SearchResult(record=record, score=100, match_type=MatchType.ALL, algorithm=Algorithm.EXACT)
                for record in self.records[:self.max_results]
            ]

        query_norm = self.normalizer.normalize(str(query).strip())
        if not query_norm:
            self._stats["empty_queries"] += 1
            return []

        cache_key = (query_norm, scope)
        cached = self.cache.get(cache_key)
        if cached is not None:
            self._stats["cache_hits"] += 1
            self._record_time(start_time)
            logger.debug("Search served from cache", query=query_norm, scope=scope.value, total_results=len(cached))
            return cached

        self._stats["cache_misses"] += 1

        tier1_results = self._structural_search(query_norm, scope)

        if len(tier1_results) >= self.tier1_short_circuit or self.tiers < 2:
            results = tier1_results
            fuzzy_count = 0
        else:
            self._stats["fuzzy_runs"] += 1
            tier2_results = self._fuzzy_search(query_norm, scope)
            results = self._merge(tier1_results, tier2_results)
            fuzzy_count = len(tier2_results)

        self.cache.put(cache_key, results)
        execution_time = self._record_time(start_time)

        logger.debug(
            "Search completed",
            query=query_norm,
            scope=scope.value,
            tier1_results=len(tier1_results),
            tier2_results=fuzzy_count,
            total_results=len(results),
            execution_time_ms=round(execution_time, 2)
        )

        return list(results)

    def suggestions(self, prefix: Optional[str], max_count: Optional[int] = None) -> List[str]:
        """
        Get autocomplete suggestions for a partial query.

        Args:
            prefix: Text typed so far
            max_count: Maximum number of suggestions (settings default if None)

        Returns:
            Unique original code/description texts
        """
        if max_count is None:
            max_count = self.settings.max_suggestions

        try:
            return self.suggestion_generator.suggestions(prefix, max_count)
        except Exception:
            logger.exception("Suggestion lookup failed", prefix=prefix)
            return []

    def clear_cache(self) -> None:
        """Forget every memoized result."""
        cleared = len(self.cache)
        self.cache.clear()
        logger.info("Search cache cleared", cleared_entries=cleared)

    def stats(self) -> EngineStats:
        """Get index and cache figures."""
        return EngineStats(
            total_rows=len(self.records),
            cache_size=len(self.cache),
            fuzzy_threshold=self.fuzzy_threshold,
            trigram_entries=self.index.trigram_count,
            bigram_entries=self.index.bigram_count,
            exact_entries=self.index.exact_count,
            word_entries=self.index.word_count
        )

    def query_stats(self) -> Dict[str, Any]:
        """Get query counters and timings."""
        stats = self._stats.copy()

        searched = stats["cache_hits"] + stats["cache_misses"]
        if searched > 0:
            stats["average_execution_time_ms"] = stats["total_execution_time"] / searched
            stats["cache_hit_rate"] = stats["cache_hits"] / searched
        else:
            stats["average_execution_time_ms"] = 0.0
            stats["cache_hit_rate"] = 0.0

        stats["cache"] = self.cache.get_stats()
        return stats

    def reset_stats(self) -> None:
        """Reset query counters."""
        self._stats = self._empty_stats()

    def _structural_search(self, query_norm: str, scope: SearchScope) -> List[SearchResult]:
        """
        Score every record with the structural rules.

        Args:
            query_norm: Normalized query
            scope: Field(s) to match against

        Returns:
            Matching records, best first
        """
        results: List[SearchResult] = []

        try:
            matcher = StructuralMatcher(query_norm)
            for normalized in self.index.records:
                found = matcher.match(self._scoped_fields(normalized, scope))
                if found is None:
                    continue

                score, match_type = found
                results.append(SearchResult(
                    record=self.records[normalized.position],
                    score=score,
                    match_type=match_type,
                    algorithm=Algorithm.EXACT
                ))
        except Exception:
            logger.exception("Structural search failed", query=query_norm)

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:self.max_results]

    def _fuzzy_search(self, query_norm: str, scope: SearchScope) -> List[SearchResult]:
        """
        Score the n-gram candidates by string similarity.

        Args:
            query_norm: Normalized query
            scope: Field(s) to match against

        Returns:
            Records at or above the fuzzy threshold, best first
        """
        results: List[SearchResult] = []

        try:
            for position in sorted(self.index.get_candidates(query_norm)):
                normalized = self.index.records[position]
                found = self.fuzzy_matcher.match(query_norm, self._scoped_fields(normalized, scope))
                if found is None:
                    continue

                score, algorithm = found
                results.append(SearchResult(
                    record=self.records[position],
                    score=score,
                    match_type=MatchType.FUZZY,
                    algorithm=algorithm
                ))
        except Exception:
            logger.exception("Fuzzy search failed", query=query_norm)

        results.sort(key=lambda r: r.score, reverse=True)
        return results[:self.max_results]

    def _merge(self, tier1_results: List[SearchResult], tier2_results: List[SearchResult]) -> List[SearchResult]:
        """Append tier-2 rows not already present in tier 1, by row content."""
        seen: Set[str] = {result.record.content_key for result in tier1_results}

        merged = list(tier1_results)
        for result in tier2_results:
            if result.record.content_key not in seen:
                merged.append(result)

        return merged[:self.max_results]

    @staticmethod
    def _scoped_fields(normalized: NormalizedRecord, scope: SearchScope) -> Tuple[str, ...]:
        if scope is SearchScope.CODE:
            return (normalized.code,)
        if scope is SearchScope.DESCRIPTION:
            return (normalized.description,)
        return (normalized.code, normalized.description)

    def _coerce_record(self, item: Any) -> Record:
        if isinstance(item, Record):
            return item
        if item is None or isinstance(item, Mapping):
            return Record.from_row(item, self.settings.code_aliases, self.settings.description_aliases)
        logger.warning("Unsupported corpus entry, indexing it as an empty row", entry_type=type(item).__name__)
        return Record()

    def _record_time(self, start_time: float) -> float:
        execution_time = (time.time() - start_time) * 1000
        self._stats["total_execution_time"] += execution_time
        return execution_time

    @staticmethod
    def _empty_stats() -> Dict[str, Any]:
        return {
            "total_queries": 0,
            "empty_queries": 0,
            "cache_hits": 0,
            "cache_misses": 0,
            "fuzzy_runs": 0,
            "total_execution_time": 0.0
        }
