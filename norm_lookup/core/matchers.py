"""Per-field scoring for the structural and fuzzy search tiers."""

import re
from typing import Iterable, List, Optional, Tuple, Union

from ..models.response import Algorithm, MatchType
from .distance import EXACT_LENGTH_LIMIT, jaro_winkler, levenshtein_similarity

WILDCARD_CHARACTERS = ("?", "*")

# Structural rules in priority order; the first rule that holds for a field wins
SCORE_EXACT = 100
SCORE_WORD = 90
SCORE_PREFIX = 80
SCORE_CONTAINS = 60
SCORE_PATTERN = 40


class WildcardPattern:
    """
    Query with ``?`` / ``*`` wildcards, searched anywhere in a field.

    ``?`` matches any single character, ``*`` any run of characters and
    everything else is literal. The query is split on ``*`` and each segment
    is placed at its leftmost position after the previous one, so a search is
    a single left-to-right pass with no backtracking across segments.
    """

    def __init__(self, query: str) -> None:
        self.segments: List[Union[str, re.Pattern]] = []
        for segment in query.split("*"):
            if not segment:
                continue
            if "?" in segment:
                self.segments.append(re.compile(".".join(re.escape(part) for part in segment.split("?"))))
            else:
                self.segments.append(segment)

    def search(self, text: str) -> bool:
        """True when every segment occurs in ``text`` in order, without overlap."""
        position = 0
        for segment in self.segments:
            if isinstance(segment, str):
                start = text.find(segment, position)
                if start < 0:
                    return False
                position = start + len(segment)
            else:
                found = segment.search(text, position)
                if found is None:
                    return False
                position = found.end()
        return True


def compile_wildcard(query: str) -> Optional[WildcardPattern]:
    """
    Build the wildcard matcher for a query.

    Args:
        query: Normalized query

    Returns:
        Wildcard pattern, or None if the query has no wildcards
    """
    if not any(ch in query for ch in WILDCARD_CHARACTERS):
        return None
    return WildcardPattern(query)


def is_subsequence(query: str, text: str) -> bool:
    """True when every character of ``query`` appears in ``text`` in order."""
    remaining = iter(text)
    return all(ch in remaining for ch in query)


class StructuralMatcher:
    """Tier-1 scorer: exact, whole word, prefix, substring and pattern rules."""

    def __init__(self, query: str) -> None:
        """
        Prepare the matcher for one normalized query.

        Args:
            query: Normalized query text
        """
        self.query = query
        self.word_regex = re.compile(r"\b" + re.escape(query) + r"\b")
        self.wildcard_pattern = compile_wildcard(query)

    def match_field(self, text: str) -> Optional[Tuple[int, MatchType]]:
        """
        Score a single normalized field.

        Args:
            text: Normalized field text

        Returns:
            Tuple of (score, match_type) or None when no rule holds
        """
        if not text or not self.query:
            return None

        if text == self.query:
            return SCORE_EXACT, MatchType.EXACT
        if self.word_regex.search(text):
            return SCORE_WORD, MatchType.WORD
        if text.startswith(self.query):
            return SCORE_PREFIX, MatchType.PREFIX
        if self.query in text:
            return SCORE_CONTAINS, MatchType.CONTAINS
        if self._pattern_match(text):
            return SCORE_PATTERN, MatchType.PATTERN
        return None

    def match(self, fields: Iterable[str]) -> Optional[Tuple[int, MatchType]]:
        """
        Best structural match across the in-scope fields of a record.

        Args:
            fields: Normalized field texts

        Returns:
            Tuple of (score, match_type) or None when no field matches
        """
        best = None
        for text in fields:
            found = self.match_field(text)
            if found and (best is None or found[0] > best[0]):
                best = found
        return best

    def _pattern_match(self, text: str) -> bool:
        if self.wildcard_pattern is not None:
            return self.wildcard_pattern.search(text)
        return is_subsequence(self.query, text)


class FuzzyMatcher:
    """Tier-2 scorer: best of Levenshtein and Jaro-Winkler similarity."""

    def __init__(self, threshold: int = 75, exact_limit: int = EXACT_LENGTH_LIMIT) -> None:
        """
        Initialize the fuzzy matcher.

        Args:
            threshold: Minimum score (0-100) for a record to be kept
            exact_limit: Longest field length that gets an exact edit distance
        """
        self.threshold = max(0, min(100, threshold))
        self.exact_limit = exact_limit

    def score(self, query: str, fields: Iterable[str]) -> Tuple[int, Optional[Algorithm]]:
        """
        Highest similarity between the query and any non-empty field.

        Levenshtein is tried first, so it keeps a tie with Jaro-Winkler.

        Args:
            query: Normalized query
            fields: Normalized field texts

        Returns:
            Tuple of (score, algorithm); algorithm is None when no field scored
        """
        best_score = 0
        best_algorithm = None

        for text in fields:
            if not text:
                continue

            lev_score = levenshtein_similarity(query, text, self.exact_limit)
            if lev_score > best_score:
                best_score = lev_score
                best_algorithm = Algorithm.LEVENSHTEIN

            jw_score = jaro_winkler(query, text)
            if jw_score > best_score:
                best_score = jw_score
                best_algorithm = Algorithm.JARO_WINKLER

        return best_score, best_algorithm

    def match(self, query: str, fields: Iterable[str]) -> Optional[Tuple[int, Algorithm]]:
        """
        Score a record and apply the threshold.

        Returns:
            Tuple of (score, algorithm) or None when below the threshold
        """
        best_score, best_algorithm = self.score(query, fields)
        if best_algorithm is None or best_score < self.threshold:
            return None
        return best_score, best_algorithm
