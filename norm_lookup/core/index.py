"""Inverted index tables used to narrow fuzzy search candidates."""

import time
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Set

import structlog

from ..models.record import NormalizedRecord, Record
from .normalizer import TextNormalizer

logger = structlog.get_logger(__name__)


def ngrams(text: str, size: int) -> Iterable[str]:
    """Yield every contiguous substring of ``size`` characters."""
    for start in range(len(text) - size + 1):
        yield text[start:start + size]


class NGramIndex:
    """
    Exact, word, bigram and trigram tables over the normalized corpus.

    Both the code and description field feed every table. The tables are
    built once and never shrink; every stored value is a valid position in
    the corpus the index was built from.
    """

    def __init__(self, records: Iterable[Record], normalizer: Optional[TextNormalizer] = None) -> None:
        """
        Build the index.

        Args:
            records: Corpus records, in corpus order
            normalizer: Normalizer to use (a fresh one if omitted)
        """
        self.normalizer = normalizer or TextNormalizer()
        self.records: List[NormalizedRecord] = []

        self._exact_index: Dict[str, List[int]] = {}
        self._word_index: Dict[str, List[int]] = {}
        self._bigram_index: Dict[str, Set[int]] = {}
        self._trigram_index: Dict[str, Set[int]] = {}

        self._build(records)

    def _build(self, records: Iterable[Record]) -> None:
        start_time = time.time()

        exact: Dict[str, List[int]] = defaultdict(list)
        words: Dict[str, List[int]] = defaultdict(list)
        bigrams: Dict[str, Set[int]] = defaultdict(set)
        trigrams: Dict[str, Set[int]] = defaultdict(set)

        for position, record in enumerate(records):
            normalized = NormalizedRecord(
                position=position,
                code=self.normalizer.normalize(record.code),
                description=self.normalizer.normalize(record.description)
            )
            self.records.append(normalized)

            for text in (normalized.code, normalized.description):
                if not text:
                    continue

                _append_unique(exact[text], position)

                for word in text.split(" "):
                    if len(word) > 1:
                        _append_unique(words[word], position)

                for bigram in ngrams(text, 2):
                    bigrams[bigram].add(position)

                for trigram in ngrams(text, 3):
                    trigrams[trigram].add(position)

        # Plain dicts so lookups of unknown keys never grow the tables
        self._exact_index = dict(exact)
        self._word_index = dict(words)
        self._bigram_index = dict(bigrams)
        self._trigram_index = dict(trigrams)

        logger.info(
            "N-gram index built",
            total_rows=len(self.records),
            exact_entries=self.exact_count,
            word_entries=self.word_count,
            bigram_entries=self.bigram_count,
            trigram_entries=self.trigram_count,
            build_time_ms=round((time.time() - start_time) * 1000, 2)
        )

    def get_candidates(self, query: str) -> Set[int]:
        """
        Collect every record position sharing anything with the query.

        The set is deliberately over-inclusive; it bounds the work of the
        fuzzy tier rather than ranking anything.

        Args:
            query: Raw or normalized query text

        Returns:
            Unscored set of corpus positions
        """
        query_norm = self.normalizer.normalize(query)
        if not query_norm:
            return set()

        candidates: Set[int] = set()

        candidates.update(self._exact_index.get(query_norm, ()))

        for word in query_norm.split(" "):
            candidates.update(self._word_index.get(word, ()))

        for trigram in ngrams(query_norm, 3):
            candidates.update(self._trigram_index.get(trigram, ()))

        for bigram in ngrams(query_norm, 2):
            candidates.update(self._bigram_index.get(bigram, ()))

        return candidates

    def lookup_exact(self, text: str) -> List[int]:
        """Positions whose code or description normalizes to ``text``."""
        return list(self._exact_index.get(self.normalizer.normalize(text), ()))

    def __len__(self) -> int:
        return len(self.records)

    @property
    def exact_count(self) -> int:
        return len(self._exact_index)

    @property
    def word_count(self) -> int:
        return len(self._word_index)

    @property
    def bigram_count(self) -> int:
        return len(self._bigram_index)

    @property
    def trigram_count(self) -> int:
        return len(self._trigram_index)


def _append_unique(bucket: List[int], position: int) -> None:
    # Positions arrive in ascending order, so a repeat can only be the last item
    if not bucket or bucket[-1] != position:
        bucket.append(position)
