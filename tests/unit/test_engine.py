"""Unit tests for the search engine core functionality."""

import time

import pytest
from pydantic import ValidationError

from norm_lookup.core.distance import levenshtein_similarity
from norm_lookup.core.engine import SearchEngine
from norm_lookup.models.record import Record
from norm_lookup.models.response import Algorithm, MatchType, SearchScope


class TestSearchEngine:
    """Test cases for the SearchEngine class."""

    @pytest.fixture
    def records(self):
        """Sample norm-code table for testing."""
        return [
            Record(code="M10A", description="Đào đất"),
            Record(code="AB.11111", description="Đào móng công trình"),
            Record(code="AB.11112", description="Đắp đất nền móng"),
            Record(code="AF.22110", description="Bê tông lót móng"),
            Record(code="AK.10000", description="Trát tường ngoài"),
        ]

    @pytest.fixture
    def engine(self, records):
        """Create a search engine instance for testing."""
        return SearchEngine.build(records)

    def test_engine_initialization(self, engine):
        assert engine.fuzzy_threshold == 75
        assert engine.tiers == 2
        assert engine.max_results == 1000
        assert len(engine.records) == 5

    def test_exact_code_match(self, engine):
        """Test that the code matches regardless of case."""
        results = engine.search("m10a", SearchScope.BOTH)

        assert results[0].record.code == "M10A"
        assert results[0].score == 100
        assert results[0].match_type == MatchType.EXACT
        assert results[0].algorithm == Algorithm.EXACT

    def test_accent_stripped_description_match(self, engine):
        results = engine.search("dao dat")

        assert results[0].record.description == "Đào đất"
        assert results[0].score == 100
        assert results[0].match_type == MatchType.EXACT

    def test_typo_found_by_fuzzy_tier(self, engine):
        """Test one substituted character in a four-character code."""
        assert levenshtein_similarity("m1oa", "m10a") == 75

        results = engine.search("M1OA", SearchScope.BOTH)

        assert results
        assert results[0].record.code == "M10A"
        assert results[0].match_type == MatchType.FUZZY
        assert results[0].score >= engine.fuzzy_threshold
        assert results[0].algorithm in (Algorithm.LEVENSHTEIN, Algorithm.JARO_WINKLER)

    def test_fuzzy_tier_rejects_near_miss_below_threshold(self):
        """Jaro-Winkler 71 and Levenshtein 63 both fall short of 75."""
        engine = SearchEngine.build([Record(code="ABDAM1")])

        assert engine.search("dabda1b1") == []
        assert engine.query_stats()["fuzzy_runs"] == 1

    def test_structural_ranking(self, engine):
        """Word matches rank above substring and pattern matches."""
        results = engine.search("mong")

        assert [r.match_type for r in results[:3]] == [MatchType.WORD] * 3
        scores = [r.score for r in results]
        assert scores == sorted(scores, reverse=True)

    def test_empty_query_returns_everything(self, engine, records):
        for query in ["", "   ", None]:
            results = engine.search(query, SearchScope.BOTH)

            assert [r.record for r in results] == records
            assert all(r.score == 100 for r in results)
            assert all(r.match_type == MatchType.ALL for r in results)

    def test_query_normalizing_to_nothing(self, engine):
        assert engine.search("™") == []

    def test_empty_corpus(self):
        engine = SearchEngine.build([])

        assert engine.search("m10a") == []
        assert engine.search("") == []
        assert engine.search("M1OA", SearchScope.CODE) == []
        assert engine.suggestions("dao") == []
        assert engine.stats().total_rows == 0

    def test_code_scope(self, engine):
        results = engine.search("dao dat", SearchScope.CODE)
        assert all(r.match_type != MatchType.EXACT for r in results)

    def test_description_scope(self, engine):
        results = engine.search("m10a", SearchScope.DESCRIPTION)
        assert all(r.record.code != "M10A" or r.match_type != MatchType.EXACT for r in results)

    def test_legacy_scope_values(self, engine):
        assert engine.search("m10a", 1) == engine.search("m10a", SearchScope.CODE)
        assert engine.search("m10a", "code") == engine.search("m10a", SearchScope.CODE)

    def test_invalid_scope(self, engine):
        with pytest.raises(ValueError):
            engine.search("m10a", "everything")

    def test_cache_returns_identical_results(self, engine):
        first = engine.search("dao")
        second = engine.search("dao")

        assert first == second
        assert engine.stats().cache_size == 1
        assert engine.query_stats()["cache_hits"] == 1

    def test_cache_keyed_by_normalized_query_and_scope(self, engine):
        engine.search("Đào")
        engine.search("  dao ")
        engine.search("dao", SearchScope.CODE)

        assert engine.stats().cache_size == 2

    def test_clear_cache_recomputes_same_results(self, engine):
        first = engine.search("M1OA")
        engine.clear_cache()

        assert engine.stats().cache_size == 0

        second = engine.search("M1OA")
        assert first == second
        assert engine.query_stats()["cache_misses"] == 2

    def test_callers_cannot_mutate_cache(self, engine):
        results = engine.search("dao")
        expected = len(results)
        results.clear()

        assert len(engine.search("dao")) == expected

    def test_cached_results_are_read_only(self, engine):
        results = engine.search("m10a")

        with pytest.raises(ValidationError):
            results[0].score = 0

        assert engine.search("m10a")[0].score == 100

    def test_instances_do_not_share_cache(self, records):
        first = SearchEngine.build(records)
        second = SearchEngine.build(records)

        first.search("dao")

        assert first.stats().cache_size == 1
        assert second.stats().cache_size == 0

    def test_bounded_cache(self, records):
        engine = SearchEngine.build(records, cache_max_entries=2)

        for query in ["dao", "mong", "tong"]:
            engine.search(query)

        assert engine.stats().cache_size == 2

    def test_short_circuit_skips_fuzzy_tier(self):
        records = [Record(code=f"C{i}", description=f"Đào đất {i}") for i in range(12)]
        engine = SearchEngine.build(records)

        results = engine.search("dao dat")

        assert len(results) == 12
        assert engine.query_stats()["fuzzy_runs"] == 0

    def test_fuzzy_tier_runs_with_few_structural_hits(self, engine):
        engine.search("m10a")
        assert engine.query_stats()["fuzzy_runs"] == 1

    def test_structural_only_engine(self, records):
        engine = SearchEngine.build(records, tiers=1)

        assert engine.search("M1OA") == []
        assert engine.search("m10a")[0].match_type == MatchType.EXACT

    def test_zero_overrides_are_respected(self, records):
        engine = SearchEngine.build(records, tiers=0, max_results=0)

        assert engine.tiers == 0
        assert engine.max_results == 0
        assert engine.search("m10a") == []
        assert engine.query_stats()["fuzzy_runs"] == 0

    def test_custom_fuzzy_threshold(self, records):
        strict = SearchEngine.build(records, fuzzy_threshold=95)
        permissive = SearchEngine.build(records, fuzzy_threshold=50)

        assert strict.search("M1OA") == []
        assert len(permissive.search("M1OA")) >= 1

    def test_threshold_clamped(self, records):
        assert SearchEngine.build(records, fuzzy_threshold=500).fuzzy_threshold == 100

    def test_merge_skips_rows_already_found(self):
        """Identical rows held by different objects are not repeated by tier 2."""
        row = {"Mã Hiệu": "M10A", "Tên Công Việc": "Đào đất"}
        engine = SearchEngine.from_rows([row, dict(row)])

        results = engine.search("m10")

        assert len(results) == 2
        assert all(r.match_type == MatchType.PREFIX for r in results)
        assert engine.query_stats()["fuzzy_runs"] == 1

    def test_merge_appends_fuzzy_results_after_structural(self):
        records = [
            Record(code="M10", description="Đào đất"),
            Record(code="M10B", description="Đắp cát"),
        ]
        engine = SearchEngine.build(records)

        results = engine.search("m10b")

        assert results[0].record.code == "M10B"
        assert results[0].match_type == MatchType.EXACT
        assert results[1].record.code == "M10"
        assert results[1].match_type == MatchType.FUZZY

    def test_results_capped_at_1000(self):
        records = [Record(code=f"X{i}", description="Đào đất") for i in range(1500)]
        engine = SearchEngine.build(records)

        results = engine.search("dao")

        assert len(results) == 1000
        assert all(r.match_type == MatchType.WORD for r in results)

    def test_merged_results_capped_at_1000(self):
        """A query that only the fuzzy tier matches still honours the cap."""
        records = [Record(code=f"C{i}", description="abcdefgh") for i in range(1500)]
        engine = SearchEngine.build(records)

        results = engine.search("xbcdefgh")

        assert len(results) == 1000
        assert all(r.match_type == MatchType.FUZZY for r in results)
        assert all(r.score >= 75 for r in results)

    def test_empty_query_capped_at_1000(self):
        records = [Record(code=f"X{i}") for i in range(1200)]
        engine = SearchEngine.build(records)

        assert len(engine.search("")) == 1000

    def test_wildcard_near_miss_returns_quickly(self):
        engine = SearchEngine.build([Record(code="A1", description="a" * 60)], tiers=1)

        start_time = time.time()
        results = engine.search("a*a*a*a*a*a*a*b")
        end_time = time.time()

        assert results == []
        assert (end_time - start_time) < 1.0

    def test_odd_queries_never_raise(self, engine):
        for query in ["((*?[", "\\", "a" * 300, "?", "*", "..."]:
            assert isinstance(engine.search(query), list)

    def test_malformed_corpus_entries(self):
        engine = SearchEngine.build([None, {"ma_hieu": None}, Record(code="X1"), 42])

        assert engine.stats().total_rows == 4
        assert engine.search("x1")[0].record.code == "X1"

    def test_from_rows_with_custom_aliases(self):
        rows = [{"Code": "M10A", "Desc": "Đào đất", "Unit": "m3"}]
        engine = SearchEngine.from_rows(rows, code_aliases=["Code"], description_aliases=["Desc"])

        result = engine.search("dao dat")[0]

        assert result.record.code == "M10A"
        assert result.record.get("Unit") == "m3"

    def test_suggestions(self, engine):
        assert engine.suggestions("dao", 2) == ["Đào đất", "Đào móng công trình"]
        assert engine.suggestions("d") == []

    def test_stats(self, engine):
        engine.search("dao")
        stats = engine.stats().model_dump()

        assert set(stats) == {
            "total_rows",
            "cache_size",
            "fuzzy_threshold",
            "trigram_entries",
            "bigram_entries",
            "exact_entries",
            "word_entries",
        }
        assert stats["total_rows"] == 5
        assert stats["cache_size"] == 1
        assert stats["fuzzy_threshold"] == 75
        assert stats["exact_entries"] == 10
        assert stats["trigram_entries"] > 0

    def test_query_stats(self, engine):
        engine.search("dao")
        engine.search("dao")
        engine.search("")

        stats = engine.query_stats()

        assert stats["total_queries"] == 3
        assert stats["empty_queries"] == 1
        assert stats["cache_hits"] == 1
        assert stats["cache_misses"] == 1
        assert stats["cache_hit_rate"] == 0.5
        assert stats["average_execution_time_ms"] >= 0

        engine.reset_stats()
        assert engine.query_stats()["total_queries"] == 0
