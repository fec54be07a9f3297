"""Core search engine functionality."""

from .cache import ResultCache
from .distance import jaro_winkler, levenshtein, levenshtein_similarity
from .engine import SearchEngine
from .index import NGramIndex
from .matchers import FuzzyMatcher, StructuralMatcher
from .normalizer import TextNormalizer, normalize, tokenize
from .suggestions import SuggestionGenerator

__all__ = [
    "SearchEngine",
    "NGramIndex",
    "FuzzyMatcher",
    "StructuralMatcher",
    "SuggestionGenerator",
    "ResultCache",
    "TextNormalizer",
    "normalize",
    "tokenize",
    "levenshtein",
    "levenshtein_similarity",
    "jaro_winkler",
]
