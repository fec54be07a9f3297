"""Text normalization utilities for consistent matching."""

import re
import unicodedata
from typing import Any, Dict, List

import structlog

logger = structlog.get_logger(__name__)

# Characters that survive Unicode decomposition but should still fold
SPECIAL_CHARACTERS: Dict[str, str] = {
    "ø": "o",
    "Ø": "o",
    "đ": "d",
    "Đ": "d",
    "®": "",
    "™": "",
    "©": "",
    "–": "-",
    "—": "-",
}


class TextNormalizer:
    """Folds case, accents and spacing so that typed queries meet stored text."""

    def __init__(self) -> None:
        """Initialize the normalizer."""
        self.whitespace_regex = re.compile(r"\s+")
        self.special_table = str.maketrans(SPECIAL_CHARACTERS)

    def remove_accents(self, text: str) -> str:
        """
        Strip combining diacritical marks.

        Args:
            text: Input text

        Returns:
            Text without combining marks
        """
        decomposed = unicodedata.normalize("NFD", text)
        return "".join(ch for ch in decomposed if not unicodedata.combining(ch))

    def normalize(self, text: Any) -> str:
        """
        Normalize text for consistent processing.

        Lowercases, strips diacritics, folds special characters and
        collapses whitespace. Applying it twice gives the same result as
        applying it once.

        Args:
            text: Input text to normalize

        Returns:
            Normalized text
        """
        if text is None:
            return ""
        if not isinstance(text, str):
            text = str(text)
        if not text:
            return ""

        try:
            normalized = self.remove_accents(text.lower())
            normalized = normalized.translate(self.special_table)
            normalized = self.whitespace_regex.sub(" ", normalized.strip())
            return normalized
        except Exception as e:
            logger.warning("Normalization failed, using lowercase fallback", error=str(e))
            return text.lower().strip()

    def tokenize(self, text: Any) -> List[str]:
        """
        Tokenize text into normalized words.

        Args:
            text: Input text

        Returns:
            List of tokens
        """
        normalized = self.normalize(text)
        if not normalized:
            return []
        return normalized.split(" ")


_default_normalizer = TextNormalizer()


def normalize(text: Any) -> str:
    """Normalize text with the shared stateless normalizer."""
    return _default_normalizer.normalize(text)


def tokenize(text: Any) -> List[str]:
    """Tokenize text with the shared stateless normalizer."""
    return _default_normalizer.tokenize(text)
