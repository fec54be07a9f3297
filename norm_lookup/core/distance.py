"""String distance and similarity scoring.

All scores are integers on a 0-100 scale. Inputs of ``None`` are treated as
empty strings and no function raises.
"""

from typing import Optional

from rapidfuzz.distance import Levenshtein

# Above this length the edit distance is estimated instead of computed
EXACT_LENGTH_LIMIT = 100

# Winkler prefix bonus looks at no more than this many leading characters
MAX_PREFIX = 4


def levenshtein(a: Optional[str], b: Optional[str], exact_limit: int = EXACT_LENGTH_LIMIT) -> int:
    """
    Edit distance with unit cost insert, delete and substitute.

    When either string is longer than ``exact_limit`` the result is the
    bounded estimate ``|len(a) - len(b)| + min(len(a), len(b))`` (or just the
    length difference for equal strings). This is an upper bound, not the true
    edit distance.

    Args:
        a: First string
        b: Second string
        exact_limit: Longest input length that gets an exact distance

    Returns:
        Edit distance
    """
    a = a or ""
    b = b or ""

    if not a:
        return len(b)
    if not b:
        return len(a)

    if len(a) > exact_limit or len(b) > exact_limit:
        return abs(len(a) - len(b)) + (0 if a == b else min(len(a), len(b)))

    return Levenshtein.distance(a, b)


def levenshtein_similarity(
    a: Optional[str],
    b: Optional[str],
    exact_limit: int = EXACT_LENGTH_LIMIT
) -> int:
    """
    Edit distance expressed as a 0-100 similarity.

    Args:
        a: First string
        b: Second string
        exact_limit: Passed through to :func:`levenshtein`

    Returns:
        ``100 * (1 - distance / max_len)`` truncated and clamped to 0-100
    """
    a = a or ""
    b = b or ""

    max_len = max(len(a), len(b))
    if max_len == 0:
        return 100

    distance = levenshtein(a, b, exact_limit)
    return max(0, min(100, 100 - int(distance / max_len * 100)))


def jaro(a: str, b: str) -> float:
    """
    Jaro similarity in the 0-1 range.

    Each character of ``a`` is paired with the first unpaired equal character
    of ``b`` within ``max(len) / 2 - 1`` positions. Transpositions are the
    paired characters that differ when both sides are read in order.
    """
    window = max(0, max(len(a), len(b)) // 2 - 1)
    b_matched = [False] * len(b)
    a_chars = []

    for i, ch in enumerate(a):
        for j in range(max(0, i - window), min(i + window + 1, len(b))):
            if not b_matched[j] and b[j] == ch:
                b_matched[j] = True
                a_chars.append(ch)
                break

    matches = len(a_chars)
    if matches == 0:
        return 0.0

    b_chars = [ch for ch, matched in zip(b, b_matched) if matched]
    transpositions = sum(1 for left, right in zip(a_chars, b_chars) if left != right)

    return (matches / len(a) + matches / len(b) + (matches - transpositions / 2) / matches) / 3


def jaro_winkler(a: Optional[str], b: Optional[str], prefix_weight: float = 0.1) -> int:
    """
    Jaro-Winkler similarity on a 0-100 scale.

    The Jaro part uses a match window of ``max(len) / 2 - 1`` and counts half
    transpositions. The Winkler bonus rewards up to four shared leading
    characters and is applied regardless of the Jaro score.

    Args:
        a: First string
        b: Second string
        prefix_weight: Scaling factor for the shared prefix bonus

    Returns:
        Similarity score, 100 for identical strings
    """
    a = a or ""
    b = b or ""

    if not a or not b:
        return 100 if a == b else 0
    if a == b:
        return 100

    similarity = jaro(a, b)
    if similarity == 0:
        return 0

    prefix = 0
    for left, right in zip(a[:MAX_PREFIX], b[:MAX_PREFIX]):
        if left != right:
            break
        prefix += 1

    score = similarity + prefix * prefix_weight * (1 - similarity)
    return max(0, min(100, int(score * 100)))
