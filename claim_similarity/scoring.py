"""
Similarity scoring for claim review.

Cosine similarity between two feature vectors is mapped to an integer
percentage that the claim workflow attaches to each claim.

When no feature comparison is possible (missing photo, decode failure)
placeholder_score() produces a stand-in number so reviewers always see
something. It is a filename keyword heuristic, not a similarity measure,
and should be labeled as such wherever it is displayed.
"""

import os
import logging
from typing import Optional

import numpy as np

from .errors import DimensionMismatch

logger = logging.getLogger(__name__)

# Placeholder policy: "keyword" matches filenames, "constant" always
# returns FALLBACK_SCORE.
FALLBACK_MODE = os.environ.get("FALLBACK_MODE", "keyword").lower()
FALLBACK_SCORE = int(os.environ.get("FALLBACK_SCORE", "50"))
FALLBACK_KEYWORDS = tuple(
    k.strip().lower()
    for k in os.environ.get("FALLBACK_KEYWORDS", "phone,wallet,earbuds").split(",")
    if k.strip()
)
FALLBACK_MARKERS = tuple(
    m.strip().lower()
    for m in os.environ.get("FALLBACK_MARKERS", "demo").split(",")
    if m.strip()
)

# Half-open [low, high) placeholder ranges
KEYWORD_RANGE = (85, 100)
MARKER_RANGE = (60, 90)
DEFAULT_RANGE = (20, 60)


def similarity_of(vector_a: np.ndarray, vector_b: np.ndarray) -> float:
    """
    Cosine similarity between two feature vectors.

    Args:
        vector_a: First feature vector.
        vector_b: Second feature vector.

    Returns:
        Similarity in [-1, 1]; always >= 0 for histogram vectors.
        Returns 0.0 if either vector has zero magnitude.

    Raises:
        DimensionMismatch: If the vectors differ in length.
    """
    a = np.asarray(vector_a, dtype=np.float64).ravel()
    b = np.asarray(vector_b, dtype=np.float64).ravel()

    if a.size != b.size:
        logger.error(
            f"Cannot compare feature vectors of length {a.size} and {b.size}"
        )
        raise DimensionMismatch(a.size, b.size)

    norm_a = np.sqrt(np.dot(a, a))
    norm_b = np.sqrt(np.dot(b, b))
    if norm_a == 0 or norm_b == 0:
        return 0.0

    similarity = np.dot(a, b) / (norm_a * norm_b)
    return float(np.clip(similarity, -1.0, 1.0))


def to_percentage(similarity: float) -> int:
    """
    Map a similarity to an integer percentage clamped to [0, 100].

    Halves round up, so 0.125 becomes 13.
    """
    percentage = int(np.floor(similarity * 100 + 0.5))
    return max(0, min(100, percentage))


def _shares(id_a: str, id_b: str, terms) -> bool:
    return any(term in id_a and term in id_b for term in terms)


def placeholder_score(id_a: Optional[str],
                      id_b: Optional[str],
                      rng: np.random.RandomState = None,
                      mode: str = None) -> int:
    """
    Synthesize a stand-in score when feature comparison isn't possible.

    Keyword mode (case-insensitive substring match on both identifiers):
        shared category keyword  -> uniform in [85, 100)
        shared generic marker    -> uniform in [60, 90)
        anything else            -> uniform in [20, 60)

    Constant mode, or either identifier missing (byte buffers and arrays
    have no filename), returns FALLBACK_SCORE.

    Args:
        id_a: Filename or path of the first image, if known.
        id_b: Filename or path of the second image, if known.
        rng: Random source; a fresh one is created when omitted.
        mode: Override for FALLBACK_MODE.

    Returns:
        Integer score in [0, 100].
    """
    mode = (mode or FALLBACK_MODE).lower()
    if mode == "constant" or not id_a or not id_b:
        return max(0, min(100, FALLBACK_SCORE))

    rng = rng or np.random.RandomState()
    name_a = id_a.lower()
    name_b = id_b.lower()

    if _shares(name_a, name_b, FALLBACK_KEYWORDS):
        low, high = KEYWORD_RANGE
    elif _shares(name_a, name_b, FALLBACK_MARKERS):
        low, high = MARKER_RANGE
    else:
        low, high = DEFAULT_RANGE

    return int(rng.randint(low, high))


def rank_results(results: list) -> list:
    """
    Sort results by score (primary), similarity (secondary) and
    filename (tiebreaker).

    Args:
        results: List of result dicts with 'score', 'similarity'
                 and 'filename' keys.

    Returns:
        Sorted list (highest score first).
    """
    return sorted(
        results,
        key=lambda x: (-x['score'], -x['similarity'], x['filename'])
    )
