"""
Claim similarity entry points.

compare() scores two images; compare_vectors() scores two feature
vectors the item registry stored when the items were reported. Both
return {"score": int, "vectors_used": bool} and never raise: a claim
must be fileable even when its photos can't be processed, so every
failure degrades to a placeholder score.
"""

import logging
from typing import Any, Dict, Optional

import numpy as np

from .errors import DimensionMismatch, ImageUnreadable
from .histograms import extract_features, to_feature_vector
from .preprocessing import ImageHandle, describe_handle
from .scoring import placeholder_score, similarity_of, to_percentage

logger = logging.getLogger(__name__)


def _placeholder(id_a: Optional[str],
                 id_b: Optional[str],
                 rng: Optional[np.random.RandomState]) -> Dict[str, Any]:
    score = placeholder_score(id_a, id_b, rng=rng)
    logger.info(f"Using placeholder score {score} for {id_a!r} vs {id_b!r}")
    return {"score": score, "vectors_used": False}


def _try_extract(image: ImageHandle) -> Optional[np.ndarray]:
    try:
        return extract_features(image)
    except ImageUnreadable:
        return None


def compare(image_a: ImageHandle,
            image_b: ImageHandle,
            rng: np.random.RandomState = None) -> Dict[str, Any]:
    """
    Score how similar two item photos are.

    Args:
        image_a: File path, encoded byte buffer, or decoded RGB array.
        image_b: File path, encoded byte buffer, or decoded RGB array.
        rng: Random source for placeholder scores.

    Returns:
        Dict with 'score' (int in [0, 100]) and 'vectors_used' (False
        when the score is a placeholder).
    """
    id_a = describe_handle(image_a)
    id_b = describe_handle(image_b)

    try:
        vector_a = _try_extract(image_a)
        vector_b = _try_extract(image_b)
        if vector_a is None or vector_b is None:
            return _placeholder(id_a, id_b, rng)

        score = to_percentage(similarity_of(vector_a, vector_b))
    except Exception as e:
        logger.error(f"Image comparison failed, using placeholder: {e}")
        return _placeholder(id_a, id_b, rng)

    return {"score": score, "vectors_used": True}


def compare_vectors(vector_a,
                    vector_b,
                    id_a: str = None,
                    id_b: str = None,
                    rng: np.random.RandomState = None) -> Dict[str, Any]:
    """
    Score two precomputed feature vectors.

    Missing or empty vectors fall back to a placeholder derived from
    id_a and id_b. Vectors of different lengths come from different
    extraction settings; this is logged as an error and also falls back.

    Returns:
        Same shape as compare().
    """
    try:
        a = to_feature_vector(vector_a)
        b = to_feature_vector(vector_b)
        if a is None or b is None:
            return _placeholder(id_a, id_b, rng)

        score = to_percentage(similarity_of(a, b))
    except DimensionMismatch as e:
        logger.error(f"Stored feature vectors are incompatible: {e}")
        return _placeholder(id_a, id_b, rng)
    except (TypeError, ValueError) as e:
        logger.error(f"Stored feature vectors are malformed: {e}")
        return _placeholder(id_a, id_b, rng)

    return {"score": score, "vectors_used": True}
