"""
Batch feature extraction and candidate ranking for the item registry.

The registry stores a feature vector per reported item at creation
time; storage itself stays with the registry. This module covers the
bulk side of extraction and ranking:
    - extract_directory(): vectors for every photo in a folder
    - build_similarity_index() / rank_candidates(): FAISS ranking of
      registry vectors against a query photo

Vectors are L2-normalized before indexing, so the inner product FAISS
returns is the cosine similarity used everywhere else.
"""

import os
import logging
from typing import Dict, List, Tuple

import faiss
import numpy as np

from .errors import DimensionMismatch, ImageUnreadable
from .histograms import extract_features
from .scoring import rank_results, to_percentage

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.bmp', '.webp', '.gif'}


def extract_directory(image_dir: str) -> dict:
    """
    Extract feature vectors for every image file in a directory.

    Unreadable files are logged and counted, never fatal.

    Args:
        image_dir: Directory containing item photos.

    Returns:
        Dict with 'features' (filename -> vector), 'processed' and
        'errors' counts.
    """
    filenames = sorted(
        f for f in os.listdir(image_dir)
        if os.path.splitext(f)[1].lower() in IMAGE_EXTENSIONS
    )

    features = {}
    errors = 0

    logger.info(f"Extracting features from {len(filenames)} images in {image_dir}")

    for i, filename in enumerate(filenames):
        filepath = os.path.join(image_dir, filename)
        try:
            features[filename] = extract_features(filepath)
        except ImageUnreadable as e:
            logger.warning(f"Skipping {filename}: {e}")
            errors += 1
            continue

        if (i + 1) % 500 == 0:
            logger.info(f"Processed {i + 1}/{len(filenames)} images")

    logger.info(f"Extracted {len(features)} feature vectors, {errors} errors")

    return {
        "features": features,
        "processed": len(features),
        "errors": errors,
    }


def _normalized_rows(vectors: np.ndarray) -> np.ndarray:
    vectors = np.ascontiguousarray(vectors, dtype=np.float32)
    norms = np.linalg.norm(vectors, axis=1, keepdims=True)
    norms[norms == 0] = 1.0
    return vectors / norms


def build_similarity_index(features: Dict[str, np.ndarray]
                           ) -> Tuple[faiss.Index, List[str]]:
    """
    Build an exact inner-product FAISS index over stored feature vectors.

    Args:
        features: Filename -> feature vector mapping. All vectors must
                  share one length.

    Returns:
        Tuple of (index, names) where names[i] is the filename of the
        i-th indexed vector.

    Raises:
        ValueError: If features is empty.
        DimensionMismatch: If vectors differ in length.
    """
    if not features:
        raise ValueError("No feature vectors to index")

    names = sorted(features)
    dim = len(features[names[0]])
    for name in names:
        if len(features[name]) != dim:
            raise DimensionMismatch(dim, len(features[name]))

    data = _normalized_rows(np.vstack([features[n] for n in names]))
    index = faiss.IndexFlatIP(dim)
    index.add(data)

    logger.info(f"Built FlatIP index: {index.ntotal} vectors, {dim}d")
    return index, names


def rank_candidates(index: faiss.Index,
                    names: List[str],
                    query_vector: np.ndarray,
                    top_k: int = 10) -> List[dict]:
    """
    Rank indexed items by cosine similarity to a query vector.

    Args:
        index: Index from build_similarity_index().
        names: Filenames returned alongside the index.
        query_vector: Feature vector of the query photo.
        top_k: Maximum number of results.

    Returns:
        List of dicts with 'filename', 'similarity' and 'score' keys,
        highest score first.

    Raises:
        DimensionMismatch: If the query length doesn't match the index.
    """
    query = np.asarray(query_vector, dtype=np.float32).reshape(1, -1)
    if query.shape[1] != index.d:
        raise DimensionMismatch(query.shape[1], index.d)

    k = min(top_k, index.ntotal)
    if k <= 0:
        return []

    similarities, indices = index.search(_normalized_rows(query), k)

    results = []
    for similarity, idx in zip(similarities[0], indices[0]):
        if idx < 0 or idx >= len(names):
            continue
        similarity = float(np.clip(similarity, -1.0, 1.0))
        results.append({
            "filename": names[idx],
            "similarity": round(similarity, 4),
            "score": to_percentage(similarity),
        })

    return rank_results(results)
