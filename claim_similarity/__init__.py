"""
claim_similarity: Image similarity scoring for lost-and-found claims.

Turns item photos into normalized grayscale intensity histograms and
compares them with cosine similarity to give each claim a 0-100
plausibility score. When a photo can't be processed, a placeholder
score is produced instead so claim filing is never blocked.

Modules:
    engine          compare() and compare_vectors() entry points
    histograms      Grayscale histogram feature extraction
    preprocessing   Image decoding, alpha removal and resizing
    scoring         Cosine similarity, percentages, placeholder scores
    index_builder   Batch extraction and FAISS ranking
    errors          ImageUnreadable and DimensionMismatch
"""

__version__ = "1.0.0"
