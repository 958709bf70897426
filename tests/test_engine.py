"""Tests for the compare() and compare_vectors() entry points."""

import numpy as np
import pytest

from claim_similarity import scoring
from claim_similarity.engine import compare, compare_vectors
from claim_similarity.histograms import extract_features


class TestCompare:
    """Tests for image-to-image comparison."""

    def test_self_similarity(self, noise_image, write_png):
        path = write_png("noise.png", noise_image)
        result = compare(path, path)
        assert result == {"score": 100, "vectors_used": True}

    def test_black_vs_white(self, black_image, white_image, write_png):
        result = compare(write_png("black.png", black_image),
                         write_png("white.png", white_image))
        assert result["score"] == 0
        assert result["vectors_used"] is True

    def test_split_vs_itself(self, split_image, png_bytes):
        data = png_bytes(split_image)
        assert compare(data, data)["score"] == 100

    def test_split_vs_black(self, split_image, black_image):
        result = compare(split_image, black_image)
        assert result["score"] == 71

    def test_half_percent_rounds_up(self, black_image):
        # 64 gray levels, 64 pixels each: cosine against solid black is 0.125
        stripes = np.repeat(np.arange(0, 256, 4, dtype=np.uint8), 64)
        stripes = np.stack([stripes.reshape(64, 64)] * 3, axis=-1)
        result = compare(stripes, black_image)
        assert result == {"score": 13, "vectors_used": True}

    def test_mixed_handle_types(self, noise_image, write_png, png_bytes):
        result = compare(write_png("n.png", noise_image), png_bytes(noise_image))
        assert result["score"] == 100

    def test_saturated_images_in_range(self, white_image):
        result = compare(white_image, white_image.copy())
        assert result["score"] == 100

    def test_missing_file_falls_back(self, tmp_path, noise_image, write_png):
        valid = write_png("found-item.png", noise_image)
        result = compare(str(tmp_path / "missing.jpg"), valid)
        assert result["vectors_used"] is False
        assert 0 <= result["score"] <= 100
        assert isinstance(result["score"], int)

    def test_fallback_uses_filename_keywords(self, tmp_path, noise_image, write_png):
        valid = write_png("wallet_found.png", noise_image)
        rng = np.random.RandomState(0)
        result = compare(str(tmp_path / "wallet_lost.jpg"), valid, rng=rng)
        assert result["vectors_used"] is False
        assert 85 <= result["score"] < 100

    def test_undecodable_buffers_use_constant(self):
        result = compare(b"not an image", b"also not an image")
        assert result == {"score": scoring.FALLBACK_SCORE, "vectors_used": False}

    def test_unsupported_handles_never_raise(self):
        result = compare(None, 42)
        assert result["vectors_used"] is False
        assert 0 <= result["score"] <= 100

    def test_unexpected_error_falls_back(self, monkeypatch, black_image):
        def boom(a, b):
            raise RuntimeError("boom")
        monkeypatch.setattr("claim_similarity.engine.similarity_of", boom)
        result = compare(black_image, black_image)
        assert result == {"score": scoring.FALLBACK_SCORE, "vectors_used": False}


class TestCompareVectors:
    """Tests for scoring precomputed feature vectors."""

    def test_stored_lists(self, split_image, black_image):
        a = extract_features(split_image).tolist()
        b = extract_features(black_image).tolist()
        assert compare_vectors(a, b) == {"score": 71, "vectors_used": True}

    @pytest.mark.parametrize("missing", [None, []])
    def test_missing_vector_falls_back(self, missing, black_image):
        vec = extract_features(black_image)
        result = compare_vectors(missing, vec, "phone_a.jpg", "phone_b.jpg",
                                 rng=np.random.RandomState(1))
        assert result["vectors_used"] is False
        assert 85 <= result["score"] < 100

    def test_dimension_mismatch_falls_back(self):
        result = compare_vectors(np.ones(256), np.ones(128))
        assert result == {"score": scoring.FALLBACK_SCORE, "vectors_used": False}

    def test_malformed_vector_falls_back(self):
        result = compare_vectors(["a", "b"], [0.5, 0.5])
        assert result["vectors_used"] is False
