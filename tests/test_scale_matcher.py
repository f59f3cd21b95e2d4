"""
Tests for core/tonal/scale_matcher.py and core/tonal/descriptors.py.
"""

from __future__ import annotations

import numpy as np
import pytest

from core.config import FULL_SCALE_CATALOGUE_CONFIG, ScaleConfig
from core.tonal.descriptors import harmonic_complexity, tonal_clarity
from core.tonal.profiles import COMMON_SCALES, SCALE_PATTERNS, SCALES_BY_NAME
from core.tonal.scale_matcher import match_scales, scale_strength
from core.tonal.types import ScaleMatch

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _template(intervals: tuple[int, ...], root: int = 0) -> np.ndarray:
    """Equal energy on every scale tone, normalized to sum 1."""
    chroma = np.zeros(12)
    for i in intervals:
        chroma[(root + i) % 12] = 1.0
    return chroma / chroma.sum()


_MAJOR = SCALES_BY_NAME["Major"]
_MINOR = SCALES_BY_NAME["Natural Minor"]


# ---------------------------------------------------------------------------
# Tables
# ---------------------------------------------------------------------------


class TestScaleTable:
    def test_twenty_four_patterns(self):
        assert len(SCALE_PATTERNS) == 24
        assert len(SCALES_BY_NAME) == 24

    def test_patterns_start_on_root(self):
        for pattern in SCALE_PATTERNS:
            assert pattern.intervals[0] == 0
            assert list(pattern.intervals) == sorted(set(pattern.intervals))
            assert all(0 <= i < 12 for i in pattern.intervals)

    def test_common_scales(self):
        assert [p.name for p in COMMON_SCALES] == [
            "Major",
            "Natural Minor",
            "Harmonic Minor",
            "Dorian",
            "Lydian",
            "Mixolydian",
            "Pentatonic Major",
            "Pentatonic Minor",
            "Blues",
        ]


# ---------------------------------------------------------------------------
# scale_strength
# ---------------------------------------------------------------------------


class TestScaleStrength:
    def test_exact_template_is_one(self):
        assert scale_strength(_template(_MAJOR.intervals), 0, _MAJOR) == pytest.approx(1.0)

    def test_wrong_root_is_weaker(self):
        chroma = _template(_MAJOR.intervals)
        assert scale_strength(chroma, 1, _MAJOR) < scale_strength(chroma, 0, _MAJOR)

    def test_out_of_scale_energy_penalized(self):
        clean = _template(_MAJOR.intervals)
        noisy = clean.copy()
        noisy[1] = 0.2
        assert scale_strength(noisy, 0, _MAJOR) < 1.0

    def test_all_zero_is_zero(self):
        assert scale_strength(np.zeros(12), 0, _MAJOR) == 0.0

    def test_within_unit_range(self):
        rng = np.random.default_rng(9)
        for _ in range(50):
            chroma = rng.uniform(0, 1, 12)
            for pattern in SCALE_PATTERNS:
                s = scale_strength(chroma, int(rng.integers(12)), pattern)
                assert 0.0 <= s <= 1.0

    def test_bad_root_raises(self):
        with pytest.raises(ValueError, match="root"):
            scale_strength(np.ones(12), 12, _MAJOR)


# ---------------------------------------------------------------------------
# match_scales
# ---------------------------------------------------------------------------


class TestMatchScales:
    def test_c_major_template_ranks_c_major_first(self):
        matches = match_scales(_template(_MAJOR.intervals), 0)
        assert isinstance(matches[0], ScaleMatch)
        assert matches[0].label == "C Major"
        assert matches[0].category == "Major Family"
        assert all(matches[0].strength >= m.strength for m in matches[1:])

    def test_detected_root_breaks_mode_ties(self):
        # Same pitch collection, but the key voter said A
        matches = match_scales(_template(_MAJOR.intervals), 9)
        assert matches[0].label == "A Natural Minor"

    def test_a_minor_template(self):
        matches = match_scales(_template(_MINOR.intervals, root=9), 9)
        assert matches[0].label == "A Natural Minor"
        assert matches[0].strength == pytest.approx(1.0)

    def test_sorted_descending(self):
        rng = np.random.default_rng(1)
        matches = match_scales(rng.uniform(0, 1, 12), 0)
        strengths = [m.strength for m in matches]
        assert strengths == sorted(strengths, reverse=True)

    def test_threshold_and_top_n(self):
        matches = match_scales(_template(_MAJOR.intervals), 0)
        assert 0 < len(matches) <= 8
        assert all(m.strength > 0.10 for m in matches)

    def test_custom_top_n(self):
        matches = match_scales(_template(_MAJOR.intervals), 0, ScaleConfig(top_n=3))
        assert len(matches) == 3

    def test_full_catalogue(self):
        chroma = _template(SCALES_BY_NAME["Whole Tone"].intervals, root=2)
        matches = match_scales(chroma, 2, FULL_SCALE_CATALOGUE_CONFIG.scale)
        assert matches[0].label == "D Whole Tone"
        assert matches[0].strength == pytest.approx(1.0)

    def test_all_zero_chroma_has_no_matches(self):
        assert match_scales(np.zeros(12), 0) == ()

    def test_unknown_pattern_raises(self):
        with pytest.raises(ValueError, match="Unknown scale"):
            match_scales(np.ones(12), 0, ScaleConfig(scale_names=("Major", "Bebop")))

    def test_wrong_shape_raises(self):
        with pytest.raises(ValueError, match="shape"):
            match_scales(np.ones(7), 0)


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------


class TestDescriptors:
    def test_single_bin_is_fully_clear(self):
        chroma = np.zeros(12)
        chroma[9] = 1.0
        assert tonal_clarity(chroma) == pytest.approx(1.0)
        assert harmonic_complexity(chroma) == pytest.approx(1 / 12)

    def test_flat_profile(self):
        chroma = np.full(12, 1 / 12)
        assert tonal_clarity(chroma) == pytest.approx(0.1)
        assert harmonic_complexity(chroma) == pytest.approx(1.0)

    def test_major_template(self):
        chroma = _template(_MAJOR.intervals)
        # max / mean = (1/7) / (1/12)
        assert tonal_clarity(chroma) == pytest.approx(12 / 7 / 10)
        assert harmonic_complexity(chroma) == pytest.approx(7 / 12)

    def test_all_zero(self):
        assert tonal_clarity(np.zeros(12)) == 0.0
        assert harmonic_complexity(np.zeros(12)) == 0.0
