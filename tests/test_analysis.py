"""
Tests for core/analysis.py — the combined loudness + tonal result record.
"""

from __future__ import annotations

import json
import math

import numpy as np
import pytest

from core.analysis import AnalysisResult, TonalResult, analyze_audio, analyze_loudness, analyze_tonality
from core.audio.buffer import AudioBuffer
from core.config import AnalysisConfig, ScaleConfig

SR = 44100


def _triad_buffer(seconds: float = 5.0) -> AudioBuffer:
    """Stereo C major triad (C4, E4, G4), left and right identical."""
    t = np.arange(int(SR * seconds)) / SR
    y = sum(0.2 * np.sin(2.0 * np.pi * f * t) for f in (261.63, 329.63, 392.0))
    return AudioBuffer.from_channels(np.stack([y, y]), SR)


class TestAnalyzeAudio:
    def test_returns_both_results(self, a440_buffer):
        result = analyze_audio(a440_buffer)
        assert isinstance(result, AnalysisResult)
        assert isinstance(result.tonal, TonalResult)
        assert math.isfinite(result.loudness.integrated)

    def test_a440_chroma_peak(self, a440_buffer):
        result = analyze_audio(a440_buffer)
        assert result.tonal.chroma.ready
        assert result.tonal.chroma.peak_pitch_class == 9

    def test_key_confidence_bounds(self, a440_buffer):
        key = analyze_audio(a440_buffer).tonal.key
        assert 0.05 <= key.confidence <= 0.95

    def test_triad_tonal_result(self):
        tonal = analyze_tonality(_triad_buffer())
        assert tonal.scales
        assert 0.0 < tonal.tonal_clarity <= 1.0
        assert 0.0 < tonal.harmonic_complexity <= 1.0
        assert all(m.strength > 0.10 for m in tonal.scales)

    def test_silence(self, silent_buffer):
        result = analyze_audio(silent_buffer)
        assert result.loudness.integrated == -math.inf
        assert not result.tonal.chroma.ready
        assert result.tonal.scales == ()
        assert result.tonal.key.confidence == pytest.approx(0.05)
        assert result.tonal.tonal_clarity == 0.0

    def test_idempotent(self):
        buf = _triad_buffer(seconds=3.0)
        assert analyze_audio(buf).as_dict() == analyze_audio(buf).as_dict()

    def test_config_threaded_through(self):
        config = AnalysisConfig(scale=ScaleConfig(top_n=2))
        tonal = analyze_tonality(_triad_buffer(seconds=3.0), config)
        assert len(tonal.scales) <= 2

    def test_analyze_loudness_matches_meter(self, a440_buffer):
        assert analyze_loudness(a440_buffer) == analyze_audio(a440_buffer).loudness


class TestResultDict:
    def test_keys(self, a440_buffer):
        data = analyze_audio(a440_buffer).as_dict()
        assert set(data) == {"loudness", "tonal"}
        assert {"key", "root", "is_major", "confidence", "chroma", "scales"} <= set(data["tonal"])
        assert len(data["tonal"]["chroma"]) == 12

    def test_silence_keeps_negative_infinity(self, silent_buffer):
        data = analyze_audio(silent_buffer).as_dict()
        assert data["loudness"]["integrated"] == -math.inf

    def test_json_serializable(self, a440_buffer):
        text = json.dumps(analyze_audio(a440_buffer).as_dict())
        assert '"tonal"' in text

    def test_scale_entries(self):
        data = analyze_tonality(_triad_buffer(seconds=3.0)).as_dict()
        for entry in data["scales"]:
            assert set(entry) == {"scale", "category", "strength"}
