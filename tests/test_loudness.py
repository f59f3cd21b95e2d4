"""
tests/test_loudness.py — Test suite for core/loudness/.

Covers the three stages and the meter with synthetic signals of known level:
    - filters.py: channel weights, K-weighting, block energy / sequences
    - gating.py:  loudness conversion, absolute and relative gates
    - meter.py:   momentary / short-term / integrated loudness end to end

Signal conventions:
    - Planar arrays: shape (C, N), dtype float64
    - Full-scale sine: amplitude = 1.0, mean square = 0.5
    - Expected LUFS of a sine is computed independently from the filter's
      frequency response: -0.691 + 10·log10(A²/2 · |H(f)|²)
"""

from __future__ import annotations

import logging
import math

import numpy as np
import pytest
from scipy.signal import freqz

from core.audio.buffer import AudioBuffer
from core.config import LoudnessConfig
from core.loudness import (
    GatingResult,
    LoudnessResult,
    absolute_gate,
    block_energies,
    block_energy,
    channel_weights,
    energy_to_loudness,
    gate_energies,
    max_loudness,
    measure_loudness,
)
from core.loudness.constants import K_WEIGHTING_A, K_WEIGHTING_B
from core.loudness.filters import k_weight

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

SR = 44100


def _sine(freq_hz: float, seconds: float, amplitude: float = 1.0, sr: int = SR) -> np.ndarray:
    """Generate a mono sine wave."""
    n = int(sr * seconds)
    t = np.arange(n) / sr
    return amplitude * np.sin(2.0 * np.pi * freq_hz * t)


def _expected_sine_lufs(freq_hz: float, amplitude: float = 1.0) -> float:
    """Hand-computed K-weighted loudness of a steady sine."""
    _, h = freqz(K_WEIGHTING_B, K_WEIGHTING_A, worN=[freq_hz], fs=SR)
    gain_sq = float(np.abs(h[0]) ** 2)
    return -0.691 + 10.0 * math.log10(0.5 * amplitude**2 * gain_sq)


def _buffer(*planes: np.ndarray, sr: int = SR) -> AudioBuffer:
    return AudioBuffer.from_channels(np.stack(planes), sr)


# ---------------------------------------------------------------------------
# 1. Filters and block energy
# ---------------------------------------------------------------------------


class TestChannelWeights:
    def test_stereo(self):
        np.testing.assert_array_equal(channel_weights(2), [1.0, 1.0])

    def test_five_channel_table(self):
        np.testing.assert_allclose(channel_weights(5), [1.0, 1.0, 1.0, 1.41, 1.41])

    def test_extra_channels_use_unity(self):
        weights = channel_weights(7)
        assert weights.shape == (7,)
        np.testing.assert_allclose(weights[5:], [1.0, 1.0])

    def test_zero_channels_raises(self):
        with pytest.raises(ValueError, match="n_channels"):
            channel_weights(0)


class TestKWeighting:
    def test_preserves_shape(self):
        block = np.random.default_rng(0).standard_normal((2, 1000))
        assert k_weight(block).shape == (2, 1000)

    def test_boosts_high_frequencies(self):
        low = k_weight(_sine(100.0, 1.0)[np.newaxis, :])
        high = k_weight(_sine(5000.0, 1.0)[np.newaxis, :])
        assert np.mean(high[:, 1000:] ** 2) > np.mean(low[:, 1000:] ** 2)

    def test_channels_filtered_independently(self):
        left = _sine(1000.0, 0.5)
        planes = np.stack([left, np.zeros_like(left)])
        out = k_weight(planes)
        assert not out[1].any()
        np.testing.assert_allclose(out[0], k_weight(left))


class TestBlockEnergy:
    def test_silence_is_zero(self):
        assert block_energy(np.zeros((2, 1000)), 0, 500) == 0.0

    def test_padding_past_end(self):
        planes = _sine(1000.0, 0.1)[np.newaxis, :]
        n = planes.shape[1]
        full = block_energy(planes, 0, n)
        padded = block_energy(planes, 0, 2 * n)
        # Same filtered energy spread over twice the length, plus the filter tail.
        assert padded == pytest.approx(full / 2.0, rel=0.01)

    def test_start_past_end_is_silent(self):
        planes = np.ones((1, 100))
        assert block_energy(planes, 500, 100) == 0.0

    def test_divides_by_channel_count(self):
        mono = _sine(1000.0, 0.5)[np.newaxis, :]
        dual = np.stack([mono[0], mono[0]])
        assert block_energy(dual, 0, 10000) == pytest.approx(block_energy(mono, 0, 10000))

    def test_surround_weight_applied(self):
        sig = _sine(1000.0, 0.5)
        front = np.zeros((5, sig.size))
        front[0] = sig
        rear = np.zeros((5, sig.size))
        rear[3] = sig
        ratio = block_energy(rear, 0, sig.size) / block_energy(front, 0, sig.size)
        assert ratio == pytest.approx(1.41)

    def test_invalid_length_raises(self):
        with pytest.raises(ValueError, match="Block length"):
            block_energy(np.zeros((1, 10)), 0, 0)

    def test_negative_start_raises(self):
        with pytest.raises(ValueError, match="Block start"):
            block_energy(np.zeros((1, 10)), -1, 5)


class TestBlockEnergies:
    def test_block_count(self):
        planes = np.zeros((1, 10000))
        energies = block_energies(planes, 4000, 1000)
        # starts 0, 1000, ... 6000
        assert energies.shape == (7,)

    def test_shorter_than_one_block_is_empty(self):
        assert block_energies(np.zeros((2, 100)), 4000, 1000).size == 0

    def test_exact_one_block(self):
        assert block_energies(np.ones((1, 4000)), 4000, 1000).size == 1

    def test_matches_single_block_energy(self):
        planes = _sine(440.0, 1.0)[np.newaxis, :]
        energies = block_energies(planes, 17640, 4410)
        assert energies[2] == pytest.approx(block_energy(planes, 2 * 4410, 17640))


# ---------------------------------------------------------------------------
# 2. Gating
# ---------------------------------------------------------------------------


class TestEnergyToLoudness:
    def test_unity_energy(self):
        assert energy_to_loudness(1.0) == pytest.approx(-0.691)

    def test_zero_energy_is_finite(self):
        value = energy_to_loudness(0.0)
        assert math.isfinite(value)
        assert value == pytest.approx(-100.691)

    def test_array(self):
        out = energy_to_loudness(np.array([1.0, 0.1]))
        np.testing.assert_allclose(out, [-0.691, -10.691], atol=1e-6)


class TestAbsoluteGate:
    def test_drops_quiet_blocks(self):
        energies = np.array([0.0, 1e-3, 1e-9, 1.0])
        np.testing.assert_array_equal(absolute_gate(energies), [1e-3, 1.0])

    def test_keeps_order(self):
        energies = np.array([1.0, 1e-2, 1e-1])
        np.testing.assert_array_equal(absolute_gate(energies), energies)

    def test_empty(self):
        assert absolute_gate(np.zeros(0)).size == 0


class TestGateEnergies:
    def test_empty_sequence(self):
        result = gate_energies(np.zeros(0))
        assert isinstance(result, GatingResult)
        assert result.integrated == -math.inf
        assert result.preliminary == -math.inf
        assert result.total_count == 0

    def test_all_below_absolute_gate(self):
        result = gate_energies(np.zeros(5))
        assert result.integrated == -math.inf
        assert result.relative_threshold == -math.inf
        assert result.absolute_count == 0
        assert result.total_count == 5

    def test_relative_gate_drops_quiet_block(self):
        result = gate_energies(np.array([1.0, 1e-3]))
        assert result.absolute_count == 2
        assert result.relative_count == 1
        assert result.preliminary == pytest.approx(energy_to_loudness(0.5005))
        assert result.integrated == pytest.approx(-0.691, abs=1e-6)

    def test_relative_threshold_exact(self):
        rng = np.random.default_rng(7)
        energies = rng.uniform(1e-6, 1.0, size=200)
        result = gate_energies(energies)
        assert result.relative_threshold == result.preliminary - 10.0

    def test_constant_energies_all_survive(self):
        result = gate_energies(np.full(10, 0.01))
        assert result.relative_count == 10
        assert result.integrated == pytest.approx(result.preliminary)

    def test_counts_ordered(self):
        energies = np.array([1.0, 0.5, 1e-4, 1e-12, 0.0])
        result = gate_energies(energies)
        assert result.relative_count <= result.absolute_count <= result.total_count


class TestMaxLoudness:
    def test_empty_is_negative_infinity(self):
        assert max_loudness(np.zeros(0)) == -math.inf

    def test_loudest_block(self):
        assert max_loudness(np.array([0.01, 1.0, 0.1])) == pytest.approx(-0.691)


# ---------------------------------------------------------------------------
# 3. Meter
# ---------------------------------------------------------------------------


class TestMeasureLoudnessSilence:
    def test_all_measures_negative_infinity(self, silent_buffer):
        result = measure_loudness(silent_buffer)
        assert isinstance(result, LoudnessResult)
        assert result.momentary == -math.inf
        assert result.short_term == -math.inf
        assert result.integrated == -math.inf
        assert result.gated_block_count == 0
        assert result.is_silent

    def test_block_counts(self, silent_buffer):
        result = measure_loudness(silent_buffer)
        assert result.momentary_block_count == (5 * SR - 17640) // 4410 + 1
        assert result.short_term_block_count == (5 * SR - 132300) // 13230 + 1


class TestMeasureLoudnessSine:
    def test_full_scale_1khz_matches_hand_computation(self):
        result = measure_loudness(_buffer(_sine(1000.0, 5.0)))
        expected = _expected_sine_lufs(1000.0)
        assert math.isfinite(result.integrated)
        assert result.integrated == pytest.approx(expected, abs=0.25)

    def test_steady_signal_measures_agree(self):
        result = measure_loudness(_buffer(_sine(1000.0, 5.0)))
        assert result.momentary == pytest.approx(result.integrated, abs=0.1)
        assert result.short_term == pytest.approx(result.integrated, abs=0.1)

    def test_steady_signal_passes_both_gates(self):
        result = measure_loudness(_buffer(_sine(1000.0, 5.0)))
        assert result.gated_block_count == result.momentary_block_count
        assert result.relative_gated_block_count == result.gated_block_count

    def test_relative_threshold_relation(self):
        result = measure_loudness(_buffer(_sine(500.0, 4.0, amplitude=0.3)))
        assert result.relative_threshold == result.preliminary - 10.0

    def test_half_amplitude_is_6db_quieter(self):
        loud = measure_loudness(_buffer(_sine(1000.0, 4.0)))
        quiet = measure_loudness(_buffer(_sine(1000.0, 4.0, amplitude=0.5)))
        assert loud.integrated - quiet.integrated == pytest.approx(6.02, abs=0.05)

    def test_identical_stereo_equals_mono(self):
        sig = _sine(1000.0, 4.0)
        mono = measure_loudness(_buffer(sig))
        stereo = measure_loudness(_buffer(sig, sig))
        assert stereo.integrated == pytest.approx(mono.integrated, abs=1e-4)

    def test_silent_tail_is_gated_out(self):
        sig = np.concatenate([_sine(1000.0, 4.0), np.zeros(4 * SR)])
        result = measure_loudness(_buffer(sig))
        steady = measure_loudness(_buffer(_sine(1000.0, 4.0)))
        assert result.gated_block_count < result.momentary_block_count
        assert result.integrated == pytest.approx(steady.integrated, abs=0.3)


class TestMeasureLoudnessEdgeCases:
    def test_shorter_than_short_term_block(self):
        result = measure_loudness(_buffer(_sine(1000.0, 1.0)))
        assert math.isfinite(result.momentary)
        assert math.isfinite(result.integrated)
        assert result.short_term == -math.inf
        assert result.short_term_block_count == 0

    def test_shorter_than_momentary_block(self):
        result = measure_loudness(_buffer(_sine(1000.0, 0.2)))
        assert result.momentary_block_count == 0
        assert result.momentary == -math.inf
        assert result.integrated == -math.inf

    def test_idempotent(self):
        buf = _buffer(_sine(700.0, 4.0, amplitude=0.4), _sine(300.0, 4.0, amplitude=0.2))
        assert measure_loudness(buf) == measure_loudness(buf)

    def test_never_nan(self):
        rng = np.random.default_rng(3)
        buf = _buffer(rng.uniform(-1e-6, 1e-6, SR * 4))
        result = measure_loudness(buf)
        for value in (result.momentary, result.short_term, result.integrated):
            assert not math.isnan(value)

    def test_custom_config(self):
        config = LoudnessConfig(momentary_block=4410, momentary_hop=4410)
        result = measure_loudness(_buffer(_sine(1000.0, 1.0)), config)
        assert result.momentary_block_count == 10

    def test_rate_mismatch_logs_warning(self, caplog):
        buf = AudioBuffer.from_channels(_sine(1000.0, 1.0, sr=48000), 48000)
        with caplog.at_level(logging.WARNING, logger="core.loudness.meter"):
            measure_loudness(buf)
        assert any("48000" in r.getMessage() for r in caplog.records)

    def test_as_dict_keys(self, silent_buffer):
        data = measure_loudness(silent_buffer).as_dict()
        assert {"momentary", "short_term", "integrated", "gated_block_count"} <= set(data)
