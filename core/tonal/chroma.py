"""
core/tonal/chroma.py — Pooled HPCP chroma extraction from a mono signal.

Pipeline (one call, no state kept between calls):
    1. estimate_tuning()   global concert-pitch offset, ±50 cents in 10-cent steps
    2. framing             4096-sample Blackman-Harris frames, 50% hop, ≤ 100 frames
    3. magnitude spectrum  |DFT| / n (see core.audio.dsp)
    4. whiten_spectrum()   divide by local average^0.33 to flatten timbre
    5. pick_peaks()        local maxima above −60 dB inside 65–2093 Hz, top 50
    6. fold_peaks()        12-bin HPCP frame with subharmonic credit
    7. HpcpState           median/mean pooling over the last 50 frames

Design:
    - Works on any sample rate: bin frequencies are derived from the rate
      passed in, so nothing here is tied to the loudness reference rate.
    - One frame-sized work array is reused for every frame.
    - Silent or too-short input yields an all-zero, not-ready profile.
"""

from __future__ import annotations

import logging

import numpy as np

from core.audio.dsp import (
    blackman_harris_window,
    db_to_amplitude,
    hann_window,
    local_average,
    magnitude_spectrum,
    parabolic_peak,
)
from core.config import ChromaConfig
from core.tonal.hpcp import A4_HZ, HpcpState, fold_peaks
from core.tonal.types import ChromaProfile

logger = logging.getLogger(__name__)

_EPS = 1e-10


# ---------------------------------------------------------------------------
# Spectral stages
# ---------------------------------------------------------------------------


def whiten_spectrum(spectrum: np.ndarray, half_width: int = 10, exponent: float = 0.33) -> np.ndarray:
    """Divide each bin by its local ±half_width average raised to exponent."""
    return spectrum / np.power(local_average(spectrum, half_width) + _EPS, exponent)


def _local_maxima(spectrum: np.ndarray, neighborhood: int) -> np.ndarray:
    """Indices k that strictly exceed every bin within ±neighborhood."""
    n = spectrum.size
    if n <= 2 * neighborhood:
        return np.zeros(0, dtype=np.int64)
    centre = spectrum[neighborhood : n - neighborhood]
    mask = np.ones(centre.size, dtype=bool)
    for j in range(1, neighborhood + 1):
        mask &= centre > spectrum[neighborhood - j : n - neighborhood - j]
        mask &= centre > spectrum[neighborhood + j : n - neighborhood + j]
    return np.flatnonzero(mask) + neighborhood


def _refine_peaks(
    spectrum: np.ndarray,
    candidates: np.ndarray,
    bin_hz: float,
    max_peaks: int,
) -> tuple[np.ndarray, np.ndarray]:
    """Keep the max_peaks strongest candidates and interpolate each one."""
    if candidates.size == 0:
        return np.zeros(0), np.zeros(0)
    order = np.argsort(-spectrum[candidates], kind="stable")[:max_peaks]
    refined = [parabolic_peak(spectrum, int(k)) for k in candidates[order]]
    freqs = np.array([pos * bin_hz for pos, _ in refined], dtype=np.float64)
    mags = np.array([mag for _, mag in refined], dtype=np.float64)
    return freqs, mags


def pick_peaks(
    spectrum: np.ndarray,
    sample_rate: int,
    config: ChromaConfig | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Pick spectral peaks from a whitened magnitude spectrum.

    A peak must exceed its neighbours within ±peak_neighborhood bins, lie
    above peak_threshold_db and fall inside [min_frequency, max_frequency].

    Args:
        spectrum:    Whitened magnitude spectrum (n/2 bins of an n-point frame).
        sample_rate: Rate of the framed signal in Hz.
        config:      Chroma parameters; defaults to ChromaConfig().

    Returns:
        (frequencies_hz, magnitudes), strongest first, at most max_peaks each.
    """
    cfg = config or ChromaConfig()
    bin_hz = sample_rate / (2.0 * spectrum.size) if spectrum.size else 0.0
    candidates = _local_maxima(spectrum, cfg.peak_neighborhood)
    if candidates.size == 0:
        return np.zeros(0), np.zeros(0)

    freqs = candidates * bin_hz
    keep = (
        (spectrum[candidates] > db_to_amplitude(cfg.peak_threshold_db))
        & (freqs >= cfg.min_frequency)
        & (freqs <= cfg.max_frequency)
    )
    return _refine_peaks(spectrum, candidates[keep], bin_hz, cfg.max_peaks)


# ---------------------------------------------------------------------------
# Tuning estimation
# ---------------------------------------------------------------------------


def _tuning_score(freqs: np.ndarray, mags: np.ndarray, cents: float, partials: int) -> float:
    """Harmonic alignment of the peaks with a grid offset by `cents`.

    Every peak is tested as partial h = 1..partials of a fundamental f / h;
    each term is (mag / h) · cos(2π · deviation / 100) where deviation is the
    distance in cents from f / h to the nearest semitone of the shifted grid.
    """
    reference = A4_HZ * 2.0 ** (cents / 1200.0)
    score = 0.0
    for h in range(1, partials + 1):
        deviation = 1200.0 * np.log2(freqs / h / reference)
        deviation = np.mod(deviation + 50.0, 100.0) - 50.0
        score += float(np.sum((mags / h) * np.cos(2.0 * np.pi * deviation / 100.0)))
    return score


def estimate_tuning(mono: np.ndarray, sample_rate: int, config: ChromaConfig | None = None) -> float:
    """Estimate the global concert-pitch offset in cents.

    Coarse Hann-windowed frames evenly spaced over the first
    tuning_max_samples samples supply their strongest in-band peaks; each
    candidate offset in [−range, +range] is scored by _tuning_score().
    Ties prefer the offset closest to zero.

    Returns:
        Offset in cents; 0.0 when the prefix is shorter than one frame or
        contains no peaks.
    """
    cfg = config or ChromaConfig()
    n = cfg.frame_size
    prefix = np.asarray(mono[: cfg.tuning_max_samples], dtype=np.float64)
    if prefix.size < n:
        return 0.0

    window = hann_window(n)
    bin_hz = sample_rate / float(n)
    starts = np.unique(np.linspace(0, prefix.size - n, cfg.tuning_frames).astype(np.int64))

    all_freqs: list[np.ndarray] = []
    all_mags: list[np.ndarray] = []
    for start in starts:
        spectrum = magnitude_spectrum(prefix[start : start + n] * window)
        candidates = _local_maxima(spectrum, 1)
        freqs = candidates * bin_hz
        in_band = (
            (spectrum[candidates] > 0.0) & (freqs >= cfg.min_frequency) & (freqs <= cfg.max_frequency)
        )
        f, m = _refine_peaks(spectrum, candidates[in_band], bin_hz, cfg.tuning_peaks)
        all_freqs.append(f)
        all_mags.append(m)

    freqs = np.concatenate(all_freqs)
    mags = np.concatenate(all_mags)
    if freqs.size == 0:
        return 0.0

    steps = int(round(cfg.tuning_range_cents / cfg.tuning_step_cents))
    candidates = [k * cfg.tuning_step_cents for k in range(-steps, steps + 1)]
    scores = {c: _tuning_score(freqs, mags, c, cfg.tuning_partials) for c in candidates}
    best = max(candidates, key=lambda c: (scores[c], -abs(c)))
    logger.debug("Tuning estimate: %+.0f cents from %d peaks", best, freqs.size)
    return float(best)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_chroma(
    mono: np.ndarray,
    sample_rate: int,
    config: ChromaConfig | None = None,
) -> ChromaProfile:
    """Extract the pooled 12-bin HPCP profile of a mono signal.

    Args:
        mono:        1-D signal, nominal range [-1, 1].
        sample_rate: Sample rate in Hz.
        config:      Chroma parameters; defaults to ChromaConfig().

    Returns:
        ChromaProfile. When fewer than min_frames non-silent frames were
        produced the vector is all zeros and ready is False.

    Raises:
        ValueError: If mono is not 1-D or sample_rate is not positive.
    """
    cfg = config or ChromaConfig()
    signal = np.asarray(mono, dtype=np.float64)
    if signal.ndim != 1:
        raise ValueError(f"Expected a 1-D mono signal, got shape {signal.shape}")
    if sample_rate <= 0:
        raise ValueError(f"sample_rate must be positive, got {sample_rate}")
    signal = signal[: cfg.max_samples]

    tuning = estimate_tuning(signal, sample_rate, cfg)

    n = cfg.frame_size
    window = blackman_harris_window(n)
    frame = np.empty(n, dtype=np.float64)
    bin_hz = sample_rate / float(n)
    state = HpcpState(cfg.history_size, cfg.min_frames, cfg.median_weight)

    examined = 0
    skipped = 0
    for start in range(0, signal.size - n + 1, cfg.hop_size):
        if examined >= cfg.max_frames:
            break
        examined += 1

        np.multiply(signal[start : start + n], window, out=frame)
        if float(np.mean(frame * frame)) < cfg.min_frame_energy:
            skipped += 1
            continue

        whitened = whiten_spectrum(
            magnitude_spectrum(frame), cfg.whitening_half_width, cfg.whitening_exponent
        )
        freqs, mags = pick_peaks(whitened, sample_rate, cfg)
        hpcp = fold_peaks(freqs, mags, tuning, cfg.num_harmonics)
        if hpcp.any():
            state.push(hpcp)

    pooled = state.pooled()
    logger.debug(
        "Chroma: %d frames examined, %d silent, %d pooled (bin width %.2f Hz), ready=%s",
        examined,
        skipped,
        len(state),
        bin_hz,
        state.ready,
    )
    return ChromaProfile(
        vector=tuple(float(v) for v in pooled),
        ready=state.ready,
        frames_analyzed=state.frames_pushed,
        tuning_offset_cents=tuning,
    )
