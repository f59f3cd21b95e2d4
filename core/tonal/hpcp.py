"""
core/tonal/hpcp.py — Harmonic pitch-class folding and temporal pooling.

Two stages of the chroma pipeline:

    fold_peaks()  spectral peaks (Hz, magnitude) → one 12-bin HPCP frame
    HpcpState     bounded FIFO of frames → one pooled 12-bin profile

Pitch-class mapping (A4 = 440 Hz, C = 0):
    pc = round(12 · log2(f_adj / 440) + 9) mod 12
    f_adj = f · 2^(−tuning_cents / 1200)

Rounding is half away from zero, not numpy's round-half-to-even, so a
frequency exactly between two semitones lands on the upper one above C4
(positive semitone count) and on the lower one below it.

HpcpState design:
    A (capacity, 12) numpy arena plus a write index. push() overwrites the
    oldest row once the arena is full, so pooling cost is constant per frame
    and no list is ever reallocated. Instances are local to one extraction
    call; never share one between analyses.
"""

from __future__ import annotations

import numpy as np

from core.audio.dsp import normalize_sum

A4_HZ = 440.0
_A_PITCH_CLASS = 9
NUM_PITCH_CLASSES = 12


# ---------------------------------------------------------------------------
# Pitch-class mapping
# ---------------------------------------------------------------------------


def round_half_away(x: np.ndarray) -> np.ndarray:
    """Round to nearest, ties away from zero (-0.5 -> -1, 2.5 -> 3)."""
    x = np.asarray(x, dtype=np.float64)
    return np.sign(x) * np.floor(np.abs(x) + 0.5)


def pitch_classes(freqs: np.ndarray, tuning_cents: float = 0.0) -> np.ndarray:
    """Vectorised pitch_class() for an array of positive frequencies."""
    f = np.asarray(freqs, dtype=np.float64)
    if np.any(f <= 0.0):
        raise ValueError("Frequencies must be positive to map to a pitch class")
    adjusted = f * 2.0 ** (-tuning_cents / 1200.0)
    semitones = 12.0 * np.log2(adjusted / A4_HZ) + _A_PITCH_CLASS
    return np.mod(round_half_away(semitones).astype(np.int64), NUM_PITCH_CLASSES)


def pitch_class(freq: float, tuning_cents: float = 0.0) -> int:
    """Map a frequency to its pitch class 0..11 (C = 0, A = 9).

    Args:
        freq:         Frequency in Hz (> 0).
        tuning_cents: Concert-pitch offset removed before mapping.

    Raises:
        ValueError: If freq is not positive.
    """
    return int(pitch_classes(np.array([freq]), tuning_cents)[0])


# ---------------------------------------------------------------------------
# Harmonic folding
# ---------------------------------------------------------------------------


def fold_peaks(
    freqs: np.ndarray,
    mags: np.ndarray,
    tuning_cents: float = 0.0,
    num_harmonics: int = 4,
) -> np.ndarray:
    """Fold spectral peaks and their subharmonics into one HPCP frame.

    Each peak adds its magnitude to pc(f); for k = 2..num_harmonics it also
    adds magnitude / sqrt(k) to pc(f / k), crediting the fundamentals the
    peak could be a harmonic of.

    Args:
        freqs:         Peak frequencies in Hz, shape (P,).
        mags:          Peak magnitudes, shape (P,).
        tuning_cents:  Global tuning offset.
        num_harmonics: Highest subharmonic divisor (1 disables folding).

    Returns:
        float64 array of shape (12,), summing to 1, or all zeros when
        there are no peaks.

    Raises:
        ValueError: If freqs and mags differ in shape.
    """
    freqs = np.asarray(freqs, dtype=np.float64)
    mags = np.asarray(mags, dtype=np.float64)
    if freqs.shape != mags.shape:
        raise ValueError(f"freqs {freqs.shape} and mags {mags.shape} must have the same shape")

    frame = np.zeros(NUM_PITCH_CLASSES, dtype=np.float64)
    if freqs.size == 0:
        return frame

    for k in range(1, num_harmonics + 1):
        np.add.at(frame, pitch_classes(freqs / k, tuning_cents), mags / np.sqrt(k))
    return normalize_sum(frame)


# ---------------------------------------------------------------------------
# Temporal pooling
# ---------------------------------------------------------------------------


class HpcpState:
    """Fixed-capacity FIFO of HPCP frames with median/mean pooling.

    Args:
        capacity:      Maximum frames retained (oldest evicted first).
        min_frames:    Frames required before pooled() returns a profile.
        median_weight: Per-bin weight of the median; the mean gets the rest.
    """

    def __init__(self, capacity: int = 50, min_frames: int = 10, median_weight: float = 0.7) -> None:
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        if not 0 < min_frames <= capacity:
            raise ValueError(f"min_frames must be in (0, {capacity}], got {min_frames}")
        self._arena = np.zeros((capacity, NUM_PITCH_CLASSES), dtype=np.float64)
        self._write = 0
        self._count = 0
        self._pushed = 0
        self._min_frames = min_frames
        self._median_weight = median_weight

    @property
    def capacity(self) -> int:
        return self._arena.shape[0]

    def __len__(self) -> int:
        """Frames currently buffered (≤ capacity)."""
        return self._count

    @property
    def frames_pushed(self) -> int:
        """Frames pushed over the state's lifetime, including evicted ones."""
        return self._pushed

    @property
    def ready(self) -> bool:
        return self._count >= self._min_frames

    def push(self, frame: np.ndarray) -> None:
        """Append one 12-bin frame, evicting the oldest when full."""
        frame = np.asarray(frame, dtype=np.float64)
        if frame.shape != (NUM_PITCH_CLASSES,):
            raise ValueError(f"HPCP frame must have shape (12,), got {frame.shape}")
        self._arena[self._write] = frame
        self._write = (self._write + 1) % self.capacity
        self._count = min(self._count + 1, self.capacity)
        self._pushed += 1

    def frames(self) -> np.ndarray:
        """Buffered frames oldest-first, shape (len, 12)."""
        if self._count < self.capacity:
            return self._arena[: self._count].copy()
        return np.roll(self._arena, -self._write, axis=0)

    def pooled(self) -> np.ndarray:
        """Pooled profile: per-bin median_weight·median + (1 − w)·mean, renormalized.

        Returns all zeros until ready, or when every buffered frame is zero.
        """
        if not self.ready:
            return np.zeros(NUM_PITCH_CLASSES, dtype=np.float64)
        rows = self._arena[: self._count]
        w = self._median_weight
        pooled = w * np.median(rows, axis=0) + (1.0 - w) * np.mean(rows, axis=0)
        return normalize_sum(pooled)
