"""
core/audio/buffer.py — Immutable interleaved sample buffer.

AudioBuffer is the single input type of the analysis core. It owns a
read-only float32 copy of the caller's interleaved samples, so nothing
downstream can mutate the signal while an analysis is running.

Design:
    - Frozen dataclass with eq=False (numpy arrays have no scalar equality).
    - Validation happens at construction; downstream code trusts the shape.
    - Channel views are produced on demand as float64 copies; the
      loudness and chroma pipelines never share a working array.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True, eq=False)
class AudioBuffer:
    """Interleaved multi-channel audio, nominal range [-1, 1].

    Invariants:
        samples.ndim == 1 and samples.dtype == float32
        channels >= 1
        sample_rate > 0
        len(samples) % channels == 0
    """

    samples: np.ndarray
    """Interleaved samples: L0, R0, L1, R1, ... for stereo."""

    channels: int
    """Number of interleaved channels."""

    sample_rate: int
    """Sample rate in Hz."""

    def __post_init__(self) -> None:
        if self.channels < 1:
            raise ValueError(f"channels must be >= 1, got {self.channels}")
        if self.sample_rate <= 0:
            raise ValueError(f"Sample rate must be positive, got {self.sample_rate}")

        data = np.array(self.samples, dtype=np.float32, copy=True)
        if data.ndim != 1:
            raise ValueError(f"samples must be a flat interleaved array, got shape {data.shape}")
        if data.size % self.channels != 0:
            raise ValueError(
                f"Sample count ({data.size}) is not a multiple of channels ({self.channels})"
            )
        data.flags.writeable = False
        object.__setattr__(self, "samples", data)

    @classmethod
    def from_channels(cls, y: np.ndarray, sample_rate: int) -> AudioBuffer:
        """Build a buffer from a mono (N,) or planar (C, N) array."""
        arr = np.asarray(y, dtype=np.float32)
        if arr.ndim == 1:
            return cls(samples=arr, channels=1, sample_rate=sample_rate)
        if arr.ndim != 2:
            raise ValueError(f"Expected shape (N,) or (C, N), got {arr.shape}")
        return cls(samples=arr.T.reshape(-1), channels=arr.shape[0], sample_rate=sample_rate)

    @property
    def frame_count(self) -> int:
        """Samples per channel."""
        return self.samples.size // self.channels

    @property
    def duration_sec(self) -> float:
        return self.frame_count / float(self.sample_rate)

    def deinterleave(self) -> np.ndarray:
        """Return a (channels, frame_count) float64 array."""
        return self.samples.reshape(self.frame_count, self.channels).T.astype(np.float64)

    def to_mono(self) -> np.ndarray:
        """Average all channels into a 1-D float64 array."""
        if self.channels == 1:
            return self.samples.astype(np.float64)
        return np.mean(self.deinterleave(), axis=0)
