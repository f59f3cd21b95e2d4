"""
core/loudness/filters.py — K-weighting and per-block mean-square energy.

Implements:
    - Channel weight lookup (fixed 5-channel BS.1770 table)
    - Mean-square energy of one K-weighted block
    - Block energy sequences for a (block, hop) pair

Design:
    - Pure: (channels, frames) float64 arrays in, energies out.
    - Filter history is created fresh for every block (lfilter with zero
      initial conditions) and discarded afterwards; no state crosses
      block boundaries or calls.
    - Channel summation: Σ_c G_c · Σ_n y_c[n]² / (block_len × channels).
"""

from __future__ import annotations

import numpy as np
from scipy import signal as scipy_signal

from core.loudness.constants import CHANNEL_WEIGHTS, K_WEIGHTING_A, K_WEIGHTING_B

_B = np.array(K_WEIGHTING_B, dtype=np.float64)
_A = np.array(K_WEIGHTING_A, dtype=np.float64)


def channel_weights(n_channels: int) -> np.ndarray:
    """Return the G_c weight for each of n_channels channels.

    Raises:
        ValueError: If n_channels < 1.
    """
    if n_channels < 1:
        raise ValueError(f"n_channels must be >= 1, got {n_channels}")
    table = CHANNEL_WEIGHTS + (1.0,) * max(0, n_channels - len(CHANNEL_WEIGHTS))
    return np.array(table[:n_channels], dtype=np.float64)


def k_weight(block: np.ndarray) -> np.ndarray:
    """Run the K-weighting biquad along the last axis from a zero state."""
    return scipy_signal.lfilter(_B, _A, block, axis=-1)


def block_energy(
    channels: np.ndarray,
    start: int,
    length: int,
    weights: np.ndarray | None = None,
) -> float:
    """Mean-square K-weighted energy of one block.

    Samples past the end of the signal are treated as zero.

    Args:
        channels: (C, N) planar float array.
        start:    First frame of the block.
        length:   Block length in frames.
        weights:  Per-channel gains; defaults to channel_weights(C).

    Returns:
        Weighted mean-square energy (>= 0).

    Raises:
        ValueError: If length <= 0 or start < 0.
    """
    if length <= 0:
        raise ValueError(f"Block length must be positive, got {length}")
    if start < 0:
        raise ValueError(f"Block start must be non-negative, got {start}")

    n_channels = channels.shape[0]
    if weights is None:
        weights = channel_weights(n_channels)

    segment = channels[:, start : start + length]
    if segment.shape[1] < length:
        segment = np.pad(segment, ((0, 0), (0, length - segment.shape[1])))

    filtered = k_weight(segment)
    per_channel = np.sum(filtered * filtered, axis=1)
    return float(np.dot(weights, per_channel) / (length * n_channels))


def block_energies(
    channels: np.ndarray,
    block_size: int,
    hop_size: int,
    weights: np.ndarray | None = None,
) -> np.ndarray:
    """Energy of every block whose span fits inside the signal.

    Starts advance by hop_size from frame 0; a signal shorter than one block
    yields an empty array.

    Returns:
        1-D float64 array, ordered by block start.
    """
    n_frames = channels.shape[1]
    if n_frames < block_size:
        return np.zeros(0, dtype=np.float64)

    if weights is None:
        weights = channel_weights(channels.shape[0])

    starts = range(0, n_frames - block_size + 1, hop_size)
    return np.fromiter(
        (block_energy(channels, s, block_size, weights) for s in starts),
        dtype=np.float64,
        count=len(starts),
    )
