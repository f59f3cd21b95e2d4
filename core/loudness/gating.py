"""
core/loudness/gating.py — Two-stage BS.1770-4 gating over block energies.

    Raw → absolute gate (-70 LUFS) → preliminary loudness
        → relative gate (preliminary − 10 dB) → integrated loudness

Design:
    - Works on mean-square energies; loudness is only derived per block for
      the gate comparisons and once per mean at the end.
    - Every logarithm adds epsilon, so silent blocks never produce -inf
      or NaN inside the gate; an empty survivor set yields -inf explicitly.
"""

from __future__ import annotations

import numpy as np

from core.loudness.constants import ABSOLUTE_GATE_LUFS, LOUDNESS_OFFSET, RELATIVE_GATE_DB
from core.loudness.types import GatingResult

_EPS = 1e-10
_NEG_INF = float("-inf")


def energy_to_loudness(energy: np.ndarray | float, eps: float = _EPS) -> np.ndarray | float:
    """L = -0.691 + 10·log10(energy + eps)."""
    out = LOUDNESS_OFFSET + 10.0 * np.log10(np.asarray(energy, dtype=np.float64) + eps)
    if out.ndim == 0:
        return float(out)
    return out


def absolute_gate(
    energies: np.ndarray,
    threshold_lufs: float = ABSOLUTE_GATE_LUFS,
    eps: float = _EPS,
) -> np.ndarray:
    """Keep the energies whose block loudness is >= threshold_lufs (order preserved)."""
    if energies.size == 0:
        return energies
    return energies[energy_to_loudness(energies, eps) >= threshold_lufs]


def max_loudness(energies: np.ndarray, eps: float = _EPS) -> float:
    """Loudest block in LUFS, or -inf for an empty sequence."""
    if energies.size == 0:
        return _NEG_INF
    return float(energy_to_loudness(float(np.max(energies)), eps))


def gate_energies(
    energies: np.ndarray,
    *,
    absolute_threshold_lufs: float = ABSOLUTE_GATE_LUFS,
    relative_gate_db: float = RELATIVE_GATE_DB,
    eps: float = _EPS,
) -> GatingResult:
    """Apply the absolute and relative gates and integrate what survives.

    Args:
        energies:                Block mean-square energies in temporal order.
        absolute_threshold_lufs: Absolute gate (BS.1770-4: -70 LUFS).
        relative_gate_db:        Relative gate offset (BS.1770-4: 10 dB).
        eps:                     Log guard.

    Returns:
        GatingResult; loudness fields are -inf when a stage leaves no blocks.
    """
    total = int(energies.size)
    gated = absolute_gate(energies, absolute_threshold_lufs, eps)
    if gated.size == 0:
        return GatingResult(
            integrated=_NEG_INF,
            preliminary=_NEG_INF,
            relative_threshold=_NEG_INF,
            total_count=total,
            absolute_count=0,
            relative_count=0,
        )

    preliminary = float(energy_to_loudness(float(np.mean(gated)), eps))
    relative_threshold = preliminary - relative_gate_db

    survivors = gated[energy_to_loudness(gated, eps) >= relative_threshold]
    integrated = (
        float(energy_to_loudness(float(np.mean(survivors)), eps)) if survivors.size else _NEG_INF
    )

    return GatingResult(
        integrated=integrated,
        preliminary=preliminary,
        relative_threshold=relative_threshold,
        total_count=total,
        absolute_count=int(gated.size),
        relative_count=int(survivors.size),
    )
