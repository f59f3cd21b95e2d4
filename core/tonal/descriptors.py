"""
core/tonal/descriptors.py — Scalar summaries of a pooled chroma vector.

    tonal_clarity        min(max / mean, 10) / 10 — how dominant the
                         strongest pitch class is (0.1 flat … 1 single bin)
    harmonic_complexity  share of bins above 30% of the peak (0 … 1)

Both return 0.0 for an all-zero chroma.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

_CLARITY_CAP = 10.0
_COMPLEXITY_RATIO = 0.3


def tonal_clarity(chroma: Sequence[float] | np.ndarray) -> float:
    arr = np.asarray(chroma, dtype=np.float64)
    mean = float(np.mean(arr)) if arr.size else 0.0
    if mean <= 0.0:
        return 0.0
    return min(float(np.max(arr)) / mean, _CLARITY_CAP) / _CLARITY_CAP


def harmonic_complexity(chroma: Sequence[float] | np.ndarray) -> float:
    arr = np.asarray(chroma, dtype=np.float64)
    if arr.size == 0:
        return 0.0
    peak = float(np.max(arr))
    if peak <= 0.0:
        return 0.0
    return float(np.count_nonzero(arr > _COMPLEXITY_RATIO * peak)) / arr.size
