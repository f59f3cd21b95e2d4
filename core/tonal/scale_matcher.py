"""
core/tonal/scale_matcher.py — Rank scale patterns against a pooled chroma.

For every (root, pattern) pair the 12 bins split into in-scale and
out-of-scale sets relative to that root:

    in_scale  = Σ degree_weight(i) · e[i]  /  Σ degree_weight(i)     (i in pattern)
    out_scale = Σ 2 · e[j]  /  (12 − |pattern|)                      (j not in pattern)
    strength  = (in / (in + out))^0.8 · 1 / (1 + 3 · out)

Matches above min_strength are sorted by strength and the top N returned.
Modes of one pitch collection (C Major, D Dorian, A Natural Minor ...) score
identically on a pure template, so equal strengths are ordered by: rooted
at the detected key root first, then higher weighted in-scale energy, then
catalogue order.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from core.config import ScaleConfig
from core.tonal.profiles import DEFAULT_DEGREE_WEIGHT, DEGREE_WEIGHTS, SCALES_BY_NAME, ScalePattern
from core.tonal.types import ScaleMatch

_STRENGTH_EXPONENT = 0.8
_OUT_OF_SCALE_WEIGHT = 2.0
_OUT_OF_SCALE_PENALTY = 3.0


def _scale_energies(chroma: np.ndarray, root: int, pattern: ScalePattern) -> tuple[float, float, float]:
    """Return (normalized in-scale, normalized out-of-scale, raw weighted in-scale)."""
    in_weighted = 0.0
    weight_total = 0.0
    for interval in pattern.intervals:
        w = DEGREE_WEIGHTS.get(interval, DEFAULT_DEGREE_WEIGHT)
        in_weighted += w * chroma[(root + interval) % 12]
        weight_total += w

    members = {(root + i) % 12 for i in pattern.intervals}
    outside = [chroma[j] for j in range(12) if j not in members]
    out_raw = _OUT_OF_SCALE_WEIGHT * float(sum(outside))

    in_scale = in_weighted / weight_total if weight_total > 0.0 else 0.0
    out_scale = out_raw / len(outside) if outside else 0.0
    return in_scale, out_scale, in_weighted


def scale_strength(chroma: Sequence[float] | np.ndarray, root: int, pattern: ScalePattern) -> float:
    """Fit of `pattern` rooted at `root` to the chroma, in [0, 1].

    Raises:
        ValueError: If chroma does not have 12 bins or root is outside 0..11.
    """
    arr = np.asarray(chroma, dtype=np.float64)
    if arr.shape != (12,):
        raise ValueError(f"Chroma must have shape (12,), got {arr.shape}")
    if not 0 <= root <= 11:
        raise ValueError(f"root must be in 0..11, got {root}")
    in_scale, out_scale, _ = _scale_energies(arr, root, pattern)
    return _strength(in_scale, out_scale)


def _strength(in_scale: float, out_scale: float) -> float:
    total = in_scale + out_scale
    if total <= 0.0:
        return 0.0
    return (in_scale / total) ** _STRENGTH_EXPONENT / (1.0 + _OUT_OF_SCALE_PENALTY * out_scale)


def match_scales(
    chroma: Sequence[float] | np.ndarray,
    root: int,
    config: ScaleConfig | None = None,
) -> tuple[ScaleMatch, ...]:
    """Score every configured pattern at all 12 roots and rank the matches.

    Args:
        chroma: Pooled 12-bin chroma.
        root:   Detected key root, used to order equal-strength candidates.
        config: Pattern catalogue, threshold and result size.

    Returns:
        At most top_n ScaleMatch entries with strength > min_strength,
        strongest first. Empty for an all-zero chroma.

    Raises:
        ValueError: If the chroma shape, root or a pattern name is invalid.
    """
    cfg = config or ScaleConfig()
    arr = np.asarray(chroma, dtype=np.float64)
    if arr.shape != (12,):
        raise ValueError(f"Chroma must have shape (12,), got {arr.shape}")
    if not 0 <= root <= 11:
        raise ValueError(f"root must be in 0..11, got {root}")
    unknown = [name for name in cfg.scale_names if name not in SCALES_BY_NAME]
    if unknown:
        raise ValueError(f"Unknown scale pattern(s): {', '.join(unknown)}")

    ranked: list[tuple[tuple[float, int, float, int], ScaleMatch]] = []
    order = 0
    for name in cfg.scale_names:
        pattern = SCALES_BY_NAME[name]
        for candidate_root in range(12):
            in_scale, out_scale, in_weighted = _scale_energies(arr, candidate_root, pattern)
            strength = _strength(in_scale, out_scale)
            if strength > cfg.min_strength:
                match = ScaleMatch(
                    root=candidate_root,
                    scale=pattern.name,
                    category=pattern.category,
                    strength=strength,
                )
                sort_key = (-strength, 0 if candidate_root == root else 1, -in_weighted, order)
                ranked.append((sort_key, match))
            order += 1

    ranked.sort(key=lambda item: item[0])
    return tuple(match for _, match in ranked[: cfg.top_n])
