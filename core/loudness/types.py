"""
core/loudness/types.py — Frozen result types for loudness measurement.

Loudness values are LUFS floats; an empty measurement (no block survived
the gates, or the buffer is shorter than one block) is reported as
float("-inf") rather than a sentinel like -70.0, so callers can tell
"very quiet" apart from "nothing to measure".
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class GatingResult:
    """Outcome of the two-stage BS.1770 gate over one energy sequence.

    Invariants:
        relative_threshold == preliminary - relative_gate_db when
            absolute_count > 0, else -inf
        relative_count <= absolute_count <= total_count
    """

    integrated: float
    """Mean of doubly-gated energies, in LUFS. -inf if none survive."""

    preliminary: float
    """Mean of absolute-gated energies, in LUFS. -inf if none survive."""

    relative_threshold: float
    """preliminary − relative gate offset. -inf if the absolute set is empty."""

    total_count: int
    absolute_count: int
    relative_count: int


@dataclass(frozen=True)
class LoudnessResult:
    """Momentary, short-term and integrated loudness of a buffer.

    Invariants:
        momentary, short_term, integrated are finite or -inf, never NaN
        gated_block_count <= momentary_block_count
    """

    momentary: float
    """Max loudness over absolute-gated 400 ms blocks."""

    short_term: float
    """Max loudness over absolute-gated 3 s blocks."""

    integrated: float
    """Two-stage gated integrated loudness."""

    preliminary: float
    """Loudness of the absolute-gated 400 ms set (before the relative gate)."""

    relative_threshold: float
    """Relative gate applied to the 400 ms blocks."""

    momentary_block_count: int
    short_term_block_count: int

    gated_block_count: int
    """400 ms blocks surviving the absolute gate."""

    relative_gated_block_count: int
    """400 ms blocks surviving both gates."""

    @property
    def is_silent(self) -> bool:
        """True when no block survived the absolute gate."""
        return self.gated_block_count == 0

    def as_dict(self) -> dict[str, float | int]:
        return {
            "momentary": self.momentary,
            "short_term": self.short_term,
            "integrated": self.integrated,
            "preliminary": self.preliminary,
            "relative_threshold": self.relative_threshold,
            "momentary_block_count": self.momentary_block_count,
            "short_term_block_count": self.short_term_block_count,
            "gated_block_count": self.gated_block_count,
            "relative_gated_block_count": self.relative_gated_block_count,
        }
