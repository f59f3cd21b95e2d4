"""
core/tonal/types.py — Frozen data types for chroma, key and scale results.

All types are frozen dataclasses — immutable value objects that can be
safely passed between layers and cached.

Design principles:
    - No I/O, no state, no side effects.
    - Vectors are stored as tuples (hashable, immutable).
    - Labels are computed properties to avoid duplicate storage.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.tonal.profiles import NOTE_NAMES


@dataclass(frozen=True)
class ChromaProfile:
    """Pooled 12-bin harmonic pitch class profile for a whole buffer.

    Invariants:
        len(vector) == 12, all values >= 0
        ready → abs(sum(vector) - 1.0) < 1e-5
        not ready → all values == 0.0
    """

    vector: tuple[float, ...]
    """Pitch-class energy, index 0 = C ... 11 = B."""

    ready: bool
    """True once at least min_frames HPCP frames were pooled."""

    frames_analyzed: int
    """HPCP frames pushed into the pooling buffer."""

    tuning_offset_cents: float
    """Estimated concert-pitch deviation from A4 = 440 Hz."""

    @property
    def peak_pitch_class(self) -> int:
        """Index of the strongest bin (0 for an all-zero profile)."""
        return max(range(12), key=lambda i: self.vector[i])


@dataclass(frozen=True)
class KeyVote:
    """Best (root, mode) of one profile family.

    Invariants:
        0 <= root <= 11
        0.0 <= confidence <= 1.0, computed as (pearson_r + 1) / 2
    """

    family: str
    root: int
    is_major: bool
    confidence: float
    weight: float


@dataclass(frozen=True)
class KeyEstimate:
    """Weighted-consensus key across all profile families.

    Invariants:
        0 <= root <= 11
        min_confidence <= confidence <= max_confidence (default [0.05, 0.95])
    """

    root: int
    is_major: bool
    confidence: float
    """clamp(consensus_confidence × agreement, min, max)."""

    consensus_confidence: float
    """Winning bin's share of the total weighted vote."""

    agreement: float
    """Inter-family agreement factor (floored)."""

    votes: tuple[KeyVote, ...] = ()

    @property
    def root_name(self) -> str:
        return NOTE_NAMES[self.root]

    @property
    def mode(self) -> str:
        """'major' or 'minor'."""
        return "major" if self.is_major else "minor"

    @property
    def label(self) -> str:
        """Human-readable key label, e.g. 'A Minor', 'C# Major'."""
        return f"{self.root_name} {'Major' if self.is_major else 'Minor'}"


@dataclass(frozen=True)
class ScaleMatch:
    """One (root, scale pattern) candidate and its fit strength.

    Invariants:
        0 <= root <= 11
        0.0 < strength <= 1.0
    """

    root: int
    scale: str
    category: str
    strength: float

    @property
    def label(self) -> str:
        """e.g. 'C Major', 'A Pentatonic Minor'."""
        return f"{NOTE_NAMES[self.root]} {self.scale}"
