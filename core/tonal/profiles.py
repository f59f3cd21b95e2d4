"""
core/tonal/profiles.py — Key-profile templates and the scale-pattern table.

Exports:
    NOTE_NAMES              12 chromatic note names (sharps), index = pitch class
    KeyProfileFamily        (name, major template, minor template, vote weight)
    KEY_PROFILE_FAMILIES    the five families used by the key voter
    ScalePattern            (name, semitone intervals, display category)
    SCALE_PATTERNS          24-entry scale table
    SCALES_BY_NAME          name → ScalePattern lookup
    COMMON_SCALES           the 9 patterns matched by default

All templates start at C (index 0 = tonic) and are stored as tuples so the
tables cannot be mutated at runtime. Vote weights sum to 1.0.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.config import COMMON_SCALE_NAMES

NOTE_NAMES: tuple[str, ...] = (
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
)


# ---------------------------------------------------------------------------
# Key profile families
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class KeyProfileFamily:
    """A named major/minor template pair with its consensus vote weight."""

    name: str
    major: tuple[float, ...]
    minor: tuple[float, ...]
    weight: float


# EDM-A (electronic dance music analysis): modern produced material
_EDMA = KeyProfileFamily(
    name="EDM-A",
    major=(
        0.16519551,
        0.04749026,
        0.08293076,
        0.06687112,
        0.09994645,
        0.09274123,
        0.05294487,
        0.13159476,
        0.05218986,
        0.07443653,
        0.06940723,
        0.06424152,
    ),
    minor=(
        0.17235348,
        0.05336489,
        0.07703478,
        0.10989745,
        0.05091988,
        0.09632016,
        0.04787113,
        0.13418295,
        0.09070186,
        0.05765757,
        0.07276066,
        0.06693519,
    ),
    weight=0.35,
)

# Hybrid: mean of the sum-normalized Krumhansl-Schmuckler and Temperley templates
_HYBRID = KeyProfileFamily(
    name="Hybrid",
    major=(
        0.1409,
        0.0527,
        0.0871,
        0.0539,
        0.1108,
        0.1009,
        0.0561,
        0.1205,
        0.0546,
        0.0892,
        0.0469,
        0.0864,
    ),
    minor=(
        0.1360,
        0.0561,
        0.0850,
        0.1189,
        0.0552,
        0.0916,
        0.0545,
        0.1118,
        0.0902,
        0.0562,
        0.0570,
        0.0876,
    ),
    weight=0.25,
)

# Krumhansl-Schmuckler (1990) probe-tone ratings
_KRUMHANSL = KeyProfileFamily(
    name="Krumhansl-Schmuckler",
    major=(6.35, 2.23, 3.48, 2.33, 4.38, 4.09, 2.52, 5.19, 2.39, 3.66, 2.29, 2.88),
    minor=(6.33, 2.68, 3.52, 5.38, 2.60, 3.53, 2.54, 4.75, 3.98, 2.69, 3.34, 3.17),
    weight=0.20,
)

# Temperley: rock/pop corpus
_TEMPERLEY = KeyProfileFamily(
    name="Temperley",
    major=(5.0, 2.0, 3.5, 2.0, 4.5, 4.0, 2.0, 4.5, 2.0, 3.5, 1.5, 4.0),
    minor=(5.0, 2.0, 3.5, 4.5, 2.0, 4.0, 2.0, 4.5, 3.5, 2.0, 1.5, 4.0),
    weight=0.15,
)

# Sha'ath: electronic music
_SHAATH = KeyProfileFamily(
    name="Shaath",
    major=(6.6, 2.0, 3.5, 2.3, 4.6, 4.0, 2.5, 5.2, 2.4, 3.7, 2.3, 3.0),
    minor=(6.5, 2.8, 3.5, 5.4, 2.7, 3.5, 2.5, 5.2, 4.0, 2.7, 4.3, 3.2),
    weight=0.05,
)

KEY_PROFILE_FAMILIES: tuple[KeyProfileFamily, ...] = (
    _EDMA,
    _HYBRID,
    _KRUMHANSL,
    _TEMPERLEY,
    _SHAATH,
)


# ---------------------------------------------------------------------------
# Scale patterns (semitone intervals from root)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScalePattern:
    """A scale as a set of semitone intervals above its root."""

    name: str
    intervals: tuple[int, ...]
    category: str


SCALE_PATTERNS: tuple[ScalePattern, ...] = (
    ScalePattern("Major", (0, 2, 4, 5, 7, 9, 11), "Major Family"),
    ScalePattern("Natural Minor", (0, 2, 3, 5, 7, 8, 10), "Minor Family"),
    ScalePattern("Harmonic Minor", (0, 2, 3, 5, 7, 8, 11), "Minor Family"),
    ScalePattern("Melodic Minor", (0, 2, 3, 5, 7, 9, 11), "Minor Family"),
    ScalePattern("Dorian", (0, 2, 3, 5, 7, 9, 10), "Minor Family"),
    ScalePattern("Phrygian", (0, 1, 3, 5, 7, 8, 10), "Minor Family"),
    ScalePattern("Lydian", (0, 2, 4, 6, 7, 9, 11), "Major Family"),
    ScalePattern("Mixolydian", (0, 2, 4, 5, 7, 9, 10), "Major Family"),
    ScalePattern("Locrian", (0, 1, 3, 5, 6, 8, 10), "Diminished"),
    ScalePattern("Whole Tone", (0, 2, 4, 6, 8, 10), "Other"),
    ScalePattern("Pentatonic Major", (0, 2, 4, 7, 9), "Pentatonic"),
    ScalePattern("Pentatonic Minor", (0, 3, 5, 7, 10), "Pentatonic"),
    ScalePattern("Blues", (0, 3, 5, 6, 7, 10), "Blues"),
    ScalePattern("Major Blues", (0, 2, 3, 4, 7, 9), "Blues"),
    ScalePattern("Diminished Half-Whole", (0, 1, 3, 4, 6, 7, 9, 10), "Diminished"),
    ScalePattern("Diminished Whole-Half", (0, 2, 3, 5, 6, 8, 9, 11), "Diminished"),
    ScalePattern("Augmented", (0, 3, 4, 7, 8, 11), "Other"),
    ScalePattern("Hungarian Minor", (0, 2, 3, 6, 7, 8, 11), "World/Exotic"),
    ScalePattern("Spanish Phrygian", (0, 1, 4, 5, 7, 8, 10), "World/Exotic"),
    ScalePattern("Arabic", (0, 1, 4, 5, 7, 8, 11), "World/Exotic"),
    ScalePattern("Persian", (0, 1, 4, 5, 6, 8, 11), "World/Exotic"),
    ScalePattern("Hirajoshi", (0, 2, 3, 7, 8), "World/Exotic"),
    ScalePattern("Lydian Dominant", (0, 2, 4, 6, 7, 9, 10), "Major Family"),
    ScalePattern("Altered", (0, 1, 3, 4, 6, 8, 10), "Other"),
)

SCALES_BY_NAME: dict[str, ScalePattern] = {p.name: p for p in SCALE_PATTERNS}

# Scale-degree importance (by interval above the root) for scale matching.
# Root > third / fifth > second / sixth > fourth / minor seventh > others.
DEGREE_WEIGHTS: dict[int, float] = {
    0: 3.0,
    3: 2.0,
    4: 2.0,
    7: 2.0,
    2: 1.5,
    9: 1.5,
    5: 1.3,
    10: 1.3,
}
DEFAULT_DEGREE_WEIGHT: float = 1.0

# The 9 patterns the matcher tests by default.
COMMON_SCALES: tuple[ScalePattern, ...] = tuple(SCALES_BY_NAME[n] for n in COMMON_SCALE_NAMES)
