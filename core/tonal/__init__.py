"""
core/tonal — HPCP chroma extraction, key voting and scale matching.

Pure numpy/scipy; no I/O.

Public API:
    Types:       ChromaProfile, KeyVote, KeyEstimate, ScaleMatch
    Tables:      NOTE_NAMES, KEY_PROFILE_FAMILIES, SCALE_PATTERNS, COMMON_SCALES
    Chroma:      extract_chroma, estimate_tuning, HpcpState, fold_peaks, pitch_class
    Key:         detect_key, pearson_correlation
    Scales:      match_scales, scale_strength
    Descriptors: tonal_clarity, harmonic_complexity
"""

from core.tonal.chroma import estimate_tuning, extract_chroma
from core.tonal.descriptors import harmonic_complexity, tonal_clarity
from core.tonal.hpcp import HpcpState, fold_peaks, pitch_class
from core.tonal.key_voter import detect_key, pearson_correlation
from core.tonal.profiles import COMMON_SCALES, KEY_PROFILE_FAMILIES, NOTE_NAMES, SCALE_PATTERNS
from core.tonal.scale_matcher import match_scales, scale_strength
from core.tonal.types import ChromaProfile, KeyEstimate, KeyVote, ScaleMatch

__all__ = [
    # Types
    "ChromaProfile",
    "KeyVote",
    "KeyEstimate",
    "ScaleMatch",
    # Tables
    "NOTE_NAMES",
    "KEY_PROFILE_FAMILIES",
    "SCALE_PATTERNS",
    "COMMON_SCALES",
    # Chroma
    "extract_chroma",
    "estimate_tuning",
    "HpcpState",
    "fold_peaks",
    "pitch_class",
    # Key
    "detect_key",
    "pearson_correlation",
    # Scales
    "match_scales",
    "scale_strength",
    # Descriptors
    "tonal_clarity",
    "harmonic_complexity",
]
