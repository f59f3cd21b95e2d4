"""
core/analysis.py — One-call loudness + key/scale analysis of an AudioBuffer.

    buffer ─┬─ measure_loudness()                      → LoudnessResult
            └─ to_mono() → extract_chroma() ─┬─ detect_key()      → KeyEstimate
                                             ├─ match_scales()    → ScaleMatch...
                                             └─ descriptors       → clarity, complexity

The two pipelines share no mutable state; each call builds its own working
arrays, so concurrent analyses of different buffers are safe.

Degenerate input never raises: silence or too-short buffers report -inf
loudness and an all-zero, not-ready chroma. A not-ready chroma still goes
through the key voter (its confidence is clamped to the lower bound) but
yields no scale matches.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from core.audio.buffer import AudioBuffer
from core.config import DEFAULT_CONFIG, AnalysisConfig
from core.loudness import LoudnessResult, measure_loudness
from core.tonal import (
    ChromaProfile,
    KeyEstimate,
    ScaleMatch,
    detect_key,
    extract_chroma,
    harmonic_complexity,
    match_scales,
    tonal_clarity,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TonalResult:
    """Key, chroma and scale candidates of one buffer."""

    key: KeyEstimate
    chroma: ChromaProfile
    scales: tuple[ScaleMatch, ...]
    tonal_clarity: float
    harmonic_complexity: float

    def as_dict(self) -> dict[str, Any]:
        return {
            "key": self.key.label,
            "root": self.key.root,
            "is_major": self.key.is_major,
            "confidence": round(self.key.confidence, 4),
            "chroma": [round(v, 6) for v in self.chroma.vector],
            "chroma_ready": self.chroma.ready,
            "tuning_offset_cents": self.chroma.tuning_offset_cents,
            "scales": [
                {"scale": m.label, "category": m.category, "strength": round(m.strength, 4)}
                for m in self.scales
            ],
            "tonal_clarity": round(self.tonal_clarity, 4),
            "harmonic_complexity": round(self.harmonic_complexity, 4),
        }


@dataclass(frozen=True)
class AnalysisResult:
    """Loudness and tonal results of one buffer."""

    loudness: LoudnessResult
    tonal: TonalResult

    def as_dict(self) -> dict[str, Any]:
        """JSON-friendly record. Empty loudness measures stay float('-inf')."""
        return {"loudness": self.loudness.as_dict(), "tonal": self.tonal.as_dict()}


def analyze_loudness(buffer: AudioBuffer, config: AnalysisConfig = DEFAULT_CONFIG) -> LoudnessResult:
    return measure_loudness(buffer, config.loudness)


def analyze_tonality(buffer: AudioBuffer, config: AnalysisConfig = DEFAULT_CONFIG) -> TonalResult:
    """Chroma → key → scales for the mono mix of the buffer."""
    chroma = extract_chroma(buffer.to_mono(), buffer.sample_rate, config.chroma)
    key = detect_key(chroma.vector, config.key)
    scales = match_scales(chroma.vector, key.root, config.scale) if chroma.ready else ()
    return TonalResult(
        key=key,
        chroma=chroma,
        scales=scales,
        tonal_clarity=tonal_clarity(chroma.vector),
        harmonic_complexity=harmonic_complexity(chroma.vector),
    )


def analyze_audio(buffer: AudioBuffer, config: AnalysisConfig = DEFAULT_CONFIG) -> AnalysisResult:
    """Run both pipelines over a fully buffered signal.

    Args:
        buffer: Interleaved input.
        config: Pipeline parameters; defaults to DEFAULT_CONFIG.

    Returns:
        AnalysisResult. Deterministic: the same buffer always yields the
        same result.
    """
    result = AnalysisResult(
        loudness=analyze_loudness(buffer, config),
        tonal=analyze_tonality(buffer, config),
    )
    logger.debug(
        "Analysis: %d ch, %.2f s, integrated=%.2f LUFS, key=%s (%.2f)",
        buffer.channels,
        buffer.duration_sec,
        result.loudness.integrated,
        result.tonal.key.label,
        result.tonal.key.confidence,
    )
    return result
