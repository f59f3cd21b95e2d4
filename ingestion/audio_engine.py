"""
ingestion/audio_engine.py — High-level orchestrator for file → analysis.

AudioAnalysisEngine wires the I/O boundary to the pure analysis core:

    audio file
        │
        ├─ load_audio()        [ingestion/audio_loader.py — I/O boundary]
        │       ↓
        └─ analyze_audio()     [core/analysis.py — pure DSP]
                ├─ measure_loudness()   BS.1770-4 momentary / short-term / integrated
                └─ extract_chroma() → detect_key() → match_scales()

This module is in `ingestion/` because it reads files and measures wall
time. The analysis logic itself is pure and lives in `core/`.

Usage:
    engine = AudioAnalysisEngine()
    report = engine.analyze_file("/path/to/master.wav")
    print(report.result.loudness.integrated, report.result.tonal.key.label)
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from core.analysis import AnalysisResult, analyze_audio
from core.audio.buffer import AudioBuffer
from core.config import DEFAULT_CONFIG, AnalysisConfig
from ingestion.audio_loader import load_audio

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# AnalysisReport — the output of one engine call
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisReport:
    """Output of AudioAnalysisEngine.analyze_file() / analyze_buffer().

    Attributes:
        result:             Loudness and tonal analysis.
        source:             File path, or "<buffer>" for in-memory input.
        processing_time_ms: Wall-clock time for load + analysis in milliseconds.
    """

    result: AnalysisResult
    source: str
    processing_time_ms: float = 0.0

    def as_dict(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "processing_time_ms": round(self.processing_time_ms, 1),
            **self.result.as_dict(),
        }


# ---------------------------------------------------------------------------
# AudioAnalysisEngine
# ---------------------------------------------------------------------------


class AudioAnalysisEngine:
    """Single integration point between audio files and the analysis core.

    librosa is imported lazily on the first file load (or injected for
    testing). Buffers passed to analyze_buffer() never touch librosa.

    Example:
        engine = AudioAnalysisEngine()
        report = engine.analyze_file("/path/to/loop.mp3", duration=30.0)
        print(report.result.tonal.key.label, report.processing_time_ms)
    """

    def __init__(self, config: AnalysisConfig = DEFAULT_CONFIG, librosa: Any = None) -> None:
        """Initialise the engine.

        Args:
            config:  Analysis parameters shared by every call.
            librosa: Injected librosa module. Pass a MagicMock in tests to avoid
                     loading the audio stack. None = import lazily on first use.
        """
        self._config = config
        self._librosa = librosa

    @property
    def config(self) -> AnalysisConfig:
        return self._config

    def _get_librosa(self) -> Any:
        """Return librosa, importing it lazily if not already injected."""
        if self._librosa is None:
            import librosa as _lib  # deferred to allow testing without audio backend

            self._librosa = _lib
        return self._librosa

    def analyze_buffer(self, buffer: AudioBuffer, *, source: str = "<buffer>") -> AnalysisReport:
        """Analyze an already decoded buffer."""
        t0 = time.perf_counter()
        result = analyze_audio(buffer, self._config)
        elapsed_ms = (time.perf_counter() - t0) * 1000.0
        logger.info(
            "Analyzed %s in %.1f ms: integrated=%.2f LUFS, key=%s",
            source,
            elapsed_ms,
            result.loudness.integrated,
            result.tonal.key.label,
        )
        return AnalysisReport(result=result, source=source, processing_time_ms=elapsed_ms)

    def analyze_file(self, path: str | Path, *, duration: float | None = None) -> AnalysisReport:
        """Load an audio file and run the full analysis.

        Args:
            path:     Path to an audio file (mp3, wav, flac, etc.)
            duration: Maximum seconds to load; None loads the whole file.

        Returns:
            AnalysisReport whose processing time includes decoding.

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the file extension is not a supported format.
            RuntimeError: If the audio cannot be decoded.
        """
        t0 = time.perf_counter()
        logger.info("Analyzing %s", path)
        buffer = load_audio(
            path,
            duration=duration,
            sample_rate=self._config.loudness.reference_sample_rate,
            librosa=self._get_librosa(),
        )
        report = self.analyze_buffer(buffer, source=str(path))
        return AnalysisReport(
            result=report.result,
            source=report.source,
            processing_time_ms=(time.perf_counter() - t0) * 1000.0,
        )
