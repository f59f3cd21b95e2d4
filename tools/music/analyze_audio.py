"""
analyze_audio tool — BS.1770-4 loudness plus key and scale detection.

Measures:
  - Integrated LUFS (two-stage gated) with preliminary loudness and the
    relative gate threshold
  - Short-term max LUFS (3 s window) and momentary max LUFS (400 ms window)
  - Musical key (root + mode) with weighted-consensus confidence
  - 12-bin pooled HPCP chroma and estimated tuning offset
  - Ranked scale candidates, tonal clarity and harmonic complexity

Empty loudness measures (silence, input shorter than one block) are
reported as None so the result stays valid JSON.

Requires the audio stack (librosa + scipy) to be installed.
"""

import math
from typing import Any

from tools.base import AudioTool, ToolParameter, ToolResult


def _lufs(value: float) -> float | None:
    return round(value, 2) if math.isfinite(value) else None


class AnalyzeAudio(AudioTool):
    """Run loudness and key/scale analysis on an audio file.

    Example:
        tool = AnalyzeAudio()
        result = tool(file_path="/path/to/master.wav", duration=60.0)
        result.data["tonal"]["key"]   # "A Minor"
    """

    def __init__(self, engine: Any = None) -> None:
        """Args:
        engine: Injected AudioAnalysisEngine (tests). None = build lazily on first use.
        """
        self._engine = engine

    @property
    def name(self) -> str:
        return "analyze_audio"

    @property
    def description(self) -> str:
        return (
            "Measure ITU-R BS.1770-4 loudness (integrated, short-term max and "
            "momentary max LUFS) and detect the musical key, chroma profile and "
            "candidate scales of an audio file."
        )

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(
                name="file_path",
                type=str,
                description=(
                    "Path to an audio file. Supported: .mp3 .wav .flac .aiff .ogg .m4a .opus"
                ),
                required=True,
            ),
            ToolParameter(
                name="duration",
                type=float,
                description=(
                    "Max seconds of audio to load. Omit to analyze the whole file "
                    "(required for an accurate integrated LUFS)."
                ),
                required=False,
                default=None,
            ),
        ]

    def _get_engine(self) -> Any:
        if self._engine is None:
            from ingestion.audio_engine import AudioAnalysisEngine

            self._engine = AudioAnalysisEngine()
        return self._engine

    def execute(self, **kwargs: Any) -> ToolResult:
        """Run the analysis pipeline.

        Returns:
            ToolResult.data with keys:
                loudness (dict): integrated, short_term_max, momentary_max,
                    preliminary, relative_threshold (LUFS or None),
                    gated_blocks, total_blocks
                tonal (dict): key, root, is_major, confidence, chroma,
                    chroma_ready, tuning_offset_cents, scales,
                    tonal_clarity, harmonic_complexity
        """
        file_path: str = (kwargs.get("file_path") or "").strip()
        duration = kwargs.get("duration")

        if not file_path:
            return ToolResult(success=False, error="file_path cannot be empty")
        if duration is not None and duration <= 0:
            return ToolResult(success=False, error=f"duration must be positive, got {duration}")

        try:
            report = self._get_engine().analyze_file(
                file_path, duration=float(duration) if duration is not None else None
            )
        except FileNotFoundError as exc:
            return ToolResult(success=False, error=f"File not found: {exc}")
        except ValueError as exc:
            return ToolResult(success=False, error=str(exc))
        except RuntimeError as exc:
            return ToolResult(success=False, error=f"Analysis failed: {exc}")

        loudness = report.result.loudness
        loudness_data: dict[str, Any] = {
            "integrated": _lufs(loudness.integrated),
            "short_term_max": _lufs(loudness.short_term),
            "momentary_max": _lufs(loudness.momentary),
            "preliminary": _lufs(loudness.preliminary),
            "relative_threshold": _lufs(loudness.relative_threshold),
            "gated_blocks": loudness.gated_block_count,
            "total_blocks": loudness.momentary_block_count,
        }

        return ToolResult(
            success=True,
            data={
                "loudness": loudness_data,
                "tonal": report.result.tonal.as_dict(),
            },
            metadata={
                "source": report.source,
                "processing_time_ms": round(report.processing_time_ms, 1),
            },
        )
