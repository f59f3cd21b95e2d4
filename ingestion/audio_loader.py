"""
ingestion/audio_loader.py — File I/O boundary for audio loading.

This is the ONLY module that reads audio files from disk. Everything
downstream (core/loudness, core/tonal, core/analysis.py) takes an
AudioBuffer — never file paths.

Files are decoded with librosa at the reference rate (44.1 kHz) with the
channel layout preserved: the loudness meter weights channels individually,
so mixing down here would change its result.

Usage:
    from ingestion.audio_loader import load_audio
    buffer = load_audio("/path/to/track.flac", duration=60.0)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from core.audio.buffer import AudioBuffer
from core.config import REFERENCE_SAMPLE_RATE

logger = logging.getLogger(__name__)

# Supported audio file extensions (must be loadable by librosa / soundfile)
AUDIO_EXTENSIONS: frozenset[str] = frozenset(
    {".mp3", ".wav", ".flac", ".aiff", ".aif", ".ogg", ".m4a", ".opus"}
)


def load_audio(
    path: str | Path,
    *,
    duration: float | None = None,
    sample_rate: int = REFERENCE_SAMPLE_RATE,
    librosa: Any = None,
) -> AudioBuffer:
    """Load an audio file into an interleaved AudioBuffer.

    Args:
        path: Absolute or relative path to an audio file.
              Supported formats: mp3, wav, flac, aiff, ogg, m4a, opus.
        duration: Maximum seconds to load. None loads the whole file.
        sample_rate: Target rate in Hz. The loudness constants are defined
                     for 44.1 kHz, so only change this deliberately.
        librosa: Injected librosa module (tests). None = import lazily.

    Returns:
        AudioBuffer with the file's channels interleaved.

    Raises:
        FileNotFoundError: File does not exist at the given path.
        ValueError: File extension is not a supported audio format, or
                    duration is not positive.
        RuntimeError: librosa/soundfile could not decode the file
                      (corrupted, truncated, DRM-protected, etc.).
    """
    file_path = Path(path)

    if not file_path.exists():
        raise FileNotFoundError(f"Audio file not found: {file_path}")

    if file_path.suffix.lower() not in AUDIO_EXTENSIONS:
        raise ValueError(
            f"Unsupported audio format {file_path.suffix!r}. "
            f"Supported: {sorted(AUDIO_EXTENSIONS)}"
        )

    if duration is not None and duration <= 0:
        raise ValueError(f"duration must be positive, got {duration}")

    if librosa is None:
        import librosa  # deferred to allow testing without audio backend

    try:
        y, loaded_sr = librosa.load(
            file_path,
            sr=sample_rate,
            mono=False,
            duration=duration,
            offset=0.0,
        )
    except Exception as exc:
        raise RuntimeError(f"Failed to decode audio file {file_path.name!r}: {exc}") from exc

    buffer = AudioBuffer.from_channels(y, int(loaded_sr))
    logger.debug(
        "Loaded %s: %d ch, %d Hz, %.2f s",
        file_path.name,
        buffer.channels,
        buffer.sample_rate,
        buffer.duration_sec,
    )
    return buffer
