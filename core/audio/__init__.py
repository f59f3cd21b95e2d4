"""
core/audio — Input buffer and shared spectral utilities.

No file I/O — decoding lives in ingestion/audio_loader.py. Everything here
is pure numpy/scipy computation used by both the loudness and the tonal
pipelines.

Public API:
    Types:      AudioBuffer
    Helpers:    see core.audio.dsp
"""

from core.audio.buffer import AudioBuffer

__all__ = [
    "AudioBuffer",
]
