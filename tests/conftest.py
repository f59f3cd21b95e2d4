"""
Shared fixtures for the test suite.

Centralizes the synthetic buffers several test files need so they don't
rebuild the same signals. All signals are generated at the 44.1 kHz
reference rate; no audio files or audio backend are required.
"""

from unittest.mock import MagicMock

import numpy as np
import pytest

from core.audio.buffer import AudioBuffer

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

SR = 44100
"""Reference sample rate for every synthetic buffer."""


def _sine(freq_hz: float, seconds: float, amplitude: float = 0.5) -> np.ndarray:
    n = int(SR * seconds)
    t = np.arange(n) / SR
    return amplitude * np.sin(2.0 * np.pi * freq_hz * t)


# ---------------------------------------------------------------------------
# Buffers
# ---------------------------------------------------------------------------


@pytest.fixture()
def silent_buffer() -> AudioBuffer:
    """5 s of stereo digital silence."""
    return AudioBuffer.from_channels(np.zeros((2, SR * 5)), SR)


@pytest.fixture()
def a440_buffer() -> AudioBuffer:
    """5 s mono A4 (440 Hz) sine at half scale."""
    return AudioBuffer.from_channels(_sine(440.0, 5.0), SR)


# ---------------------------------------------------------------------------
# Mock librosa factory
# ---------------------------------------------------------------------------


@pytest.fixture()
def mock_librosa_factory():
    """Return a builder for mock librosa modules whose load() yields `y`.

    Usage:
        lib = mock_librosa_factory(np.zeros((2, 44100)))
        lib.load.assert_called_once()
    """

    def _build(y: np.ndarray, sr: int = SR) -> MagicMock:
        mock = MagicMock()
        mock.load.return_value = (np.asarray(y, dtype=np.float32), sr)
        return mock

    return _build
