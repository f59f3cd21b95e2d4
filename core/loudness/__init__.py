"""
core/loudness — ITU-R BS.1770-4 loudness measurement engine.

K-weighting, block energy integration and two-stage statistical gating
over a fully buffered signal. Pure numpy/scipy; no I/O.

Public API:
    Types:      LoudnessResult, GatingResult
    Meter:      measure_loudness
    Stages:     block_energy, block_energies, channel_weights,
                energy_to_loudness, absolute_gate, gate_energies, max_loudness
"""

from core.loudness.filters import block_energies, block_energy, channel_weights
from core.loudness.gating import absolute_gate, energy_to_loudness, gate_energies, max_loudness
from core.loudness.meter import measure_loudness
from core.loudness.types import GatingResult, LoudnessResult

__all__ = [
    # Types
    "LoudnessResult",
    "GatingResult",
    # Meter
    "measure_loudness",
    # Stages
    "block_energy",
    "block_energies",
    "channel_weights",
    "energy_to_loudness",
    "absolute_gate",
    "gate_energies",
    "max_loudness",
]
