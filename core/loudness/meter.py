"""
core/loudness/meter.py — Momentary, short-term and integrated loudness.

Pipeline:
    1. Deinterleave the buffer into (C, N) planes.
    2. 400 ms / 100 ms-hop block energies → absolute gate → max = momentary;
       the same sequence goes through the relative gate → integrated.
    3. 3 s / 300 ms-hop block energies → absolute gate → max = short-term.

The block sizes and the K-weighting biquad are fixed for the reference
rate. Other rates are measured with the same constants (a warning is
logged); there is no rate-adaptive filter redesign.
"""

from __future__ import annotations

import logging

from core.audio.buffer import AudioBuffer
from core.config import LoudnessConfig
from core.loudness.filters import block_energies, channel_weights
from core.loudness.gating import absolute_gate, gate_energies, max_loudness
from core.loudness.types import LoudnessResult

logger = logging.getLogger(__name__)


def measure_loudness(buffer: AudioBuffer, config: LoudnessConfig | None = None) -> LoudnessResult:
    """Measure BS.1770-4 loudness of a fully buffered signal.

    Args:
        buffer: Interleaved input samples.
        config: Measurement parameters; defaults to LoudnessConfig().

    Returns:
        LoudnessResult. Measures with no surviving block are -inf.
    """
    cfg = config or LoudnessConfig()
    if buffer.sample_rate != cfg.reference_sample_rate:
        logger.warning(
            "Loudness constants are defined for %d Hz; buffer is %d Hz, "
            "block sizes and K-weighting are not rescaled",
            cfg.reference_sample_rate,
            buffer.sample_rate,
        )

    channels = buffer.deinterleave()
    weights = channel_weights(buffer.channels)

    momentary_energies = block_energies(channels, cfg.momentary_block, cfg.momentary_hop, weights)
    short_energies = block_energies(channels, cfg.short_term_block, cfg.short_term_hop, weights)

    gating = gate_energies(
        momentary_energies,
        absolute_threshold_lufs=cfg.absolute_gate_lufs,
        relative_gate_db=cfg.relative_gate_db,
        eps=cfg.energy_epsilon,
    )
    momentary_gated = absolute_gate(momentary_energies, cfg.absolute_gate_lufs, cfg.energy_epsilon)
    short_gated = absolute_gate(short_energies, cfg.absolute_gate_lufs, cfg.energy_epsilon)

    result = LoudnessResult(
        momentary=max_loudness(momentary_gated, cfg.energy_epsilon),
        short_term=max_loudness(short_gated, cfg.energy_epsilon),
        integrated=gating.integrated,
        preliminary=gating.preliminary,
        relative_threshold=gating.relative_threshold,
        momentary_block_count=gating.total_count,
        short_term_block_count=int(short_energies.size),
        gated_block_count=gating.absolute_count,
        relative_gated_block_count=gating.relative_count,
    )
    logger.debug(
        "Loudness: %d/%d momentary blocks gated, %d short-term blocks, integrated=%.2f LUFS",
        result.relative_gated_block_count,
        result.momentary_block_count,
        result.short_term_block_count,
        result.integrated,
    )
    return result
