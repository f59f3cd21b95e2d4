"""
core/loudness/constants.py — Fixed ITU-R BS.1770-4 tables.

The K-weighting biquad below is the BS.1770 pre-filter (high shelf,
+4 dB above ~1.7 kHz) applied as a single second-order section. The
coefficients are fixed; they are not redesigned for other sample rates.
"""

from __future__ import annotations

# Loudness of a block: L = LOUDNESS_OFFSET + 10·log10(mean square)
LOUDNESS_OFFSET: float = -0.691

ABSOLUTE_GATE_LUFS: float = -70.0
RELATIVE_GATE_DB: float = 10.0

# K-weighting filter: b0, b1, b2 / a0 (=1), a1, a2
K_WEIGHTING_B: tuple[float, float, float] = (1.5351249, -2.6916962, 1.1983928)
K_WEIGHTING_A: tuple[float, float, float] = (1.0, -1.6906593, 0.73248076)

# Per-channel gains G_i: L, R, C, Ls, Rs. Channels past the table use 1.0.
CHANNEL_WEIGHTS: tuple[float, ...] = (1.0, 1.0, 1.0, 1.41, 1.41)
