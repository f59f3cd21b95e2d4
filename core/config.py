"""
Configuration dataclasses for the loudness and tonal analysis pipelines.

These immutable config objects decouple tuning parameters from function
signatures, so a pipeline variant is one reusable object rather than a
dozen keyword arguments threaded through every stage.

All sample counts are expressed at the reference rate (44.1 kHz). The
K-weighting coefficients and block sizes are NOT rescaled for other rates.
"""

from dataclasses import dataclass, field

REFERENCE_SAMPLE_RATE: int = 44100

# Names in the 24-entry scale table (core/tonal/profiles.py) tested by default.
COMMON_SCALE_NAMES: tuple[str, ...] = (
    "Major",
    "Natural Minor",
    "Harmonic Minor",
    "Dorian",
    "Lydian",
    "Mixolydian",
    "Pentatonic Major",
    "Pentatonic Minor",
    "Blues",
)


@dataclass(frozen=True)
class LoudnessConfig:
    """
    ITU-R BS.1770-4 measurement parameters.

    Attributes:
        reference_sample_rate: Rate the block sizes and filter are defined for.
        momentary_block: 400 ms block length in samples.
        momentary_hop: 100 ms hop in samples.
        short_term_block: 3 s block length in samples.
        short_term_hop: 300 ms hop in samples.
        absolute_gate_lufs: Blocks quieter than this are discarded (-70 LUFS).
        relative_gate_db: Offset below the preliminary loudness for the
            relative gate (10 dB).
        energy_epsilon: Added to every energy before the logarithm.
    """

    reference_sample_rate: int = REFERENCE_SAMPLE_RATE
    momentary_block: int = 17640
    momentary_hop: int = 4410
    short_term_block: int = 132300
    short_term_hop: int = 13230
    absolute_gate_lufs: float = -70.0
    relative_gate_db: float = 10.0
    energy_epsilon: float = 1e-10

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.reference_sample_rate <= 0:
            raise ValueError(
                f"reference_sample_rate must be positive, got {self.reference_sample_rate}"
            )
        for name in ("momentary", "short_term"):
            block = getattr(self, f"{name}_block")
            hop = getattr(self, f"{name}_hop")
            if block <= 0 or hop <= 0:
                raise ValueError(f"{name} block and hop must be positive, got {block}/{hop}")
            if hop > block:
                raise ValueError(f"{name}_hop ({hop}) must not exceed {name}_block ({block})")
        if self.relative_gate_db < 0:
            raise ValueError(f"relative_gate_db must be non-negative, got {self.relative_gate_db}")
        if self.energy_epsilon <= 0:
            raise ValueError(f"energy_epsilon must be positive, got {self.energy_epsilon}")


@dataclass(frozen=True)
class ChromaConfig:
    """
    HPCP extraction parameters.

    Attributes:
        frame_size: Analysis frame length in samples.
        hop_size: Frame advance (50% of frame_size by default).
        max_frames: Upper bound on frames examined per call.
        max_samples: Upper bound on mono samples read from the buffer.
        min_frame_energy: Frames whose windowed mean-square energy is below
            this are skipped.
        whitening_exponent: Exponent applied to the local spectral average.
        whitening_half_width: Neighbourhood half-width (bins) for whitening.
        peak_threshold_db: Minimum whitened peak level.
        peak_neighborhood: A peak must exceed this many bins on each side.
        max_peaks: Strongest peaks kept per frame.
        min_frequency / max_frequency: Musically relevant band (C2..C7).
        num_harmonics: Subharmonics f/2 .. f/num_harmonics folded per peak.
        history_size: Ring-buffer capacity for temporal pooling.
        min_frames: Frames required before the pooled profile is valid.
        median_weight: Weight of the per-bin median (mean gets the rest).
        tuning_range_cents / tuning_step_cents: Concert-pitch offset search grid.
        tuning_partials: Partials tested for harmonic alignment.
        tuning_frames: Coarse frames sampled for tuning estimation.
        tuning_max_samples: Prefix of the signal used for tuning estimation.
        tuning_peaks: Strongest peaks per coarse frame used for tuning.
    """

    frame_size: int = 4096
    hop_size: int = 2048
    max_frames: int = 100
    max_samples: int = REFERENCE_SAMPLE_RATE * 30
    min_frame_energy: float = 1e-9
    whitening_exponent: float = 0.33
    whitening_half_width: int = 10
    peak_threshold_db: float = -60.0
    peak_neighborhood: int = 2
    max_peaks: int = 50
    min_frequency: float = 65.0
    max_frequency: float = 2093.0
    num_harmonics: int = 4
    history_size: int = 50
    min_frames: int = 10
    median_weight: float = 0.7
    tuning_range_cents: float = 50.0
    tuning_step_cents: float = 10.0
    tuning_partials: int = 8
    tuning_frames: int = 8
    tuning_max_samples: int = REFERENCE_SAMPLE_RATE * 5
    tuning_peaks: int = 20

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if self.frame_size < 8:
            raise ValueError(f"frame_size must be at least 8, got {self.frame_size}")
        if not 0 < self.hop_size <= self.frame_size:
            raise ValueError(
                f"hop_size must be in (0, frame_size], got {self.hop_size} "
                f"for frame_size {self.frame_size}"
            )
        if self.max_frames <= 0 or self.max_samples <= 0:
            raise ValueError("max_frames and max_samples must be positive")
        if not 0.0 < self.min_frequency < self.max_frequency:
            raise ValueError(
                f"Invalid band: min_frequency={self.min_frequency}, "
                f"max_frequency={self.max_frequency}"
            )
        if self.num_harmonics < 1:
            raise ValueError(f"num_harmonics must be >= 1, got {self.num_harmonics}")
        if not 0 < self.min_frames <= self.history_size:
            raise ValueError(
                f"min_frames ({self.min_frames}) must be in (0, history_size={self.history_size}]"
            )
        if not 0.0 <= self.median_weight <= 1.0:
            raise ValueError(f"median_weight must be in [0, 1], got {self.median_weight}")
        if self.tuning_step_cents <= 0 or self.tuning_range_cents < 0:
            raise ValueError("tuning_step_cents must be positive and tuning_range_cents >= 0")
        if self.max_peaks <= 0 or self.peak_neighborhood < 1:
            raise ValueError("max_peaks must be positive and peak_neighborhood >= 1")


@dataclass(frozen=True)
class KeyConfig:
    """
    Weighted-consensus key voting parameters.

    Attributes:
        min_confidence / max_confidence: Final confidence clamp.
        agreement_floor: Lower bound on the inter-family agreement factor.
    """

    min_confidence: float = 0.05
    max_confidence: float = 0.95
    agreement_floor: float = 0.3

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not 0.0 <= self.min_confidence <= self.max_confidence <= 1.0:
            raise ValueError(
                f"Confidence bounds must satisfy 0 <= min <= max <= 1, "
                f"got [{self.min_confidence}, {self.max_confidence}]"
            )
        if not 0.0 <= self.agreement_floor <= 1.0:
            raise ValueError(f"agreement_floor must be in [0, 1], got {self.agreement_floor}")


@dataclass(frozen=True)
class ScaleConfig:
    """
    Scale-pattern matching parameters.

    Attributes:
        scale_names: Patterns (by name) tested at all 12 roots.
        min_strength: Matches at or below this are dropped.
        top_n: Maximum matches returned.
    """

    scale_names: tuple[str, ...] = COMMON_SCALE_NAMES
    min_strength: float = 0.10
    top_n: int = 8

    def __post_init__(self) -> None:
        """Validate configuration parameters."""
        if not self.scale_names:
            raise ValueError("scale_names must not be empty")
        if self.top_n <= 0:
            raise ValueError(f"top_n must be positive, got {self.top_n}")
        if not 0.0 <= self.min_strength < 1.0:
            raise ValueError(f"min_strength must be in [0, 1), got {self.min_strength}")


@dataclass(frozen=True)
class AnalysisConfig:
    """Bundle of per-pipeline configs passed to core.analysis.analyze_audio()."""

    loudness: LoudnessConfig = field(default_factory=LoudnessConfig)
    chroma: ChromaConfig = field(default_factory=ChromaConfig)
    key: KeyConfig = field(default_factory=KeyConfig)
    scale: ScaleConfig = field(default_factory=ScaleConfig)


# Pre-defined configurations

DEFAULT_CONFIG = AnalysisConfig()
"""Reference configuration: 44.1 kHz constants, 9 common scale patterns."""

FULL_SCALE_CATALOGUE_CONFIG = AnalysisConfig(
    scale=ScaleConfig(
        scale_names=(
            *COMMON_SCALE_NAMES,
            "Melodic Minor",
            "Phrygian",
            "Locrian",
            "Whole Tone",
            "Major Blues",
            "Diminished Half-Whole",
            "Diminished Whole-Half",
            "Augmented",
            "Hungarian Minor",
            "Spanish Phrygian",
            "Arabic",
            "Persian",
            "Hirajoshi",
            "Lydian Dominant",
            "Altered",
        ),
    ),
)
"""Tests every pattern of the 24-entry scale table."""
