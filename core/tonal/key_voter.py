"""
core/tonal/key_voter.py — Multi-profile weighted-consensus key detection.

Algorithm:
    1. For every profile family and every root 0..11, correlate the chroma
       rotated to that root (Pearson r) against the family's major and minor
       templates. The best (root, mode) per family becomes its KeyVote, with
       confidence = (r + 1) / 2.
    2. Each vote adds confidence × family weight to one of 24 bins
       (0..11 major, 12..23 minor). The arg-max bin is the key; its share of
       the total is the consensus confidence.
    3. Pairwise agreement between family winners (identical 1.0, same root
       0.7, relative major/minor 0.6, fifth 0.4, else 0) is scaled by
       sqrt(c1 · c2), averaged over the pair count and floored.
    4. confidence = clamp(consensus × agreement, min, max).

Ties between candidates resolve to the first one examined (root ascending,
major before minor), which keeps the result deterministic. A flat chroma
(e.g. from silence) skips voting and reports C major at min_confidence.
"""

from __future__ import annotations

import logging
from itertools import combinations
from typing import Sequence

import numpy as np

from core.config import KeyConfig
from core.tonal.profiles import KEY_PROFILE_FAMILIES, KeyProfileFamily
from core.tonal.types import KeyEstimate, KeyVote

logger = logging.getLogger(__name__)

_NUM_BINS = 24


def _as_chroma(chroma: Sequence[float] | np.ndarray) -> np.ndarray:
    arr = np.asarray(chroma, dtype=np.float64)
    if arr.shape != (12,):
        raise ValueError(f"Chroma must have shape (12,), got {arr.shape}")
    return arr


def pearson_correlation(x: Sequence[float] | np.ndarray, y: Sequence[float] | np.ndarray) -> float:
    """Pearson r of two equal-length vectors; 0.0 when either is constant.

    Raises:
        ValueError: If the lengths differ.
    """
    a = np.asarray(x, dtype=np.float64)
    b = np.asarray(y, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Vectors must have the same shape, got {a.shape} and {b.shape}")
    da = a - a.mean()
    db = b - b.mean()
    denom = float(np.sqrt(np.sum(da * da) * np.sum(db * db)))
    if denom < 1e-8:
        return 0.0
    return float(np.sum(da * db) / denom)


def vote_family(chroma: Sequence[float] | np.ndarray, family: KeyProfileFamily) -> KeyVote:
    """Best (root, mode) of one profile family for the given chroma."""
    arr = _as_chroma(chroma)
    best_r = -1.0
    best_root = 0
    best_major = True
    for root in range(12):
        rotated = np.roll(arr, -root)
        for is_major, template in ((True, family.major), (False, family.minor)):
            r = pearson_correlation(rotated, template)
            if r > best_r:
                best_r, best_root, best_major = r, root, is_major
    confidence = min(max((best_r + 1.0) / 2.0, 0.0), 1.0)
    return KeyVote(
        family=family.name,
        root=best_root,
        is_major=best_major,
        confidence=confidence,
        weight=family.weight,
    )


def weighted_consensus(votes: Sequence[KeyVote]) -> tuple[int, bool, float]:
    """Accumulate votes into 24 bins and return (root, is_major, share).

    share is the winning bin's fraction of the total weighted vote, or 0.0
    when the total is zero.
    """
    bins = np.zeros(_NUM_BINS, dtype=np.float64)
    for vote in votes:
        index = vote.root if vote.is_major else vote.root + 12
        bins[index] += vote.confidence * vote.weight
    winner = int(np.argmax(bins))
    total = float(np.sum(bins))
    share = float(bins[winner] / total) if total > 0.0 else 0.0
    return winner % 12, winner < 12, share


def _pair_agreement(a: KeyVote, b: KeyVote) -> float:
    interval = (b.root - a.root) % 12
    if a.is_major == b.is_major:
        if interval == 0:
            return 1.0
    else:
        if interval == 0:
            return 0.7
        # relative major/minor: the minor tonic sits 3 semitones below
        if interval in (3, 9):
            return 0.6
    if interval in (5, 7):
        return 0.4
    return 0.0


def profile_agreement(votes: Sequence[KeyVote], floor: float = 0.3) -> float:
    """Mean over all vote pairs of agreement · sqrt(c1 · c2), floored at `floor`.

    The confidence product scales each pair's agreement but the mean is
    taken over the pair count, so low-confidence votes pull the factor down
    even when they agree. A single vote (no pairs) counts as full agreement.
    """
    if len(votes) < 2:
        return 1.0
    total = 0.0
    pairs = 0
    for a, b in combinations(votes, 2):
        total += _pair_agreement(a, b) * float(np.sqrt(a.confidence * b.confidence))
        pairs += 1
    return max(total / pairs, floor)


def detect_key(
    chroma: Sequence[float] | np.ndarray,
    config: KeyConfig | None = None,
    families: Sequence[KeyProfileFamily] = KEY_PROFILE_FAMILIES,
) -> KeyEstimate:
    """Detect the key of a 12-bin chroma vector by weighted consensus.

    Args:
        chroma:   Pooled chroma, index 0 = C.
        config:   Confidence clamp and agreement floor; defaults to KeyConfig().
        families: Profile families to vote with.

    Returns:
        KeyEstimate with confidence inside [min_confidence, max_confidence].

    Raises:
        ValueError: If chroma does not have 12 bins.
    """
    cfg = config or KeyConfig()
    arr = _as_chroma(chroma)

    # A flat profile (silence included) correlates with nothing.
    if float(np.ptp(arr)) == 0.0:
        logger.debug("Key: flat chroma, no key information")
        return KeyEstimate(
            root=0,
            is_major=True,
            confidence=cfg.min_confidence,
            consensus_confidence=0.0,
            agreement=0.0,
        )

    votes = tuple(vote_family(arr, family) for family in families)
    root, is_major, consensus = weighted_consensus(votes)
    agreement = profile_agreement(votes, cfg.agreement_floor)
    confidence = min(max(consensus * agreement, cfg.min_confidence), cfg.max_confidence)

    estimate = KeyEstimate(
        root=root,
        is_major=is_major,
        confidence=confidence,
        consensus_confidence=consensus,
        agreement=agreement,
        votes=votes,
    )
    logger.debug(
        "Key: %s (consensus=%.3f, agreement=%.3f, confidence=%.3f)",
        estimate.label,
        consensus,
        agreement,
        confidence,
    )
    return estimate
