from __future__ import annotations
from typing import Dict, Sequence

"""
Confidence tiers and summary statistics for a batch of match results.

Everything here is a pure function of its inputs: tiers are derived from a
score and whether a student was assigned, and :func:`compute_stats` is
recomputed from the result list on every call.
"""

from .config import (
    HIGH_CONFIDENCE,
    MEDIUM_CONFIDENCE,
    TIER_HIGH,
    TIER_LOW,
    TIER_MEDIUM,
    TIER_UNMATCHED,
    MatchResult,
    MatchStats,
)

_BADGES: Dict[str, Dict[str, str]] = {
    TIER_HIGH: {"text": "High", "color": "green"},
    TIER_MEDIUM: {"text": "Medium", "color": "yellow"},
    TIER_LOW: {"text": "Low", "color": "red"},
}


def score_tier(confidence: float) -> str:
    if confidence >= HIGH_CONFIDENCE:
        return TIER_HIGH
    if confidence >= MEDIUM_CONFIDENCE:
        return TIER_MEDIUM
    return TIER_LOW


def confidence_tier(confidence: float, matched: bool = True) -> str:
    """high / medium / low for assigned files, ``unmatched`` otherwise."""
    if not matched:
        return TIER_UNMATCHED
    return score_tier(confidence)


def confidence_badge(confidence: float) -> Dict[str, str]:
    """UI badge for a raw score: {"text": "High", "color": "green"} etc."""
    return dict(_BADGES[score_tier(confidence)])


def compute_stats(matches: Sequence[MatchResult]) -> MatchStats:
    """
    total / matched / unmatched plus high and medium counts over *assigned*
    files only; an unmatched file's closest-guess score never counts as a
    confident match.
    """
    matched = [m for m in matches if m.matched_student is not None]
    tiers = [score_tier(m.confidence) for m in matched]
    return MatchStats(
        total=len(matches),
        matched=len(matched),
        high_confidence=sum(1 for t in tiers if t == TIER_HIGH),
        medium_confidence=sum(1 for t in tiers if t == TIER_MEDIUM),
        unmatched=len(matches) - len(matched),
    )
