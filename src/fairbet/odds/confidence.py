"""Confidence tiers and fair-probability strategy labels."""

from enum import Enum


class Confidence(str, Enum):
    """How much corroborating data backs a fair probability, ordered none < high."""

    NONE = "none"
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        return _RANKS[self]

    def at_least(self, other: "Confidence") -> bool:
        return self.rank >= other.rank


_RANKS = {
    Confidence.NONE: 0,
    Confidence.LOW: 1,
    Confidence.MEDIUM: 2,
    Confidence.HIGH: 3,
}


class FairOddsMethod(str, Enum):
    """Which strategy produced a fair probability."""

    SERVER_ANNOTATED = "server_annotated"
    PAIRED_VIG_REMOVAL = "paired_vig_removal"
    MEDIAN_CONSENSUS = "median_consensus"


def tier_for_count(count: int, high: int, medium: int) -> Confidence:
    """Map a count of contributing books onto high / medium / low."""
    if count >= high:
        return Confidence.HIGH
    if count >= medium:
        return Confidence.MEDIUM
    return Confidence.LOW
