"""Proportional (multiplicative) devig and median aggregation.

Proportional devig only: each side's implied probability is divided by the
book's total implied probability. No Shin, power or additive methods.
"""

import numpy as np

from fairbet.odds.conversion import american_to_prob, is_valid_american_odds


def total_implied(prices: list[int]) -> float:
    """Sum of implied probabilities across all sides of one book's market."""
    return sum(american_to_prob(price) for price in prices)


def market_vig(prices: list[int]) -> float:
    """Bookmaker margin embedded in a set of prices (total implied - 1.0)."""
    return total_implied(prices) - 1.0


def proportional_devig(prices: list[int]) -> list[float]:
    """Convert one book's American prices to fair probabilities.

    Args:
        prices: American odds for every side of a market from a single book

    Returns:
        List of fair probabilities, in input order, summing to 1.0

    Raises:
        ValueError: If prices list is empty or contains invalid values

    Example:
        >>> proportional_devig([-110, -110])
        [0.5, 0.5]
        >>> proportional_devig([-150, 130])
        [0.5798, 0.4202]  # approximate
    """
    if not prices:
        raise ValueError("prices list cannot be empty")

    if not all(is_valid_american_odds(p) for p in prices):
        raise ValueError(f"All prices must be valid American odds, got: {prices}")

    implied = [american_to_prob(price) for price in prices]
    total = sum(implied)

    return [imp / total for imp in implied]


def median(values: list[float]) -> float:
    """Median of a list; 0.0 for an empty list.

    The 0.0 sentinel is documented behaviour, so callers that care must
    check for empty input themselves.
    """
    if len(values) == 0:
        return 0.0
    return float(np.median(np.asarray(values, dtype=float)))


def normalize(probs: dict, tolerance: float = 0.001) -> dict:
    """Rescale probabilities so they sum to 1.0 when they drift past ``tolerance``.

    Keys are preserved; a zero or empty total is returned unchanged.
    """
    total = sum(probs.values())
    if total > 0 and abs(total - 1.0) > tolerance:
        return {key: prob / total for key, prob in probs.items()}
    return dict(probs)
