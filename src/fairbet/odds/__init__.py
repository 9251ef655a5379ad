"""Odds conversion, proportional devig, and confidence tiers."""

from fairbet.odds.confidence import Confidence, FairOddsMethod, tier_for_count
from fairbet.odds.conversion import (
    AmericanOdds,
    american_from_decimal,
    american_to_prob,
    american_to_profit,
    decimal_odds,
    format_american,
    is_valid_american_odds,
    prob_to_american,
)
from fairbet.odds.devig import market_vig, median, normalize, proportional_devig, total_implied

__all__ = [
    "AmericanOdds",
    "american_from_decimal",
    "american_to_prob",
    "american_to_profit",
    "decimal_odds",
    "format_american",
    "is_valid_american_odds",
    "prob_to_american",
    "Confidence",
    "FairOddsMethod",
    "tier_for_count",
    "market_vig",
    "median",
    "normalize",
    "proportional_devig",
    "total_implied",
]
