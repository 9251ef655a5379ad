"""American odds, implied probability, and decimal odds conversion.

Probability is the canonical representation: decimal odds are derived from
it in both directions so the three forms never disagree beyond rounding.
Conversions degrade to neutral values on bad input rather than raising.
"""

import math
from dataclasses import dataclass

#: Even-money price returned when a probability cannot be priced.
EVEN_MONEY = 100


def is_valid_american_odds(value: int) -> bool:
    """Check whether an integer is a representable American price.

    Valid odds are <= -100 or >= +100 (exactly +100 is even money).
    Conversions do not call this; it exists for upstream sanitization.
    """
    if value == 100:
        return True
    return value <= -100 or value >= 100


def american_to_prob(odds: int) -> float:
    """Convert American odds to implied probability (vig-inclusive).

    Examples:
        >>> american_to_prob(-150)
        0.6
        >>> american_to_prob(150)
        0.4
    """
    if odds < 0:
        return -odds / (-odds + 100.0)
    # 0 takes this branch and yields 1.0; it is never a valid price
    return 100.0 / (odds + 100.0)


def prob_to_american(prob: float) -> int:
    """Convert a probability to the nearest valid American price.

    Args:
        prob: Probability in (0, 1)

    Returns:
        American odds <= -100 for favourites (prob >= 0.5), >= +100 otherwise.
        Out-of-range input returns even money (+100).
    """
    if not 0.0 < prob < 1.0:
        return EVEN_MONEY

    if prob >= 0.5:
        odds = -int(round(prob / (1.0 - prob) * 100.0))
        return min(odds, -100)

    odds = int(round((1.0 - prob) / prob * 100.0))
    return max(odds, 100)


def decimal_odds(american: int) -> float:
    """Convert American odds to decimal odds (stake included), via probability."""
    if american == 0:
        return 0.0
    return 1.0 / american_to_prob(american)


def american_from_decimal(decimal: float) -> int:
    """Convert decimal odds back to American odds, via probability.

    Non-finite values or decimals <= 1.0 return even money.
    """
    if not math.isfinite(decimal) or decimal <= 1.0:
        return EVEN_MONEY
    return prob_to_american(1.0 / decimal)


def american_to_profit(odds: int) -> float:
    """Profit per $1 staked at the given American price (0 for a zero price)."""
    if odds > 0:
        return odds / 100.0
    if odds < 0:
        return 100.0 / abs(odds)
    return 0.0


def format_american(odds: int) -> str:
    """Display string with an explicit sign, e.g. ``+150`` or ``-110``."""
    return f"+{odds}" if odds > 0 else str(odds)


@dataclass(frozen=True)
class AmericanOdds:
    """A sportsbook price snapped into the valid American range.

    Values in the dead zone are corrected on construction: 0..99 becomes
    +100 and -99..-1 becomes -100.
    """

    value: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "value", self._corrected(int(self.value)))

    @staticmethod
    def _corrected(value: int) -> int:
        if is_valid_american_odds(value):
            return value
        return 100 if value >= 0 else -100

    @property
    def implied_probability(self) -> float:
        return american_to_prob(self.value)

    @property
    def decimal_odds(self) -> float:
        return decimal_odds(self.value)

    @property
    def profit(self) -> float:
        return american_to_profit(self.value)

    @property
    def display(self) -> str:
        return format_american(self.value)

    @property
    def is_valid(self) -> bool:
        return is_valid_american_odds(self.value)

    @classmethod
    def from_decimal(cls, decimal: float) -> "AmericanOdds":
        return cls(american_from_decimal(decimal))

    @classmethod
    def from_probability(cls, probability: float) -> "AmericanOdds":
        return cls(prob_to_american(probability))
