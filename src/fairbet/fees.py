"""Per-book fee profiles.

Traditional sportsbooks bake their margin into the price. Peer-to-peer
platforms and exchanges quote closer to fair but take a cut of net winnings,
so EV has to be computed on profit after that cut.
"""

from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Mapping


class FeeType(str, Enum):
    """How a book charges for a winning wager."""

    NONE = "none"
    PERCENT_ON_WINNINGS = "percent_on_winnings"


@dataclass(frozen=True)
class FeeProfile:
    """Fee configuration for a single book."""

    fee_type: FeeType
    rate: float = 0.0  # e.g. 0.02 = 2% of net winnings

    def apply_fee(self, gross_profit: float) -> float:
        """Convert gross profit per $1 staked into net profit after fees."""
        if self.fee_type is FeeType.PERCENT_ON_WINNINGS:
            return gross_profit * (1.0 - self.rate)
        return gross_profit

    @property
    def charges_fee(self) -> bool:
        return self.fee_type is not FeeType.NONE


NO_FEE = FeeProfile(FeeType.NONE, 0.0)


def percent_on_winnings(rate: float) -> FeeProfile:
    """Build a percent-of-winnings profile, rejecting rates outside [0, 1)."""
    if not 0.0 <= rate < 1.0:
        raise ValueError(f"Fee rate must be in [0, 1), got {rate}")
    return FeeProfile(FeeType.PERCENT_ON_WINNINGS, rate)


DEFAULT_FEE_PROFILES: Mapping[str, FeeProfile] = MappingProxyType(
    {
        "draftkings": NO_FEE,
        "fanduel": NO_FEE,
        "betmgm": NO_FEE,
        "caesars": NO_FEE,
        "pointsbet": NO_FEE,
        "bet365": NO_FEE,
        "pinnacle": NO_FEE,
        "circa": NO_FEE,
        "betcris": NO_FEE,
        "betrivers": NO_FEE,
        "unibet": NO_FEE,
        "wynnbet": NO_FEE,
        "superbook": NO_FEE,
        # P2P platforms: 2% of winnings
        "novig": percent_on_winnings(0.02),
        "prophetx": percent_on_winnings(0.02),
        # Exchanges: 1% of winnings
        "betfair": percent_on_winnings(0.01),
        "smarkets": percent_on_winnings(0.01),
    }
)


def fee_profile_for(
    book_key: str,
    profiles: Mapping[str, FeeProfile] = DEFAULT_FEE_PROFILES,
) -> FeeProfile:
    """Look up a book's fee profile by lowercase name; unknown books pay no fee."""
    return profiles.get(book_key.lower(), NO_FEE)
