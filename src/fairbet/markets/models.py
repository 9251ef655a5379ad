"""Bet groups, selections, and per-book quotes.

A BetGroup is the atomic, book-independent wagering proposition. Books only
supply prices for a group; they do not define it.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from fairbet.errors import InvalidInputError
from fairbet.odds.conversion import decimal_odds


class SelectionSide(str, Enum):
    """Side of a selection within a bet group."""

    HOME = "home"
    AWAY = "away"
    OVER = "over"
    UNDER = "under"
    DRAW = "draw"

    @property
    def opposite(self) -> "SelectionSide | None":
        """Paired side used for vig removal; draw has none."""
        return _OPPOSITES.get(self)


_OPPOSITES = {
    SelectionSide.HOME: SelectionSide.AWAY,
    SelectionSide.AWAY: SelectionSide.HOME,
    SelectionSide.OVER: SelectionSide.UNDER,
    SelectionSide.UNDER: SelectionSide.OVER,
}


class PairingStatus(str, Enum):
    """Whether a group's prices support vig removal."""

    PAIRED = "paired"  # some book prices every side
    ONE_SIDED = "one_sided"  # only one side has prices
    UNPAIRED = "unpaired"  # sides priced, but never by the same book


class MarketKind(str, Enum):
    """Recognized market families; anything else is UNRECOGNIZED."""

    MONEYLINE = "moneyline"
    SPREAD = "spread"
    TOTAL = "total"
    PLAYER_PROP = "player_prop"
    ALTERNATE = "alternate"
    UNRECOGNIZED = "unrecognized"


_MARKET_ALIASES = {
    "h2h": MarketKind.MONEYLINE,
    "moneyline": MarketKind.MONEYLINE,
    "spreads": MarketKind.SPREAD,
    "spread": MarketKind.SPREAD,
    "totals": MarketKind.TOTAL,
    "total": MarketKind.TOTAL,
}


@dataclass(frozen=True)
class MarketType:
    """Market kind plus the raw feed key it was parsed from."""

    kind: MarketKind
    raw: str

    @property
    def is_two_way(self) -> bool:
        """Symmetric two-outcome markets that support automatic pairing."""
        return self.kind in (MarketKind.MONEYLINE, MarketKind.SPREAD, MarketKind.TOTAL)


def parse_market_type(raw: str) -> MarketType:
    """Classify a feed market key, keeping unknown keys as UNRECOGNIZED."""
    key = raw.strip().lower()
    if key in _MARKET_ALIASES:
        return MarketType(_MARKET_ALIASES[key], raw)
    if key.startswith("player_"):
        return MarketType(MarketKind.PLAYER_PROP, raw)
    if key.startswith("alternate_"):
        return MarketType(MarketKind.ALTERNATE, raw)
    return MarketType(MarketKind.UNRECOGNIZED, raw)


@dataclass(frozen=True)
class BookQuote:
    """A single sportsbook's American price for a selection."""

    book_key: str
    price: int
    observed_at: datetime

    @property
    def decimal_odds(self) -> float:
        return decimal_odds(self.price)


@dataclass(frozen=True)
class Selection:
    """A specific outcome within a BetGroup."""

    selection_key: str
    bet_group_key: str
    side: SelectionSide
    label: str
    team_id: str | None = None
    prices: tuple[BookQuote, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "prices", tuple(self.prices))
        seen: set[str] = set()
        for quote in self.prices:
            if quote.book_key in seen:
                raise InvalidInputError(
                    f"Duplicate price from {quote.book_key} for {self.selection_key}"
                )
            seen.add(quote.book_key)

    @property
    def has_prices(self) -> bool:
        return len(self.prices) > 0

    @property
    def book_keys(self) -> set[str]:
        return {quote.book_key for quote in self.prices}

    def price_for(self, book_key: str) -> BookQuote | None:
        for quote in self.prices:
            if quote.book_key == book_key:
                return quote
        return None

    @property
    def best_price(self) -> BookQuote | None:
        """Highest decimal odds on offer (best for the bettor)."""
        if not self.prices:
            return None
        return max(self.prices, key=lambda q: q.decimal_odds)


@dataclass(frozen=True)
class BetGroup:
    """A wagering proposition and all of its selections."""

    bet_group_key: str
    game_id: str
    market_key: str
    pairing_status: PairingStatus
    selections: tuple[Selection, ...] = field(default_factory=tuple)
    subject_id: str | None = None
    line: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "selections", tuple(self.selections))

    @property
    def market_type(self) -> MarketType:
        return parse_market_type(self.market_key)

    def selection(self, side: SelectionSide) -> Selection | None:
        for selection in self.selections:
            if selection.side is side:
                return selection
        return None

    def paired_selection(self, selection: Selection) -> Selection | None:
        opposite = selection.side.opposite
        if opposite is None:
            return None
        return self.selection(opposite)

    @property
    def all_book_keys(self) -> set[str]:
        books: set[str] = set()
        for selection in self.selections:
            books |= selection.book_keys
        return books

    @property
    def books_pricing_all_sides(self) -> set[str]:
        """Books with a price on every selection (required for vig removal)."""
        if len(self.selections) < 2:
            return set()
        common = self.selections[0].book_keys
        for selection in self.selections[1:]:
            common &= selection.book_keys
        return common

    @property
    def can_compute_fair_odds(self) -> bool:
        return self.pairing_status is PairingStatus.PAIRED and bool(
            self.books_pricing_all_sides
        )

    @property
    def league(self) -> str | None:
        """League prefix of a canonical game id ("nba:2024-01-31:BOS-LAL")."""
        league = self.game_id.split(":")[0]
        return league or None

    @property
    def teams(self) -> tuple[str, str] | None:
        """(away, home) parsed from a canonical game id, if present."""
        parts = self.game_id.split(":")
        if len(parts) < 3:
            return None
        team_parts = parts[2].split("-")
        if len(team_parts) != 2:
            return None
        return team_parts[0], team_parts[1]
