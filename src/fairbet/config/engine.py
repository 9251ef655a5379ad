"""Immutable engine configuration.

Everything the engine looks up at computation time (sharp books, fee
profiles, confidence thresholds) lives on an ``EngineConfig`` that callers
pass in. Overrides produce a new config; nothing is mutated in place.
"""

from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping

from fairbet.fees import DEFAULT_FEE_PROFILES, FeeProfile, NO_FEE, percent_on_winnings

DEFAULT_SHARP_BOOKS: Mapping[str, tuple[str, ...]] = MappingProxyType(
    {
        "nba": ("pinnacle", "circa", "betcris"),
        "nhl": ("pinnacle", "circa", "betcris"),
        "ncaab": ("pinnacle", "circa"),
        "nfl": ("pinnacle", "circa", "betcris"),
        "mlb": ("pinnacle", "circa", "betcris"),
        "default": ("pinnacle", "circa"),
    }
)


@dataclass(frozen=True)
class EngineConfig:
    """Sharp books, fees and thresholds consumed by the fair-odds and EV engines."""

    sharp_books_by_sport: Mapping[str, tuple[str, ...]] = field(
        default_factory=lambda: DEFAULT_SHARP_BOOKS
    )
    fee_profiles: Mapping[str, FeeProfile] = field(
        default_factory=lambda: DEFAULT_FEE_PROFILES
    )
    min_sharp_books_high: int = 2
    min_sharp_books_medium: int = 1
    min_common_books_high: int = 4
    min_common_books_medium: int = 2
    consensus_spread_threshold: float = 0.20
    spread_market_spread_threshold: float = 0.15  # spread markets are noisier
    normalization_tolerance: float = 0.001
    reliable_min_books: int = 3

    def sharp_books_for(self, sport: str | None) -> tuple[str, ...]:
        """Ordered sharp books for a sport, falling back to the default set."""
        books = self.sharp_books_by_sport
        if sport is not None and sport.lower() in books:
            return books[sport.lower()]
        return books.get("default", ("pinnacle", "circa"))

    def with_overrides(
        self,
        extra_sharp_books: Iterable[str] = (),
        fee_overrides: Mapping[str, float] | None = None,
    ) -> "EngineConfig":
        """Return a copy with extra sharp books (all sports) and fee rates applied.

        Args:
            extra_sharp_books: Book keys appended to every sport's sharp list
            fee_overrides: Book key -> percent-on-winnings rate

        Returns:
            New EngineConfig; ``self`` is left untouched
        """
        extras = tuple(b.lower() for b in extra_sharp_books)
        sharp = {
            sport: books + tuple(b for b in extras if b not in books)
            for sport, books in self.sharp_books_by_sport.items()
        }

        fees = dict(self.fee_profiles)
        for book, rate in (fee_overrides or {}).items():
            fees[book.lower()] = percent_on_winnings(rate) if rate > 0 else NO_FEE

        return replace(
            self,
            sharp_books_by_sport=MappingProxyType(sharp),
            fee_profiles=MappingProxyType(fees),
        )


DEFAULT_ENGINE_CONFIG = EngineConfig()
