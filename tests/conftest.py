"""Pytest configuration and shared fixtures for engine tests."""

from datetime import datetime, timezone

import pytest

from fairbet.markets.models import BookQuote
from fairbet.markets.records import BetRecord, BookPrice

OBSERVED_AT = datetime(2024, 1, 31, 18, 0, tzinfo=timezone.utc)


def quotes(**prices: int) -> list[BookQuote]:
    """Build BookQuotes from book=price keyword arguments."""
    return [BookQuote(book, price, OBSERVED_AT) for book, price in prices.items()]


def record(
    selection: str,
    market_key: str = "h2h",
    line: float | None = None,
    game_id: str = "g1",
    league: str = "NBA",
    home_team: str = "Boston Celtics",
    away_team: str = "Los Angeles Lakers",
    **prices: int,
) -> BetRecord:
    """Build a BetRecord with one BookPrice per book=price keyword argument."""
    return BetRecord(
        game_id=game_id,
        league=league,
        home_team=home_team,
        away_team=away_team,
        market_key=market_key,
        selection=selection,
        line=line,
        books=[BookPrice(book=b, price=p, observed_at=OBSERVED_AT) for b, p in prices.items()],
    )


@pytest.fixture
def now() -> datetime:
    return OBSERVED_AT


@pytest.fixture
def moneyline_pair() -> tuple[BetRecord, BetRecord]:
    """Both sides of a moneyline priced by two books, one sharp."""
    home = record("Boston Celtics", pinnacle=-150, draftkings=-155)
    away = record("Los Angeles Lakers", pinnacle=130, draftkings=135)
    return home, away


@pytest.fixture
def raw_record() -> dict:
    """A feed record as it arrives over the wire."""
    return {
        "game_id": 401585,
        "league_code": "NBA",
        "home_team": "Boston Celtics",
        "away_team": "Los Angeles Lakers",
        "market_key": "spreads",
        "side": "Boston Celtics",
        "line_value": -5.5,
        "books": [
            {"book": "pinnacle", "price": -110.0, "observed_at": "2024-01-31T18:00:00Z"},
            {"book": "fanduel", "price": -112, "observed_at": "2024-01-31T18:00:00Z"},
        ],
    }
