"""BetGroup builders and pairing-status derivation."""

from typing import Iterable

from fairbet.markets.keys import build_bet_group_key, build_selection_key
from fairbet.markets.labels import build_label
from fairbet.markets.models import (
    BetGroup,
    BookQuote,
    PairingStatus,
    Selection,
    SelectionSide,
)


def determine_pairing_status(selections: list[Selection]) -> PairingStatus:
    """Classify whether a group's prices support vig removal.

    Rules:
        - Fewer than 2 selections -> ONE_SIDED
        - No selection has any price -> UNPAIRED
        - Some, but not all, selections priced -> ONE_SIDED
        - Some book prices every selection -> PAIRED
        - Otherwise -> UNPAIRED
    """
    if len(selections) < 2:
        return PairingStatus.ONE_SIDED

    priced = [s for s in selections if s.has_prices]
    if not priced:
        return PairingStatus.UNPAIRED
    if len(priced) < len(selections):
        return PairingStatus.ONE_SIDED

    common = set.intersection(*(s.book_keys for s in selections))
    return PairingStatus.PAIRED if common else PairingStatus.UNPAIRED


def _build_group(
    game_id: str,
    market_key: str,
    sides: list[tuple[SelectionSide, str, str | None, Iterable[BookQuote]]],
    subject_id: str | None = None,
    line: float | None = None,
) -> BetGroup:
    bet_group_key = build_bet_group_key(game_id, market_key, subject_id, line)
    selections = [
        Selection(
            selection_key=build_selection_key(bet_group_key, side),
            bet_group_key=bet_group_key,
            side=side,
            label=label,
            team_id=team_id,
            prices=tuple(prices),
        )
        for side, label, team_id, prices in sides
    ]
    return BetGroup(
        bet_group_key=bet_group_key,
        game_id=game_id,
        market_key=market_key,
        pairing_status=determine_pairing_status(selections),
        selections=tuple(selections),
        subject_id=subject_id,
        line=line,
    )


def create_spread(
    game_id: str,
    line: float,
    home_team: str,
    away_team: str,
    home_prices: Iterable[BookQuote],
    away_prices: Iterable[BookQuote],
) -> BetGroup:
    def label(side: SelectionSide) -> str:
        return build_label("spread", side, line, home_team, away_team)

    return _build_group(
        game_id,
        "spread",
        [
            (SelectionSide.HOME, label(SelectionSide.HOME), home_team, home_prices),
            (SelectionSide.AWAY, label(SelectionSide.AWAY), away_team, away_prices),
        ],
        line=line,
    )


def create_total(
    game_id: str,
    line: float,
    over_prices: Iterable[BookQuote],
    under_prices: Iterable[BookQuote],
) -> BetGroup:
    return _build_group(
        game_id,
        "total",
        [
            (SelectionSide.OVER, build_label("total", SelectionSide.OVER, line), None, over_prices),
            (SelectionSide.UNDER, build_label("total", SelectionSide.UNDER, line), None, under_prices),
        ],
        line=line,
    )


def create_moneyline(
    game_id: str,
    home_team: str,
    away_team: str,
    home_prices: Iterable[BookQuote],
    away_prices: Iterable[BookQuote],
) -> BetGroup:
    return _build_group(
        game_id,
        "h2h",
        [
            (SelectionSide.HOME, home_team, home_team, home_prices),
            (SelectionSide.AWAY, away_team, away_team, away_prices),
        ],
    )


def create_player_prop(
    game_id: str,
    market_key: str,
    player_id: str,
    player_name: str,
    line: float,
    over_prices: Iterable[BookQuote],
    under_prices: Iterable[BookQuote],
) -> BetGroup:
    def label(side: SelectionSide) -> str:
        return build_label(market_key, side, line, player_name=player_name)

    return _build_group(
        game_id,
        market_key,
        [
            (SelectionSide.OVER, label(SelectionSide.OVER), None, over_prices),
            (SelectionSide.UNDER, label(SelectionSide.UNDER), None, under_prices),
        ],
        subject_id=player_id,
        line=line,
    )
