"""Bet groups, canonical keys, feed records, and pairing."""

from fairbet.markets.factory import (
    create_moneyline,
    create_player_prop,
    create_spread,
    create_total,
    determine_pairing_status,
)
from fairbet.markets.keys import (
    build_bet_group_key,
    build_game_id,
    build_selection_key,
    format_line,
    normalize_player_id,
    normalize_team_code,
)
from fairbet.markets.labels import build_label
from fairbet.markets.models import (
    BetGroup,
    BookQuote,
    MarketKind,
    MarketType,
    PairingStatus,
    Selection,
    SelectionSide,
    parse_market_type,
)
from fairbet.markets.pairing import opposite_selection, pair_bets, pairing_key
from fairbet.markets.records import BetRecord, BookPrice, parse_records

__all__ = [
    "BetGroup",
    "BookQuote",
    "MarketKind",
    "MarketType",
    "PairingStatus",
    "Selection",
    "SelectionSide",
    "parse_market_type",
    "build_bet_group_key",
    "build_game_id",
    "build_selection_key",
    "format_line",
    "normalize_player_id",
    "normalize_team_code",
    "build_label",
    "create_moneyline",
    "create_player_prop",
    "create_spread",
    "create_total",
    "determine_pairing_status",
    "BetRecord",
    "BookPrice",
    "parse_records",
    "opposite_selection",
    "pair_bets",
    "pairing_key",
]
