"""Pairing of individually fetched bet records into opposite sides of one market.

Vig removal needs both sides of a market from the same book. The feed
delivers each side as its own record, so the two halves are found here
before any fair-odds computation runs.
"""

import logging
from collections import defaultdict

from fairbet.markets.keys import format_line
from fairbet.markets.models import MarketKind
from fairbet.markets.records import BetRecord

logger = logging.getLogger(__name__)


def pairing_key(record: BetRecord) -> str:
    """Key shared by both sides of a market.

    Uses the absolute line so a +7 spread on one team and -7 on the other
    hash to the same key.
    """
    line_key = format_line(abs(record.line)) if record.line is not None else "nil"
    return (
        f"{record.league}|{record.home_team}|{record.away_team}"
        f"|{record.market_key}|{line_key}"
    )


def opposite_selection(record: BetRecord) -> str | None:
    """Selection label on the other side of a record's market.

    Labels compare case-insensitively, the same way ``pair_bets`` matches them.

    Returns:
        Other team for moneyline/spread, "Over"/"Under" for totals, None for
        props, alternates and unrecognized markets (no automatic pairing)
    """
    kind = record.market_type.kind
    selection = record.selection.lower()

    if kind in (MarketKind.MONEYLINE, MarketKind.SPREAD):
        if selection == record.home_team.lower():
            return record.away_team
        if selection == record.away_team.lower():
            return record.home_team
        return None

    if kind is MarketKind.TOTAL:
        if selection == "over":
            return "Under"
        if selection == "under":
            return "Over"
        return None

    return None


def pair_bets(records: list[BetRecord]) -> dict[str, BetRecord]:
    """Map each record id to the record on the opposite side of its market.

    Single grouping pass plus a per-group index lookup, so the whole pass
    is O(n). The result is safe to compute once per refresh and share across
    every downstream fair-odds and EV computation.

    Args:
        records: Flat list of bet records, possibly spanning many games

    Returns:
        Dict of record_id -> opposing BetRecord (entries exist in both directions)
    """
    groups: dict[str, list[BetRecord]] = defaultdict(list)
    for record in records:
        groups[pairing_key(record)].append(record)

    pairs: dict[str, BetRecord] = {}
    for group in groups.values():
        if len(group) < 2:
            continue

        # First record per selection label wins, matching input order
        by_selection: dict[str, BetRecord] = {}
        for record in group:
            by_selection.setdefault(record.selection.lower(), record)

        for record in group:
            opposite = opposite_selection(record)
            if opposite is None:
                continue
            match = by_selection.get(opposite.lower())
            if match is not None and match.record_id != record.record_id:
                pairs[record.record_id] = match

    logger.debug(f"Paired {len(pairs)} of {len(records)} records across {len(groups)} markets")
    return pairs
