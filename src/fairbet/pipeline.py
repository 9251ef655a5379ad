"""Batch evaluation of a full odds snapshot.

Pairing runs over the whole snapshot before any fair-odds work starts, so
every record sees the same pairing map. Per-record EV is independent once
pairs exist and can optionally fan out over a thread pool.
"""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Iterable

from fairbet.config.engine import DEFAULT_ENGINE_CONFIG, EngineConfig
from fairbet.engine.ev import BetGroupEVResult, EVResult, compute_bet_group_ev, compute_record_ev
from fairbet.markets.models import BetGroup
from fairbet.markets.pairing import pair_bets
from fairbet.markets.records import BetRecord

logger = logging.getLogger(__name__)


@dataclass
class LeagueSummary:
    """Qualified and reliably-positive record counts for one league."""

    league: str
    total: int
    positive_ev: int


@dataclass
class EVSnapshot:
    """EV results for every record in a snapshot, plus summary statistics."""

    records: list[BetRecord]
    pairs: dict[str, BetRecord]
    results: dict[str, EVResult]
    min_books: int = 3

    @property
    def qualified(self) -> list[BetRecord]:
        """Records priced by at least ``min_books`` books."""
        return [r for r in self.records if len(r.books) >= self.min_books]

    def result_for(self, record: BetRecord) -> EVResult | None:
        return self.results.get(record.record_id)

    def _reliably_positive(self, record: BetRecord) -> bool:
        result = self.result_for(record)
        return result is not None and result.is_reliably_positive

    @property
    def positive_ev_count(self) -> int:
        """Qualified records whose EV is positive with medium+ confidence."""
        return sum(1 for r in self.qualified if self._reliably_positive(r))

    @property
    def positive_ev_rate(self) -> float:
        """Percentage of qualified records that are reliably +EV."""
        if not self.qualified:
            return 0.0
        return self.positive_ev_count / len(self.qualified) * 100.0

    @property
    def best(self) -> EVResult | None:
        """Highest-EV result among qualified records."""
        candidates = [self.results[r.record_id] for r in self.qualified if r.record_id in self.results]
        if not candidates:
            return None
        return max(candidates, key=lambda result: result.ev)

    @property
    def best_ev(self) -> float | None:
        best = self.best
        return best.ev_percent if best is not None else None

    @property
    def league_breakdown(self) -> list[LeagueSummary]:
        """Qualified / reliably-positive counts per league, leagues sorted."""
        totals: dict[str, int] = defaultdict(int)
        positives: dict[str, int] = defaultdict(int)
        for record in self.qualified:
            totals[record.league] += 1
            if self._reliably_positive(record):
                positives[record.league] += 1
        return [
            LeagueSummary(league=league, total=totals[league], positive_ev=positives[league])
            for league in sorted(totals)
        ]


def evaluate_records(
    records: list[BetRecord],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    max_workers: int = 1,
) -> EVSnapshot:
    """Pair a snapshot's records, then compute EV for each of them.

    Args:
        records: Every record in the snapshot
        config: Engine configuration
        max_workers: Threads for the per-record EV pass (1 runs inline)

    Returns:
        EVSnapshot keyed by record id. Results do not depend on max_workers.
    """
    pairs = pair_bets(records)

    if max_workers > 1:
        with ThreadPoolExecutor(max_workers=max_workers) as executor:
            computed = list(
                executor.map(lambda record: compute_record_ev(record, pairs, config), records)
            )
    else:
        computed = [compute_record_ev(record, pairs, config) for record in records]

    results = {result.record_id: result for result in computed}
    snapshot = EVSnapshot(
        records=records,
        pairs=pairs,
        results=results,
        min_books=config.reliable_min_books,
    )

    logger.info(
        f"Evaluated {len(records)} records: {len(pairs)} paired, "
        f"{len(snapshot.qualified)} qualified, {snapshot.positive_ev_count} reliably +EV"
    )
    return snapshot


def evaluate_bet_groups(
    groups: Iterable[BetGroup],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> dict[str, BetGroupEVResult]:
    """Compute EV for every bet group, keyed by bet group key."""
    results = {group.bet_group_key: compute_bet_group_ev(group, config) for group in groups}
    fair_count = sum(1 for r in results.values() if r.fair_available)
    logger.info(f"Evaluated {len(results)} bet groups, {fair_count} with fair odds")
    return results
