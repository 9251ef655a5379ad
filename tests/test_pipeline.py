"""Tests for batch evaluation of a snapshot."""

import logging

import pytest

from conftest import quotes, record
from fairbet.config import EngineConfig
from fairbet.markets import create_moneyline, create_total
from fairbet.odds import Confidence
from fairbet.pipeline import evaluate_bet_groups, evaluate_records


@pytest.fixture
def snapshot_records():
    nba_home = record("Boston Celtics", pinnacle=-150, circa=-145, fanduel=-160)
    nba_away = record("Los Angeles Lakers", pinnacle=130, circa=125, fanduel=150)
    nhl = dict(game_id="g2", league="NHL", home_team="Boston Bruins", away_team="Toronto Maple Leafs")
    over = record("Over", market_key="totals", line=6.5, pinnacle=-110, fanduel=-105, betmgm=-115, **nhl)
    under = record("Under", market_key="totals", line=6.5, pinnacle=-110, fanduel=-115, betmgm=-105, **nhl)
    thin = record("Boston Celtics", market_key="spreads", line=-5.5, fanduel=-110, betmgm=-108)
    return [nba_home, nba_away, over, under, thin]


class TestEvaluateRecords:
    def test_every_record_evaluated(self, snapshot_records):
        snapshot = evaluate_records(snapshot_records)
        assert set(snapshot.results) == {r.record_id for r in snapshot_records}
        assert len(snapshot.pairs) == 4

    def test_qualified_requires_three_books(self, snapshot_records):
        snapshot = evaluate_records(snapshot_records)
        assert len(snapshot.qualified) == 4
        assert snapshot_records[-1] not in snapshot.qualified

    def test_summary_statistics(self, snapshot_records):
        snapshot = evaluate_records(snapshot_records)
        away = snapshot_records[1]

        assert snapshot.positive_ev_count == 1
        assert snapshot.positive_ev_rate == 25.0
        assert snapshot.best.record_id == away.record_id
        assert snapshot.best.best_book == "fanduel"
        assert snapshot.best.confidence is Confidence.HIGH
        assert abs(snapshot.best_ev - 6.13) < 0.05

        breakdown = {s.league: (s.total, s.positive_ev) for s in snapshot.league_breakdown}
        assert breakdown == {"NBA": (2, 1), "NHL": (2, 0)}

    def test_result_for(self, snapshot_records):
        snapshot = evaluate_records(snapshot_records)
        assert snapshot.result_for(snapshot_records[2]).fair_probability == pytest.approx(0.5)

    def test_thread_pool_matches_inline(self, snapshot_records):
        inline = evaluate_records(snapshot_records)
        threaded = evaluate_records(snapshot_records, max_workers=4)
        assert {k: (v.ev, v.best_book, v.confidence) for k, v in inline.results.items()} == {
            k: (v.ev, v.best_book, v.confidence) for k, v in threaded.results.items()
        }

    def test_min_books_from_config(self, snapshot_records):
        snapshot = evaluate_records(snapshot_records, EngineConfig(reliable_min_books=2))
        assert len(snapshot.qualified) == 5

    def test_empty_snapshot(self):
        snapshot = evaluate_records([])
        assert snapshot.results == {}
        assert snapshot.best is None
        assert snapshot.best_ev is None
        assert snapshot.positive_ev_rate == 0.0
        assert snapshot.league_breakdown == []

    def test_logs_summary(self, snapshot_records, caplog):
        with caplog.at_level(logging.INFO, logger="fairbet.pipeline"):
            evaluate_records(snapshot_records)
        assert "Evaluated 5 records: 4 paired, 4 qualified, 1 reliably +EV" in caplog.text


def test_evaluate_bet_groups():
    game_id = "nba:2024-01-31:LAL-BOS"
    moneyline = create_moneyline(game_id, "BOS", "LAL", quotes(pinnacle=-150), quotes(pinnacle=130))
    total = create_total(game_id, 220.5, [], [])

    results = evaluate_bet_groups([moneyline, total])

    assert set(results) == {moneyline.bet_group_key, total.bet_group_key}
    assert results[moneyline.bet_group_key].fair_available
    assert not results[total.bet_group_key].fair_available
