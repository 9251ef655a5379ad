"""Fair-odds and expected-value engines."""

from fairbet.engine.ev import (
    BetGroupEVResult,
    BookEVResult,
    EVResult,
    SelectionEVResult,
    calculate_edge,
    calculate_ev_percent,
    compute_bet_group_ev,
    compute_book_ev,
    compute_market_probability,
    compute_record_ev,
    compute_selection_ev,
    has_positive_ev,
)
from fairbet.engine.fair_odds import (
    BetGroupFairOdds,
    FairOddsResult,
    FairProbabilityResult,
    compute_fair_odds,
    compute_fair_probability,
    select_strategy,
)

__all__ = [
    "BetGroupFairOdds",
    "FairOddsResult",
    "FairProbabilityResult",
    "compute_fair_odds",
    "compute_fair_probability",
    "select_strategy",
    "BetGroupEVResult",
    "BookEVResult",
    "EVResult",
    "SelectionEVResult",
    "calculate_edge",
    "calculate_ev_percent",
    "compute_bet_group_ev",
    "compute_book_ev",
    "compute_market_probability",
    "compute_record_ev",
    "compute_selection_ev",
    "has_positive_ev",
]
