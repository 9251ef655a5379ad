"""Per-book expected value, net of platform fees.

EV per $1 staked at a book is ``p_fair * net_profit - (1 - p_fair)``, where
net profit is the book's gross profit after its fee on winnings. A book is
only worth flagging when EV is positive; a figure is only trustworthy when
the fair probability behind it has medium or high confidence.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Mapping

from fairbet.config.engine import DEFAULT_ENGINE_CONFIG, EngineConfig
from fairbet.engine.fair_odds import (
    FairOddsResult,
    compute_fair_odds,
    compute_fair_probability,
)
from fairbet.fees import DEFAULT_FEE_PROFILES, FeeProfile, fee_profile_for
from fairbet.markets.models import BetGroup, Selection, SelectionSide
from fairbet.markets.records import BetRecord
from fairbet.odds.confidence import Confidence, FairOddsMethod
from fairbet.odds.conversion import american_to_prob, american_to_profit
from fairbet.odds.devig import median

logger = logging.getLogger(__name__)


@dataclass
class BookEVResult:
    """EV for a single book's price."""

    book: str
    american_odds: int
    gross_profit: float  # per $1, before fees
    net_profit: float  # per $1, after fees
    ev: float  # dollars per $1 staked
    ev_percent: float
    fee_applied: bool
    fee_rate: float

    @property
    def has_positive_ev(self) -> bool:
        return self.ev > 0

    @property
    def ev_percent_display(self) -> str:
        sign = "+" if self.ev_percent >= 0 else ""
        return f"{sign}{self.ev_percent:.1f}%"


@dataclass
class SelectionEVResult:
    """EV for every book pricing one selection."""

    bet_group_key: str
    selection_key: str
    fair_available: bool
    fair_american_odds: int | None
    fair_probability: float | None
    books: list[BookEVResult]
    best_by_ev: str | None  # highest positive EV, None if nothing is +EV
    best_by_price: str | None

    def ev_result_for(self, book_key: str) -> BookEVResult | None:
        for result in self.books:
            if result.book.lower() == book_key.lower():
                return result
        return None

    @property
    def positive_ev_books(self) -> list[BookEVResult]:
        """Positive-EV books, highest EV% first."""
        return sorted(
            (b for b in self.books if b.has_positive_ev),
            key=lambda b: b.ev_percent,
            reverse=True,
        )


@dataclass
class BetGroupEVResult:
    """EV for every selection of a bet group."""

    bet_group_key: str
    selections: list[SelectionEVResult]
    fair_available: bool
    timestamp: datetime

    def ev_result_for(self, side: SelectionSide) -> SelectionEVResult | None:
        suffix = f":{side.value}"
        for result in self.selections:
            if result.selection_key.endswith(suffix):
                return result
        return None

    def best_book_by_ev(self, side: SelectionSide) -> tuple[str, float] | None:
        """(book, ev_percent) of the best positive-EV book on a side."""
        result = self.ev_result_for(side)
        if result is None or result.best_by_ev is None:
            return None
        book = result.ev_result_for(result.best_by_ev)
        if book is None:
            return None
        return book.book, book.ev_percent

    @property
    def positive_ev_opportunities(self) -> list[tuple[str, BookEVResult]]:
        """(selection_key, book result) for every +EV book, highest EV% first."""
        opportunities = [
            (selection.selection_key, book)
            for selection in self.selections
            for book in selection.positive_ev_books
        ]
        return sorted(opportunities, key=lambda item: item[1].ev_percent, reverse=True)


@dataclass
class EVResult:
    """Best-of-books EV for a single feed record."""

    record_id: str
    ev: float
    ev_percent: float
    confidence: Confidence
    fair_probability: float
    fair_american_odds: int
    method: FairOddsMethod
    vig_removed: float = 0.0
    books_used: list[str] = field(default_factory=list)
    best_book: str | None = None
    books: list[BookEVResult] = field(default_factory=list)
    reference_price: int | None = None
    ev_disabled_reason: str | None = None

    @property
    def is_reliably_positive(self) -> bool:
        """Positive EV backed by medium or high confidence."""
        return self.ev > 0 and self.confidence.at_least(Confidence.MEDIUM)


def calculate_edge(price: int, fair_probability: float) -> float:
    """Fair probability minus the price's implied probability."""
    return fair_probability - american_to_prob(price)


def calculate_ev_percent(price: int, fair_probability: float) -> float:
    """EV% as ``(fair / implied - 1) * 100`` (fee-free); 0 when implied is 0."""
    implied = american_to_prob(price)
    if implied <= 0:
        return 0.0
    return (fair_probability / implied - 1.0) * 100.0


def has_positive_ev(price: int, fair_probability: float) -> bool:
    return calculate_edge(price, fair_probability) > 0


def compute_market_probability(prices: list[int]) -> float | None:
    """Median implied probability across prices, None for no prices."""
    if not prices:
        return None
    return median([american_to_prob(price) for price in prices])


def compute_book_ev(
    book_key: str,
    american_odds: int,
    fair_probability: float,
    fee_profiles: Mapping[str, FeeProfile] = DEFAULT_FEE_PROFILES,
) -> BookEVResult:
    """Compute EV per $1 staked at one book.

    Args:
        book_key: Book identifier (fee lookup is case-insensitive)
        american_odds: The book's price
        fair_probability: Vig-free probability of the selection winning
        fee_profiles: Book -> fee profile table

    Returns:
        BookEVResult with gross and net profit, EV and EV%
    """
    fee = fee_profile_for(book_key, fee_profiles)
    gross = american_to_profit(american_odds)
    net = fee.apply_fee(gross)
    ev = fair_probability * net - (1.0 - fair_probability)

    return BookEVResult(
        book=book_key,
        american_odds=american_odds,
        gross_profit=gross,
        net_profit=net,
        ev=ev,
        ev_percent=ev * 100.0,
        fee_applied=fee.charges_fee,
        fee_rate=fee.rate,
    )


def _best_by_ev(books: list[BookEVResult]) -> str | None:
    positive = [b for b in books if b.has_positive_ev]
    if not positive:
        return None
    return max(positive, key=lambda b: b.ev).book


def _best_by_price(books: list[BookEVResult]) -> str | None:
    if not books:
        return None
    return max(books, key=lambda b: b.gross_profit).book


def compute_selection_ev(
    selection: Selection,
    fair_result: FairOddsResult | None,
    fee_profiles: Mapping[str, FeeProfile] = DEFAULT_FEE_PROFILES,
) -> SelectionEVResult:
    """Compute EV for every book on a selection.

    Without a fair result every book is listed with zero EV so the best raw
    price can still be shown.
    """
    if fair_result is None:
        books = []
        for quote in selection.prices:
            fee = fee_profile_for(quote.book_key, fee_profiles)
            gross = american_to_profit(quote.price)
            books.append(
                BookEVResult(
                    book=quote.book_key,
                    american_odds=quote.price,
                    gross_profit=gross,
                    net_profit=fee.apply_fee(gross),
                    ev=0.0,
                    ev_percent=0.0,
                    fee_applied=fee.charges_fee,
                    fee_rate=fee.rate,
                )
            )
        return SelectionEVResult(
            bet_group_key=selection.bet_group_key,
            selection_key=selection.selection_key,
            fair_available=False,
            fair_american_odds=None,
            fair_probability=None,
            books=books,
            best_by_ev=None,
            best_by_price=_best_by_price(books),
        )

    books = [
        compute_book_ev(q.book_key, q.price, fair_result.fair_probability, fee_profiles)
        for q in selection.prices
    ]
    return SelectionEVResult(
        bet_group_key=selection.bet_group_key,
        selection_key=selection.selection_key,
        fair_available=True,
        fair_american_odds=fair_result.fair_american_odds,
        fair_probability=fair_result.fair_probability,
        books=books,
        best_by_ev=_best_by_ev(books),
        best_by_price=_best_by_price(books),
    )


def compute_bet_group_ev(
    bet_group: BetGroup,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    now: datetime | None = None,
) -> BetGroupEVResult:
    """Compute fair odds for a bet group, then EV for each of its selections."""
    timestamp = now or datetime.now(timezone.utc)
    fair = compute_fair_odds(bet_group, config, now=timestamp)
    fair_by_key = {r.selection_key: r for r in fair.selections} if fair else {}

    return BetGroupEVResult(
        bet_group_key=bet_group.bet_group_key,
        selections=[
            compute_selection_ev(
                selection, fair_by_key.get(selection.selection_key), config.fee_profiles
            )
            for selection in bet_group.selections
        ],
        fair_available=fair is not None,
        timestamp=timestamp,
    )


def compute_record_ev(
    record: BetRecord,
    pairs: dict[str, BetRecord],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> EVResult:
    """Compute fair probability for a record, then EV at every book.

    Args:
        record: Feed record to evaluate
        pairs: Output of ``pair_bets`` over the full snapshot
        config: Engine configuration

    Returns:
        EVResult carrying the best book's EV. A record flagged with an
        ``ev_disabled_reason`` gets confidence NONE and no per-book EV;
        a record with no books reports zero EV and no best book.
    """
    fair = compute_fair_probability(record, pairs, config)

    if fair.ev_disabled_reason:
        logger.debug(f"EV disabled for {record.record_id}: {fair.ev_disabled_reason}")
        return EVResult(
            record_id=record.record_id,
            ev=0.0,
            ev_percent=0.0,
            confidence=Confidence.NONE,
            fair_probability=fair.fair_probability,
            fair_american_odds=fair.fair_american_odds,
            method=fair.method,
            vig_removed=fair.vig_removed,
            books_used=fair.books_used,
            reference_price=fair.reference_price,
            ev_disabled_reason=fair.ev_disabled_reason,
        )

    books = [
        compute_book_ev(b.book, b.price, fair.fair_probability, config.fee_profiles)
        for b in record.books
    ]
    best = max(books, key=lambda b: b.ev) if books else None

    return EVResult(
        record_id=record.record_id,
        ev=best.ev if best else 0.0,
        ev_percent=best.ev_percent if best else 0.0,
        confidence=fair.confidence,
        fair_probability=fair.fair_probability,
        fair_american_odds=fair.fair_american_odds,
        method=fair.method,
        vig_removed=fair.vig_removed,
        books_used=fair.books_used,
        best_book=best.book if best else None,
        books=books,
        reference_price=fair.reference_price,
    )
