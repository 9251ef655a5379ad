"""Fair (vig-free) probability computation.

Two local strategies, chosen by what the data supports:

- Paired vig removal: for every book quoting all sides, devig proportionally
  and take the median across books. Sharp books are tried first; any book
  pricing every side is the fallback.
- Median consensus: with only single-sided quotes there is nothing to devig
  against, so the median implied probability is used and confidence is
  capped at low.

For feed records a server-annotated fair probability, when present, is
preferred over both.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from fairbet.config.engine import DEFAULT_ENGINE_CONFIG, EngineConfig
from fairbet.markets.models import BetGroup, MarketKind, PairingStatus, Selection, SelectionSide
from fairbet.markets.records import BetRecord
from fairbet.odds.confidence import Confidence, FairOddsMethod, tier_for_count
from fairbet.odds.conversion import (
    american_to_prob,
    format_american,
    is_valid_american_odds,
    prob_to_american,
)
from fairbet.odds.devig import market_vig, median, normalize, proportional_devig

logger = logging.getLogger(__name__)

#: Price assumed when a record has no quotes at all; confidence is NONE then.
FALLBACK_PRICE = -110


@dataclass
class FairOddsResult:
    """Fair odds for one selection of a bet group."""

    selection_key: str
    fair_probability: float
    fair_american_odds: int
    confidence: Confidence
    sharp_books_used: list[str]
    vig_removed: float  # average market vig across contributing books
    books_used: list[str] = field(default_factory=list)

    @property
    def display_odds(self) -> str:
        return format_american(self.fair_american_odds)


@dataclass
class BetGroupFairOdds:
    """Fair odds for every side of a bet group."""

    bet_group_key: str
    selections: list[FairOddsResult]
    market_vig: float
    confidence: Confidence
    method: FairOddsMethod
    timestamp: datetime

    def fair_odds_for(self, side: SelectionSide) -> FairOddsResult | None:
        suffix = f":{side.value}"
        for result in self.selections:
            if result.selection_key.endswith(suffix):
                return result
        return None

    @property
    def total_probability(self) -> float:
        return sum(r.fair_probability for r in self.selections)


@dataclass
class FairProbabilityResult:
    """Fair probability for a single feed record."""

    fair_probability: float
    fair_american_odds: int
    confidence: Confidence
    vig_removed: float
    method: FairOddsMethod
    books_used: list[str] = field(default_factory=list)
    sharp_books_used: list[str] = field(default_factory=list)
    reference_price: int | None = None  # sharp book's raw price, vig included
    ev_disabled_reason: str | None = None


@dataclass
class _BookDevig:
    book_key: str
    probs: dict[str, float]
    vig: float


def _devig_book(book_key: str, prices: dict[str, int]) -> _BookDevig | None:
    """Devig one book's prices keyed by side; None if the book cannot be used."""
    keys = list(prices)
    values = [prices[k] for k in keys]
    try:
        fair = proportional_devig(values)
    except ValueError as e:
        logger.warning(f"Devig failed for book {book_key}: {e}")
        return None

    vig = market_vig(values)
    if vig < 0:
        logger.warning(
            f"Negative vig {vig:.4f} from {book_key} on prices {values}; check data"
        )
    return _BookDevig(book_key=book_key, probs=dict(zip(keys, fair)), vig=vig)


def _sharp_first(
    books: set[str], sport: str | None, config: EngineConfig
) -> tuple[list[str], list[str]]:
    """Split candidate books into (sharp books in config order, all books sorted)."""
    by_lower = {b.lower(): b for b in books}
    sharp = [by_lower[s] for s in config.sharp_books_for(sport) if s in by_lower]
    return sharp, sorted(books)


def _paired_confidence(
    sharp_used: int, common_count: int, config: EngineConfig
) -> Confidence:
    """Confidence for paired devig.

    Sharp books and the broader set of books pricing both sides are each
    mapped to a tier; the better of the two wins, so adding a qualifying
    sharp book can never lower the tier.
    """
    common_tier = tier_for_count(
        common_count, config.min_common_books_high, config.min_common_books_medium
    )
    if sharp_used == 0:
        return common_tier
    sharp_tier = tier_for_count(
        sharp_used, config.min_sharp_books_high, config.min_sharp_books_medium
    )
    return sharp_tier if sharp_tier.rank >= common_tier.rank else common_tier


def _valid_prices(owner: str, prices: list[tuple[str, int]]) -> list[tuple[str, int]]:
    """Drop (book, price) pairs that are not real American prices, logging each."""
    valid = []
    for book, price in prices:
        if is_valid_american_odds(price):
            valid.append((book, price))
        else:
            logger.warning(f"Ignoring invalid price {price} from {book} on {owner}")
    return valid


def _consensus_confidence(
    implied: list[float], kind: MarketKind, config: EngineConfig
) -> Confidence:
    """LOW unless books disagree by more than the threshold, then NONE."""
    if not implied:
        return Confidence.NONE
    spread = max(implied) - min(implied)
    threshold = (
        config.spread_market_spread_threshold
        if kind is MarketKind.SPREAD
        else config.consensus_spread_threshold
    )
    return Confidence.NONE if spread > threshold else Confidence.LOW


def _devig_across_books(
    candidate_sets: list[list[str]],
    prices_for_book: Callable[[str], dict[str, int] | None],
) -> tuple[list[_BookDevig], bool]:
    """Devig the first candidate set that yields at least one usable book.

    Returns:
        (per-book results, whether the sharp set was the one used)
    """
    for index, books in enumerate(candidate_sets):
        devigged = []
        for book in books:
            prices = prices_for_book(book)
            if prices is None:
                logger.debug(f"Skipping {book}: missing a side")
                continue
            result = _devig_book(book, prices)
            if result is not None:
                devigged.append(result)
        if devigged:
            return devigged, index == 0 and len(candidate_sets) > 1
    return [], False


def compute_fair_odds(
    bet_group: BetGroup,
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
    now: datetime | None = None,
) -> BetGroupFairOdds | None:
    """Compute fair odds for every side of a bet group.

    Args:
        bet_group: Group with selections and per-book quotes
        config: Sharp books, thresholds and tolerances
        now: Timestamp to stamp on the result (defaults to UTC now)

    Returns:
        BetGroupFairOdds, or None if no selection carries a valid quote

    Notes:
        - PAIRED groups use proportional devig, sharp books first
        - ONE_SIDED and UNPAIRED groups use median consensus per side
        - Median consensus skips quotes that are not valid American prices
        - When two or more sides are present, probabilities are rescaled to
          sum to 1.0 if they drift past the normalization tolerance
    """
    timestamp = now or datetime.now(timezone.utc)

    if not bet_group.all_book_keys:
        logger.debug(f"No prices for {bet_group.bet_group_key}")
        return None

    if bet_group.pairing_status is PairingStatus.PAIRED:
        result = _paired_group_fair_odds(bet_group, config, timestamp)
        if result is not None:
            return result
        logger.info(
            f"Paired devig produced nothing for {bet_group.bet_group_key}, "
            f"falling back to median consensus"
        )

    return _consensus_group_fair_odds(bet_group, config, timestamp)


def _paired_group_fair_odds(
    bet_group: BetGroup, config: EngineConfig, timestamp: datetime
) -> BetGroupFairOdds | None:
    common = bet_group.books_pricing_all_sides
    sharp, everyone = _sharp_first(common, bet_group.league, config)
    candidate_sets = [sharp, everyone] if sharp else [everyone]

    def prices_for_book(book: str) -> dict[str, int] | None:
        prices = {}
        for selection in bet_group.selections:
            quote = selection.price_for(book)
            if quote is None:
                return None
            prices[selection.selection_key] = quote.price
        return prices

    devigged, used_sharp = _devig_across_books(candidate_sets, prices_for_book)
    if not devigged:
        return None

    fair = normalize(
        {
            selection.selection_key: median(
                [d.probs[selection.selection_key] for d in devigged]
            )
            for selection in bet_group.selections
        },
        config.normalization_tolerance,
    )
    avg_vig = sum(d.vig for d in devigged) / len(devigged)
    books_used = [d.book_key for d in devigged]
    sharp_used = books_used if used_sharp else []
    common_count = len(common) if used_sharp else len(devigged)
    confidence = _paired_confidence(len(sharp_used), common_count, config)

    return BetGroupFairOdds(
        bet_group_key=bet_group.bet_group_key,
        selections=[
            FairOddsResult(
                selection_key=key,
                fair_probability=prob,
                fair_american_odds=prob_to_american(prob),
                confidence=confidence,
                sharp_books_used=sharp_used,
                vig_removed=avg_vig,
                books_used=books_used,
            )
            for key, prob in fair.items()
        ],
        market_vig=avg_vig,
        confidence=confidence,
        method=FairOddsMethod.PAIRED_VIG_REMOVAL,
        timestamp=timestamp,
    )


def _consensus_group_fair_odds(
    bet_group: BetGroup, config: EngineConfig, timestamp: datetime
) -> BetGroupFairOdds | None:
    kind = bet_group.market_type.kind
    priced: list[Selection] = [s for s in bet_group.selections if s.has_prices]

    raw: dict[str, float] = {}
    confidences: dict[str, Confidence] = {}
    books: dict[str, list[str]] = {}
    for selection in priced:
        valid = _valid_prices(
            selection.selection_key, [(q.book_key, q.price) for q in selection.prices]
        )
        if not valid:
            continue
        implied = [american_to_prob(price) for _, price in valid]
        raw[selection.selection_key] = median(implied)
        confidences[selection.selection_key] = _consensus_confidence(implied, kind, config)
        books[selection.selection_key] = sorted({book for book, _ in valid})

    if not raw:
        return None

    fair = normalize(raw, config.normalization_tolerance) if len(raw) >= 2 else raw
    overall = min(confidences.values(), key=lambda c: c.rank)

    return BetGroupFairOdds(
        bet_group_key=bet_group.bet_group_key,
        selections=[
            FairOddsResult(
                selection_key=key,
                fair_probability=prob,
                fair_american_odds=prob_to_american(prob),
                confidence=confidences[key],
                sharp_books_used=[],
                vig_removed=0.0,
                books_used=books[key],
            )
            for key, prob in fair.items()
        ],
        market_vig=0.0,
        confidence=overall,
        method=FairOddsMethod.MEDIAN_CONSENSUS,
        timestamp=timestamp,
    )


@dataclass
class _ServerAnnotation:
    true_prob: float
    tier: Confidence
    reference_price: int | None


def _server_annotation(record: BetRecord) -> _ServerAnnotation | None:
    """Server-side devig output, record level first, then the first annotated book."""
    if record.true_prob is not None:
        return _ServerAnnotation(
            true_prob=record.true_prob,
            tier=record.ev_confidence_tier or Confidence.LOW,
            reference_price=record.reference_price,
        )
    for book in record.books:
        if book.true_prob is not None:
            return _ServerAnnotation(
                true_prob=book.true_prob,
                tier=book.ev_confidence_tier or Confidence.LOW,
                reference_price=book.reference_price,
            )
    return None


def _ev_disabled_reason(record: BetRecord) -> str | None:
    if record.ev_disabled_reason:
        return record.ev_disabled_reason
    for book in record.books:
        if book.ev_disabled_reason:
            return book.ev_disabled_reason
    return None


def select_strategy(record: BetRecord, pairs: dict[str, BetRecord]) -> FairOddsMethod:
    """Decide which strategy computes a record's fair probability.

    Order: server annotation, then paired vig removal (the record has an
    opposite side sharing at least one book), then median consensus.
    """
    if _server_annotation(record) is not None:
        return FairOddsMethod.SERVER_ANNOTATED

    paired = pairs.get(record.record_id)
    if paired is not None and record.book_names & paired.book_names:
        return FairOddsMethod.PAIRED_VIG_REMOVAL

    return FairOddsMethod.MEDIAN_CONSENSUS


def compute_fair_probability(
    record: BetRecord,
    pairs: dict[str, BetRecord],
    config: EngineConfig = DEFAULT_ENGINE_CONFIG,
) -> FairProbabilityResult:
    """Compute a record's fair probability using the precomputed pairing map.

    Args:
        record: The record to price
        pairs: Output of ``pair_bets`` over the full snapshot
        config: Sharp books, thresholds and tolerances

    Returns:
        FairProbabilityResult whose ``method`` names the strategy used
    """
    method = select_strategy(record, pairs)
    logger.debug(f"{record.record_id}: {method.value}")
    disabled = _ev_disabled_reason(record)

    if method is FairOddsMethod.SERVER_ANNOTATED:
        annotation = _server_annotation(record)
        return FairProbabilityResult(
            fair_probability=annotation.true_prob,
            fair_american_odds=prob_to_american(annotation.true_prob),
            confidence=annotation.tier,
            vig_removed=0.0,
            method=method,
            books_used=sorted(record.book_names),
            reference_price=annotation.reference_price,
            ev_disabled_reason=disabled,
        )

    result = None
    if method is FairOddsMethod.PAIRED_VIG_REMOVAL:
        result = _paired_record(record, pairs[record.record_id], config)
    if result is None:
        result = _consensus_record(record, config)

    result.ev_disabled_reason = disabled
    return result


def _paired_record(
    record: BetRecord, paired: BetRecord, config: EngineConfig
) -> FairProbabilityResult | None:
    common = record.book_names & paired.book_names
    sharp, everyone = _sharp_first(common, record.league, config)
    candidate_sets = [sharp, everyone] if sharp else [everyone]

    def prices_for_book(book: str) -> dict[str, int] | None:
        this_price = record.price_for(book)
        other_price = paired.price_for(book)
        if this_price is None or other_price is None:
            return None
        return {"this": this_price.price, "other": other_price.price}

    devigged, used_sharp = _devig_across_books(candidate_sets, prices_for_book)
    if not devigged:
        return None

    fair_prob = median([d.probs["this"] for d in devigged])
    avg_vig = sum(d.vig for d in devigged) / len(devigged)
    books_used = [d.book_key for d in devigged]
    sharp_used = books_used if used_sharp else []
    common_count = len(common) if used_sharp else len(devigged)

    return FairProbabilityResult(
        fair_probability=fair_prob,
        fair_american_odds=prob_to_american(fair_prob),
        confidence=_paired_confidence(len(sharp_used), common_count, config),
        vig_removed=avg_vig,
        method=FairOddsMethod.PAIRED_VIG_REMOVAL,
        books_used=books_used,
        sharp_books_used=sharp_used,
    )


def _consensus_record(record: BetRecord, config: EngineConfig) -> FairProbabilityResult:
    valid = _valid_prices(record.record_id, [(b.book, b.price) for b in record.books])
    implied = [american_to_prob(price) for _, price in valid]

    if not implied:
        fallback = american_to_prob(FALLBACK_PRICE)
        return FairProbabilityResult(
            fair_probability=fallback,
            fair_american_odds=prob_to_american(fallback),
            confidence=Confidence.NONE,
            vig_removed=0.0,
            method=FairOddsMethod.MEDIAN_CONSENSUS,
        )

    fair_prob = median(implied)
    return FairProbabilityResult(
        fair_probability=fair_prob,
        fair_american_odds=prob_to_american(fair_prob),
        confidence=_consensus_confidence(implied, record.market_type.kind, config),
        vig_removed=0.0,
        method=FairOddsMethod.MEDIAN_CONSENSUS,
        books_used=sorted({book for book, _ in valid}),
    )
