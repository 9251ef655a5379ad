"""Bet records supplied by the odds feed.

Records are validated once here; anything structurally wrong is raised as
InvalidInputError before it can reach the engine.
"""

from datetime import datetime
from typing import Any, Iterable, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator

from fairbet.errors import InvalidInputError
from fairbet.markets.models import MarketType, parse_market_type
from fairbet.odds.confidence import Confidence
from fairbet.odds.conversion import decimal_odds


class BookPrice(BaseModel):
    """One book's price on a record, with optional server annotations."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    book: str = Field(min_length=1)
    price: int
    observed_at: datetime
    true_prob: float | None = Field(default=None, gt=0.0, lt=1.0)
    ev_confidence_tier: Confidence | None = None
    reference_price: int | None = None
    ev_disabled_reason: str | None = None

    @field_validator("price", "reference_price", mode="before")
    @classmethod
    def truncate_price(cls, v: Any) -> Any:
        """Feed prices arrive as floats (-110.0); engine math uses integers."""
        if isinstance(v, float):
            return int(v)
        return v


class BetRecord(BaseModel):
    """A single selection on a single market, priced by one or more books."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    game_id: str = Field(min_length=1)
    league: str = Field(min_length=1, validation_alias=AliasChoices("league", "league_code"))
    home_team: str = Field(min_length=1)
    away_team: str = Field(min_length=1)
    market_key: str = Field(min_length=1)
    selection: str = Field(min_length=1, validation_alias=AliasChoices("selection", "side"))
    line: float | None = Field(default=None, validation_alias=AliasChoices("line", "line_value"))
    books: list[BookPrice] = Field(default_factory=list)

    # Server-side devig annotations; when present they win over local computation
    true_prob: float | None = Field(default=None, gt=0.0, lt=1.0)
    ev_confidence_tier: Confidence | None = None
    reference_price: int | None = None
    ev_disabled_reason: str | None = None

    @field_validator("game_id", mode="before")
    @classmethod
    def coerce_game_id(cls, v: Any) -> Any:
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @field_validator("reference_price", mode="before")
    @classmethod
    def truncate_reference(cls, v: Any) -> Any:
        if isinstance(v, float):
            return int(v)
        return v

    @property
    def record_id(self) -> str:
        line = self.line if self.line is not None else 0.0
        return f"{self.game_id}_{self.market_key}_{self.selection}_{line}"

    @property
    def market_type(self) -> MarketType:
        return parse_market_type(self.market_key)

    @property
    def book_names(self) -> set[str]:
        return {b.book for b in self.books}

    def price_for(self, book: str) -> BookPrice | None:
        for book_price in self.books:
            if book_price.book == book:
                return book_price
        return None

    @property
    def best_book(self) -> BookPrice | None:
        """Book offering the highest decimal odds."""
        if not self.books:
            return None
        return max(self.books, key=lambda b: decimal_odds(b.price))


def parse_records(raw: Iterable[Mapping[str, Any]]) -> list[BetRecord]:
    """Validate raw feed dictionaries into BetRecords.

    Args:
        raw: Iterable of dictionaries from the odds feed

    Returns:
        List of BetRecord in input order

    Raises:
        InvalidInputError: If any record is missing a required field or has a
            field of the wrong type
    """
    records = []
    for index, item in enumerate(raw):
        try:
            records.append(BetRecord.model_validate(item))
        except ValidationError as e:
            raise InvalidInputError(f"Bet record {index} is malformed: {e}") from e
    return records
