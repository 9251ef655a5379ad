"""Application configuration schema and validation."""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from fairbet.config.engine import DEFAULT_ENGINE_CONFIG, EngineConfig


class AppConfig(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    env: Literal["dev", "staging", "prod"] = Field(
        default="dev",
        description="Application environment",
    )
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )
    min_sharp_books_medium: int = Field(
        default=1,
        ge=1,
        description="Sharp books pricing every side required for medium confidence",
    )
    min_sharp_books_high: int = Field(
        default=2,
        ge=1,
        description="Sharp books pricing every side required for high confidence",
    )
    min_common_books_medium: int = Field(
        default=2,
        ge=1,
        description="Non-sharp books pricing both sides required for medium confidence",
    )
    min_common_books_high: int = Field(
        default=4,
        ge=1,
        description="Non-sharp books pricing both sides required for high confidence",
    )
    consensus_spread_threshold: float = Field(
        default=0.20,
        gt=0.0,
        le=1.0,
        description="Max implied-probability spread before consensus confidence drops to none",
    )
    spread_market_spread_threshold: float = Field(
        default=0.15,
        gt=0.0,
        le=1.0,
        description="Consensus spread threshold for point-spread markets",
    )
    normalization_tolerance: float = Field(
        default=0.001,
        gt=0.0,
        le=0.05,
        description="Allowed drift of summed fair probabilities from 1.0 before rescaling",
    )
    reliable_min_books: int = Field(
        default=3,
        ge=1,
        description="Books a record needs before it counts toward batch +EV stats",
    )
    extra_sharp_books: list[str] = Field(
        default=[],
        description="Book keys treated as sharp for every sport",
    )
    fee_overrides: dict[str, float] = Field(
        default={},
        description="Book key -> percent-of-winnings fee rate",
    )

    @field_validator("min_sharp_books_high")
    @classmethod
    def validate_sharp_high(cls, v: int, info) -> int:
        """Ensure the high threshold is not below the medium one."""
        if "min_sharp_books_medium" in info.data and v < info.data["min_sharp_books_medium"]:
            raise ValueError("min_sharp_books_high must be >= min_sharp_books_medium")
        return v

    @field_validator("min_common_books_high")
    @classmethod
    def validate_common_high(cls, v: int, info) -> int:
        """Ensure the high threshold is not below the medium one."""
        if "min_common_books_medium" in info.data and v < info.data["min_common_books_medium"]:
            raise ValueError("min_common_books_high must be >= min_common_books_medium")
        return v

    @field_validator("spread_market_spread_threshold")
    @classmethod
    def validate_spread_threshold(cls, v: float, info) -> float:
        """Spread markets may only be judged more strictly than others."""
        if (
            "consensus_spread_threshold" in info.data
            and v > info.data["consensus_spread_threshold"]
        ):
            raise ValueError(
                "spread_market_spread_threshold must be <= consensus_spread_threshold"
            )
        return v

    @field_validator("fee_overrides")
    @classmethod
    def validate_fee_overrides(cls, v: dict[str, float]) -> dict[str, float]:
        for book, rate in v.items():
            if not 0.0 <= rate < 1.0:
                raise ValueError(f"fee rate for {book} must be in [0, 1), got {rate}")
        return v

    def engine_config(self) -> EngineConfig:
        """Build the immutable engine configuration described by these settings."""
        base = EngineConfig(
            sharp_books_by_sport=DEFAULT_ENGINE_CONFIG.sharp_books_by_sport,
            fee_profiles=DEFAULT_ENGINE_CONFIG.fee_profiles,
            min_sharp_books_high=self.min_sharp_books_high,
            min_sharp_books_medium=self.min_sharp_books_medium,
            min_common_books_high=self.min_common_books_high,
            min_common_books_medium=self.min_common_books_medium,
            consensus_spread_threshold=self.consensus_spread_threshold,
            spread_market_spread_threshold=self.spread_market_spread_threshold,
            normalization_tolerance=self.normalization_tolerance,
            reliable_min_books=self.reliable_min_books,
        )
        if not self.extra_sharp_books and not self.fee_overrides:
            return base
        return base.with_overrides(
            extra_sharp_books=self.extra_sharp_books,
            fee_overrides=self.fee_overrides,
        )


_config: AppConfig | None = None


def get_config() -> AppConfig:
    """Get or create the singleton AppConfig instance."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config
