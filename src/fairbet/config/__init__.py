"""Application settings and the immutable engine configuration."""

from fairbet.config.engine import DEFAULT_ENGINE_CONFIG, DEFAULT_SHARP_BOOKS, EngineConfig
from fairbet.config.settings import AppConfig, get_config

__all__ = [
    "AppConfig",
    "get_config",
    "EngineConfig",
    "DEFAULT_ENGINE_CONFIG",
    "DEFAULT_SHARP_BOOKS",
]
