"""Configuration management for the TradeMatch engine."""

from .environment import EnvironmentConfig, load_environment_config
from .exceptions import ConfigurationError
from .loader import load_config, parse_config
from .models import (
    EngineConfig,
    LifecycleConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    NotificationConfig,
    RankingConfig,
    ScoringConfig,
    SortSetting,
)

__all__ = [
    # Loader functions
    "load_config",
    "parse_config",
    "load_environment_config",
    # Configuration models
    "EngineConfig",
    "ScoringConfig",
    "RankingConfig",
    "LifecycleConfig",
    "NotificationConfig",
    "LoggingConfig",
    "EnvironmentConfig",
    # Enums
    "LogLevel",
    "LogFormat",
    "SortSetting",
    # Exceptions
    "ConfigurationError",
]
