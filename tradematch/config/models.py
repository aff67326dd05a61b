"""Configuration schema models using Pydantic."""

from enum import Enum

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class SortSetting(str, Enum):
    """Feed sort orders selectable from configuration."""

    MATCH = "match"
    POSTED = "posted"
    PAY = "pay"


class ScoringConfig(BaseModel):
    """Batch scoring settings."""

    max_workers: int = Field(
        1, ge=1, le=64, description="Threads used to score a feed (1 = score inline)"
    )


class RankingConfig(BaseModel):
    """Feed ranking defaults."""

    default_sort: SortSetting = Field(
        SortSetting.POSTED, description="Sort order applied when a request names none"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class LifecycleConfig(BaseModel):
    """Interaction/application state machine settings."""

    cas_max_attempts: int = Field(
        3,
        ge=1,
        le=20,
        description="Compare-and-set attempts before giving up on a contended interaction",
    )


class NotificationConfig(BaseModel):
    """Candidate status notification settings."""

    enabled: bool = Field(True, description="Dispatch status notifications at all")
    max_retries: int = Field(
        2, ge=0, le=10, description="Retry attempts after a failed dispatch"
    )
    retry_initial_delay: float = Field(
        1.0, ge=0.0, le=60.0, description="Delay before the first retry (seconds)"
    )
    retry_backoff_multiplier: float = Field(
        2.0, ge=1.0, le=5.0, description="Exponential backoff multiplier for retries"
    )
    max_workers: int = Field(
        4, ge=1, le=32, description="Background threads delivering notifications"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True, "validate_default": True}


class EngineConfig(BaseModel):
    """Root configuration object for the engine.

    Every section is optional; an empty file yields the defaults.
    """

    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    ranking: RankingConfig = Field(default_factory=RankingConfig)
    lifecycle: LifecycleConfig = Field(default_factory=LifecycleConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("scoring", "ranking", "lifecycle", "notifications", "logging", mode="before")
    @classmethod
    def empty_section_means_defaults(cls, v):
        """Treat a section written as bare ``key:`` (YAML null) as defaults."""
        return {} if v is None else v
