"""Pydantic models for trackerdash.

Provides the selection enums, the query value object handed to the
bucketing engine, the bucket type it produces and the validated
configuration models.
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple

from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Window(str, Enum):
    """How far back a chart looks."""

    LAST_HOUR = "last_hour"
    LAST_FIVE_HOURS = "last_five_hours"
    LAST_DAY = "last_day"
    LAST_THREE_DAYS = "last_three_days"


class Granularity(str, Enum):
    """Bucket width."""

    HOURS = "hours"
    MINUTES = "minutes"


class DayRollover(str, Enum):
    """How a day-of-month that went below 1 is mapped into the previous month.

    HEURISTIC counts back from 31 whatever the previous month's length
    (0 is 31, -1 is 30, -2 is 29), the way the tracker dashboard always has.
    CALENDAR uses real date arithmetic.
    """

    HEURISTIC = "heuristic"
    CALENDAR = "calendar"


class Bucket(NamedTuple):
    """One (count, label) slot of a chart series."""

    count: int
    label: str


class StatsQuery(BaseModel):
    """Immutable parameters for one bucketing pass."""

    model_config = {"frozen": True}

    window: Window = Field(default=Window.LAST_THREE_DAYS, description="Lookback window")
    granularity: Granularity = Field(
        default=Granularity.HOURS, description="Bucket width"
    )
    day_rollover: DayRollover = Field(
        default=DayRollover.HEURISTIC,
        description="Previous-month day mapping",
    )
    cumulative: bool = Field(
        default=True,
        description="Report running totals instead of per-bucket counts",
    )


class StatsSourceConfig(BaseModel):
    """Where the tracker statistics snapshot is fetched from."""

    url: str = Field(
        default="http://localhost:8088/stats/data",
        description="Tracker stats data endpoint",
    )
    timeout: float = Field(
        default=10.0,
        ge=0.1,
        le=300.0,
        description="HTTP request timeout in seconds",
    )

    @field_validator("url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Require an http(s) URL."""
        if not v.startswith(("http://", "https://")):
            msg = "Stats URL must start with http:// or https://"
            raise ValueError(msg)
        return v


class DashboardConfig(BaseModel):
    """Default chart selections."""

    window: Window = Field(default=Window.LAST_THREE_DAYS, description="Default window")
    granularity: Granularity = Field(
        default=Granularity.HOURS, description="Default granularity"
    )
    day_rollover: DayRollover = Field(
        default=DayRollover.HEURISTIC,
        description="Previous-month day mapping",
    )
    cumulative: bool = Field(default=True, description="Running-total counts")

    def to_query(self, **overrides: object) -> StatsQuery:
        """Build a query from these defaults, applying non-None overrides."""
        values = {
            "window": self.window,
            "granularity": self.granularity,
            "day_rollover": self.day_rollover,
            "cumulative": self.cumulative,
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return StatsQuery(**values)


class ObservabilityConfig(BaseModel):
    """Observability configuration."""

    log_level: LogLevel = Field(default=LogLevel.WARNING, description="Log level")
    log_file: str | None = Field(None, description="Log file path")
    structured_logging: bool = Field(
        default=False, description="Use structured JSON logging in the log file"
    )
    log_correlation_id: bool = Field(
        default=True,
        description="Include correlation IDs",
    )


class Config(BaseModel):
    """Main configuration model."""

    stats: StatsSourceConfig = Field(
        default_factory=StatsSourceConfig,
        description="Stats source configuration",
    )
    dashboard: DashboardConfig = Field(
        default_factory=DashboardConfig,
        description="Dashboard defaults",
    )
    observability: ObservabilityConfig = Field(
        default_factory=ObservabilityConfig,
        description="Observability configuration",
    )
