"""12-factor configuration adapter using environment variables and TOML config."""

from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

try:
    import tomllib  # Python 3.11+
except ImportError:
    import tomli as tomllib  # type: ignore[no-redef]  # Fallback for older Python

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from gtfs_departures.domain.models.display_settings import (
    DisplaySettings,
    RealtimeMode,
    SortMode,
)
from gtfs_departures.domain.models.schedule_source import ScheduleSource

_DISPLAY_KEYS = (
    "grace_period_minutes",
    "group_by_stop",
    "split_by_terminus",
)
_INTERVAL_KEYS = (
    "schedule_refresh_hours",
    "realtime_refresh_seconds",
    "broadcast_interval_seconds",
)


class AppConfig(BaseSettings):
    """Application configuration following 12-factor principles."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_assignment=True,
    )

    # Static schedule
    schedule_url: str | None = Field(default=None, description="URL of the GTFS zip archive")
    schedule_path: str | None = Field(
        default=None, description="Local path of the GTFS zip archive (used if no URL is set)"
    )
    request_timeout_seconds: int = Field(
        default=60, description="Timeout for schedule and realtime HTTP requests in seconds"
    )

    # Realtime feed
    realtime_mode: str = Field(
        default="none", description="Realtime source: 'none', 'polling_delay' or 'gtfs_rt'"
    )
    realtime_urls: list[str] = Field(
        default_factory=list, description="Realtime feed URLs (merged into one snapshot)"
    )
    realtime_format: str = Field(
        default="protobuf", description="GTFS-RT encoding: 'protobuf' or 'json'"
    )

    # Timers
    schedule_refresh_hours: float = Field(
        default=12.0, description="Interval between static schedule re-imports in hours"
    )
    realtime_refresh_seconds: int = Field(
        default=30, description="Interval between realtime feed refreshes in seconds"
    )
    broadcast_interval_seconds: int = Field(
        default=60, description="Interval between departure broadcasts in seconds"
    )

    # Display
    timezone: str | None = Field(
        default=None,
        description="IANA timezone of the schedule, e.g. America/New_York. Defaults to local",
    )
    sort_mode: str = Field(
        default="scheduled", description="Order rows by 'scheduled' or 'estimated' time"
    )
    grace_period_minutes: float = Field(
        default=5.0, description="Keep departed trips visible for this many minutes"
    )
    lookahead_days: int = Field(default=2, description="Number of service days to expand")
    group_by_stop: bool = Field(default=True, description="Order departures by stop name first")
    split_by_terminus: bool = Field(
        default=True, description="Order departures by terminus before time"
    )

    # TOML config file path
    config_file: str | None = Field(
        default="config.example.toml",
        description="Path to TOML configuration file with queries and feed settings",
    )

    @field_validator("sort_mode")
    @classmethod
    def validate_sort_mode(cls, v: str) -> str:
        """Validate sort mode is either 'scheduled' or 'estimated'."""
        if v.lower() not in {mode.value for mode in SortMode}:
            raise ValueError("sort_mode must be either 'scheduled' or 'estimated'")
        return v.lower()

    @field_validator("realtime_mode")
    @classmethod
    def validate_realtime_mode(cls, v: str) -> str:
        """Validate realtime mode is one of 'none', 'polling_delay' or 'gtfs_rt'."""
        normalized = v.lower().replace("-", "_")
        if normalized not in {mode.value for mode in RealtimeMode}:
            raise ValueError("realtime_mode must be one of 'none', 'polling_delay' or 'gtfs_rt'")
        return normalized

    @field_validator("realtime_format")
    @classmethod
    def validate_realtime_format(cls, v: str) -> str:
        """Validate realtime format is either 'protobuf' or 'json'."""
        if v.lower() not in ("protobuf", "json"):
            raise ValueError("realtime_format must be either 'protobuf' or 'json'")
        return v.lower()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str | None) -> str | None:
        """Validate timezone is a known IANA name."""
        if v is None or v == "":
            return None
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ValueError(f"Unknown timezone: {v}") from e
        return v

    @field_validator("lookahead_days")
    @classmethod
    def validate_lookahead_days(cls, v: int) -> int:
        """Validate at least one service day is expanded."""
        if v < 1:
            raise ValueError("lookahead_days must be at least 1")
        return v

    def _load_toml_data(self) -> dict[str, Any]:
        """Load and parse TOML file, updating feed and display settings."""
        if not self.config_file:
            raise ValueError("config_file must be set to load queries configuration")

        config_path = Path(self.config_file)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, "rb") as f:
            toml_data = tomllib.load(f)

        schedule = toml_data.get("schedule", {})
        if "url" in schedule:
            self.schedule_url = schedule["url"]
        if "path" in schedule:
            self.schedule_path = schedule["path"]
        if "refresh_hours" in schedule:
            self.schedule_refresh_hours = float(schedule["refresh_hours"])

        realtime = toml_data.get("realtime", {})
        if "mode" in realtime:
            self.realtime_mode = self.validate_realtime_mode(str(realtime["mode"]))
        if "urls" in realtime:
            urls = realtime["urls"]
            if not isinstance(urls, list):
                raise ValueError("TOML config 'realtime.urls' must be a list")
            self.realtime_urls = [str(url) for url in urls]
        if "format" in realtime:
            self.realtime_format = self.validate_realtime_format(str(realtime["format"]))
        if "refresh_seconds" in realtime:
            self.realtime_refresh_seconds = int(realtime["refresh_seconds"])

        display = toml_data.get("display", {})
        for key in _DISPLAY_KEYS + _INTERVAL_KEYS:
            if key in display:
                setattr(self, key, display[key])
        if "sort_mode" in display:
            self.sort_mode = self.validate_sort_mode(str(display["sort_mode"]))
        if "timezone" in display:
            self.timezone = self.validate_timezone(display["timezone"])
        if "lookahead_days" in display:
            self.lookahead_days = self.validate_lookahead_days(int(display["lookahead_days"]))

        return toml_data

    def get_queries_config(self) -> list[dict[str, Any]]:
        """Parse and return the [[queries]] entries from the TOML file.

        Also applies [schedule], [realtime] and [display] settings found in
        the file.
        """
        toml_data = self._load_toml_data()

        queries = toml_data.get("queries", [])
        if not isinstance(queries, list):
            raise ValueError("TOML config 'queries' must be a list")
        return queries

    def get_schedule_source(self) -> ScheduleSource:
        """Build the schedule source from the URL or path setting."""
        if not self.schedule_url and not self.schedule_path:
            raise ValueError("Either schedule_url or schedule_path must be configured")
        return ScheduleSource(url=self.schedule_url or None, path=self.schedule_path or None)

    def get_display_settings(self) -> DisplaySettings:
        """Build display settings for the engine."""
        return DisplaySettings(
            sort_mode=SortMode(self.sort_mode),
            grace_period_minutes=self.grace_period_minutes,
            lookahead_days=self.lookahead_days,
            group_by_stop=self.group_by_stop,
            split_by_terminus=self.split_by_terminus,
        )

    def get_realtime_mode(self) -> RealtimeMode:
        """Realtime mode, downgraded to 'none' when no feed URL is configured."""
        mode = RealtimeMode(self.realtime_mode)
        if mode is not RealtimeMode.NONE and not self.realtime_urls:
            return RealtimeMode.NONE
        return mode

    def get_timezone(self) -> ZoneInfo | None:
        """Configured timezone, or None for the process's local time."""
        return ZoneInfo(self.timezone) if self.timezone else None
