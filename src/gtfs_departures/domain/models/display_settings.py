"""Display settings that affect ordering and filtering of departures."""

from dataclasses import dataclass
from enum import Enum


class SortMode(str, Enum):
    """Which instant orders departures within a row."""

    SCHEDULED = "scheduled"
    ESTIMATED = "estimated"


class RealtimeMode(str, Enum):
    """Kind of realtime feed the engine is paired with."""

    NONE = "none"
    POLLING_DELAY = "polling_delay"
    GTFS_RT = "gtfs_rt"


@dataclass(frozen=True)
class DisplaySettings:
    """Ordering and time-window settings for one broadcast."""

    sort_mode: SortMode = SortMode.SCHEDULED
    grace_period_minutes: float = 5.0  # Keep just-departed trips visible this long
    lookahead_days: int = 2  # Today plus tomorrow
    group_by_stop: bool = True  # Sort by stop name first
    split_by_terminus: bool = True  # Sort by terminus before time
