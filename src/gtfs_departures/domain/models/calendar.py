"""Weekly service calendar domain model."""

from dataclasses import dataclass
from datetime import date

WEEKDAY_NAMES = (
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
)


@dataclass(frozen=True)
class Calendar:
    """Which weekdays a service id runs on.

    Start/end dates and holiday exceptions are deliberately ignored.
    """

    service_id: str
    days: tuple[bool, bool, bool, bool, bool, bool, bool]  # Monday first, like date.weekday()

    def is_active_on(self, day: date) -> bool:
        """Check whether the service runs on the weekday of ``day``."""
        return self.days[day.weekday()]

    @classmethod
    def from_weekdays(cls, service_id: str, *weekdays: str) -> "Calendar":
        """Build a calendar from weekday names, e.g. ``("monday", "friday")``."""
        active = {name.lower() for name in weekdays}
        unknown = active - set(WEEKDAY_NAMES)
        if unknown:
            raise ValueError(f"Unknown weekday name(s): {sorted(unknown)}")
        return cls(
            service_id=service_id,
            days=tuple(name in active for name in WEEKDAY_NAMES),  # type: ignore[arg-type]
        )
