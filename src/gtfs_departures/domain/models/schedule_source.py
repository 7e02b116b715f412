"""Schedule source domain model."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ScheduleSource:
    """Where to import a static GTFS archive from.

    Exactly one of ``url`` or ``path`` should be set.
    """

    url: str | None = None
    path: str | None = None
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def location(self) -> str:
        return self.url or self.path or "<unset>"
