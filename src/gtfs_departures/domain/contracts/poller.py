"""Protocol for periodic pollers."""

from typing import Protocol


class PollerProtocol(Protocol):
    """Protocol for background tasks running on a timer."""

    async def start(self) -> None:
        """Start the poller."""
        ...

    async def stop(self) -> None:
        """Stop the poller."""
        ...
