"""Exceptions raised by the departures engine and its collaborators."""


class GtfsDeparturesError(Exception):
    """Base class for all errors raised by this package."""


class ScheduleStoreUnavailableError(GtfsDeparturesError):
    """The static schedule could not be imported or queried.

    No departures can be produced without a schedule, so this propagates to
    the caller as a startup failure.
    """


class RealtimeFeedError(GtfsDeparturesError):
    """A realtime feed could not be fetched or decoded."""
