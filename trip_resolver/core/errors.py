class ScheduleError(Exception):
    """Base class for errors raised by the schedule resolution layer."""


class ParseError(ScheduleError, ValueError):
    """A time or date value could not be parsed or is out of range."""


class InvalidArgument(ScheduleError, ValueError):
    """A query was issued with missing or empty arguments."""


class StoreError(ScheduleError):
    """The schedule store failed to answer a query.

    The underlying driver exception is kept as ``__cause__``.
    """
