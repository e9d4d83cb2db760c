"""Exception taxonomy for the forecast preview pipeline.

Task-mutation declines (unsuitable-hour gate, blank text, out-of-range delete)
are deliberately absent: they are outcomes, not failures.
"""


class HourcastError(Exception):
    """Base class for pipeline failures surfaced to callers."""


class InvalidLocation(HourcastError):
    """Coordinates are missing, non-numeric, non-finite or out of range."""


class FetchError(HourcastError):
    """The forecast data source could not be reached or returned garbage."""


class MalformedForecast(HourcastError):
    """The hourly series is missing a field or its arrays disagree in length."""


class PersistenceReadError(HourcastError):
    """A stored task list could not be decoded. Always recovered locally."""
