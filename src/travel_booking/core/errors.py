"""Core booking errors.

Validation failures are data (see ``travel_booking.validation``), never
exceptions. The errors below signal misuse of the form model, broken
configuration, or a failing external lookup.
"""


class BookingError(Exception):
    """Base class for all travel booking errors."""

    pass


class ConfigError(BookingError):
    """Raised when configuration is invalid."""


class FormStateError(BookingError):
    """Raised when the form model is used incorrectly.

    Unknown field paths and asynchronous validation dispatched outside a
    running event loop both end up here.
    """

    pass


class LookupFailedError(BookingError):
    """Raised by an email directory when a lookup cannot be completed."""

    pass
