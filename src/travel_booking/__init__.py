"""Travel booking form.

Field validators and a reactive form model for a travel reservation: client
identity, trip details, additional passengers and consents, with a derived
destination filter and total price.

Quick start:
    from travel_booking import BookingForm

    form = BookingForm()
    form.set_value("passenger_count", 3)
    form.total_price  # 300
"""

from travel_booking.__version__ import __version__
from travel_booking.config import BookingSettings, ConfigLoader
from travel_booking.core.constants import ControlStatus, TravelClass, TripType
from travel_booking.core.errors import (
    BookingError,
    ConfigError,
    FormStateError,
    LookupFailedError,
)
from travel_booking.forms import (
    BookingForm,
    BookingSink,
    BufferedBookingSink,
    LoggingBookingSink,
    SubmissionResult,
)
from travel_booking.validation import (
    EmailDirectory,
    EmailUniquenessValidator,
    InMemoryEmailDirectory,
    ValidatorRegistry,
)

__all__ = [
    "__version__",
    # Form
    "BookingForm",
    "SubmissionResult",
    "BookingSink",
    "BufferedBookingSink",
    "LoggingBookingSink",
    # Validation
    "ValidatorRegistry",
    "EmailDirectory",
    "EmailUniquenessValidator",
    "InMemoryEmailDirectory",
    # Configuration
    "BookingSettings",
    "ConfigLoader",
    # Enums
    "ControlStatus",
    "TravelClass",
    "TripType",
    # Errors
    "BookingError",
    "ConfigError",
    "FormStateError",
    "LookupFailedError",
]
