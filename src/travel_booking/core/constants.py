"""Core constants and enums."""

from enum import Enum


class ControlStatus(str, Enum):
    """Validity state of a form control."""

    VALID = "VALID"
    INVALID = "INVALID"
    PENDING = "PENDING"


class TripType(str, Enum):
    """Kind of trip being booked."""

    oneway = "oneway"
    roundtrip = "roundtrip"


class TravelClass(str, Enum):
    """Cabin class, used as the key into the price table."""

    tourist = "tourist"
    business = "business"
    first = "first"


# Failure kinds reported by the custom validators
INVALID_NAME = "invalidName"
INVALID_PHONE = "invalidPhone"
INVALID_DNI = "invalidDni"
UNDER_AGE = "underAge"
NOT_FUTURE = "notFuture"
EMAIL_TAKEN = "emailTaken"
LOOKUP_FAILED = "lookupFailed"
INVALID_RANGE = "invalidRange"

# Failure kinds reported by the generic rules
REQUIRED = "required"
MIN_LENGTH = "minlength"
MIN = "min"
MAX = "max"
EMAIL = "email"

# Key used for errors attached to a group rather than to one of its fields
RECORD_ERRORS_KEY = "__all__"
