"""Validation module for the booking form"""

# Import validators to auto-register them
from travel_booking.validation import rules, validators  # noqa: F401
from travel_booking.validation.email import (
    EmailDirectory,
    EmailUniquenessValidator,
    InMemoryEmailDirectory,
)
from travel_booking.validation.registry import ValidatorRegistry

__all__ = [
    "ValidatorRegistry",
    "EmailDirectory",
    "EmailUniquenessValidator",
    "InMemoryEmailDirectory",
]
