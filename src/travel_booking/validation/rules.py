"""Generic field rules: required, length, numeric bounds and email format.

Except for ``required`` and ``required_true``, every rule lets an empty value
through so it can be combined with ``required`` without reporting twice.
"""

import re
from typing import Any

from travel_booking.core.constants import EMAIL, MAX, MIN, MIN_LENGTH, REQUIRED
from travel_booking.core.types import ValidationErrors
from travel_booking.validation.registry import ValidatorRegistry

EMAIL_PATTERN = re.compile(
    r"^(?=.{1,254}$)(?=.{1,64}@)"
    r"[a-zA-Z0-9!#$%&'*+/=?^_`{|}~-]+(?:\.[a-zA-Z0-9!#$%&'*+/=?^_`{|}~-]+)*"
    r"@[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def is_empty(value: Any) -> bool:
    """True for None and for zero-length strings and collections."""
    if value is None:
        return True
    if isinstance(value, (str, list, tuple, dict)):
        return len(value) == 0
    return False


def _as_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            return None
    return None


@ValidatorRegistry.register("required")
def required(value: Any) -> ValidationErrors | None:
    """Fail on an empty value."""
    return {REQUIRED: True} if is_empty(value) else None


@ValidatorRegistry.register("required_true")
def required_true(value: Any) -> ValidationErrors | None:
    """Fail unless the value is exactly True (consent checkboxes)."""
    return None if value is True else {REQUIRED: True}


@ValidatorRegistry.register("email_format")
def email_format(value: Any) -> ValidationErrors | None:
    """Fail on a value that is not shaped like an email address."""
    if is_empty(value):
        return None
    return None if EMAIL_PATTERN.fullmatch(str(value)) else {EMAIL: True}


@ValidatorRegistry.register("min_length")
def check_min_length(value: Any, *, length: int) -> ValidationErrors | None:
    """Fail on strings (or collections) shorter than ``length``."""
    if is_empty(value) or not hasattr(value, "__len__"):
        return None
    if len(value) < length:
        return {MIN_LENGTH: {"required_length": length, "actual_length": len(value)}}
    return None


@ValidatorRegistry.register("min")
def check_min(value: Any, *, minimum: float) -> ValidationErrors | None:
    """Fail on numbers below ``minimum`` and on non-numbers."""
    if is_empty(value):
        return None
    number = _as_number(value)
    if number is None or number < minimum:
        return {MIN: {"min": minimum, "actual": value}}
    return None


@ValidatorRegistry.register("max")
def check_max(value: Any, *, maximum: float) -> ValidationErrors | None:
    """Fail on numbers above ``maximum`` and on non-numbers."""
    if is_empty(value):
        return None
    number = _as_number(value)
    if number is None or number > maximum:
        return {MAX: {"max": maximum, "actual": value}}
    return None

