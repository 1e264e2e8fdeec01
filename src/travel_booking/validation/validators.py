"""Built-in field validators for the booking form.

Each validator receives the current value of one field (``validate_date_range``
receives the whole record) and returns ``None`` when the value is valid or a
dict keyed by failure kind. Required-ness is left to the generic rules in
``travel_booking.validation.rules``.
"""

import re
from collections.abc import Callable, Mapping
from datetime import date, datetime
from typing import Any

from travel_booking.core.constants import (
    INVALID_DNI,
    INVALID_NAME,
    INVALID_PHONE,
    INVALID_RANGE,
    NOT_FUTURE,
    UNDER_AGE,
)
from travel_booking.core.types import ValidationErrors
from travel_booking.validation.registry import ValidatorRegistry

NAME_PATTERN = re.compile(r"^[a-zA-ZáéíóúÁÉÍÓÚñÑ\s]+$")
PHONE_PATTERN = re.compile(r"^[679][0-9]{8}$")

# Control letters of the Spanish DNI/NIE, in checksum order
CONTROL_LETTERS = "TRWAGMYFPDXBNJZSQVHLCKE"
NATIONAL_ID_PATTERN = re.compile(
    rf"^[0-9]{{8}}[{CONTROL_LETTERS}]$|^[XYZ][0-9]{{7}}[{CONTROL_LETTERS}]$",
    re.IGNORECASE | re.ASCII,
)

ADULT_AGE = 18

Today = Callable[[], date]


def _as_text(value: Any) -> str:
    # Text inputs hand over "" for an empty field
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def coerce_date(value: Any) -> date | None:
    """
    Interpret a field value as a calendar date.

    Accepts ``date``, ``datetime`` (the time of day is dropped) or an ISO
    string (``YYYY-MM-DD``, optionally followed by a time).

    Returns:
        The date, or None for an empty value

    Raises:
        ValueError: If the value cannot be read as a date
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text)
        except ValueError:
            return datetime.fromisoformat(text).date()
    raise ValueError(f"Unsupported date value: {value!r}")


def calculate_age(birth_date: date, on: date) -> int:
    """Whole years between birth_date and on."""
    age = on.year - birth_date.year
    # Birthday not reached yet this year
    if (on.month, on.day) < (birth_date.month, birth_date.day):
        age -= 1
    return age


@ValidatorRegistry.register("name")
def validate_name(value: Any) -> ValidationErrors | None:
    """
    Validate a person's name: letters, accented vowels, ñ/Ñ and whitespace.

    Examples:
        >>> validate_name("José Ñúñez")
        >>> validate_name("R2D2")
        {'invalidName': True}
    """
    return None if NAME_PATTERN.fullmatch(_as_text(value)) else {INVALID_NAME: True}


@ValidatorRegistry.register("phone")
def validate_phone(value: Any) -> ValidationErrors | None:
    """Validate a 9 digit phone number starting with 6, 7 or 9."""
    return None if PHONE_PATTERN.fullmatch(_as_text(value)) else {INVALID_PHONE: True}


@ValidatorRegistry.register("national_id")
def validate_national_id(value: Any) -> ValidationErrors | None:
    """
    Validate DNI (8 digits + letter) or NIE (X/Y/Z + 7 digits + letter) syntax.

    Only the shape is checked: any letter of the control sequence is
    accepted, whether or not it is the checksum letter for the digits.
    """
    return None if NATIONAL_ID_PATTERN.fullmatch(_as_text(value)) else {INVALID_DNI: True}


@ValidatorRegistry.register("minimum_age")
def validate_minimum_age(
    value: Any, *, minimum: int = ADULT_AGE, today: Today | None = None
) -> ValidationErrors | None:
    """
    Validate that a birth date belongs to someone at least ``minimum`` years old.

    An empty value is not evaluated yet and passes. A value that is not a
    date fails.
    """
    if not value:
        return None
    try:
        birth_date = coerce_date(value)
    except ValueError:
        return {UNDER_AGE: True}
    if birth_date is None:
        return None

    current = (today or date.today)()
    return None if calculate_age(birth_date, current) >= minimum else {UNDER_AGE: True}


@ValidatorRegistry.register("future_date")
def validate_future_date(value: Any, *, today: Today | None = None) -> ValidationErrors | None:
    """Validate that a date is strictly after today, compared at day precision."""
    try:
        departure = coerce_date(value)
    except ValueError:
        return {NOT_FUTURE: True}
    if departure is None:
        return {NOT_FUTURE: True}

    current = (today or date.today)()
    return None if departure > current else {NOT_FUTURE: True}


@ValidatorRegistry.register("date_range")
def validate_date_range(record: Mapping[str, Any]) -> ValidationErrors | None:
    """
    Validate that the return date is strictly after the departure date.

    Applied to the whole record. Until both dates are filled in the rule
    cannot be evaluated and passes.
    """
    start = record.get("departure_date")
    end = record.get("return_date")
    if not start or not end:
        return None
    try:
        departure = coerce_date(start)
        arrival = coerce_date(end)
    except ValueError:
        return {INVALID_RANGE: True}
    if departure is None or arrival is None:
        return None
    return None if arrival > departure else {INVALID_RANGE: True}
