"""Shared fixtures for travel_booking tests.

The clock is pinned to TODAY for every date rule and the email check runs
without delay so async tests stay fast.
"""

import logging
from datetime import date
from typing import Any

import pytest

from travel_booking.config.models import BookingSettings, EmailCheckConfig
from travel_booking.forms.booking import BookingForm
from travel_booking.forms.sinks import BufferedBookingSink

TODAY = date(2026, 10, 19)


@pytest.fixture
def today() -> date:
    return TODAY


@pytest.fixture
def settings() -> BookingSettings:
    return BookingSettings(email_check=EmailCheckConfig(delay_seconds=0))


@pytest.fixture
def sink() -> BufferedBookingSink:
    return BufferedBookingSink()


@pytest.fixture
def booking_form(settings: BookingSettings, sink: BufferedBookingSink) -> BookingForm:
    return BookingForm(settings, sink=sink, today=lambda: TODAY)


@pytest.fixture
def valid_booking() -> dict[str, Any]:
    """Field values that satisfy every rule on TODAY."""
    return {
        "full_name": "María Núñez",
        "national_id": "12345678Z",
        "email": "new@unique.com",
        "phone": "612345678",
        "birth_date": "1990-05-17",
        "destination": "Barcelona",
        "departure_date": "2026-11-01",
        "return_date": "2026-11-10",
        "trip_type": "roundtrip",
        "travel_class": "business",
        "passenger_count": 1,
        "terms": True,
        "newsletter": False,
    }


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Undo setup_logging() so caplog sees package records in later tests."""
    yield
    package_logger = logging.getLogger("travel_booking")
    package_logger.handlers.clear()
    package_logger.propagate = True
    package_logger.setLevel(logging.NOTSET)
