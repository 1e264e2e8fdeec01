"""Reactive form model and the booking form built on it."""

from travel_booking.forms.booking import BookingForm, SubmissionResult
from travel_booking.forms.controls import AbstractControl, FieldControl, FormArray, FormGroup
from travel_booking.forms.sinks import BookingSink, BufferedBookingSink, LoggingBookingSink

__all__ = [
    "BookingForm",
    "SubmissionResult",
    "AbstractControl",
    "FieldControl",
    "FormArray",
    "FormGroup",
    "BookingSink",
    "BufferedBookingSink",
    "LoggingBookingSink",
]
