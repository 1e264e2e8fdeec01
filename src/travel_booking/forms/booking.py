"""Booking form controller.

Owns the booking record, wires the validators to its fields and keeps the
derived state (filtered destinations, additional passengers, total price) in
step with user input.
"""

import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import date
from typing import Any, cast

from travel_booking.config.models import BookingSettings
from travel_booking.core.constants import ControlStatus, TravelClass, TripType
from travel_booking.core.errors import ConfigError, FormStateError
from travel_booking.core.types import AsyncValidatorFn, ValidationErrors, ValidatorFn
from travel_booking.forms.controls import AbstractControl, FieldControl, FormArray, FormGroup
from travel_booking.forms.sinks import BookingSink, LoggingBookingSink
from travel_booking.observability.logging import ContextLogger
from travel_booking.validation.email import (
    EmailDirectory,
    EmailUniquenessValidator,
    InMemoryEmailDirectory,
)
from travel_booking.validation.registry import ValidatorRegistry

ADDITIONAL_PASSENGERS = "additional_passengers"
PASSENGER_COUNT = "passenger_count"


@dataclass(frozen=True)
class SubmissionResult:
    """Outcome of a submit attempt."""

    accepted: bool
    status: ControlStatus
    record: dict[str, Any] | None = None
    errors: dict[str, ValidationErrors] = field(default_factory=dict)


def _as_count(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return value
    try:
        return int(float(value))
    except (TypeError, ValueError):
        return 0


class BookingForm:
    """Travel booking form.

    Field rules are resolved by name from ``ValidatorRegistry``; the
    settings' ``rules.extra`` adds registered validators to any top-level
    field.

    Args:
        settings: Catalog data and rule thresholds
        sink: Receives accepted records (defaults to logging them)
        email_directory: Lookup behind the email uniqueness check (defaults to
            the settings' known emails)
        today: Clock for the date rules, mainly for tests
        session_id: Identifier attached to every log record of this form

    Raises:
        ConfigError: If ``rules.extra`` names a field the form does not have
    """

    def __init__(
        self,
        settings: BookingSettings | None = None,
        *,
        sink: BookingSink | None = None,
        email_directory: EmailDirectory | None = None,
        today: Callable[[], date] | None = None,
        session_id: str | None = None,
    ) -> None:
        self.settings = settings or BookingSettings()
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self._logger = ContextLogger(__name__).with_context(session_id=self.session_id)
        self._sink = sink or LoggingBookingSink()
        self._today = today
        self.email_validator = EmailUniquenessValidator(
            email_directory or InMemoryEmailDirectory(self.settings.known_emails),
            delay=self.settings.email_check.delay_seconds,
            timeout=self.settings.email_check.timeout_seconds,
            on_lookup_error=self.settings.email_check.on_lookup_error,
        )

        self.search = FieldControl("")
        self.filtered_destinations: list[str] = list(self.settings.destinations)
        self.total_price = 0

        self.form = self._build_form()
        self._wire_listeners()
        self._calculate_price()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    def _build_form(self) -> FormGroup:
        rules = self.settings.rules
        rule = ValidatorRegistry.build
        dated = {"today": self._today}

        fields: dict[str, tuple[Any, list[ValidatorFn], list[AsyncValidatorFn]]] = {
            # Client
            "full_name": (
                "",
                [
                    rule("required"),
                    rule("min_length", length=rules.min_name_length),
                    rule("name"),
                ],
                [],
            ),
            "national_id": ("", [rule("required"), rule("national_id")], []),
            "email": ("", [rule("required"), rule("email_format")], [self.email_validator]),
            "phone": ("", [rule("required"), rule("phone")], []),
            "birth_date": (
                "",
                [rule("required"), rule("minimum_age", minimum=rules.minimum_age, **dated)],
                [],
            ),
            # Trip
            "destination": ("", [rule("required")], []),
            "departure_date": ("", [rule("required"), rule("future_date", **dated)], []),
            "return_date": ("", [rule("required")], []),
            "trip_type": (TripType.oneway.value, [rule("required")], []),
            "travel_class": (TravelClass.tourist.value, [rule("required")], []),
            PASSENGER_COUNT: (
                rules.min_passengers,
                [
                    rule("required"),
                    rule("min", minimum=rules.min_passengers),
                    rule("max", maximum=rules.max_passengers),
                ],
                [],
            ),
            # Consents
            "terms": (False, [rule("required_true")], []),
            "newsletter": (False, [], []),
        }

        unknown = sorted(set(rules.extra) - set(fields))
        if unknown:
            raise ConfigError(f"Extra rules configured for unknown fields: {unknown}")

        controls: dict[str, AbstractControl] = {}
        for name, (value, validators, async_validators) in fields.items():
            extra = [rule(extra_name) for extra_name in rules.extra.get(name, [])]
            controls[name] = FieldControl(value, validators + extra, async_validators)
            if name == PASSENGER_COUNT:
                controls[ADDITIONAL_PASSENGERS] = FormArray()

        return FormGroup(controls, validators=[rule("date_range")])

    def _build_passenger(self) -> FormGroup:
        rule = ValidatorRegistry.build
        return FormGroup(
            {
                "name": FieldControl("", [rule("required")]),
                "age": FieldControl("", [rule("required"), rule("min", minimum=0)]),
                "relation": FieldControl("", [rule("required")]),
            }
        )

    def _wire_listeners(self) -> None:
        self.search.subscribe(self._filter_destinations)
        # Registered before the form-wide listener: resize, then price
        self.form.get(PASSENGER_COUNT).subscribe(self._on_passenger_count_change)
        self.form.subscribe(lambda _record: self._calculate_price())

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def set_search(self, text: str | None) -> None:
        """Update the destination search text."""
        self.search.set_value(text)

    def set_value(self, path: str, value: Any) -> None:
        """Set one field, addressed by dotted path.

        Raises:
            FormStateError: If the path does not name a field
        """
        control = self.form.get(path)
        if not isinstance(control, FieldControl):
            raise FormStateError(f"'{path}' is not a field")
        control.set_value(value)

    def update(self, values: Mapping[str, Any]) -> None:
        """Set several fields at once.

        ``additional_passengers`` may be given as a list of mappings; it is
        applied after ``passenger_count`` so the entries exist.
        """
        passengers = values.get(ADDITIONAL_PASSENGERS)
        ordered = sorted(
            (item for item in values.items() if item[0] != ADDITIONAL_PASSENGERS),
            key=lambda item: item[0] != PASSENGER_COUNT,
        )
        for path, value in ordered:
            self.set_value(path, value)

        for index, passenger in enumerate(passengers or []):
            for name, value in passenger.items():
                self.set_value(f"{ADDITIONAL_PASSENGERS}.{index}.{name}", value)

    async def submit(self) -> SubmissionResult:
        """Deliver the record to the sink if every rule currently holds.

        A form with an email check still in flight is not valid yet and is
        refused like an invalid one.
        """
        status = self.form.status
        if status is ControlStatus.VALID:
            record = self.record
            await self._sink.deliver(record)
            self._logger.info(
                "Booking submitted",
                extra={
                    "destination": record["destination"],
                    "passenger_count": record[PASSENGER_COUNT],
                    "total_price": self.total_price,
                },
            )
            return SubmissionResult(accepted=True, status=status, record=record)

        self.form.mark_all_as_touched()
        errors = self.errors_by_field()
        self._logger.info(
            "Booking refused",
            extra={"status": status.value, "fields": sorted(errors)},
        )
        return SubmissionResult(accepted=False, status=status, errors=errors)

    async def settle(self) -> None:
        """Wait for every in-flight async validation to resolve."""
        await self.form.settle()

    # ------------------------------------------------------------------
    # Derived state
    # ------------------------------------------------------------------

    @property
    def record(self) -> dict[str, Any]:
        return self.form.value

    @property
    def status(self) -> ControlStatus:
        return self.form.status

    @property
    def valid(self) -> bool:
        return self.form.valid

    @property
    def additional_passengers(self) -> FormArray:
        return cast(FormArray, self.form.get(ADDITIONAL_PASSENGERS))

    def errors_by_field(self) -> dict[str, ValidationErrors]:
        """Current errors keyed by dotted field path (``__all__`` for the record)."""
        return dict(self.form.iter_errors())

    def adjust_additional_passengers(self, total: Any) -> None:
        """Resize the additional passengers to ``total - 1`` entries.

        New entries are appended at the end; surplus entries are removed from
        the end.
        """
        extra_needed = max(_as_count(total) - 1, 0)
        passengers = self.additional_passengers
        if len(passengers) == extra_needed:
            return

        self._logger.debug(
            "Resizing additional passengers",
            extra={"current": len(passengers), "target": extra_needed},
        )
        while len(passengers) < extra_needed:
            passengers.append(self._build_passenger())
        while len(passengers) > extra_needed:
            passengers.remove_at(len(passengers) - 1)

    def _on_passenger_count_change(self, count: Any) -> None:
        self.adjust_additional_passengers(count)
        self._calculate_price()

    def _calculate_price(self) -> None:
        base = self.settings.base_price(self.form.get("travel_class").value)
        quantity = _as_count(self.form.get(PASSENGER_COUNT).value)
        # Nothing sensible to price yet: count the primary traveler only
        if quantity < 1:
            quantity = 1
        self.total_price = base * quantity

    def _filter_destinations(self, text: Any) -> None:
        needle = str(text or "").lower()
        self.filtered_destinations = [
            destination
            for destination in self.settings.destinations
            if needle in destination.lower()
        ]
