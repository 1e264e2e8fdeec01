"""Configuration models for the booking form.

Catalog data (destinations, prices, registered emails) lives here rather than
in the form so it can be replaced per deployment or per test.
"""

from typing import Literal, Self

from pydantic import BaseModel, Field, field_validator, model_validator

from travel_booking.core.constants import TravelClass
from travel_booking.validation.registry import ValidatorRegistry

DEFAULT_DESTINATIONS = ("Barcelona", "Madrid", "Valencia", "Sevilla", "Bilbao", "Mallorca")

DEFAULT_PRICES = {
    TravelClass.tourist.value: 100,
    TravelClass.business.value: 250,
    TravelClass.first.value: 500,
}

DEFAULT_KNOWN_EMAILS = ("test@test.com", "reserva@viajes.com", "admin@travel.com")


class EmailCheckConfig(BaseModel):
    """Asynchronous email uniqueness check settings."""

    delay_seconds: float = Field(default=1.0, ge=0, description="Delay before each lookup")
    timeout_seconds: float | None = Field(
        default=None, gt=0, description="Time allowed for the lookup itself (None: no limit)"
    )
    on_lookup_error: Literal["fail", "accept"] = Field(
        default="fail",
        description=(
            "What a failed or timed out lookup means: "
            "'fail' = report lookupFailed, 'accept' = treat the email as unique"
        ),
    )


class RulesConfig(BaseModel):
    """Rule thresholds and extra per-field rules for the booking form."""

    minimum_age: int = Field(default=18, ge=0, description="Minimum age of the client")
    min_name_length: int = Field(default=3, ge=1, description="Minimum full name length")
    min_passengers: int = Field(default=1, ge=1, description="Lowest passenger count")
    max_passengers: int = Field(default=10, ge=1, description="Highest passenger count")
    extra: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Additional registered validators per field, e.g. {'destination': ['name']}",
    )

    @field_validator("extra")
    @classmethod
    def check_extra_rules(cls, value: dict[str, list[str]]) -> dict[str, list[str]]:
        unknown = sorted(
            {
                name
                for names in value.values()
                for name in names
                if not ValidatorRegistry.is_registered(name)
            }
        )
        if unknown:
            raise ValueError(
                f"Unknown validators {unknown}. "
                f"Available: {ValidatorRegistry.list_validators()}"
            )
        return value

    @model_validator(mode="after")
    def check_passenger_bounds(self) -> Self:
        if self.max_passengers < self.min_passengers:
            raise ValueError("max_passengers must not be lower than min_passengers")
        return self


class BookingSettings(BaseModel):
    """Root configuration model."""

    destinations: list[str] = Field(
        default_factory=lambda: list(DEFAULT_DESTINATIONS), description="Destination catalog"
    )
    prices: dict[str, int] = Field(
        default_factory=lambda: dict(DEFAULT_PRICES),
        description="Base price per passenger, keyed by travel class",
    )
    known_emails: list[str] = Field(
        default_factory=lambda: list(DEFAULT_KNOWN_EMAILS),
        description="Emails the in-memory directory reports as registered",
    )
    email_check: EmailCheckConfig = Field(default_factory=EmailCheckConfig)
    rules: RulesConfig = Field(default_factory=RulesConfig)
    log_level: str = Field(default="INFO", description="Log level for the travel_booking logger")

    def base_price(self, travel_class: object) -> int:
        """Price per passenger for a class; unknown classes cost 0."""
        if not isinstance(travel_class, str):
            return 0
        return self.prices.get(travel_class, 0)
