"""Configuration module for the booking form."""

from travel_booking.config.loader import ConfigLoader
from travel_booking.config.models import BookingSettings, EmailCheckConfig, RulesConfig

__all__ = ["BookingSettings", "ConfigLoader", "EmailCheckConfig", "RulesConfig"]
