"""Observability helpers."""

from travel_booking.observability.logging import ContextLogger, setup_logging

__all__ = ["ContextLogger", "setup_logging"]
