"""Fill and submit a booking form from a YAML record."""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.table import Table

from travel_booking.config.loader import ConfigLoader
from travel_booking.config.models import BookingSettings
from travel_booking.core.errors import ConfigError
from travel_booking.forms.booking import BookingForm, SubmissionResult
from travel_booking.forms.sinks import BufferedBookingSink

logger = logging.getLogger(__name__)


@dataclass
class SubmitConfig:
    """Inputs of a CLI submission."""

    booking_path: Path
    config_path: Path | None = None


def load_settings(config_path: Path | None) -> BookingSettings:
    if config_path is None:
        return BookingSettings()
    return ConfigLoader.load(config_path)


def load_booking(path: Path) -> dict[str, Any]:
    """Read a booking record from YAML.

    Raises:
        FileNotFoundError: If the file does not exist
        ConfigError: If the file does not hold a mapping
    """
    if not path.exists():
        raise FileNotFoundError(f"Booking file not found: {path}")
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping of field values in {path}")
    return data


async def run_submission(
    form: BookingForm, values: dict[str, Any]
) -> SubmissionResult:
    """Apply values, wait for async checks, then submit."""
    form.update(values)
    await form.settle()
    return await form.submit()


def render_result(console: Console, form: BookingForm, result: SubmissionResult) -> None:
    if result.accepted:
        console.print(f"[green]Booking accepted[/] (total price: {form.total_price})")
        console.print_json(json.dumps(result.record, default=str))
        return

    console.print(f"[red]Booking refused[/] (status: {result.status.value})")
    table = Table("Field", "Errors")
    for path, errors in result.errors.items():
        table.add_row(path, ", ".join(sorted(errors)))
    console.print(table)


async def submit_booking(
    config: SubmitConfig, console: Console, settings: BookingSettings | None = None
) -> SubmissionResult:
    if settings is None:
        settings = load_settings(config.config_path)
    values = load_booking(config.booking_path)
    sink = BufferedBookingSink()
    form = BookingForm(settings, sink=sink)

    logger.debug("Submitting booking", extra={"fields": sorted(values)})
    result = await run_submission(form, values)
    render_result(console, form, result)
    return result
