"""Main CLI entry point for travel_booking"""

import asyncio
from pathlib import Path

import typer
import yaml
from rich.console import Console

from travel_booking.__version__ import __version__
from travel_booking.core.errors import BookingError
from travel_booking.observability.logging import setup_logging

app = typer.Typer(
    name="travel-booking",
    help="Travel booking form - validate and price reservations",
    add_completion=False,
)
console = Console()


def version_callback(value: bool) -> None:
    """Print version and exit"""
    if value:
        typer.echo(f"travel-booking version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """Travel booking form - validate and price reservations"""
    pass


@app.command()
def destinations(
    search: str = typer.Argument("", help="Case-insensitive text to filter by"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to booking.yaml"),
) -> None:
    """List the destinations matching a search text."""
    from travel_booking.cli.submit_runner import load_settings
    from travel_booking.forms.booking import BookingForm

    form = BookingForm(load_settings(config))
    form.set_search(search)
    if not form.filtered_destinations:
        console.print("[yellow]No destinations match[/]")
        return
    for destination in form.filtered_destinations:
        console.print(destination)


@app.command()
def quote(
    travel_class: str = typer.Option("tourist", "--class", help="Travel class"),
    passengers: int = typer.Option(1, "--passengers", "-p", help="Number of passengers"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to booking.yaml"),
) -> None:
    """Print the total price for a class and passenger count."""
    from travel_booking.cli.submit_runner import load_settings
    from travel_booking.forms.booking import BookingForm

    form = BookingForm(load_settings(config))
    form.set_value("travel_class", travel_class)
    form.set_value("passenger_count", passengers)
    console.print(f"Total price: {form.total_price}")


@app.command()
def submit(
    booking: Path = typer.Argument(..., help="YAML file with the booking field values"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to booking.yaml"),
    log_level: str | None = typer.Option(
        None, "--log-level", "-l", help="Log level (defaults to the configured one)"
    ),
) -> None:
    """Fill the booking form from a file and submit it."""
    from travel_booking.cli.submit_runner import SubmitConfig, load_settings, submit_booking

    try:
        settings = load_settings(config)
        setup_logging(level=(log_level or settings.log_level).upper())
        result = asyncio.run(submit_booking(SubmitConfig(booking, config), console, settings))
    except (BookingError, FileNotFoundError, yaml.YAMLError) as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    if not result.accepted:
        raise typer.Exit(1)


def cli() -> None:
    """Entry point for CLI"""
    app()


if __name__ == "__main__":
    cli()
