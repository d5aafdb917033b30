"""
Main CLI application using Typer.
"""

import asyncio
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.json_store import JsonBookingStore
from ..adapters.mail_notifier import HttpMailNotifier, LoggingNotifier
from ..api.handlers import BookingRequest
from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import BookingAlreadyCancelled, BookingNotFound, BookingRejected, CalendarNotFound
from ..domain.hours import clock_to_hour
from ..services.booking_service import BookingService

app = typer.Typer(
    name="schedly",
    help="Book conflict-free appointment slots on recurring calendars",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")
]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """Schedly command line interface."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    try:
        return AppConfig.load_from_yaml(config_path)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_store(config: AppConfig) -> JsonBookingStore:
    try:
        return JsonBookingStore(config.data_file)
    except ValueError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


def _build_service(config: AppConfig, store: Optional[JsonBookingStore] = None) -> BookingService:
    """Wire the JSON store and the configured notifier into the service."""
    store = store or _build_store(config)

    settings = config.notifications
    if settings.enabled:
        notifier = HttpMailNotifier(
            endpoint=settings.endpoint,
            api_key=settings.api_key,
            sender=settings.sender,
            timeout_seconds=settings.timeout_seconds
        )
    else:
        notifier = LoggingNotifier()

    return BookingService(store=store, notifier=notifier)


def _calendar_timezone(store: JsonBookingStore, calendar_ref: str, fallback: str) -> str:
    """Day shortcuts follow the calendar's own clock, like admission does."""
    try:
        return asyncio.run(store.fetch_calendar(calendar_ref)).rules.timezone
    except CalendarNotFound:
        return fallback


def _parse_day(value: str, tz: str) -> date:
    """Accept YYYY-MM-DD, 'today' or 'tomorrow'."""
    shortcuts = {"today": 0, "tomorrow": 1}
    if value.lower() in shortcuts:
        return pendulum.today(tz).add(days=shortcuts[value.lower()]).date()

    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date '{value}': {e}[/red]")
        raise typer.Exit(1)


def _parse_hour(value: str) -> float:
    """Accept hour-fractions (9.5) or wall-clock times (09:30)."""
    try:
        if ":" in value:
            return clock_to_hour(value)
        return float(value)
    except ValueError as e:
        console.print(f"[red]Could not parse time '{value}': {e}[/red]")
        raise typer.Exit(1)


@app.command()
def calendars(config_file: ConfigOption = None):
    """
    List all calendars in the data file.
    """
    config = _load_config(config_file)
    store = _build_store(config)

    if not store.calendars:
        console.print("[yellow]No calendars defined in the data file.[/yellow]")
        return

    table = Table(title="Calendars", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="bold yellow")
    table.add_column("Name")
    table.add_column("Days")
    table.add_column("Hours")
    table.add_column("Slot", justify="right")

    for calendar in store.calendars.values():
        rules = calendar.rules
        table.add_row(
            calendar.id,
            calendar.name,
            ", ".join(name[:3] for name in rules.open_weekday_names()) or "-",
            str(rules.hours_open),
            f"{rules.slot_duration_minutes} min"
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def slots(
    calendar: Annotated[str, typer.Argument(help="Calendar id or public id")],
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD), 'today' or 'tomorrow'")],
    config_file: ConfigOption = None,
):
    """
    Show the open slots of a calendar on a given day.

    Examples:

        schedly slots consulting 2024-11-25
        schedly slots consulting tomorrow
    """
    config = _load_config(config_file)
    store = _build_store(config)
    service = _build_service(config, store)
    target = _parse_day(day, _calendar_timezone(store, calendar, config.timezone))

    try:
        availability = asyncio.run(service.available_slots(calendar, target))
    except CalendarNotFound as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print()
    if availability.is_closed:
        rules = availability.calendar.rules
        console.print(
            f"[yellow]No availability on {target.isoformat()} ({availability.reason.value}).[/yellow]\n"
            f"Open days: {', '.join(rules.open_weekday_names()) or 'none'}"
        )
    elif not availability.slots:
        console.print(f"[yellow]All slots on {target.isoformat()} are taken.[/yellow]")
    else:
        console.print(
            f"[bold green]{len(availability.slots)} open slot(s) on {target.isoformat()}:[/bold green]\n"
        )
        for slot in availability.slots:
            console.print(f"  {slot}")
    console.print()


@app.command()
def book(
    calendar: Annotated[str, typer.Argument(help="Calendar id or public id")],
    day: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD), 'today' or 'tomorrow'")],
    start: Annotated[str, typer.Argument(help="Start time (9.5 or 09:30)")],
    end: Annotated[str, typer.Argument(help="End time (10.5 or 10:30)")],
    name: Annotated[str, typer.Option("--name", "-n", help="Name of the person booking")],
    email: Annotated[str, typer.Option("--email", "-e", help="Email of the person booking")],
    notes: Annotated[str, typer.Option("--notes", help="Optional notes (max. 500 characters)")] = "",
    config_file: ConfigOption = None,
):
    """
    Book a slot on a calendar.

    Example:

        schedly book consulting 2024-11-25 10:00 11:00 --name "Jane Doe" --email jane@example.com
    """
    config = _load_config(config_file)
    store = _build_store(config)
    service = _build_service(config, store)

    try:
        request = BookingRequest(
            calendar=calendar,
            day=_parse_day(day, _calendar_timezone(store, calendar, config.timezone)),
            start_time=_parse_hour(start),
            end_time=_parse_hour(end),
            name=name,
            email=email,
            notes=notes,
        )
    except ValidationError as e:
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"])
            console.print(f"[bold red]Invalid {field}:[/bold red] {escape(error['msg'])}")
        raise typer.Exit(1)

    try:
        booking = asyncio.run(
            service.admit_booking(
                calendar_ref=request.calendar,
                day=request.day,
                start_hour=request.start_time,
                end_hour=request.end_time,
                contact=request.contact(),
            )
        )
    except CalendarNotFound as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    except BookingRejected as e:
        console.print(f"[bold red]Rejected ({e.kind}):[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[green]✓ Booked:[/green] {booking.format_display()}")
    console.print(f"  Booking id: [bold]{booking.id}[/bold]\n")


@app.command()
def bookings(
    calendar: Annotated[str, typer.Argument(help="Calendar id or public id")],
    config_file: ConfigOption = None,
):
    """
    List all bookings of a calendar.
    """
    config = _load_config(config_file)
    service = _build_service(config)

    try:
        items = asyncio.run(service.list_bookings(calendar))
    except CalendarNotFound as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if not items:
        console.print("[yellow]No bookings yet.[/yellow]")
        return

    table = Table(title="Bookings", show_header=True, header_style="bold cyan")
    table.add_column("ID", style="dim")
    table.add_column("When")
    table.add_column("Name", style="bold yellow")
    table.add_column("Email")
    table.add_column("Status")

    for booking in items:
        status_style = "green" if booking.is_confirmed else "red"
        table.add_row(
            booking.id,
            booking.format_display(),
            booking.name,
            booking.email,
            f"[{status_style}]{booking.status.value}[/{status_style}]"
        )

    console.print()
    console.print(table)
    console.print()


@app.command()
def cancel(
    booking_id: Annotated[str, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
):
    """
    Cancel a booking and release its slot.
    """
    config = _load_config(config_file)
    service = _build_service(config)

    try:
        booking = asyncio.run(service.cancel_booking(booking_id))
    except (BookingNotFound, BookingAlreadyCancelled) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    console.print(f"\n[green]✓ Cancelled:[/green] {booking.format_display()}\n")


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]schedly[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
