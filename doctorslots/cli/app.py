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
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..adapters.memory_store import InMemoryBookingStore
from ..config import AppConfig, DoctorConfig, get_default_config_path
from ..domain.booking_validator import BookingValidator
from ..domain.exceptions import SchedulingError
from ..domain.models import WEEKDAY_NAMES, weekday_index, weekday_name
from ..domain.schedule_parser import parse_day_schedule
from ..services.booking import BookingService

app = typer.Typer(
    name="doctorslots",
    help="Check doctor appointment slots against weekly working hours",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DateOption = Annotated[Optional[str], typer.Option("--date", "-d", help="Appointment date (YYYY-MM-DD). Defaults to today")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Log parser warnings and decisions.")]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.INFO if verbose else logging.ERROR,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _resolve_doctor(config: AppConfig, identifier: str) -> DoctorConfig:
    doctor = config.find_doctor(identifier)
    if doctor is None:
        console.print(f"[bold red]Error:[/bold red] Unknown doctor '{identifier}'. Use an id or a configured name.")
        raise typer.Exit(1)
    return doctor


def _parse_date(value: Optional[str], tz: str) -> date:
    if not value:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(value, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Could not parse date {value!r}: {e}[/red]")
        raise typer.Exit(1)


def _build_service(config: AppConfig) -> BookingService:
    return BookingService(
        data_source=InMemoryBookingStore(config),
        validator=BookingValidator(timezone=config.timezone),
        cancellation_notice_hours=config.defaults.cancellation_notice_hours,
        max_advance_days=config.defaults.max_advance_days,
    )


@app.command()
def slots(
    doctor: Annotated[str, typer.Argument(help="Doctor id or name")],
    on_date: DateOption = None,
    config_file: ConfigOption = None,
    only_free: Annotated[bool, typer.Option("--free", help="Show bookable slots only.")] = False,
    verbose: VerboseOption = False,
):
    """
    Show a doctor's slot grid for one day.

    Examples:

        doctorslots slots dr-house --date 2024-11-25
        doctorslots slots "Gregory House" --free
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        doctor_config = _resolve_doctor(config, doctor)
        day = _parse_date(on_date, config.timezone)

        service = _build_service(config)
        grid = asyncio.run(service.get_available_slots(doctor_id=doctor_config.id, on_date=day))

        weekday = weekday_name(weekday_index(day)).capitalize()
        if not grid:
            console.print(f"\n[yellow]{doctor_config.name} is not working on {weekday}, {day.isoformat()}.[/yellow]\n")
            return

        table = Table(
            title=f"{doctor_config.name} - {weekday}, {day.isoformat()}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Slot", style="bold")
        table.add_column("Status")

        for entry in grid:
            if only_free and not entry.is_available:
                continue
            if entry.is_break:
                status = "[dim]break[/dim]"
            elif entry.is_available:
                status = "[green]free[/green]"
            else:
                status = "[red]booked[/red]"
            table.add_row(entry.slot, status)

        free_count = sum(1 for entry in grid if entry.is_available)
        console.print()
        console.print(table)
        console.print(f"[bold green]{free_count}[/bold green] of {len(grid)} slot(s) free\n")

    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    doctor: Annotated[str, typer.Argument(help="Doctor id or name")],
    time_slot: Annotated[str, typer.Argument(help="Requested slot, e.g. 09:00-09:30")],
    on_date: DateOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Check whether a slot can be booked. Exits with status 1 when rejected.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        doctor_config = _resolve_doctor(config, doctor)
        day = _parse_date(on_date, config.timezone)

        service = _build_service(config)
        result = asyncio.run(
            service.check_booking(doctor_id=doctor_config.id, on_date=day, time_slot=time_slot)
        )
    except (FileNotFoundError, ValueError, SchedulingError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    if result.is_valid:
        console.print(f"[green]✓ {time_slot} on {day.isoformat()} is bookable with {doctor_config.name}[/green]")
        return

    console.print(f"[red]✗ {result.message}[/red]")
    raise typer.Exit(1)


@app.command()
def schedule(
    doctor: Annotated[str, typer.Argument(help="Doctor id or name")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show a doctor's normalized weekly schedule.
    """
    _configure_logging(verbose)
    try:
        config = _load_config(config_file)
        doctor_config = _resolve_doctor(config, doctor)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)

    weekly = doctor_config.weekly_schedule(default_duration=config.defaults.time_slot_duration)

    table = Table(
        title=f"{doctor_config.name} ({weekly.time_slot_duration} min slots)",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Day", style="bold yellow")
    table.add_column("Hours")
    table.add_column("Source", style="dim")

    for index, name in enumerate(WEEKDAY_NAMES):
        result = parse_day_schedule(weekly.raw_for(index))
        hours = result.schedule.format_display()
        if result.warning is not None:
            hours += f" [red]({result.warning.message})[/red]"
        table.add_row(name.capitalize(), hours, result.source_format.value)

    console.print()
    console.print(table)
    console.print()


@app.command()
def list_doctors(
    config_file: ConfigOption = None,
):
    """
    List all configured doctors.
    """
    try:
        config = _load_config(config_file)

        if not config.doctors:
            console.print("[yellow]No doctors defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured doctors",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Id", style="bold yellow")
        table.add_column("Name")
        table.add_column("Slot length", style="dim")

        for doctor in config.doctors:
            table.add_row(
                doctor.id,
                doctor.name,
                f"{config.slot_duration_for(doctor)} min"
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]doctorslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
