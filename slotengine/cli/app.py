"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.booking_store import InMemoryBookingStore, JsonBookingStore
from ..config import AppConfig, ExpertProfile, get_default_config_path
from ..domain.exceptions import SlotEngineError
from ..services.availability import AvailabilityService

app = typer.Typer(
    name="slotengine",
    help="Compute bookable session slots for experts",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DurationOption = Annotated[Optional[int], typer.Option("--duration", "-d", help="Session duration in minutes. Defaults to the expert's setting")]
NowOption = Annotated[Optional[str], typer.Option("--now", help="Evaluate as if the current time were this ISO 8601 timestamp")]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")]


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _resolve_now(now_option: Optional[str], tz: str) -> pendulum.DateTime:
    if not now_option:
        return pendulum.now(tz)

    try:
        parsed = pendulum.parse(now_option, tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse --now value: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not isinstance(parsed, pendulum.DateTime):
        console.print(f"[red]--now must be a date and time, got '{now_option}'[/red]")
        raise typer.Exit(1)
    return parsed


def _resolve_expert(config: AppConfig, identifier: str) -> ExpertProfile:
    expert = config.find_expert(identifier)
    if expert is None:
        console.print(
            f"[bold red]Error:[/bold red] Unknown expert '{identifier}'. "
            "Use an id or name from the configuration."
        )
        raise typer.Exit(1)
    return expert


def _build_service(config: AppConfig) -> AvailabilityService:
    if config.bookings_file is not None:
        booking_source = JsonBookingStore(config.bookings_file)
    else:
        booking_source = InMemoryBookingStore()

    return AvailabilityService(
        experts=config.experts,
        booking_source=booking_source,
        defaults=config.defaults,
    )


@app.command()
def slots(
    expert: Annotated[str, typer.Argument(help="Expert id or name")],
    date: Annotated[Optional[str], typer.Option("--date", help="Date (YYYY-MM-DD). Defaults to today")] = None,
    duration: DurationOption = None,
    now: NowOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List free session start times for an expert on one date.

    Examples:

        slotengine slots exp-1 --date 2024-11-25
        slotengine slots "Dr. Rao" --duration 30 --now 2024-11-25T10:15
    """
    try:
        config = _load_config(config_file)
        _configure_logging(config.log_level, verbose)
        tz = config.timezone

        current = _resolve_now(now, tz)
        profile = _resolve_expert(config, expert)

        if date:
            try:
                target_date = pendulum.from_format(date, "YYYY-MM-DD", tz=tz).date()
            except ValueError as e:
                console.print(f"[red]Could not parse date: {escape(str(e))}[/red]")
                raise typer.Exit(1)
        else:
            target_date = current.date()

        service = _build_service(config)
        free_slots = asyncio.run(
            service.available_slots(
                expert_id=profile.id,
                target_date=target_date,
                now=current,
                duration_minutes=duration,
            )
        )

        console.print(
            f"\n[bold cyan]{profile.name}[/bold cyan] - "
            f"{target_date.format('dddd, YYYY-MM-DD')}\n"
        )
        if not free_slots:
            console.print("[yellow]⚠ No free slots on this date.[/yellow]\n")
            return

        console.print(f"[bold green]✓ {len(free_slots)} free slot(s):[/bold green]\n")
        for slot in free_slots:
            console.print(f"  {slot}")
        console.print()

    except (FileNotFoundError, ValueError, SlotEngineError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def dates(
    expert: Annotated[str, typer.Argument(help="Expert id or name")],
    year: Annotated[Optional[int], typer.Option("--year", help="Year. Defaults to the current year")] = None,
    month: Annotated[Optional[int], typer.Option("--month", help="Month 1-12. Defaults to the current month")] = None,
    duration: DurationOption = None,
    now: NowOption = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List dates in a month on which an expert has at least one free slot.

    Examples:

        slotengine dates exp-1
        slotengine dates exp-1 --year 2024 --month 12
    """
    try:
        config = _load_config(config_file)
        _configure_logging(config.log_level, verbose)

        current = _resolve_now(now, config.timezone)
        profile = _resolve_expert(config, expert)

        service = _build_service(config)
        available = asyncio.run(
            service.available_dates(
                expert_id=profile.id,
                year=year if year is not None else current.year,
                month=month if month is not None else current.month,
                now=current,
                duration_minutes=duration,
            )
        )

        console.print()
        if not available:
            console.print("[yellow]⚠ No bookable dates in this month.[/yellow]\n")
            return

        console.print(f"[bold green]✓ {len(available)} bookable date(s):[/bold green]\n")
        for day in available:
            console.print(f"  {day}")
        console.print()

    except (FileNotFoundError, ValueError, SlotEngineError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def experts(
    config_file: ConfigOption = None,
):
    """
    List all configured experts and their weekly hours.
    """
    try:
        config = _load_config(config_file)

        if not config.experts:
            console.print("[yellow]No experts defined in the config file.[/yellow]")
            return

        table = Table(
            title="Configured experts",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("ID", style="bold yellow")
        table.add_column("Name")
        table.add_column("Slot", justify="right")
        table.add_column("Working days", style="dim")

        for profile in config.experts:
            template = profile.to_template()
            working_days = [name[:3].title() for name in template.working_weekdays()]
            table.add_row(
                profile.id,
                profile.name,
                f"{profile.effective_duration(config.defaults)} min",
                ", ".join(working_days) or "-"
            )

        console.print()
        console.print(table)
        console.print()

    except (FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {escape(str(e))}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotengine[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
