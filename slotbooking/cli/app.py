"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Annotated, List, Optional, Tuple

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table

from ..adapters.calendar_events import GoogleCalendarEventQuery, GoogleCalendarEventRepository
from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..config import AppConfig, get_default_config_path
from ..domain.availability import AvailabilityChecker
from ..domain.exceptions import CalendarAPIError, RuleViolation, Unavailable
from ..domain.models import AvailableSlot
from ..domain.slot_rules import SlotRuleEvaluator
from ..services.eligibility import BookingEligibilityService
from ..services.provisional_booking import ProvisionalBookingCommand, ProvisionalBookingService
from ..services.slot_search import NearestSlotSearchService

app = typer.Typer(
    name="slotbooking",
    help="Check and search bookable shop slots against Google Calendar",
    add_completion=False
)

console = Console()
err_console = Console(stderr=True)

EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2
EXIT_REJECTED = 3

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
MockOption = Annotated[
    bool,
    typer.Option("--mock", help="Use mock calendar data and skip authentication."),
]
JsonOption = Annotated[bool, typer.Option("--json", help="Print the result as JSON.")]


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path], mock: bool) -> AppConfig:
    """
    Load the YAML config. In mock mode a missing file is not an error:
    defaults are enough to run against the fixture calendar.
    """
    config_path = config_file or get_default_config_path()
    if mock and config_file is None and not config_path.exists():
        config = AppConfig()
    else:
        try:
            config = AppConfig.load_from_yaml(config_path)
        except ValueError as e:
            console.print(f"[bold red]Invalid configuration:[/bold red] {e}")
            raise typer.Exit(EXIT_FAILURE)

    _setup_logging(config.log_level)
    return config


def _build_client(config: AppConfig, mock: bool):
    if mock:
        err_console.print("[yellow]⚠  MOCK MODE: using fixture calendar data[/yellow]")
        return MockCalendarClient()

    google = config.google
    if google.service_account_file is not None:
        return GoogleCalendarClient.from_service_account_file(google.service_account_file)
    if google.service_account_email and google.private_key:
        return GoogleCalendarClient.from_service_account_key(
            google.service_account_email, google.private_key
        )
    raise CalendarAPIError(
        "No Google service account configured "
        "(set google.service_account_file or google.service_account_email/private_key)"
    )


def _build_query(config: AppConfig, mock: bool) -> Tuple[object, GoogleCalendarEventQuery]:
    client = _build_client(config, mock)
    query = GoogleCalendarEventQuery(
        client=client,
        calendar_id=config.google.calendar_id,
        business_hours=config.business_hours.to_business_hours(),
    )
    return client, query


def _build_eligibility(config: AppConfig, query: GoogleCalendarEventQuery) -> BookingEligibilityService:
    return BookingEligibilityService(
        event_query=query,
        availability_checker=AvailabilityChecker(query, config.search.buffer_minutes),
        rule_evaluator=SlotRuleEvaluator(query.business_hours),
    )


@contextmanager
def _exit_codes():
    """
    Map errors to exit codes: 2 invalid input, 3 rejected, 1 anything else.
    A broken config file is reported by _load_config and exits with 1.
    """
    try:
        yield
    except typer.Exit:
        raise
    except (RuleViolation, Unavailable) as e:
        console.print(f"[bold yellow]Rejected:[/bold yellow] {e}")
        raise typer.Exit(EXIT_REJECTED)
    except FileNotFoundError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(EXIT_FAILURE)
    except ValueError as e:
        console.print(f"[bold red]Invalid input:[/bold red] {e}")
        raise typer.Exit(EXIT_INVALID_INPUT)
    except CalendarAPIError as e:
        console.print(f"[bold red]Calendar error:[/bold red] {e}")
        raise typer.Exit(EXIT_FAILURE)
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(EXIT_FAILURE)


@app.command()
def check(
    start: Annotated[str, typer.Argument(help="Slot start, e.g. 2026-11-04T10:00:00.000+09:00")],
    duration: Annotated[int, typer.Argument(help="Slot duration in minutes (multiple of 60)")],
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: JsonOption = False,
):
    """
    Check whether a single slot can be booked.

    Exits with 3 when the slot is rejected by the rules or the calendar.
    """
    with _exit_codes():
        config = _load_config(config_file, mock)
        _, query = _build_query(config, mock)
        service = _build_eligibility(config, query)

        result = asyncio.run(service.check(start, duration))

        if as_json:
            typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
        elif result.bookable:
            console.print(f"[bold green]✓ Bookable:[/bold green] {result.normalized.start_at} ({duration} min)")
        else:
            console.print("[bold yellow]✗ Not bookable[/bold yellow]")
            for reason in result.reasons:
                console.print(f"  - {reason}")

        if not result.bookable:
            raise typer.Exit(EXIT_REJECTED)


@app.command()
def nearest(
    duration: Annotated[int, typer.Option("--duration", "-d", help="Slot duration in minutes (multiple of 60)")],
    from_at: Annotated[Optional[str], typer.Option("--from", help="Search from this instant (defaults to now)")] = None,
    limit: Annotated[Optional[int], typer.Option("--limit", "-n", help="Maximum number of slots")] = None,
    days: Annotated[Optional[int], typer.Option("--days", help="Search window in days")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: JsonOption = False,
):
    """
    List the nearest bookable slots.

    Examples:

        slotbooking nearest --duration 180 --mock

        slotbooking nearest -d 360 --from 2026-11-02T09:30:00.000+09:00 --limit 3
    """
    with _exit_codes():
        config = _load_config(config_file, mock)
        _, query = _build_query(config, mock)
        service = NearestSlotSearchService(
            event_query=query,
            rule_evaluator=SlotRuleEvaluator(query.business_hours),
            buffer_minutes=config.search.buffer_minutes,
            default_limit=config.search.limit,
            default_search_days=config.search.search_days,
        )

        result = asyncio.run(service.find_nearest_slots(
            duration_minutes=duration,
            from_at=from_at,
            limit=limit,
            search_days=days,
        ))

        if as_json:
            typer.echo(json.dumps(result.to_dict(), ensure_ascii=False))
            return

        if not result.slots:
            console.print(
                "[yellow]⚠ No bookable slots found.[/yellow]\n"
                "Try a longer search window or a shorter duration."
            )
            return

        _print_slots(result.slots, result.from_at)


def _print_slots(slots: List[AvailableSlot], from_at: str) -> None:
    table = Table(
        title=f"Bookable slots from {from_at}",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("#", style="dim")
    table.add_column("Slot", style="bold")

    for idx, slot in enumerate(slots, 1):
        table.add_row(str(idx), slot.format_display())

    console.print()
    console.print(table)
    console.print()


@app.command()
def book(
    start: Annotated[str, typer.Argument(help="Slot start, e.g. 2026-11-04T10:00:00.000+09:00")],
    duration: Annotated[int, typer.Argument(help="Slot duration in minutes (multiple of 60)")],
    car_id: Annotated[str, typer.Option("--car", help="Car identifier")],
    customer_name: Annotated[str, typer.Option("--name", help="Customer name")],
    phone_number: Annotated[str, typer.Option("--phone", help="Customer phone number")],
    car_model: Annotated[Optional[str], typer.Option("--model", help="Car model shown in the event title")] = None,
    service_label: Annotated[Optional[str], typer.Option("--service", help="Service label shown in the event title")] = None,
    channel: Annotated[Optional[str], typer.Option("--channel", help="Where the request came from")] = None,
    config_file: ConfigOption = None,
    mock: MockOption = False,
    as_json: JsonOption = False,
):
    """
    Hold a slot by creating a provisional calendar event.
    """
    with _exit_codes():
        config = _load_config(config_file, mock)
        client, query = _build_query(config, mock)
        service = ProvisionalBookingService(
            eligibility_service=_build_eligibility(config, query),
            event_repository=GoogleCalendarEventRepository(client, config.google.calendar_id),
        )

        booking = asyncio.run(service.create(ProvisionalBookingCommand(
            car_id=car_id,
            start_at=start,
            duration_minutes=duration,
            customer_name=customer_name,
            phone_number=phone_number,
            car_model_name=car_model,
            service_label=service_label,
            channel=channel,
        )))

        if as_json:
            typer.echo(json.dumps(booking.to_dict(), ensure_ascii=False))
            return

        console.print(Panel.fit(
            f"[bold green]✓ Provisional booking created[/bold green]\n\n"
            f"[bold]Start:[/bold] {booking.start_at}\n"
            f"[bold]Duration:[/bold] {booking.duration_minutes} min\n"
            f"[bold]Event:[/bold] {booking.calendar_event_id}",
            title="Booking"
        ))


@app.command()
def check_connection(
    config_file: ConfigOption = None,
    mock: MockOption = False,
):
    """
    Test the Google Calendar credentials and calendar access.
    """
    with _exit_codes():
        config = _load_config(config_file, mock)
        client = _build_client(config, mock)
        info = client.check_connection(config.google.calendar_id)

        console.print(Panel.fit(
            f"[bold green]✓ Connected[/bold green]\n\n"
            f"[bold]Calendar:[/bold] {info.get('summary', 'N/A')}\n"
            f"[bold]Id:[/bold] {info.get('id', config.google.calendar_id)}\n"
            f"[bold]Time zone:[/bold] {info.get('timeZone', 'N/A')}",
            title="Connection test"
        ))


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]slotbooking[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
