from __future__ import annotations

import json
from contextlib import nullcontext
from datetime import datetime
from pathlib import Path
from typing import Any

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from prodgrid.client import ScheduleClient
from prodgrid.config import list_profiles, load_settings
from prodgrid.core.errors import ScheduleFetchError
from prodgrid.schedule import ScheduleRequest, ScheduleResponse, normalize_response
from prodgrid.telemetry import FetchTelemetryLogger
from prodgrid.timeline import Column, ViewMode, ViewParams, build_view
from prodgrid.timeline.clock import initial_scroll_offset, marker_offset, now_in_zone
from prodgrid.timeline.export import columns_dataframe

app = typer.Typer(add_completion=False, no_args_is_help=True, help="Production schedule calendar tools.")
console = Console()


def _read_structured(path: Path) -> Any:
    """Load a JSON or YAML document."""
    with path.open("r", encoding="utf-8") as handle:
        if path.suffix.lower() == ".json":
            return json.load(handle)
        return yaml.safe_load(handle)


def _load_request(path: Path) -> ScheduleRequest:
    try:
        return ScheduleRequest.model_validate(_read_structured(path))
    except ValidationError as exc:
        console.print(f"[red]Invalid request file {path}:[/red] {exc.error_count()} error(s)")
        raise typer.Exit(1) from exc


def _load_response(path: Path) -> ScheduleResponse:
    try:
        return ScheduleResponse.model_validate(_read_structured(path))
    except ValidationError as exc:
        console.print(f"[red]Invalid schedule response {path}:[/red] {exc.error_count()} error(s)")
        raise typer.Exit(1) from exc


def _entry_flags(item) -> str:
    entry = item.entry
    flags = []
    if getattr(entry, "is_continuation", False):
        flags.append("cont")
    if getattr(entry, "is_partial", False):
        flags.append("partial")
    if item.is_last_in_column:
        flags.append("last")
    return ",".join(flags)


def _print_columns(columns: list[Column]) -> None:
    table = Table(title="Positioned blocks", header_style="bold")
    for header in ("Machine", "Day", "Block", "Kind", "Start", "End", "Top", "Height", "Flags"):
        table.add_column(header)
    rows = 0
    for column in columns:
        for item in column.entries:
            table.add_row(
                column.machine_id,
                column.day_start.strftime("%Y-%m-%d"),
                item.id,
                item.entry.kind.value,
                item.entry.start_time.strftime("%H:%M"),
                item.entry.end_time.strftime("%H:%M"),
                f"{item.top_offset:.1f}",
                f"{item.rendered_height:.1f}",
                _entry_flags(item),
            )
            rows += 1
    if rows == 0:
        console.print("[yellow]No blocks in the visible window.[/yellow]")
        return
    console.print(table)


@app.command("layout")
def layout_command(
    response_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved scheduler response (JSON/YAML)."),
    origin: datetime | None = typer.Option(None, "--origin", help="start_datetime the hour offsets are relative to."),
    request_path: Path | None = typer.Option(
        None, "--request", exists=True, dir_okay=False, help="Request file supplying start_datetime."
    ),
    day: datetime | None = typer.Option(None, "--date", help="Visible day (defaults to the origin's day)."),
    mode: ViewMode = typer.Option(ViewMode.DAILY, "--mode", case_sensitive=False, help="DAILY or INDIVIDUAL."),
    machines: list[str] | None = typer.Option(
        None, "--machine", "-m", help="Machine(s) to show; the first one is used in INDIVIDUAL mode."
    ),
    machine_offset: int = typer.Option(0, "--offset", min=0, help="First machine column (daily view paging)."),
    profile: str = typer.Option("default", "--profile", help="View profile name."),
    settings_path: Path | None = typer.Option(
        None, "--settings", exists=True, dir_okay=False, help="YAML file overriding profile settings."
    ),
    out: Path | None = typer.Option(None, "--out", help="Write positioned blocks to this CSV file."),
):
    """Normalise a saved response and print the laid-out calendar columns."""
    if origin is None and request_path is None:
        console.print("[red]Provide --origin or --request to anchor the schedule offsets.[/red]")
        raise typer.Exit(1)
    if origin is None:
        origin = _load_request(request_path).start_datetime  # type: ignore[arg-type]
    try:
        settings = load_settings(settings_path, profile=profile)
    except KeyError as exc:
        console.print(f"[red]{exc.args[0]}[/red]")
        raise typer.Exit(1) from exc

    response = _load_response(response_path)
    blocks = normalize_response(response, origin)
    selected = tuple(machines) if machines else None
    params = ViewParams(
        day=(day or origin).date(),
        mode=mode,
        machine_id=selected[0] if selected else None,
        machine_ids=selected,
        machine_offset=machine_offset,
    )
    columns = build_view(blocks, params, settings)
    console.print(
        f"[bold]{len(blocks)}[/bold] block(s) normalised; view {params.mode.value} from {params.day.isoformat()}"
    )
    _print_columns(columns)
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        columns_dataframe(columns).to_csv(out, index=False)
        console.print(f"Positioned blocks written to {out}")


@app.command("fetch")
def fetch_command(
    request_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Request body (JSON/YAML)."),
    url: str | None = typer.Option(None, "--url", help="Backend base URL (defaults to $PRODGRID_API_URL)."),
    day: datetime | None = typer.Option(None, "--date", help="Re-anchor start_datetime at 08:00 of this day."),
    out: Path = typer.Option(Path("schedule_response.json"), "--out", help="Where to save the response JSON."),
    timeout: float = typer.Option(ScheduleClient.TIMEOUT, "--timeout", min=0.1, help="Request timeout (seconds)."),
    telemetry_log: Path | None = typer.Option(
        None, "--telemetry-log", dir_okay=False, writable=True, help="Append a fetch record to this JSONL file."
    ),
):
    """POST a request to the scheduling backend and save the response."""
    request = _load_request(request_path)
    if day is not None:
        request = request.with_origin(day.date())
    client = ScheduleClient(url, timeout=timeout)
    logger = (
        FetchTelemetryLogger(
            log_path=telemetry_log,
            endpoint=client.endpoint,
            origin=request.start_datetime.isoformat(),
            context={"command": "fetch", "request": str(request_path)},
        )
        if telemetry_log
        else nullcontext()
    )
    with logger as run_logger:
        try:
            response = client.fetch_schedule(request)
        except ScheduleFetchError as exc:
            if run_logger is not None:
                run_logger.finish(status="error", status_code=exc.status_code, error=exc.message)
            console.print(f"[red]{exc.message}[/red]")
            raise typer.Exit(1) from exc
        blocks = normalize_response(response, request.start_datetime)
        if run_logger is not None:
            run_logger.finish(
                status="ok", block_count=len(blocks), log_lines=len(response.logs)
            )
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(response.model_dump(mode="json"), indent=2, ensure_ascii=False), encoding="utf-8")
    console.print(f"Saved schedule ({len(blocks)} block(s), {len(response.logs)} log line(s)) to {out}")


@app.command("logs")
def logs_command(
    response_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved scheduler response."),
):
    """Print the backend's diagnostic log lines unmodified."""
    response = _load_response(response_path)
    if not response.logs:
        console.print("[dim]No log lines in response.[/dim]")
        return
    for line in response.logs:
        typer.echo(line)


@app.command("profiles")
def profiles_command():
    """List the available view profiles."""
    table = Table(title="View profiles", header_style="bold")
    table.add_column("Name")
    table.add_column("px/h", justify="right")
    table.add_column("Gap", justify="right")
    table.add_column("Min height", justify="right")
    table.add_column("Description")
    for profile in list_profiles():
        settings = profile.settings
        table.add_row(
            profile.name,
            f"{settings.pixels_per_hour:g}",
            f"{settings.layout.gap_px:g}",
            f"{settings.layout.min_height_px:g}",
            profile.description,
        )
    console.print(table)


@app.command("now")
def now_command(
    profile: str = typer.Option("default", "--profile", help="View profile name."),
    zone: str | None = typer.Option(None, "--zone", help="IANA timezone (defaults to the profile's)."),
):
    """Show the current-time marker position for the plant's timezone."""
    settings = load_settings(None, profile=profile)
    moment = now_in_zone(zone or settings.timezone)
    offset = marker_offset(moment, settings.pixels_per_hour)
    scroll = initial_scroll_offset(moment, settings.pixels_per_hour)
    console.print(
        f"{moment.strftime('%Y-%m-%d %H:%M')} {moment.tzname()}: marker at {offset:.1f}px, initial scroll {scroll:.1f}px"
    )


if __name__ == "__main__":  # pragma: no cover
    app()
