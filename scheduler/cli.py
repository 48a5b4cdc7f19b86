"""
Command-line interface for the school scheduler.

Usage:
    python -m scheduler init --sample
    python -m scheduler autofill --attempts 200 --seed 7
    python -m scheduler check
    python -m scheduler view --class 1A
    python -m scheduler view --teacher "Grace Lee"
    python -m scheduler progress --class 1A
    python -m scheduler set 1A Mon 1 --subject English --teacher "Grace Lee"
    python -m scheduler reset --yes
    python -m scheduler export final_timetable.json
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table
from rich.text import Text

from .config import EngineConfig, default_data_file
from .data.generator import GeneratorConfig, generate_sample_school, get_generation_stats
from .data.loader import JsonStore
from .data.models import SchoolData, SessionLabel, Setup
from .editing import CellEditStatus
from .engine import AutoFillStatus
from .errors import ConfigurationMissingError, DataValidationError, PersistenceError
from .output.formatters import (
    class_table,
    collisions_table,
    progress_table,
    save_csv,
    save_json,
    staff_table,
)
from .output.views import build_staff_view, teacher_load
from .state import ScheduleState

# Create Typer app
app = typer.Typer(
    name="scheduler",
    help="Weekly school timetable auto-fill and collision checking.",
    add_completion=False,
)

# Rich console for pretty output
console = Console()


# =============================================================================
# Helper Functions
# =============================================================================

def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _store(ctx: typer.Context) -> JsonStore:
    return JsonStore(ctx.obj["data_file"])


def load_state(ctx: typer.Context) -> ScheduleState:
    """Load the document and report skipped cells."""
    store = _store(ctx)
    try:
        state, warnings = ScheduleState.from_store(store)
    except PersistenceError as e:
        console.print(f"[red]Error loading data:[/red] {e}")
        raise typer.Exit(code=1)
    except DataValidationError as e:
        console.print(f"[red]Invalid data in {store.path}:[/red]")
        for line in str(e).split("\n"):
            console.print(f"   {escape(line)}")
        raise typer.Exit(code=1)

    for warning in warnings:
        console.print(f"[yellow]Skipped malformed cell:[/yellow] {escape(warning)}")
    return state


def require_configured(data: SchoolData) -> None:
    if not data.is_configured:
        console.print(f"[yellow]{ConfigurationMissingError()}.[/yellow] Run 'init' first.")
        raise typer.Exit(code=1)


def report_save(state: ScheduleState) -> None:
    if state.last_error:
        console.print(f"[yellow]Warning:[/yellow] changes were not saved: {state.last_error}")


def print_summary(data: SchoolData) -> None:
    table = Table(title="Summary", show_header=False, box=None)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="white")

    for key, value in data.summary().items():
        table.add_row(key.replace("_", " ").capitalize(), str(value))

    console.print(table)


@app.callback()
def _global_options(
    ctx: typer.Context,
    data_file: Optional[Path] = typer.Option(
        None,
        "--data", "-d",
        help="Path to the school data JSON file",
        envvar="SCHEDULER_DATA_FILE",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Enable debug logging",
    ),
) -> None:
    _configure_logging(verbose)
    ctx.obj = {"data_file": data_file or default_data_file(), "verbose": verbose}


# =============================================================================
# Commands
# =============================================================================

@app.command()
def init(
    ctx: typer.Context,
    sample: bool = typer.Option(False, "--sample", help="Generate sample allocations"),
    days: str = typer.Option("Mon,Tue,Wed,Thu,Fri", "--days", help="Comma-separated day names"),
    periods: int = typer.Option(7, "--periods", "-p", help="Periods per day", min=1, max=24),
    grades: int = typer.Option(3, "--grades", help="Grades in the sample school", min=1),
    seed: Optional[int] = typer.Option(None, "--seed", help="Seed for the sample generator"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file"),
) -> None:
    """
    Create a new data file.

    With --sample, allocations are generated; otherwise only the setup is
    written and allocations must be added by hand.
    """
    store = _store(ctx)
    if store.exists() and not force:
        console.print(f"[red]Error:[/red] {store.path} already exists (use --force to overwrite)")
        raise typer.Exit(code=1)

    day_names = [d.strip() for d in days.split(",") if d.strip()]
    if sample:
        data = generate_sample_school(GeneratorConfig(
            num_grades=grades, days=day_names, periods_per_day=periods, seed=seed,
        ))
        stats = get_generation_stats(data)
        console.print(
            f"[green]Generated:[/green] {stats['classes']} classes, {stats['teachers']} teachers, "
            f"{stats['max_class_load']}/{stats['total_slots']} periods per class"
        )
    else:
        data = SchoolData(setup=Setup(days=day_names, periods_per_day=periods))

    try:
        store.save(data)
    except PersistenceError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(code=1)

    console.print(f"[green]Data written to:[/green] {store.path}")


@app.command()
def validate(ctx: typer.Context) -> None:
    """Load and validate the data file, then print a summary."""
    state = load_state(ctx)
    data = state.snapshot()
    console.print(f"[green]Valid:[/green] {_store(ctx).path}")
    print_summary(data)

    if data.setup:
        overloaded = [
            a.class_name for a in data.allocations
            if sum(s.periods for s in a.subjects) > data.setup.total_slots
        ]
        for class_name in overloaded:
            console.print(f"[yellow]Warning:[/yellow] {class_name} needs more periods than the week has")


@app.command()
def autofill(
    ctx: typer.Context,
    attempts: Optional[int] = typer.Option(None, "--attempts", "-a", help="Randomized attempts (default 100)", min=1),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed"),
    cpsat_fallback: Optional[bool] = typer.Option(
        None,
        "--cpsat-fallback/--no-cpsat-fallback",
        help="Try CP-SAT when the randomized search gives up",
    ),
    time_limit: Optional[float] = typer.Option(None, "--time-limit", "-t", help="CP-SAT time limit in seconds"),
) -> None:
    """
    Fill every class's remaining periods without teacher or class clashes.

    The data file is only updated when the whole remaining requirement fits.
    """
    state = load_state(ctx)
    require_configured(state.snapshot())

    try:
        config = EngineConfig.from_env(
            max_attempts=attempts,
            seed=seed,
            cpsat_fallback=cpsat_fallback,
            cpsat_time_limit=time_limit,
        )
    except ValueError as e:
        console.print(f"[red]Invalid engine configuration:[/red] {escape(str(e))}")
        raise typer.Exit(code=1)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task("Placing sessions...", total=None)
        result = state.auto_fill(config)

    if result.status == AutoFillStatus.NOTHING_TO_SCHEDULE:
        console.print(f"[green]{result.message}[/green]")
        return

    if result.status == AutoFillStatus.NOT_CONFIGURED:
        console.print(f"[yellow]{result.message}[/yellow]")
        raise typer.Exit(code=1)

    if result.status == AutoFillStatus.EXHAUSTED:
        console.print(Panel(Text(result.message, style="bold red"), title="Auto-fill failed"))
        raise typer.Exit(code=1)

    console.print(Panel(
        Text(result.message, style="bold green"),
        title="Auto-fill",
        subtitle=f"{len(result.tasks)} tasks, {result.sessions_placed} class sessions, {result.solve_time_ms}ms",
    ))
    report_save(state)


@app.command()
def check(ctx: typer.Context) -> None:
    """Report teachers booked for two different subjects in one slot."""
    state = load_state(ctx)
    collisions = state.check_collisions()

    if not collisions:
        console.print("[green]No collisions found![/green]")
        return

    console.print(collisions_table(collisions))
    raise typer.Exit(code=1)


@app.command()
def view(
    ctx: typer.Context,
    class_name: Optional[str] = typer.Option(None, "--class", "-C", help="Show one class"),
    teacher: Optional[str] = typer.Option(None, "--teacher", "-T", help="Show one teacher"),
    all_classes: bool = typer.Option(False, "--all-classes", help="Show every class"),
    staff: bool = typer.Option(False, "--staff", help="Show every teacher"),
) -> None:
    """Display class or staff timetables."""
    state = load_state(ctx)
    data = state.snapshot()
    if data.setup is None:
        console.print(f"[yellow]{ConfigurationMissingError()}.[/yellow]")
        raise typer.Exit(code=1)

    if class_name:
        if data.get_allocation(class_name) is None:
            console.print(f"[red]Error:[/red] Class '{class_name}' not found")
            console.print(f"Available classes: {', '.join(data.class_names)}")
            raise typer.Exit(code=1)
        console.print(class_table(data, class_name))
    elif teacher:
        if teacher not in data.teachers:
            console.print(f"[red]Error:[/red] Teacher '{teacher}' not found")
            console.print(f"Available teachers: {', '.join(data.teachers)}")
            raise typer.Exit(code=1)
        console.print(staff_table(data, teacher))
    elif all_classes:
        for name in data.class_names:
            console.print(class_table(data, name))
    elif staff:
        for name in data.teachers:
            console.print(staff_table(data, name))
    else:
        _show_overview(data)


def _show_overview(data: SchoolData) -> None:
    print_summary(data)

    loads = teacher_load(build_staff_view(data))
    table = Table(title="Teacher Load", show_header=True, header_style="bold cyan")
    table.add_column("Teacher")
    table.add_column("Booked slots", justify="right")
    for teacher, booked in loads.items():
        table.add_row(teacher, f"{booked}/{data.setup.total_slots}")
    console.print(table)


@app.command()
def progress(
    ctx: typer.Context,
    class_name: Optional[str] = typer.Option(None, "--class", "-C", help="Class to report (default: all)"),
) -> None:
    """Show placed versus required periods per subject."""
    state = load_state(ctx)
    data = state.snapshot()

    names = [class_name] if class_name else data.class_names
    for name in names:
        if data.get_allocation(name) is None:
            console.print(f"[red]Error:[/red] Class '{name}' not found")
            raise typer.Exit(code=1)
        console.print(progress_table(name, state.requirements_for(name)))


@app.command(name="set")
def set_cell_command(
    ctx: typer.Context,
    class_name: str = typer.Argument(..., help="Class name"),
    day: str = typer.Argument(..., help="Day name"),
    period: int = typer.Argument(..., help="Period number (1-based)", min=1),
    subject: Optional[str] = typer.Option(None, "--subject", "-s", help="Subject to place"),
    teacher: Optional[str] = typer.Option(None, "--teacher", "-T", help="Teacher of the subject"),
    clear: bool = typer.Option(False, "--clear", help="Empty the cell"),
) -> None:
    """Place a session in one cell, or clear it."""
    if not clear and not (subject and teacher):
        console.print("[red]Error:[/red] give --subject and --teacher, or --clear")
        raise typer.Exit(code=2)

    state = load_state(ctx)
    label = None if clear else SessionLabel(subject=subject, teacher=teacher)
    result = state.set_cell(class_name, day, period - 1, label)

    if result.status == CellEditStatus.CAPACITY_EXCEEDED:
        console.print(f"[red]Limit reached![/red] {result.subject} allows only {result.limit} periods.")
        raise typer.Exit(code=1)
    if not result.ok:
        console.print(f"[red]Error:[/red] {result.message}")
        raise typer.Exit(code=1)

    console.print(f"[green]{result.message}[/green]")
    report_save(state)


@app.command()
def reset(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
) -> None:
    """Clear all timetables."""
    state = load_state(ctx)
    if not yes:
        typer.confirm("Clear all timetables?", abort=True)

    try:
        state.reset()
    except ConfigurationMissingError as e:
        console.print(f"[yellow]{e}.[/yellow]")
        raise typer.Exit(code=1)

    console.print("[green]All timetables cleared.[/green]")
    report_save(state)


@app.command()
def export(
    ctx: typer.Context,
    output: Path = typer.Argument(..., help="File to write"),
    format: str = typer.Option("json", "--format", "-f", help="Output format: json or csv"),
) -> None:
    """Write the full document (json) or the filled cells (csv) to a file."""
    state = load_state(ctx)
    data = state.snapshot()

    writers = {"json": save_json, "csv": save_csv}
    if format not in writers:
        console.print(f"[red]Error:[/red] unknown format '{format}'")
        raise typer.Exit(code=2)

    try:
        writers[format](data, output)
    except OSError as e:
        console.print(f"[red]Error:[/red] could not write {output}: {escape(str(e))}")
        raise typer.Exit(code=1)

    console.print(f"[green]Exported to:[/green] {output}")


# =============================================================================
# Main Entry Point
# =============================================================================

def main() -> None:
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
