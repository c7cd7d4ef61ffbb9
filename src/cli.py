"""CLI interface for worklog."""

from __future__ import annotations

import contextlib
import logging
from collections.abc import Iterator
from datetime import date, timedelta
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markdown import Markdown

from worklog.config import WorklogConfig, load_config, merge_cli_overrides
from worklog.core import Worklog
from worklog.errors import GatewayError, RateLimited, StorageError, WorklogError
from worklog.reports.config import ReportRequest, ReportStyle

app = typer.Typer(
    name="worklog",
    help="Keep a running log of work wins, organized by an LLM.",
)
key_app = typer.Typer(help="Manage the stored API key.")
app.add_typer(key_app, name="key")

console = Console()
_stderr_console = Console(stderr=True)

EMPTY_WORKLOG_MESSAGE = "No worklog entries yet. Add some with `worklog add`."
DEFAULT_REPORT_WINDOW_DAYS = 182


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from worklog import __version__

        console.print(f"worklog {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .worklog.toml file."),
    ] = None,
    data_dir: Annotated[
        Optional[Path],
        typer.Option("--data-dir", help="Directory holding the worklog document."),
    ] = None,
    provider: Annotated[
        Optional[str],
        typer.Option("--provider", help="LLM backend: openai or claude-cli."),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option("--model", help="Override the model name."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Show debug logging."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Worklog - record achievements, undo the last change, generate reports."""
    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(message)s",
            handlers=[RichHandler(console=_stderr_console, show_path=False)],
        )
    config = load_config(config_path)
    ctx.obj = merge_cli_overrides(
        config, data_dir=data_dir, provider=provider, model=model
    )


def _open_worklog(ctx: typer.Context) -> Worklog:
    config = ctx.obj if isinstance(ctx.obj, WorklogConfig) else load_config()
    try:
        return Worklog.from_config(config)
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(1) from exc


@contextlib.contextmanager
def _reporting_errors() -> Iterator[None]:
    """Turn engine errors into a red message and exit code 1."""
    try:
        yield
    except WorklogError as exc:
        console.print(f"[red]Error:[/red] {exc}")
        if isinstance(exc, RateLimited) and exc.retry_after:
            console.print(f"Try again in {exc.retry_after:.0f}s.")
        elif isinstance(exc, GatewayError) and exc.retryable:
            console.print("This is usually temporary. Try again shortly.")
        raise typer.Exit(1) from exc


@app.command(name="add")
def add_cmd(
    ctx: typer.Context,
    entries: Annotated[
        list[str],
        typer.Argument(help="One to three work wins, each as a separate argument."),
    ],
) -> None:
    """Merge new work wins into the worklog."""
    worklog = _open_worklog(ctx)
    with _reporting_errors():
        worklog.organize(entries)
    console.print("[green]Worklog updated.[/green] Use `worklog undo` to revert.")


@app.command(name="show")
def show_cmd(
    ctx: typer.Context,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print markdown source instead of rendering it."),
    ] = False,
) -> None:
    """Print the worklog document."""
    worklog = _open_worklog(ctx)
    with _reporting_errors():
        text = worklog.read()
    if not text.strip():
        console.print(f"[yellow]{EMPTY_WORKLOG_MESSAGE}[/yellow]")
        return
    if raw:
        print(text)
    else:
        console.print(Markdown(text))


@app.command(name="undo")
def undo_cmd(ctx: typer.Context) -> None:
    """Revert the last change to the worklog."""
    worklog = _open_worklog(ctx)
    with _reporting_errors():
        worklog.undo()
    console.print("[green]Restored the previous version.[/green]")


@app.command(name="report")
def report_cmd(
    ctx: typer.Context,
    start: Annotated[
        Optional[str],
        typer.Option("--start", help="First day of the window (YYYY-MM-DD)."),
    ] = None,
    end: Annotated[
        Optional[str],
        typer.Option("--end", help="Last day of the window (YYYY-MM-DD). Defaults to today."),
    ] = None,
    style: Annotated[
        str,
        typer.Option(
            "--style",
            "-s",
            help="Report style: executive, detailed, chronological, accomplishments.",
        ),
    ] = ReportStyle.EXECUTIVE.value,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the report to this file (or directory) instead of printing it.",
        ),
    ] = None,
    raw: Annotated[
        bool,
        typer.Option("--raw", help="Print markdown source instead of rendering it."),
    ] = False,
) -> None:
    """Generate a report over a date window.

    Defaults to the last six months when --start is omitted.
    """
    today = date.today()
    start_value = start or (today - timedelta(days=DEFAULT_REPORT_WINDOW_DAYS)).isoformat()
    end_value = end or today.isoformat()

    worklog = _open_worklog(ctx)
    with _reporting_errors():
        request = ReportRequest.parse(start_value, end_value, style)
        report = worklog.generate(request)

    if output is not None:
        target = output / request.default_filename if output.is_dir() else output
        with _reporting_errors():
            try:
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(report, encoding="utf-8")
            except OSError as exc:
                raise StorageError(f"Failed to write report to {target}: {exc}") from exc
        console.print(f"[green]Report written to[/green] {target}")
        return

    if raw:
        print(report)
    else:
        console.print(Markdown(report))


@key_app.command(name="status")
def key_status_cmd(ctx: typer.Context) -> None:
    """Show whether an API key is stored."""
    worklog = _open_worklog(ctx)
    if worklog.vault.status():
        console.print("[green]API key configured.[/green]")
    else:
        console.print("[yellow]No API key configured.[/yellow]")


@key_app.command(name="set")
def key_set_cmd(
    ctx: typer.Context,
    api_key: Annotated[
        str,
        typer.Option(
            "--api-key",
            prompt="API key",
            hide_input=True,
            help="The key to store. Prompted for when omitted.",
        ),
    ],
) -> None:
    """Validate and store the API key."""
    worklog = _open_worklog(ctx)
    with _reporting_errors():
        worklog.vault.save(api_key)
    console.print("[green]API key saved.[/green]")


@key_app.command(name="delete")
def key_delete_cmd(
    ctx: typer.Context,
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Do not ask for confirmation."),
    ] = False,
) -> None:
    """Remove the stored API key."""
    if not yes and not typer.confirm("Delete the saved API key?"):
        raise typer.Exit(0)
    worklog = _open_worklog(ctx)
    with _reporting_errors():
        worklog.vault.delete()
    console.print("[green]API key deleted.[/green]")
