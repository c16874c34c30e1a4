"""CLI entry point for draftlog."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from draftlog.config import DraftlogConfig, configure_logging, load_config
from draftlog.config.loader import DEFAULT_CONFIG_TEMPLATE
from draftlog.decoder import DocumentDecoder
from draftlog.events import Event, FileEvent, ProgressEvent, ProgressReporter
from draftlog.history import (
    ExtractionError,
    ExtractionResult,
    discover_repository,
    extract_repository,
)
from draftlog.storage import SessionNotFoundError, create_session_store

app = typer.Typer(
    name="draftlog",
    help="Reconstruct the revision history of documents kept in git.",
)

config_app = typer.Typer(help="Manage draftlog configuration.")
app.add_typer(config_app, name="config")

sessions_app = typer.Typer(help="Manage saved extraction sessions.")
app.add_typer(sessions_app, name="sessions")

# Global state
_config: DraftlogConfig | None = None


def _get_config() -> DraftlogConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to draftlog.yaml")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    configure_logging(_config.log_level, _config.log_format)


def _print_event(event: Event) -> None:
    """Render lifecycle events as they arrive."""
    if isinstance(event, ProgressEvent):
        if event.stage == "commits":
            rprint(f"Found [bold]{event.count}[/bold] commits")
        elif event.stage == "files_found":
            rprint(f"Tracking [bold]{event.count}[/bold] document(s)")
        elif event.stage == "processing":
            rprint(f"[dim]{event.processed}/{event.total} commits processed[/dim]")
    elif isinstance(event, FileEvent):
        rprint(f"[green]done[/green] {event.path} ({event.version_count} versions)")


def _display_result(result: ExtractionResult) -> None:
    """Summary table: one row per document history."""
    table = Table(title=f"Document histories ({len(result.files)})")
    table.add_column("Path", style="cyan")
    table.add_column("Versions", justify="right", style="green")
    table.add_column("First", style="dim")
    table.add_column("Last", style="dim")
    for history in result.files:
        first, last = history.versions[0], history.versions[-1]
        table.add_row(
            history.path,
            str(len(history.versions)),
            first.timestamp.strftime("%Y-%m-%d %H:%M"),
            last.timestamp.strftime("%Y-%m-%d %H:%M"),
        )
    rprint(table)
    rprint(
        f"[dim]Commits scanned:[/dim] {result.processed_commits}/{result.total_commits}  "
        f"[dim]Skipped versions:[/dim] {result.skipped_versions}"
    )


@app.command()
def discover(
    repo: str = typer.Argument(".", help="Path to a local git repository"),
) -> None:
    """List the tracked documents present at the newest commit."""
    cfg = _get_config()
    try:
        paths = asyncio.run(discover_repository(repo, cfg))
    except ExtractionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if not paths:
        rprint(f"[yellow]No {cfg.history.extension} files found in {repo}.[/yellow]")
        return

    table = Table(title=f"Documents ({len(paths)})")
    table.add_column("Path", style="cyan")
    for path in paths:
        table.add_row(path)
    rprint(table)


@app.command()
def extract(
    repo: str = typer.Argument(".", help="Path to a local git repository"),
    files: Annotated[
        list[str] | None,
        typer.Option("--file", "-f", help="Only extract this document (repeatable)"),
    ] = None,
    batch_size: Annotated[
        int | None, typer.Option("--batch-size", min=1, help="Commits per batch")
    ] = None,
    concurrency: Annotated[
        int | None, typer.Option("--concurrency", min=1, help="Parallel reads per commit")
    ] = None,
    max_commits: Annotated[
        int | None, typer.Option("--max-commits", min=1, help="Limit on commits read")
    ] = None,
    output: Annotated[
        str | None, typer.Option("--output", "-o", help="Write the result as JSON")
    ] = None,
    session: Annotated[
        str | None, typer.Option("--session", help="Save the result under this session id")
    ] = None,
) -> None:
    """Extract the version history of every tracked document."""
    cfg = _get_config()
    overrides = {
        k: v
        for k, v in {
            "batch_size": batch_size,
            "concurrency": concurrency,
            "max_commits": max_commits,
        }.items()
        if v is not None
    }
    if overrides:
        cfg = cfg.model_copy(update={"history": cfg.history.model_copy(update=overrides)})

    rprint(f"[bold]Extracting[/bold] {cfg.history.extension} history from {repo}...")
    try:
        result = asyncio.run(
            extract_repository(repo, cfg, selected=files, reporter=ProgressReporter(_print_event))
        )
    except ExtractionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    _display_result(result)

    if output:
        Path(output).write_text(result.model_dump_json(by_alias=True, indent=2))
        rprint(f"[green]Written to[/green] {output}")

    if session:
        try:
            store = create_session_store(cfg.sessions)
            store.save(session, result.model_dump(mode="json", by_alias=True))
        except ValueError as e:
            rprint(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        rprint(f"[green]Saved session[/green] {session}")


@app.command()
def decode(
    file: str = typer.Argument(..., help="Path to a document file"),
) -> None:
    """Print the text decoded from a single document file."""
    cfg = _get_config()
    path = Path(file)
    if not path.is_file():
        rprint(f"[red]Error:[/red] File not found: {file}")
        raise typer.Exit(1)

    decoder = DocumentDecoder(cfg.history.content_part, cfg.history.fallback_chars)
    typer.echo(decoder.decode(path.read_bytes()))


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


@sessions_app.command("list")
def sessions_list() -> None:
    """List saved sessions, newest first."""
    store = create_session_store(_get_config().sessions)
    sessions = store.list_sessions()
    if not sessions:
        rprint("[yellow]No saved sessions.[/yellow]")
        return

    table = Table(title=f"Sessions ({len(sessions)})")
    table.add_column("Session", style="cyan")
    table.add_column("Created", style="dim")
    table.add_column("Size", justify="right")
    for info in sessions:
        table.add_row(
            info.session_id,
            info.created_at.strftime("%Y-%m-%d %H:%M"),
            f"{info.size / 1024:.1f} KB",
        )
    rprint(table)


@sessions_app.command("show")
def sessions_show(
    session_id: str = typer.Argument(..., help="Session id"),
    file: Annotated[
        str | None, typer.Option("--file", "-f", help="Show the versions of one document")
    ] = None,
) -> None:
    """Show a saved session's documents, or one document's versions."""
    store = create_session_store(_get_config().sessions)
    try:
        result = ExtractionResult.model_validate(store.load(session_id))
    except (SessionNotFoundError, ValueError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if file is None:
        _display_result(result)
        return

    history = result.get(file)
    if history is None:
        rprint(f"[red]Error:[/red] {file} is not in session {session_id}")
        raise typer.Exit(1)

    table = Table(title=f"{history.path} ({len(history.versions)} versions)")
    table.add_column("Date", style="dim")
    table.add_column("Commit", style="cyan")
    table.add_column("Author")
    table.add_column("Message")
    for version in history.versions:
        table.add_row(
            version.timestamp.strftime("%Y-%m-%d %H:%M"),
            version.commit_id[:8],
            version.author,
            version.message.splitlines()[0] if version.message else "",
        )
    rprint(table)


@sessions_app.command("delete")
def sessions_delete(
    session_id: str = typer.Argument(..., help="Session id"),
) -> None:
    """Delete a saved session."""
    store = create_session_store(_get_config().sessions)
    try:
        store.delete(session_id)
    except (SessionNotFoundError, ValueError) as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    rprint(f"[green]Deleted[/green] {session_id}")


@sessions_app.command("cleanup")
def sessions_cleanup(
    days: Annotated[
        int | None, typer.Option("--days", min=1, help="Age threshold in days")
    ] = None,
) -> None:
    """Delete sessions older than the retention period."""
    cfg = _get_config()
    days_old = days or cfg.sessions.retention_days
    store = create_session_store(cfg.sessions)
    deleted = store.cleanup(days_old)
    rprint(f"Deleted [bold]{deleted}[/bold] session(s) older than {days_old} days")


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default draftlog.yaml in current directory."""
    target = Path("draftlog.yaml")
    if target.exists() and not force:
        rprint("[yellow]draftlog.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(
        Panel(
            f"[green]Created[/green] {target}\n[dim]Edit history.extension to track other documents.[/dim]",
            border_style="green",
        )
    )


if __name__ == "__main__":
    app()
