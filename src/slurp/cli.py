"""CLI for slurp (query decoding, session inspection, event replay)."""

import json
import sqlite3
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from slurp.config import FACET_FIELD_PREFIX, SERVER_URL, resolve_data_directory
from slurp.core.query.decoder import decode_query
from slurp.core.session.manager import SessionManager
from slurp.core.session.storage import SqliteSessionStore
from slurp.logging_config import configure_logging
from slurp.protocols import TransportProtocol
from slurp.replay import ReplayClock, replay_events
from slurp.tracker import EventTracker
from slurp.transport import HttpTransport, LoggingTransport

app = typer.Typer(help="slurp: search telemetry recorder.")

_DEFAULT_DB = resolve_data_directory() / "sessions.db"


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


@app.command()
def decode(
    query: str = typer.Argument(..., help="Raw query string, e.g. 'any,contains,fisk'"),
    facet_prefix: str = typer.Option(
        FACET_FIELD_PREFIX, "--facet-prefix", help="Field prefix of facet clauses"
    ),
) -> None:
    """Decode a query string and print it as JSON."""
    decoded = decode_query(query, facet_prefix=facet_prefix)
    typer.echo(json.dumps(decoded.to_dict(), indent=2, ensure_ascii=False))


def _open_db(db: Path | None) -> sqlite3.Connection:
    path = db or _DEFAULT_DB
    path.parent.mkdir(parents=True, exist_ok=True)
    # The transport worker reconciles sessions from its own thread.
    return sqlite3.connect(str(path), check_same_thread=False)


@app.command()
def session(
    tab: str = typer.Option(..., "--tab", "-t", help="Tab/window storage area"),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Session database path"),
    ] = None,
) -> None:
    """Show the stored session of a tab."""
    conn = _open_db(db)
    try:
        current = SessionManager(SqliteSessionStore(conn, area=tab)).current()
        if current is None:
            typer.echo(f"No session stored for tab '{tab}'.")
            raise typer.Exit(1)
        typer.echo(json.dumps(json.loads(current.to_json()), indent=2))
    finally:
        conn.close()


@app.command()
def replay(
    events: Path = typer.Argument(..., help="JSON-lines file of hook calls"),
    tab: str = typer.Option("replay", "--tab", "-t", help="Tab/window storage area"),
    db: Annotated[
        Path | None,
        typer.Option("--db", help="Session database path"),
    ] = None,
    url: str = typer.Option(SERVER_URL, "--url", help="Collection endpoint"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Log payloads instead of sending"),
) -> None:
    """Replay host hook calls through a tracker."""
    if not events.exists():
        logger.error("Events file not found: {}", events)
        raise typer.Exit(1)

    conn = _open_db(db)
    http: HttpTransport | None = None
    transport: TransportProtocol
    if dry_run:
        transport = LoggingTransport()
    else:
        transport = http = HttpTransport(url)

    try:
        clock = ReplayClock()
        tracker = EventTracker(transport, SqliteSessionStore(conn, area=tab), clock=clock)
        with open(events, encoding="utf-8") as f:
            stats = replay_events(tracker, f, clock)
    finally:
        if http is not None:
            http.close(wait=True)
        conn.close()

    typer.echo(
        f"Replayed {stats.lines} lines: dispatched {stats.dispatched}, skipped {stats.skipped}"
    )
