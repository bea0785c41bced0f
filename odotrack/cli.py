from __future__ import annotations

import importlib.metadata as md
from pathlib import Path

import typer
from rich.console import Console

from .config import OdoConfig, load_config, load_resolved_config, resolve_config_path
from .core import LocationTracker
from .domain.errors import NoActiveSessionError, TrackerError

# Typer application: tests import this
app = typer.Typer(no_args_is_help=True, add_completion=False, help="odotrack CLI")
console = Console()

CONFIG_OPTION = typer.Option(Path("configs/odotrack.yml"), "--config", "-c")


def _tracker(config: Path) -> LocationTracker:
    from .apps.odotrack_web import build_tracker

    return build_tracker(load_resolved_config(config))


def _fail(exc: TrackerError) -> None:
    console.print(f"[red]{type(exc).__name__}:[/red] {exc}")
    raise typer.Exit(code=1) from exc


@app.callback(invoke_without_command=True)
def main(ctx: typer.Context) -> None:
    """Entry point for `odotrack` command.

    If no subcommand is provided, show help and exit.
    """
    if ctx.invoked_subcommand is None:
        console.print("odotrack CLI - use `odotrack --help` to see commands.")
        raise typer.Exit(code=0)


@app.command()
def version() -> None:
    """Print version information."""
    try:
        dist_version = md.version("odotrack")
    except md.PackageNotFoundError:
        from . import __version__

        dist_version = __version__
    console.print(f"odotrack {dist_version}")
    raise typer.Exit(code=0)


@app.command(name="config-validate")
def config_validate(path: Path = typer.Argument(Path("configs/odotrack.yml"))) -> None:
    """Validate and show resolved configuration."""
    resolved = resolve_config_path(path)
    console.print(f"Using config: {resolved}")
    try:
        cfg: OdoConfig = load_config(resolved)
    except (OSError, ValueError) as exc:
        console.print(f"Config validation failed: {exc}")
        raise typer.Exit(code=1) from exc
    console.print("Config OK. Key settings:")
    console.print(f"- database: {cfg.storage.db_path}")
    console.print(f"- listen: {cfg.web.bind_host}:{cfg.web.bind_port}")
    console.print(f"- api key env: {cfg.auth.api_key_env} ({'set' if cfg.auth.resolve_api_key() else 'missing'})")


@app.command()
def config_which(config: Path = CONFIG_OPTION) -> None:
    """Print resolved config path by priority rules."""
    console.print(str(resolve_config_path(config)), soft_wrap=True)


@app.command()
def serve(
    config: Path = CONFIG_OPTION,
    port: int | None = typer.Option(None, "--port", "-p"),
) -> None:
    """Start the tracking HTTP API using CONFIG."""
    from .apps.odotrack_web import create_app
    from .log import configure_logging

    cfg = load_resolved_config(config)
    if port is not None:
        cfg.web.bind_port = port
    configure_logging(cfg.logging.level)
    create_app(cfg).run(host=cfg.web.bind_host, port=cfg.web.bind_port, threaded=True)


@app.command()
def status(config: Path = CONFIG_OPTION) -> None:
    """Show the latest session summary, last known position and store counts."""
    tracker = _tracker(config)
    try:
        summary = tracker.get_current_session_summary().to_wire()
    except NoActiveSessionError:
        summary = None
    latest = tracker.get_latest_location()
    console.print({
        "session": summary,
        "location": latest.to_wire() if latest else None,
        "store": tracker.get_stats(),
    })


@app.command()
def locations(
    config: Path = CONFIG_OPTION,
    session: int | None = typer.Option(None, "--session", "-s", help="Only samples of this session id"),
) -> None:
    """List stored samples in time order."""
    samples = _tracker(config).list_locations(session_id=session)
    for sample in samples:
        console.print(sample.to_wire())
    console.print(f"{len(samples)} sample(s)")


@app.command(name="start-session")
def start_session(config: Path = CONFIG_OPTION) -> None:
    """Open a new tracking session."""
    try:
        session = _tracker(config).ledger.start_session()
    except TrackerError as exc:
        _fail(exc)
    console.print(f"Session {session.id} started at {session.start_time.isoformat()}")


@app.command(name="end-session")
def end_session(config: Path = CONFIG_OPTION) -> None:
    """End the open tracking session."""
    try:
        session = _tracker(config).ledger.end_session()
    except TrackerError as exc:
        _fail(exc)
    console.print(f"Session {session.id} ended, distance {session.distance:.3f} km")


@app.command()
def wipe(
    config: Path = CONFIG_OPTION,
    confirm: str = typer.Option("", "--confirm", help='Must be exactly "CONFIRM"'),
) -> None:
    """Delete all sessions and locations."""
    try:
        result = _tracker(config).wipe_all(confirm)
    except TrackerError as exc:
        _fail(exc)
    console.print(result.to_wire())


def launch() -> None:
    """Entry point when executed as a module/script."""
    cli()  # use the prepared Click command


# Click command export for the console script
cli = typer.main.get_command(app)

__all__ = ["app", "cli"]

if __name__ == "__main__":
    launch()
