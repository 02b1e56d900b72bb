"""Server CLI commands."""

from __future__ import annotations

import httpx
import typer
import uvicorn

from droid_mirror.cli.client import MirrorClient
from droid_mirror.cli.utils import handle_response
from droid_mirror.config import MirrorConfig
from droid_mirror.errors import MirrorError
from droid_mirror.log import configure_logging


def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Listen port"),
    frame_interval_ms: int | None = typer.Option(
        None, "--frame-interval", help="Milliseconds between frames"
    ),
    adb_path: str | None = typer.Option(None, "--adb", help="Path to the adb executable"),
    report_invalid: bool = typer.Option(
        False, "--report-invalid", help="Send an error for commands with out-of-range values"
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="debug|info|warning|error"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Log one JSON object per line"),
) -> None:
    """Run the mirroring server."""
    from droid_mirror.daemon.server import create_app

    try:
        config = MirrorConfig.from_env().with_overrides(
            host=host,
            port=port,
            frame_interval_ms=frame_interval_ms,
            adb_path=adb_path,
            report_invalid_commands=report_invalid or None,
            log_level=log_level,
        )
    except MirrorError as exc:
        typer.echo(str(exc))
        if exc.remediation:
            typer.echo(f"Hint: {exc.remediation}")
        raise typer.Exit(code=2) from exc

    configure_logging(config.log_level, json_output=json_logs)
    uvicorn.run(
        create_app(config),
        host=config.host,
        port=config.port,
        log_level=config.log_level,
    )


def status(
    url: str | None = typer.Option(None, "--url", help="Server base URL"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """Show health of a running server."""
    client = MirrorClient(url)
    try:
        resp = client.request("GET", "/api/health")
    except httpx.TransportError as exc:
        typer.echo(f"Server not reachable at {client.base_url}")
        raise typer.Exit(code=1) from exc
    finally:
        client.close()

    data = handle_response(resp, json_output=json_output)
    if json_output:
        return
    typer.echo(
        f"{data.get('status')}  version={data.get('version')} "
        f"sessions={data.get('active_sessions')} "
        f"frame_interval_ms={data.get('frame_interval_ms')}"
    )
