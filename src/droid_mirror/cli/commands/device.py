"""Device CLI commands."""

from __future__ import annotations

import httpx
import typer

from droid_mirror.cli.client import MirrorClient
from droid_mirror.cli.utils import handle_response


def devices(
    url: str | None = typer.Option(None, "--url", help="Server base URL"),
    json_output: bool = typer.Option(False, "--json", help="Output JSON"),
) -> None:
    """List devices visible to the server's adb."""
    client = MirrorClient(url)
    try:
        resp = client.request("GET", "/api/devices")
    except httpx.TransportError as exc:
        typer.echo(f"Server not reachable at {client.base_url}")
        raise typer.Exit(code=1) from exc
    finally:
        client.close()

    data = handle_response(resp, json_output=json_output)
    if json_output:
        return
    entries = data.get("devices", [])
    if not entries:
        typer.echo("No devices")
        return
    for device in entries:
        typer.echo(f"{device['id']}  {device['status']}")
