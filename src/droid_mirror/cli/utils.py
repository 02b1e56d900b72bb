"""Shared CLI helpers."""

from __future__ import annotations

from typing import Any, cast

import typer

from droid_mirror.cli.client import format_json


def _parse_response_json(resp: Any) -> dict[str, Any]:
    try:
        return cast(dict[str, Any], resp.json())
    except ValueError as exc:
        typer.echo("Failed to parse response")
        raise typer.Exit(code=1) from exc


def _maybe_render_error(data: dict[str, Any]) -> None:
    if not (isinstance(data, dict) and data.get("error")):
        return
    error = data["error"]
    message = f"{error.get('code')}: {error.get('message')}"
    remediation = error.get("remediation")
    typer.echo(message)
    if remediation:
        typer.echo(f"Hint: {remediation}")
    raise typer.Exit(code=1)


def handle_response(resp: Any, json_output: bool = False) -> dict[str, Any]:
    """Parse a server response, echoing it as JSON or exiting on an error envelope.

    Returns the decoded payload for commands that render it themselves.
    """
    data = _parse_response_json(resp)
    if json_output:
        typer.echo(format_json(data))
        return data
    _maybe_render_error(data)
    return data
