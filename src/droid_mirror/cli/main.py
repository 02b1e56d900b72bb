"""CLI entry point using Typer."""

from __future__ import annotations

import typer

from droid_mirror.cli.commands import device, server

app = typer.Typer(
    name="droid-mirror",
    help="Android screen mirroring and input server",
    no_args_is_help=True,
)


@app.command()
def version() -> None:
    """Show version information."""
    from droid_mirror import __version__

    typer.echo(f"droid-mirror v{__version__}")


app.command("serve")(server.serve)
app.command("status")(server.status)
app.command("devices")(device.devices)


if __name__ == "__main__":
    app()
