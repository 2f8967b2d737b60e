"""
Main CLI entry point.
"""

import typer

from lakesweep import __version__
from lakesweep.cli import run


def version_callback(value: bool):
    """Callback to display version and exit."""
    if value:
        typer.echo(f"lakesweep version {__version__}")
        raise typer.Exit()


app = typer.Typer(
    name="lakesweep",
    help="Lakesweep - remove expired warehouse external tables and repair their metadata",
    add_completion=False,
)

app.add_typer(run.app, name="run")


@app.callback(invoke_without_command=True)
def entrypoint(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
):
    """
    Lakesweep - remove expired warehouse external tables and repair their metadata.

    Run 'lakesweep <command> --help' for help on a specific command.
    """
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


def main():
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
