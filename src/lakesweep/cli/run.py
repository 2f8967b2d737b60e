"""
lakesweep run - Run one reconciliation pass.
"""

from pathlib import Path

import typer

from lakesweep.api import run_pass
from lakesweep.config.loader import load_config
from lakesweep.config.settings import ReconcilerSettings
from lakesweep.exceptions import ConfigurationError
from lakesweep.observability.structured_logging import setup_structured_logging
from lakesweep.utils.logging import get_logger, setup_logging_from_config

logger = get_logger("lakesweep.cli.run")


app = typer.Typer(name="run", help="Run one reconciliation pass", invoke_without_command=True)


@app.callback()
def run(
    env: str | None = typer.Option(None, help="Environment (dev, staging, prod)"),
    project_dir: Path = typer.Option(Path.cwd(), "--project-dir", "-d", help="Directory holding config.yaml"),
    expiry_seconds: int | None = typer.Option(
        None, "--expiry-seconds", help="Override reconcile.expiry_seconds from config"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
    json_logs: bool = typer.Option(False, "--json-logs", help="Emit JSON log lines"),
) -> None:
    """
    Remove expired external tables and repair tables with missing timestamps.

    Exits 0 when the pass ran (even if some batches failed), 1 when the
    configuration is invalid and 2 when the pass was aborted.
    """
    try:
        config = load_config(project_dir, env=env)
        settings = ReconcilerSettings.from_config(config, expiry_seconds=expiry_seconds)
    except ConfigurationError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1) from e

    level = "DEBUG" if verbose else (config.get("logging.level") or "INFO")
    if json_logs:
        setup_structured_logging(level=level, json_format=True)
    else:
        logging_section = dict(config.get("logging") or {})
        logging_section["level"] = level
        setup_logging_from_config({"logging": logging_section}, project_dir=project_dir)

    summary = run_pass(settings)

    typer.echo(
        f"Expired: {summary.expired_found}  Invalid: {summary.invalid_found}  "
        f"Removed: {summary.removed}/{summary.removal_statements}  "
        f"Updated: {summary.updated}/{summary.update_statements}  "
        f"Failed batches: {len(summary.failed_batches)}"
    )
    if summary.aborted:
        typer.echo(f"Aborted: {summary.error}", err=True)
        raise typer.Exit(2)
