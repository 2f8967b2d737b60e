#!/usr/bin/env python3
"""
Example script running one reconciliation pass through the programmatic API.

Requires CREDENTIAL_SECRET_ARN (and AWS credentials) in the environment.
"""

from pathlib import Path

from lakesweep import ReconcilerSettings, load_config, run_pass, setup_logging


if __name__ == "__main__":
    project_dir = Path(__file__).parent

    setup_logging(level="INFO")
    settings = ReconcilerSettings.from_config(load_config(project_dir, env="dev"))
    summary = run_pass(settings)

    print(f"Removed {summary.removed}/{summary.removal_statements}, updated {summary.updated}/{summary.update_statements}")
    if summary.aborted:
        print(f"Pass aborted: {summary.error}")
