"""
AWS Lambda entry point.

Environment:
    CLUSTER_ID or WORKGROUP_NAME, DB_NAME, CREDENTIAL_SECRET_ARN,
    EXPIRY_SECONDS; optionally AWS_REGION, EXTERNAL_SCHEMA,
    REMOVAL_BATCH_SIZE, UPDATE_BATCH_SIZE, LOG_LEVEL.
"""

from __future__ import annotations

import os
from typing import Any

from lakesweep.api import run_pass
from lakesweep.config.settings import ReconcilerSettings
from lakesweep.observability.structured_logging import setup_structured_logging
from lakesweep.utils.logging import get_logger

logger = get_logger("lakesweep.handler")


def handler(event: dict[str, Any], context: Any) -> None:
    """
    Remove expired external tables and repair ones with missing timestamps.

    Returns None whatever the reconciliation outcome; failures are visible
    in the logs only. Invalid configuration is the exception and raises, so
    a misconfigured deployment fails loudly.
    """
    setup_structured_logging(level=os.environ.get("LOG_LEVEL", "INFO"), json_format=True)

    settings = ReconcilerSettings.from_env()
    request_id = getattr(context, "aws_request_id", None)

    logger.info("Started expired table removal", extra={"request_id": request_id})
    run_pass(settings)
    logger.info("Finished expired table removal", extra={"request_id": request_id})
    return None
