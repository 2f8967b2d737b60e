"""
Typed settings for one reconciliation pass.

Settings come either from a loaded ``config.yaml`` (CLI) or straight from
process environment variables (Lambda).
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from lakesweep.config.loader import Config
from lakesweep.exceptions import ConfigurationError

DEFAULT_REGION = "eu-west-2"
DEFAULT_SCHEMA = "reports"
DEFAULT_REMOVAL_BATCH_SIZE = 500
DEFAULT_UPDATE_BATCH_SIZE = 100
DEFAULT_POLL_INTERVAL = 1.0
DEFAULT_MAX_CONCURRENCY = 8

# Lambda environment variable names
CLUSTER_ID_VAR = "CLUSTER_ID"
WORKGROUP_NAME_VAR = "WORKGROUP_NAME"
DB_NAME_VAR = "DB_NAME"
CREDENTIAL_SECRET_ARN_VAR = "CREDENTIAL_SECRET_ARN"
EXPIRY_SECONDS_VAR = "EXPIRY_SECONDS"
REGION_VAR = "AWS_REGION"
SCHEMA_VAR = "EXTERNAL_SCHEMA"
REMOVAL_BATCH_SIZE_VAR = "REMOVAL_BATCH_SIZE"
UPDATE_BATCH_SIZE_VAR = "UPDATE_BATCH_SIZE"


@dataclass(frozen=True)
class WarehouseSettings:
    """Where statements are executed and with which credentials."""

    database: str
    secret_arn: str
    cluster_id: str | None = None
    workgroup_name: str | None = None
    region: str = DEFAULT_REGION

    def __post_init__(self):
        if not self.database:
            raise ConfigurationError("warehouse.database is required")
        if not self.secret_arn:
            raise ConfigurationError("warehouse.secret_arn is required")
        if bool(self.cluster_id) == bool(self.workgroup_name):
            raise ConfigurationError(
                "Exactly one of warehouse.cluster_id or warehouse.workgroup_name must be set",
                details={"cluster_id": self.cluster_id, "workgroup_name": self.workgroup_name},
            )

    def statement_target(self) -> dict[str, str]:
        """Keyword arguments identifying the warehouse on every submission."""
        target = {"Database": self.database, "SecretArn": self.secret_arn}
        if self.cluster_id:
            target["ClusterIdentifier"] = self.cluster_id
        else:
            target["WorkgroupName"] = self.workgroup_name  # type: ignore[assignment]
        return target


@dataclass(frozen=True)
class ReconcilerSettings:
    """Everything a reconciliation pass needs besides its clients."""

    warehouse: WarehouseSettings
    expiry_seconds: int
    schema: str = DEFAULT_SCHEMA
    removal_batch_size: int = DEFAULT_REMOVAL_BATCH_SIZE
    update_batch_size: int = DEFAULT_UPDATE_BATCH_SIZE
    poll_interval: float = DEFAULT_POLL_INTERVAL
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY

    def __post_init__(self):
        if self.expiry_seconds < 0:
            raise ConfigurationError("expiry_seconds must be >= 0")
        if not self.schema:
            raise ConfigurationError("schema cannot be empty")
        if self.removal_batch_size < 1:
            raise ConfigurationError("removal_batch_size must be >= 1")
        if self.update_batch_size < 1:
            raise ConfigurationError("update_batch_size must be >= 1")
        if self.poll_interval < 0:
            raise ConfigurationError("poll_interval must be >= 0")
        if self.max_concurrency < 1:
            raise ConfigurationError("max_concurrency must be >= 1")

    @classmethod
    def from_config(cls, config: Config, *, expiry_seconds: int | None = None) -> "ReconcilerSettings":
        """
        Build settings from a loaded configuration.

        Config example:
            warehouse:
              cluster_id: ${CLUSTER_ID}
              database: ${DB_NAME}
              secret_arn: ${CREDENTIAL_SECRET_ARN}
              region: eu-west-2
            reconcile:
              schema: reports
              expiry_seconds: 86400
              removal_batch_size: 500
              update_batch_size: 100
              poll_interval: 1.0
              max_concurrency: 8

        Args:
            config: Loaded configuration
            expiry_seconds: Optional override of ``reconcile.expiry_seconds``
        """
        warehouse = config.warehouse or {}
        reconcile = config.reconcile or {}

        if expiry_seconds is None:
            expiry_seconds = _as_int(reconcile.get("expiry_seconds"), "reconcile.expiry_seconds", required=True)

        return cls(
            warehouse=WarehouseSettings(
                database=_as_str(warehouse.get("database")),
                secret_arn=_as_str(warehouse.get("secret_arn")),
                cluster_id=_as_str(warehouse.get("cluster_id")) or None,
                workgroup_name=_as_str(warehouse.get("workgroup_name")) or None,
                region=_as_str(warehouse.get("region")) or DEFAULT_REGION,
            ),
            expiry_seconds=expiry_seconds,  # type: ignore[arg-type]
            schema=_as_str(reconcile.get("schema")) or DEFAULT_SCHEMA,
            removal_batch_size=_as_int(
                reconcile.get("removal_batch_size"), "reconcile.removal_batch_size", DEFAULT_REMOVAL_BATCH_SIZE
            ),
            update_batch_size=_as_int(
                reconcile.get("update_batch_size"), "reconcile.update_batch_size", DEFAULT_UPDATE_BATCH_SIZE
            ),
            poll_interval=_as_float(reconcile.get("poll_interval"), "reconcile.poll_interval", DEFAULT_POLL_INTERVAL),
            max_concurrency=_as_int(
                reconcile.get("max_concurrency"), "reconcile.max_concurrency", DEFAULT_MAX_CONCURRENCY
            ),
        )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ReconcilerSettings":
        """Build settings from Lambda environment variables."""
        if environ is None:
            environ = os.environ

        return cls(
            warehouse=WarehouseSettings(
                database=environ.get(DB_NAME_VAR, ""),
                secret_arn=environ.get(CREDENTIAL_SECRET_ARN_VAR, ""),
                cluster_id=environ.get(CLUSTER_ID_VAR) or None,
                workgroup_name=environ.get(WORKGROUP_NAME_VAR) or None,
                region=environ.get(REGION_VAR) or DEFAULT_REGION,
            ),
            expiry_seconds=_as_int(environ.get(EXPIRY_SECONDS_VAR), EXPIRY_SECONDS_VAR, required=True),  # type: ignore[arg-type]
            schema=environ.get(SCHEMA_VAR) or DEFAULT_SCHEMA,
            removal_batch_size=_as_int(
                environ.get(REMOVAL_BATCH_SIZE_VAR), REMOVAL_BATCH_SIZE_VAR, DEFAULT_REMOVAL_BATCH_SIZE
            ),
            update_batch_size=_as_int(environ.get(UPDATE_BATCH_SIZE_VAR), UPDATE_BATCH_SIZE_VAR, DEFAULT_UPDATE_BATCH_SIZE),
        )


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    text = str(value)
    if text.startswith("${"):
        raise ConfigurationError(f"Unresolved environment variable in configuration: {text}")
    return text


def _as_int(value: Any, name: str, default: int | None = None, *, required: bool = False) -> int | None:
    if value is None or value == "":
        if required:
            raise ConfigurationError(f"{name} is required")
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be an integer, got {value!r}") from e


def _as_float(value: Any, name: str, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a number, got {value!r}") from e
