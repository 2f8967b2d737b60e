"""
Programmatic API for Lakesweep.
"""

from __future__ import annotations

from typing import Any

from lakesweep.config.settings import ReconcilerSettings
from lakesweep.connections.redshift_data import RedshiftDataConnection
from lakesweep.connections.s3 import S3LocationResolver
from lakesweep.reconcile.models import ReconciliationSummary
from lakesweep.reconcile.reconciler import LocationResolver, TableLifecycleReconciler
from lakesweep.statements.gateway import StatementGateway
from lakesweep.utils.async_utils import dual


def build_reconciler(
    settings: ReconcilerSettings,
    *,
    data_client: Any = None,
    resolver: LocationResolver | None = None,
) -> TableLifecycleReconciler:
    """
    Wire the connections, gateway and reconciler for one pass.

    Args:
        settings: Pass settings
        data_client: Optional pre-built ``redshift-data`` boto3 client
        resolver: Optional backing-location resolver (default: S3)

    Returns:
        A reconciler ready to ``run()``
    """
    connection = RedshiftDataConnection("warehouse", settings.warehouse, client=data_client)
    gateway = StatementGateway(
        connection,
        poll_interval=settings.poll_interval,
        max_concurrency=settings.max_concurrency,
    )
    if resolver is None:
        resolver = S3LocationResolver("backing_data", {"config": {"region": settings.warehouse.region}})
    return TableLifecycleReconciler(gateway, resolver, settings)


@dual
async def run_pass(
    settings: ReconcilerSettings,
    *,
    data_client: Any = None,
    resolver: LocationResolver | None = None,
) -> ReconciliationSummary:
    """
    Run one reconciliation pass; works in both sync and async contexts.

    Examples:
        summary = run_pass(ReconcilerSettings.from_env())        # sync
        summary = await run_pass(settings, resolver=my_resolver)  # async
    """
    reconciler = build_reconciler(settings, data_client=data_client, resolver=resolver)
    return await reconciler.run()
