"""
Table lifecycle reconciler.

One pass over the external table definitions of a schema:

1. Submit the expired-by-age and invalid-metadata classification queries
   together.
2. Await the expired-by-age names. A failure here aborts the pass.
3. Start dropping the expired tables in the background.
4. Await the invalid-metadata descriptors and resolve each backing
   location's timestamp, one resolver call per table.
5. Drop tables whose backing data is missing or expired; record the
   timestamp on the others.
6. Wait for every removal and update batch.

Statement failures are logged per batch and never stop sibling batches.
Any exception escaping the steps above is logged and the pass ends without
re-raising; the next invocation re-evaluates the catalog from scratch.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable, Sequence
from typing import Optional, Protocol

from lakesweep.config.settings import ReconcilerSettings
from lakesweep.exceptions import ClassificationError
from lakesweep.observability.structured_logging import add_correlation_id
from lakesweep.reconcile.models import (
    REMOVE_LABEL,
    UPDATE_LABEL,
    Disposition,
    ExternalTableDescriptor,
    ExternalTableMetadata,
    ReconciliationSummary,
)
from lakesweep.reconcile.queries import (
    drop_table_statement,
    expired_tables_query,
    invalid_tables_query,
    set_last_ddl_time_statement,
)
from lakesweep.statements.gateway import StatementGateway
from lakesweep.statements.types import BatchOutcome, Row, StatementHandle
from lakesweep.utils.logging import get_logger

logger = get_logger("lakesweep.reconcile")


class LocationResolver(Protocol):
    """Looks up the last-modification time of a table's backing data."""

    def resolve(self, location: str) -> Optional[int]:
        """Epoch milliseconds, or None when there is no data at ``location``."""
        ...


def now_millis() -> int:
    return int(time.time() * 1000)


def classify(table: ExternalTableMetadata, now: int, expiry_seconds: int) -> Disposition:
    """
    Decide what to do with a table whose catalog timestamp was missing.

    Timestamps are epoch milliseconds; the expiry threshold is converted from
    seconds before comparing.

    Args:
        table: Table with its resolved backing-data timestamp
        now: Current time in epoch milliseconds
        expiry_seconds: Age beyond which a table is expired

    Returns:
        REMOVE if the backing data is missing or expired, UPDATE otherwise
    """
    if table.created_epoch_millis is None:
        return Disposition.REMOVE
    if table.created_epoch_millis + expiry_seconds * 1000 <= now:
        return Disposition.REMOVE
    return Disposition.UPDATE


def split_by_disposition(
    tables: Sequence[ExternalTableMetadata], now: int, expiry_seconds: int
) -> tuple[list[ExternalTableMetadata], list[ExternalTableMetadata]]:
    """Split tables into (to_remove, to_update), preserving order."""
    to_remove: list[ExternalTableMetadata] = []
    to_update: list[ExternalTableMetadata] = []
    for table in tables:
        if classify(table, now, expiry_seconds) is Disposition.REMOVE:
            to_remove.append(table)
        else:
            to_update.append(table)
    return to_remove, to_update


class TableLifecycleReconciler:
    """Runs reconciliation passes against one warehouse schema."""

    def __init__(
        self,
        gateway: StatementGateway,
        resolver: LocationResolver,
        settings: ReconcilerSettings,
        *,
        clock: Callable[[], int] = now_millis,
    ):
        """
        Args:
            gateway: Statement gateway bound to the warehouse
            resolver: Backing-location metadata resolver
            settings: Schema, expiry threshold and batch sizes
            clock: Returns the current time in epoch milliseconds
        """
        self.gateway = gateway
        self.resolver = resolver
        self.settings = settings
        self.clock = clock

    async def run(self) -> ReconciliationSummary:
        """
        Run one reconciliation pass.

        Never raises: failures are logged and reflected in the returned
        summary (``aborted`` / ``failed_batches``).
        """
        summary = ReconciliationSummary()
        pending: list[asyncio.Task[list[BatchOutcome]]] = []

        with add_correlation_id():
            logger.info(f"Started external table reconciliation for schema '{self.settings.schema}'")
            try:
                await self._reconcile(summary, pending)
            except Exception as e:
                summary.aborted = True
                summary.error = str(e)
                logger.error(f"Failed to reconcile external tables: {e}", exc_info=True)
                await self._drain(pending, summary)

            self._log_summary(summary)
        return summary

    async def _reconcile(self, summary: ReconciliationSummary, pending: list[asyncio.Task[list[BatchOutcome]]]) -> None:
        schema = self.settings.schema

        expired_handle, invalid_handle = await asyncio.gather(
            self.gateway.submit(expired_tables_query(schema, self.settings.expiry_seconds)),
            self.gateway.submit(invalid_tables_query(schema)),
        )

        expired_rows = await self.gateway.query(expired_handle)
        if expired_rows is None:
            raise ClassificationError("expired tables", expired_handle.id)
        expired_names = [str(row[0]) for row in expired_rows]
        summary.expired_found = len(expired_names)
        logger.info(f"Found {len(expired_names)} expired tables to remove")

        if expired_names:
            pending.append(self._start_removal(expired_names, summary))

        invalid_tables = await self._collect_invalid_tables(invalid_handle)
        summary.invalid_found = len(invalid_tables)
        logger.info(f"Found {len(invalid_tables)} tables without a valid last DDL time")

        if invalid_tables:
            resolved = await self._resolve(invalid_tables)
            to_remove, to_update = split_by_disposition(resolved, self.clock(), self.settings.expiry_seconds)
            logger.info(
                f"{len(to_remove)} tables have missing or expired backing data, "
                f"{len(to_update)} tables will have their last DDL time updated"
            )

            if to_remove:
                pending.append(self._start_removal([t.table_name for t in to_remove], summary))
            if to_update:
                pending.append(self._start_update(to_update, summary))

        for outcomes in await asyncio.gather(*pending):
            summary.batches.extend(outcomes)

    async def _collect_invalid_tables(self, handle: StatementHandle) -> list[ExternalTableDescriptor]:
        rows: list[Row] | None = await self.gateway.query(handle)
        if rows is None:
            # Not fatal: tables stay invalid and are picked up by the next pass
            logger.error(f"Invalid tables query {handle.id} failed; skipping metadata repair")
            return []
        return [ExternalTableDescriptor(str(row[0]), str(row[1])) for row in rows]

    async def _resolve(self, tables: Sequence[ExternalTableDescriptor]) -> list[ExternalTableMetadata]:
        resolved: list[ExternalTableMetadata] = []
        for table in tables:
            created = await asyncio.to_thread(self.resolver.resolve, table.backing_location)
            logger.debug(f"Resolved {table.table_name} at {table.backing_location}: {created}")
            resolved.append(ExternalTableMetadata(table.table_name, table.backing_location, created))
        return resolved

    def _start_removal(self, table_names: list[str], summary: ReconciliationSummary) -> asyncio.Task[list[BatchOutcome]]:
        statements = [drop_table_statement(self.settings.schema, name) for name in table_names]
        summary.removal_statements += len(statements)
        logger.info("Removing tables:\n" + "\n".join(table_names))
        return asyncio.create_task(
            self.gateway.execute_batched(statements, self.settings.removal_batch_size, REMOVE_LABEL)
        )

    def _start_update(
        self, tables: list[ExternalTableMetadata], summary: ReconciliationSummary
    ) -> asyncio.Task[list[BatchOutcome]]:
        statements = [
            set_last_ddl_time_statement(self.settings.schema, t.table_name, t.created_epoch_millis)  # type: ignore[arg-type]
            for t in tables
        ]
        summary.update_statements += len(statements)
        logger.info("Updating last DDL time for tables:\n" + "\n".join(t.table_name for t in tables))
        return asyncio.create_task(
            self.gateway.execute_batched(statements, self.settings.update_batch_size, UPDATE_LABEL)
        )

    @staticmethod
    async def _drain(pending: list[asyncio.Task[list[BatchOutcome]]], summary: ReconciliationSummary) -> None:
        """Wait for batches already started before the pass failed."""
        for result in await asyncio.gather(*pending, return_exceptions=True):
            if isinstance(result, list):
                summary.batches.extend(result)

    @staticmethod
    def _log_summary(summary: ReconciliationSummary) -> None:
        if summary.aborted:
            logger.error(f"Reconciliation aborted: {summary.error}")
            return

        logger.info(
            f"Removed {summary.removed} of {summary.removal_statements} tables, "
            f"updated {summary.updated} of {summary.update_statements} tables"
        )
        for outcome in summary.failed_batches:
            logger.error(
                f"{outcome.label} batch {outcome.index + 1} ({outcome.statement_count} statement(s), "
                f"statement {outcome.statement_id}) failed: {outcome.error}"
            )
        logger.info("Finished external table reconciliation")
