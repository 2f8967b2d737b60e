"""
Statement execution gateway.

Submits SQL to the asynchronous statement-execution service, polls each
statement until it reaches a terminal status and reads back result rows.
The service client is synchronous (boto3), so every call is moved off the
event loop with ``asyncio.to_thread``; the only suspension point while a
statement runs is the poll sleep, so concurrent batches progress
independently.

Usage:
    gateway = StatementGateway(connection, poll_interval=1.0)
    handle = await gateway.submit("SELECT 1")
    if await gateway.await_completion(handle):
        rows = await gateway.fetch_results(handle)
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any, Protocol

from lakesweep.exceptions import StatementSubmissionError
from lakesweep.statements.types import BatchOutcome, Row, StatementDescription, StatementHandle
from lakesweep.utils.batching import partition
from lakesweep.utils.logging import get_logger

logger = get_logger("lakesweep.statements.gateway")


class StatementClient(Protocol):
    """Synchronous statement-execution service, e.g. RedshiftDataConnection."""

    def execute_statement(self, sql: str) -> str: ...

    def describe_statement(self, statement_id: str) -> dict[str, Any]: ...

    def get_statement_result(self, statement_id: str, next_token: str | None = None) -> dict[str, Any]: ...


def field_value(field: dict[str, Any]) -> Any:
    """
    Convert one typed result field to a Python value.

    Fields carry exactly one of isNull, booleanValue, longValue, doubleValue,
    stringValue or blobValue.
    """
    if field.get("isNull"):
        return None
    for key in ("stringValue", "longValue", "doubleValue", "booleanValue", "blobValue"):
        if key in field:
            return field[key]
    return None


class StatementGateway:
    """
    Async facade over the statement-execution service.

    Polling has no timeout: a statement that never reaches a terminal status
    blocks only the task awaiting it. Wrap calls in ``asyncio.wait_for`` when
    an upper bound is needed.
    """

    def __init__(self, client: StatementClient, *, poll_interval: float = 1.0, max_concurrency: int = 8):
        """
        Args:
            client: Synchronous statement-execution client
            poll_interval: Seconds between status checks
            max_concurrency: Maximum number of batches in flight at once
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self.client = client
        self.poll_interval = poll_interval
        self.max_concurrency = max_concurrency
        self._slots = asyncio.Semaphore(max_concurrency)

    async def submit(self, sql: str) -> StatementHandle:
        """
        Submit one SQL string as-is.

        Syntax errors are reported by the service at poll time, not here.

        Raises:
            StatementSubmissionError: If the service rejects the request
        """
        try:
            statement_id = await asyncio.to_thread(self.client.execute_statement, sql)
        except Exception as e:
            raise StatementSubmissionError(f"Failed to submit statement: {e}", sql=sql, cause=e) from e
        logger.debug(f"Submitted statement {statement_id}")
        return StatementHandle(statement_id)

    async def describe(self, handle: StatementHandle) -> StatementDescription:
        response = await asyncio.to_thread(self.client.describe_statement, handle.id)
        return StatementDescription.from_response(response)

    async def wait(self, handle: StatementHandle) -> StatementDescription:
        """Poll until the statement reaches a terminal status and return it."""
        description = await self.describe(handle)
        while not description.status.is_terminal:
            logger.info(f"Statement {handle.id} status: {description.status.value}")
            await asyncio.sleep(self.poll_interval)
            description = await self.describe(handle)

        if description.status.is_success:
            logger.info(f"Statement {handle.id} completed successfully")
        else:
            logger.error(
                f"Statement {handle.id} failed with status: {description.status.value} - {description.error}"
            )
        return description

    async def await_completion(self, handle: StatementHandle) -> bool:
        """
        Poll a statement to completion.

        Returns:
            True for FINISHED; False for FAILED or ABORTED (the service error
            text is logged, not raised)
        """
        description = await self.wait(handle)
        return description.status.is_success

    async def fetch_results(self, handle: StatementHandle) -> list[Row]:
        """
        Read every result row of a finished statement, following pagination.

        The service rejects result reads for statements that failed or carry
        no result set, so the status is checked first.

        Returns:
            Rows as lists of Python values; empty unless the statement
            finished with a result set
        """
        description = await self.describe(handle)
        if not (description.status.is_success and description.has_result_set):
            return []
        return await self._read_rows(handle)

    async def _read_rows(self, handle: StatementHandle) -> list[Row]:
        rows: list[Row] = []
        next_token: str | None = None
        while True:
            page = await asyncio.to_thread(self.client.get_statement_result, handle.id, next_token)
            for record in page.get("Records") or []:
                rows.append([field_value(field) for field in record])
            next_token = page.get("NextToken")
            if not next_token:
                break
        return rows

    async def query(self, handle: StatementHandle) -> list[Row] | None:
        """
        Await a submitted query and read its rows.

        Returns:
            Result rows, or None if the statement did not finish successfully
        """
        description = await self.wait(handle)
        if not description.status.is_success:
            return None
        if not description.has_result_set:
            return []
        return await self._read_rows(handle)

    async def execute_batched(self, statements: Sequence[str], batch_size: int, label: str = "batch") -> list[BatchOutcome]:
        """
        Run statements as newline-joined batches of at most ``batch_size``.

        Every batch is submitted and polled in its own task; a failed or
        erroring batch is logged and reported without affecting its siblings.
        Nothing is submitted for an empty input.

        Args:
            statements: SQL statements, each terminated by the caller
            batch_size: Maximum statements per submission
            label: Operation name used in log lines

        Returns:
            One outcome per batch, in batch order
        """
        batches = partition(statements, batch_size)
        if not batches:
            return []

        logger.info(f"Running {len(statements)} {label} statement(s) in {len(batches)} batch(es)")
        tasks = [
            asyncio.create_task(self._run_batch(label, index, batch), name=f"{label}-{index}")
            for index, batch in enumerate(batches)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        outcomes: list[BatchOutcome] = []
        for index, (batch, result) in enumerate(zip(batches, results, strict=True)):
            if isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                logger.error(f"{label} batch {index + 1}/{len(batches)} raised: {result}")
                outcomes.append(BatchOutcome(label, index, len(batch), False, error=str(result)))
            else:
                outcomes.append(result)
        return outcomes

    async def _run_batch(self, label: str, index: int, batch: list[str]) -> BatchOutcome:
        sql = "\n".join(batch)
        async with self._slots:
            logger.debug(f"Executing {label} batch {index + 1}:\n{sql}")
            handle = await self.submit(sql)
            description = await self.wait(handle)

        if not description.status.is_success:
            logger.error(f"{label} batch {index + 1} ({len(batch)} statement(s)) did not complete")
        return BatchOutcome(
            label=label,
            index=index,
            statement_count=len(batch),
            succeeded=description.status.is_success,
            statement_id=handle.id,
            error=description.error,
        )
