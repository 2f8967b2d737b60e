"""
Shared fixtures: an in-memory stand-in for the statement-execution service.
"""

import logging
import threading
from collections import defaultdict

import pytest

from lakesweep.config.settings import ReconcilerSettings, WarehouseSettings


class FakeStatementClient:
    """
    Records submitted SQL and plays back statuses and result rows.

    Every statement reports STARTED on its first describe and then FINISHED,
    unless ``fail_when(sql)`` is true, in which case it reports FAILED.
    SELECTs from the expired query return ``expired`` rows; SELECTs from the
    invalid query return ``invalid`` rows.
    """

    def __init__(self, expired=(), invalid=(), fail_when=None, page_size=None):
        self.expired = [[name] for name in expired]
        self.invalid = [list(pair) for pair in invalid]
        self.fail_when = fail_when or (lambda sql: False)
        self.page_size = page_size
        self.submitted: list[str] = []
        self.describe_calls: dict[str, int] = defaultdict(int)
        self.result_calls: list[tuple[str, str | None]] = []
        self._sql: dict[str, str] = {}
        self._lock = threading.Lock()

    def execute_statement(self, sql):
        with self._lock:
            statement_id = f"stmt-{len(self.submitted)}"
            self.submitted.append(sql)
            self._sql[statement_id] = sql
        return statement_id

    def describe_statement(self, statement_id):
        with self._lock:
            self.describe_calls[statement_id] += 1
            calls = self.describe_calls[statement_id]
            sql = self._sql[statement_id]
        if calls == 1:
            return {"Id": statement_id, "Status": "STARTED"}
        if self.fail_when(sql):
            return {"Id": statement_id, "Status": "FAILED", "Error": f"failure in {statement_id}"}
        return {"Id": statement_id, "Status": "FINISHED", "HasResultSet": sql.startswith("SELECT")}

    def get_statement_result(self, statement_id, next_token=None):
        self.result_calls.append((statement_id, next_token))
        sql = self._sql[statement_id]
        rows = self.invalid if "IS NULL" in sql else self.expired
        records = [[{"stringValue": value} for value in row] for row in rows]
        if self.page_size is None:
            return {"Records": records}
        start = int(next_token or 0)
        end = start + self.page_size
        page = {"Records": records[start:end]}
        if end < len(records):
            page["NextToken"] = str(end)
        return page

    # --- inspection helpers ---------------------------------------------------

    def batches(self, prefix):
        """Submitted batches whose statements start with ``prefix``."""
        return [sql.split("\n") for sql in self.submitted if sql.startswith(prefix)]

    @property
    def drop_statements(self):
        return [stmt for batch in self.batches("DROP TABLE") for stmt in batch]

    @property
    def update_statements(self):
        return [stmt for batch in self.batches("ALTER TABLE") for stmt in batch]


class FakeResolver:
    """Backing-location resolver answering from a dict and recording calls."""

    def __init__(self, timestamps=None, error=None):
        self.timestamps = timestamps or {}
        self.error = error
        self.calls: list[str] = []

    def resolve(self, location):
        self.calls.append(location)
        if self.error is not None:
            raise self.error
        return self.timestamps.get(location)


@pytest.fixture
def warehouse():
    return WarehouseSettings(
        database="analytics",
        secret_arn="arn:aws:secretsmanager:eu-west-2:123456789012:secret:redshift",
        cluster_id="reporting-cluster",
    )


@pytest.fixture
def settings(warehouse):
    return ReconcilerSettings(warehouse=warehouse, expiry_seconds=200, poll_interval=0)


@pytest.fixture(autouse=True)
def restore_lakesweep_logger():
    """Undo handler/propagation changes made by logging setup under test."""
    lakesweep_logger = logging.getLogger("lakesweep")
    handlers = list(lakesweep_logger.handlers)
    level = lakesweep_logger.level
    propagate = lakesweep_logger.propagate
    yield
    lakesweep_logger.handlers[:] = handlers
    lakesweep_logger.setLevel(level)
    lakesweep_logger.propagate = propagate
