"""
Tests for the statement execution gateway.
"""

import logging
import threading
from unittest.mock import MagicMock

import pytest
from conftest import FakeStatementClient

from lakesweep.exceptions import StatementSubmissionError
from lakesweep.statements import (
    StatementDescription,
    StatementGateway,
    StatementHandle,
    StatementStatus,
    field_value,
)


def _client_with_statuses(*statuses, error=None):
    client = MagicMock()
    client.execute_statement.return_value = "stmt-1"
    client.describe_statement.side_effect = [
        {"Id": "stmt-1", "Status": status, "Error": error if status in ("FAILED", "ABORTED") else None}
        for status in statuses
    ]
    return client


class TestStatementStatus:
    """Terminal and success classification of service statuses."""

    @pytest.mark.parametrize("status", ["FINISHED", "FAILED", "ABORTED"])
    def test_terminal(self, status):
        assert StatementStatus(status).is_terminal

    @pytest.mark.parametrize("status", ["SUBMITTED", "PICKED", "STARTED"])
    def test_non_terminal(self, status):
        assert not StatementStatus(status).is_terminal

    def test_only_finished_is_success(self):
        assert [s for s in StatementStatus if s.is_success] == [StatementStatus.FINISHED]

    def test_description_from_response(self):
        description = StatementDescription.from_response(
            {"Status": "FAILED", "Error": "syntax error at or near", "HasResultSet": False}
        )
        assert description.status is StatementStatus.FAILED
        assert description.error == "syntax error at or near"
        assert description.has_result_set is False


class TestFieldValue:
    def test_string(self):
        assert field_value({"stringValue": "t1"}) == "t1"

    def test_long(self):
        assert field_value({"longValue": 42}) == 42

    def test_null(self):
        assert field_value({"isNull": True}) is None

    def test_boolean_false_is_kept(self):
        assert field_value({"booleanValue": False}) is False


class TestSubmit:
    @pytest.mark.asyncio
    async def test_submit_passes_sql_through(self):
        client = MagicMock()
        client.execute_statement.return_value = "abc"
        gateway = StatementGateway(client, poll_interval=0)

        handle = await gateway.submit("SELEC broken sql")

        assert handle == StatementHandle("abc")
        client.execute_statement.assert_called_once_with("SELEC broken sql")

    @pytest.mark.asyncio
    async def test_submit_failure_raises_submission_error(self):
        client = MagicMock()
        client.execute_statement.side_effect = RuntimeError("throttled")
        gateway = StatementGateway(client, poll_interval=0)

        with pytest.raises(StatementSubmissionError, match="throttled") as exc_info:
            await gateway.submit("SELECT 1")
        assert exc_info.value.sql == "SELECT 1"


class TestAwaitCompletion:
    @pytest.mark.asyncio
    async def test_finished_returns_true_after_polling(self):
        client = _client_with_statuses("SUBMITTED", "PICKED", "STARTED", "FINISHED")
        gateway = StatementGateway(client, poll_interval=0)

        assert await gateway.await_completion(StatementHandle("stmt-1")) is True
        assert client.describe_statement.call_count == 4

    @pytest.mark.asyncio
    @pytest.mark.parametrize("terminal", ["FAILED", "ABORTED"])
    async def test_failure_returns_false_and_logs_error(self, terminal, caplog):
        client = _client_with_statuses("STARTED", terminal, error="relation does not exist")
        gateway = StatementGateway(client, poll_interval=0)

        with caplog.at_level(logging.INFO, logger="lakesweep"):
            result = await gateway.await_completion(StatementHandle("stmt-1"))

        assert result is False
        errors = [r.getMessage() for r in caplog.records if r.levelno == logging.ERROR]
        assert any("relation does not exist" in message for message in errors)
        assert any("status: STARTED" in r.getMessage() for r in caplog.records)


class TestFetchResults:
    @pytest.mark.asyncio
    async def test_rows_follow_pagination(self):
        client = FakeStatementClient(expired=["a", "b", "c", "d", "e"], page_size=2)
        gateway = StatementGateway(client, poll_interval=0)
        handle = await gateway.submit("SELECT tablename FROM x")
        assert await gateway.await_completion(handle)

        rows = await gateway.fetch_results(handle)

        assert rows == [["a"], ["b"], ["c"], ["d"], ["e"]]
        assert [token for _, token in client.result_calls] == [None, "2", "4"]

    @pytest.mark.asyncio
    async def test_empty_result(self):
        client = MagicMock()
        client.describe_statement.return_value = {"Status": "FINISHED", "HasResultSet": True}
        client.get_statement_result.return_value = {"Records": []}
        gateway = StatementGateway(client, poll_interval=0)

        assert await gateway.fetch_results(StatementHandle("x")) == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", ["FAILED", "ABORTED", "FINISHED"])
    async def test_no_result_set_returns_empty_without_reading(self, status):
        client = MagicMock()
        client.describe_statement.return_value = {"Status": status, "HasResultSet": False}
        client.get_statement_result.side_effect = RuntimeError(
            "ResourceNotFoundException: Query does not have result"
        )
        gateway = StatementGateway(client, poll_interval=0)
        handle = StatementHandle("stmt-1")

        await gateway.await_completion(handle)

        assert await gateway.fetch_results(handle) == []
        client.get_statement_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_failed_statement_after_polling_returns_empty(self):
        client = FakeStatementClient(expired=["a"], fail_when=lambda sql: True)
        gateway = StatementGateway(client, poll_interval=0)
        handle = await gateway.submit("SELECT tablename FROM x")

        assert await gateway.await_completion(handle) is False
        assert await gateway.fetch_results(handle) == []
        assert client.result_calls == []

    @pytest.mark.asyncio
    async def test_query_returns_none_on_failure(self):
        client = _client_with_statuses("FAILED", error="boom")
        gateway = StatementGateway(client, poll_interval=0)

        assert await gateway.query(StatementHandle("stmt-1")) is None
        client.get_statement_result.assert_not_called()

    @pytest.mark.asyncio
    async def test_query_without_result_set_skips_fetch(self):
        client = MagicMock()
        client.describe_statement.return_value = {"Status": "FINISHED", "HasResultSet": False}
        gateway = StatementGateway(client, poll_interval=0)

        assert await gateway.query(StatementHandle("stmt-1")) == []
        client.get_statement_result.assert_not_called()


class TestExecuteBatched:
    @pytest.mark.asyncio
    async def test_partitions_into_contiguous_batches(self):
        client = FakeStatementClient()
        gateway = StatementGateway(client, poll_interval=0)
        statements = [f"DROP TABLE IF EXISTS t{i};" for i in range(7)]

        outcomes = await gateway.execute_batched(statements, batch_size=3, label="remove")

        assert len(client.submitted) == 3
        batches = sorted((sql.split("\n") for sql in client.submitted), key=len, reverse=True)
        assert [len(b) for b in batches] == [3, 3, 1]
        assert sorted(s for b in batches for s in b) == sorted(statements)
        assert [o.index for o in outcomes] == [0, 1, 2]
        assert [o.statement_count for o in outcomes] == [3, 3, 1]
        assert all(o.succeeded for o in outcomes)

    @pytest.mark.asyncio
    async def test_batch_contents_keep_input_order(self):
        client = FakeStatementClient()
        gateway = StatementGateway(client, poll_interval=0)

        await gateway.execute_batched(["s1;", "s2;"], batch_size=5)

        assert client.submitted == ["s1;\ns2;"]

    @pytest.mark.asyncio
    async def test_empty_input_submits_nothing(self):
        client = FakeStatementClient()
        gateway = StatementGateway(client, poll_interval=0)

        assert await gateway.execute_batched([], batch_size=10) == []
        assert client.submitted == []

    @pytest.mark.asyncio
    async def test_failed_batch_does_not_stop_siblings(self):
        client = FakeStatementClient(fail_when=lambda sql: "bad" in sql)
        gateway = StatementGateway(client, poll_interval=0)

        outcomes = await gateway.execute_batched(["ok1;", "bad;", "ok2;"], batch_size=1, label="remove")

        assert [o.succeeded for o in outcomes] == [True, False, True]
        assert outcomes[1].error == f"failure in {outcomes[1].statement_id}"
        # every batch was polled to a terminal state
        assert all(count == 2 for count in client.describe_calls.values())

    @pytest.mark.asyncio
    async def test_submission_error_becomes_failed_outcome(self):
        client = FakeStatementClient()
        original = client.execute_statement

        def flaky(sql):
            if sql == "boom;":
                raise RuntimeError("ValidationException")
            return original(sql)

        client.execute_statement = flaky
        gateway = StatementGateway(client, poll_interval=0)

        outcomes = await gateway.execute_batched(["a;", "boom;"], batch_size=1)

        assert outcomes[0].succeeded is True
        assert outcomes[1].succeeded is False
        assert "ValidationException" in outcomes[1].error

    @pytest.mark.asyncio
    async def test_batches_are_submitted_concurrently(self):
        # Two submissions must be in flight together to get past the barrier
        barrier = threading.Barrier(2, timeout=5)
        client = FakeStatementClient()
        original = client.execute_statement

        def rendezvous(sql):
            barrier.wait()
            return original(sql)

        client.execute_statement = rendezvous
        gateway = StatementGateway(client, poll_interval=0, max_concurrency=2)

        outcomes = await gateway.execute_batched(["a;", "b;"], batch_size=1)

        assert all(o.succeeded for o in outcomes)

    def test_max_concurrency_validation(self):
        with pytest.raises(ValueError, match="max_concurrency"):
            StatementGateway(MagicMock(), max_concurrency=0)
