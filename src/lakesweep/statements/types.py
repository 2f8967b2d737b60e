"""
Types shared by the statement gateway and its callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class StatementStatus(str, Enum):
    """Execution status reported by the statement-execution service."""

    SUBMITTED = "SUBMITTED"
    PICKED = "PICKED"
    STARTED = "STARTED"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    ABORTED = "ABORTED"

    @property
    def is_terminal(self) -> bool:
        """No further transition happens from FINISHED, FAILED or ABORTED."""
        return self in _TERMINAL

    @property
    def is_success(self) -> bool:
        return self is StatementStatus.FINISHED


_TERMINAL = frozenset({StatementStatus.FINISHED, StatementStatus.FAILED, StatementStatus.ABORTED})


@dataclass(frozen=True)
class StatementHandle:
    """Opaque reference to one asynchronous statement execution."""

    id: str


@dataclass(frozen=True)
class StatementDescription:
    """One status observation of a statement."""

    status: StatementStatus
    error: str | None = None
    has_result_set: bool = False

    @classmethod
    def from_response(cls, response: dict[str, Any]) -> "StatementDescription":
        """Build from a ``describe_statement`` response."""
        return cls(
            status=StatementStatus(response["Status"]),
            error=response.get("Error") or None,
            has_result_set=bool(response.get("HasResultSet", False)),
        )


@dataclass(frozen=True)
class BatchOutcome:
    """Terminal result of one submitted batch."""

    label: str
    index: int
    statement_count: int
    succeeded: bool
    statement_id: str | None = None
    error: str | None = None


Row = list[Any]
