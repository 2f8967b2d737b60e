"""
Statement execution: submission, polling and result retrieval against the
remote statement-execution service.
"""

from lakesweep.statements.gateway import StatementClient, StatementGateway, field_value
from lakesweep.statements.types import (
    BatchOutcome,
    Row,
    StatementDescription,
    StatementHandle,
    StatementStatus,
)

__all__ = [
    "StatementGateway",
    "StatementClient",
    "field_value",
    "StatementHandle",
    "StatementStatus",
    "StatementDescription",
    "BatchOutcome",
    "Row",
]
