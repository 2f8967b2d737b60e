"""
Data carried through one reconciliation pass.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from lakesweep.statements.types import BatchOutcome


@dataclass(frozen=True)
class ExternalTableDescriptor:
    """An external table whose catalog entry lacks a last-modification timestamp."""

    table_name: str
    backing_location: str


@dataclass(frozen=True)
class ExternalTableMetadata(ExternalTableDescriptor):
    """A descriptor with the backing data's timestamp resolved (None if not found)."""

    created_epoch_millis: int | None = None


class Disposition(str, Enum):
    """What a pass does with a table definition it selected.

    Tables neither query selects are left alone and never materialized.
    """

    REMOVE = "remove"
    UPDATE = "update"


# Batch labels reported in BatchOutcome.label
REMOVE_LABEL = Disposition.REMOVE.value
UPDATE_LABEL = Disposition.UPDATE.value


@dataclass
class ReconciliationSummary:
    """Counts reported at the end of a pass."""

    expired_found: int = 0
    invalid_found: int = 0
    removal_statements: int = 0
    update_statements: int = 0
    batches: list[BatchOutcome] = field(default_factory=list)
    aborted: bool = False
    error: str | None = None

    @property
    def failed_batches(self) -> list[BatchOutcome]:
        return [outcome for outcome in self.batches if not outcome.succeeded]

    @property
    def removed(self) -> int:
        """Drop statements in batches that finished."""
        return sum(o.statement_count for o in self.batches if o.succeeded and o.label == REMOVE_LABEL)

    @property
    def updated(self) -> int:
        """Update statements in batches that finished."""
        return sum(o.statement_count for o in self.batches if o.succeeded and o.label == UPDATE_LABEL)
