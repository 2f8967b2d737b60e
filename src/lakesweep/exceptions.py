"""
Lakesweep exception hierarchy.

All domain-specific exceptions inherit from LakesweepError, so a pass can
catch any reconciliation error with a single base class while still allowing
fine-grained handling when needed.

Hierarchy::

    LakesweepError
    ├── ConfigurationError          - config loading, parsing, validation
    ├── StatementError              - statement-execution service failures
    │   └── StatementSubmissionError - a statement could not be submitted
    ├── ClassificationError         - a classification query did not finish
    └── ResolverError               - backing-location lookup failures
"""

from __future__ import annotations


class LakesweepError(Exception):
    """Base exception for all Lakesweep errors."""

    def __init__(self, message: str, *, details: dict | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


# --- Configuration -----------------------------------------------------------


class ConfigurationError(LakesweepError):
    """Raised when configuration loading, parsing, or validation fails."""


# --- Statements --------------------------------------------------------------


class StatementError(LakesweepError):
    """Raised when the statement-execution service rejects a request."""


class StatementSubmissionError(StatementError):
    """Raised when a statement cannot be handed to the service."""

    def __init__(self, message: str, *, sql: str | None = None, cause: Exception | None = None) -> None:
        super().__init__(message, details={"sql": sql})
        self.sql = sql
        if cause is not None:
            self.__cause__ = cause


# --- Reconciliation ----------------------------------------------------------


class ClassificationError(LakesweepError):
    """Raised when a classification query fails and the pass cannot continue."""

    def __init__(self, query_name: str, statement_id: str | None = None) -> None:
        full = f"Classification query '{query_name}' did not finish successfully"
        if statement_id:
            full += f" (statement {statement_id})"
        super().__init__(full, details={"query": query_name, "statement_id": statement_id})
        self.query_name = query_name
        self.statement_id = statement_id


class ResolverError(LakesweepError):
    """Raised when a backing location cannot be inspected."""

    def __init__(self, location: str, message: str) -> None:
        super().__init__(f"Cannot resolve '{location}': {message}", details={"location": location})
        self.location = location
