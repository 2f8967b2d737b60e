"""
Lakesweep - lifecycle reconciliation for warehouse external tables.

Removes external table definitions that have expired and repairs ones whose
last-modification timestamp is missing, one pass per invocation.
"""

__version__ = "0.1.0"

from lakesweep.api import build_reconciler, run_pass
from lakesweep.config import Config, ReconcilerSettings, WarehouseSettings, load_config
from lakesweep.exceptions import (
    ClassificationError,
    ConfigurationError,
    LakesweepError,
    ResolverError,
    StatementError,
    StatementSubmissionError,
)
from lakesweep.reconcile import (
    ExternalTableDescriptor,
    ExternalTableMetadata,
    ReconciliationSummary,
    TableLifecycleReconciler,
)
from lakesweep.statements import StatementGateway, StatementHandle, StatementStatus
from lakesweep.utils.logging import get_logger, setup_logging, setup_logging_from_config

__all__ = [
    "__version__",
    # Execution
    "run_pass",
    "build_reconciler",
    "TableLifecycleReconciler",
    "StatementGateway",
    # Types
    "ExternalTableDescriptor",
    "ExternalTableMetadata",
    "ReconciliationSummary",
    "StatementHandle",
    "StatementStatus",
    # Config
    "Config",
    "load_config",
    "ReconcilerSettings",
    "WarehouseSettings",
    # Logging
    "setup_logging",
    "setup_logging_from_config",
    "get_logger",
    # Exceptions
    "LakesweepError",
    "ConfigurationError",
    "StatementError",
    "StatementSubmissionError",
    "ClassificationError",
    "ResolverError",
]
