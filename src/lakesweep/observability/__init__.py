"""
Observability: structured JSON logging with per-pass correlation IDs.
"""

from lakesweep.observability.structured_logging import (
    HumanReadableFormatter,
    StructuredFormatter,
    add_correlation_id,
    get_correlation_id,
    set_correlation_id,
    setup_structured_logging,
)

__all__ = [
    "StructuredFormatter",
    "HumanReadableFormatter",
    "add_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "setup_structured_logging",
]
