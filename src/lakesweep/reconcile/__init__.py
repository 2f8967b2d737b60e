"""
Table lifecycle reconciliation: classify external table definitions and
remove or repair them.
"""

from lakesweep.reconcile.models import (
    REMOVE_LABEL,
    UPDATE_LABEL,
    Disposition,
    ExternalTableDescriptor,
    ExternalTableMetadata,
    ReconciliationSummary,
)
from lakesweep.reconcile.reconciler import (
    LocationResolver,
    TableLifecycleReconciler,
    classify,
    split_by_disposition,
)

__all__ = [
    "TableLifecycleReconciler",
    "LocationResolver",
    "classify",
    "split_by_disposition",
    "Disposition",
    "ExternalTableDescriptor",
    "ExternalTableMetadata",
    "ReconciliationSummary",
    "REMOVE_LABEL",
    "UPDATE_LABEL",
]
