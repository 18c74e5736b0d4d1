"""
app/services package marker.
"""

from app.services.aggregation_service import AggregationService, get_aggregation_service
from app.services.export_service import ExportResult, ExportService, get_export_service, render_csv
from app.services.import_service import (
    ImportValidationError,
    ReportDecodeError,
    SnapshotImportService,
    decode_upload,
)
from app.services.reconciliation_service import (
    ReconciliationError,
    ReconciliationService,
    get_reconciliation_service,
)

__all__ = [
    "AggregationService",
    "get_aggregation_service",
    "ExportResult",
    "ExportService",
    "get_export_service",
    "render_csv",
    "ImportValidationError",
    "ReportDecodeError",
    "SnapshotImportService",
    "decode_upload",
    "ReconciliationError",
    "ReconciliationService",
    "get_reconciliation_service",
]
