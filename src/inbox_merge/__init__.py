"""Email archive merge and deduplication engine."""

from .core.config import MergeOptions, MergeSortOrder
from .core.models import EmailRecord, IncrementalResult, MergeResult
from .export import ExportFormat, export_records
from .merge import import_incremental, merge_sources

__all__ = [
    "EmailRecord",
    "ExportFormat",
    "IncrementalResult",
    "MergeOptions",
    "MergeResult",
    "MergeSortOrder",
    "export_records",
    "import_incremental",
    "merge_sources",
]
