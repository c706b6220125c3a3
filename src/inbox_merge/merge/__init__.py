"""Merge orchestration and incremental import."""

from .incremental import IncrementalImporter, import_incremental
from .orchestrator import MailboxMerger, default_source_label, merge_sources
from .ordering import sort_records

__all__ = [
    "IncrementalImporter",
    "MailboxMerger",
    "default_source_label",
    "import_incremental",
    "merge_sources",
    "sort_records",
]
