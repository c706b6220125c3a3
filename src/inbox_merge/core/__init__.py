"""Core utilities for configuration, logging, and shared models."""

from .config import (
    AppSettings,
    GroupingStrategy,
    LoggingSettings,
    MergeOptions,
    MergeSortOrder,
    load_app_settings,
)
from .interfaces import ExportError, MergeCancelledError, ProgressCallback
from .logging import configure_logging

__all__ = [
    "AppSettings",
    "ExportError",
    "GroupingStrategy",
    "LoggingSettings",
    "MergeCancelledError",
    "MergeOptions",
    "MergeSortOrder",
    "ProgressCallback",
    "configure_logging",
    "load_app_settings",
]
