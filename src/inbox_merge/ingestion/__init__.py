"""Ingestion helpers turning archives into email records."""

from .loader import RecordLoadError, load_records
from .parser import EmailParser, record_from_message

__all__ = ["EmailParser", "RecordLoadError", "load_records", "record_from_message"]
