"""Serializers for merged record sets."""

from .serializer import (
    ExportFormat,
    export_eml_folder,
    export_mbox,
    export_records,
    sanitize_filename,
)

__all__ = [
    "ExportFormat",
    "export_eml_folder",
    "export_mbox",
    "export_records",
    "sanitize_filename",
]
