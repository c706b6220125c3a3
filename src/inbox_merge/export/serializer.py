"""Write merged records as an mbox archive or a folder of ``.eml`` files."""

from __future__ import annotations

import logging
import os
import re
import tempfile
from collections.abc import Iterable, Sequence
from email.utils import parseaddr
from enum import Enum
from pathlib import Path

from inbox_merge.core.datetime_utils import mbox_timestamp
from inbox_merge.core.interfaces import ExportError
from inbox_merge.core.models import EmailRecord

LOGGER = logging.getLogger(__name__)

MAX_FILENAME_SUBJECT = 50
_ILLEGAL_FILENAME_CHARS = re.compile(r'[/\\?%*|"<>:\x00-\x1f\x7f]')
_FROM_LINE = re.compile(r"^(>*From )", re.MULTILINE)


class ExportFormat(str, Enum):
    """Supported serialization formats."""

    MBOX = "mbox"
    EML = "eml"


def export_records(
    records: Sequence[EmailRecord], destination: Path | str, fmt: ExportFormat
) -> list[Path]:
    """Serialize ``records`` to ``destination`` and return the written paths.

    Raises :class:`ExportError` naming the offending path when the destination
    cannot be created or written.
    """
    target = Path(destination)
    if ExportFormat(fmt) is ExportFormat.MBOX:
        return [export_mbox(records, target)]
    return export_eml_folder(records, target)


def export_mbox(records: Iterable[EmailRecord], destination: Path) -> Path:
    """Write all ``records`` into a single mbox file at ``destination``."""
    chunks: list[str] = []
    count = 0
    for record in records:
        chunks.append(_separator_line(record))
        chunks.extend(f"{line}\n" for line in _header_lines(record))
        chunks.append("\n")
        body = _FROM_LINE.sub(r">\1", record.body)
        if not body.endswith("\n"):
            body += "\n"
        chunks.append(body)
        chunks.append("\n")
        count += 1

    _atomic_write(destination, "".join(chunks))
    LOGGER.info("Exported %s record(s) to mbox %s", count, destination)
    return destination


def export_eml_folder(records: Iterable[EmailRecord], folder: Path) -> list[Path]:
    """Write one ``.eml`` file per record into ``folder``."""
    try:
        folder.mkdir(parents=True, exist_ok=True)
    except (OSError, ValueError) as exc:
        raise ExportError(folder, str(exc)) from exc

    written: list[Path] = []
    for index, record in enumerate(records, start=1):
        path = folder / f"{index}_{sanitize_filename(record.subject)}.eml"
        headers = "".join(f"{line}\r\n" for line in _header_lines(record))
        _atomic_write(path, f"{headers}\r\n{record.body}")
        LOGGER.debug("Wrote %s", path)
        written.append(path)

    LOGGER.info("Exported %s record(s) to folder %s", len(written), folder)
    return written


def sanitize_filename(name: str) -> str:
    """Replace characters illegal in filenames and truncate to 50 characters."""
    cleaned = _ILLEGAL_FILENAME_CHARS.sub("_", name)
    cleaned = cleaned[:MAX_FILENAME_SUBJECT].strip()
    return cleaned or "untitled"


def _separator_line(record: EmailRecord) -> str:
    _, address = parseaddr(record.sender)
    address = address.replace(" ", "") or "MAILER-DAEMON"
    if record.sent_at is not None or not record.date:
        stamp = mbox_timestamp(record.sent_at)
    else:
        stamp = " ".join(record.date.split())
    return f"From {address} {stamp}\n"


def _header_lines(record: EmailRecord) -> list[str]:
    candidates = (
        ("From", record.sender),
        ("To", record.to),
        ("Subject", record.subject),
        ("Date", record.date),
        ("Message-ID", record.message_id),
        ("In-Reply-To", record.in_reply_to),
    )
    return [
        f"{name}: {_single_line(value)}" for name, value in candidates if value
    ]


def _single_line(value: str) -> str:
    return " ".join(value.splitlines())


def _atomic_write(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` so a failed write leaves it untouched."""
    temp_name: str | None = None
    try:
        payload = text.encode("utf-8")
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", delete=False
        ) as handle:
            temp_name = handle.name
            handle.write(payload)
        os.replace(temp_name, path)
    except (OSError, ValueError) as exc:
        if temp_name is not None and os.path.exists(temp_name):
            os.unlink(temp_name)
        raise ExportError(path, str(exc)) from exc


__all__ = [
    "ExportFormat",
    "MAX_FILENAME_SUBJECT",
    "export_eml_folder",
    "export_mbox",
    "export_records",
    "sanitize_filename",
]
