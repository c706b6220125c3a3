"""Load email records from mbox files and folders of ``.eml`` files."""

from __future__ import annotations

import logging
import mailbox
from pathlib import Path

from ..core.models import EmailRecord
from .parser import EmailParser

LOGGER = logging.getLogger(__name__)


class RecordLoadError(RuntimeError):
    """Raised when a source archive cannot be read."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"Cannot load records from {path}: {reason}")


def load_records(
    source: Path | str, parser: EmailParser | None = None
) -> list[EmailRecord]:
    """Return records from an mbox file or a directory of ``.eml`` files."""
    path = Path(source)
    parser = parser or EmailParser()
    if path.is_dir():
        records = _load_eml_folder(path, parser)
    else:
        records = _load_mbox(path, parser)
    LOGGER.info("Loaded %s record(s) from %s", len(records), path)
    return records


def _load_mbox(path: Path, parser: EmailParser) -> list[EmailRecord]:
    if not path.is_file():
        raise RecordLoadError(path, "no such file")
    try:
        box = mailbox.mbox(path, create=False)
        try:
            return [parser.parse(box.get_bytes(key)) for key in box.iterkeys()]
        finally:
            box.close()
    except (OSError, mailbox.Error) as exc:
        raise RecordLoadError(path, str(exc)) from exc


def _load_eml_folder(path: Path, parser: EmailParser) -> list[EmailRecord]:
    records: list[EmailRecord] = []
    for file_path in sorted(path.glob("*.eml")):
        try:
            payload = file_path.read_bytes()
        except OSError as exc:
            raise RecordLoadError(file_path, str(exc)) from exc
        records.append(parser.parse(payload))
    return records


__all__ = ["RecordLoadError", "load_records"]
