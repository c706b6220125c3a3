"""Cheap deterministic fingerprints for exact duplicate detection."""

from __future__ import annotations

from inbox_merge.core.models import EmailRecord

from .normalize import normalize_subject, normalize_text

BODY_PREFIX_CHARS = 100


def record_signature(record: EmailRecord) -> str:
    """Return the record's Message-ID, or a pipe-joined content fingerprint."""
    if record.message_id:
        return record.message_id
    return "|".join(
        (
            normalize_text(record.sender),
            normalize_subject(record.subject),
            record.date,
            record.body[:BODY_PREFIX_CHARS].lower(),
        )
    )


__all__ = ["BODY_PREFIX_CHARS", "record_signature"]
