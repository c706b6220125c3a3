"""Core domain models shared by the merge engine."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime


def _new_record_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class AttachmentInfo:
    """Metadata describing an email attachment."""

    filename: str
    size: int | None = None


# pylint: disable=too-many-instance-attributes
@dataclass(slots=True, frozen=True)
class EmailRecord:
    """Immutable email representation consumed by the merge engine."""

    sender: str
    subject: str
    date: str
    body: str
    sent_at: datetime | None = None
    to: str | None = None
    message_id: str | None = None
    in_reply_to: str | None = None
    references: tuple[str, ...] = ()
    attachments: tuple[AttachmentInfo, ...] = ()
    id: str = field(default_factory=_new_record_id)


@dataclass(slots=True, frozen=True)
class SimilarityScore:
    """Combined similarity between two records plus its component signals."""

    value: float
    subject: float = 0.0
    sender: float = 0.0
    temporal: float = 0.0
    body: float = 0.0
    matched_on: str | None = None

    def __float__(self) -> float:
        return self.value


@dataclass(slots=True)
class DuplicateGroup:
    """Records judged to be the same message, with the chosen survivor."""

    records: tuple[EmailRecord, ...]
    survivor_index: int = 0

    @property
    def survivor(self) -> EmailRecord:
        return self.records[self.survivor_index]

    @property
    def removed(self) -> tuple[EmailRecord, ...]:
        return tuple(
            record
            for index, record in enumerate(self.records)
            if index != self.survivor_index
        )

    @property
    def size(self) -> int:
        return len(self.records)


@dataclass(slots=True)
class MergeResult:
    """Outcome of merging several record sources."""

    records: list[EmailRecord]
    total_before: int
    total_after: int
    duplicates_removed: int
    duplicate_groups: list[DuplicateGroup]
    source_info: dict[str, str]


@dataclass(slots=True)
class IncrementalResult:
    """Outcome of absorbing new records into an existing merged set."""

    records: list[EmailRecord]
    new_emails_added: int
    duplicates_skipped: int
    new_emails: list[EmailRecord]
    skipped_emails: list[EmailRecord]


__all__ = [
    "AttachmentInfo",
    "DuplicateGroup",
    "EmailRecord",
    "IncrementalResult",
    "MergeResult",
    "SimilarityScore",
]
