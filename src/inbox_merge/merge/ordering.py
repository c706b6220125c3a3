"""Result ordering policies."""

from __future__ import annotations

from collections.abc import Iterable

from inbox_merge.core.config import MergeSortOrder
from inbox_merge.core.datetime_utils import ensure_utc
from inbox_merge.core.models import EmailRecord
from inbox_merge.dedup.normalize import normalize_subject, normalize_text


def _date_sort_key(record: EmailRecord) -> tuple[int, float]:
    # Records without a parsed date sort as the earliest possible value.
    moment = ensure_utc(record.sent_at)
    if moment is None:
        return (0, 0.0)
    return (1, moment.timestamp())


def sort_records(
    records: Iterable[EmailRecord], order: MergeSortOrder
) -> list[EmailRecord]:
    """Return ``records`` ordered by ``order``; sorting is always stable."""
    items = list(records)
    if order is MergeSortOrder.DATE_ASCENDING:
        return sorted(items, key=_date_sort_key)
    if order is MergeSortOrder.DATE_DESCENDING:
        return sorted(items, key=_date_sort_key, reverse=True)
    if order is MergeSortOrder.SENDER:
        return sorted(items, key=lambda record: normalize_text(record.sender))
    if order is MergeSortOrder.SUBJECT:
        return sorted(items, key=lambda record: normalize_subject(record.subject))
    return items


__all__ = ["sort_records"]
