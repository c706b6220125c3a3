"""Signature-based incremental import into an existing merged set."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from threading import Event

from inbox_merge.core.config import MergeOptions
from inbox_merge.core.interfaces import ProgressCallback, check_cancelled, report
from inbox_merge.core.models import EmailRecord, IncrementalResult
from inbox_merge.dedup import SimilarityScorer, record_signature

from .ordering import sort_records

LOGGER = logging.getLogger(__name__)


class IncrementalImporter:
    """Absorb newly seen records without a full pairwise fuzzy pass.

    With ``exact_signatures`` enabled (the default) an incoming record is a
    duplicate only when its record signature already exists in the current
    set, so the cost is linear. Near-duplicates whose sender, subject, date or
    leading body text differ are not detected; run a full merge when fuzzy
    duplicates matter. Disabling ``exact_signatures`` compares each incoming
    record against every existing record with the similarity scorer instead.
    """

    def __init__(self, options: MergeOptions | None = None) -> None:
        self._options = options or MergeOptions()

    def import_records(
        self,
        existing: Sequence[EmailRecord],
        incoming: Sequence[EmailRecord],
        *,
        progress: ProgressCallback | None = None,
        cancel_event: Event | None = None,
    ) -> IncrementalResult:
        """Classify ``incoming`` records as new or duplicate and combine."""
        options = self._options
        LOGGER.info(
            "Importing %s record(s) into %s existing (exact_signatures=%s)",
            len(incoming),
            len(existing),
            options.exact_signatures,
        )
        report(progress, 0.0, "Finding new emails")

        if options.exact_signatures:
            known = {record_signature(record) for record in existing}

            def is_duplicate(record: EmailRecord) -> bool:
                return record_signature(record) in known

        else:
            scorer = SimilarityScorer(options.weights)
            threshold = options.duplicate_threshold

            def is_duplicate(record: EmailRecord) -> bool:
                return any(
                    scorer.score(current, record).value >= threshold
                    for current in existing
                )

        added: list[EmailRecord] = []
        skipped: list[EmailRecord] = []
        total = len(incoming)
        for index, record in enumerate(incoming):
            check_cancelled(cancel_event)
            if is_duplicate(record):
                skipped.append(record)
            else:
                added.append(record)
            report(progress, (index + 1) / total, "Finding new emails")

        combined = sort_records([*existing, *added], options.sort_order)
        report(progress, 1.0, "Complete")
        LOGGER.info(
            "Incremental import complete: added=%s, skipped=%s",
            len(added),
            len(skipped),
        )
        return IncrementalResult(
            records=combined,
            new_emails_added=len(added),
            duplicates_skipped=len(skipped),
            new_emails=added,
            skipped_emails=skipped,
        )


def import_incremental(
    existing: Sequence[EmailRecord],
    incoming: Sequence[EmailRecord],
    options: MergeOptions | None = None,
    *,
    progress: ProgressCallback | None = None,
    cancel_event: Event | None = None,
) -> IncrementalResult:
    """Run an :class:`IncrementalImporter` with ``options``."""
    return IncrementalImporter(options).import_records(
        existing, incoming, progress=progress, cancel_event=cancel_event
    )


__all__ = ["IncrementalImporter", "import_incremental"]
