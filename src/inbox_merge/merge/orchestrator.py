"""Multi-source merge orchestration."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from threading import Event

from inbox_merge.core.config import MergeOptions
from inbox_merge.core.interfaces import ProgressCallback, check_cancelled, report
from inbox_merge.core.models import DuplicateGroup, EmailRecord, MergeResult
from inbox_merge.dedup import DuplicateGrouper, SimilarityScorer, select_survivor

from .ordering import sort_records

LOGGER = logging.getLogger(__name__)


def default_source_label(index: int) -> str:
    """Human readable label for the source at zero-based ``index``."""
    return f"Mailbox {index + 1}"


class MailboxMerger:
    """Combine record sources into one deduplicated, ordered collection."""

    def __init__(self, options: MergeOptions | None = None) -> None:
        """Initialise the merger with read-only options."""
        self._options = options or MergeOptions()

    @property
    def options(self) -> MergeOptions:
        return self._options

    def merge(
        self,
        sources: Sequence[Sequence[EmailRecord]],
        *,
        labels: Sequence[str] | None = None,
        progress: ProgressCallback | None = None,
        cancel_event: Event | None = None,
    ) -> MergeResult:
        """Merge ``sources`` and return the surviving records with statistics."""
        options = self._options
        if labels is not None and len(labels) != len(sources):
            raise ValueError("labels must match the number of sources")

        report(progress, 0.0, "Combining emails")
        combined: list[EmailRecord] = []
        source_info: dict[str, str] = {}
        for index, source in enumerate(sources):
            label = labels[index] if labels is not None else default_source_label(index)
            for record in source:
                combined.append(record)
                if options.preserve_source_info:
                    source_info.setdefault(record.id, label)

        total_before = len(combined)
        LOGGER.info(
            "Merging %s record(s) from %s source(s) (dedup=%s, threshold=%.2f)",
            total_before,
            len(sources),
            options.remove_duplicates,
            options.duplicate_threshold,
        )
        check_cancelled(cancel_event)

        groups: list[DuplicateGroup] = []
        survivors = combined
        if options.remove_duplicates:
            groups, survivors = self._deduplicate(combined, progress, cancel_event)

        report(progress, 0.7, "Sorting results")
        ordered = sort_records(survivors, options.sort_order)
        report(progress, 1.0, "Complete")

        LOGGER.info(
            "Merge complete: before=%s, after=%s, groups=%s",
            total_before,
            len(ordered),
            len(groups),
        )
        return MergeResult(
            records=ordered,
            total_before=total_before,
            total_after=len(ordered),
            duplicates_removed=total_before - len(ordered),
            duplicate_groups=groups,
            source_info=source_info,
        )

    def _deduplicate(
        self,
        combined: list[EmailRecord],
        progress: ProgressCallback | None,
        cancel_event: Event | None,
    ) -> tuple[list[DuplicateGroup], list[EmailRecord]]:
        options = self._options
        grouper = DuplicateGrouper(
            SimilarityScorer(options.weights),
            options.duplicate_threshold,
            strategy=options.grouping,
            workers=options.workers,
        )

        def grouping_progress(fraction: float, step: str) -> None:
            report(progress, 0.2 + 0.3 * fraction, step)

        clusters = grouper.group(
            combined, progress=grouping_progress, cancel_event=cancel_event
        )

        report(progress, 0.5, "Removing duplicates")
        removed_positions: set[int] = set()
        groups: list[DuplicateGroup] = []
        for positions in clusters:
            members = tuple(combined[position] for position in positions)
            survivor_index = select_survivor(members, options.quality)
            groups.append(DuplicateGroup(records=members, survivor_index=survivor_index))
            removed_positions.update(
                position
                for offset, position in enumerate(positions)
                if offset != survivor_index
            )
            LOGGER.debug(
                "Collapsed %s record(s) into survivor %s",
                len(members),
                members[survivor_index].id,
            )

        survivors = [
            record
            for position, record in enumerate(combined)
            if position not in removed_positions
        ]
        return groups, survivors


def merge_sources(
    sources: Sequence[Sequence[EmailRecord]],
    options: MergeOptions | None = None,
    *,
    labels: Sequence[str] | None = None,
    progress: ProgressCallback | None = None,
    cancel_event: Event | None = None,
) -> MergeResult:
    """Merge ``sources`` with a fresh :class:`MailboxMerger`."""
    return MailboxMerger(options).merge(
        sources, labels=labels, progress=progress, cancel_event=cancel_event
    )


__all__ = ["MailboxMerger", "default_source_label", "merge_sources"]
