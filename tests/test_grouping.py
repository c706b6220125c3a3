"""Tests for duplicate grouping strategies."""

from __future__ import annotations

from threading import Event

import pytest

from inbox_merge.core.config import GroupingStrategy, SimilarityWeights
from inbox_merge.core.interfaces import MergeCancelledError
from inbox_merge.core.models import EmailRecord
from inbox_merge.dedup import DuplicateGrouper, SimilarityScorer

BODY_ONLY = SimilarityWeights(subject=0.0, sender=0.0, temporal=0.0, body=1.0)


def _record(body: str, **overrides: object) -> EmailRecord:
    values: dict[str, object] = {
        "sender": "dave@example.com",
        "subject": "Notes",
        "date": "",
        "body": body,
    }
    values.update(overrides)
    return EmailRecord(**values)  # type: ignore[arg-type]


def _chain() -> tuple[EmailRecord, EmailRecord, EmailRecord]:
    # a~b and b~c score 2/3, a~c scores 1/3
    a = _record("w1 w2 w3 w4")
    b = _record("w1 w2 w3 w4 w5 w6")
    c = _record("w3 w4 w5 w6")
    return a, b, c


def _grouper(
    strategy: GroupingStrategy = GroupingStrategy.GREEDY_SEED, **kwargs: int
) -> DuplicateGrouper:
    return DuplicateGrouper(
        SimilarityScorer(BODY_ONLY), 0.6, strategy=strategy, **kwargs
    )


def test_greedy_grouping_is_similarity_to_seed() -> None:
    a, b, c = _chain()

    assert _grouper().group([a, b, c]) == [[0, 1]]


def test_greedy_grouping_depends_on_seed_order() -> None:
    a, b, c = _chain()

    assert _grouper().group([b, a, c]) == [[0, 1, 2]]


def test_transitive_grouping_merges_chains() -> None:
    a, b, c = _chain()

    groups = _grouper(GroupingStrategy.TRANSITIVE).group([a, b, c])

    assert groups == [[0, 1, 2]]


def test_singletons_are_not_groups() -> None:
    records = [_record("alpha"), _record("beta"), _record("gamma")]

    assert _grouper().group(records) == []
    assert _grouper(GroupingStrategy.TRANSITIVE).group(records) == []


def test_exact_copies_group_under_default_weights() -> None:
    record = _record("identical body")
    other = _record("something else entirely", subject="Other")
    grouper = DuplicateGrouper(SimilarityScorer(), 0.85)

    assert grouper.group([record, other, record]) == [[0, 2]]


def test_parallel_scoring_matches_sequential() -> None:
    records = [
        _record(f"topic{index % 4} shared words here variant{index % 3}")
        for index in range(12)
    ]

    sequential = _grouper().group(records)
    parallel = _grouper(workers=4).group(records)

    assert parallel == sequential
    assert sequential


def test_progress_reported_once_per_record() -> None:
    updates: list[float] = []
    records = [_record(f"body {index}") for index in range(5)]

    _grouper().group(records, progress=lambda fraction, step: updates.append(fraction))

    assert len(updates) == 5
    assert updates == sorted(updates)
    assert updates[-1] == 1.0


def test_cancellation_stops_grouping() -> None:
    cancel = Event()
    cancel.set()

    with pytest.raises(MergeCancelledError):
        _grouper().group([_record("a"), _record("b")], cancel_event=cancel)


def test_cancellation_checked_between_records() -> None:
    cancel = Event()
    seen: list[float] = []

    def on_progress(fraction: float, step: str) -> None:
        seen.append(fraction)
        cancel.set()

    with pytest.raises(MergeCancelledError):
        _grouper().group(
            [_record(f"b{index}") for index in range(4)],
            progress=on_progress,
            cancel_event=cancel,
        )

    assert seen == [0.25]


@pytest.mark.parametrize("threshold", [0.0, 1.5])
def test_invalid_threshold_rejected(threshold: float) -> None:
    with pytest.raises(ValueError):
        DuplicateGrouper(SimilarityScorer(), threshold)
