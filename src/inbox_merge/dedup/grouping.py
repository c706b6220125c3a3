"""Partition record lists into duplicate clusters."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import Executor, ThreadPoolExecutor
from threading import Event

from inbox_merge.core.config import GroupingStrategy
from inbox_merge.core.interfaces import ProgressCallback, check_cancelled, report
from inbox_merge.core.models import EmailRecord

from .similarity import SimilarityScorer

LOGGER = logging.getLogger(__name__)


class DuplicateGrouper:
    """Cluster records whose similarity reaches a threshold.

    The default strategy is greedy and seeded by input order: each unassigned
    record becomes a seed and claims every later unassigned record scoring at
    least ``threshold`` against it. Membership is similarity-to-seed, not
    mutual, so iteration order decides which records qualify. The
    ``TRANSITIVE`` strategy instead merges every connected pair (union-find).
    """

    def __init__(
        self,
        scorer: SimilarityScorer,
        threshold: float,
        *,
        strategy: GroupingStrategy = GroupingStrategy.GREEDY_SEED,
        workers: int = 1,
    ) -> None:
        if not 0.0 < threshold <= 1.0:
            raise ValueError("threshold must be within (0, 1]")
        if workers < 1:
            raise ValueError("workers must be positive")
        self._scorer = scorer
        self._threshold = threshold
        self._strategy = strategy
        self._workers = workers

    def group(
        self,
        records: Sequence[EmailRecord],
        *,
        progress: ProgressCallback | None = None,
        cancel_event: Event | None = None,
    ) -> list[list[int]]:
        """Return clusters of two or more positions into ``records``."""
        if self._workers == 1:
            return self._dispatch(records, None, progress, cancel_event)
        with ThreadPoolExecutor(
            max_workers=self._workers, thread_name_prefix="inbox-merge-score"
        ) as executor:
            return self._dispatch(records, executor, progress, cancel_event)

    def _dispatch(
        self,
        records: Sequence[EmailRecord],
        executor: Executor | None,
        progress: ProgressCallback | None,
        cancel_event: Event | None,
    ) -> list[list[int]]:
        if self._strategy is GroupingStrategy.TRANSITIVE:
            groups = self._group_transitive(records, executor, progress, cancel_event)
        else:
            groups = self._group_greedy(records, executor, progress, cancel_event)
        LOGGER.debug(
            "Formed %s duplicate group(s) from %s record(s) using %s",
            len(groups),
            len(records),
            self._strategy.value,
        )
        return groups

    def _group_greedy(
        self,
        records: Sequence[EmailRecord],
        executor: Executor | None,
        progress: ProgressCallback | None,
        cancel_event: Event | None,
    ) -> list[list[int]]:
        total = len(records)
        assigned = [False] * total
        groups: list[list[int]] = []

        for seed in range(total):
            check_cancelled(cancel_event)
            if not assigned[seed]:
                assigned[seed] = True
                candidates = [
                    index for index in range(seed + 1, total) if not assigned[index]
                ]
                scores = self._score_against(records, seed, candidates, executor)
                group = [seed]
                for index, value in zip(candidates, scores):
                    if value >= self._threshold:
                        group.append(index)
                        assigned[index] = True
                if len(group) > 1:
                    groups.append(group)
            report(progress, (seed + 1) / total, "Identifying duplicates")

        return groups

    def _group_transitive(
        self,
        records: Sequence[EmailRecord],
        executor: Executor | None,
        progress: ProgressCallback | None,
        cancel_event: Event | None,
    ) -> list[list[int]]:
        total = len(records)
        parent = list(range(total))

        def find(index: int) -> int:
            while parent[index] != index:
                parent[index] = parent[parent[index]]
                index = parent[index]
            return index

        for seed in range(total):
            check_cancelled(cancel_event)
            candidates = list(range(seed + 1, total))
            scores = self._score_against(records, seed, candidates, executor)
            for index, value in zip(candidates, scores):
                if value >= self._threshold:
                    root_a, root_b = find(seed), find(index)
                    if root_a != root_b:
                        parent[max(root_a, root_b)] = min(root_a, root_b)
            report(progress, (seed + 1) / total, "Identifying duplicates")

        clusters: dict[int, list[int]] = {}
        for index in range(total):
            clusters.setdefault(find(index), []).append(index)
        return [members for members in clusters.values() if len(members) > 1]

    def _score_against(
        self,
        records: Sequence[EmailRecord],
        seed: int,
        candidates: list[int],
        executor: Executor | None,
    ) -> list[float]:
        seed_record = records[seed]
        if executor is None or len(candidates) < 2:
            return [
                self._scorer.score(seed_record, records[index]).value
                for index in candidates
            ]
        return list(
            executor.map(
                lambda index: self._scorer.score(seed_record, records[index]).value,
                candidates,
            )
        )


__all__ = ["DuplicateGrouper"]
