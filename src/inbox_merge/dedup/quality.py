"""Data-completeness scoring used to pick a survivor among duplicates."""

from __future__ import annotations

from collections.abc import Sequence

from inbox_merge.core.config import QualityWeights
from inbox_merge.core.models import EmailRecord


def quality_score(record: EmailRecord, weights: QualityWeights | None = None) -> int:
    """Return the completeness score of ``record``; higher is better."""
    weights = weights or QualityWeights()
    score = 0
    if record.message_id:
        score += weights.message_id
    if record.attachments:
        score += weights.attachments
    if record.references:
        score += weights.references
    body_points = len(record.body) // weights.chars_per_body_point
    score += min(body_points, weights.max_body_points)
    return score


def rank_by_quality(
    records: Sequence[EmailRecord], weights: QualityWeights | None = None
) -> list[int]:
    """Return indices into ``records``, most complete first.

    Ties keep input order so the same group always yields the same survivor.
    """
    weights = weights or QualityWeights()
    scores = [quality_score(record, weights) for record in records]
    return sorted(range(len(records)), key=lambda index: -scores[index])


def select_survivor(
    records: Sequence[EmailRecord], weights: QualityWeights | None = None
) -> int:
    """Index of the highest-quality record in a non-empty group."""
    return rank_by_quality(records, weights)[0]


__all__ = ["quality_score", "rank_by_quality", "select_survivor"]
