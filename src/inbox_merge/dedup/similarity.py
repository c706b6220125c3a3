"""Weighted multi-signal similarity between two email records."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from inbox_merge.core.config import SimilarityWeights
from inbox_merge.core.datetime_utils import seconds_between
from inbox_merge.core.models import EmailRecord, SimilarityScore

from .normalize import jaccard, normalize_subject, normalize_text, tokenize
from .signature import record_signature

BODY_SAMPLE_CHARS = 500
SAME_MINUTE_SECONDS = 60
SAME_HOUR_SECONDS = 3600


@dataclass(slots=True, frozen=True)
class _Features:
    signature: str
    subject: str
    subject_tokens: frozenset[str]
    sender: str
    sent_at: datetime | None
    body_tokens: frozenset[str]


class SimilarityScorer:
    """Score how likely two records are copies of the same message.

    Scores are symmetric and deterministic. Equal Message-IDs or equal record
    signatures short-circuit to 1.0; otherwise subject, sender, temporal and
    body signals are combined with the configured weights. Missing fields
    contribute 0.0 for their signal.
    """

    def __init__(self, weights: SimilarityWeights | None = None) -> None:
        self._weights = weights or SimilarityWeights()
        # Keyed by id(); holding the record stops the key being reused.
        self._features: dict[int, tuple[EmailRecord, _Features]] = {}

    @property
    def weights(self) -> SimilarityWeights:
        return self._weights

    def score(self, first: EmailRecord, second: EmailRecord) -> SimilarityScore:
        """Return the weighted similarity of ``first`` and ``second``."""
        if first.message_id and first.message_id == second.message_id:
            return SimilarityScore(value=1.0, matched_on="message_id")

        left = self._extract(first)
        right = self._extract(second)
        if left.signature == right.signature:
            return SimilarityScore(value=1.0, matched_on="signature")

        subject = _subject_similarity(left, right)
        sender = 1.0 if left.sender and left.sender == right.sender else 0.0
        temporal = _temporal_similarity(left.sent_at, right.sent_at)
        body = jaccard(left.body_tokens, right.body_tokens)

        weights = self._weights
        value = (
            weights.subject * subject
            + weights.sender * sender
            + weights.temporal * temporal
            + weights.body * body
        )
        return SimilarityScore(
            value=min(max(value, 0.0), 1.0),
            subject=subject,
            sender=sender,
            temporal=temporal,
            body=body,
        )

    def _extract(self, record: EmailRecord) -> _Features:
        cached = self._features.get(id(record))
        if cached is not None and cached[0] is record:
            return cached[1]
        subject = normalize_subject(record.subject)
        features = _Features(
            signature=record_signature(record),
            subject=subject,
            subject_tokens=tokenize(subject),
            sender=normalize_text(record.sender),
            sent_at=record.sent_at,
            body_tokens=tokenize(record.body[:BODY_SAMPLE_CHARS].lower()),
        )
        self._features[id(record)] = (record, features)
        return features


def _subject_similarity(left: _Features, right: _Features) -> float:
    if left.subject and left.subject == right.subject:
        return 1.0
    return jaccard(left.subject_tokens, right.subject_tokens)


def _temporal_similarity(first: datetime | None, second: datetime | None) -> float:
    if first is None or second is None:
        return 0.0
    delta = seconds_between(first, second)
    if delta <= SAME_MINUTE_SECONDS:
        return 1.0
    if delta <= SAME_HOUR_SECONDS:
        return 0.5
    return 0.0


__all__ = ["SimilarityScorer"]
