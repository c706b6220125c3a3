"""Normalisation, fingerprinting, scoring, ranking, and grouping."""

from .grouping import DuplicateGrouper
from .normalize import normalize_subject, normalize_text
from .quality import quality_score, rank_by_quality, select_survivor
from .signature import record_signature
from .similarity import SimilarityScorer

__all__ = [
    "DuplicateGrouper",
    "SimilarityScorer",
    "normalize_subject",
    "normalize_text",
    "quality_score",
    "rank_by_quality",
    "record_signature",
    "select_survivor",
]
