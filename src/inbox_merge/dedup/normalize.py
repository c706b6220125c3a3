"""Canonical comparison forms for subjects, senders, and bodies."""

from __future__ import annotations

import re

_REPLY_PREFIX = re.compile(r"^\s*(?:re|fwd?)\s*:\s*", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


def normalize_subject(subject: str | None) -> str:
    """Strip repeated reply/forward markers, fold case, collapse whitespace."""
    text = subject or ""
    while True:
        stripped = _REPLY_PREFIX.sub("", text, count=1)
        if stripped == text:
            break
        text = stripped
    return _WHITESPACE.sub(" ", text).strip().lower()


def normalize_text(value: str | None) -> str:
    """Lower-case and trim a sender or body string."""
    return (value or "").strip().lower()


def tokenize(value: str) -> frozenset[str]:
    """Split on whitespace into a set of non-empty words."""
    return frozenset(value.split())


def jaccard(first: frozenset[str], second: frozenset[str]) -> float:
    """Jaccard overlap of two token sets; empty sets contribute nothing."""
    union = first | second
    if not union:
        return 0.0
    return len(first & second) / len(union)


__all__ = ["jaccard", "normalize_subject", "normalize_text", "tokenize"]
