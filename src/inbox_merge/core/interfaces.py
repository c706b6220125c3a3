"""Callback protocols and error types shared by engine components."""

from __future__ import annotations

from pathlib import Path
from threading import Event
from typing import Protocol


class ProgressCallback(Protocol):
    """Receives coarse-grained progress updates from long operations."""

    def __call__(self, fraction: float, step: str) -> None:
        """Report ``fraction`` complete (0.0 to 1.0) for the named step."""
        raise NotImplementedError


class MergeCancelledError(RuntimeError):
    """Raised when a caller cancels a merge or import between records."""


class ExportError(OSError):
    """Raised when serialized records cannot be written to ``path``."""

    def __init__(self, path: Path | str, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot export to {self.path}: {reason}")


def report(callback: ProgressCallback | None, fraction: float, step: str) -> None:
    """Invoke ``callback`` when provided, clamping the fraction to [0, 1]."""
    if callback is not None:
        callback(min(max(fraction, 0.0), 1.0), step)


def check_cancelled(cancel_event: Event | None) -> None:
    """Raise :class:`MergeCancelledError` once ``cancel_event`` is set."""
    if cancel_event is not None and cancel_event.is_set():
        raise MergeCancelledError("Operation cancelled by caller")


__all__ = [
    "ExportError",
    "MergeCancelledError",
    "ProgressCallback",
    "check_cancelled",
    "report",
]
