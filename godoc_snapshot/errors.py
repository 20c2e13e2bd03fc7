"""Base exception shared by every stage of the snapshot pipeline."""

from __future__ import annotations


class SnapshotError(RuntimeError):
    """Raised when a snapshot run cannot continue.

    Each pipeline stage defines a subclass next to the code that raises it so
    callers can tell which stage failed while still catching every fatal
    condition with a single ``except SnapshotError``.
    """


__all__ = ["SnapshotError"]
