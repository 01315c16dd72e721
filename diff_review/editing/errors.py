"""
Error kinds raised by the diff review engine.

Model code raises these; :class:`~diff_review.editing.manager.DiffSessionManager`
converts them into :class:`~diff_review.editing.manager.OperationResult` values
so nothing propagates into the host editor.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Machine-readable failure category."""

    INVALID_RANGE = "invalid_range"
    UNKNOWN_HUNK_ID = "unknown_hunk_id"
    SESSION_NOT_ACTIVE = "session_not_active"
    ALREADY_ACTIVE = "already_active"
    DIFF_COMPUTATION_FAILED = "diff_computation_failed"
    UNRESOLVED_HUNKS = "unresolved_hunks"
    EMPTY_SELECTION = "empty_selection"
    INVALID_DIRECTION = "invalid_direction"
    NO_CHANGES = "no_changes"
    CANCELLED = "cancelled"


class DiffReviewError(Exception):
    """Base class for every engine failure."""

    kind: ErrorKind = ErrorKind.DIFF_COMPUTATION_FAILED


class InvalidRange(DiffReviewError):
    """Hunks are unsorted, overlapping or out of bounds."""

    kind = ErrorKind.INVALID_RANGE


class UnknownHunkId(DiffReviewError):
    """No hunk with the given id exists in the active session."""

    kind = ErrorKind.UNKNOWN_HUNK_ID

    def __init__(self, hunk_id: str) -> None:
        super().__init__(f"Unknown hunk id: {hunk_id!r}")
        self.hunk_id = hunk_id


class SessionNotActive(DiffReviewError):
    """Operation attempted without an active session."""

    kind = ErrorKind.SESSION_NOT_ACTIVE


class AlreadyActive(DiffReviewError):
    """The document already owns an active session."""

    kind = ErrorKind.ALREADY_ACTIVE


class DiffComputationFailed(DiffReviewError):
    """Differencing or segmentation could not produce a session."""

    kind = ErrorKind.DIFF_COMPUTATION_FAILED


class UnresolvedHunks(DiffReviewError):
    """Finalize was requested while hunks are still pending."""

    kind = ErrorKind.UNRESOLVED_HUNKS

    def __init__(self, pending: int) -> None:
        super().__init__(
            f"{pending} hunk(s) still pending; resolve them or accept/reject all"
        )
        self.pending = pending


class EmptySelection(DiffReviewError):
    """Navigation found no pending hunk to focus."""

    kind = ErrorKind.EMPTY_SELECTION


class InvalidDirection(DiffReviewError, ValueError):
    """Navigation was asked for a direction other than next or prev."""

    kind = ErrorKind.INVALID_DIRECTION

    def __init__(self, direction) -> None:
        super().__init__(f"Unknown navigation direction: {direction!r}")
        self.direction = direction


class NoChanges(DiffReviewError):
    """The rewritten content is identical to the original."""

    kind = ErrorKind.NO_CHANGES


class DiffCancelled(DiffReviewError):
    """A background differencing task was cancelled or superseded."""

    kind = ErrorKind.CANCELLED
