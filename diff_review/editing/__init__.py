"""Diff review engine — line diffing, hunk review and reconciliation."""

from .errors import (
    ErrorKind, DiffReviewError, InvalidRange, UnknownHunkId, SessionNotActive,
    AlreadyActive, DiffComputationFailed, UnresolvedHunks, EmptySelection,
    InvalidDirection, NoChanges, DiffCancelled,
)
from .line_diff import EditOp, OpKind, diff_lines, split_lines, join_lines
from .hunks import DiffHunk, HunkType, HunkStatus, HunkIdAllocator, segment
from .session import DiffSession, Direction, StatusSummary
from .reconcile import materialize, finalize, validate_hunks
from .history import EditHistory, HistoryEntry, commit_reconciliation
from .background import CancellationToken, LatestResultSlot, DiffWorker
from .document import Document
from .preview import DisplayLine, build_display_lines
from .manager import DiffSessionManager, OperationResult
from .metrics import log_review_metric, read_review_stats

__all__ = [
    "ErrorKind", "DiffReviewError", "InvalidRange", "UnknownHunkId",
    "SessionNotActive", "AlreadyActive", "DiffComputationFailed",
    "UnresolvedHunks", "EmptySelection", "InvalidDirection", "NoChanges",
    "DiffCancelled",
    "EditOp", "OpKind", "diff_lines", "split_lines", "join_lines",
    "DiffHunk", "HunkType", "HunkStatus", "HunkIdAllocator", "segment",
    "DiffSession", "Direction", "StatusSummary",
    "materialize", "finalize", "validate_hunks",
    "EditHistory", "HistoryEntry", "commit_reconciliation",
    "CancellationToken", "LatestResultSlot", "DiffWorker",
    "Document",
    "DisplayLine", "build_display_lines",
    "DiffSessionManager", "OperationResult",
    "log_review_metric", "read_review_stats",
]
