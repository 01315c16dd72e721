"""
Undo/redo history and the bridge that commits a finalized review as a
single history entry.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .document import Document

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 100


@dataclass(frozen=True)
class HistoryEntry:
    """Content before and after one atomic edit."""
    before: str
    after: str
    label: str = "edit"


class EditHistory:
    """Bounded undo stack plus a redo stack.

    Recording a new entry clears the redo stack.  When the undo stack is
    full the oldest entry is dropped.
    """

    def __init__(self, limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        if limit < 1:
            raise ValueError("history limit must be at least 1")
        self._undo: deque[HistoryEntry] = deque(maxlen=limit)
        self._redo: list[HistoryEntry] = []

    def record(self, entry: HistoryEntry) -> None:
        self._undo.append(entry)
        self._redo.clear()

    def undo(self) -> HistoryEntry | None:
        if not self._undo:
            return None
        entry = self._undo.pop()
        self._redo.append(entry)
        return entry

    def redo(self) -> HistoryEntry | None:
        if not self._redo:
            return None
        entry = self._redo.pop()
        self._undo.append(entry)
        return entry

    @property
    def can_undo(self) -> bool:
        return bool(self._undo)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_depth(self) -> int:
        return len(self._undo)

    @property
    def last_entry(self) -> HistoryEntry | None:
        return self._undo[-1] if self._undo else None


def commit_reconciliation(document: "Document", text: str,
                          label: str = "AI edit") -> bool:
    """Apply a finalized review to *document* as one undo entry.

    Returns ``False`` (and records nothing) when *text* equals the current
    content, e.g. when every hunk was rejected.
    """
    if text == document.content:
        logger.info(
            "[DiffReview] %s unchanged after review, nothing to commit",
            document.id,
        )
        return False
    document.apply(text, label=label)
    logger.info(
        "[DiffReview] Committed %r to %s (undo depth %d)",
        label, document.id, document.history.undo_depth,
    )
    return True
