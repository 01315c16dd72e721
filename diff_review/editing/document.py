"""
Host document model — content, undo history and the single diff-session slot.
"""

from __future__ import annotations

import logging
from typing import Callable

from .history import DEFAULT_HISTORY_LIMIT, EditHistory, HistoryEntry
from .session import DiffSession

logger = logging.getLogger(__name__)


class Document:
    """An open document that may own at most one active diff session."""

    def __init__(
        self,
        doc_id: str,
        content: str = "",
        history_limit: int = DEFAULT_HISTORY_LIMIT,
    ) -> None:
        self.id = doc_id
        self.content = content
        self.history = EditHistory(limit=history_limit)
        self.diff_session: DiffSession | None = None
        self.is_open = True
        self._close_callbacks: list[Callable[["Document"], None]] = []

    @property
    def has_active_session(self) -> bool:
        return self.diff_session is not None and self.diff_session.is_active

    # ------------------------------------------------------------------
    # Editing
    # ------------------------------------------------------------------

    def apply(self, text: str, label: str = "edit") -> None:
        """Replace the content, recording one undo entry."""
        self._require_open()
        self.history.record(HistoryEntry(before=self.content, after=text,
                                         label=label))
        self.content = text

    def edit(self, text: str) -> None:
        self.apply(text, label="edit")

    def undo(self) -> bool:
        self._require_open()
        entry = self.history.undo()
        if entry is None:
            return False
        self.content = entry.before
        logger.debug("[DiffReview] Undo %r on %s", entry.label, self.id)
        return True

    def redo(self) -> bool:
        self._require_open()
        entry = self.history.redo()
        if entry is None:
            return False
        self.content = entry.after
        logger.debug("[DiffReview] Redo %r on %s", entry.label, self.id)
        return True

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def on_close(self, callback: Callable[["Document"], None]) -> None:
        self._close_callbacks.append(callback)

    def close(self) -> None:
        """Close the document, cancelling and destroying any review."""
        if not self.is_open:
            return
        for callback in list(self._close_callbacks):
            callback(self)
        if self.diff_session is not None:
            self.diff_session.close()
            self.diff_session = None
        self.is_open = False
        logger.debug("[DiffReview] Closed document %s", self.id)

    def _require_open(self) -> None:
        if not self.is_open:
            raise ValueError(f"Document {self.id} is closed")
