"""
Diff session — one review of an AI rewrite against a document snapshot.

The session owns its hunks and focus state.  It never references the
document it was built from beyond ``file_id``; the document owns the
session through its ``diff_session`` slot.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .errors import (
    EmptySelection, InvalidDirection, NoChanges, SessionNotActive,
    UnknownHunkId,
)
from .hunks import (
    DiffHunk, HunkIdAllocator, HunkStatus, segment, validate_hunks,
)
from .line_diff import (
    LF, convert_line_endings, decode_text, detect_line_ending, diff_lines,
    split_lines,
)

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    NEXT = "next"
    PREV = "prev"


@dataclass(frozen=True)
class StatusSummary:
    pending: int = 0
    accepted: int = 0
    rejected: int = 0

    @property
    def total(self) -> int:
        return self.pending + self.accepted + self.rejected

    @property
    def resolved(self) -> bool:
        return self.pending == 0


@dataclass
class DiffSession:
    """Hunk list plus review state for one document."""
    file_id: str
    original_content: str
    modified_content: str
    hunks: list[DiffHunk] = field(default_factory=list)
    current_hunk_index: int = -1
    is_active: bool = True
    summary: str | None = None
    line_ending: str = LF
    _allocator: HunkIdAllocator = field(init=False, repr=False, compare=False)
    # Index of the hunk whose decision last moved the focus
    _nav_anchor: int | None = field(init=False, default=None, repr=False,
                                    compare=False)

    def __post_init__(self) -> None:
        self._allocator = HunkIdAllocator.after([h.id for h in self.hunks])

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def create(
        cls,
        file_id: str,
        original_content: str | bytes,
        modified_content: str | bytes,
        summary: str | None = None,
        *,
        normalize_line_endings: bool = True,
        cancel=None,
    ) -> "DiffSession":
        """Diff *original_content* against *modified_content* and segment it.

        Raises
        ------
        DiffComputationFailed
            If either content cannot be decoded into lines.
        NoChanges
            If the rewrite is identical to the original.
        DiffCancelled
            If *cancel* fires while the table is being built.
        InvalidRange
            If segmentation produced inconsistent hunks.
        """
        original = decode_text(original_content)
        modified = decode_text(modified_content)

        # A document without line breaks takes the rewrite's convention
        ending = detect_line_ending(original if LF in original else modified)
        if normalize_line_endings:
            modified = convert_line_endings(modified, ending)

        if modified == original:
            raise NoChanges("No changes detected in rewritten content")

        original_lines = split_lines(original, ending)
        modified_lines = split_lines(modified, ending)
        script = diff_lines(original_lines, modified_lines, cancel=cancel)

        session = cls(
            file_id=file_id,
            original_content=original,
            modified_content=modified,
            summary=summary,
            line_ending=ending,
        )
        session.hunks = segment(
            script, original_lines, modified_lines, session._allocator,
        )
        logger.info(
            "[DiffReview] Session for %s: %d hunk(s) over %d original lines",
            file_id, len(session.hunks), len(original_lines),
        )
        return session

    @property
    def original_lines(self) -> list[str]:
        return split_lines(self.original_content, self.line_ending)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def require_active(self) -> None:
        if not self.is_active:
            raise SessionNotActive(f"Session for {self.file_id} is not active")

    def hunk(self, hunk_id: str) -> DiffHunk:
        return self.hunks[self._index_of(hunk_id)]

    @property
    def current_hunk(self) -> DiffHunk | None:
        if 0 <= self.current_hunk_index < len(self.hunks):
            return self.hunks[self.current_hunk_index]
        return None

    def status_summary(self) -> StatusSummary:
        self.require_active()
        counts = {status: 0 for status in HunkStatus}
        for hunk in self.hunks:
            counts[hunk.status] += 1
        return StatusSummary(
            pending=counts[HunkStatus.PENDING],
            accepted=counts[HunkStatus.ACCEPTED],
            rejected=counts[HunkStatus.REJECTED],
        )

    # ------------------------------------------------------------------
    # Navigation & decisions
    # ------------------------------------------------------------------

    def navigate(self, direction: Direction | str = Direction.NEXT) -> int:
        """Focus the next/previous pending hunk, wrapping around.

        The first navigation after a decision auto-advanced the focus searches
        from the decided hunk, so it lands on the hunk the focus moved to.
        Raises ``EmptySelection`` (focus unchanged) if nothing is pending and
        ``InvalidDirection`` for anything but next/prev.
        """
        self.require_active()
        try:
            direction = Direction(direction)
        except ValueError:
            raise InvalidDirection(direction) from None
        start = self.current_hunk_index
        if self._nav_anchor is not None:
            start = self._nav_anchor
        self._nav_anchor = None
        index = self._find_pending(start, direction)
        if index == -1:
            raise EmptySelection("No pending hunks left to navigate to")
        self.current_hunk_index = index
        return index

    def accept(self, hunk_id: str) -> DiffHunk:
        return self._decide(hunk_id, HunkStatus.ACCEPTED)

    def reject(self, hunk_id: str) -> DiffHunk:
        return self._decide(hunk_id, HunkStatus.REJECTED)

    def accept_all(self) -> None:
        self._decide_all(HunkStatus.ACCEPTED)

    def reject_all(self) -> None:
        self._decide_all(HunkStatus.REJECTED)

    def close(self) -> None:
        """Destroy the session: drop hunks and focus, mark inactive."""
        self.hunks.clear()
        self.current_hunk_index = -1
        self._nav_anchor = None
        self.is_active = False

    def _decide(self, hunk_id: str, status: HunkStatus) -> DiffHunk:
        self.require_active()
        index = self._index_of(hunk_id)
        hunk = self.hunks[index]
        if hunk.status is status:
            return hunk
        hunk.status = status
        if index == self.current_hunk_index:
            self.current_hunk_index = self._find_pending(index, Direction.NEXT)
            self._nav_anchor = index
        return hunk

    def _decide_all(self, status: HunkStatus) -> None:
        self.require_active()
        for hunk in self.hunks:
            hunk.status = status
        self.current_hunk_index = -1
        self._nav_anchor = None

    def _index_of(self, hunk_id: str) -> int:
        for index, hunk in enumerate(self.hunks):
            if hunk.id == hunk_id:
                return index
        raise UnknownHunkId(hunk_id)

    def _find_pending(self, start: int, direction: Direction) -> int:
        count = len(self.hunks)
        if count == 0:
            return -1
        step = 1 if direction is Direction.NEXT else -1
        if start < 0:
            order = range(count) if step == 1 else range(count - 1, -1, -1)
        else:
            order = ((start + step * k) % count for k in range(1, count + 1))
        for index in order:
            if self.hunks[index].is_pending:
                return index
        return -1

    # ------------------------------------------------------------------
    # Plain-structure round trip
    # ------------------------------------------------------------------

    def to_dict(self) -> dict:
        return {
            "fileId": self.file_id,
            "originalContent": self.original_content,
            "modifiedContent": self.modified_content,
            "hunks": [hunk.to_dict() for hunk in self.hunks],
            "currentHunkIndex": self.current_hunk_index,
            "isActive": self.is_active,
            "summary": self.summary,
            "lineEnding": self.line_ending,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DiffSession":
        """Rebuild a session from :meth:`to_dict` output.

        Raises ``InvalidRange`` if the stored hunks do not fit the stored
        original content, and ``KeyError``/``ValueError`` on malformed input.
        """
        session = cls(
            file_id=str(data["fileId"]),
            original_content=data["originalContent"],
            modified_content=data["modifiedContent"],
            hunks=[DiffHunk.from_dict(h) for h in data.get("hunks", [])],
            current_hunk_index=int(data.get("currentHunkIndex", -1)),
            is_active=bool(data.get("isActive", True)),
            summary=data.get("summary"),
            line_ending=data.get("lineEnding", LF),
        )
        validate_hunks(session.hunks, session.original_lines)
        current = session.current_hunk
        if current is None or not current.is_pending:
            session.current_hunk_index = -1
        return session
