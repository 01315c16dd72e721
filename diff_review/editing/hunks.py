"""
Hunk segmenter — groups an edit script into discrete, classified hunks.
"""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

from .errors import InvalidRange
from .line_diff import EditOp, OpKind

logger = logging.getLogger(__name__)


class HunkType(str, Enum):
    ADD = "add"
    REMOVE = "remove"
    MODIFY = "modify"


class HunkStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


@dataclass
class DiffHunk:
    """A contiguous change region: original lines → new lines.

    ``start_line``/``end_line`` are a half-open range in the original
    content (0-indexed).  For an ADD hunk they are equal and mark the
    insertion point.
    """
    id: str
    start_line: int
    end_line: int
    original_lines: list[str] = field(default_factory=list)
    new_lines: list[str] = field(default_factory=list)
    type: HunkType = HunkType.MODIFY
    status: HunkStatus = HunkStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status is HunkStatus.PENDING

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "startLine": self.start_line,
            "endLine": self.end_line,
            "originalLines": list(self.original_lines),
            "newLines": list(self.new_lines),
            "type": self.type.value,
            "status": self.status.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "DiffHunk":
        return cls(
            id=str(data["id"]),
            start_line=int(data["startLine"]),
            end_line=int(data["endLine"]),
            original_lines=list(data.get("originalLines", [])),
            new_lines=list(data.get("newLines", [])),
            type=HunkType(data["type"]),
            status=HunkStatus(data.get("status", HunkStatus.PENDING.value)),
        )


class HunkIdAllocator:
    """Session-scoped monotonic id source; ids are never handed out twice."""

    def __init__(self, start: int = 1) -> None:
        self._counter = itertools.count(start)

    def next_id(self) -> str:
        return f"h{next(self._counter)}"

    @classmethod
    def after(cls, hunk_ids: Sequence[str]) -> "HunkIdAllocator":
        """Build an allocator that continues past the highest ``h<n>`` id."""
        highest = 0
        for hunk_id in hunk_ids:
            if hunk_id.startswith("h") and hunk_id[1:].isdigit():
                highest = max(highest, int(hunk_id[1:]))
        return cls(start=highest + 1)


def classify(original_lines: Sequence[str], new_lines: Sequence[str]) -> HunkType:
    if not original_lines:
        return HunkType.ADD
    if not new_lines:
        return HunkType.REMOVE
    return HunkType.MODIFY


def segment(
    script: Sequence[EditOp],
    original: Sequence[str],
    modified: Sequence[str],
    allocator: HunkIdAllocator,
) -> list[DiffHunk]:
    """Turn an edit script into hunks.

    Every maximal run of non-COPY ops becomes one hunk; insert and delete
    runs with no COPY between them merge into a single region.
    """
    hunks: list[DiffHunk] = []
    current: DiffHunk | None = None

    def _close() -> None:
        nonlocal current
        if current is None:
            return
        current.end_line = current.start_line + len(current.original_lines)
        current.type = classify(current.original_lines, current.new_lines)
        hunks.append(current)
        current = None

    for op in script:
        if op.kind is OpKind.COPY:
            _close()
            continue
        if current is None:
            current = DiffHunk(
                id=allocator.next_id(),
                start_line=op.orig_index,
                end_line=op.orig_index,
            )
        if op.kind is OpKind.DELETE:
            current.original_lines.append(original[op.orig_index])
        else:
            current.new_lines.append(modified[op.mod_index])
    _close()

    validate_hunks(hunks, original)
    logger.debug("[DiffReview] Segmented %d hunk(s)", len(hunks))
    return hunks


def validate_hunks(hunks: Sequence[DiffHunk], original: Sequence[str]) -> None:
    """Check ordering, bounds and classification of *hunks*.

    Raises
    ------
    InvalidRange
        If hunks overlap, are out of order, fall outside *original*, repeat
        an id, or disagree with the original lines they claim to replace.
    """
    prev_end = -1
    prev_start = -1
    seen_ids: set[str] = set()
    for hunk in hunks:
        if hunk.id in seen_ids:
            raise InvalidRange(f"Hunk id {hunk.id} appears more than once")
        seen_ids.add(hunk.id)
        if not hunk.original_lines and not hunk.new_lines:
            raise InvalidRange(f"Hunk {hunk.id} changes nothing")
        if hunk.start_line < 0 or hunk.end_line > len(original):
            raise InvalidRange(
                f"Hunk {hunk.id} range [{hunk.start_line}, {hunk.end_line}) "
                f"outside document of {len(original)} lines"
            )
        if hunk.start_line <= prev_start or hunk.start_line < prev_end:
            raise InvalidRange(
                f"Hunk {hunk.id} at line {hunk.start_line} overlaps or "
                f"precedes the previous hunk"
            )
        if hunk.end_line - hunk.start_line != len(hunk.original_lines):
            raise InvalidRange(
                f"Hunk {hunk.id} spans {hunk.end_line - hunk.start_line} "
                f"lines but carries {len(hunk.original_lines)}"
            )
        if list(original[hunk.start_line:hunk.end_line]) != hunk.original_lines:
            raise InvalidRange(
                f"Hunk {hunk.id} original lines do not match the document"
            )
        if hunk.type is not classify(hunk.original_lines, hunk.new_lines):
            raise InvalidRange(
                f"Hunk {hunk.id} is typed {hunk.type.value} but its lines "
                f"say otherwise"
            )
        prev_start = hunk.start_line
        prev_end = hunk.end_line
