"""Flattened, renderer-friendly view of a diff session."""

from __future__ import annotations

from dataclasses import dataclass

from .hunks import HunkStatus
from .session import DiffSession

UNCHANGED = "unchanged"
ADDED = "added"
REMOVED = "removed"


@dataclass(frozen=True)
class DisplayLine:
    kind: str
    content: str
    hunk_id: str | None = None
    hunk_status: HunkStatus | None = None
    is_first_line_of_hunk: bool = False
    is_current_hunk: bool = False


def build_display_lines(session: DiffSession) -> list[DisplayLine]:
    """Interleave untouched lines with each hunk's lines.

    Pending hunks show their removed lines followed by their added lines.
    Resolved hunks show whichever side won as plain unchanged text.
    """
    session.require_active()
    original = session.original_lines
    current = session.current_hunk
    lines: list[DisplayLine] = []
    position = 0

    for hunk in session.hunks:
        lines.extend(DisplayLine(UNCHANGED, text)
                     for text in original[position:hunk.start_line])
        position = hunk.end_line

        if hunk.status is HunkStatus.ACCEPTED:
            lines.extend(DisplayLine(UNCHANGED, text) for text in hunk.new_lines)
            continue
        if hunk.status is HunkStatus.REJECTED:
            lines.extend(DisplayLine(UNCHANGED, text)
                         for text in hunk.original_lines)
            continue

        is_current = current is not None and current.id == hunk.id
        for i, text in enumerate(hunk.original_lines):
            lines.append(DisplayLine(
                REMOVED, text, hunk.id, hunk.status,
                is_first_line_of_hunk=i == 0,
                is_current_hunk=is_current,
            ))
        for i, text in enumerate(hunk.new_lines):
            lines.append(DisplayLine(
                ADDED, text, hunk.id, hunk.status,
                is_first_line_of_hunk=not hunk.original_lines and i == 0,
                is_current_hunk=is_current,
            ))

    lines.extend(DisplayLine(UNCHANGED, text) for text in original[position:])
    return lines
