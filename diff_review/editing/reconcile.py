"""
Reconciliation — turns the current hunk decisions into document text.
"""

from __future__ import annotations

import logging

from .errors import UnresolvedHunks
from .hunks import HunkStatus, validate_hunks
from .line_diff import join_lines
from .session import DiffSession

logger = logging.getLogger(__name__)

__all__ = ["materialize", "finalize", "validate_hunks"]


def materialize(session: DiffSession) -> str:
    """Return the text implied by the current decisions.

    Accepted hunks contribute their new lines; pending and rejected hunks
    keep the original lines, so a preview is always well defined.
    """
    session.require_active()
    original = session.original_lines
    validate_hunks(session.hunks, original)

    out: list[str] = []
    position = 0
    for hunk in session.hunks:
        out.extend(original[position:hunk.start_line])
        if hunk.status is HunkStatus.ACCEPTED:
            out.extend(hunk.new_lines)
        else:
            out.extend(hunk.original_lines)
        position = hunk.end_line
    out.extend(original[position:])
    return join_lines(out, session.line_ending)


def finalize(session: DiffSession) -> str:
    """Materialize and close *session*.

    Raises
    ------
    UnresolvedHunks
        If any hunk is still pending.  The session is left untouched.
    """
    session.require_active()
    summary = session.status_summary()
    if summary.pending:
        raise UnresolvedHunks(summary.pending)

    text = materialize(session)
    logger.info(
        "[DiffReview] Finalized %s: %d accepted, %d rejected",
        session.file_id, summary.accepted, summary.rejected,
    )
    session.close()
    return text
