"""
Line differencer — aligns two line sequences into a minimal edit script
using a longest-common-subsequence table.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import NamedTuple, Sequence

from .errors import DiffCancelled, DiffComputationFailed

logger = logging.getLogger(__name__)

LF = "\n"
CRLF = "\r\n"


class OpKind(str, Enum):
    COPY = "copy"
    INSERT = "insert"
    DELETE = "delete"


class EditOp(NamedTuple):
    """One edit script step.

    ``orig_index`` and ``mod_index`` are the cursor positions in the original
    and modified sequences at the moment the op is emitted.  A COPY consumes
    one line from both, DELETE consumes ``original[orig_index]`` and INSERT
    consumes ``modified[mod_index]``.
    """
    kind: OpKind
    orig_index: int
    mod_index: int


# ------------------------------------------------------------------
# Text <-> lines
# ------------------------------------------------------------------

def decode_text(text: str | bytes) -> str:
    if isinstance(text, bytes):
        try:
            return text.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DiffComputationFailed(
                f"Content is not valid UTF-8: {exc}"
            ) from exc
    if not isinstance(text, str):
        raise DiffComputationFailed(
            f"Expected text content, got {type(text).__name__}"
        )
    return text


def detect_line_ending(text: str | bytes) -> str:
    """Return ``"\\r\\n"`` if *text* contains any CRLF, else ``"\\n"``."""
    return CRLF if CRLF in decode_text(text) else LF


def split_lines(text: str | bytes, ending: str = LF) -> list[str]:
    """Split *text* exactly on *ending*; ``join_lines`` is the inverse."""
    return decode_text(text).split(ending)


def join_lines(lines: Sequence[str], ending: str = LF) -> str:
    return ending.join(lines)


def convert_line_endings(text: str, ending: str) -> str:
    """Rewrite every line break in *text* to *ending*."""
    normalized = text.replace(CRLF, LF)
    if ending == LF:
        return normalized
    return normalized.replace(LF, ending)


# ------------------------------------------------------------------
# LCS alignment
# ------------------------------------------------------------------

def _check_lines(lines: Sequence[str], label: str) -> None:
    if isinstance(lines, (str, bytes)):
        raise DiffComputationFailed(
            f"{label} must be a sequence of lines, not a single string"
        )
    for idx, line in enumerate(lines):
        if not isinstance(line, str):
            raise DiffComputationFailed(
                f"{label} line {idx} is {type(line).__name__}, expected str"
            )


def _lcs_table(a: list[int], b: list[int], cancel) -> list[list[int]]:
    """Suffix LCS lengths: ``table[i][j]`` = LCS of ``a[i:]`` and ``b[j:]``."""
    n, m = len(a), len(b)
    table = [[0] * (m + 1) for _ in range(n + 1)]
    for i in range(n - 1, -1, -1):
        if cancel is not None and cancel.cancelled:
            raise DiffCancelled("Differencing cancelled")
        row = table[i]
        below = table[i + 1]
        ai = a[i]
        for j in range(m - 1, -1, -1):
            if ai == b[j]:
                row[j] = below[j + 1] + 1
            else:
                down = below[j]
                right = row[j + 1]
                row[j] = down if down >= right else right
    return table


def diff_lines(
    original: Sequence[str],
    modified: Sequence[str],
    cancel=None,
) -> list[EditOp]:
    """Compute a minimal Copy/Insert/Delete script from *original* to *modified*.

    Parameters
    ----------
    original, modified:
        Line sequences compared with exact string equality.
    cancel:
        Optional object with a boolean ``cancelled`` attribute, polled once
        per table row.

    Returns
    -------
    list[EditOp]
        The edit script.  On ties deletions are emitted before insertions so
        a replaced block reads as one delete run followed by one insert run.

    Raises
    ------
    DiffComputationFailed
        If either input is not a sequence of ``str``.
    DiffCancelled
        If *cancel* was triggered mid-computation.
    """
    _check_lines(original, "original")
    _check_lines(modified, "modified")

    n_total, m_total = len(original), len(modified)

    prefix = 0
    while (prefix < n_total and prefix < m_total
           and original[prefix] == modified[prefix]):
        prefix += 1

    suffix = 0
    while (suffix < n_total - prefix and suffix < m_total - prefix
           and original[n_total - 1 - suffix] == modified[m_total - 1 - suffix]):
        suffix += 1

    script: list[EditOp] = [
        EditOp(OpKind.COPY, k, k) for k in range(prefix)
    ]

    # Intern the middle section so the table compares ints
    symbols: dict[str, int] = {}
    a = [symbols.setdefault(line, len(symbols))
         for line in original[prefix:n_total - suffix]]
    b = [symbols.setdefault(line, len(symbols))
         for line in modified[prefix:m_total - suffix]]
    n, m = len(a), len(b)

    if n and m:
        logger.debug(
            "[DiffReview] LCS over %d x %d lines (%d distinct)",
            n, m, len(symbols),
        )
        table = _lcs_table(a, b, cancel)
    else:
        table = None

    i = j = 0
    while i < n and j < m:
        if a[i] == b[j]:
            script.append(EditOp(OpKind.COPY, prefix + i, prefix + j))
            i += 1
            j += 1
        elif table[i + 1][j] >= table[i][j + 1]:
            script.append(EditOp(OpKind.DELETE, prefix + i, prefix + j))
            i += 1
        else:
            script.append(EditOp(OpKind.INSERT, prefix + i, prefix + j))
            j += 1
    while i < n:
        script.append(EditOp(OpKind.DELETE, prefix + i, prefix + j))
        i += 1
    while j < m:
        script.append(EditOp(OpKind.INSERT, prefix + i, prefix + j))
        j += 1

    for k in range(suffix):
        script.append(
            EditOp(OpKind.COPY, n_total - suffix + k, m_total - suffix + k)
        )

    return script
