"""
Console display helpers for the review CLI — file logging setup and
ANSI-colored rendering of hunks and previews.
"""

import logging
import os
from datetime import datetime

from .editing.hunks import DiffHunk
from .editing.preview import ADDED, REMOVED, DisplayLine
from .editing.session import StatusSummary

_BOLD = "\033[1m"
_CYAN = "\033[36m"
_GREEN = "\033[32m"
_RED = "\033[31m"
_DIM = "\033[2m"
_RESET = "\033[0m"


def setup_logger(log_dir: str = ".diffreview/logs") -> logging.Logger:
    """Creates a file logger. All verbose output goes here."""
    os.makedirs(log_dir, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    log_file = os.path.join(log_dir, f"review_{timestamp}.log")

    logger = logging.getLogger("diff_review")
    logger.setLevel(logging.DEBUG)

    fh = logging.FileHandler(log_file, encoding="utf-8")
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(logging.Formatter(
        "%(asctime)s [%(levelname)s] %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(fh)

    return logger


def _paint(text: str, code: str, color: bool) -> str:
    return f"{code}{text}{_RESET}" if color else text


def format_hunk(hunk: DiffHunk, index: int, total: int,
                color: bool = True) -> str:
    """Render one hunk as a unified-diff style block."""
    header = (
        f"@@ hunk {index + 1}/{total} [{hunk.id}] {hunk.type.value} "
        f"lines {hunk.start_line + 1}-{max(hunk.end_line, hunk.start_line + 1)} "
        f"({hunk.status.value}) @@"
    )
    out = [_paint(header, _CYAN, color)]
    out.extend(_paint(f"-{line}", _RED, color) for line in hunk.original_lines)
    out.extend(_paint(f"+{line}", _GREEN, color) for line in hunk.new_lines)
    return "\n".join(out)


def format_display_lines(lines: list[DisplayLine], color: bool = True) -> str:
    """Render a session preview; the focused hunk is marked with ``>``."""
    out: list[str] = []
    for line in lines:
        marker = ">" if line.is_current_hunk else " "
        if line.kind == ADDED:
            out.append(_paint(f"{marker}+{line.content}", _GREEN, color))
        elif line.kind == REMOVED:
            out.append(_paint(f"{marker}-{line.content}", _RED, color))
        else:
            out.append(f"{marker} {line.content}")
    return "\n".join(out)


def format_status(summary: StatusSummary, color: bool = True) -> str:
    text = (
        f"{summary.pending} pending | {summary.accepted} accepted | "
        f"{summary.rejected} rejected"
    )
    return _paint(text, _BOLD, color)


def format_notice(text: str, color: bool = True) -> str:
    return _paint(text, _DIM, color)
