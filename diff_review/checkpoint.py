"""
Checkpoint & resume — saves and restores an in-progress review so an
interrupted session can pick up where it left off.
"""

import json
import logging
import os

from .editing.errors import DiffReviewError
from .editing.session import DiffSession

logger = logging.getLogger(__name__)


def save_session(filepath: str, session: DiffSession) -> None:
    """Persist *session* to *filepath* as JSON."""
    tmp = filepath + ".tmp"
    with open(tmp, "w", encoding="utf-8") as f:
        json.dump(session.to_dict(), f, indent=2)
    os.replace(tmp, filepath)


def load_session(filepath: str) -> DiffSession | None:
    """Load a session from *filepath*.

    Returns the session, or ``None`` if the file is missing or invalid.
    """
    if not os.path.isfile(filepath):
        return None
    try:
        with open(filepath, "r", encoding="utf-8") as f:
            state = json.load(f)
        required = {"fileId", "originalContent", "modifiedContent", "hunks"}
        if not isinstance(state, dict) or not required.issubset(state.keys()):
            return None
        return DiffSession.from_dict(state)
    except (json.JSONDecodeError, OSError, KeyError, TypeError,
            ValueError, DiffReviewError) as exc:
        logger.warning("[DiffReview] Ignoring checkpoint %s: %s", filepath, exc)
        return None


def clear_checkpoint(filepath: str) -> None:
    """Remove the checkpoint file after a completed review."""
    try:
        if os.path.isfile(filepath):
            os.remove(filepath)
    except OSError:
        pass
