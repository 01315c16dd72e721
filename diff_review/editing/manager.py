"""
Diff session manager — the per-document façade used by the host editor.

Every operation returns an :class:`OperationResult`; engine errors are
logged, optionally surfaced through the ``notify`` callback, and never
raised to the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Any, Callable

from ..config import Config
from .background import CancellationToken, DiffWorker, LatestResultSlot
from .document import Document
from .errors import (
    AlreadyActive, DiffCancelled, DiffComputationFailed, DiffReviewError,
    ErrorKind, InvalidRange, SessionNotActive,
)
from .history import commit_reconciliation
from .preview import build_display_lines
from .reconcile import finalize, materialize
from .session import DiffSession, Direction

logger = logging.getLogger(__name__)

NotifyFn = Callable[[ErrorKind, str], None]

# Failures the user should hear about; the rest are only logged
_NOTIFY_KINDS = {
    ErrorKind.UNKNOWN_HUNK_ID,
    ErrorKind.ALREADY_ACTIVE,
    ErrorKind.DIFF_COMPUTATION_FAILED,
    ErrorKind.UNRESOLVED_HUNKS,
    ErrorKind.NO_CHANGES,
}


@dataclass
class OperationResult:
    """Outcome of a manager operation."""
    success: bool = False
    error: ErrorKind | None = None
    message: str = ""
    value: Any = None


def _log_notification(kind: ErrorKind, message: str) -> None:
    logger.warning("[DiffReview] %s: %s", kind.value, message)


def _completed(result: OperationResult) -> Future:
    future: Future = Future()
    future.set_result(result)
    return future


class DiffSessionManager:
    """Review operations over one document's diff-session slot.

    Parameters
    ----------
    document:
        The document that owns the session slot.
    config:
        Engine settings; defaults to ``Config()``.
    notify:
        Called with ``(kind, message)`` for user-facing failures.
    worker:
        Shared :class:`DiffWorker`.  When omitted the manager creates its
        own on first background request and owns its shutdown.
    """

    def __init__(
        self,
        document: Document,
        config: Config | None = None,
        notify: NotifyFn | None = None,
        worker: DiffWorker | None = None,
    ) -> None:
        self.document = document
        self.config = config or Config()
        self._notify = notify or _log_notification
        self._worker = worker
        self._owns_worker = worker is None
        self._slot = LatestResultSlot()
        document.on_close(lambda _doc: self.cancel_pending())

    @property
    def session(self) -> DiffSession | None:
        return self.document.diff_session

    # ------------------------------------------------------------------
    # Session construction
    # ------------------------------------------------------------------

    def start_session(
        self,
        modified: str | bytes,
        summary: str | None = None,
        original: str | bytes | None = None,
    ) -> OperationResult:
        """Diff and segment synchronously, installing the new session."""
        refused = self._refuse_start()
        if refused is not None:
            return refused
        original = self.document.content if original is None else original
        generation, token = self._slot.issue()
        return self._build_and_install(generation, token, original,
                                       modified, summary)

    def start_session_async(
        self,
        modified: str | bytes,
        summary: str | None = None,
        original: str | bytes | None = None,
    ) -> Future:
        """Run differencing on the worker; resolves to an OperationResult.

        A newer start request supersedes this one; a superseded request
        resolves with ``ErrorKind.CANCELLED`` and never touches the slot.
        """
        refused = self._refuse_start()
        if refused is not None:
            return _completed(refused)
        original = self.document.content if original is None else original
        generation, token = self._slot.issue()
        logger.debug("[DiffReview] Queued diff gen %d for %s",
                     generation, self.document.id)
        return self._get_worker().submit(
            self._build_and_install, generation, token, original,
            modified, summary,
        )

    def request_session(
        self,
        modified: str | bytes,
        summary: str | None = None,
        original: str | bytes | None = None,
    ) -> Future:
        """Start a session inline for small inputs, in the background otherwise."""
        base = self.document.content if original is None else original
        line_count = _count_lines(base) + _count_lines(modified)
        if line_count > self.config.BACKGROUND_LINE_THRESHOLD:
            return self.start_session_async(modified, summary, base)
        return _completed(self.start_session(modified, summary, base))

    def cancel_pending(self) -> None:
        """Cancel any in-flight differencing for this document."""
        self._slot.cancel()

    def shutdown(self) -> None:
        self.cancel_pending()
        if self._worker is not None and self._owns_worker:
            self._worker.shutdown(wait=False)
            self._worker = None

    def _refuse_start(self) -> OperationResult | None:
        if not self.document.is_open:
            return self._fail(DiffComputationFailed(
                f"Document {self.document.id} is closed"))
        if self.document.has_active_session:
            return self._fail(AlreadyActive(
                f"Document {self.document.id} already has an active review"))
        return None

    def _get_worker(self) -> DiffWorker:
        if self._worker is None:
            self._worker = DiffWorker(self.config.DIFF_WORKERS)
        return self._worker

    def _build_and_install(
        self,
        generation: int,
        token: CancellationToken,
        original: str | bytes,
        modified: str | bytes,
        summary: str | None,
    ) -> OperationResult:
        try:
            session = DiffSession.create(
                self.document.id, original, modified, summary,
                normalize_line_endings=self.config.NORMALIZE_LINE_ENDINGS,
                cancel=token,
            )
        except DiffCancelled as exc:
            return self._discarded(generation, str(exc))
        except InvalidRange as exc:
            logger.error("[DiffReview] Segmentation produced bad hunks: %s", exc)
            if not self._slot.is_latest(generation):
                return self._discarded(generation, str(exc))
            return self._fail(DiffComputationFailed(
                "Could not segment the rewritten content"))
        except DiffReviewError as exc:
            if not self._slot.is_latest(generation):
                return self._discarded(generation, str(exc))
            return self._fail(exc)
        except Exception as exc:
            logger.exception("[DiffReview] Differencing crashed for %s",
                             self.document.id)
            if not self._slot.is_latest(generation):
                return self._discarded(generation, str(exc))
            return self._fail(DiffComputationFailed(f"Differencing failed: {exc}"))

        def _install() -> bool:
            if not self.document.is_open or self.document.has_active_session:
                return False
            self.document.diff_session = session
            return True

        if not self._slot.install(generation, _install):
            return self._discarded(generation, "superseded before install")

        return OperationResult(
            success=True,
            value=session,
            message=f"{len(session.hunks)} change(s) to review",
        )

    def _discarded(self, generation: int, reason: str) -> OperationResult:
        logger.debug("[DiffReview] Diff gen %d for %s discarded: %s",
                     generation, self.document.id, reason)
        return OperationResult(error=ErrorKind.CANCELLED, message=reason)

    # ------------------------------------------------------------------
    # Navigation & decisions
    # ------------------------------------------------------------------

    def navigate(self, direction: Direction | str = Direction.NEXT) -> OperationResult:
        return self._run(lambda s: s.navigate(direction))

    def accept(self, hunk_id: str) -> OperationResult:
        return self._decide(lambda s: s.accept(hunk_id))

    def reject(self, hunk_id: str) -> OperationResult:
        return self._decide(lambda s: s.reject(hunk_id))

    def accept_all(self) -> OperationResult:
        return self._decide(lambda s: s.accept_all())

    def reject_all(self) -> OperationResult:
        return self._decide(lambda s: s.reject_all())

    def get_status_summary(self) -> OperationResult:
        return self._run(lambda s: s.status_summary())

    def close_session(self) -> OperationResult:
        """Discard the review; the document keeps its pre-session content."""
        def _close(session: DiffSession) -> None:
            session.close()
            self.document.diff_session = None
            logger.info("[DiffReview] Review discarded for %s",
                        self.document.id)

        return self._run(_close)

    # ------------------------------------------------------------------
    # Reconciliation
    # ------------------------------------------------------------------

    def preview(self) -> OperationResult:
        """Materialize the current decisions without finalizing."""
        return self._run(materialize)

    def display_lines(self) -> OperationResult:
        return self._run(build_display_lines)

    def finalize(self, label: str | None = None) -> OperationResult:
        """Reconcile and commit the review as one undo entry.

        Fails with ``UNRESOLVED_HUNKS`` while any hunk is pending; the
        session then stays active and unchanged.
        """
        def _finalize(session: DiffSession) -> str:
            entry_label = label or _history_label(session)
            text = finalize(session)
            self.document.diff_session = None
            commit_reconciliation(self.document, text, entry_label)
            return text

        return self._run(_finalize)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _decide(self, action: Callable[[DiffSession], Any]) -> OperationResult:
        result = self._run(action)
        if not (result.success and self.config.AUTO_FINALIZE):
            return result
        session = self.session
        if session is not None and session.status_summary().resolved:
            finalized = self.finalize()
            if finalized.success:
                result.message = "Review finalized"
        return result

    def _run(self, action: Callable[[DiffSession], Any]) -> OperationResult:
        session = self.document.diff_session
        try:
            if session is None or not session.is_active:
                raise SessionNotActive(
                    f"No active review for {self.document.id}")
            value = action(session)
        except DiffReviewError as exc:
            return self._fail(exc)
        return OperationResult(success=True, value=value)

    def _fail(self, exc: DiffReviewError) -> OperationResult:
        kind = exc.kind
        message = str(exc)
        if kind is ErrorKind.INVALID_RANGE:
            logger.error("[DiffReview] Invariant violated: %s", message)
        elif kind in (ErrorKind.SESSION_NOT_ACTIVE, ErrorKind.EMPTY_SELECTION):
            logger.info("[DiffReview] %s", message)
        else:
            logger.warning("[DiffReview] %s: %s", kind.value, message)
        if kind in _NOTIFY_KINDS:
            self._notify(kind, message)
        return OperationResult(error=kind, message=message)


def _count_lines(text: str | bytes) -> int:
    if isinstance(text, bytes):
        return text.count(b"\n") + 1
    if isinstance(text, str):
        return text.count("\n") + 1
    return 0


def _history_label(session: DiffSession) -> str:
    if session.summary:
        return f"AI edit: {session.summary}"
    return "AI edit"

