"""Tests for DiffSessionManager — the per-document review façade."""

import logging
import threading

import pytest

from diff_review.config import Config
from diff_review.editing.background import DiffWorker
from diff_review.editing.document import Document
from diff_review.editing.errors import ErrorKind, InvalidRange
from diff_review.editing.hunks import HunkStatus

ORIGINAL = "alpha\nbeta\ngamma\ndelta\nepsilon\n"
MODIFIED = "ALPHA\nbeta\ngamma\ndelta\nepsilon\nzeta\n"
THREE_CHANGES = "ALPHA\nbeta\nGAMMA\ndelta\nepsilon\nzeta\n"


class _Notifier:
    def __init__(self):
        self.calls = []

    def __call__(self, kind, message):
        self.calls.append((kind, message))

    @property
    def kinds(self):
        return [kind for kind, _ in self.calls]


@pytest.fixture
def notifier():
    return _Notifier()


@pytest.fixture
def document():
    return Document("doc.md", ORIGINAL)


@pytest.fixture
def manager(document, notifier):
    from diff_review.editing.manager import DiffSessionManager
    mgr = DiffSessionManager(document, Config({}), notify=notifier)
    yield mgr
    mgr.shutdown()


@pytest.fixture
def worker():
    with DiffWorker(max_workers=1) as w:
        yield w


def _blocked(worker):
    """Occupy the single worker thread until the returned event is set."""
    gate = threading.Event()
    worker.submit(gate.wait, 5)
    return gate


class TestStartSession:
    def test_start_installs_session(self, manager, document):
        result = manager.start_session(MODIFIED, summary="caps + zeta")
        assert result.success
        assert document.diff_session is result.value
        assert result.value.current_hunk_index == -1
        assert len(result.value.hunks) == 2

    def test_original_defaults_to_document_content(self, manager):
        session = manager.start_session(MODIFIED).value
        assert session.original_content == ORIGINAL

    def test_second_start_is_already_active(self, manager, notifier):
        manager.start_session(MODIFIED)
        result = manager.start_session(THREE_CHANGES)
        assert not result.success
        assert result.error is ErrorKind.ALREADY_ACTIVE
        assert ErrorKind.ALREADY_ACTIVE in notifier.kinds

    def test_no_changes(self, manager, document, notifier):
        result = manager.start_session(ORIGINAL)
        assert result.error is ErrorKind.NO_CHANGES
        assert document.diff_session is None
        assert notifier.kinds == [ErrorKind.NO_CHANGES]

    def test_undecodable_content_fails_cleanly(self, manager, document, notifier):
        result = manager.start_session(b"\xff\xfe\xfd")
        assert result.error is ErrorKind.DIFF_COMPUTATION_FAILED
        assert document.diff_session is None
        assert notifier.kinds == [ErrorKind.DIFF_COMPUTATION_FAILED]

    def test_segmentation_failure_installs_nothing(
        self, manager, document, notifier, monkeypatch, caplog,
    ):
        def broken_segment(*args, **kwargs):
            raise InvalidRange("Hunk h1 overlaps the previous hunk")

        monkeypatch.setattr("diff_review.editing.session.segment",
                            broken_segment)
        with caplog.at_level(logging.ERROR, logger="diff_review"):
            result = manager.start_session(MODIFIED)
        assert result.error is ErrorKind.DIFF_COMPUTATION_FAILED
        assert notifier.kinds == [ErrorKind.DIFF_COMPUTATION_FAILED]
        assert document.diff_session is None
        assert any(r.levelno == logging.ERROR for r in caplog.records)

    def test_unexpected_crash_installs_nothing(
        self, manager, document, notifier, monkeypatch,
    ):
        def crashing_segment(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr("diff_review.editing.session.segment",
                            crashing_segment)
        result = manager.start_session(MODIFIED)
        assert result.error is ErrorKind.DIFF_COMPUTATION_FAILED
        assert "boom" in result.message
        assert notifier.kinds == [ErrorKind.DIFF_COMPUTATION_FAILED]
        assert document.diff_session is None

    def test_closed_document(self, manager, document):
        document.close()
        result = manager.start_session(MODIFIED)
        assert result.error is ErrorKind.DIFF_COMPUTATION_FAILED


class TestOperationsWithoutSession:
    @pytest.mark.parametrize("call", [
        lambda m: m.navigate("next"),
        lambda m: m.accept("h1"),
        lambda m: m.reject("h1"),
        lambda m: m.accept_all(),
        lambda m: m.reject_all(),
        lambda m: m.get_status_summary(),
        lambda m: m.close_session(),
        lambda m: m.preview(),
        lambda m: m.finalize(),
    ])
    def test_session_not_active(self, manager, notifier, call):
        result = call(manager)
        assert not result.success
        assert result.error is ErrorKind.SESSION_NOT_ACTIVE
        assert notifier.calls == []


class TestReview:
    def test_navigation_and_decisions(self, manager):
        session = manager.start_session(THREE_CHANGES).value
        assert len(session.hunks) == 3

        assert manager.navigate("next").value == 0
        assert manager.accept(session.hunks[0].id).success
        assert manager.navigate("next").value == 1
        assert manager.reject(session.hunks[1].id).success

        summary = manager.get_status_summary().value
        assert (summary.pending, summary.accepted, summary.rejected) == (1, 1, 1)

    def test_unknown_hunk_is_reported_and_harmless(self, manager, notifier):
        manager.start_session(MODIFIED)
        result = manager.accept("nope")
        assert result.error is ErrorKind.UNKNOWN_HUNK_ID
        assert notifier.kinds == [ErrorKind.UNKNOWN_HUNK_ID]
        assert manager.session.is_active

    def test_empty_selection(self, manager, notifier):
        manager.start_session(MODIFIED)
        manager.accept_all()
        result = manager.navigate("next")
        assert result.error is ErrorKind.EMPTY_SELECTION
        assert notifier.calls == []

    def test_unknown_direction_is_returned_not_raised(self, manager, notifier):
        manager.start_session(MODIFIED)
        manager.navigate("next")
        result = manager.navigate("sideways")
        assert not result.success
        assert result.error is ErrorKind.INVALID_DIRECTION
        assert "sideways" in result.message
        assert notifier.calls == []
        assert manager.session.current_hunk_index == 0

    def test_preview_reflects_decisions(self, manager):
        session = manager.start_session(MODIFIED).value
        assert manager.preview().value == ORIGINAL
        manager.accept(session.hunks[0].id)
        assert manager.preview().value.startswith("ALPHA\n")

    def test_display_lines(self, manager):
        manager.start_session(MODIFIED)
        manager.navigate("next")
        lines = manager.display_lines().value
        kinds = [line.kind for line in lines]
        assert kinds[:2] == ["removed", "added"]
        assert lines[0].is_current_hunk

    def test_close_session_discards(self, manager, document):
        manager.start_session(MODIFIED)
        assert manager.close_session().success
        assert document.diff_session is None
        assert document.content == ORIGINAL
        assert document.history.undo_depth == 0
        assert manager.start_session(THREE_CHANGES).success


class TestFinalize:
    def test_unresolved_hunks_blocks(self, manager, notifier):
        session = manager.start_session(MODIFIED).value
        manager.accept(session.hunks[0].id)
        result = manager.finalize()
        assert result.error is ErrorKind.UNRESOLVED_HUNKS
        assert ErrorKind.UNRESOLVED_HUNKS in notifier.kinds
        assert session.is_active
        assert session.hunks[1].status is HunkStatus.PENDING

    def test_accept_all_then_finalize_commits_once(self, manager, document):
        manager.start_session(THREE_CHANGES, summary="shout")
        manager.accept_all()
        result = manager.finalize()
        assert result.success
        assert result.value == THREE_CHANGES
        assert document.content == THREE_CHANGES
        assert document.diff_session is None
        assert document.history.undo_depth == 1
        assert document.history.last_entry.label == "AI edit: shout"

        assert document.undo()
        assert document.content == ORIGINAL

    def test_reject_all_then_finalize_keeps_original(self, manager, document):
        manager.start_session(MODIFIED)
        manager.reject_all()
        assert manager.finalize().value == ORIGINAL
        assert document.content == ORIGINAL
        assert document.history.undo_depth == 0

    def test_auto_finalize(self, document, notifier):
        from diff_review.editing.manager import DiffSessionManager
        mgr = DiffSessionManager(document, Config({"auto_finalize": True}),
                                 notify=notifier)
        session = mgr.start_session(MODIFIED).value
        mgr.accept(session.hunks[0].id)
        assert document.diff_session is session
        result = mgr.reject(session.hunks[1].id)
        assert result.success
        assert result.message == "Review finalized"
        assert document.diff_session is None
        assert document.content == "ALPHA\nbeta\ngamma\ndelta\nepsilon\n"


class TestBackground:
    def test_async_start(self, document, notifier, worker):
        from diff_review.editing.manager import DiffSessionManager
        mgr = DiffSessionManager(document, Config({}), notify=notifier,
                                 worker=worker)
        result = mgr.start_session_async(MODIFIED).result(timeout=5)
        assert result.success
        assert document.diff_session is result.value

    def test_newer_request_supersedes_older(self, document, notifier, worker):
        from diff_review.editing.manager import DiffSessionManager
        mgr = DiffSessionManager(document, Config({}), notify=notifier,
                                 worker=worker)
        gate = _blocked(worker)
        first = mgr.start_session_async(MODIFIED)
        second = mgr.start_session_async(THREE_CHANGES)
        gate.set()

        assert first.result(timeout=5).error is ErrorKind.CANCELLED
        result = second.result(timeout=5)
        assert result.success
        assert document.diff_session.modified_content == THREE_CHANGES
        assert notifier.calls == []

    def test_sync_start_supersedes_in_flight(self, document, worker):
        from diff_review.editing.manager import DiffSessionManager
        mgr = DiffSessionManager(document, Config({}), worker=worker)
        gate = _blocked(worker)
        pending = mgr.start_session_async(MODIFIED)
        assert mgr.start_session(THREE_CHANGES).success
        gate.set()

        assert pending.result(timeout=5).error is ErrorKind.CANCELLED
        assert document.diff_session.modified_content == THREE_CHANGES

    def test_document_close_cancels(self, document, worker):
        from diff_review.editing.manager import DiffSessionManager
        mgr = DiffSessionManager(document, Config({}), worker=worker)
        gate = _blocked(worker)
        pending = mgr.start_session_async(MODIFIED)
        document.close()
        gate.set()

        assert pending.result(timeout=5).error is ErrorKind.CANCELLED
        assert document.diff_session is None

    def test_request_session_small_is_inline(self, manager, document):
        future = manager.request_session(MODIFIED)
        assert future.done()
        assert future.result().success
        assert document.diff_session is not None

    def test_request_session_large_goes_to_worker(self, document, worker):
        from diff_review.editing.manager import DiffSessionManager
        mgr = DiffSessionManager(
            document, Config({"background_line_threshold": 1}), worker=worker,
        )
        result = mgr.request_session(MODIFIED).result(timeout=5)
        assert result.success
        assert document.diff_session is result.value
