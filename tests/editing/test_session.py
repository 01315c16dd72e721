"""Tests for DiffSession construction, navigation and decisions."""

import pytest

from diff_review.editing.errors import (
    DiffComputationFailed, EmptySelection, InvalidDirection, InvalidRange,
    NoChanges, SessionNotActive, UnknownHunkId,
)
from diff_review.editing.hunks import HunkStatus
from diff_review.editing.session import DiffSession, Direction

# Three separate single-line changes
ORIGINAL = "one\ntwo\nthree\nfour\nfive\nsix\nseven\n"
MODIFIED = "ONE\ntwo\nthree\nFOUR\nfive\nsix\nSEVEN\n"


@pytest.fixture
def session():
    return DiffSession.create("doc-1", ORIGINAL, MODIFIED, summary="caps")


class TestCreate:
    def test_builds_hunks(self, session):
        assert len(session.hunks) == 3
        assert session.current_hunk_index == -1
        assert session.is_active
        assert session.summary == "caps"
        assert all(h.status is HunkStatus.PENDING for h in session.hunks)

    def test_identical_content_raises_no_changes(self):
        with pytest.raises(NoChanges):
            DiffSession.create("doc", "same\n", "same\n")

    def test_bad_bytes_fail(self):
        with pytest.raises(DiffComputationFailed):
            DiffSession.create("doc", b"ok", b"\xff\xfe")

    def test_crlf_rewrite_normalized_to_original(self):
        session = DiffSession.create("doc", "a\r\nb\r\nc", "a\nB\nc")
        assert session.line_ending == "\r\n"
        assert session.modified_content == "a\r\nB\r\nc"
        assert len(session.hunks) == 1
        assert session.hunks[0].original_lines == ["b"]

    def test_line_ending_only_change_is_no_change(self):
        with pytest.raises(NoChanges):
            DiffSession.create("doc", "a\r\nb", "a\nb")

    def test_normalization_can_be_disabled(self):
        session = DiffSession.create("doc", "a\r\nb", "a\nb",
                                     normalize_line_endings=False)
        assert session.modified_content == "a\nb"
        assert session.hunks


class TestNavigate:
    def test_next_from_none_focuses_first(self, session):
        assert session.navigate("next") == 0
        assert session.current_hunk is session.hunks[0]

    def test_prev_from_none_focuses_last(self, session):
        assert session.navigate(Direction.PREV) == 2

    def test_wraps_around(self, session):
        session.navigate("next")
        session.navigate("next")
        session.navigate("next")
        assert session.navigate("next") == 0
        assert session.navigate("prev") == 2

    def test_skips_resolved_hunks(self, session):
        assert session.navigate("next") == 0
        session.accept(session.hunks[0].id)
        session.current_hunk_index = -1
        assert session.navigate("next") == 1

    def test_accept_then_navigate_lands_on_next_pending(self, session):
        assert session.navigate("next") == 0
        session.accept(session.hunks[0].id)
        assert session.navigate("next") == 1
        assert session.navigate("next") == 2

    def test_auto_advance_focuses_next_pending(self, session):
        session.navigate("next")
        session.accept(session.hunks[0].id)
        assert session.current_hunk_index == 1

    def test_empty_selection_when_all_resolved(self, session):
        session.navigate("next")
        session.accept_all()
        with pytest.raises(EmptySelection):
            session.navigate("next")
        assert session.current_hunk_index == -1

    def test_invalid_direction(self, session):
        with pytest.raises(ValueError):
            session.navigate("sideways")

    def test_invalid_direction_keeps_focus(self, session):
        session.navigate("next")
        with pytest.raises(InvalidDirection):
            session.navigate("sideways")
        assert session.current_hunk_index == 0


class TestDecisions:
    def test_accept_is_idempotent(self, session):
        hunk_id = session.hunks[1].id
        session.accept(hunk_id)
        once = session.to_dict()
        session.accept(hunk_id)
        assert session.to_dict() == once

    def test_reject_is_idempotent(self, session):
        session.navigate("next")
        hunk_id = session.hunks[0].id
        session.reject(hunk_id)
        once = session.to_dict()
        session.reject(hunk_id)
        assert session.to_dict() == once

    def test_focused_decision_auto_advances(self, session):
        session.navigate("next")
        session.reject(session.hunks[0].id)
        assert session.current_hunk_index == 1

    def test_unfocused_decision_keeps_focus(self, session):
        session.navigate("next")
        session.accept(session.hunks[2].id)
        assert session.current_hunk_index == 0

    def test_last_pending_decision_clears_focus(self, session):
        session.accept(session.hunks[0].id)
        session.accept(session.hunks[1].id)
        session.navigate("next")
        session.accept(session.hunks[2].id)
        assert session.current_hunk_index == -1

    def test_auto_advance_wraps(self, session):
        session.navigate("prev")
        session.accept(session.hunks[2].id)
        assert session.current_hunk_index == 0

    def test_decisions_can_flip(self, session):
        hunk_id = session.hunks[0].id
        session.accept(hunk_id)
        session.reject(hunk_id)
        session.accept(hunk_id)
        assert session.hunk(hunk_id).status is HunkStatus.ACCEPTED

    def test_unknown_hunk(self, session):
        with pytest.raises(UnknownHunkId):
            session.accept("h999")

    def test_accept_all_and_reject_all(self, session):
        session.navigate("next")
        session.accept_all()
        assert all(h.status is HunkStatus.ACCEPTED for h in session.hunks)
        assert session.current_hunk_index == -1
        session.reject_all()
        assert all(h.status is HunkStatus.REJECTED for h in session.hunks)

    def test_status_summary(self, session):
        session.accept(session.hunks[0].id)
        session.reject(session.hunks[1].id)
        summary = session.status_summary()
        assert (summary.pending, summary.accepted, summary.rejected) == (1, 1, 1)
        assert summary.total == 3
        assert not summary.resolved


class TestClose:
    def test_close_clears_and_deactivates(self, session):
        session.navigate("next")
        session.close()
        assert session.hunks == []
        assert session.current_hunk_index == -1
        assert not session.is_active

    def test_operations_after_close_fail(self, session):
        hunk_id = session.hunks[0].id
        session.close()
        with pytest.raises(SessionNotActive):
            session.accept(hunk_id)
        with pytest.raises(SessionNotActive):
            session.navigate("next")
        with pytest.raises(SessionNotActive):
            session.accept_all()
        with pytest.raises(SessionNotActive):
            session.status_summary()


class TestPlainStructure:
    def test_to_dict_shape(self, session):
        data = session.to_dict()
        assert set(data) >= {
            "fileId", "originalContent", "modifiedContent", "hunks",
            "currentHunkIndex", "isActive", "summary",
        }
        assert data["fileId"] == "doc-1"
        assert data["hunks"][0]["type"] == "modify"

    def test_roundtrip_preserves_state(self, session):
        session.navigate("next")
        session.accept(session.hunks[0].id)
        restored = DiffSession.from_dict(session.to_dict())
        assert restored.to_dict() == session.to_dict()

    def test_restored_allocator_continues(self, session):
        restored = DiffSession.from_dict(session.to_dict())
        assert restored._allocator.next_id() == "h4"

    def test_corrupt_hunks_rejected(self, session):
        data = session.to_dict()
        data["hunks"][0]["startLine"] = 5
        with pytest.raises(InvalidRange):
            DiffSession.from_dict(data)

    def test_duplicate_ids_rejected(self, session):
        data = session.to_dict()
        data["hunks"][1]["id"] = data["hunks"][0]["id"]
        with pytest.raises(InvalidRange):
            DiffSession.from_dict(data)

    def test_focus_on_resolved_hunk_is_dropped(self, session):
        session.accept(session.hunks[0].id)
        data = session.to_dict()
        data["currentHunkIndex"] = 0
        assert DiffSession.from_dict(data).current_hunk_index == -1
