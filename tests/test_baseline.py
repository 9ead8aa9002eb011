"""Tests for incremental baseline diffing."""

import asyncio

import pytest

from whycomment.baseline import BaselineTracker
from whycomment.diff import annotate_added_lines
from whycomment.exceptions import NotARepositoryError


class RecordingReference:
    """Reference-diff collaborator returning a canned diff."""

    def __init__(self, diff_text="@@ -0,0 +1,1 @@\n+first\n"):
        self.diff_text = diff_text
        self.calls = []

    def __call__(self, file_ref, context_lines):
        self.calls.append((file_ref, context_lines))
        return self.diff_text


class TestGetDiffForAnalysis:
    """Test the baseline-or-reference decision."""

    def test_first_run_uses_reference(self):
        tracker = BaselineTracker()
        reference = RecordingReference()

        diff_text = tracker.get_diff_for_analysis("a.py", "first\n", reference, 2)

        assert diff_text == reference.diff_text
        assert reference.calls == [("a.py", 2)]
        assert tracker.snapshot("a.py") == "first\n"

    def test_second_run_diffs_against_snapshot(self):
        """Only lines changed since the last analysis are surfaced."""
        tracker = BaselineTracker()
        reference = RecordingReference()
        tracker.get_diff_for_analysis("a.py", "a\nb\n", reference, 1)

        diff_text = tracker.get_diff_for_analysis("a.py", "a\nb\nc\n", reference, 1)

        assert len(reference.calls) == 1
        assert annotate_added_lines(diff_text) == "[3] +c"

    def test_unchanged_text_gives_empty_diff(self):
        tracker = BaselineTracker()
        tracker.commit("a.py", "same\n")
        assert tracker.get_diff_for_analysis("a.py", "same\n", RecordingReference(), 1) == ""

    def test_advance_false_keeps_baseline(self):
        tracker = BaselineTracker()
        tracker.get_diff_for_analysis("a.py", "x\n", RecordingReference(), 1, advance=False)
        assert not tracker.has_baseline("a.py")

        tracker.commit("a.py", "x\n")
        tracker.get_diff_for_analysis("a.py", "x\ny\n", RecordingReference(), 1, advance=False)
        assert tracker.snapshot("a.py") == "x\n"

    def test_reference_failure_propagates_without_advancing(self):
        tracker = BaselineTracker()

        def failing(file_ref, context_lines):
            raise NotARepositoryError(file_ref)

        with pytest.raises(NotARepositoryError):
            tracker.get_diff_for_analysis("a.py", "x\n", failing, 1)
        assert not tracker.has_baseline("a.py")

    def test_files_are_independent(self):
        tracker = BaselineTracker()
        reference = RecordingReference()
        tracker.get_diff_for_analysis("a.py", "a\n", reference, 1)
        tracker.get_diff_for_analysis("b.py", "b\n", reference, 1)
        assert [call[0] for call in reference.calls] == ["a.py", "b.py"]


class TestAsyncDiff:
    """Test the event-loop variant."""

    def test_reference_runs_off_loop(self):
        tracker = BaselineTracker()
        reference = RecordingReference()

        diff_text = asyncio.run(tracker.aget_diff_for_analysis("a.py", "first\n", reference, 3))

        assert diff_text == reference.diff_text
        assert reference.calls == [("a.py", 3)]
        assert tracker.has_baseline("a.py")

    def test_snapshot_branch(self):
        tracker = BaselineTracker()
        tracker.commit("a.py", "a\n")
        diff_text = asyncio.run(
            tracker.aget_diff_for_analysis("a.py", "a\nb\n", RecordingReference(), 1, advance=False)
        )
        assert annotate_added_lines(diff_text) == "[2] +b"
        assert tracker.snapshot("a.py") == "a\n"


class TestLifecycle:
    def test_forget_and_clear(self):
        tracker = BaselineTracker()
        tracker.commit("a.py", "a")
        tracker.commit("b.py", "b")

        tracker.forget("a.py")
        assert not tracker.has_baseline("a.py")
        assert tracker.has_baseline("b.py")

        tracker.clear()
        assert not tracker.has_baseline("b.py")


class TestPassGenerations:
    """Overlapping passes must never move a baseline backwards."""

    def test_older_pass_cannot_overwrite_newer(self):
        tracker = BaselineTracker()
        older = tracker.begin("a.py")
        newer = tracker.begin("a.py")

        assert tracker.commit("a.py", "v2", newer)
        assert not tracker.commit("a.py", "v1", older)
        assert tracker.snapshot("a.py") == "v2"
        assert tracker.superseded("a.py", older)
        assert not tracker.superseded("a.py", newer)

    def test_in_order_passes_both_commit(self):
        tracker = BaselineTracker()
        first = tracker.begin("a.py")
        assert tracker.commit("a.py", "v1", first)
        second = tracker.begin("a.py")
        assert tracker.commit("a.py", "v2", second)
        assert tracker.snapshot("a.py") == "v2"

    def test_generations_are_per_file(self):
        tracker = BaselineTracker()
        a = tracker.begin("a.py")
        tracker.commit("b.py", "b", tracker.begin("b.py"))
        tracker.commit("b.py", "b2", tracker.begin("b.py"))

        assert tracker.commit("a.py", "a", a)

    def test_forget_resets_staleness(self):
        tracker = BaselineTracker()
        older = tracker.begin("a.py")
        tracker.commit("a.py", "v2", tracker.begin("a.py"))

        tracker.forget("a.py")

        assert not tracker.superseded("a.py", older)
        assert tracker.commit("a.py", "v1", older)
