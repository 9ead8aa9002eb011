"""Tests for live-edit line shifting."""

import pytest

from whycomment.suggestions import DocumentChange, LiveEditTracker

FILE = "src/app.py"


@pytest.fixture
def tracked(store, make_suggestion):
    """Store with active suggestions on lines 2, 5 and 9."""
    suggestions = [make_suggestion(line=n, comment=f"c{n}") for n in (2, 5, 9)]
    store.merge(FILE, suggestions)
    return LiveEditTracker(store), store


def _lines(store):
    return [s.line for s in store.get_for_file(FILE)]


class TestInsertions:
    @pytest.mark.parametrize("k", [1, 3])
    def test_insert_shifts_only_lines_after(self, tracked, k):
        """Inserting k lines at L moves lines > L by k and leaves lines < L alone."""
        tracker, store = tracked
        tracker.on_change(FILE, 4, 4, k)
        assert _lines(store) == [2, 5 + k, 9 + k]

    def test_insert_on_suggestion_line_snaps_below_insertion(self, tracked):
        tracker, store = tracked
        tracker.on_change(FILE, 5, 5, 2)
        assert _lines(store) == [2, 7, 11]


class TestDeletions:
    def test_delete_range_shifts_following(self, tracked):
        tracker, store = tracked
        # Lines 3..6 replaced by nothing: 3 line breaks removed.
        tracker.on_change(FILE, 3, 6, 0)
        assert _lines(store) == [2, 3, 6]

    def test_snap_never_negative(self, store, make_suggestion):
        store.merge(FILE, [make_suggestion(line=0)])
        LiveEditTracker(store).on_change(FILE, 0, 3, 0)
        assert _lines(store) == [0]


class TestInactiveAndOtherFiles:
    def test_applied_and_ignored_do_not_move(self, tracked):
        tracker, store = tracked
        items = store.get_for_file(FILE)
        store.mark_applied(FILE, items[1].id)
        store.mark_ignored(FILE, items[2].id)
        tracker.on_change(FILE, 0, 0, 4)
        assert _lines(store) == [6, 5, 9]

    def test_other_files_untouched(self, tracked):
        tracker, store = tracked
        assert tracker.on_change("other.py", 0, 0, 10) == 0
        assert _lines(store) == [2, 5, 9]


class TestDocumentChanges:
    def test_inserted_line_count(self):
        assert DocumentChange(3, 3, "a\nb\n").inserted_line_count == 2
        assert DocumentChange(3, 3, "typed").inserted_line_count == 0

    def test_apply_changes_in_order(self, tracked):
        tracker, store = tracked
        moved = tracker.apply_changes(
            FILE,
            [DocumentChange(0, 0, "x\n"), DocumentChange(0, 0, "y\n")],
        )
        assert _lines(store) == [4, 7, 11]
        assert moved == 6
