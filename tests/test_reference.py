"""Tests for the git-backed reference diff."""

import subprocess

import pytest

from whycomment.diff import added_lines, parse_unified_diff
from whycomment.exceptions import DiffComputationError, NotARepositoryError, ReferenceUnavailableError
from whycomment.reference import GitReference, synthesize_new_file_diff


class TestSynthesizeNewFileDiff:
    def test_every_line_added(self):
        diff = synthesize_new_file_diff("pkg/new.py", "a = 1\nb = 2\n")
        assert diff.splitlines() == [
            "diff --git a/pkg/new.py b/pkg/new.py",
            "new file mode 100644",
            "--- /dev/null",
            "+++ b/pkg/new.py",
            "@@ -0,0 +1,2 @@",
            "+a = 1",
            "+b = 2",
        ]

    def test_parses_back_to_added_lines(self):
        added = added_lines(parse_unified_diff(synthesize_new_file_diff("x.py", "a\nb\nc")))
        assert [(a.index, a.text) for a in added] == [(0, "a"), (1, "b"), (2, "c")]

    def test_empty_file(self):
        assert synthesize_new_file_diff("x.py", "") == ""


class TestGitReference:
    def test_unchanged_file_has_empty_diff(self, git_repo):
        assert GitReference()(str(git_repo / "app.py"), 1) == ""

    def test_modified_file(self, git_repo):
        path = git_repo / "app.py"
        path.write_text("import time\n\n\ndef poll():\n    time.sleep(5)\n    return fetch()\n")

        diff = GitReference().get_reference_diff(str(path), 1)

        added = added_lines(parse_unified_diff(diff))
        assert [(a.index, a.text) for a in added] == [(4, "    time.sleep(5)")]
        assert "--- a/app.py" in diff

    def test_context_lines_respected(self, git_repo):
        path = git_repo / "app.py"
        path.write_text("import time\n\n\ndef poll():\n    time.sleep(5)\n    return fetch()\n")
        narrow = GitReference().get_reference_diff(str(path), 0)
        assert " def poll():" not in narrow

    def test_untracked_file_is_all_added(self, git_repo):
        path = git_repo / "pkg" / "new.py"
        path.parent.mkdir()
        path.write_text("x = 42\n")

        diff = GitReference().get_reference_diff(str(path), 1)

        assert diff.startswith("diff --git a/pkg/new.py b/pkg/new.py")
        assert "+x = 42" in diff

    def test_missing_file_in_repo(self, git_repo):
        with pytest.raises(DiffComputationError):
            GitReference().get_reference_diff(str(git_repo / "gone.py"), 1)

    def test_outside_repository(self, git_repo, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        (plain / "a.py").write_text("x = 1\n")
        with pytest.raises(NotARepositoryError) as exc_info:
            GitReference().get_reference_diff(str(plain / "a.py"), 1)
        assert isinstance(exc_info.value, ReferenceUnavailableError)

    def test_repo_root(self, git_repo):
        assert GitReference().repo_root(git_repo / "app.py") == git_repo.resolve()


class TestGitFailures:
    """Failures of individual git calls, simulated without a repository."""

    @pytest.fixture
    def reference(self, monkeypatch, tmp_path):
        ref = GitReference(timeout=0.5)
        monkeypatch.setattr(ref, "repo_root", lambda path: tmp_path.resolve())
        (tmp_path / "a.py").write_text("x = 1\n")
        return ref

    def test_tracked_check_timeout_is_a_diff_failure(self, reference, monkeypatch, tmp_path):
        def hang(args, **kwargs):
            raise subprocess.TimeoutExpired(args, kwargs.get("timeout"))

        monkeypatch.setattr(subprocess, "run", hang)

        with pytest.raises(DiffComputationError) as exc_info:
            reference.get_reference_diff(str(tmp_path / "a.py"), 1)
        assert exc_info.value.reason == "git ls-files timed out after 0.5s"

    def test_missing_git_executable(self, reference, monkeypatch, tmp_path):
        def missing(args, **kwargs):
            raise FileNotFoundError(args[0])

        monkeypatch.setattr(subprocess, "run", missing)

        with pytest.raises(NotARepositoryError):
            reference.get_reference_diff(str(tmp_path / "a.py"), 1)
