"""Shared test fixtures for WhyComment tests."""

import pytest

from whycomment.suggestions import Suggestion, SuggestionStore


@pytest.fixture
def make_suggestion():
    """Factory for suggestions with sensible defaults."""

    def _make(line=0, file_ref="src/app.py", message="Why?", comment="Because.", anchor=None, **kwargs):
        suggestion = Suggestion.create(file_ref, line, message, comment, anchor=anchor)
        for key, value in kwargs.items():
            setattr(suggestion, key, value)
        return suggestion

    return _make


@pytest.fixture
def store():
    return SuggestionStore()


@pytest.fixture
def isolated_config_env(tmp_path, monkeypatch):
    """Run with no user/project config files and no WHYCOMMENT_* variables."""
    import os

    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("WHYCOMMENT_"):
            monkeypatch.delenv(key)
    return tmp_path


def _git(cwd, *args):
    import subprocess

    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", *args],
        cwd=cwd,
        check=True,
        capture_output=True,
    )


@pytest.fixture
def git_repo(tmp_path, monkeypatch):
    """A repository with one committed file, ``app.py``."""
    import shutil

    if shutil.which("git") is None:
        pytest.skip("git not installed")
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path))
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init", "-q")
    (repo / "app.py").write_text("import time\n\n\ndef poll():\n    return fetch()\n")
    _git(repo, "add", "app.py")
    _git(repo, "commit", "-q", "-m", "initial")
    return repo
