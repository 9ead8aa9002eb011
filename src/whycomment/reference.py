"""Git-backed reference state: diffs a file against HEAD via subprocess."""

import subprocess
from pathlib import Path
from typing import Optional

from .exceptions import DiffComputationError, NotARepositoryError
from .logging_config import get_logger

logger = get_logger(__name__)


def synthesize_new_file_diff(rel_path: str, text: str) -> str:
    """Unified diff adding every line of ``text`` to an empty file."""
    lines = text.splitlines()
    if not lines:
        return ""
    header = [
        f"diff --git a/{rel_path} b/{rel_path}",
        "new file mode 100644",
        "--- /dev/null",
        f"+++ b/{rel_path}",
        f"@@ -0,0 +1,{len(lines)} @@",
    ]
    return "\n".join(header + [f"+{line}" for line in lines]) + "\n"


class GitReference:
    """Reference-diff collaborator backed by the ``git`` executable."""

    def __init__(self, timeout: float = 10.0):
        self.timeout = timeout

    def __call__(self, file_ref: str, context_lines: int) -> str:
        return self.get_reference_diff(file_ref, context_lines)

    def get_reference_diff(self, file_ref: str, context_lines: int) -> str:
        """
        Diff ``file_ref`` against HEAD of its repository.

        Untracked files come back as a diff adding every line.

        Raises:
            NotARepositoryError: No repository contains the file, or git is missing
            DiffComputationError: git ran but the diff failed
        """
        path = Path(file_ref).resolve()
        root = self.repo_root(path)
        if root is None:
            raise NotARepositoryError(file_ref)
        rel = path.relative_to(root).as_posix()

        if not self._is_tracked(root, rel, file_ref):
            try:
                text = path.read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                raise DiffComputationError(file_ref, f"cannot read untracked file: {e}")
            logger.debug("%s is untracked, synthesizing new-file diff", rel)
            return synthesize_new_file_diff(rel, text)

        result = self._run(
            root,
            ["diff", f"--unified={context_lines}", "--no-color", "HEAD", "--", rel],
            file_ref,
        )
        if result.returncode != 0:
            raise DiffComputationError(file_ref, result.stderr.strip() or f"exit {result.returncode}")
        return result.stdout

    def repo_root(self, path: Path) -> Optional[Path]:
        """Top-level directory of the repository containing ``path``."""
        cwd = path if path.is_dir() else path.parent
        if not cwd.exists():
            return None
        try:
            result = subprocess.run(
                ["git", "-C", str(cwd), "rev-parse", "--show-toplevel"],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return None
        if result.returncode != 0:
            return None
        return Path(result.stdout.strip()).resolve()

    def _is_tracked(self, root: Path, rel: str, file_ref: str) -> bool:
        result = self._run(root, ["ls-files", "--error-unmatch", "--", rel], file_ref)
        return result.returncode == 0

    def _run(self, root: Path, args: list, file_ref: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                ["git", "-C", str(root), *args],
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError:
            raise NotARepositoryError(file_ref, "git executable not found")
        except subprocess.TimeoutExpired:
            raise DiffComputationError(file_ref, f"git {args[0]} timed out after {self.timeout}s")
