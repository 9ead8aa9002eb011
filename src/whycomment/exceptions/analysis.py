"""Analysis-pass exceptions: reference state, diff computation, analyzer calls."""

from typing import Dict, Optional

from .base import WhyCommentError


class ReferenceUnavailableError(WhyCommentError):
    """Raised when there is no reference state to diff against.

    Covers a missing repository, a missing git binary, or a file outside
    any workspace. The pass is aborted and the baseline is left alone.
    """

    def __init__(self, file_ref: str, reason: str):
        super().__init__(
            f"Reference state unavailable for {file_ref}",
            details={"file": file_ref, "reason": reason},
        )
        self.file_ref = file_ref
        self.reason = reason


class NotARepositoryError(ReferenceUnavailableError):
    """Raised when the file does not live inside a git repository."""

    hint = "Run inside a git work tree, or check that git is installed."

    def __init__(self, file_ref: str, reason: str = "not a git repository"):
        super().__init__(file_ref, reason)


class DiffComputationError(WhyCommentError):
    """Raised when a diff could not be produced for an available reference."""

    def __init__(self, file_ref: str, reason: str):
        super().__init__(
            f"Failed to compute diff for {file_ref}",
            details={"file": file_ref, "reason": reason},
        )
        self.file_ref = file_ref
        self.reason = reason


class AnalyzerError(WhyCommentError):
    """Raised when the external analyzer call fails (network, auth, rate limit)."""

    hint = "Check api_key and api_provider, or pass --heuristic to analyze offline."

    def __init__(self, provider: str, reason: str, status_code: Optional[int] = None):
        details: Dict[str, str] = {"provider": provider, "reason": reason}
        if status_code is not None:
            details["status"] = str(status_code)

        super().__init__(f"Analyzer '{provider}' failed", details=details)
        self.provider = provider
        self.reason = reason
        self.status_code = status_code
