"""Base exception for WhyComment."""

from typing import Dict, Optional


class WhyCommentError(Exception):
    """Base exception for all WhyComment errors.

    ``details`` carries machine-readable context; ``hint`` is a short
    remedy the CLI prints below the message.
    """

    hint: Optional[str] = None

    def __init__(self, message: str, details: Optional[Dict[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} ({', '.join(f'{k}={v}' for k, v in self.details.items())})"
