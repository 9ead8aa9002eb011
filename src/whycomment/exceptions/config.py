"""Configuration exceptions."""

from typing import Any

from .base import WhyCommentError


class ConfigurationError(WhyCommentError):
    """Base class for configuration-related errors."""

    hint = "Check whycomment.toml, ~/.whycomment.toml and WHYCOMMENT_* variables."


class InvalidConfigError(ConfigurationError):
    """Raised when configuration values are invalid."""

    def __init__(self, key: str, value: Any, reason: str):
        super().__init__(
            f"Invalid configuration for {key}: {value}",
            details={"key": key, "value": str(value), "reason": reason},
        )
        self.key = key
        self.value = value
        self.reason = reason
