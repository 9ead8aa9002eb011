"""Exception hierarchy for WhyComment."""

from .analysis import (
    AnalyzerError,
    DiffComputationError,
    NotARepositoryError,
    ReferenceUnavailableError,
)
from .base import WhyCommentError
from .config import ConfigurationError, InvalidConfigError

__all__ = [
    "WhyCommentError",
    "ReferenceUnavailableError",
    "NotARepositoryError",
    "DiffComputationError",
    "AnalyzerError",
    "ConfigurationError",
    "InvalidConfigError",
]
