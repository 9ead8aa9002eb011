"""Configuration loading and management for WhyComment.

Configuration sources are merged in priority order:
    1. Defaults (defined in WhyConfig)
    2. Global config (~/.whycomment.toml)
    3. Project config (./whycomment.toml)
    4. Explicit config file
    5. Environment variables (WHYCOMMENT_* prefix)
    6. Overrides (passed as kwargs, typically CLI flags)

Example:
    >>> config = load_config(verbose=True, max_changed_lines=50)
    >>> config.verbosity
    'verbose'
    >>> config.max_changed_lines
    50
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Optional, get_type_hints

from .exceptions import ConfigurationError, InvalidConfigError

Verbosity = Literal["quiet", "normal", "verbose"]
Provider = Literal["openai", "claude"]
OutputLanguage = Literal["auto", "en", "ja"]

_PROVIDERS = ("openai", "claude")
_OUTPUT_LANGUAGES = ("auto", "en", "ja")
_VERBOSITIES = ("quiet", "normal", "verbose")


@dataclass(frozen=True)
class WhyConfig:
    """Settings for analysis passes, analyzers and the save watcher.

    Attributes:
        Analysis:
            enabled: Master switch; a disabled config skips every pass
            context_lines: Context lines requested in unified diffs
            exclude_patterns: Glob patterns of files never analyzed
            max_changed_lines: Passes with more added lines are skipped
            comment_lookback_lines: Lines above a target searched for an existing comment
            context_window_lines: Lines before/after a change in its context
            exclude_comments: Drop comment lines from change context

        Analyzer:
            api_key: Model-analyzer API key (empty = heuristic analyzer)
            api_provider: "openai" or "claude"
            prefer_llm: Use the model analyzer whenever a key is set
            openai_model / claude_model: Model names per provider
            output_language: "auto", "en" or "ja"
            daily_limit: Model-analyzer calls allowed per calendar day
            request_timeout_seconds: HTTP timeout for analyzer calls

        Watching:
            auto_analyze: Analyze on save
            debounce_ms: Per-file delay after the last save

        Output:
            verbosity: Logging verbosity level
    """

    enabled: bool = True
    context_lines: int = 1
    exclude_patterns: list[str] = field(
        default_factory=lambda: ["**/*.test.*", "**/*.spec.*"]
    )
    max_changed_lines: int = 200
    comment_lookback_lines: int = 3
    context_window_lines: int = 10
    exclude_comments: bool = False

    api_key: str = ""
    api_provider: Provider = "openai"
    prefer_llm: bool = True
    openai_model: str = "gpt-4o-mini"
    claude_model: str = "claude-3-5-sonnet-latest"
    output_language: OutputLanguage = "auto"
    daily_limit: int = 100
    request_timeout_seconds: float = 30.0

    auto_analyze: bool = True
    debounce_ms: int = 3000

    verbosity: Verbosity = "normal"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.context_lines < 0:
            raise InvalidConfigError("context_lines", self.context_lines, "must be non-negative")
        if self.max_changed_lines < 1:
            raise InvalidConfigError(
                "max_changed_lines", self.max_changed_lines, "must be at least 1"
            )
        if self.comment_lookback_lines < 0:
            raise InvalidConfigError(
                "comment_lookback_lines", self.comment_lookback_lines, "must be non-negative"
            )
        if self.context_window_lines < 0:
            raise InvalidConfigError(
                "context_window_lines", self.context_window_lines, "must be non-negative"
            )
        if self.daily_limit < 0:
            raise InvalidConfigError("daily_limit", self.daily_limit, "must be non-negative")
        if self.debounce_ms < 0:
            raise InvalidConfigError("debounce_ms", self.debounce_ms, "must be non-negative")
        if self.request_timeout_seconds <= 0:
            raise InvalidConfigError(
                "request_timeout_seconds", self.request_timeout_seconds, "must be positive"
            )
        if self.api_provider not in _PROVIDERS:
            raise InvalidConfigError(
                "api_provider", self.api_provider, f"expected one of {', '.join(_PROVIDERS)}"
            )
        if self.output_language not in _OUTPUT_LANGUAGES:
            raise InvalidConfigError(
                "output_language",
                self.output_language,
                f"expected one of {', '.join(_OUTPUT_LANGUAGES)}",
            )
        if self.verbosity not in _VERBOSITIES:
            raise InvalidConfigError(
                "verbosity", self.verbosity, f"expected one of {', '.join(_VERBOSITIES)}"
            )

    @property
    def debounce_seconds(self) -> float:
        """Get the save debounce in seconds."""
        return self.debounce_ms / 1000.0

    @property
    def model(self) -> str:
        """Model name for the configured provider."""
        return self.claude_model if self.api_provider == "claude" else self.openai_model

    @property
    def use_llm(self) -> bool:
        """Whether passes should go to the model analyzer."""
        return self.prefer_llm and bool(self.api_key)


def load_config(config_file: Optional[Path] = None, **overrides) -> WhyConfig:
    """Load configuration with auto-discovery and merging.

    Args:
        config_file: Optional explicit config file path
        **overrides: Direct overrides (typically from CLI flags)

    Returns:
        Validated WhyConfig instance

    Raises:
        ConfigurationError: If a config file is invalid or missing
        InvalidConfigError: If a merged value fails validation
    """
    merged: dict = {}

    global_config = Path.home() / ".whycomment.toml"
    if global_config.exists():
        try:
            merged.update(_load_toml_file(global_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid global config '{global_config}': {e}")

    project_config = Path.cwd() / "whycomment.toml"
    if project_config.exists():
        try:
            merged.update(_load_toml_file(project_config))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid project config '{project_config}': {e}")

    if config_file is not None:
        if not config_file.exists():
            raise ConfigurationError(f"Config file not found: {config_file}")
        try:
            merged.update(_load_toml_file(config_file))
        except ConfigurationError:
            raise
        except Exception as e:
            raise ConfigurationError(f"Invalid config file '{config_file}': {e}")

    merged.update(_load_env_vars())

    if "verbose" in overrides:
        if overrides["verbose"]:
            overrides["verbosity"] = "verbose"
        del overrides["verbose"]
    if "quiet" in overrides:
        if overrides["quiet"]:
            overrides["verbosity"] = "quiet"
        del overrides["quiet"]

    merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return WhyConfig(**merged)
    except TypeError as e:
        raise ConfigurationError(f"Invalid configuration: {e}")


def _load_env_vars() -> dict[str, Any]:
    """Load configuration from WHYCOMMENT_* environment variables.

    Every scalar WhyConfig field has a matching variable, e.g.
    WHYCOMMENT_API_KEY, WHYCOMMENT_DEBOUNCE_MS, WHYCOMMENT_PREFER_LLM.
    List fields (exclude_patterns) are not read from the environment.
    """
    type_hints = get_type_hints(WhyConfig)

    result: dict[str, Any] = {}

    for field_name in WhyConfig.__dataclass_fields__:
        env_key = f"WHYCOMMENT_{field_name.upper()}"
        env_value = os.environ.get(env_key)

        if env_value is None:
            continue

        type_hint = type_hints.get(field_name)
        if type_hint is None:
            continue

        try:
            parsed = _parse_env_value(env_value, type_hint)
        except ValueError as e:
            raise ConfigurationError(f"Invalid {env_key}: {e}")
        if parsed is not None:
            result[field_name] = parsed

    return result


def _parse_env_value(value: str, type_hint: Any) -> Any:
    """Parse an environment variable string to the field's type.

    Returns None for types that can't be expressed as a single string.

    Raises:
        ValueError: If value can't be parsed to the expected type
    """
    origin = getattr(type_hint, "__origin__", None)

    if origin is list or type_hint is list:
        return None

    if type_hint is bool:
        lower = value.lower()
        if lower in ("true", "1", "yes", "on"):
            return True
        elif lower in ("false", "0", "no", "off"):
            return False
        else:
            raise ValueError(f"expected true/false, got '{value}'")

    if type_hint is int:
        return int(value)

    if type_hint is float:
        return float(value)

    if type_hint is str or origin is Literal:
        return value

    return None


def _load_toml_file(path: Path) -> dict:
    """Load TOML file and return parsed dict.

    Raises:
        ConfigurationError: If no TOML parser is available
    """
    try:
        import tomllib
    except ModuleNotFoundError:
        try:
            import tomli as tomllib  # type: ignore
        except ImportError:
            raise ConfigurationError(
                "TOML support requires Python 3.11+ or 'tomli' package. "
                "Install with: pip install tomli"
            )

    with open(path, "rb") as f:
        return tomllib.load(f)
