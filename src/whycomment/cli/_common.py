"""Shared CLI helpers."""

from pathlib import Path
from typing import Iterable, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..config import WhyConfig, load_config
from ..exceptions import WhyCommentError
from ..suggestions import Suggestion

console = Console()

_LEVEL_STYLES = {"warning": "yellow", "error": "red", "info": "cyan"}


def resolve_config(
    config: Optional[Path] = None,
    context_lines: Optional[int] = None,
    heuristic: bool = False,
    verbose: bool = False,
    quiet: bool = False,
) -> WhyConfig:
    """Build configuration from CLI options."""
    overrides: dict = {"context_lines": context_lines}
    if heuristic:
        overrides["prefer_llm"] = False
    if verbose:
        overrides["verbose"] = True
    if quiet:
        overrides["quiet"] = True
    return load_config(config_file=config, **overrides)


def notify(level: str, message: str) -> None:
    """Print an orchestrator notification."""
    style = _LEVEL_STYLES.get(level, "white")
    console.print(f"[{style}]{escape(message)}[/{style}]", highlight=False)


def print_error(error: WhyCommentError) -> None:
    console.print(f"[red]Error:[/red] {escape(str(error))}", highlight=False)
    if error.hint:
        console.print(f"[dim]{escape(error.hint)}[/dim]")


def suggestion_table(title: str, suggestions: Iterable[Suggestion]) -> Table:
    table = Table(title=title, show_lines=False, title_justify="left")
    table.add_column("Line", justify="right", style="cyan", no_wrap=True)
    table.add_column("Scope", style="magenta")
    table.add_column("Why?", style="bold")
    table.add_column("Suggested comment")
    table.add_column("Source", style="dim")
    for s in sorted(suggestions, key=lambda s: s.line):
        # Displayed 1-based like an editor gutter.
        table.add_row(str(s.line + 1), s.scope or "", s.message, s.suggested_comment, s.source)
    return table
