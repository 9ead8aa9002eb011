"""Watch a tree and analyze saved files incrementally."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import WhyCommentError
from ..logging_config import get_logger, setup_logging
from ..orchestrator import AnalysisOrchestrator, AnalysisResult
from ..scanning.languages import EXTENSION_LANGUAGES
from . import app
from ._common import console, notify, print_error, resolve_config, suggestion_table

logger = get_logger(__name__)

_IGNORED_DIRS = frozenset(
    {
        "node_modules",
        "__pycache__",
        "venv",
        "env",
        "dist",
        "build",
        "target",
        "vendor",
    }
)


class _SourceFilter:
    """watchfiles filter: only source files with a known language, no noise directories."""

    def __call__(self, change, path: str) -> bool:
        p = Path(path)
        for part in p.parts:
            if (part.startswith(".") and part not in (".", "..")) or part in _IGNORED_DIRS:
                return False
        return p.suffix.lower() in EXTENSION_LANGUAGES


def _read(path: str) -> str:
    return Path(path).read_text(encoding="utf-8", errors="replace")


def _report(result: AnalysisResult) -> None:
    if result.analyzed and result.suggestions:
        console.print(suggestion_table(f"{result.file_ref}", result.suggestions))
    else:
        logger.debug("%s: %s", result.file_ref, result.status.value)


async def watch_tree(
    orchestrator: AnalysisOrchestrator, root: Path, stop_event: Optional[asyncio.Event] = None
) -> None:
    """Debounce each saved file and analyze it against its baseline."""
    from watchfiles import Change, awatch

    async for changes in awatch(root, watch_filter=_SourceFilter(), stop_event=stop_event):
        for change, path in changes:
            if change == Change.deleted:
                orchestrator.scheduler.cancel(path)
                orchestrator.clear(path)
                orchestrator.baselines.forget(path)
                continue
            orchestrator.schedule(path, lambda path=path: _read(path), on_result=_report)


@app.command()
def watch(
    path: Path = typer.Argument(
        Path("."),
        help="File or directory to watch",
        exists=True,
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file (TOML)",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    heuristic: bool = typer.Option(
        False,
        "--heuristic",
        help="Use the offline heuristic analyzer even when an API key is set",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Analyze files as they are saved. The first pass of a file diffs
    against HEAD; later passes only surface what changed since then.
    """
    setup_logging("verbose" if verbose else "normal")

    try:
        cfg = resolve_config(config, heuristic=heuristic, verbose=verbose)
        setup_logging(cfg.verbosity)
    except WhyCommentError as e:
        print_error(e)
        raise typer.Exit(1)

    if not cfg.auto_analyze:
        console.print("[yellow]auto_analyze is disabled in the configuration; nothing to do.[/yellow]")
        raise typer.Exit(0)

    orchestrator = AnalysisOrchestrator(cfg, notify=notify)
    console.print(
        f"[bold cyan]Watching {path}[/bold cyan] (debounce {cfg.debounce_ms} ms, Ctrl+C to stop)"
    )

    async def run() -> None:
        try:
            await watch_tree(orchestrator, path)
        finally:
            await orchestrator.aclose()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        console.print("\n[yellow]Stopped[/yellow]")
