"""One-shot analysis of a file against its git reference."""

import asyncio
import json
from pathlib import Path
from typing import Optional

import typer

from ..exceptions import WhyCommentError
from ..logging_config import get_logger, setup_logging
from ..orchestrator import AnalysisOrchestrator, AnalysisResult, PassStatus
from . import app
from ._common import console, notify, print_error, resolve_config, suggestion_table

logger = get_logger(__name__)

_STATUS_MESSAGES = {
    PassStatus.NO_CHANGES: "[green]No added lines to review.[/green]",
    PassStatus.EXCLUDED: "[dim]File matches an exclude pattern; skipped.[/dim]",
    PassStatus.DISABLED: "[dim]WhyComment is disabled in the configuration.[/dim]",
}


@app.command()
def analyze(
    file: Path = typer.Argument(
        ...,
        help="Source file to analyze",
        exists=True,
        file_okay=True,
        dir_okay=False,
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
    context_lines: Optional[int] = typer.Option(
        None,
        "--context-lines",
        "-U",
        help="Context lines in the diff",
        min=0,
    ),
    heuristic: bool = typer.Option(
        False,
        "--heuristic",
        help="Use the offline heuristic analyzer even when an API key is set",
    ),
    apply: bool = typer.Option(
        False,
        "--apply",
        help="Insert every suggested comment into the file",
    ),
    fmt_json: bool = typer.Option(
        False,
        "--json",
        help="Print suggestions as JSON",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
):
    """
    Suggest "why" comments for the lines FILE adds relative to HEAD.

    [bold cyan]Examples:[/bold cyan]

      whycomment analyze src/app.py

      whycomment analyze src/app.ts --heuristic --json
    """
    setup_logging("verbose" if verbose else "normal")

    try:
        cfg = resolve_config(config, context_lines=context_lines, heuristic=heuristic, verbose=verbose)
        setup_logging(cfg.verbosity)
        text = file.read_text(encoding="utf-8")
        file_ref = str(file)

        orchestrator = AnalysisOrchestrator(cfg, notify=notify)
        result = asyncio.run(_run_once(orchestrator, file_ref, text))

        if fmt_json:
            _output_json(result)
        elif result.status in _STATUS_MESSAGES:
            console.print(_STATUS_MESSAGES[result.status])
        elif result.analyzed:
            if result.suggestions:
                console.print(suggestion_table(f"Why-comment suggestions for {file}", result.suggestions))
            else:
                console.print("[green]Nothing needs a why comment.[/green]")

        if apply and result.suggestions:
            lines = text.splitlines()
            for suggestion in list(result.suggestions):
                updated = orchestrator.apply(file_ref, suggestion.id, lines)
                if updated is not None:
                    lines = updated
            trailing = "\n" if text.endswith("\n") else ""
            file.write_text("\n".join(lines) + trailing, encoding="utf-8")
            if not fmt_json:
                console.print(f"[green]Applied {len(result.suggestions)} comment(s) to {file}[/green]")

        if result.status in (
            PassStatus.REFERENCE_UNAVAILABLE,
            PassStatus.ANALYZER_FAILED,
            PassStatus.TOO_MANY_CHANGES,
        ):
            raise typer.Exit(1)

    except typer.Exit:
        raise
    except WhyCommentError as e:
        print_error(e)
        raise typer.Exit(1)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        raise typer.Exit(130)
    except Exception as e:
        logger.exception("Unexpected error during analysis")
        console.print(f"[red]Unexpected error:[/red] {e}")
        raise typer.Exit(1)


async def _run_once(orchestrator: AnalysisOrchestrator, file_ref: str, text: str) -> AnalysisResult:
    try:
        return await orchestrator.analyze(file_ref, text)
    finally:
        await orchestrator.aclose()


def _output_json(result: AnalysisResult):
    output = {
        "file": result.file_ref,
        "status": result.status.value,
        "dropped": result.dropped,
        "suggestions": [s.to_dict() for s in sorted(result.suggestions, key=lambda s: s.line)],
    }
    print(json.dumps(output, indent=2, ensure_ascii=False))
