"""Print the declaration boundaries detected in a file."""

import json
from pathlib import Path

import typer
from rich.table import Table

from ..scanning import detect_boundaries, detect_language, resolve_family
from . import app
from ._common import console


@app.command()
def outline(
    file: Path = typer.Argument(
        ...,
        help="Source file to outline",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    language: str = typer.Option(
        "auto",
        "--language",
        "-l",
        help="Language id (auto, python, go, typescript, java, ...)",
    ),
    fmt_json: bool = typer.Option(False, "--json", help="Print spans as JSON"),
):
    """
    Show the functions, methods, classes and interfaces found by the heuristic scanner.
    """
    lang = detect_language(file) if language == "auto" else language
    if resolve_family(lang) is None:
        console.print(f"[yellow]No boundary support for language '{lang}'[/yellow]")
        raise typer.Exit(1)

    lines = file.read_text(encoding="utf-8", errors="replace").splitlines()
    spans = detect_boundaries(lines, lang)

    if fmt_json:
        print(
            json.dumps(
                [
                    {"name": s.name, "kind": s.kind.value, "start": s.start_line, "end": s.end_line}
                    for s in spans
                ],
                indent=2,
            )
        )
        return

    table = Table(title=f"{file} ({lang})", title_justify="left")
    table.add_column("Kind", style="magenta")
    table.add_column("Name", style="bold")
    table.add_column("Lines", justify="right", style="cyan")
    for span in spans:
        table.add_row(span.kind.value, span.name, f"{span.start_line + 1}-{span.end_line + 1}")
    console.print(table)
