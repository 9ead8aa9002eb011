"""CLI entry point: registers all subcommands."""

import typer

from .. import __version__
from ._common import console

app = typer.Typer(
    name="whycomment",
    help="WhyComment - suggests 'why' comments for the lines you changed",
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"whycomment {__version__}")
        raise typer.Exit()


@app.callback()
def _root(
    version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """WhyComment command line."""


# Import subcommands to register them
from .analyze import analyze as _analyze  # noqa: F401, E402
from .outline import outline as _outline  # noqa: F401, E402
from .watch import watch as _watch  # noqa: F401, E402


def main() -> None:
    app()
