from __future__ import annotations

import typer

from bumpr import __version__
from bumpr.cli.commands.release_cmd import notes, pr, release


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Bump the version, tag it and open a release pull request on GitHub.",
)


# Commands
app.command()(release)
app.command()(pr)
app.command()(notes)


def _print_version(value: bool) -> None:
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit.",
        callback=_print_version,
        is_eager=True,
    ),
) -> None:
    del version


def main() -> None:
    app()
