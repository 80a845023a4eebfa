from __future__ import annotations

import typer

from relwatch import __version__
from relwatch.cli.commands.remote_tags_cmd import remote_tags
from relwatch.cli.commands.report_cmd import report


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(report)
app.command("remote-tags")(remote_tags)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(False, "--version", help="Show version and exit.", is_eager=True),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)


def main() -> None:
    app()
