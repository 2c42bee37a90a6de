from __future__ import annotations

from pathlib import Path

import typer

from relutil import __version__
from relutil.cli.commands.release_cmd import generate, next_version, prepare, publish


app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release automation for Cargo workspaces.",
)


# Commands
app.command()(prepare)
app.command()(generate)
app.command("next-version")(next_version)
app.command()(publish)


@app.callback(invoke_without_command=True)
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    workspace_dir: Path = typer.Option(
        Path("."),
        "--dir",
        help="The directory to run the command in.",
    ),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)

    ctx.obj = {"dir": workspace_dir}


def main() -> None:
    app()
