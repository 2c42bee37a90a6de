"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from relutil.core.result import Err, Result
from relutil.output.errors import print_release_error, release_error_exit_code
from relutil.services.release.errors import ReleaseError

if TYPE_CHECKING:
    from relutil.cli.context import CLIContext


T = TypeVar("T")


def unwrap_or_exit(result: Result[T, ReleaseError], ctx: CLIContext) -> T:
    """Return the value of an Ok result, or print the error and exit.

    This helper replaces the common pattern:
        match result:
            case Err(e):
                print_release_error(e, ctx.console)
                raise typer.Exit(code=release_error_exit_code(e))
            case Ok(value):
                ...
    """
    if isinstance(result, Err):
        exit_with_error(result.error, ctx)
    return result.value


def exit_with_error(error: ReleaseError, ctx: CLIContext) -> NoReturn:
    print_release_error(error, ctx.console)
    raise typer.Exit(code=release_error_exit_code(error))
