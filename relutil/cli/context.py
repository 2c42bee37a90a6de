from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from relutil.core.config import ReleaseConfig, load_config_or_default
from relutil.core.errors import ErrorCode
from relutil.core.result import Err
from relutil.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace_root: Path
    config: ReleaseConfig
    console: ConsoleProtocol


def build_context(workspace_root: Path) -> CLIContext:
    try:
        root = workspace_root.expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --dir: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        typer.echo(f"error: --dir '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    config_result = load_config_or_default(root)
    if isinstance(config_result, Err):
        typer.echo(f"error: {config_result.error.message}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    return CLIContext(workspace_root=root, config=config_result.value, console=RichConsole())
