from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer

from tagpub.core.config import CONFIG_FILE_NAME, Config, load_config, load_config_or_default
from tagpub.core.errors import ErrorCode
from tagpub.core.result import Err
from tagpub.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    workspace_root: Path
    config: Config
    console: ConsoleProtocol


def exit_with(err: str, *, code: ErrorCode) -> NoReturn:
    typer.echo(f"error: {err}", err=True)
    raise typer.Exit(code=int(code))


def build_context(*, workspace: Path | None = None, config_path: Path | None = None) -> CLIContext:
    try:
        root = (workspace or Path.cwd()).expanduser().resolve()
    except OSError as e:
        exit_with(f"invalid --workspace: {e}", code=ErrorCode.USER_ERROR)

    if not root.is_dir():
        exit_with(f"workspace is not a directory: {root}", code=ErrorCode.USER_ERROR)

    # An explicit --config must exist; the default file is optional.
    if config_path is not None:
        result = load_config(config_path.expanduser())
    else:
        result = load_config_or_default(root / CONFIG_FILE_NAME)
    if isinstance(result, Err):
        exit_with(result.error.pretty(), code=ErrorCode.CONFIG_ERROR)

    return CLIContext(workspace_root=root, config=result.value, console=RichConsole())
