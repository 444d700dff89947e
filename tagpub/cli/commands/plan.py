"""Plan command - show publish order and consistency waits."""

from __future__ import annotations

from pathlib import Path

import typer

from tagpub.cli.context import build_context, exit_with
from tagpub.core.config import ConsistencyConfig
from tagpub.core.errors import ErrorCode
from tagpub.core.result import Err
from tagpub.output.console import Style
from tagpub.release.planner import publish_order


def _describe_wait(consistency: ConsistencyConfig) -> str:
    if consistency.mode == "poll":
        return (
            f"wait {consistency.delay_seconds:g}s, then poll the index "
            f"(up to {consistency.max_wait_seconds:g}s total)"
        )
    return f"wait {consistency.delay_seconds:g}s"


def plan(
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to release.toml"),
    workspace: Path | None = typer.Option(None, "--workspace", help="Workspace root (default: cwd)"),
) -> None:
    """Print the resolved publish order. Needs no credential."""
    ctx = build_context(workspace=workspace, config_path=config)
    console = ctx.console

    order = publish_order(ctx.config.packages)
    if isinstance(order, Err):
        exit_with(order.error.pretty(), code=ErrorCode.CONFIG_ERROR)

    packages = order.value
    console.header("Publish order")
    for index, pkg in enumerate(packages):
        where = f"--manifest-path {pkg.manifest_path}" if pkg.manifest_path else f"-p {pkg.name}"
        features = " --all-features" if pkg.all_features else ""
        console.print(f"{index + 1}. {pkg.name}  ({where}{features})")
        if any(pkg.name in later.depends_on for later in packages[index + 1 :]):
            console.print(f"   {_describe_wait(ctx.config.consistency)}", Style.DIM)

    console.print(f"tag pattern: {ctx.config.tag_pattern}", Style.DIM)
    console.print(f"token env: {ctx.config.token_env}", Style.DIM)
