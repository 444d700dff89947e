"""Publish command - run the ordered release for a tag."""

from __future__ import annotations

import os
from dataclasses import replace
from pathlib import Path
from time import sleep

import typer

from tagpub.cli.context import build_context, exit_with
from tagpub.core.config import ConsistencyConfig
from tagpub.core.errors import ErrorCode
from tagpub.core.result import Err
from tagpub.output.console import ConsoleProtocol, Style
from tagpub.registry.http import RealHttpClient
from tagpub.registry.index import RegistryIndex
from tagpub.registry.publisher import CargoPublisher
from tagpub.release.errors import PlanError
from tagpub.release.model import PipelineResult
from tagpub.release.orchestrator import ReleaseOrchestrator
from tagpub.release.planner import credential_from_env, plan_release
from tagpub.release.waiter import waiter_from_config


def plan_error_code(error: PlanError) -> ErrorCode:
    if error.kind == "invalid_tag":
        return ErrorCode.USER_ERROR
    return ErrorCode.CONFIG_ERROR


def _report(result: PipelineResult, console: ConsoleProtocol) -> None:
    console.header(f"Release {result.tag}")
    for step in result.steps:
        style = {
            "succeeded": Style.SUCCESS,
            "failed": Style.ERROR,
            "not-run": Style.DIM,
        }[step.outcome]
        console.print(f"{step.step_id}: {step.outcome}", style)

    failed = result.failed_step
    if failed is None:
        console.success(f"all {len(result.steps)} packages published")
        return

    console.error(f"release failed at {failed.step_id}")
    published = [s.step_id for s in result.steps if s.outcome == "succeeded"]
    if published:
        console.warning(f"already published (not rolled back): {', '.join(published)}")
    console.print(
        "hint: re-running publishes every step again; already published versions will conflict",
        Style.DIM,
    )


def publish(
    tag: str = typer.Option(..., "--tag", "-t", help="Version tag that triggered the release"),
    config: Path | None = typer.Option(None, "--config", "-c", help="Path to release.toml"),
    workspace: Path | None = typer.Option(None, "--workspace", help="Workspace root (default: cwd)"),
    token_env: str | None = typer.Option(
        None, "--token-env", help="Environment variable holding the registry token"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Pass --dry-run to cargo publish and skip the consistency waits"
    ),
    allow_dirty: bool = typer.Option(False, "--allow-dirty", help="Pass --allow-dirty to cargo publish"),
) -> None:
    """Publish every package in dependency order. Fails fast."""
    ctx = build_context(workspace=workspace, config_path=config)
    console = ctx.console
    cfg = ctx.config

    credential = credential_from_env(os.environ, token_env or cfg.token_env)
    if isinstance(credential, Err):
        exit_with(credential.error.pretty(), code=plan_error_code(credential.error))
    console.add_secret(credential.value.reveal())

    if dry_run:
        # Nothing reaches the index, so there is nothing to wait for.
        cfg = replace(cfg, consistency=ConsistencyConfig(delay_seconds=0.0, max_wait_seconds=0.0))
        console.info("dry run: cargo publish --dry-run, the registry is not modified, no waits")

    job = plan_release(
        cfg,
        tag=tag,
        credential=credential.value,
        workspace_root=ctx.workspace_root,
    )
    if isinstance(job, Err):
        exit_with(job.error.pretty(), code=plan_error_code(job.error))

    orchestrator = ReleaseOrchestrator(
        publisher=CargoPublisher(
            workspace_root=ctx.workspace_root,
            registry=cfg.registry.name,
            dry_run=dry_run,
            allow_dirty=allow_dirty,
        ),
        waiter=waiter_from_config(
            cfg.consistency,
            console=console,
            index=RegistryIndex(api_url=cfg.registry.api_url, http=RealHttpClient()),
            sleep=sleep,
        ),
        console=console,
    )
    result = orchestrator.run(job.value)
    _report(result, console)

    if not result.succeeded:
        raise typer.Exit(code=int(ErrorCode.PUBLISH_ERROR))
