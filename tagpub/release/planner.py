"""Build a release job from configuration and a tag.

Publish order is derived from ``depends_on`` declarations, not from the
order packages appear in release.toml. Packages with no ordering
constraint between them keep their declaration order.
"""

from __future__ import annotations

import fnmatch
from collections.abc import Mapping
from pathlib import Path

from tagpub.core.config import Config, PackageConfig
from tagpub.core.result import Err, Ok, Result
from tagpub.registry.manifest import read_manifest_version, version_from_tag
from tagpub.registry.publisher import Credential, PackageRef
from tagpub.release.errors import PlanError
from tagpub.release.model import PublishStep, ReleaseJob


def tag_qualifies(tag: str, pattern: str) -> bool:
    return bool(tag.strip()) and fnmatch.fnmatchcase(tag, pattern)


def credential_from_env(env: Mapping[str, str], name: str) -> Result[Credential, PlanError]:
    """Read the registry token once, at job start."""
    value = env.get(name, "")
    if not value.strip():
        return Err(
            PlanError(
                kind="missing_credential",
                message=f"registry token not set: {name}",
                hint=f"export {name} (CI: map the registry secret into the job environment)",
            )
        )
    return Ok(Credential(value.strip()))


def publish_order(packages: tuple[PackageConfig, ...]) -> Result[tuple[PackageConfig, ...], PlanError]:
    """Topologically sort packages so every dependency comes first."""
    by_name = {pkg.name: pkg for pkg in packages}
    for pkg in packages:
        for dep in pkg.depends_on:
            if dep not in by_name:
                return Err(
                    PlanError(
                        kind="invalid_config",
                        message=f"package {pkg.name} depends on undeclared package {dep}",
                    )
                )
            if dep == pkg.name:
                return Err(
                    PlanError(kind="invalid_config", message=f"package {pkg.name} depends on itself")
                )

    visiting: set[str] = set()
    visited: set[str] = set()
    ordered: list[PackageConfig] = []

    def visit(name: str, chain: tuple[str, ...]) -> PlanError | None:
        if name in visited:
            return None
        if name in visiting:
            cycle = " -> ".join((*chain, name))
            return PlanError(kind="invalid_config", message=f"dependency cycle: {cycle}")
        visiting.add(name)
        for dep in by_name[name].depends_on:
            error = visit(dep, (*chain, name))
            if error is not None:
                return error
        visiting.remove(name)
        visited.add(name)
        ordered.append(by_name[name])
        return None

    for pkg in packages:
        error = visit(pkg.name, ())
        if error is not None:
            return Err(error)

    return Ok(tuple(ordered))


def _step_version(pkg: PackageConfig, *, tag: str, workspace_root: Path) -> str:
    if pkg.manifest_path:
        version = read_manifest_version(workspace_root / pkg.manifest_path, workspace_root=workspace_root)
        if isinstance(version, Ok):
            return version.value
    return version_from_tag(tag)


def plan_release(
    config: Config,
    *,
    tag: str,
    credential: Credential,
    workspace_root: Path,
) -> Result[ReleaseJob, PlanError]:
    """Validate the tag and lay out the ordered publish steps.

    A step gets a consistency wait after it when any later step depends on
    it, so every consumer starts at least ``delay_seconds`` after its
    producer finished.
    """
    if not tag_qualifies(tag, config.tag_pattern):
        return Err(
            PlanError(
                kind="invalid_tag",
                message=f"tag {tag!r} does not match {config.tag_pattern!r}",
            )
        )

    order = publish_order(config.packages)
    if isinstance(order, Err):
        return order
    packages = order.value

    poll = config.consistency.mode == "poll"
    steps: list[PublishStep] = []
    for index, pkg in enumerate(packages):
        consumed_later = any(pkg.name in later.depends_on for later in packages[index + 1 :])
        steps.append(
            PublishStep(
                package=PackageRef(name=pkg.name, manifest_path=pkg.manifest_path),
                include_all_variants=pkg.all_features,
                wait_after_seconds=config.consistency.delay_seconds if consumed_later else None,
                version=_step_version(pkg, tag=tag, workspace_root=workspace_root) if poll else None,
            )
        )

    return Ok(ReleaseJob(tag=tag, steps=tuple(steps), credential=credential))
