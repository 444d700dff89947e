"""Single-package publish against the registry.

The package manager's publish command is a black box: this module only
builds its invocation, injects the credential and turns the outcome into a
``Result[None, PublishError]``. It never retries and never distinguishes
failure causes (auth, version conflict, network, bad manifest all map to
one ``PublishError``).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from tagpub.core.result import Err, Result
from tagpub.platform.process import ProcessError
from tagpub.platform.process import run as run_process

__all__ = [
    "CargoPublisher",
    "Credential",
    "PackageRef",
    "PublishError",
    "RegistryPublisher",
    "token_env_var",
]

# cargo reads the crates.io token from this variable; the token never goes on argv.
DEFAULT_TOKEN_ENV_VAR = "CARGO_REGISTRY_TOKEN"

PUBLISH_TIMEOUT_SECONDS = 30 * 60.0

_STDERR_TAIL_LINES = 20


@dataclass(frozen=True, slots=True)
class Credential:
    """Opaque registry token. Its repr never shows the value."""

    _secret: str = field(repr=False)

    def reveal(self) -> str:
        return self._secret

    @property
    def is_empty(self) -> bool:
        return not self._secret.strip()

    def __str__(self) -> str:
        return "Credential(***)"

    def __repr__(self) -> str:
        return "Credential(***)"


@dataclass(frozen=True, slots=True)
class PackageRef:
    """Where the publish command finds a package.

    ``manifest_path`` (relative to the workspace root) wins over selecting
    the package by name inside the workspace.
    """

    name: str
    manifest_path: str | None = None

    def describe(self) -> str:
        if self.manifest_path:
            return f"{self.name} ({self.manifest_path})"
        return self.name


@dataclass(frozen=True, slots=True)
class PublishError:
    """A publish step failed, for whatever reason."""

    package: str
    message: str
    detail: str | None = None

    def pretty(self) -> str:
        if self.detail:
            return f"{self.message}\n{self.detail}"
        return self.message


class RegistryPublisher(Protocol):
    """Publishes one package version to the registry."""

    def publish(
        self,
        package: PackageRef,
        credential: Credential,
        *,
        include_all_variants: bool,
    ) -> Result[None, PublishError]: ...


def token_env_var(registry: str | None) -> str:
    """Variable cargo reads the token from for ``registry`` (None: crates.io).

    Named registries use ``CARGO_REGISTRIES_<NAME>_TOKEN``, upper-cased with
    dashes turned into underscores.
    """
    if not registry:
        return DEFAULT_TOKEN_ENV_VAR
    return f"CARGO_REGISTRIES_{registry.upper().replace('-', '_')}_TOKEN"


def _stderr_tail(error: ProcessError) -> str | None:
    text = (error.stderr or error.stdout).strip()
    if not text:
        return None
    lines = text.splitlines()
    return "\n".join(lines[-_STDERR_TAIL_LINES:])


class CargoPublisher:
    """``cargo publish`` run from the workspace root."""

    def __init__(
        self,
        *,
        workspace_root: Path,
        registry: str | None = None,
        dry_run: bool = False,
        allow_dirty: bool = False,
        cargo: str = "cargo",
        timeout: float = PUBLISH_TIMEOUT_SECONDS,
    ) -> None:
        self.workspace_root = workspace_root
        self.registry = registry
        self.dry_run = dry_run
        self.allow_dirty = allow_dirty
        self.cargo = cargo
        self.timeout = timeout

    def command(self, package: PackageRef, *, include_all_variants: bool) -> list[str]:
        cmd = [self.cargo, "publish"]
        if package.manifest_path:
            cmd.extend(["--manifest-path", package.manifest_path])
        else:
            cmd.extend(["-p", package.name])
        if include_all_variants:
            cmd.append("--all-features")
        if self.registry:
            cmd.extend(["--registry", self.registry])
        if self.allow_dirty:
            cmd.append("--allow-dirty")
        if self.dry_run:
            cmd.append("--dry-run")
        return cmd

    def publish(
        self,
        package: PackageRef,
        credential: Credential,
        *,
        include_all_variants: bool,
    ) -> Result[None, PublishError]:
        if credential.is_empty:
            return Err(PublishError(package=package.name, message="registry token is empty"))

        cmd = self.command(package, include_all_variants=include_all_variants)
        result = run_process(
            cmd,
            cwd=self.workspace_root,
            extra_env={token_env_var(self.registry): credential.reveal()},
            timeout=self.timeout,
        )
        return result.map(lambda _: None).map_err(
            lambda error: PublishError(
                package=package.name,
                message=f"publish {package.describe()} failed: {error}",
                detail=_stderr_tail(error),
            )
        )
