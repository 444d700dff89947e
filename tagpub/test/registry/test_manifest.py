"""Tests for tagpub.registry.manifest module."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagpub.core.result import Err, Ok
from tagpub.registry.manifest import read_manifest_version, version_from_tag


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_plain_version(tmp_path: Path) -> None:
    manifest = _write(tmp_path / "felt/Cargo.toml", '[package]\nname = "cairo-felt"\nversion = "0.8.2"\n')
    assert read_manifest_version(manifest, workspace_root=tmp_path) == Ok("0.8.2")


def test_workspace_inherited_version(tmp_path: Path) -> None:
    _write(tmp_path / "Cargo.toml", '[workspace]\nmembers = ["felt"]\n[workspace.package]\nversion = "0.9.0"\n')
    manifest = _write(
        tmp_path / "felt/Cargo.toml",
        '[package]\nname = "cairo-felt"\nversion.workspace = true\n',
    )
    assert read_manifest_version(manifest, workspace_root=tmp_path) == Ok("0.9.0")


def test_workspace_version_missing(tmp_path: Path) -> None:
    manifest = _write(
        tmp_path / "felt/Cargo.toml",
        '[package]\nname = "cairo-felt"\nversion.workspace = true\n',
    )
    assert isinstance(read_manifest_version(manifest, workspace_root=tmp_path), Err)


def test_missing_manifest(tmp_path: Path) -> None:
    result = read_manifest_version(tmp_path / "Cargo.toml", workspace_root=tmp_path)
    assert isinstance(result, Err)
    assert "not found" in result.error


def test_missing_package_table(tmp_path: Path) -> None:
    manifest = _write(tmp_path / "Cargo.toml", "[workspace]\n")
    assert isinstance(read_manifest_version(manifest, workspace_root=tmp_path), Err)


@pytest.mark.parametrize(
    ("tag", "version"),
    [
        ("v1.2.3", "1.2.3"),
        ("V0.1.0-rc.1", "0.1.0-rc.1"),
        ("1.2.3", "1.2.3"),
        ("vm-release", "vm-release"),
    ],
)
def test_version_from_tag(tag: str, version: str) -> None:
    assert version_from_tag(tag) == version
