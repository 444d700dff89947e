"""Version lookup from Cargo manifests."""

from __future__ import annotations

import tomllib
from pathlib import Path

from tagpub.core.result import Err, Ok, Result
from tagpub.core.structured import StrDict, as_str_dict, get_bool, get_str, get_table


def _load(path: Path) -> Result[StrDict, str]:
    try:
        data = as_str_dict(tomllib.loads(path.read_text(encoding="utf-8")))
    except FileNotFoundError:
        return Err(f"manifest not found: {path}")
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        return Err(f"cannot read manifest {path}: {e}")
    if data is None:
        return Err(f"invalid manifest: {path}")
    return Ok(data)


def _workspace_version(manifest: Path, workspace_root: Path) -> Result[str, str]:
    # version.workspace = true inherits from the nearest [workspace.package].
    start = manifest.resolve().parent
    for parent in (start, *start.parents):
        candidate = parent / "Cargo.toml"
        if candidate.is_file():
            loaded = _load(candidate)
            if isinstance(loaded, Err):
                return loaded
            workspace = get_table(loaded.value, "workspace")
            package = get_table(workspace, "package") if workspace is not None else None
            version = get_str(package, "version") if package is not None else None
            if version is not None:
                return Ok(version)
        if parent == workspace_root.resolve():
            break
    return Err(f"no [workspace.package] version found for {manifest}")


def read_manifest_version(manifest: Path, *, workspace_root: Path) -> Result[str, str]:
    """Return ``[package].version`` of a Cargo manifest."""
    loaded = _load(manifest)
    if isinstance(loaded, Err):
        return loaded

    package = get_table(loaded.value, "package")
    if package is None:
        return Err(f"missing [package] in {manifest}")

    version = get_str(package, "version")
    if version is not None:
        return Ok(version)

    inherited = get_table(package, "version")
    if inherited is not None and get_bool(inherited, "workspace"):
        return _workspace_version(manifest, workspace_root)

    return Err(f"missing package version in {manifest}")


def version_from_tag(tag: str) -> str:
    """``v1.2.3`` -> ``1.2.3``; other tags are returned unchanged."""
    tag = tag.strip()
    if len(tag) > 1 and tag[0] in "vV" and tag[1].isdigit():
        return tag[1:]
    return tag
