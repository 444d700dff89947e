"""Tests for tagpub.release.planner module."""

from __future__ import annotations

from pathlib import Path

import pytest

from tagpub.core.config import Config, ConsistencyConfig, PackageConfig
from tagpub.core.result import Err, Ok
from tagpub.registry.publisher import Credential, PackageRef
from tagpub.release.planner import (
    credential_from_env,
    plan_release,
    publish_order,
    tag_qualifies,
)

CRED = Credential("cio-secret")


def _names(packages: tuple[PackageConfig, ...]) -> list[str]:
    return [p.name for p in packages]


class TestPublishOrder:
    def test_dependency_first_regardless_of_declaration_order(self) -> None:
        packages = (
            PackageConfig(name="cairo-vm", depends_on=("cairo-felt",)),
            PackageConfig(name="cairo-felt"),
        )
        result = publish_order(packages)
        assert isinstance(result, Ok)
        assert _names(result.value) == ["cairo-felt", "cairo-vm"]

    def test_independent_packages_keep_declaration_order(self) -> None:
        packages = (PackageConfig(name="b"), PackageConfig(name="a"), PackageConfig(name="c"))
        result = publish_order(packages)
        assert isinstance(result, Ok)
        assert _names(result.value) == ["b", "a", "c"]

    def test_chain(self) -> None:
        packages = (
            PackageConfig(name="app", depends_on=("lib",)),
            PackageConfig(name="lib", depends_on=("core",)),
            PackageConfig(name="core"),
        )
        result = publish_order(packages)
        assert isinstance(result, Ok)
        assert _names(result.value) == ["core", "lib", "app"]

    def test_unknown_dependency(self) -> None:
        result = publish_order((PackageConfig(name="app", depends_on=("ghost",)),))
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_config"
        assert "ghost" in result.error.message

    def test_cycle(self) -> None:
        packages = (
            PackageConfig(name="a", depends_on=("b",)),
            PackageConfig(name="b", depends_on=("a",)),
        )
        result = publish_order(packages)
        assert isinstance(result, Err)
        assert "cycle" in result.error.message

    def test_self_dependency(self) -> None:
        result = publish_order((PackageConfig(name="a", depends_on=("a",)),))
        assert isinstance(result, Err)


class TestTagQualifies:
    @pytest.mark.parametrize(
        ("tag", "pattern", "expected"),
        [
            ("v1.0.0", "*", True),
            ("anything", "*", True),
            ("v1.0.0", "v*", True),
            ("1.0.0", "v*", False),
            ("", "*", False),
            ("   ", "*", False),
        ],
    )
    def test_patterns(self, tag: str, pattern: str, expected: bool) -> None:
        assert tag_qualifies(tag, pattern) is expected


class TestCredentialFromEnv:
    def test_present(self) -> None:
        result = credential_from_env({"CARGO_REGISTRY_TOKEN": "cio-secret\n"}, "CARGO_REGISTRY_TOKEN")
        assert isinstance(result, Ok)
        assert result.value.reveal() == "cio-secret"

    @pytest.mark.parametrize("env", [{}, {"CARGO_REGISTRY_TOKEN": ""}, {"CARGO_REGISTRY_TOKEN": "  "}])
    def test_missing_or_empty(self, env: dict[str, str]) -> None:
        result = credential_from_env(env, "CARGO_REGISTRY_TOKEN")
        assert isinstance(result, Err)
        assert result.error.kind == "missing_credential"
        assert "CARGO_REGISTRY_TOKEN" in result.error.message


class TestPlanRelease:
    def test_default_two_crate_job(self, tmp_path: Path) -> None:
        result = plan_release(Config(), tag="v0.8.2", credential=CRED, workspace_root=tmp_path)
        assert isinstance(result, Ok)
        job = result.value
        assert job.tag == "v0.8.2"
        assert job.credential is CRED
        assert [s.id for s in job.steps] == ["cairo-felt", "cairo-vm"]
        felt, vm = job.steps
        assert felt.package == PackageRef(name="cairo-felt", manifest_path="felt/Cargo.toml")
        assert vm.package == PackageRef(name="cairo-vm")
        assert felt.include_all_variants and vm.include_all_variants
        assert felt.wait_after_seconds == 120.0
        assert vm.wait_after_seconds is None
        # Versions are only resolved when polling the index.
        assert felt.version is None

    def test_no_wait_between_unrelated_packages(self, tmp_path: Path) -> None:
        config = Config(packages=(PackageConfig(name="a"), PackageConfig(name="b")))
        result = plan_release(config, tag="v1", credential=CRED, workspace_root=tmp_path)
        assert isinstance(result, Ok)
        assert [s.wait_after_seconds for s in result.value.steps] == [None, None]

    def test_wait_before_non_adjacent_consumer(self, tmp_path: Path) -> None:
        config = Config(
            packages=(
                PackageConfig(name="a"),
                PackageConfig(name="b"),
                PackageConfig(name="c", depends_on=("a",)),
            ),
            consistency=ConsistencyConfig(delay_seconds=5.0),
        )
        result = plan_release(config, tag="v1", credential=CRED, workspace_root=tmp_path)
        assert isinstance(result, Ok)
        assert [s.wait_after_seconds for s in result.value.steps] == [5.0, None, None]

    def test_rejects_tag_not_matching_pattern(self, tmp_path: Path) -> None:
        result = plan_release(
            Config(tag_pattern="v*"), tag="nightly", credential=CRED, workspace_root=tmp_path
        )
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_tag"

    def test_propagates_ordering_error(self, tmp_path: Path) -> None:
        config = Config(packages=(PackageConfig(name="a", depends_on=("missing",)),))
        result = plan_release(config, tag="v1", credential=CRED, workspace_root=tmp_path)
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_config"

    def test_poll_mode_resolves_versions(self, tmp_path: Path) -> None:
        (tmp_path / "felt").mkdir()
        (tmp_path / "felt" / "Cargo.toml").write_text(
            '[package]\nname = "cairo-felt"\nversion = "0.8.2"\n', encoding="utf-8"
        )
        config = Config(consistency=ConsistencyConfig(mode="poll"))
        result = plan_release(config, tag="v0.8.3", credential=CRED, workspace_root=tmp_path)
        assert isinstance(result, Ok)
        felt, vm = result.value.steps
        assert felt.version == "0.8.2"
        # No manifest path: falls back to the tag.
        assert vm.version == "0.8.3"
