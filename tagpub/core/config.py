"""Typed loading of release.toml.

The file declares which packages are published, how they depend on each
other and how the pipeline bridges the registry's index delay. Every value
has a default matching the historical two-crate release, so a missing file
still describes a complete job.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from .result import Err, Ok, Result
from .structured import (
    StrDict,
    as_str_dict,
    get_bool,
    get_list,
    get_number,
    get_str,
    get_str_list,
    get_table,
)

__all__ = [
    "Config",
    "ConfigError",
    "ConsistencyConfig",
    "ConsistencyMode",
    "PackageConfig",
    "RegistryConfig",
    "load_config",
    "load_config_or_default",
    "CONFIG_FILE_NAME",
    "DEFAULT_DELAY_SECONDS",
    "DEFAULT_TOKEN_ENV",
]

CONFIG_FILE_NAME = "release.toml"

DEFAULT_TOKEN_ENV = "CARGO_REGISTRY_TOKEN"
DEFAULT_TAG_PATTERN = "*"
DEFAULT_API_URL = "https://crates.io/api/v1"

# Index catch-up heuristic used by the release workflow since its first version.
DEFAULT_DELAY_SECONDS = 120.0
DEFAULT_POLL_INTERVAL_SECONDS = 10.0
DEFAULT_MAX_WAIT_SECONDS = 600.0

ConsistencyMode = Literal["fixed", "poll"]


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when the release configuration cannot be used."""

    message: str
    path: Path | None = None

    def pretty(self) -> str:
        if self.path is not None:
            return f"{self.message} ({self.path})"
        return self.message


@dataclass(frozen=True, slots=True)
class PackageConfig:
    """One package to publish.

    ``manifest_path`` is relative to the workspace root. When it is None the
    package is selected by name inside the workspace (``cargo publish -p``).
    """

    name: str
    manifest_path: str | None = None
    all_features: bool = True
    depends_on: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class RegistryConfig:
    # None selects the package manager's default registry.
    name: str | None = None
    api_url: str = DEFAULT_API_URL


@dataclass(frozen=True, slots=True)
class ConsistencyConfig:
    """How to bridge the index delay between a producer and its consumer.

    ``fixed`` sleeps ``delay_seconds``. ``poll`` sleeps ``delay_seconds``,
    then checks the registry until the producer version is visible or
    ``max_wait_seconds`` have elapsed in total, then proceeds either way.
    """

    mode: ConsistencyMode = "fixed"
    delay_seconds: float = DEFAULT_DELAY_SECONDS
    poll_interval_seconds: float = DEFAULT_POLL_INTERVAL_SECONDS
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS


def _default_packages() -> tuple[PackageConfig, ...]:
    return (
        PackageConfig(name="cairo-felt", manifest_path="felt/Cargo.toml", all_features=True),
        PackageConfig(name="cairo-vm", all_features=True, depends_on=("cairo-felt",)),
    )


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    tag_pattern: str = DEFAULT_TAG_PATTERN
    token_env: str = DEFAULT_TOKEN_ENV
    registry: RegistryConfig = field(default_factory=RegistryConfig)
    consistency: ConsistencyConfig = field(default_factory=ConsistencyConfig)
    packages: tuple[PackageConfig, ...] = field(default_factory=_default_packages)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from parsed TOML.

        Raises:
            ValueError: If a value is present but invalid.
        """
        registry: StrDict = get_table(data, "registry") or {}
        consistency: StrDict = get_table(data, "consistency") or {}

        packages = _default_packages()
        if "package" in data:
            packages = _parse_packages(data)

        return cls(
            tag_pattern=get_str(data, "tag_pattern") or DEFAULT_TAG_PATTERN,
            token_env=get_str(data, "token_env") or DEFAULT_TOKEN_ENV,
            registry=RegistryConfig(
                name=get_str(registry, "name"),
                api_url=(get_str(registry, "api_url") or DEFAULT_API_URL).rstrip("/"),
            ),
            consistency=_parse_consistency(consistency),
            packages=packages,
        )


def _parse_consistency(table: StrDict) -> ConsistencyConfig:
    mode = get_str(table, "mode") or "fixed"
    if mode not in ("fixed", "poll"):
        raise ValueError(f"consistency.mode must be 'fixed' or 'poll', got {mode!r}")

    delay = _non_negative(table, "delay_seconds", DEFAULT_DELAY_SECONDS)
    interval = _non_negative(table, "poll_interval_seconds", DEFAULT_POLL_INTERVAL_SECONDS)
    max_wait = _non_negative(table, "max_wait_seconds", max(DEFAULT_MAX_WAIT_SECONDS, delay))

    if mode == "poll" and interval <= 0:
        raise ValueError("consistency.poll_interval_seconds must be > 0 in poll mode")
    if max_wait < delay:
        raise ValueError("consistency.max_wait_seconds must be >= delay_seconds")

    return ConsistencyConfig(
        mode="poll" if mode == "poll" else "fixed",
        delay_seconds=delay,
        poll_interval_seconds=interval,
        max_wait_seconds=max_wait,
    )


def _non_negative(table: StrDict, key: str, default: float) -> float:
    if key not in table:
        return default
    value = get_number(table, key)
    if value is None:
        raise ValueError(f"consistency.{key} must be a number")
    if value < 0:
        raise ValueError(f"consistency.{key} must be >= 0")
    return value


def _parse_packages(data: Mapping[str, object]) -> tuple[PackageConfig, ...]:
    items = get_list(data, "package")
    if items is None:
        raise ValueError("package must be an array of tables ([[package]])")
    if not items:
        raise ValueError("at least one [[package]] is required")

    packages: list[PackageConfig] = []
    seen: set[str] = set()
    for index, item in enumerate(items):
        table = as_str_dict(item)
        if table is None:
            raise ValueError(f"package[{index}] must be a table")

        name = get_str(table, "name")
        if name is None:
            raise ValueError(f"package[{index}] is missing 'name'")
        if name in seen:
            raise ValueError(f"duplicate package: {name}")
        seen.add(name)

        depends_on: tuple[str, ...] = ()
        if "depends_on" in table:
            parsed = get_str_list(table, "depends_on")
            if parsed is None:
                raise ValueError(f"package {name}: depends_on must be a list of names")
            depends_on = parsed

        all_features = get_bool(table, "all_features")
        packages.append(
            PackageConfig(
                name=name,
                manifest_path=get_str(table, "manifest_path"),
                all_features=True if all_features is None else all_features,
                depends_on=depends_on,
            )
        )

    return tuple(packages)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and validate release configuration from a TOML file.

    Args:
        path: Path to release.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config from file, or return the built-in defaults if it is absent.

    A file that exists but is invalid is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
