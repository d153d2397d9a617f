# SPDX-License-Identifier: MIT
"""Localization configuration for Cargo projects.

This module provides the configuration dataclass controlling where
dependencies are vendored and where the package cache is searched, plus the
base of the error hierarchy shared by every stage of a run.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib


DEFAULT_THIRD_PARTY_DIR = "3rd-party"
MANIFEST_NAME = "Cargo.toml"
LOCKFILE_NAME = "Cargo.lock"


class LocalizeError(Exception):
    """Base class for fatal errors raised during a localization run.

    Attributes:
        stage: Short label of the pipeline stage that failed
    """

    stage = "localize"


class ConfigurationError(LocalizeError):
    """Raised when the project path or configuration is invalid."""

    stage = "configuration"


@dataclass
class LocalizeConfig:
    """Configuration for a localization run.

    Attributes:
        project_dir: Canonical path of the project (contains Cargo.toml)
        third_party_dir: Name of the vendor subdirectory inside the project
        cargo_home: Cargo home override used to derive the cache root
        cache_roots: Explicit cache roots; replaces the derived ones when set
        fetch: Run ``cargo fetch`` before reading metadata
        remove_lockfile: Delete Cargo.lock after a successful run
        use_manifest_paths: Trust resolver-reported source locations before
            falling back to searching the cache by name
    """

    project_dir: Path
    third_party_dir: str = DEFAULT_THIRD_PARTY_DIR
    cargo_home: Path | None = None
    cache_roots: list[Path] = field(default_factory=list)
    fetch: bool = True
    remove_lockfile: bool = True
    use_manifest_paths: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.project_dir = Path(self.project_dir)
        if not self.third_party_dir:
            raise ConfigurationError("third_party_dir is required")
        third_party = Path(self.third_party_dir)
        if third_party.is_absolute() or len(third_party.parts) != 1 or self.third_party_dir in (
            ".",
            "..",
        ):
            raise ConfigurationError(
                f"Invalid third_party_dir: {self.third_party_dir!r}. "
                "Must be a single directory name inside the project."
            )
        if self.cargo_home is not None:
            self.cargo_home = Path(self.cargo_home).expanduser()
        self.cache_roots = [Path(root).expanduser() for root in self.cache_roots]

    @property
    def vendor_root(self) -> Path:
        """Directory that receives the vendored crates."""
        return self.project_dir / self.third_party_dir

    @property
    def root_manifest(self) -> Path:
        """The project's own Cargo.toml."""
        return self.project_dir / MANIFEST_NAME

    @property
    def lockfile(self) -> Path:
        """The project's Cargo.lock."""
        return self.project_dir / LOCKFILE_NAME

    @classmethod
    def from_project(
        cls,
        project_dir: str | Path,
        **overrides: Any,
    ) -> "LocalizeConfig":
        """Create LocalizeConfig for a project directory.

        Reads optional defaults from ``[workspace.metadata.localize]`` or
        ``[package.metadata.localize]`` in the project's Cargo.toml. Keyword
        overrides that are not None take precedence over file values.

        Args:
            project_dir: Path to the project root
            **overrides: Field values, e.g. from command line options

        Returns:
            LocalizeConfig instance

        Raises:
            ConfigurationError: If the path or configuration is invalid
        """
        try:
            project_path = Path(project_dir).resolve(strict=True)
        except (OSError, RuntimeError) as e:
            raise ConfigurationError(f"Invalid project path: {project_dir}") from e

        if not project_path.is_dir():
            raise ConfigurationError(f"Invalid project path: {project_dir} is not a directory")

        manifest_path = project_path / MANIFEST_NAME
        if not manifest_path.is_file():
            raise ConfigurationError(f"{MANIFEST_NAME} not found in {project_path}")

        try:
            with open(manifest_path, "rb") as f:
                manifest = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigurationError(f"Invalid TOML syntax in {manifest_path}: {e}") from e

        return cls.from_manifest_dict(manifest, project_path, **overrides)

    @classmethod
    def from_manifest_dict(
        cls,
        manifest: dict[str, Any],
        project_dir: Path,
        **overrides: Any,
    ) -> "LocalizeConfig":
        """Create LocalizeConfig from a parsed Cargo.toml dictionary.

        Args:
            manifest: Parsed Cargo.toml as a dictionary
            project_dir: Canonical project directory
            **overrides: Field values that win over the manifest settings

        Returns:
            LocalizeConfig instance

        Raises:
            ConfigurationError: If the settings table is malformed
        """
        settings = _read_settings_table(manifest)

        values: dict[str, Any] = {}
        if "third-party-dir" in settings:
            values["third_party_dir"] = _expect(settings, "third-party-dir", str)
        if "cargo-home" in settings:
            values["cargo_home"] = _resolve_relative(
                project_dir, _expect(settings, "cargo-home", str)
            )
        if "cache-roots" in settings:
            roots = _expect(settings, "cache-roots", list)
            if not all(isinstance(root, str) for root in roots):
                raise ConfigurationError("'cache-roots' must be a list of strings")
            values["cache_roots"] = [_resolve_relative(project_dir, root) for root in roots]
        if "fetch" in settings:
            values["fetch"] = _expect(settings, "fetch", bool)
        if "remove-lockfile" in settings:
            values["remove_lockfile"] = _expect(settings, "remove-lockfile", bool)
        if "use-manifest-paths" in settings:
            values["use_manifest_paths"] = _expect(settings, "use-manifest-paths", bool)

        for key, value in overrides.items():
            if value is not None:
                values[key] = value

        return cls(project_dir=project_dir, **values)


def _read_settings_table(manifest: dict[str, Any]) -> dict[str, Any]:
    """Get the localize settings table, preferring the workspace one."""
    for section in ("workspace", "package"):
        table = manifest.get(section, {}).get("metadata", {}).get("localize")
        if table is not None:
            if not isinstance(table, dict):
                raise ConfigurationError(f"[{section}.metadata.localize] must be a table")
            return table
    return {}


def _expect(settings: dict[str, Any], key: str, kind: type) -> Any:
    value = settings[key]
    if not isinstance(value, kind):
        raise ConfigurationError(
            f"'{key}' in [metadata.localize] must be of type {kind.__name__}, "
            f"got {type(value).__name__}"
        )
    return value


def _resolve_relative(project_dir: Path, value: str) -> Path:
    path = Path(value).expanduser()
    if not path.is_absolute():
        path = project_dir / path
    return path
