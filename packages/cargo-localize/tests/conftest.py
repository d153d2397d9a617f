# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for engine tests."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

import pytest

ROOT_MANIFEST = """\
[package]
name = "app"
version = "0.1.0"
edition = "2021"

# Runtime dependencies
[dependencies]
foo = "1.0"  # shorthand form
bar = { version = "2", features = ["derive"] }
renamed = { package = "baz", version = "0.3", default-features = false }
mylib = { path = "crates/mylib" }
unknown = "1"

[dependencies.qux]
version = "0.9"
git = "https://example.com/qux.git"
branch = "main"

[dev-dependencies]
foo = "1.0"

[build-dependencies]
bar.workspace = true
bar.features = ["derive"]

[target.'cfg(unix)'.dependencies]
bar = "2"
"""

MYLIB_MANIFEST = """\
[package]
name = "mylib"
version = "0.1.0"
edition = "2021"
"""

# Published manifests, normalized the way crates.io stores them
CRATE_MANIFESTS = {
    "foo": """\
[package]
name = "foo"
version = "1.2.3"

[dependencies.baz]
version = "0.3"
""",
    "bar": """\
[package]
name = "bar"
version = "2.0.1"

[dependencies]
foo = "1"
""",
    "baz": """\
[package]
name = "baz"
version = "0.3.0"
""",
    "qux": """\
[package]
name = "qux"
version = "0.9.4"
""",
}

# (name, version, features) in resolver order
EXTERNAL_CRATES = [
    ("foo", "1.2.3", ["x", "y"]),
    ("bar", "2.0.1", ["derive", "std"]),
    ("baz", "0.3.0", []),
    ("qux", "0.9.4", ["default"]),
]


def package_id(name: str, version: str, source: str | None) -> str:
    """Build a package identity in the ``cargo metadata`` style."""
    if source is None:
        return f"path+file:///{name}#{version}"
    return f"{source}#{name}@{version}"


def make_metadata(
    workspace_root: Path,
    packages: list[dict[str, Any]],
) -> dict[str, Any]:
    """Build a ``cargo metadata --format-version 1`` style document.

    Each package dict needs name, version and manifest_path; features and
    source are optional.
    """
    metadata_packages = []
    nodes = []
    for pkg in packages:
        source = pkg.get("source")
        pkg_id = pkg.get("id") or package_id(pkg["name"], pkg["version"], source)
        metadata_packages.append(
            {
                "name": pkg["name"],
                "version": pkg["version"],
                "id": pkg_id,
                "source": source,
                "manifest_path": str(pkg["manifest_path"]),
                "dependencies": [],
                "features": {},
            }
        )
        nodes.append({"id": pkg_id, "dependencies": [], "deps": [], "features": pkg.get("features", [])})

    return {
        "packages": metadata_packages,
        "workspace_members": [p["id"] for p in metadata_packages if p["source"] is None],
        "resolve": {"nodes": nodes, "root": metadata_packages[0]["id"] if metadata_packages else None},
        "target_directory": str(workspace_root / "target"),
        "version": 1,
        "workspace_root": str(workspace_root),
    }


def write_crate(registry: Path, name: str, version: str, manifest: str | None = None) -> Path:
    """Create an extracted crate source below a registry directory."""
    crate_dir = registry / f"{name}-{version}"
    (crate_dir / "src").mkdir(parents=True)
    (crate_dir / "Cargo.toml").write_text(
        manifest or f'[package]\nname = "{name}"\nversion = "{version}"\n',
        encoding="utf-8",
    )
    (crate_dir / "Cargo.toml.orig").write_text(
        f'[package]\nname = "{name}"\nversion = "{version}"\n', encoding="utf-8"
    )
    (crate_dir / "src" / "lib.rs").write_text(f"//! {name} {version}\n", encoding="utf-8")
    return crate_dir


@dataclass
class SampleProject:
    """A Cargo workspace with a populated package cache."""

    project_dir: Path
    cargo_home: Path
    registry: Path
    packages: list[dict[str, Any]] = field(default_factory=list)

    @property
    def cache_root(self) -> Path:
        return self.cargo_home / "registry" / "src"

    @property
    def manifest(self) -> Path:
        return self.project_dir / "Cargo.toml"

    @property
    def vendor_root(self) -> Path:
        return self.project_dir / "3rd-party"

    def metadata(self) -> dict[str, Any]:
        return make_metadata(self.project_dir, self.packages)


@pytest.fixture
def metadata_factory() -> Callable[[Path, list[dict[str, Any]]], dict[str, Any]]:
    """Builder for ``cargo metadata`` documents."""
    return make_metadata


@pytest.fixture
def crate_factory() -> Callable[..., Path]:
    """Builder for extracted crate sources."""
    return write_crate


@pytest.fixture
def cargo_home(tmp_path: Path) -> Path:
    """Create an empty Cargo home with one registry cache."""
    home = tmp_path.resolve() / "cargo-home"
    (home / "registry" / "src" / "index.crates.io-6f17d22bba15001f").mkdir(parents=True)
    return home


@pytest.fixture
def sample_project(tmp_path: Path, cargo_home: Path) -> SampleProject:
    """Create a workspace depending on four registry crates.

    The workspace has members ``app`` (root) and ``mylib``; the registry
    cache holds foo, bar, baz and qux.
    """
    project_dir = tmp_path.resolve() / "app"
    project_dir.mkdir()
    (project_dir / "Cargo.toml").write_text(ROOT_MANIFEST, encoding="utf-8")
    (project_dir / "Cargo.lock").write_text("# lockfile\nversion = 3\n", encoding="utf-8")
    (project_dir / "src").mkdir()
    (project_dir / "src" / "main.rs").write_text("fn main() {}\n", encoding="utf-8")

    mylib_dir = project_dir / "crates" / "mylib"
    mylib_dir.mkdir(parents=True)
    (mylib_dir / "Cargo.toml").write_text(MYLIB_MANIFEST, encoding="utf-8")

    registry = cargo_home / "registry" / "src" / "index.crates.io-6f17d22bba15001f"
    source = "registry+https://github.com/rust-lang/crates.io-index"

    packages: list[dict[str, Any]] = [
        {"name": "app", "version": "0.1.0", "manifest_path": project_dir / "Cargo.toml"},
        {"name": "mylib", "version": "0.1.0", "manifest_path": mylib_dir / "Cargo.toml"},
    ]
    for name, version, features in EXTERNAL_CRATES:
        crate_dir = write_crate(registry, name, version, CRATE_MANIFESTS[name])
        packages.append(
            {
                "name": name,
                "version": version,
                "manifest_path": crate_dir / "Cargo.toml",
                "features": features,
                "source": source,
            }
        )

    return SampleProject(
        project_dir=project_dir,
        cargo_home=cargo_home,
        registry=registry,
        packages=packages,
    )
