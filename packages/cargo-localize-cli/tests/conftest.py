# SPDX-License-Identifier: MIT
"""Pytest configuration and fixtures for CLI tests."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

import pytest
from click.testing import CliRunner

REGISTRY_SOURCE = "registry+https://github.com/rust-lang/crates.io-index"


@dataclass
class CliProject:
    """A Cargo project with a saved metadata file and a package cache."""

    project_dir: Path
    cargo_home: Path
    registry: Path
    metadata_file: Path


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> Path:
    """Keep the user's real Cargo cache out of the search."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("CARGO_HOME", raising=False)
    return home


@pytest.fixture
def cli_project(tmp_path: Path) -> CliProject:
    """Create a project depending on ``serde`` and ``log`` from the registry."""
    root = tmp_path.resolve()
    project_dir = root / "hello"
    (project_dir / "src").mkdir(parents=True)
    (project_dir / "src" / "main.rs").write_text("fn main() {}\n")
    (project_dir / "Cargo.toml").write_text(
        """\
[package]
name = "hello"
version = "0.1.0"
edition = "2021"

[dependencies]
serde = { version = "1", features = ["derive"] }
log = "0.4"
"""
    )
    (project_dir / "Cargo.lock").write_text("version = 3\n")

    cargo_home = root / "cargo"
    registry = cargo_home / "registry" / "src" / "index.crates.io-6f17d22bba15001f"
    crates = [
        ("serde", "1.0.200", ["default", "derive", "std"]),
        ("log", "0.4.21", []),
    ]
    packages = [
        {
            "name": "hello",
            "version": "0.1.0",
            "id": "path+file:///hello#0.1.0",
            "source": None,
            "manifest_path": str(project_dir / "Cargo.toml"),
        }
    ]
    nodes = [{"id": "path+file:///hello#0.1.0", "features": []}]
    for name, version, features in crates:
        crate_dir = registry / f"{name}-{version}"
        (crate_dir / "src").mkdir(parents=True)
        (crate_dir / "Cargo.toml").write_text(f'[package]\nname = "{name}"\nversion = "{version}"\n')
        (crate_dir / "src" / "lib.rs").write_text("\n")
        pkg_id = f"{REGISTRY_SOURCE}#{name}@{version}"
        packages.append(
            {
                "name": name,
                "version": version,
                "id": pkg_id,
                "source": REGISTRY_SOURCE,
                "manifest_path": str(crate_dir / "Cargo.toml"),
            }
        )
        nodes.append({"id": pkg_id, "features": features})

    metadata_file = root / "metadata.json"
    metadata_file.write_text(
        json.dumps(
            {
                "packages": packages,
                "resolve": {"nodes": nodes, "root": packages[0]["id"]},
                "workspace_root": str(project_dir),
                "version": 1,
            }
        )
    )

    return CliProject(
        project_dir=project_dir,
        cargo_home=cargo_home,
        registry=registry,
        metadata_file=metadata_file,
    )
