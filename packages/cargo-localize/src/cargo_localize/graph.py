# SPDX-License-Identifier: MIT
"""Read-only view over a resolved Cargo dependency graph.

This module turns a ``cargo metadata`` document into the lookups the rest of
the engine needs: the resolved feature set of each package identity, the first
package matching a dependency name, and which packages belong to the
workspace (and are therefore never vendored).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterator

from .config import LocalizeError


class ResolutionError(LocalizeError):
    """Raised when resolution data is missing or inconsistent."""

    stage = "resolution"


@dataclass(frozen=True)
class ResolvedPackage:
    """A package as assigned by the resolver.

    Attributes:
        id: Opaque package identity from the resolution graph
        name: Crate name
        version: Resolved version string
        features: Resolved features, in resolver order
        manifest_path: Path to the package's Cargo.toml
        is_workspace_member: True if the manifest lives inside the workspace root
        source: Source identifier (registry or git URL), None for local paths
    """

    id: str
    name: str
    version: str
    features: tuple[str, ...] = ()
    manifest_path: Path = Path()
    is_workspace_member: bool = False
    source: str | None = None

    @property
    def dir_name(self) -> str:
        """Directory name of this package in the cache and vendor root."""
        return f"{self.name}-{self.version}"

    @property
    def source_dir(self) -> Path:
        """Directory containing the resolver-reported manifest."""
        return self.manifest_path.parent


def is_workspace_package(manifest_path: Path, workspace_root: Path) -> bool:
    """Check if a package manifest is within the workspace."""
    return manifest_path.is_relative_to(workspace_root)


@dataclass
class DependencyGraph:
    """Resolved packages keyed by identity, in resolver iteration order."""

    workspace_root: Path
    packages: dict[str, ResolvedPackage] = field(default_factory=dict)

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> "DependencyGraph":
        """Build the graph from a ``cargo metadata`` document.

        Only packages that appear as nodes of the resolve graph are included;
        their order follows the resolve node order.

        Args:
            metadata: Parsed ``cargo metadata --format-version 1`` output

        Returns:
            DependencyGraph instance

        Raises:
            ResolutionError: If resolve data is absent or refers to unknown
                packages
        """
        workspace_root = metadata.get("workspace_root")
        if not workspace_root:
            raise ResolutionError("No workspace_root in metadata")

        resolve = metadata.get("resolve")
        if not resolve:
            raise ResolutionError("No resolve data in metadata")

        package_map: dict[str, dict[str, Any]] = {}
        for package in metadata.get("packages") or []:
            try:
                package_map[package["id"]] = package
            except (KeyError, TypeError) as e:
                raise ResolutionError(f"Malformed package entry in metadata: {package!r}") from e

        graph = cls(workspace_root=Path(workspace_root))
        for node in resolve.get("nodes") or []:
            node_id = node.get("id")
            package = package_map.get(node_id)
            if package is None:
                raise ResolutionError(f"Package {node_id} not found in metadata")

            try:
                manifest_path = Path(package["manifest_path"])
                resolved = ResolvedPackage(
                    id=node_id,
                    name=package["name"],
                    version=str(package["version"]),
                    features=tuple(node.get("features") or ()),
                    manifest_path=manifest_path,
                    is_workspace_member=is_workspace_package(
                        manifest_path, graph.workspace_root
                    ),
                    source=package.get("source"),
                )
            except KeyError as e:
                raise ResolutionError(f"Package {node_id} is missing field {e}") from e
            graph.add_package(resolved)

        return graph

    def add_package(self, package: ResolvedPackage) -> None:
        """Add a package to the graph."""
        self.packages[package.id] = package

    def get_package(self, package_id: str) -> ResolvedPackage | None:
        """Get a package by identity."""
        return self.packages.get(package_id)

    def features_for(self, package_id: str) -> list[str]:
        """Get the resolved feature set of a package identity.

        Raises:
            ResolutionError: If the identity is not part of the graph
        """
        package = self.packages.get(package_id)
        if package is None:
            raise ResolutionError(f"Package {package_id} not found in metadata")
        return list(package.features)

    def find(self, name: str, package: str | None = None) -> ResolvedPackage | None:
        """Find the first package matching a dependency declaration.

        Args:
            name: Key the dependency is declared under
            package: Explicit ``package`` rename, looked up instead of the key

        Returns:
            The first match in resolver order, or None
        """
        actual_name = package or name
        for resolved in self.packages.values():
            if resolved.name == actual_name:
                return resolved
        return None

    def external_packages(self) -> Iterator[ResolvedPackage]:
        """Iterate over packages that are not workspace members."""
        for package in self.packages.values():
            if not package.is_workspace_member:
                yield package

    def workspace_packages(self) -> list[ResolvedPackage]:
        """Get all workspace member packages."""
        return [pkg for pkg in self.packages.values() if pkg.is_workspace_member]
