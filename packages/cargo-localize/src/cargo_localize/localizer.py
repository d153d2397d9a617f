# SPDX-License-Identifier: MIT
"""Run a complete localization of a Cargo project.

This module wires the stages together:
1. Load resolution metadata through a MetadataProvider
2. Copy every non-workspace crate into the vendor root
3. Rewrite the project manifest and every vendored manifest
4. Delete Cargo.lock so it is regenerated against the local paths

Every stage fails fast. Work finished before a failure (copied crates,
rewritten manifests) stays on disk.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .config import LocalizeConfig, LocalizeError, MANIFEST_NAME
from .copier import CopyError, VendorCopier, VendorResult
from .graph import DependencyGraph
from .locator import PackageLocator, default_cache_roots
from .metadata import CargoMetadataProvider, MetadataProvider
from .rewriter import ManifestRewriter, RewriteResult

logger = logging.getLogger(__name__)


@dataclass
class LocalizeResult:
    """Result of a localization run.

    Attributes:
        vendor_root: Directory holding the vendored crates
        vendor: Result of the vendoring pass
        manifests: Results of each manifest rewrite, project manifest first
        lockfile_removed: Whether Cargo.lock was deleted
    """

    vendor_root: Path
    vendor: VendorResult
    manifests: list[RewriteResult] = field(default_factory=list)
    lockfile_removed: bool = False


def build_locator(config: LocalizeConfig) -> PackageLocator:
    """Create the package locator for a configuration."""
    cache_roots = config.cache_roots or default_cache_roots(config.cargo_home)
    for root in cache_roots:
        logger.info("Using cargo registry: %s", root)
    return PackageLocator(cache_roots)


def localize(
    config: LocalizeConfig,
    provider: MetadataProvider | None = None,
) -> LocalizeResult:
    """Vendor all dependencies of a project and rewrite its manifests.

    Args:
        config: Localization configuration
        provider: Source of resolution metadata (default: run cargo)

    Returns:
        LocalizeResult with per-stage information

    Raises:
        LocalizeError: On the first fatal error of any stage
    """
    if provider is None:
        provider = CargoMetadataProvider(config.root_manifest, fetch=config.fetch)

    graph = DependencyGraph.from_metadata(provider.load())
    vendor_root = config.vendor_root

    try:
        vendor_root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise CopyError(f"Failed to create {config.third_party_dir} directory: {e}") from e

    for package in graph.workspace_packages():
        logger.info("Skipping workspace package: %s", package.name)

    logger.info("Copying dependencies...")
    copier = VendorCopier(
        vendor_root,
        build_locator(config),
        use_manifest_paths=config.use_manifest_paths,
    )
    vendor_result = copier.vendor(graph)

    logger.info("Updating Cargo.toml files...")
    result = LocalizeResult(vendor_root=vendor_root, vendor=vendor_result)
    rewriter = ManifestRewriter(graph, vendor_root)

    logger.info("Updating main Cargo.toml")
    result.manifests.append(rewriter.rewrite(config.root_manifest))

    for manifest_path in vendored_manifests(graph, vendor_root):
        logger.info("Updating dependency Cargo.toml: %s", manifest_path)
        result.manifests.append(rewriter.rewrite(manifest_path))

    if config.remove_lockfile and config.lockfile.exists():
        try:
            config.lockfile.unlink()
        except OSError as e:
            raise LocalizeError(f"Failed to remove {config.lockfile}: {e}") from e
        result.lockfile_removed = True

    return result


def vendored_manifests(graph: DependencyGraph, vendor_root: Path) -> list[Path]:
    """Get the manifests of vendored crates, one per vendor directory."""
    manifests: list[Path] = []
    for package in graph.external_packages():
        manifest_path = vendor_root / package.dir_name / MANIFEST_NAME
        if manifest_path not in manifests and manifest_path.exists():
            manifests.append(manifest_path)
    return manifests
