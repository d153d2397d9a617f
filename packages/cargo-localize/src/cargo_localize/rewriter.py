# SPDX-License-Identifier: MIT
"""Rewrite Cargo manifests to depend on vendored crates by path.

Example:
    Original:
        [dependencies]
        foo = "1.0"

        [dependencies.bar]
        version = "2"
        git = "https://example.com/bar.git"

    Rewritten (vendor root ``3rd-party``):
        [dependencies]
        foo = {path = "3rd-party/foo-1.2.3", features = ["x", "y"]}

        [dependencies.bar]
        path = "3rd-party/bar-2.0.1"

The same ``DependencyGraph`` is used for the project manifest and for every
vendored crate's manifest, so each crate gets the same version and feature
set wherever it is referenced.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

from .backup import BackupManager
from .graph import DependencyGraph
from .manifest import (
    DependencyEntry,
    ManifestError,
    dump_manifest,
    iter_dependency_entries,
    parse_manifest,
)

logger = logging.getLogger(__name__)

# Reasons an entry is left untouched
SKIP_NOT_IN_METADATA = "not found in metadata"
SKIP_WORKSPACE_MEMBER = "workspace member"
SKIP_NOT_VENDORED = "not found in vendor directory"


@dataclass
class SkippedEntry:
    """A dependency declaration that was left unchanged.

    Attributes:
        key: Key the dependency is declared under
        package_name: Crate name that was looked up
        reason: Why the entry was not rewritten
    """

    key: str
    package_name: str
    reason: str


@dataclass
class RewriteResult:
    """Result of rewriting one manifest.

    Attributes:
        manifest_path: The rewritten manifest
        rewritten: Keys of entries now pointing at the vendor root
        skipped: Entries left unchanged
        backup_created: Whether this run created the ``.bak`` sidecar
        original_removed: Whether a stale ``.orig`` sidecar was removed
        modified: Whether the manifest content changed
    """

    manifest_path: Path
    rewritten: list[str] = field(default_factory=list)
    skipped: list[SkippedEntry] = field(default_factory=list)
    backup_created: bool = False
    original_removed: bool = False
    modified: bool = False


class ManifestRewriter:
    """Rewrites dependency declarations of manifests to local paths.

    Args:
        graph: Resolved graph shared by every manifest of the run
        vendor_root: Directory holding ``{name}-{version}`` crate copies
        backups: Sidecar manager for ``.bak`` and ``.orig`` files
    """

    def __init__(
        self,
        graph: DependencyGraph,
        vendor_root: Path,
        backups: BackupManager | None = None,
    ) -> None:
        self.graph = graph
        self.vendor_root = Path(vendor_root)
        self.backups = backups or BackupManager()

    def rewrite(self, manifest_path: Path) -> RewriteResult:
        """Rewrite a manifest in place.

        Args:
            manifest_path: Path to the Cargo.toml to rewrite

        Returns:
            RewriteResult describing the changes

        Raises:
            ManifestError: If the manifest cannot be backed up, read,
                parsed, rewritten or written
        """
        manifest_path = Path(manifest_path)
        result = RewriteResult(manifest_path=manifest_path)

        try:
            result.backup_created = self.backups.ensure_backup(manifest_path)
        except OSError as e:
            raise ManifestError(f"Failed to backup {manifest_path}: {e}") from e

        try:
            content = manifest_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise ManifestError(f"Failed to read {manifest_path}: {e}") from e

        document = parse_manifest(content, str(manifest_path))

        for entry in iter_dependency_entries(document):
            self._rewrite_entry(entry, manifest_path, result)

        rewritten = dump_manifest(document)
        result.modified = rewritten != content

        try:
            manifest_path.write_text(rewritten, encoding="utf-8")
        except OSError as e:
            raise ManifestError(f"Failed to write {manifest_path}: {e}") from e

        try:
            result.original_removed = self.backups.discard_original(manifest_path)
        except OSError as e:
            raise ManifestError(f"Failed to remove {manifest_path}.orig: {e}") from e

        return result

    def _rewrite_entry(
        self,
        entry: DependencyEntry,
        manifest_path: Path,
        result: RewriteResult,
    ) -> None:
        logger.debug("  Processing dependency: %s", entry.key)

        package = self.graph.find(entry.key, entry.package_name)
        if package is None:
            self._skip(entry, SKIP_NOT_IN_METADATA, result)
            return
        if package.is_workspace_member:
            self._skip(entry, SKIP_WORKSPACE_MEMBER, result)
            return

        dep_path = self.vendor_root / package.dir_name
        if not dep_path.exists():
            self._skip(entry, SKIP_NOT_VENDORED, result)
            return

        rel_path = relative_path(dep_path, manifest_path.parent)
        features = list(package.features)
        entry.localize(rel_path, features)
        result.rewritten.append(entry.key)
        logger.debug(
            "    Updated dependency: %s -> path = %s, features = %s",
            entry.key,
            rel_path,
            features,
        )

    def _skip(self, entry: DependencyEntry, reason: str, result: RewriteResult) -> None:
        logger.debug("    Skipping dependency: %s (%s)", entry.key, reason)
        result.skipped.append(
            SkippedEntry(key=entry.key, package_name=entry.package_name, reason=reason)
        )


def relative_path(target: Path, start: Path) -> str:
    """Compute the path from ``start`` to ``target`` with ``/`` separators.

    Raises:
        ManifestError: If no relative path exists (e.g. different drives)
    """
    try:
        rel = os.path.relpath(target, start)
    except ValueError as e:
        raise ManifestError(f"Failed to compute relative path from {start} to {target}: {e}") from e
    return Path(rel).as_posix()
