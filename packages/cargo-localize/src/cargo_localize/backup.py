# SPDX-License-Identifier: MIT
"""Sidecar files kept next to rewritten manifests."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"
ORIGINAL_SUFFIX = ".orig"


class BackupManager:
    """Creates one-time pristine copies of manifests.

    A backup is written the first time a manifest is about to be rewritten
    and is never refreshed afterwards, so it always holds the content from
    before the first localization run.
    """

    def __init__(
        self,
        backup_suffix: str = BACKUP_SUFFIX,
        original_suffix: str = ORIGINAL_SUFFIX,
    ) -> None:
        self.backup_suffix = backup_suffix
        self.original_suffix = original_suffix

    def backup_path(self, manifest_path: Path) -> Path:
        """Path of the backup sidecar, e.g. ``Cargo.toml.bak``."""
        return manifest_path.with_name(manifest_path.name + self.backup_suffix)

    def original_path(self, manifest_path: Path) -> Path:
        """Path of the packaging artifact sidecar, e.g. ``Cargo.toml.orig``."""
        return manifest_path.with_name(manifest_path.name + self.original_suffix)

    def ensure_backup(self, manifest_path: Path) -> bool:
        """Back up a manifest unless a backup already exists.

        Returns:
            True if a backup was created by this call

        Raises:
            OSError: If the copy fails
        """
        backup = self.backup_path(manifest_path)
        if backup.exists():
            return False
        shutil.copyfile(manifest_path, backup)
        logger.debug("  Backed up %s to %s", manifest_path, backup)
        return True

    def discard_original(self, manifest_path: Path) -> bool:
        """Remove a stale ``.orig`` sidecar, ignoring its absence.

        Returns:
            True if a file was removed

        Raises:
            OSError: If the file exists but cannot be removed
        """
        original = self.original_path(manifest_path)
        try:
            original.unlink()
        except FileNotFoundError:
            return False
        logger.debug("  Removed %s", original)
        return True
