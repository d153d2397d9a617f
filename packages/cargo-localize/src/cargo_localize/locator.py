# SPDX-License-Identifier: MIT
"""Locate extracted crate sources in the Cargo package cache."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .config import LocalizeError

logger = logging.getLogger(__name__)

# Depth below each registry directory that is searched for crate sources
REGISTRY_SEARCH_DEPTH = 2


class LocateError(LocalizeError):
    """Raised when a crate source cannot be found in any cache root."""

    stage = "locate"


def default_cache_roots(cargo_home: str | Path | None = None) -> list[Path]:
    """Get the existing cache roots in search order.

    An explicit ``cargo_home`` takes the place of the ``CARGO_HOME``
    environment variable; the per-user ``~/.cargo`` cache is always tried
    afterwards.

    Args:
        cargo_home: Cargo home override

    Returns:
        Existing ``registry/src`` directories, without duplicates
    """
    candidates: list[Path] = []
    home = cargo_home or os.environ.get("CARGO_HOME")
    if home:
        candidates.append(Path(home).expanduser() / "registry" / "src")
    candidates.append(Path.home() / ".cargo" / "registry" / "src")

    roots: list[Path] = []
    for candidate in candidates:
        if candidate.is_dir() and candidate not in roots:
            roots.append(candidate)
    return roots


class PackageLocator:
    """Finds ``{name}-{version}`` directories below one or more cache roots.

    Each cache root holds one subdirectory per registry. Within a registry the
    search descends at most ``REGISTRY_SEARCH_DEPTH`` levels and returns the
    first directory whose name matches exactly. Traversal order is whatever
    the filesystem yields, so if several registries hold the same crate
    version the one returned is not guaranteed.
    """

    def __init__(self, cache_roots: list[Path]) -> None:
        self.cache_roots = [Path(root) for root in cache_roots]

    def locate(self, name: str, version: str, hint: Path | None = None) -> Path:
        """Find the extracted source directory of a crate.

        Args:
            name: Crate name
            version: Exact crate version
            hint: Source directory reported by the resolver; used as-is when
                it exists and carries the expected name

        Returns:
            Path to the crate source directory

        Raises:
            LocateError: If no cache root contains the crate
        """
        target = f"{name}-{version}"
        logger.debug("  Looking for crate source: %s", target)

        if hint is not None and hint.name == target and hint.is_dir():
            logger.debug("    Using resolver location: %s", hint)
            return hint

        if not self.cache_roots:
            raise LocateError(f"Failed to find Cargo registry directory for crate {name}:{version}")

        for root in self.cache_roots:
            found = self._search_root(root, target)
            if found is not None:
                logger.debug("    Found: %s", found)
                return found

        searched = ", ".join(str(root) for root in self.cache_roots)
        raise LocateError(f"Crate {name}:{version} not found in Cargo registry at {searched}")

    def _search_root(self, root: Path, target: str) -> Path | None:
        try:
            registries = [entry for entry in os.scandir(root) if entry.is_dir()]
        except OSError as e:
            raise LocateError(f"Failed to read Cargo registry directory {root}: {e}") from e

        for registry in registries:
            logger.debug("    Searching in registry: %s", registry.path)
            found = _search_registry(Path(registry.path), target, REGISTRY_SEARCH_DEPTH)
            if found is not None:
                return found
        return None


def _search_registry(registry: Path, target: str, max_depth: int) -> Path | None:
    """Depth-bounded search for a directory named ``target``."""

    def _raise(error: OSError) -> None:
        raise LocateError(f"Failed to search {registry}: {error}") from error

    for dirpath, dirnames, _ in os.walk(registry, onerror=_raise):
        if target in dirnames:
            return Path(dirpath) / target
        depth = len(Path(dirpath).relative_to(registry).parts)
        if depth + 1 >= max_depth:
            dirnames[:] = []
    return None
