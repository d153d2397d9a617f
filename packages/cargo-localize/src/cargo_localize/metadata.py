# SPDX-License-Identifier: MIT
"""Sources of resolved dependency metadata.

The localization engine never invokes cargo itself. It consumes the JSON
document produced by ``cargo metadata --format-version 1`` through a
``MetadataProvider``, which lets tests and offline runs substitute a saved or
in-memory document for the real command.
"""

from __future__ import annotations

import json
import logging
import subprocess
from pathlib import Path
from typing import Any, Protocol

from .graph import ResolutionError

logger = logging.getLogger(__name__)


class MetadataError(ResolutionError):
    """Raised when resolution metadata cannot be obtained."""

    pass


class MetadataProvider(Protocol):
    """Produces a ``cargo metadata`` document for a project."""

    def load(self) -> dict[str, Any]:
        """Return the parsed metadata document."""
        ...


class StaticMetadataProvider:
    """Provider wrapping an already parsed metadata document."""

    def __init__(self, metadata: dict[str, Any]) -> None:
        self.metadata = metadata

    def load(self) -> dict[str, Any]:
        return self.metadata


class JsonMetadataProvider:
    """Provider reading a saved ``cargo metadata`` JSON file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> dict[str, Any]:
        logger.info("Reading metadata from %s", self.path)
        try:
            content = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise MetadataError(f"Failed to read metadata file {self.path}: {e}") from e
        return _parse_metadata(content, str(self.path))


class CargoMetadataProvider:
    """Provider running ``cargo fetch`` and ``cargo metadata``.

    Args:
        manifest_path: Path to the project's Cargo.toml
        fetch: Run ``cargo fetch`` first so every crate is in the cache
        cargo: Cargo executable to invoke
    """

    def __init__(
        self,
        manifest_path: str | Path,
        *,
        fetch: bool = True,
        cargo: str = "cargo",
    ) -> None:
        self.manifest_path = Path(manifest_path)
        self.fetch = fetch
        self.cargo = cargo

    def load(self) -> dict[str, Any]:
        if self.fetch:
            logger.info("Running cargo fetch...")
            self._run(["fetch", "--manifest-path", str(self.manifest_path)], capture=False)

        logger.info("Getting metadata...")
        result = self._run(
            [
                "metadata",
                "--format-version",
                "1",
                "--manifest-path",
                str(self.manifest_path),
            ],
            capture=True,
        )
        return _parse_metadata(result.stdout, "cargo metadata output")

    def _run(self, args: list[str], *, capture: bool) -> subprocess.CompletedProcess[str]:
        cmd = [self.cargo, *args]
        try:
            result = subprocess.run(
                cmd,
                cwd=self.manifest_path.parent,
                stdout=subprocess.PIPE if capture else None,
                stderr=subprocess.PIPE if capture else None,
                text=True,
                check=False,
            )
        except FileNotFoundError:
            raise MetadataError(f"Cargo executable not found: {self.cargo}") from None
        except OSError as e:
            raise MetadataError(f"Failed to run cargo {args[0]}: {e}") from e

        if result.returncode != 0:
            detail = f":\n{result.stderr}" if capture and result.stderr else ""
            raise MetadataError(
                f"cargo {args[0]} failed with exit status {result.returncode}{detail}"
            )
        return result


def _parse_metadata(content: str, origin: str) -> dict[str, Any]:
    try:
        metadata = json.loads(content)
    except json.JSONDecodeError as e:
        raise MetadataError(f"Invalid metadata JSON in {origin}: {e}") from e
    if not isinstance(metadata, dict):
        raise MetadataError(f"Invalid metadata in {origin}: expected a JSON object")
    return metadata
