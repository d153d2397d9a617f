# SPDX-License-Identifier: MIT
"""Copy located crate sources into the project's vendor root.

A vendored crate lives in ``{vendor_root}/{name}-{version}``. Existence of
that directory is the only state tracked: once present it is never copied
again nor compared against its cache source.
"""

from __future__ import annotations

import logging
import shutil
from dataclasses import dataclass, field
from pathlib import Path

from .config import LocalizeError
from .graph import DependencyGraph, ResolvedPackage
from .locator import PackageLocator

logger = logging.getLogger(__name__)


class CopyError(LocalizeError):
    """Raised when copying a crate source into the vendor root fails."""

    stage = "copy"


@dataclass
class VendoredPackage:
    """Information about a crate in the vendor root.

    Attributes:
        name: Crate name
        version: Crate version
        vendor_path: Directory of the crate inside the vendor root
        source_path: Cache directory it was copied from, None if it was
            already present
    """

    name: str
    version: str
    vendor_path: Path
    source_path: Path | None = None

    @property
    def copied(self) -> bool:
        """Whether this run copied the crate."""
        return self.source_path is not None


@dataclass
class VendorResult:
    """Result of a vendoring pass.

    Attributes:
        vendor_root: Directory where crates were vendored
        packages: Vendored crates, in graph order
    """

    vendor_root: Path
    packages: list[VendoredPackage] = field(default_factory=list)

    @property
    def copied(self) -> list[VendoredPackage]:
        """Crates copied by this run."""
        return [pkg for pkg in self.packages if pkg.copied]

    @property
    def already_present(self) -> list[VendoredPackage]:
        """Crates that were vendored by an earlier run."""
        return [pkg for pkg in self.packages if not pkg.copied]


class VendorCopier:
    """Copies every non-workspace package of a graph into the vendor root.

    Args:
        vendor_root: Directory receiving ``{name}-{version}`` subdirectories
        locator: Locator used to find crate sources in the cache
        use_manifest_paths: Pass the resolver-reported source directory to
            the locator as a hint
    """

    def __init__(
        self,
        vendor_root: Path,
        locator: PackageLocator,
        *,
        use_manifest_paths: bool = False,
    ) -> None:
        self.vendor_root = Path(vendor_root)
        self.locator = locator
        self.use_manifest_paths = use_manifest_paths

    def vendor(self, graph: DependencyGraph) -> VendorResult:
        """Vendor all external packages of the graph.

        Raises:
            LocateError: If a crate that still needs copying is not cached
            CopyError: If a copy fails; earlier copies are left in place
        """
        result = VendorResult(vendor_root=self.vendor_root)
        for package in graph.external_packages():
            result.packages.append(self.vendor_package(package))
        return result

    def vendor_package(self, package: ResolvedPackage) -> VendoredPackage:
        """Copy a single package unless it is already vendored."""
        logger.info(
            "Processing dependency: %s v%s with features: %s",
            package.name,
            package.version,
            list(package.features),
        )

        dest_path = self.vendor_root / package.dir_name
        if dest_path.exists():
            logger.info("  Already exists: %s", dest_path)
            return VendoredPackage(name=package.name, version=package.version, vendor_path=dest_path)

        hint = package.source_dir if self.use_manifest_paths else None
        source_path = self.locator.locate(package.name, package.version, hint=hint)

        try:
            self.vendor_root.mkdir(parents=True, exist_ok=True)
            shutil.copytree(source_path, self.vendor_root / source_path.name)
        except (OSError, shutil.Error) as e:
            raise CopyError(f"Failed to copy {source_path} to {self.vendor_root}: {e}") from e

        logger.info("  Copied: %s -> %s", source_path, dest_path)
        return VendoredPackage(
            name=package.name,
            version=package.version,
            vendor_path=dest_path,
            source_path=source_path,
        )
