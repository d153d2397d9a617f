# SPDX-License-Identifier: MIT
"""Vendoring of Cargo dependencies and manifest rewriting.

This package copies every registry dependency of a Cargo project into a
project-local directory and rewrites the project's manifest, and the manifest
of every vendored crate, to reference those copies by path with the features
the resolver selected.

Example:
    >>> from cargo_localize import LocalizeConfig, localize
    >>>
    >>> config = LocalizeConfig.from_project(".")
    >>> result = localize(config)
    >>> print(f"Vendored {len(result.vendor.copied)} crates into {result.vendor_root}")
"""

__version__ = "0.1.0"

from .backup import BackupManager
from .config import (
    DEFAULT_THIRD_PARTY_DIR,
    ConfigurationError,
    LocalizeConfig,
    LocalizeError,
)
from .copier import CopyError, VendorCopier, VendoredPackage, VendorResult
from .graph import DependencyGraph, ResolutionError, ResolvedPackage
from .localizer import LocalizeResult, localize
from .locator import LocateError, PackageLocator, default_cache_roots
from .manifest import (
    BlockRecord,
    DependencyEntry,
    DottedRecord,
    InlineRecord,
    ManifestError,
    Shorthand,
    iter_dependency_entries,
)
from .metadata import (
    CargoMetadataProvider,
    JsonMetadataProvider,
    MetadataError,
    MetadataProvider,
    StaticMetadataProvider,
)
from .rewriter import ManifestRewriter, RewriteResult, SkippedEntry

__all__ = [
    # Config
    "LocalizeConfig",
    "DEFAULT_THIRD_PARTY_DIR",
    # Errors
    "LocalizeError",
    "ConfigurationError",
    "ResolutionError",
    "MetadataError",
    "LocateError",
    "CopyError",
    "ManifestError",
    # Metadata
    "MetadataProvider",
    "CargoMetadataProvider",
    "JsonMetadataProvider",
    "StaticMetadataProvider",
    # Graph
    "DependencyGraph",
    "ResolvedPackage",
    # Locator
    "PackageLocator",
    "default_cache_roots",
    # Copier
    "VendorCopier",
    "VendoredPackage",
    "VendorResult",
    # Manifest
    "DependencyEntry",
    "Shorthand",
    "InlineRecord",
    "BlockRecord",
    "DottedRecord",
    "iter_dependency_entries",
    # Rewriter
    "BackupManager",
    "ManifestRewriter",
    "RewriteResult",
    "SkippedEntry",
    # Localizer
    "localize",
    "LocalizeResult",
]
