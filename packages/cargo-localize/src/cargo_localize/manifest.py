# SPDX-License-Identifier: MIT
"""Format-preserving access to dependency declarations in Cargo.toml.

A dependency can be declared in four shapes:

    [dependencies]
    serde = "1.0"                                   # Shorthand
    rand = { version = "0.8", features = ["std"] }  # InlineRecord

    [dependencies.tokio]                            # BlockRecord
    version = "1"

    [dependencies]
    log.version = "0.4"                             # DottedRecord
    log.features = ["std"]

Each shape is wrapped in a ``DependencyEntry`` offering the same read and
mutate operations, so callers handle all of them uniformly. Documents are
parsed with tomlkit so comments and layout outside the edited entries survive
a rewrite unchanged.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterator, Mapping

import tomlkit
from tomlkit.container import Container
from tomlkit.exceptions import TOMLKitError
from tomlkit.items import Array, InlineTable, Item, Key, String, Table
from tomlkit.toml_document import TOMLDocument

from .config import LocalizeError

# Dependency tables visited at the document root and in each [target.*] block
DEPENDENCY_SECTIONS = ("dependencies", "dev-dependencies", "build-dependencies")

# Fields that point a dependency at a remote source
REMOTE_SOURCE_FIELDS = ("version", "git", "branch", "tag", "rev", "registry")

# Inherits the source from [workspace.dependencies]; Cargo rejects it next to `path`
INHERITED_SOURCE_FIELD = "workspace"


class ManifestError(LocalizeError):
    """Raised when a manifest cannot be read, parsed, rewritten or written."""

    stage = "manifest"


def parse_manifest(content: str, origin: str = "<string>") -> TOMLDocument:
    """Parse manifest text into a format-preserving document.

    Raises:
        ManifestError: If the content is not valid TOML
    """
    try:
        return tomlkit.parse(content)
    except TOMLKitError as e:
        raise ManifestError(f"Failed to parse {origin}: {e}") from e


def dump_manifest(document: TOMLDocument) -> str:
    """Serialize a document, reproducing untouched regions verbatim."""
    return tomlkit.dumps(document)


def _feature_array(features: list[str]) -> Array:
    array = tomlkit.array()
    for feature in features:
        array.append(feature)
    return array


def _set_field(fields: InlineTable | Table, name: str, value: Any) -> None:
    # Replace in place to keep position and trailing comment
    if name in fields:
        fields[name] = value
    else:
        fields.append(name, value)


def _renamed_package(fields: Mapping[str, Any], key: str) -> str:
    renamed = fields.get("package")
    if isinstance(renamed, str) and renamed:
        return str(renamed)
    return key


@dataclass
class DependencyEntry(ABC):
    """One dependency declaration inside a dependency table.

    Attributes:
        key: Key the dependency is declared under
        parent: Dependency table holding the declaration
    """

    key: str
    parent: Table

    @property
    def package_name(self) -> str:
        """Crate name to look up: the ``package`` rename, else the key."""
        return self.key

    @abstractmethod
    def localize(self, path: str, features: list[str]) -> None:
        """Point this declaration at a local path.

        Args:
            path: Relative path to the vendored crate
            features: Features to enable; omitted when empty
        """


@dataclass
class Shorthand(DependencyEntry):
    """``name = "version"``"""

    version: str = ""

    def localize(self, path: str, features: list[str]) -> None:
        table = tomlkit.inline_table()
        table.append("path", path)
        if features:
            table.append("features", _feature_array(features))
        self.parent[self.key] = table


@dataclass
class _RecordEntry(DependencyEntry):
    fields: InlineTable | Table

    @property
    def package_name(self) -> str:
        return _renamed_package(self.fields, self.key)

    def localize(self, path: str, features: list[str]) -> None:
        for name in (*REMOTE_SOURCE_FIELDS, INHERITED_SOURCE_FIELD):
            if name in self.fields:
                del self.fields[name]
        _set_field(self.fields, "path", path)
        if features:
            _set_field(self.fields, "features", _feature_array(features))


@dataclass
class InlineRecord(_RecordEntry):
    """``name = { version = "...", ... }``"""


@dataclass
class BlockRecord(_RecordEntry):
    """``[dependencies.name]`` followed by its fields."""


@dataclass
class DottedRecord(DependencyEntry):
    """``name.version = "..."``, possibly spread over several lines.

    tomlkit keeps one table fragment per dotted line, so the declaration is
    rebuilt as a single inline table when localized.
    """

    fragments: list[Table]

    def _merged(self) -> dict[str, Any]:
        merged: dict[str, Any] = {}
        for fragment in self.fragments:
            merged.update(fragment.unwrap())
        return merged

    @property
    def package_name(self) -> str:
        return _renamed_package(self._merged(), self.key)

    def localize(self, path: str, features: list[str]) -> None:
        merged = self._merged()
        for name in (*REMOTE_SOURCE_FIELDS, INHERITED_SOURCE_FIELD, "path"):
            merged.pop(name, None)
        merged["path"] = path
        if features:
            merged["features"] = features

        table = tomlkit.inline_table()
        for name, value in merged.items():
            table.append(name, _feature_array(value) if name == "features" else value)

        # Removes every fragment; the rebuilt table joins the plain values
        del self.parent[self.key]
        self.parent.append(self.key, table)


def entry_from_item(key: str, item: Item, parent: Table) -> DependencyEntry | None:
    """Wrap a table value in the matching entry variant.

    Returns:
        The entry, or None for values that are not dependency declarations
    """
    if isinstance(item, String):
        return Shorthand(key=key, parent=parent, version=str(item))
    if isinstance(item, InlineTable):
        return InlineRecord(key=key, parent=parent, fields=item)
    if isinstance(item, Table):
        return BlockRecord(key=key, parent=parent, fields=item)
    return None


def _tables_named(container: Container, name: str) -> Iterator[Table]:
    # Walks the raw body so headers split across the file are all visited
    for key, item in container.body:
        if key is not None and key.key == name and isinstance(item, Table):
            yield item


def iter_dependency_tables(document: TOMLDocument) -> Iterator[Table]:
    """Iterate over every dependency table of a manifest.

    Yields the root ``dependencies``, ``dev-dependencies`` and
    ``build-dependencies`` tables first, then the same sections of every
    ``[target.<platform>]`` block.
    """
    for section in DEPENDENCY_SECTIONS:
        yield from _tables_named(document, section)

    for target in _tables_named(document, "target"):
        for key, platform in target.value.body:
            if key is None or not isinstance(platform, Table):
                continue
            for section in DEPENDENCY_SECTIONS:
                yield from _tables_named(platform.value, section)


def _declarations(table: Table) -> dict[str, list[tuple[Key, Item]]]:
    """Group the body of a dependency table by key, in declaration order."""
    declared: dict[str, list[tuple[Key, Item]]] = {}
    for key, item in table.value.body:
        if key is not None:
            declared.setdefault(key.key, []).append((key, item))
    return declared


def iter_dependency_entries(document: TOMLDocument) -> Iterator[DependencyEntry]:
    """Iterate over all dependency declarations of a manifest.

    Each key of a dependency table yields exactly one entry, however many
    dotted lines declare it.
    """
    for table in iter_dependency_tables(document):
        for name, parts in _declarations(table).items():
            if len(parts) == 1 and not parts[0][0].is_dotted():
                entry = entry_from_item(name, parts[0][1], table)
            elif all(isinstance(item, Table) for _, item in parts):
                entry = DottedRecord(
                    key=name, parent=table, fragments=[item for _, item in parts]
                )
            else:
                entry = None
            if entry is not None:
                yield entry
