# SPDX-License-Identifier: MIT
"""Localize dependencies of a Cargo project."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from cargo_localize import (
    DEFAULT_THIRD_PARTY_DIR,
    JsonMetadataProvider,
    LocalizeConfig,
    LocalizeError,
    LocalizeResult,
    localize as run_localize,
)

from ..main import Context, echo_error, echo_info, echo_success, pass_context


def _report(ctx: Context, result: LocalizeResult) -> None:
    """Print a summary of a finished run."""
    copied = result.vendor.copied
    echo_info(
        f"Vendored crates: {len(copied)} copied, "
        f"{len(result.vendor.already_present)} already present"
    )

    modified = [rewrite for rewrite in result.manifests if rewrite.modified]
    echo_info(f"Manifests updated: {len(modified)} of {len(result.manifests)}")

    if ctx.verbose:
        for rewrite in result.manifests:
            echo_info(f"  {rewrite.manifest_path}")
            echo_info(f"    Rewritten: {', '.join(rewrite.rewritten) or '-'}")
            for skipped in rewrite.skipped:
                echo_info(f"    Skipped: {skipped.key} ({skipped.reason})")

    if result.lockfile_removed:
        echo_info("Removed Cargo.lock")


@click.command()
@click.argument(
    "project_path",
    type=click.Path(path_type=Path),
    default=".",
)
@click.option(
    "--third-party-dir",
    default=None,
    help=f"Name of the vendor directory inside the project [default: {DEFAULT_THIRD_PARTY_DIR}].",
)
@click.option(
    "--cargo-home",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Cargo home whose registry cache is searched (defaults to $CARGO_HOME, ~/.cargo).",
)
@click.option(
    "--metadata-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Read resolution from a saved `cargo metadata --format-version 1` output.",
)
@click.option(
    "--no-fetch",
    is_flag=True,
    help="Do not run `cargo fetch` before reading metadata.",
)
@pass_context
def localize(
    ctx: Context,
    project_path: Path,
    third_party_dir: Optional[str],
    cargo_home: Optional[Path],
    metadata_file: Optional[Path],
    no_fetch: bool,
) -> None:
    """Localize all dependencies into a 3rd-party folder.

    Copies every registry dependency of the project at PROJECT_PATH into the
    vendor directory and rewrites Cargo.toml files to reference the copies
    by path, keeping the resolved feature sets. Cargo.lock is removed so it
    is regenerated against the local paths.

    \b
    Examples:
        cargo localize                          # Localize the current project
        cargo localize ../my-crate              # Localize another project
        cargo localize --third-party-dir vendor
        cargo localize --metadata-file meta.json --no-fetch
    """
    try:
        config = LocalizeConfig.from_project(
            project_path,
            third_party_dir=third_party_dir,
            cargo_home=cargo_home,
            fetch=False if no_fetch else None,
        )
        provider = JsonMetadataProvider(metadata_file) if metadata_file else None
        result = run_localize(config, provider)
    except LocalizeError as e:
        echo_error(f"[{e.stage}] {e}")
        raise SystemExit(1)

    _report(ctx, result)
    echo_success(f"Dependencies localized to {result.vendor_root}")
