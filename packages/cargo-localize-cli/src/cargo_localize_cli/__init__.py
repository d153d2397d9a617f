# SPDX-License-Identifier: MIT
"""Command line interface for cargo-localize."""

__version__ = "0.1.0"
