# SPDX-License-Identifier: MIT
"""CLI command implementations."""

from . import localize

__all__ = ["localize"]
