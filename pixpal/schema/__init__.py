# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Schema definitions for palette extraction.

All types in this module are immutable (frozen dataclasses).
"""

from pixpal.schema.palette import (
    SCHEMA_VERSION,
    Lab,
    PaletteResult,
    RGBColor,
    SortKey,
)

__all__ = [
    # Version
    "SCHEMA_VERSION",
    # Core types
    "RGBColor",
    "Lab",
    "SortKey",
    # Top-level container
    "PaletteResult",
]
