# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Measurement core for Pixpal.

Deterministic, exact palette extraction from RGBA pixel buffers.
"""

from pixpal.measure.extract import (
    PaletteConfig,
    extract_palette,
    extract_palette_from_file,
)

__all__ = ["extract_palette", "extract_palette_from_file", "PaletteConfig"]
