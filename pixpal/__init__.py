# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Pixpal -- Exact palette detection for pixel art.

Extracts every distinct, visible color of an image, suppresses
near-duplicates by perceptual distance (ΔE) and orders the result
into hue bands.

Quick start::

    from pixpal import extract_palette

    result = extract_palette(rgba_bytes, threshold=1.0, min_alpha=10, max_colors=30)
    result.hex_colors   # ("#0a0a0aff", "#c83232ff", ...)
    result.overflowed   # True if the image has more colors than max_colors
"""

from __future__ import annotations

__version__ = "1.0.0"

from pixpal.measure import PaletteConfig, extract_palette, extract_palette_from_file
from pixpal.schema import PaletteResult, RGBColor

__all__ = [
    # Core API
    "extract_palette",
    "extract_palette_from_file",
    "PaletteConfig",
    "PaletteResult",
    # Types
    "RGBColor",
    # Version
    "__version__",
]
