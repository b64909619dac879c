# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Serializers for PaletteResult delivery.

All serializers preserve the palette order exactly.
"""

from __future__ import annotations

import json
from enum import Enum

from pixpal.schema import PaletteResult

# Appended to text output when the palette was truncated
OVERFLOW_MARK = "+"


class SerializerFormat(Enum):
    """Output format for serializers."""

    JSON = "json"
    JSON_PRETTY = "json_pretty"
    NATURAL = "natural"
    HEX = "hex"


def to_output(
    result: PaletteResult,
    format: SerializerFormat = SerializerFormat.JSON,
) -> str:
    """Serialize a PaletteResult.

    Args:
        result: The palette to serialize.
        format: Output format.

    Returns:
        String in the requested format.

    Example (NATURAL)::

        Palette (2): #0a0a0aff #c83232ff
    """
    if format == SerializerFormat.NATURAL:
        return to_text(result)
    if format == SerializerFormat.HEX:
        return "\n".join(result.hex_colors)

    data = {
        "colors": list(result.hex_colors),
        "overflowed": result.overflowed,
        "count": result.count,
    }
    if format == SerializerFormat.JSON_PRETTY:
        return json.dumps(data, indent=2)
    return json.dumps(data, separators=(",", ":"))


def to_text(result: PaletteResult) -> str:
    """One-line human-readable palette."""
    parts = [f"Palette ({result.count}):", *result.hex_colors]
    if result.overflowed:
        parts.append(OVERFLOW_MARK)
    return " ".join(parts)
