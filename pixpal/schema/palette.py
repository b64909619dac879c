# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
PaletteResult v1.0: canonical schema for palette extraction.

Design principles:
- Immutable: All types are frozen dataclasses
- Deterministic: Same pixels and parameters → same palette
- Exact: Palette entries are real pixel values, never blended
- Serializable: JSON-ready for UI and export layers

Colors carry no alpha. Alpha only decides whether a pixel takes part in
extraction; every palette entry is reported as fully opaque.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Iterator


# =============================================================================
# Schema Version
# =============================================================================

SCHEMA_VERSION = "1.0"


# CIE L*a*b* triple (L, a, b)
Lab = tuple[float, float, float]


# =============================================================================
# Core Color Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class RGBColor:
    """
    A single palette color as an sRGB byte triple.

    Identity is exact channel equality.

    Attributes:
        r: Red channel (0-255)
        g: Green channel (0-255)
        b: Blue channel (0-255)
    """
    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        """Validate channels are bytes."""
        for name in ("r", "g", "b"):
            value = getattr(self, name)
            if not 0 <= value <= 255:
                raise ValueError(f"Channel {name} must be 0-255, got {value}")

    @property
    def key(self) -> int:
        """Packed 24-bit 0xRRGGBB value."""
        return (self.r << 16) | (self.g << 8) | self.b

    @property
    def hex(self) -> str:
        """
        Opaque hex code.

        Returns:
            Hex string like "#c83232ff"
        """
        from pixpal.measure.colorspace import rgba_to_hex
        return rgba_to_hex(self.r, self.g, self.b, 1.0)

    def as_tuple(self) -> tuple[int, int, int]:
        return (self.r, self.g, self.b)

    @classmethod
    def from_key(cls, key: int) -> RGBColor:
        return cls(r=(key >> 16) & 0xFF, g=(key >> 8) & 0xFF, b=key & 0xFF)

    @classmethod
    def from_hex(cls, hex_color: str) -> RGBColor:
        """Parse "#rrggbb" or "#rrggbbaa". Any alpha suffix is dropped."""
        from pixpal.measure.colorspace import hex_to_rgb
        r, g, b = hex_to_rgb(hex_color)
        return cls(r=r, g=g, b=b)

    def to_dict(self) -> dict:
        """Serialize to dictionary."""
        return {"r": self.r, "g": self.g, "b": self.b, "hex": self.hex}

    @classmethod
    def from_dict(cls, data: dict) -> RGBColor:
        """Deserialize from dictionary."""
        return cls(r=data["r"], g=data["g"], b=data["b"])


@dataclass(frozen=True, slots=True)
class SortKey:
    """
    Coarsened ordering key for step sorting.

    Each component is ``floor(x * repetitions)`` of the raw hue,
    luminance and value of a color.
    """
    hue: int
    luminance: int
    value: int


# =============================================================================
# Top-level Result
# =============================================================================


@dataclass(frozen=True)
class PaletteResult:
    """
    Result of one palette extraction.

    Attributes:
        colors: Distinct palette colors in step-sorted order
        overflowed: True if the image holds more distinct colors than the
            requested cap. ``colors`` then contains the first ``count``
            accepted in raster order.
        count: Number of accepted colors (always ``len(colors)``)
        schema_version: Schema version for compatibility
    """
    colors: tuple[RGBColor, ...]
    overflowed: bool = False
    count: int = -1
    schema_version: str = SCHEMA_VERSION

    def __post_init__(self) -> None:
        """Default the count and validate the palette is duplicate free."""
        if not isinstance(self.colors, tuple):
            object.__setattr__(self, "colors", tuple(self.colors))
        if self.count == -1:
            object.__setattr__(self, "count", len(self.colors))
        if self.count != len(self.colors):
            raise ValueError(
                f"count ({self.count}) does not match number of colors ({len(self.colors)})"
            )
        if len(set(self.colors)) != len(self.colors):
            raise ValueError("Palette contains duplicate colors")

    def __len__(self) -> int:
        return len(self.colors)

    def __iter__(self) -> Iterator[RGBColor]:
        return iter(self.colors)

    @property
    def hex_colors(self) -> tuple[str, ...]:
        """Ordered palette as ``#rrggbbaa`` strings."""
        return tuple(c.hex for c in self.colors)

    def to_dict(self) -> dict:
        """Serialize to the flat form handed to UI consumers."""
        return {
            "schema_version": self.schema_version,
            "colors": list(self.hex_colors),
            "overflowed": self.overflowed,
            "count": self.count,
        }

    def to_json(self, indent: int | None = None) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, data: dict) -> PaletteResult:
        """Deserialize from dictionary (hex strings or channel dicts)."""
        colors = tuple(
            RGBColor.from_hex(c) if isinstance(c, str) else RGBColor.from_dict(c)
            for c in data["colors"]
        )
        return cls(
            colors=colors,
            overflowed=data.get("overflowed", False),
            count=data.get("count", len(colors)),
            schema_version=data.get("schema_version", SCHEMA_VERSION),
        )

    @classmethod
    def from_json(cls, json_str: str) -> PaletteResult:
        """Deserialize from JSON string."""
        return cls.from_dict(json.loads(json_str))
