# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Main palette extraction API.

This is the primary entry point for Pixpal's measurement core.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from pixpal.schema import PaletteResult
from pixpal.measure.accumulator import PaletteAccumulator
from pixpal.measure.sorting import step_sort

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 1.0  # "perceptible through close observation"
DEFAULT_MIN_ALPHA = 10
DEFAULT_MAX_COLORS = 30

PixelBuffer = Union[bytes, bytearray, memoryview, NDArray[np.uint8], Sequence[int]]


@dataclass(frozen=True)
class PaletteConfig:
    """Parameters for one palette extraction."""

    # ΔE at or below which a new color is a near-duplicate of an accepted one.
    # 0 keeps every byte-distinct color.
    threshold: float = DEFAULT_THRESHOLD

    # Pixels with alpha <= min_alpha never contribute
    min_alpha: int = DEFAULT_MIN_ALPHA

    # Palette cap; one more distinct color sets the overflow flag
    max_colors: int = DEFAULT_MAX_COLORS

    def __post_init__(self) -> None:
        """Validate parameter ranges."""
        if math.isnan(self.threshold) or self.threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {self.threshold}")
        if not 0 <= self.min_alpha <= 255:
            raise ValueError(f"min_alpha must be 0-255, got {self.min_alpha}")
        if self.max_colors < 0:
            raise ValueError(f"max_colors must be >= 0, got {self.max_colors}")


def extract_palette(
    pixels: PixelBuffer,
    config: Optional[PaletteConfig] = None,
    *,
    threshold: Optional[float] = None,
    min_alpha: Optional[int] = None,
    max_colors: Optional[int] = None,
) -> PaletteResult:
    """
    Extract the distinct, step-sorted palette of an RGBA pixel buffer.

    Args:
        pixels: Row-major RGBA bytes. One of:
            - bytes / bytearray / memoryview of length 4 * N
            - uint8 array of shape (4 * N,), (N, 4) or (H, W, 4)
            - Sequence of ints in 0-255
        config: Extraction parameters (defaults if None)
        threshold: Override for config.threshold
        min_alpha: Override for config.min_alpha
        max_colors: Override for config.max_colors

    Returns:
        PaletteResult with colors in display order

    Raises:
        ValueError: Malformed buffer or out-of-range parameter
        TypeError: Unsupported buffer type, or config combined with overrides

    Example:
        >>> from pixpal import extract_palette
        >>> result = extract_palette(bytes([10, 10, 10, 255, 200, 50, 50, 255]))
        >>> result.hex_colors
        ('#0a0a0aff', '#c83232ff')
    """
    cfg = _resolve_config(config, threshold, min_alpha, max_colors)
    rgba = _as_rgba(pixels)

    logger.debug(
        "Extracting palette from %d pixels (threshold=%s, min_alpha=%d, max_colors=%d)",
        len(rgba), cfg.threshold, cfg.min_alpha, cfg.max_colors,
    )

    acc = PaletteAccumulator(
        threshold=cfg.threshold,
        min_alpha=cfg.min_alpha,
        max_colors=cfg.max_colors,
    )
    acc.consume(rgba)

    if acc.overflowed:
        logger.debug("Scan stopped after %d of %d pixels", acc.pixels_scanned, len(rgba))

    result = PaletteResult(colors=tuple(step_sort(acc.colors)), overflowed=acc.overflowed)
    logger.debug("Palette has %d colors (overflowed=%s)", result.count, result.overflowed)
    return result


def extract_palette_from_file(
    path: Union[str, Path],
    config: Optional[PaletteConfig] = None,
    **overrides,
) -> PaletteResult:
    """Decode an image file and extract its palette."""
    from pixpal.measure.image_io import load_rgba

    return extract_palette(load_rgba(path), config, **overrides)


def _resolve_config(
    config: Optional[PaletteConfig],
    threshold: Optional[float],
    min_alpha: Optional[int],
    max_colors: Optional[int],
) -> PaletteConfig:
    overrides = {
        name: value
        for name, value in (
            ("threshold", threshold),
            ("min_alpha", min_alpha),
            ("max_colors", max_colors),
        )
        if value is not None
    }
    if config is not None:
        if overrides:
            raise TypeError("Pass either config or keyword overrides, not both")
        return config
    return PaletteConfig(**overrides)


def _as_rgba(pixels: PixelBuffer) -> NDArray[np.uint8]:
    """
    Validate a pixel buffer and view it as (N, 4) uint8.

    Never reads a trailing partial pixel: such buffers are rejected.
    """
    if isinstance(pixels, (bytes, bytearray, memoryview)):
        arr = np.frombuffer(pixels, dtype=np.uint8)
    elif isinstance(pixels, np.ndarray):
        arr = pixels
        if arr.dtype != np.uint8:
            raise ValueError(f"Expected uint8 array, got {arr.dtype}")
        if arr.ndim in (2, 3) and arr.shape[-1] != 4:
            raise ValueError(f"Expected RGBA array (..., 4), got shape {arr.shape}")
        if arr.ndim > 3:
            raise ValueError(f"Expected at most 3 dimensions, got shape {arr.shape}")
    elif isinstance(pixels, Sequence) and not isinstance(pixels, str):
        values = np.asarray(pixels, dtype=np.int64).ravel()
        if values.size and (values.min() < 0 or values.max() > 255):
            raise ValueError("Pixel values must be 0-255")
        arr = values.astype(np.uint8)
    else:
        raise TypeError(f"Expected a byte buffer, uint8 array or int sequence, got {type(pixels)}")

    flat = arr.reshape(-1)
    if flat.size % 4 != 0:
        raise ValueError(
            f"Pixel buffer length {flat.size} is not a multiple of 4 (RGBA)"
        )
    return flat.reshape(-1, 4)
