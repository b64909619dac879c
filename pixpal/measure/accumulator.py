# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Palette accumulation with near-duplicate suppression.

Pixels are consumed in raster order. A pixel joins the palette unless:
1. Its alpha is <= min_alpha
2. Its RGB exactly matches an accepted color
3. threshold != 0 and ΔE(accepted, pixel) <= threshold for some accepted color

The first color encountered always wins over later near-duplicates.
Once the palette holds max_colors entries, the next new color sets the
overflow flag and scanning stops.
"""

from __future__ import annotations

import logging
import math

import numpy as np
from numpy.typing import NDArray

from pixpal.schema import RGBColor
from pixpal.measure.colorspace import delta_e_batch, rgb_to_lab

logger = logging.getLogger(__name__)

# Pixels per vectorized scan step
CHUNK_PIXELS = 65536


class PaletteAccumulator:
    """
    Incremental palette builder.

    Args:
        threshold: ΔE at or below which a color is a near-duplicate.
            0 disables perceptual suppression (exact dedup only).
        min_alpha: Pixels with alpha <= min_alpha are ignored
        max_colors: Palette cap

    Example:
        >>> acc = PaletteAccumulator(threshold=0, min_alpha=10, max_colors=2)
        >>> acc.consume(np.array([[10, 10, 10, 255], [200, 50, 50, 255]], dtype=np.uint8)).colors
        [RGBColor(r=10, g=10, b=10), RGBColor(r=200, g=50, b=50)]
    """

    def __init__(self, threshold: float = 1.0, min_alpha: int = 10, max_colors: int = 30):
        if math.isnan(threshold) or threshold < 0:
            raise ValueError(f"threshold must be >= 0, got {threshold}")
        if not 0 <= min_alpha <= 255:
            raise ValueError(f"min_alpha must be 0-255, got {min_alpha}")
        if max_colors < 0:
            raise ValueError(f"max_colors must be >= 0, got {max_colors}")

        self.threshold = float(threshold)
        self.min_alpha = int(min_alpha)
        self.max_colors = int(max_colors)

        self.overflowed = False
        self.pixels_scanned = 0
        self._colors: list[RGBColor] = []
        # Every RGB key already decided (accepted or suppressed). The accepted
        # set only grows, so a repeated key always gets the same decision.
        self._seen: set[int] = set()
        self._labs: NDArray[np.float64] = np.empty((min(max_colors, 64), 3), dtype=np.float64)

    def __len__(self) -> int:
        return len(self._colors)

    @property
    def colors(self) -> list[RGBColor]:
        """Accepted colors in acceptance (raster) order."""
        return list(self._colors)

    def add(self, r: int, g: int, b: int, a: int = 255) -> bool:
        """
        Offer one pixel.

        Returns:
            False once the accumulator has overflowed, True otherwise.
        """
        if self.overflowed:
            return False
        self.pixels_scanned += 1
        if a <= self.min_alpha:
            return True
        return self._offer(RGBColor(r, g, b).key)

    def consume(self, pixels: NDArray[np.uint8]) -> PaletteAccumulator:
        """
        Scan an RGBA buffer in raster order.

        Args:
            pixels: uint8 array of shape (N, 4)

        Returns:
            self, for chaining
        """
        rgba = np.asarray(pixels, dtype=np.uint8).reshape(-1, 4)

        for start in range(0, len(rgba), CHUNK_PIXELS):
            if self.overflowed:
                break
            chunk = rgba[start:start + CHUNK_PIXELS]
            visible = chunk[:, 3] > self.min_alpha
            # Positions are kept so the scanned count stays exact on overflow
            positions = np.flatnonzero(visible)
            rgb = chunk[visible].astype(np.uint32)
            keys = (rgb[:, 0] << 16) | (rgb[:, 1] << 8) | rgb[:, 2]

            scanned = len(chunk)
            for pos, key in zip(positions.tolist(), keys.tolist()):
                if not self._offer(key):
                    scanned = pos + 1
                    break
            self.pixels_scanned += scanned

        return self

    def _offer(self, key: int) -> bool:
        if key in self._seen:
            return True
        self._seen.add(key)

        color = RGBColor.from_key(key)
        lab = rgb_to_lab(*color.as_tuple())
        if self._is_near_duplicate(lab):
            return True

        if len(self._colors) >= self.max_colors:
            self.overflowed = True
            logger.debug("Palette overflowed at %d colors", self.max_colors)
            return False

        self._accept(color, lab)
        return True

    def _is_near_duplicate(self, lab: tuple[float, float, float]) -> bool:
        n = len(self._colors)
        if self.threshold == 0 or n == 0:
            return False
        distances = delta_e_batch(self._labs[:n], lab)
        return bool(np.any(distances <= self.threshold))

    def _accept(self, color: RGBColor, lab: tuple[float, float, float]) -> None:
        n = len(self._colors)
        if n == len(self._labs):
            grown = np.empty((max(2 * n, 1), 3), dtype=np.float64)
            grown[:n] = self._labs[:n]
            self._labs = grown
        self._labs[n] = lab
        self._colors.append(color)


def accumulate(
    pixels: NDArray[np.uint8],
    threshold: float = 1.0,
    min_alpha: int = 10,
    max_colors: int = 30,
) -> tuple[list[RGBColor], bool]:
    """
    Collect the distinct colors of an RGBA buffer in first-encounter order.

    Args:
        pixels: uint8 array of shape (N, 4)
        threshold: Near-duplicate ΔE threshold (0 = exact dedup only)
        min_alpha: Pixels with alpha <= min_alpha are ignored
        max_colors: Palette cap

    Returns:
        (colors, overflowed)
    """
    acc = PaletteAccumulator(threshold=threshold, min_alpha=min_alpha, max_colors=max_colors)
    acc.consume(pixels)
    return acc.colors, acc.overflowed
