# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Step sorting for palette display.

Colors are bucketed by hue, luminance and HSV value, each multiplied by a
repetition factor and floored. Three stable single-key passes (value, then
luminance, then hue) produce bands grouped primarily by hue.

Reference: https://www.alanzucconi.com/2015/09/30/colour-sorting/
"""

from __future__ import annotations

import math
from typing import Iterable

from pixpal.schema import RGBColor, SortKey
from pixpal.measure.colorspace import rgb_to_hsv

SORT_REPETITIONS = 8


def luminance(r: int, g: int, b: int) -> float:
    """Perceived brightness on raw byte channels (not relative luminance)."""
    return math.sqrt(0.241 * r + 0.691 * g + 0.068 * b)


def sort_key(color: RGBColor, repetitions: int = SORT_REPETITIONS) -> SortKey:
    """Compute the bucketed (hue, luminance, value) key of a color."""
    r, g, b = color.as_tuple()
    h, _, v = rgb_to_hsv(r, g, b)
    return SortKey(
        hue=math.floor(h * repetitions),
        luminance=math.floor(luminance(r, g, b) * repetitions),
        value=math.floor(v * repetitions),
    )


def step_sort(
    colors: Iterable[RGBColor],
    repetitions: int = SORT_REPETITIONS,
) -> list[RGBColor]:
    """
    Order colors into hue bands.

    Each pass is a separate stable sort, so colors with equal keys keep
    their input order.

    Args:
        colors: Colors in acceptance order
        repetitions: Bucket resolution multiplier

    Returns:
        New list in display order
    """
    keyed = [(c, sort_key(c, repetitions)) for c in colors]
    keyed.sort(key=lambda item: item[1].value)
    keyed.sort(key=lambda item: item[1].luminance)
    keyed.sort(key=lambda item: item[1].hue)
    return [c for c, _ in keyed]
