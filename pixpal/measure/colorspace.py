# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Color space conversions and perceptual distance.

Conversion chain: sRGB (0-255) → Linear RGB → CIE XYZ (D65) → CIE L*a*b*

Also provides the HSV derivation used for palette ordering and the
``#rrggbbaa`` hex encoding used for palette output.

Every conversion exists in two forms: a scalar one that works on a single
byte triple, and a vectorized NumPy one for batches. The two agree to
floating-point precision.
"""

from __future__ import annotations

import math

import numpy as np
from numpy.typing import NDArray

from pixpal.schema import Lab


# =============================================================================
# Constants
# =============================================================================

# D65 reference white
XN = 0.95047
YN = 1.00000
ZN = 1.08883

# Linear sRGB to XYZ, rows are X, Y, Z
_RGB_TO_XYZ = np.array([
    [0.4124, 0.3576, 0.1805],
    [0.2126, 0.7152, 0.0722],
    [0.0193, 0.1192, 0.9505],
], dtype=np.float64)

_WHITE = np.array([XN, YN, ZN], dtype=np.float64)

# CIE nonlinearity breakpoint
_EPSILON = 0.008856
_KAPPA = 7.787


def _round_half_up(x: float) -> int:
    """Round to nearest integer, halves toward +inf."""
    return math.floor(x + 0.5)


# =============================================================================
# sRGB → Linear RGB
# =============================================================================


def _srgb_channel_to_linear(c: float) -> float:
    return ((c + 0.055) / 1.055) ** 2.4 if c > 0.04045 else c / 12.92


def srgb_to_linear(srgb: NDArray[np.float64]) -> NDArray[np.float64]:
    """
    Convert sRGB values [0,1] to linear RGB.

    sRGB uses a piecewise gamma curve:
    - For values <= 0.04045: linear/12.92
    - For values > 0.04045: ((value + 0.055) / 1.055) ^ 2.4
    """
    srgb = np.asarray(srgb, dtype=np.float64)
    return np.where(
        srgb > 0.04045,
        np.power((srgb + 0.055) / 1.055, 2.4),
        srgb / 12.92,
    )


# =============================================================================
# sRGB → CIE L*a*b*
# =============================================================================


def _lab_f(t: float) -> float:
    return t ** (1.0 / 3.0) if t > _EPSILON else _KAPPA * t + 16.0 / 116.0


def rgb_to_lab(r: int, g: int, b: int) -> Lab:
    """
    Convert an sRGB byte triple to CIE L*a*b* (D65).

    Args:
        r, g, b: Channel values in [0, 255]

    Returns:
        (L, a, b) tuple. L is in [0, 100].
    """
    rl = _srgb_channel_to_linear(r / 255)
    gl = _srgb_channel_to_linear(g / 255)
    bl = _srgb_channel_to_linear(b / 255)

    x = (rl * 0.4124 + gl * 0.3576 + bl * 0.1805) / XN
    y = (rl * 0.2126 + gl * 0.7152 + bl * 0.0722) / YN
    z = (rl * 0.0193 + gl * 0.1192 + bl * 0.9505) / ZN

    fx, fy, fz = _lab_f(x), _lab_f(y), _lab_f(z)
    return (116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz))


def srgb_uint8_to_lab(pixels: NDArray[np.uint8]) -> NDArray[np.float64]:
    """
    Convert uint8 sRGB pixels [0,255] to CIE L*a*b*.

    Args:
        pixels: Array of shape (..., 3) with uint8 sRGB values

    Returns:
        Array of shape (..., 3) with (L, a, b) values
    """
    linear = srgb_to_linear(np.asarray(pixels, dtype=np.float64) / 255.0)

    # Same summation order as the scalar path
    m = _RGB_TO_XYZ
    r, g, b = linear[..., 0], linear[..., 1], linear[..., 2]
    xyz = np.stack([
        r * m[0, 0] + g * m[0, 1] + b * m[0, 2],
        r * m[1, 0] + g * m[1, 1] + b * m[1, 2],
        r * m[2, 0] + g * m[2, 1] + b * m[2, 2],
    ], axis=-1) / _WHITE

    f = np.where(
        xyz > _EPSILON,
        np.power(np.maximum(xyz, 0.0), 1.0 / 3.0),
        _KAPPA * xyz + 16.0 / 116.0,
    )
    fx, fy, fz = f[..., 0], f[..., 1], f[..., 2]
    return np.stack([116.0 * fy - 16.0, 500.0 * (fx - fy), 200.0 * (fy - fz)], axis=-1)


# =============================================================================
# RGB → HSV
# =============================================================================


def rgb_to_hsv(r: int, g: int, b: int) -> tuple[int, float, float]:
    """
    Convert an sRGB byte triple to HSV.

    Hue is resolved piecewise from whichever channel holds the maximum,
    normalized into [0, 1] and scaled to whole degrees. Saturation and
    value are percentages rounded to two decimals.

    Args:
        r, g, b: Channel values in [0, 255]

    Returns:
        (hue 0-360, saturation 0-100, value 0-100). Gray inputs have
        hue and saturation 0.
    """
    rabs, gabs, babs = r / 255, g / 255, b / 255
    v = max(rabs, gabs, babs)
    diff = v - min(rabs, gabs, babs)

    if diff == 0:
        h = s = 0.0
    else:
        s = diff / v

        def diffc(c: float) -> float:
            return (v - c) / 6 / diff + 1 / 2

        rr, gg, bb = diffc(rabs), diffc(gabs), diffc(babs)
        if rabs == v:
            h = bb - gg
        elif gabs == v:
            h = (1 / 3) + rr - bb
        else:
            h = (2 / 3) + gg - rr

        if h < 0:
            h += 1
        elif h > 1:
            h -= 1

    return (
        _round_half_up(h * 360),
        _round_half_up(s * 100 * 100) / 100,
        _round_half_up(v * 100 * 100) / 100,
    )


# =============================================================================
# ΔE Distance (Perceptual Color Difference)
# =============================================================================


def delta_e(reference: Lab, sample: Lab) -> float:
    """
    CIE76 color difference with chroma/hue weighting functions.

    Rough reading of the result:
    - < 1: not perceptible
    - 1-2: perceptible through close observation
    - 2-10: perceptible at a glance
    - 11-49: more similar than opposite
    - 100: complete opposite

    The weighting factors come from the chroma of ``reference``, so the
    argument order matters once the two chromas differ.

    Args:
        reference: (L, a, b) of the already known color
        sample: (L, a, b) of the color being compared

    Returns:
        ΔE value >= 0 (lower = more similar)
    """
    L1, a1, b1 = reference
    L2, a2, b2 = sample

    dl = L1 - L2
    da = a1 - a2
    db = b1 - b2
    c1 = math.sqrt(a1 * a1 + b1 * b1)
    c2 = math.sqrt(a2 * a2 + b2 * b2)
    dc = c1 - c2
    dh = da * da + db * db - dc * dc
    dh = 0.0 if dh < 0 else math.sqrt(dh)

    sc = 1.0 + 0.045 * c1
    sh = 1.0 + 0.015 * c1

    dl_sl = dl / 1.0
    dc_sc = dc / sc
    dh_sh = dh / sh
    total = dl_sl * dl_sl + dc_sc * dc_sc + dh_sh * dh_sh
    return 0.0 if total < 0 else math.sqrt(total)


def delta_e_batch(
    references: NDArray[np.float64],
    sample: Lab | NDArray[np.float64],
) -> NDArray[np.float64]:
    """
    Vectorized ΔE of one sample against many reference colors.

    Args:
        references: Array of shape (N, 3) with L*a*b* values
        sample: Single (L, a, b) color

    Returns:
        Array of shape (N,) with ΔE values, element i equal to
        ``delta_e(references[i], sample)``
    """
    refs = np.asarray(references, dtype=np.float64).reshape(-1, 3)
    L2, a2, b2 = (float(v) for v in sample)

    a1 = refs[:, 1]
    b1 = refs[:, 2]
    dl = refs[:, 0] - L2
    da = a1 - a2
    db = b1 - b2
    c1 = np.sqrt(a1 * a1 + b1 * b1)
    c2 = math.sqrt(a2 * a2 + b2 * b2)
    dc = c1 - c2
    dh = np.sqrt(np.maximum(da * da + db * db - dc * dc, 0.0))

    dc_sc = dc / (1.0 + 0.045 * c1)
    dh_sh = dh / (1.0 + 0.015 * c1)
    return np.sqrt(np.maximum(dl * dl + dc_sc * dc_sc + dh_sh * dh_sh, 0.0))


# =============================================================================
# Hex encoding
# =============================================================================


def rgba_to_hex(r: int, g: int, b: int, alpha: float = 1.0) -> str:
    """
    Convert an RGB byte triple plus a [0,1] alpha to ``#rrggbbaa``.

    Args:
        r, g, b: Channel values in [0, 255]
        alpha: Opacity in [0, 1], scaled to a byte

    Returns:
        Lowercase hex string like "#c83232ff"
    """
    a = format(_round_half_up(alpha * 255), "02x")[:2]
    return f"#{r:02x}{g:02x}{b:02x}{a}"


def hex_to_rgb(hex_color: str) -> tuple[int, int, int]:
    """
    Parse ``#rrggbb`` or ``#rrggbbaa`` (case-insensitive) into an RGB triple.

    Any alpha suffix is ignored.
    """
    value = hex_color.lstrip("#")
    if len(value) not in (6, 8):
        raise ValueError(f"Expected #rrggbb or #rrggbbaa, got {hex_color!r}")
    try:
        return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)
    except ValueError as e:
        raise ValueError(f"Invalid hex color {hex_color!r}") from e
