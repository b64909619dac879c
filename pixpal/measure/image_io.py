# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Image decoding into RGBA pixel buffers.

Applies ICC profile conversion to sRGB when the image carries an embedded
profile, so extracted colors match what color pickers show.

Requires: Pillow (pip install Pillow)
"""

from __future__ import annotations

import io
import logging
from pathlib import Path
from typing import Union

import numpy as np
from numpy.typing import NDArray

logger = logging.getLogger(__name__)


def load_rgba(path: Union[str, Path]) -> NDArray[np.uint8]:
    """
    Load an image file as sRGB RGBA pixels.

    Args:
        path: Any Pillow-readable image

    Returns:
        uint8 array of shape (H, W, 4)

    Raises:
        FileNotFoundError: Path does not exist
        PIL.UnidentifiedImageError: File is not a decodable image
    """
    try:
        from PIL import Image
    except ImportError as e:
        raise ImportError(
            "Pillow is required for image loading. "
            "Install with: pip install Pillow"
        ) from e

    with Image.open(path) as img:
        img.load()
        rgba = _convert_to_srgb_rgba(img)

    pixels = np.array(rgba, dtype=np.uint8)
    logger.debug("Loaded %s (%dx%d)", path, pixels.shape[1], pixels.shape[0])
    return pixels


def _convert_to_srgb_rgba(img):
    """Convert to RGBA, remapping from an embedded ICC profile if present."""
    icc_bytes = img.info.get("icc_profile")
    if not icc_bytes:
        return img.convert("RGBA")

    from PIL import ImageCms

    try:
        embedded_profile = ImageCms.ImageCmsProfile(io.BytesIO(icc_bytes))
        srgb_profile = ImageCms.createProfile("sRGB")
        converted = ImageCms.profileToProfile(
            img.convert("RGBA"),
            embedded_profile,
            srgb_profile,
            outputMode="RGBA",
        )
    except ImageCms.PyCMSError as e:
        # Broken profile: fall back to the raw channel values
        logger.warning("ICC conversion failed (%s); using untagged pixels", e)
        return img.convert("RGBA")

    return converted if converted is not None else img.convert("RGBA")
