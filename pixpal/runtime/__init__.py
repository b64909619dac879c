# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Delivery runtime for Pixpal.

1. Session -- Token-based supersession of repeated extraction requests
2. Serializers -- JSON / text renderings of a PaletteResult

The runtime never modifies palette content.
"""

from pixpal.runtime.serializers import SerializerFormat, to_output, to_text
from pixpal.runtime.session import PaletteSession

__all__ = [
    "PaletteSession",
    "SerializerFormat",
    "to_output",
    "to_text",
]
