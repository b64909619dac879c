# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""
Superseded-call discipline for repeated extractions.

A UI recomputes the palette whenever a new image is picked or a parameter
changes, and decoding may finish out of order. Every request gets a
monotonically increasing token. A result is applied only if its token is
still the latest one when it completes; anything older is discarded.
"""

from __future__ import annotations

import itertools
import logging
import threading
from concurrent.futures import Executor, Future
from typing import Callable, Optional

from pixpal.schema import PaletteResult
from pixpal.measure.extract import PaletteConfig, PixelBuffer, extract_palette

logger = logging.getLogger(__name__)


class PaletteSession:
    """
    Holds the latest palette of a sequence of extraction requests.

    Example:
        >>> session = PaletteSession()
        >>> session.extract(bytes([10, 10, 10, 255])).hex_colors
        ('#0a0a0aff',)
        >>> session.update_config(PaletteConfig(max_colors=0)).overflowed
        True
    """

    def __init__(self, config: Optional[PaletteConfig] = None):
        self.config = config or PaletteConfig()
        self._tokens = itertools.count(1)
        self._current = 0
        self._latest: Optional[PaletteResult] = None
        self._pixels: Optional[PixelBuffer] = None
        self._lock = threading.Lock()

    @property
    def latest(self) -> Optional[PaletteResult]:
        """Most recently applied result, or None."""
        with self._lock:
            return self._latest

    def request(self) -> int:
        """Issue a new token, superseding every earlier one."""
        with self._lock:
            self._current = next(self._tokens)
            return self._current

    def is_current(self, token: int) -> bool:
        with self._lock:
            return token == self._current

    def resolve(
        self,
        token: int,
        result: PaletteResult,
        pixels: Optional[PixelBuffer] = None,
        config: Optional[PaletteConfig] = None,
    ) -> bool:
        """
        Apply a finished result if its request is still current.

        The image and parameters the result was computed from are recorded
        together with it, so ``update_config`` always recomputes the image
        behind ``latest``.

        Returns:
            True if applied, False if the result was stale and discarded.
        """
        with self._lock:
            if token != self._current:
                logger.debug("Discarding stale result for request %d (current %d)", token, self._current)
                return False
            self._latest = result
            if pixels is not None:
                self._pixels = pixels
            if config is not None:
                self.config = config
            return True

    def extract(
        self,
        pixels: PixelBuffer,
        config: Optional[PaletteConfig] = None,
    ) -> Optional[PaletteResult]:
        """
        Synchronously extract and apply a palette for a new image.

        Returns:
            The result, or None if a newer request superseded this one
            while it ran.
        """
        token = self.request()
        cfg = config or self.config
        result = extract_palette(pixels, cfg)
        return result if self.resolve(token, result, pixels, cfg) else None

    def update_config(self, config: PaletteConfig) -> Optional[PaletteResult]:
        """Recompute the palette of the latest image with new parameters."""
        with self._lock:
            pixels = self._pixels
            if pixels is None:
                self.config = config
                return None
        return self.extract(pixels, config)

    def submit(
        self,
        executor: Executor,
        load: Callable[[], PixelBuffer],
        config: Optional[PaletteConfig] = None,
    ) -> Future:
        """
        Decode and extract on an executor.

        Args:
            executor: Where to run the work
            load: Decoder returning the pixel buffer (e.g. a file loader)
            config: Parameters for this request (session config if None)

        Returns:
            Future resolving to the result, or None if superseded before
            completion. Errors from ``load`` or extraction propagate
            through the future.
        """
        token = self.request()
        cfg = config or self.config

        def run() -> Optional[PaletteResult]:
            pixels = load()
            if not self.is_current(token):
                logger.debug("Request %d superseded before extraction", token)
                return None
            result = extract_palette(pixels, cfg)
            return result if self.resolve(token, result, pixels, cfg) else None

        return executor.submit(run)
