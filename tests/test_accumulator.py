# Copyright (c) 2026 Pixpal
# SPDX-License-Identifier: MIT

"""Tests for raster-order accumulation, suppression and the palette cap."""

import numpy as np
import pytest

from pixpal.schema import RGBColor
from pixpal.measure.accumulator import CHUNK_PIXELS, PaletteAccumulator, accumulate
from pixpal.measure.colorspace import delta_e, rgb_to_lab


def _rgba(*pixels):
    """Build an (N, 4) uint8 buffer from RGBA tuples."""
    return np.array(pixels, dtype=np.uint8).reshape(-1, 4)


def _rgb(colors):
    return [c.as_tuple() for c in colors]


def _linear_scan(pixels, threshold, min_alpha, max_colors):
    """Check every visible pixel against every accepted color, no caching."""
    accepted = []
    for px in pixels:
        if px[3] <= min_alpha:
            continue
        rgb = tuple(int(v) for v in px[:3])
        lab = rgb_to_lab(*rgb)
        if any(
            rgb == other or (threshold != 0 and delta_e(rgb_to_lab(*other), lab) <= threshold)
            for other in accepted
        ):
            continue
        if len(accepted) >= max_colors:
            return accepted, True
        accepted.append(rgb)
    return accepted, False


class TestDedup:

    def test_exact_duplicates_collapse(self):
        colors, overflowed = accumulate(
            _rgba((10, 10, 10, 255), (10, 10, 10, 255), (200, 50, 50, 255)),
            threshold=0, max_colors=10,
        )
        assert _rgb(colors) == [(10, 10, 10), (200, 50, 50)]
        assert not overflowed

    def test_threshold_zero_keeps_near_identical(self):
        """At threshold 0 only byte-exact duplicates are suppressed."""
        colors, _ = accumulate(
            _rgba((100, 100, 100, 255), (101, 101, 100, 255)),
            threshold=0,
        )
        assert _rgb(colors) == [(100, 100, 100), (101, 101, 100)]

    def test_threshold_suppresses_near_duplicate(self):
        colors, overflowed = accumulate(
            _rgba((100, 100, 100, 255), (101, 101, 100, 255)),
            threshold=5,
        )
        assert _rgb(colors) == [(100, 100, 100)]
        assert not overflowed

    def test_first_encountered_wins(self):
        """B is within reach of A and C, but only A was accepted before it."""
        colors, _ = accumulate(
            _rgba((100, 100, 100, 255), (103, 103, 103, 255), (106, 106, 106, 255)),
            threshold=2,
        )
        assert _rgb(colors) == [(100, 100, 100), (106, 106, 106)]

    def test_reversed_order_keeps_other_end(self):
        colors, _ = accumulate(
            _rgba((106, 106, 106, 255), (103, 103, 103, 255), (100, 100, 100, 255)),
            threshold=2,
        )
        assert _rgb(colors) == [(106, 106, 106), (100, 100, 100)]

    def test_huge_threshold_collapses_to_one(self):
        pixels = np.random.RandomState(3).randint(0, 256, size=(500, 4)).astype(np.uint8)
        pixels[:, 3] = 255
        colors, overflowed = accumulate(pixels, threshold=1000, max_colors=10)
        assert _rgb(colors) == [tuple(int(v) for v in pixels[0, :3])]
        assert not overflowed

    def test_matches_unique_set_at_threshold_zero(self):
        rng = np.random.RandomState(11)
        palette = rng.randint(0, 256, size=(12, 3))
        idx = rng.randint(0, len(palette), size=2000)
        pixels = np.zeros((2000, 4), dtype=np.uint8)
        pixels[:, :3] = palette[idx]
        pixels[:, 3] = rng.choice([0, 5, 10, 11, 255], size=2000)

        colors, overflowed = accumulate(pixels, threshold=0, min_alpha=10, max_colors=100)

        expected = []
        for px in pixels:
            rgb = tuple(int(v) for v in px[:3])
            if px[3] > 10 and rgb not in expected:
                expected.append(rgb)
        assert _rgb(colors) == expected
        assert not overflowed

    @pytest.mark.parametrize("max_colors", [0, 3, 20, 1000])
    @pytest.mark.parametrize("threshold", [1, 3, 10])
    def test_matches_linear_scan_with_threshold(self, threshold, max_colors):
        """Decisions cached per RGB key agree with re-checking every pixel."""
        rng = np.random.RandomState(threshold * 1000 + max_colors)
        centers = rng.randint(8, 248, size=(8, 3))
        idx = rng.randint(0, len(centers), size=400)
        jitter = rng.randint(-4, 5, size=(400, 3))
        pixels = np.zeros((400, 4), dtype=np.uint8)
        pixels[:, :3] = np.clip(centers[idx] + jitter, 0, 255)
        pixels[:, 3] = rng.choice([0, 10, 11, 255], size=400)

        colors, overflowed = accumulate(pixels, threshold=threshold, min_alpha=10, max_colors=max_colors)

        expected, expected_overflow = _linear_scan(pixels, threshold, 10, max_colors)
        assert _rgb(colors) == expected
        assert overflowed == expected_overflow


class TestOpacityFilter:

    def test_alpha_equal_to_min_excluded(self):
        colors, _ = accumulate(_rgba((1, 2, 3, 10)), min_alpha=10)
        assert colors == []

    def test_alpha_above_min_included(self):
        colors, _ = accumulate(_rgba((1, 2, 3, 11)), min_alpha=10)
        assert _rgb(colors) == [(1, 2, 3)]

    def test_fully_transparent_ignored(self):
        colors, overflowed = accumulate(_rgba((0, 0, 0, 0), (9, 9, 9, 0)), max_colors=0)
        assert colors == []
        assert not overflowed

    def test_min_alpha_zero_keeps_alpha_one(self):
        colors, _ = accumulate(_rgba((5, 5, 5, 0), (7, 7, 7, 1)), min_alpha=0)
        assert _rgb(colors) == [(7, 7, 7)]


class TestCap:

    def _three(self):
        return _rgba((255, 0, 0, 255), (0, 255, 0, 255), (0, 0, 255, 255))

    def test_exactly_k_not_overflowed(self):
        colors, overflowed = accumulate(self._three(), threshold=0, max_colors=3)
        assert len(colors) == 3
        assert not overflowed

    def test_k_plus_one_overflows(self):
        colors, overflowed = accumulate(self._three(), threshold=0, max_colors=2)
        assert _rgb(colors) == [(255, 0, 0), (0, 255, 0)]
        assert overflowed

    def test_max_zero_overflows_on_first_color(self):
        colors, overflowed = accumulate(self._three(), max_colors=0)
        assert colors == []
        assert overflowed

    def test_duplicates_after_cap_do_not_overflow(self):
        pixels = _rgba((255, 0, 0, 255), (255, 0, 0, 255), (255, 0, 0, 255))
        colors, overflowed = accumulate(pixels, threshold=0, max_colors=1)
        assert len(colors) == 1
        assert not overflowed


class TestEarlyExit:

    def test_scan_stops_at_overflow_pixel(self):
        acc = PaletteAccumulator(threshold=0, max_colors=1)
        acc.consume(_rgba((1, 2, 3, 255), (1, 2, 3, 0), (4, 5, 6, 255), (7, 8, 9, 255)))
        assert acc.overflowed
        assert acc.pixels_scanned == 3

    def test_later_chunks_never_read(self):
        pixels = np.zeros((3 * CHUNK_PIXELS, 4), dtype=np.uint8)
        pixels[:, 3] = 255
        pixels[1] = (9, 9, 9, 255)
        acc = PaletteAccumulator(threshold=0, max_colors=1).consume(pixels)
        assert acc.overflowed
        assert acc.pixels_scanned == 2

    def test_scan_across_chunk_boundary(self):
        pixels = np.zeros((CHUNK_PIXELS + 10, 4), dtype=np.uint8)
        pixels[:, 3] = 255
        pixels[-1] = (50, 60, 70, 255)
        acc = PaletteAccumulator(threshold=0, max_colors=5).consume(pixels)
        assert _rgb(acc.colors) == [(0, 0, 0), (50, 60, 70)]
        assert acc.pixels_scanned == CHUNK_PIXELS + 10
        assert not acc.overflowed


class TestIncremental:

    def test_add_matches_consume(self):
        pixels = [(10, 10, 10, 255), (10, 10, 10, 5), (200, 50, 50, 255), (101, 101, 100, 255)]
        acc = PaletteAccumulator(threshold=1.0, max_colors=10)
        for px in pixels:
            assert acc.add(*px)
        bulk = PaletteAccumulator(threshold=1.0, max_colors=10).consume(_rgba(*pixels))
        assert acc.colors == bulk.colors
        assert len(acc) == 3

    def test_add_returns_false_after_overflow(self):
        acc = PaletteAccumulator(threshold=0, max_colors=1)
        assert acc.add(1, 1, 1)
        assert not acc.add(2, 2, 2)
        assert not acc.add(3, 3, 3)
        assert acc.colors == [RGBColor(1, 1, 1)]

    def test_labs_grow_past_initial_capacity(self):
        acc = PaletteAccumulator(threshold=0.5, max_colors=1000)
        for v in range(0, 256, 2):
            acc.add(v, 255 - v, (v * 7) % 256)
        assert len(acc) > 64
        assert len(set(acc.colors)) == len(acc)


class TestValidation:

    @pytest.mark.parametrize("kwargs", [
        {"threshold": -0.1},
        {"threshold": float("nan")},
        {"min_alpha": -1},
        {"min_alpha": 256},
        {"max_colors": -1},
    ])
    def test_rejects_bad_parameters(self, kwargs):
        with pytest.raises(ValueError):
            PaletteAccumulator(**kwargs)
