"""Tests for the raster canvas and line rasterizer.

Validates sample counts, endpoint-order symmetry across all octants,
bounds checking before any write, and in-place clearing.
"""

from __future__ import annotations

import numpy as np
import pytest

from toolpath_raster.configs.loader import CanvasConfig
from toolpath_raster.errors import CanvasBoundsError
from toolpath_raster.raster.canvas import Canvas, line_points


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def canvas() -> Canvas:
    return Canvas(64, 48)


# ---------------------------------------------------------------------------
# Line rasterization
# ---------------------------------------------------------------------------


class TestLinePoints:
    def test_horizontal_six_samples(self) -> None:
        assert line_points(0, 0, 5, 0) == [(x, 0) for x in range(6)]

    def test_diagonal_five_samples(self) -> None:
        assert line_points(0, 0, 4, 4) == [(i, i) for i in range(5)]

    def test_single_point(self) -> None:
        assert line_points(3, 7, 3, 7) == [(3, 7)]

    @pytest.mark.parametrize(
        "end",
        [
            (9, 2), (2, 9), (-2, 9), (-9, 2),
            (-9, -2), (-2, -9), (2, -9), (9, -2),
            (7, 7), (-7, 7), (0, 9), (9, 0),
        ],
    )
    def test_reverse_paints_same_samples(self, end: tuple[int, int]) -> None:
        x0, y0 = 20, 20
        x1, y1 = x0 + end[0], y0 + end[1]
        forward = set(line_points(x0, y0, x1, y1))
        backward = set(line_points(x1, y1, x0, y0))
        assert forward == backward

    @pytest.mark.parametrize("x1,y1", [(13, 4), (4, 13), (-11, 6), (3, -10)])
    def test_sample_count_is_major_delta_plus_one(self, x1: int, y1: int) -> None:
        points = line_points(0, 0, x1, y1)
        assert len(points) == max(abs(x1), abs(y1)) + 1
        assert len(set(points)) == len(points)

    def test_includes_both_endpoints(self) -> None:
        points = line_points(2, 3, 17, 8)
        assert (2, 3) in points
        assert (17, 8) in points

    def test_eight_connected(self) -> None:
        points = line_points(0, 0, 23, 9)
        for (ax, ay), (bx, by) in zip(points, points[1:]):
            assert max(abs(bx - ax), abs(by - ay)) == 1

    def test_tie_is_x_major(self) -> None:
        points = line_points(5, 5, 0, 0)
        assert [p[0] for p in points] == sorted(p[0] for p in points)


# ---------------------------------------------------------------------------
# Canvas
# ---------------------------------------------------------------------------


class TestCanvas:
    def test_starts_blank(self, canvas: Canvas) -> None:
        assert canvas.is_blank()
        assert canvas.shape == (48, 64)

    def test_draw_line_paints_exact_samples(self, canvas: Canvas) -> None:
        n = canvas.draw_line(0, 0, 5, 0)
        assert n == 6
        assert canvas.painted() == {(x, 0) for x in range(6)}
        assert canvas.get(3, 0) == 255

    def test_diagonal_paints_only_diagonal(self, canvas: Canvas) -> None:
        canvas.draw_line(0, 0, 4, 4)
        assert canvas.painted() == {(i, i) for i in range(5)}

    def test_xy_addressing(self, canvas: Canvas) -> None:
        canvas.put(10, 2)
        assert canvas.samples()[2, 10] == 255
        assert canvas.get(2, 10) == 0

    def test_custom_value(self, canvas: Canvas) -> None:
        canvas.draw_line(1, 1, 1, 4, value=7)
        assert {canvas.get(1, y) for y in range(1, 5)} == {7}

    def test_out_of_bounds_endpoint_writes_nothing(self, canvas: Canvas) -> None:
        with pytest.raises(CanvasBoundsError) as exc_info:
            canvas.draw_line(0, 0, 64, 10)
        assert exc_info.value.x == 64
        assert canvas.is_blank()

    def test_negative_coordinate_rejected(self, canvas: Canvas) -> None:
        with pytest.raises(CanvasBoundsError):
            canvas.draw_line(-1, 0, 3, 0)
        assert canvas.is_blank()

    def test_bounds_error_is_index_error(self, canvas: Canvas) -> None:
        with pytest.raises(IndexError):
            canvas.get(0, 48)

    def test_clear_in_place(self, canvas: Canvas) -> None:
        buf = canvas.samples()
        canvas.draw_line(0, 0, 10, 10)
        canvas.clear()
        assert canvas.is_blank()
        assert canvas.samples().base is buf.base

    def test_samples_view_read_only(self, canvas: Canvas) -> None:
        view = canvas.samples()
        with pytest.raises(ValueError):
            view[0, 0] = 1

    def test_checksum_tracks_content(self, canvas: Canvas) -> None:
        blank = canvas.checksum()
        canvas.draw_line(0, 0, 3, 0)
        assert canvas.checksum() != blank
        canvas.clear()
        assert canvas.checksum() == blank

    def test_from_config_size(self) -> None:
        cv = Canvas.from_config(
            CanvasConfig(bed_size_mm=220.0, resolution_px_per_mm=10)
        )
        assert (cv.width, cv.height) == (2200, 2200)
        assert cv.samples().dtype == np.uint8

    def test_invalid_size(self) -> None:
        with pytest.raises(ValueError):
            Canvas(0, 10)
