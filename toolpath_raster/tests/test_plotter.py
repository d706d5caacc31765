"""Tests for cursor rounding and the raster plotter.

Validates millimeter -> raster rounding, axis carry-over, the zero-length
move guard, travel vs. extrusion, G92 repositioning, Z-triggered layer
flushes and the motors-off gate.
"""

from __future__ import annotations

import logging

import pytest

from toolpath_raster.errors import CanvasBoundsError
from toolpath_raster.gcode.commands import Axes
from toolpath_raster.raster.canvas import Canvas
from toolpath_raster.raster.cursor import CursorState, MotionMode, to_raster
from toolpath_raster.raster.encoder import MemoryImageEncoder
from toolpath_raster.raster.layers import LayerManager
from toolpath_raster.raster.plotter import RasterPlotter


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def encoder() -> MemoryImageEncoder:
    return MemoryImageEncoder()


@pytest.fixture()
def plotter(tmp_path, encoder: MemoryImageEncoder) -> RasterPlotter:
    canvas = Canvas(100, 100)
    layers = LayerManager(canvas, encoder, tmp_path)
    return RasterPlotter(canvas, layers, resolution=10)


# ---------------------------------------------------------------------------
# Cursor
# ---------------------------------------------------------------------------


class TestCursor:
    @pytest.mark.parametrize(
        "mm,expected",
        [(0.05, 1), (-0.05, -1), (0.04, 0), (1.25, 13), (10.0, 100), (0.0, 0)],
    )
    def test_round_half_away_from_zero(self, mm: float, expected: int) -> None:
        assert to_raster(mm, 10) == expected

    def test_absent_axis_carries_over(self) -> None:
        cursor = CursorState(current_x=30, current_y=40)
        assert cursor.resolve(None, 2.0, 10) == (30, 20)
        assert cursor.resolve(1.0, None, 10) == (10, 40)

    def test_zero_is_not_absent(self) -> None:
        cursor = CursorState(current_x=30, current_y=40)
        assert cursor.resolve(0.0, 0.0, 10) == (0, 0)

    def test_reset(self) -> None:
        cursor = CursorState(5, 6, 0.4, MotionMode.RELATIVE)
        cursor.reset()
        assert cursor == CursorState()


# ---------------------------------------------------------------------------
# Moves
# ---------------------------------------------------------------------------


class TestApplyMove:
    def test_extrusion_draws_from_stored_position(self, plotter: RasterPlotter) -> None:
        assert plotter.apply_move(Axes(x=0.5), draw_line=True)
        assert plotter.canvas.painted() == {(x, 0) for x in range(6)}
        assert plotter.cursor.position == (5, 0)

    def test_travel_moves_without_drawing(self, plotter: RasterPlotter) -> None:
        assert not plotter.apply_move(Axes(x=3.0, y=2.0), draw_line=False)
        assert plotter.canvas.is_blank()
        assert plotter.cursor.position == (30, 20)

    def test_zero_length_move_never_paints(self, plotter: RasterPlotter) -> None:
        plotter.apply_move(Axes(x=1.0, y=1.0), draw_line=False)
        before = plotter.canvas.checksum()
        assert not plotter.apply_move(Axes(x=1.0, y=1.0), draw_line=True)
        assert not plotter.apply_move(Axes(x=1.04), draw_line=True)
        assert plotter.canvas.checksum() == before

    def test_out_of_bounds_keeps_state(self, plotter: RasterPlotter) -> None:
        with pytest.raises(CanvasBoundsError):
            plotter.apply_move(Axes(x=-1.0), draw_line=True)
        assert plotter.cursor.position == (0, 0)
        assert plotter.canvas.is_blank()

    def test_travel_off_canvas_is_allowed(self, plotter: RasterPlotter) -> None:
        plotter.apply_move(Axes(x=-1.0), draw_line=False)
        assert plotter.cursor.position == (-10, 0)

    def test_position_mm(self, plotter: RasterPlotter) -> None:
        plotter.move(Axes(x=2.5, y=1.0))
        assert plotter.position_mm() == (2.5, 1.0)


class TestReposition:
    def test_sets_position_without_drawing(self, plotter: RasterPlotter) -> None:
        plotter.reposition(Axes(x=4.0, y=5.0))
        assert plotter.cursor.position == (40, 50)
        assert plotter.canvas.is_blank()

    def test_empty_resets_to_origin(self, plotter: RasterPlotter) -> None:
        plotter.move(Axes(x=4.0, y=5.0))
        plotter.reposition(Axes())
        assert plotter.cursor.position == (0, 0)

    def test_extruder_only_keeps_xy(self, plotter: RasterPlotter) -> None:
        plotter.move(Axes(x=4.0, y=5.0))
        plotter.reposition(Axes(e=0.0))
        assert plotter.cursor.position == (40, 50)


# ---------------------------------------------------------------------------
# Layers
# ---------------------------------------------------------------------------


class TestLayerFlush:
    def test_z_flushes_after_xy(
        self, plotter: RasterPlotter, encoder: MemoryImageEncoder,
    ) -> None:
        plotter.extrude_move(Axes(x=0.5, z=0.2))
        (image,) = encoder.images.values()
        assert int(image.sum()) == 6 * 255
        assert plotter.canvas.is_blank()
        assert plotter.cursor.last_flushed_z == 0.2
        assert plotter.layers.layers[0].name == "layer_0_0.2"

    def test_z_only_travel_flushes(self, plotter: RasterPlotter) -> None:
        plotter.move(Axes(z=0.4))
        assert [l.index for l in plotter.layers.layers] == [0]
        assert plotter.cursor.position == (0, 0)

    def test_each_z_word_flushes(self, plotter: RasterPlotter) -> None:
        for z in (0.2, 0.2, 0.4):
            plotter.move(Axes(z=z))
        assert [l.name for l in plotter.layers.layers] == [
            "layer_0_0.2", "layer_1_0.2", "layer_2_0.4",
        ]


# ---------------------------------------------------------------------------
# Modes
# ---------------------------------------------------------------------------


class TestModes:
    def test_disabled_motors_ignore_motion(
        self, plotter: RasterPlotter, caplog: pytest.LogCaptureFixture,
    ) -> None:
        plotter.disable()
        with caplog.at_level(logging.WARNING):
            plotter.extrude_move(Axes(x=1.0))
            plotter.move(Axes(y=1.0, z=0.2))
        assert plotter.canvas.is_blank()
        assert plotter.cursor.position == (0, 0)
        assert plotter.layers.layers == []
        warnings = [r for r in caplog.records if "Motors disabled" in r.getMessage()]
        assert len(warnings) == 1

    def test_enable_resumes_motion(self, plotter: RasterPlotter) -> None:
        plotter.disable()
        plotter.extrude_move(Axes(x=1.0))
        plotter.enable()
        plotter.extrude_move(Axes(x=1.0))
        assert plotter.canvas.count_painted() == 11

    def test_relative_mode_is_reported_only(self, plotter: RasterPlotter) -> None:
        plotter.set_relative()
        plotter.move(Axes(x=1.0))
        plotter.move(Axes(x=1.0))
        assert plotter.cursor.motion_mode is MotionMode.RELATIVE
        assert plotter.cursor.position == (10, 0)
        plotter.set_absolute()
        assert plotter.cursor.motion_mode is MotionMode.ABSOLUTE

    def test_reset(self, plotter: RasterPlotter) -> None:
        plotter.extrude_move(Axes(x=1.0, z=0.2))
        plotter.extrude_move(Axes(x=2.0))
        plotter.disable()
        plotter.reset()
        assert plotter.cursor == CursorState()
        assert plotter.canvas.is_blank()
        assert plotter.layers.next_index == 0
        assert plotter.motors_enabled
