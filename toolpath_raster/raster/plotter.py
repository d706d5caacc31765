"""Raster plotter -- the motion controller that traces extrusion onto a canvas.

Owns the cursor and drives the canvas and layer manager it is given:

    - ``extrude_move`` (G1): line from the stored position to the target
    - ``move`` (G0, G28): store the target, draw nothing
    - ``reposition`` (G92): redefine the position, draw nothing
    - any motion carrying Z flushes the canvas as a layer, after X/Y are applied

While motors are disabled (M84 / M18) motion is ignored until M17.

Usage:
    plotter = RasterPlotter(canvas, layer_manager, resolution=10)
    plotter.extrude_move(Axes(x=10.0, y=5.0))
"""

from __future__ import annotations

import logging

from toolpath_raster.controllers.base import MotionController
from toolpath_raster.gcode.commands import Axes
from toolpath_raster.raster.canvas import Canvas
from toolpath_raster.raster.cursor import CursorState, MotionMode
from toolpath_raster.raster.layers import Layer, LayerManager

logger = logging.getLogger(__name__)


class RasterPlotter(MotionController):
    """Raster-recording motion controller.

    Parameters
    ----------
    canvas : Canvas
        Target raster, shared with *layers*.
    layers : LayerManager
        Flushes the canvas on Z changes.
    resolution : int
        Raster units per millimeter.

    Attributes
    ----------
    cursor : CursorState
        Stored position, last flushed Z and reported distance mode.
    motors_enabled : bool
        Motion is ignored while False.
    """

    def __init__(self, canvas: Canvas, layers: LayerManager, resolution: int = 10) -> None:
        if resolution <= 0:
            raise ValueError(f"resolution must be > 0, got {resolution}")
        self.canvas = canvas
        self.layers = layers
        self.resolution = resolution
        self.cursor = CursorState()
        self.motors_enabled = True
        self._warned_disabled = False

    # ------------------------------------------------------------------
    # Core geometry
    # ------------------------------------------------------------------

    def apply_move(self, axes: Axes, draw_line: bool) -> bool:
        """Move the cursor to the X/Y of *axes*, optionally drawing.

        Absent axes keep their stored value.  A move that lands on the
        stored position does nothing.

        Returns
        -------
        bool
            True if a line was rasterized.

        Raises
        ------
        CanvasBoundsError
            If a drawn segment leaves the canvas.  Cursor and canvas are
            unchanged.
        """
        x0, y0 = self.cursor.position
        x1, y1 = self.cursor.resolve(axes.x, axes.y, self.resolution)
        if (x1, y1) == (x0, y0):
            return False
        drawn = False
        if draw_line:
            self.canvas.draw_line(x0, y0, x1, y1)
            drawn = True
        self.cursor.store(x1, y1)
        return drawn

    def set_position(self, axes: Axes) -> None:
        """Redefine the stored position without drawing.

        With no axis words at all the position resets to the origin;
        ``G92 E0`` leaves X/Y untouched.
        """
        if axes.is_empty():
            self.cursor.store(0, 0)
            return
        x, y = self.cursor.resolve(axes.x, axes.y, self.resolution)
        self.cursor.store(x, y)

    def flush_layer(self, z: float) -> Layer | None:
        """Close the current layer at height *z*."""
        layer = self.layers.on_z_change(z)
        self.cursor.last_flushed_z = z
        return layer

    def _motion_allowed(self) -> bool:
        if self.motors_enabled:
            return True
        if not self._warned_disabled:
            logger.warning("Motors disabled; ignoring motion until M17")
            self._warned_disabled = True
        return False

    def _apply(self, axes: Axes, draw_line: bool) -> None:
        if not self._motion_allowed():
            return
        self.apply_move(axes, draw_line)
        if axes.z is not None:
            self.flush_layer(axes.z)

    # ------------------------------------------------------------------
    # MotionController
    # ------------------------------------------------------------------

    def move(self, axes: Axes) -> None:
        self._apply(axes, draw_line=False)

    def extrude_move(self, axes: Axes) -> None:
        self._apply(axes, draw_line=True)

    def reposition(self, axes: Axes) -> None:
        self.set_position(axes)

    def enable(self) -> None:
        self.motors_enabled = True
        self._warned_disabled = False

    def disable(self) -> None:
        self.motors_enabled = False

    def set_relative(self) -> None:
        if self.cursor.motion_mode is not MotionMode.RELATIVE:
            logger.warning(
                "Relative coordinates selected; X/Y are still treated as absolute"
            )
        self.cursor.motion_mode = MotionMode.RELATIVE

    def set_absolute(self) -> None:
        self.cursor.motion_mode = MotionMode.ABSOLUTE

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def position_mm(self) -> tuple[float, float]:
        """Stored position converted back to millimeters."""
        x, y = self.cursor.position
        return x / self.resolution, y / self.resolution

    def reset(self) -> None:
        """Fresh run: origin, blank canvas, layer counter at 0, motors on."""
        self.cursor.reset()
        self.canvas.clear()
        self.layers.reset()
        self.motors_enabled = True
        self._warned_disabled = False
