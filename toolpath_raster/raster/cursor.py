"""Cursor / axis state in raster units.

Millimeter positions are scaled by the canvas resolution and rounded half
away from zero (0.05 mm → 1 unit at 10 px/mm, -0.05 mm → -1 unit), the
same rounding the C library ``round()`` applies.  The motion mode is kept
for reporting only: supplied X/Y are always absolute positions.
"""

from __future__ import annotations

import enum
import math
from dataclasses import dataclass


class MotionMode(enum.Enum):
    """Distance mode selected by G90 / G91."""

    ABSOLUTE = "absolute"
    RELATIVE = "relative"


def to_raster(value_mm: float, resolution: int) -> int:
    """Scale *value_mm* to raster units, rounding half away from zero."""
    scaled = value_mm * resolution
    return int(math.copysign(math.floor(abs(scaled) + 0.5), scaled))


@dataclass
class CursorState:
    """Mutable cursor owned by one raster plotter.

    Attributes
    ----------
    current_x, current_y : int
        Last stored position in raster units.
    last_flushed_z : float | None
        Z height (mm) of the most recent layer flush.
    motion_mode : MotionMode
        Reported distance mode.
    """

    current_x: int = 0
    current_y: int = 0
    last_flushed_z: float | None = None
    motion_mode: MotionMode = MotionMode.ABSOLUTE

    @property
    def position(self) -> tuple[int, int]:
        return self.current_x, self.current_y

    def resolve(
        self, x_mm: float | None, y_mm: float | None, resolution: int
    ) -> tuple[int, int]:
        """Target raster position; absent axes carry over the stored value."""
        x = to_raster(x_mm, resolution) if x_mm is not None else self.current_x
        y = to_raster(y_mm, resolution) if y_mm is not None else self.current_y
        return x, y

    def store(self, x: int, y: int) -> None:
        self.current_x = x
        self.current_y = y

    def reset(self) -> None:
        """Back to the power-on state: origin, absolute mode, no layer."""
        self.current_x = 0
        self.current_y = 0
        self.last_flushed_z = None
        self.motion_mode = MotionMode.ABSOLUTE
