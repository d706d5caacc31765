"""Motion-controller interface.

The interpreter reports every recognized command to one or more motion
controllers.  A controller turns those notifications into side effects:
tracing the path on a canvas, logging, recording for audits, or -- in a
hardware-facing implementation -- driving real steppers.  Controllers are
supplied by the caller; the interpreter is never subclassed to change
behavior.

All calls are fire-and-forget: return values are ignored.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from toolpath_raster.gcode.commands import Axes, Command


class MotionController(ABC):
    """Capability set ``{move, extrude-move, reposition, enable, disable,
    set-relative, set-absolute}`` plus pass-through auxiliary commands."""

    @abstractmethod
    def move(self, axes: Axes) -> None:
        """Travel move (G0, G28): reposition without depositing material."""

    @abstractmethod
    def extrude_move(self, axes: Axes) -> None:
        """Extrusion move (G1): deposit material along the path."""

    @abstractmethod
    def reposition(self, axes: Axes) -> None:
        """Redefine the current position without moving (G92)."""

    @abstractmethod
    def enable(self) -> None:
        """Motors on (M17)."""

    @abstractmethod
    def disable(self) -> None:
        """Motors off (M18 / M84)."""

    @abstractmethod
    def set_relative(self) -> None:
        """Relative distance mode (G91)."""

    @abstractmethod
    def set_absolute(self) -> None:
        """Absolute distance mode (G90)."""

    def auxiliary(self, command: Command) -> None:
        """Temperature, fan and extruder-mode commands.  Ignored by default."""
        return None
