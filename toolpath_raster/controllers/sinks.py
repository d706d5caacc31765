"""Non-drawing motion controllers.

    - ``NullController``: accepts everything, does nothing
    - ``LoggingController``: one log line per notification
    - ``RecordingController``: keeps an ordered call log for audits and tests
"""

from __future__ import annotations

import logging

from toolpath_raster.controllers.base import MotionController
from toolpath_raster.gcode.commands import Axes, Command

logger = logging.getLogger(__name__)


class NullController(MotionController):
    """Controller that ignores every notification."""

    def move(self, axes: Axes) -> None:
        pass

    def extrude_move(self, axes: Axes) -> None:
        pass

    def reposition(self, axes: Axes) -> None:
        pass

    def enable(self) -> None:
        pass

    def disable(self) -> None:
        pass

    def set_relative(self) -> None:
        pass

    def set_absolute(self) -> None:
        pass


class LoggingController(MotionController):
    """Logs every notification at a fixed level.

    Parameters
    ----------
    level : int
        ``logging`` level for the messages, default INFO.
    name : str
        Logger name, default this module.
    """

    def __init__(self, level: int = logging.INFO, name: str | None = None) -> None:
        self.level = level
        self._log = logging.getLogger(name) if name else logger

    def move(self, axes: Axes) -> None:
        self._log.log(self.level, "move %s", axes.describe())

    def extrude_move(self, axes: Axes) -> None:
        self._log.log(self.level, "extrude-move %s", axes.describe())

    def reposition(self, axes: Axes) -> None:
        self._log.log(self.level, "reposition %s", axes.describe())

    def enable(self) -> None:
        self._log.log(self.level, "motors on")

    def disable(self) -> None:
        self._log.log(self.level, "motors off")

    def set_relative(self) -> None:
        self._log.log(self.level, "relative coordinates")

    def set_absolute(self) -> None:
        self._log.log(self.level, "absolute coordinates")

    def auxiliary(self, command: Command) -> None:
        self._log.log(self.level, "auxiliary %s", command)


class RecordingController(MotionController):
    """Records ``(name, payload)`` for each notification, in order.

    Attributes
    ----------
    calls : list[tuple[str, object]]
        ``payload`` is the ``Axes`` for motion calls, the ``Command`` for
        auxiliary calls and ``None`` otherwise.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, object]] = []

    def names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def move(self, axes: Axes) -> None:
        self.calls.append(("move", axes))

    def extrude_move(self, axes: Axes) -> None:
        self.calls.append(("extrude_move", axes))

    def reposition(self, axes: Axes) -> None:
        self.calls.append(("reposition", axes))

    def enable(self) -> None:
        self.calls.append(("enable", None))

    def disable(self) -> None:
        self.calls.append(("disable", None))

    def set_relative(self) -> None:
        self.calls.append(("set_relative", None))

    def set_absolute(self) -> None:
        self.calls.append(("set_absolute", None))

    def auxiliary(self, command: Command) -> None:
        self.calls.append(("auxiliary", command))
