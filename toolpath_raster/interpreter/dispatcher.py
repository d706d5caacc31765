"""Toolpath interpreter -- mnemonic dispatch and the run state machine.

Reads a ``ToolpathSource`` line by line.  Each non-empty line is parsed
into a ``Command`` and dispatched through a mnemonic table:

    G0 / G28          travel (no drawing)
    G1                extrusion (draws)
    G92               set position
    G90 / G91         absolute / relative coordinates
    M17, M18 / M84    motors on / off
    M82 M83 M104 M105 M106 M107 M109 M140 M190
                      diagnostics only, forwarded as ``auxiliary``

The raster plotter always receives a command first; the caller's motion
controllers are notified afterwards, in the order given.

Run states::

    READY -> RUNNING -> COMPLETED   input exhausted
                     -> ABORTED     unknown mnemonic, parse error (policy
                                    "abort"), canvas bounds, encoder failure

Fatal errors are caught once here, logged with the fraction of input
consumed and returned in ``RunResult.error``.  Layers already written stay
on disk; the unflushed canvas is discarded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from pathlib import Path
from typing import Callable, Iterable

from toolpath_raster.configs.loader import RasterConfig
from toolpath_raster.controllers.base import MotionController
from toolpath_raster.errors import ParseError, ToolpathError, UnknownCommandError
from toolpath_raster.gcode.commands import Axes, Command
from toolpath_raster.gcode.parser import parse_line
from toolpath_raster.gcode.source import ToolpathSource
from toolpath_raster.raster.canvas import Canvas
from toolpath_raster.raster.encoder import ImageEncoder, PillowImageEncoder
from toolpath_raster.raster.layers import Layer, LayerManager, format_height
from toolpath_raster.raster.plotter import RasterPlotter

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------


class RunState(Enum):
    """Interpreter run state."""

    READY = auto()
    RUNNING = auto()
    COMPLETED = auto()
    ABORTED = auto()


@dataclass
class RunResult:
    """Outcome of one interpreter run.

    Attributes
    ----------
    state : RunState
        COMPLETED or ABORTED.
    layers : list[Layer]
        Layers written during the run, in order.
    lines_read : int
        Source lines consumed, including the one that aborted the run.
    commands_executed : int
        Commands dispatched successfully.
    bytes_consumed, total_bytes : int
        Input position when the run stopped, and input size.
    progress : float
        ``bytes_consumed / total_bytes`` rounded to two decimals.
    error : Exception | None
        The fatal error of an aborted run.
    """

    state: RunState
    layers: list[Layer] = field(default_factory=list)
    lines_read: int = 0
    commands_executed: int = 0
    bytes_consumed: int = 0
    total_bytes: int = 0
    progress: float = 0.0
    error: Exception | None = None

    @property
    def exit_code(self) -> int:
        return 0 if self.state is RunState.COMPLETED else 1

    def summary(self) -> dict:
        """Plain-dict view for manifests and JSON logs."""
        return {
            "state": self.state.name,
            "layers": len(self.layers),
            "lines_read": self.lines_read,
            "commands_executed": self.commands_executed,
            "progress": self.progress,
            "error": str(self.error) if self.error is not None else None,
        }


def progress_fraction(consumed: int, total: int) -> float:
    """Fraction of input consumed, rounded to two decimals."""
    if total <= 0:
        return 1.0
    return round(consumed / total, 2)


# ---------------------------------------------------------------------------
# Auxiliary diagnostics
# ---------------------------------------------------------------------------


def _s_value(command: Command) -> str:
    value = command.get("S")
    return "?" if value is None else str(int(value))


def _fan_percent(command: Command) -> str:
    value = command.get("S", 255.0)
    if value is None:
        value = 255.0
    return str(round(value / 255 * 100))


_AUXILIARY: dict[str, Callable[[Command], str]] = {
    "M82": lambda c: "Extruder set to absolute mode",
    "M83": lambda c: "Extruder set to relative mode",
    "M104": lambda c: f"Hotend temperature set to {_s_value(c)} C (no wait)",
    "M105": lambda c: "Temperature report requested",
    "M106": lambda c: f"Part cooling fan on at {_fan_percent(c)} %",
    "M107": lambda c: "Part cooling fan off",
    "M109": lambda c: f"Hotend temperature set to {_s_value(c)} C (wait)",
    "M140": lambda c: f"Bed temperature set to {_s_value(c)} C (no wait)",
    "M190": lambda c: f"Bed temperature set to {_s_value(c)} C (wait)",
}


def _zero_bare(command: Command, letters: str) -> Axes:
    """Axes where a bare letter counts as zero (G28 / G92 style)."""
    values = {}
    for letter in letters:
        if command.has(letter):
            value = command.get(letter)
            values[letter.lower()] = 0.0 if value is None else value
    return Axes(**values)


# ---------------------------------------------------------------------------
# Interpreter
# ---------------------------------------------------------------------------


class Interpreter:
    """Runs toolpath programs onto a raster canvas.

    Parameters
    ----------
    config : RasterConfig
        Canvas geometry, layer output and parse policies.
    encoder : ImageEncoder | None
        Layer image writer.  Defaults to a ``PillowImageEncoder`` for the
        configured format.
    output_dir : str | Path | None
        Directory for layer images.  Defaults to ``config.layers.output_dir``.
        Must exist before the first layer is flushed.
    controllers : Iterable[MotionController]
        Extra controllers notified after the raster plotter.
    """

    def __init__(
        self,
        config: RasterConfig,
        encoder: ImageEncoder | None = None,
        output_dir: str | Path | None = None,
        controllers: Iterable[MotionController] = (),
    ) -> None:
        self._cfg = config
        if encoder is None:
            encoder = PillowImageEncoder(
                config.layers.image_format, config.layers.jpeg_quality
            )
        self.output_dir = Path(
            output_dir if output_dir is not None else config.layers.output_dir
        )
        self.canvas = Canvas.from_config(config.canvas)
        self.layers = LayerManager(
            self.canvas,
            encoder,
            self.output_dir,
            name_template=config.layers.name_template,
            skip_empty_layers=config.layers.skip_empty_layers,
        )
        self.plotter = RasterPlotter(
            self.canvas, self.layers, config.canvas.resolution_px_per_mm
        )
        self.controllers = list(controllers)

        self._state = RunState.READY
        self._progress_cb: Callable[[RunResult], None] | None = None
        self._handlers: dict[str, Callable[[Command], None]] = {
            "G0": self._travel,
            "G1": self._extrude,
            "G28": self._home,
            "G92": self._set_position,
            "G90": self._absolute,
            "G91": self._relative,
            "M17": self._motors_on,
            "M18": self._motors_off,
            "M84": self._motors_off,
        }
        for mnemonic in _AUXILIARY:
            self._handlers[mnemonic] = self._auxiliary

    # ------------------------------------------------------------------
    # Common
    # ------------------------------------------------------------------

    @property
    def state(self) -> RunState:
        return self._state

    @property
    def mnemonics(self) -> frozenset[str]:
        """Every mnemonic with a handler."""
        return frozenset(self._handlers)

    def set_progress_callback(self, fn: Callable[[RunResult], None]) -> None:
        """Register a callback invoked after every flushed layer."""
        self._progress_cb = fn

    def _notify(self, result: RunResult) -> None:
        if self._progress_cb is None:
            return
        try:
            self._progress_cb(result)
        except Exception as exc:  # noqa: BLE001
            logger.error("Progress callback error: %s", exc)

    def _broadcast(self, method: str, *args) -> None:
        for controller in self.controllers:
            getattr(controller, method)(*args)

    def reset(self) -> None:
        """Fresh cursor, blank canvas and layer counter at 0."""
        self.plotter.reset()
        self._state = RunState.READY

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def dispatch(self, command: Command) -> None:
        """Execute one command.

        Raises
        ------
        UnknownCommandError
            If no handler exists for the mnemonic.
        CanvasBoundsError
            If an extrusion leaves the canvas.
        EncoderError
            If a layer image cannot be written.
        """
        handler = self._handlers.get(command.mnemonic)
        if handler is None:
            raise UnknownCommandError(command.mnemonic, command.line_number)
        handler(command)

    def _travel(self, command: Command) -> None:
        axes = Axes.from_command(command)
        self.plotter.move(axes)
        self._broadcast("move", axes)

    def _extrude(self, command: Command) -> None:
        axes = Axes.from_command(command)
        self.plotter.extrude_move(axes)
        self._broadcast("extrude_move", axes)

    def _home(self, command: Command) -> None:
        named = _zero_bare(command, "XY")
        if named.x is None and named.y is None:
            axes = Axes(x=0.0, y=0.0)
        else:
            axes = Axes(
                x=0.0 if named.x is not None else None,
                y=0.0 if named.y is not None else None,
            )
        logger.info("G28: homing %s", axes.describe())
        self.plotter.move(axes)
        self._broadcast("move", axes)

    def _set_position(self, command: Command) -> None:
        axes = _zero_bare(command, "XYZE")
        logger.info("G92: position set to %s", axes.describe())
        self.plotter.reposition(axes)
        self._broadcast("reposition", axes)

    def _absolute(self, command: Command) -> None:
        logger.info("G90: absolute coordinates")
        self.plotter.set_absolute()
        self._broadcast("set_absolute")

    def _relative(self, command: Command) -> None:
        logger.info("G91: relative coordinates")
        self.plotter.set_relative()
        self._broadcast("set_relative")

    def _motors_on(self, command: Command) -> None:
        logger.info("%s: motors on", command.mnemonic)
        self.plotter.enable()
        self._broadcast("enable")

    def _motors_off(self, command: Command) -> None:
        logger.info("%s: motors off", command.mnemonic)
        self.plotter.disable()
        self._broadcast("disable")

    def _auxiliary(self, command: Command) -> None:
        logger.info("%s: %s", command.mnemonic, _AUXILIARY[command.mnemonic](command))
        self.plotter.auxiliary(command)
        self._broadcast("auxiliary", command)

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    def run(self, source: ToolpathSource, raise_on_error: bool = False) -> RunResult:
        """Interpret *source* from the first line to the last.

        Parameters
        ----------
        source : ToolpathSource
            Forward-only program source; consumed by this call.
        raise_on_error : bool
            Re-raise the fatal error after logging instead of returning an
            ABORTED result.

        Returns
        -------
        RunResult
            Final state, written layers and progress counters.
        """
        self.reset()
        self._state = RunState.RUNNING
        policy = self._cfg.interpreter.on_parse_error
        marker = self._cfg.interpreter.comment_marker
        result = RunResult(state=RunState.RUNNING, total_bytes=source.total_bytes)
        logger.info("Running %s (%d bytes)", source.name, source.total_bytes)

        lines = iter(source)
        try:
            for text, nbytes in lines:
                result.lines_read += 1
                result.bytes_consumed += nbytes
                try:
                    command = parse_line(text, result.lines_read, marker)
                except ParseError as exc:
                    if policy == "skip":
                        logger.warning("Skipping malformed line: %s", exc)
                        continue
                    raise
                if command is None:
                    continue

                flushed = len(self.layers.layers)
                self.dispatch(command)
                result.commands_executed += 1
                if len(self.layers.layers) != flushed:
                    result.layers = list(self.layers.layers)
                    result.progress = progress_fraction(
                        result.bytes_consumed, result.total_bytes
                    )
                    self._notify(result)

            if self._cfg.layers.flush_final_layer:
                self._flush_final()
        except ToolpathError as exc:
            return self._abort(result, exc, raise_on_error)
        finally:
            close = getattr(lines, "close", None)
            if close is not None:
                close()

        self._state = RunState.COMPLETED
        result.state = RunState.COMPLETED
        result.layers = list(self.layers.layers)
        result.progress = progress_fraction(result.bytes_consumed, result.total_bytes)
        logger.info(
            "Completed %s: %d layers, %d commands",
            source.name, len(result.layers), result.commands_executed,
        )
        return result

    def run_lines(self, text: str, raise_on_error: bool = False) -> RunResult:
        """Interpret an in-memory program (byte counts from its UTF-8 form)."""
        return self.run(ToolpathSource.from_string(text), raise_on_error)

    def _flush_final(self) -> None:
        z = self.plotter.cursor.last_flushed_z
        z = 0.0 if z is None else z
        if self.canvas.is_blank():
            logger.debug("Final canvas is blank; nothing to flush")
            return
        logger.info("Flushing final layer at Z=%s", format_height(z))
        self.plotter.flush_layer(z)

    def _abort(
        self, result: RunResult, exc: ToolpathError, raise_on_error: bool
    ) -> RunResult:
        self._state = RunState.ABORTED
        result.state = RunState.ABORTED
        result.error = exc
        result.layers = list(self.layers.layers)
        result.progress = progress_fraction(result.bytes_consumed, result.total_bytes)
        logger.error(
            "Run aborted at line %d (%.2f of input): %s",
            result.lines_read, result.progress, exc,
        )
        discarded = self.canvas.count_painted()
        if discarded:
            logger.warning("Discarding %d unflushed samples", discarded)
        self.canvas.clear()
        if raise_on_error:
            raise exc
        return result
