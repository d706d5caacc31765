"""Command dispatch and run state machine."""

from toolpath_raster.interpreter.dispatcher import (
    Interpreter,
    RunResult,
    RunState,
    progress_fraction,
)

__all__ = ["Interpreter", "RunResult", "RunState", "progress_fraction"]
