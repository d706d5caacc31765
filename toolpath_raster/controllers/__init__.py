"""Motion-controller interface and non-drawing implementations.

The raster-recording implementation lives in ``toolpath_raster.raster.plotter``.
"""

from toolpath_raster.controllers.base import MotionController
from toolpath_raster.controllers.sinks import (
    LoggingController,
    NullController,
    RecordingController,
)

__all__ = [
    "LoggingController",
    "MotionController",
    "NullController",
    "RecordingController",
]
