"""Raster side of the renderer: canvas, cursor, layers, encoders, plotter."""

from toolpath_raster.raster.canvas import BACKGROUND, FOREGROUND, Canvas, line_points
from toolpath_raster.raster.cursor import CursorState, MotionMode, to_raster
from toolpath_raster.raster.encoder import (
    ImageEncoder,
    MemoryImageEncoder,
    PillowImageEncoder,
)
from toolpath_raster.raster.layers import Layer, LayerManager, format_height
from toolpath_raster.raster.plotter import RasterPlotter

__all__ = [
    "BACKGROUND",
    "FOREGROUND",
    "Canvas",
    "CursorState",
    "ImageEncoder",
    "Layer",
    "LayerManager",
    "MemoryImageEncoder",
    "MotionMode",
    "PillowImageEncoder",
    "RasterPlotter",
    "format_height",
    "line_points",
    "to_raster",
]
