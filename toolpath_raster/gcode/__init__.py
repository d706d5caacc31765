"""Toolpath text handling: commands, parser, line source."""

from toolpath_raster.gcode.commands import Axes, Command, Parameter
from toolpath_raster.gcode.parser import (
    normalize_mnemonic,
    parse_line,
    parse_word,
    strip_comment,
)
from toolpath_raster.gcode.source import ToolpathSource

__all__ = [
    "Axes",
    "Command",
    "Parameter",
    "ToolpathSource",
    "normalize_mnemonic",
    "parse_line",
    "parse_word",
    "strip_comment",
]
