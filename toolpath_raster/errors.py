"""Exception hierarchy shared by every layer of the renderer.

Library code raises these; only the interpreter run loop and the CLI
catch them, log them with run progress and convert them to an exit
status.  Nothing is retried.
"""

from __future__ import annotations


class ToolpathError(Exception):
    """Base exception for all renderer errors."""

    pass


class ParseError(ToolpathError):
    """A toolpath line contains a malformed word or numeric parameter."""

    def __init__(self, message: str, line_number: int = 0, token: str = "") -> None:
        self.line_number = line_number
        self.token = token
        where = f"line {line_number}: " if line_number else ""
        super().__init__(f"{where}{message}")


class UnknownCommandError(ToolpathError):
    """The interpreter has no handler for a mnemonic."""

    def __init__(self, mnemonic: str, line_number: int = 0) -> None:
        self.mnemonic = mnemonic
        self.line_number = line_number
        where = f" at line {line_number}" if line_number else ""
        super().__init__(f"Unknown command '{mnemonic}'{where}")


class CanvasBoundsError(ToolpathError, IndexError):
    """A raster write addressed a sample outside the canvas."""

    def __init__(self, x: int, y: int, width: int, height: int) -> None:
        self.x = x
        self.y = y
        self.width = width
        self.height = height
        super().__init__(
            f"Sample ({x}, {y}) is outside canvas [0, {width}) x [0, {height})"
        )


class EncoderError(ToolpathError):
    """A layer image could not be written."""

    def __init__(self, path: object, reason: str) -> None:
        self.path = path
        super().__init__(f"Failed to write layer image {path}: {reason}")


class ConfigError(ToolpathError):
    """Raised when configuration validation fails."""

    pass
