"""Forward-only line source for toolpath programs.

A source knows its total byte length up front and yields ``(text,
byte_length)`` pairs lazily, so the interpreter can report how far into
the file it got when a run aborts.  Byte lengths include the line
terminator; their sum over a full iteration equals ``total_bytes``.

Usage::

    source = ToolpathSource.from_path("cube.gcode")
    for text, nbytes in source:
        ...
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterator

logger = logging.getLogger(__name__)


class ToolpathSource:
    """Lazy, finite, non-restartable sequence of toolpath lines.

    Parameters
    ----------
    name : str | Path
        Human-readable origin (file path or ``"<string>"``).
    total_bytes : int
        Size of the whole program in bytes.
    opener : Callable[[], Iterator[bytes]]
        Zero-argument callable returning an iterator of raw ``bytes`` lines.
    encoding : str
        Text encoding used to decode each line.
    """

    def __init__(
        self,
        name: str | Path,
        total_bytes: int,
        opener: Callable[[], Iterator[bytes]],
        encoding: str = "utf-8",
    ) -> None:
        self.name = str(name)
        self.total_bytes = total_bytes
        self.encoding = encoding
        self._opener = opener
        self._consumed = False

    @classmethod
    def from_path(cls, path: str | Path, encoding: str = "utf-8") -> ToolpathSource:
        """Open a toolpath file lazily.

        Raises
        ------
        FileNotFoundError
            If *path* doesn't exist or is not a regular file.
        """
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Toolpath file not found: {path}")
        total = path.stat().st_size
        logger.debug("Toolpath %s: %d bytes", path, total)

        def opener() -> Iterator[bytes]:
            with open(path, "rb") as f:
                yield from f

        return cls(path, total, opener, encoding)

    @classmethod
    def from_string(cls, text: str, name: str = "<string>") -> ToolpathSource:
        """Wrap an in-memory program (byte length of its UTF-8 encoding)."""
        data = text.encode("utf-8")

        def opener() -> Iterator[bytes]:
            return iter(data.splitlines(keepends=True))

        return cls(name, len(data), opener, "utf-8")

    def __iter__(self) -> Iterator[tuple[str, int]]:
        if self._consumed:
            raise RuntimeError(f"Toolpath source {self.name} was already consumed")
        self._consumed = True
        return self._lines()

    def _lines(self) -> Iterator[tuple[str, int]]:
        for raw in self._opener():
            yield raw.decode(self.encoding, errors="replace"), len(raw)

    def __repr__(self) -> str:
        return f"ToolpathSource({self.name!r}, total_bytes={self.total_bytes})"
