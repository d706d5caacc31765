"""Bounds-checked raster canvas with an integer line rasterizer.

The canvas owns a ``(height, width)`` uint8 numpy buffer.  Samples start at
0 (background); extrusion moves paint them to a fixed foreground value.
Callers address samples by ``(x, y)`` only -- row/column indexing into the
buffer is internal to this module.

Line rasterization:
    - Integer error accumulator (Bresenham midpoint form), no division.
    - Major axis = larger of |dx|, |dy| (ties → x).  One sample per unit
      step along it, so the line is 8-connected without gaps.
    - Endpoints are put in ascending order along the major axis before
      stepping.  A line and its reverse therefore paint the same samples.
    - Exactly ``max(|dx|, |dy|) + 1`` samples, both endpoints included.

Any coordinate outside ``[0, width) x [0, height)`` raises
``CanvasBoundsError`` before a single sample is written.

Usage:
    canvas = Canvas(2200, 2200)
    canvas.draw_line(0, 0, 5, 0)     # paints 6 samples
    canvas.clear()                   # in place, no reallocation
"""

from __future__ import annotations

import hashlib
import logging

import numpy as np

from toolpath_raster.configs.loader import CanvasConfig
from toolpath_raster.errors import CanvasBoundsError

logger = logging.getLogger(__name__)

BACKGROUND = 0
FOREGROUND = 255


def line_points(x0: int, y0: int, x1: int, y1: int) -> list[tuple[int, int]]:
    """Discrete samples of the segment ``(x0, y0)``-``(x1, y1)``, inclusive.

    Parameters
    ----------
    x0, y0, x1, y1 : int
        Integer endpoints.

    Returns
    -------
    list[tuple[int, int]]
        Samples ordered along the major axis in ascending direction.

    Notes
    -----
    Result is independent of endpoint order.
    """
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    steep = dy > dx

    # Canonical order: ascending along the major axis.
    if (steep and y0 > y1) or (not steep and x0 > x1):
        x0, y0, x1, y1 = x1, y1, x0, y0

    if steep:
        major, minor = y0, x0
        d_major, d_minor = dy, dx
        minor_step = 1 if x1 >= x0 else -1
    else:
        major, minor = x0, y0
        d_major, d_minor = dx, dy
        minor_step = 1 if y1 >= y0 else -1

    points = []
    err = 2 * d_minor - d_major
    for _ in range(d_major + 1):
        points.append((minor, major) if steep else (major, minor))
        if err > 0:
            minor += minor_step
            err -= 2 * d_major
        err += 2 * d_minor
        major += 1
    return points


class Canvas:
    """Fixed-size single-channel raster.

    Parameters
    ----------
    width, height : int
        Canvas size in raster units (> 0).
    foreground : int
        Default intensity painted by ``draw_line``.

    Attributes
    ----------
    width, height : int
        Canvas size, fixed at construction.
    foreground : int
        Default paint intensity.
    """

    def __init__(self, width: int, height: int, foreground: int = FOREGROUND) -> None:
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {width}x{height}")
        if not 0 <= foreground <= 255:
            raise ValueError(f"foreground must be in [0, 255], got {foreground}")
        self.width = int(width)
        self.height = int(height)
        self.foreground = int(foreground)
        self._buf = np.zeros((self.height, self.width), dtype=np.uint8)

    @classmethod
    def from_config(cls, cfg: CanvasConfig) -> Canvas:
        """Square canvas of ``bed_size_mm * resolution_px_per_mm`` samples."""
        return cls(cfg.size_px, cfg.size_px, cfg.foreground)

    # ------------------------------------------------------------------
    # Sample access
    # ------------------------------------------------------------------

    @property
    def shape(self) -> tuple[int, int]:
        """Buffer shape ``(height, width)``."""
        return self._buf.shape

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def _check(self, x: int, y: int) -> None:
        if not self.in_bounds(x, y):
            raise CanvasBoundsError(x, y, self.width, self.height)

    def get(self, x: int, y: int) -> int:
        """Intensity at ``(x, y)``.

        Raises
        ------
        CanvasBoundsError
            If the sample is outside the canvas.
        """
        self._check(x, y)
        return int(self._buf[y, x])

    def put(self, x: int, y: int, value: int | None = None) -> None:
        """Paint one sample (``foreground`` when *value* is None)."""
        self._check(x, y)
        self._buf[y, x] = self.foreground if value is None else value

    # ------------------------------------------------------------------
    # Drawing
    # ------------------------------------------------------------------

    def draw_line(
        self,
        x0: int,
        y0: int,
        x1: int,
        y1: int,
        value: int | None = None,
    ) -> int:
        """Rasterize a segment onto the canvas.

        Parameters
        ----------
        x0, y0, x1, y1 : int
            Endpoints in raster units.
        value : int | None
            Intensity; ``None`` paints ``foreground``.

        Returns
        -------
        int
            Number of samples on the line.

        Raises
        ------
        CanvasBoundsError
            If either endpoint is outside the canvas.  Nothing is painted.
        """
        self._check(x0, y0)
        self._check(x1, y1)
        points = line_points(x0, y0, x1, y1)
        xs, ys = zip(*points)
        self._buf[np.asarray(ys), np.asarray(xs)] = (
            self.foreground if value is None else value
        )
        return len(points)

    def clear(self) -> None:
        """Reset every sample to background, in place."""
        self._buf.fill(BACKGROUND)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    def samples(self) -> np.ndarray:
        """Read-only ``(height, width)`` view of the buffer."""
        view = self._buf.view()
        view.flags.writeable = False
        return view

    def painted(self) -> set[tuple[int, int]]:
        """Set of ``(x, y)`` samples that differ from background."""
        ys, xs = np.nonzero(self._buf)
        return set(zip(xs.tolist(), ys.tolist()))

    def count_painted(self) -> int:
        return int(np.count_nonzero(self._buf))

    def is_blank(self) -> bool:
        return not self._buf.any()

    def checksum(self) -> str:
        """SHA-256 hex digest of the sample buffer (determinism checks)."""
        return hashlib.sha256(self._buf.tobytes()).hexdigest()

    def __repr__(self) -> str:
        return f"Canvas({self.width}x{self.height}, painted={self.count_painted()})"
