"""Layer image encoders.

An encoder receives a ``(height, width)`` uint8 sample buffer and a full
destination path and persists it.  The layer manager owns naming; the
encoder only contributes the file extension.

Implementations:
    - ``PillowImageEncoder``: grayscale JPEG/PNG via Pillow, written atomically
    - ``MemoryImageEncoder``: keeps copies in memory (audits, tests)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import numpy as np

from toolpath_raster.errors import EncoderError
from toolpath_raster.utils import fs

logger = logging.getLogger(__name__)


class ImageEncoder(Protocol):
    """Persists one single-channel raster."""

    extension: str

    def encode(
        self, samples: np.ndarray, width: int, height: int, destination: Path
    ) -> Path:
        ...


def _check_shape(samples: np.ndarray, width: int, height: int, destination: Path) -> None:
    if samples.shape != (height, width):
        raise EncoderError(
            destination,
            f"buffer shape {samples.shape} does not match {width}x{height}",
        )


class PillowImageEncoder:
    """Grayscale image writer backed by Pillow.

    Parameters
    ----------
    image_format : str
        ``"jpg"`` or ``"png"``.
    jpeg_quality : int
        JPEG quality 1-100 (ignored for PNG).
    """

    def __init__(self, image_format: str = "jpg", jpeg_quality: int = 100) -> None:
        image_format = image_format.lower().lstrip(".")
        if image_format not in ("jpg", "png"):
            raise ValueError(f"Unsupported image format '{image_format}'")
        self.image_format = image_format
        self.jpeg_quality = jpeg_quality
        self.extension = f".{image_format}"

    def encode(
        self, samples: np.ndarray, width: int, height: int, destination: Path
    ) -> Path:
        """Write *samples* to *destination*.

        Raises
        ------
        EncoderError
            If the buffer shape is wrong or the file cannot be written.
        """
        destination = Path(destination)
        _check_shape(samples, width, height, destination)
        pil_kwargs = {"quality": self.jpeg_quality} if self.image_format == "jpg" else {}
        try:
            fs.atomic_save_image(samples, destination, pil_kwargs)
        except (RuntimeError, OSError) as exc:
            raise EncoderError(destination, str(exc)) from exc
        logger.debug("Encoded %dx%d layer to %s", width, height, destination)
        return destination


class MemoryImageEncoder:
    """Encoder that keeps a copy of every buffer instead of writing files.

    Attributes
    ----------
    images : dict[Path, np.ndarray]
        Copies keyed by destination, in write order.
    """

    def __init__(self, extension: str = ".raw") -> None:
        self.extension = extension
        self.images: dict[Path, np.ndarray] = {}

    def encode(
        self, samples: np.ndarray, width: int, height: int, destination: Path
    ) -> Path:
        destination = Path(destination)
        _check_shape(samples, width, height, destination)
        self.images[destination] = np.array(samples, copy=True)
        return destination
