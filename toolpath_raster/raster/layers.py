"""Layer manager -- turns Z changes into layer images.

Every motion command that carries a Z word closes the current layer: the
canvas is handed to the image encoder as ``layer_<index>_<z>`` and then
cleared in place.  The index counter belongs to the manager instance,
starts at 0 and only moves forward within a run.  The image is fully
written before the canvas is cleared.

Heights are rounded half away from zero to one decimal for naming
(``0.25`` → ``"0.3"``, ``-0.04`` → ``"0.0"``).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from pathlib import Path

from toolpath_raster.raster.canvas import Canvas
from toolpath_raster.raster.encoder import ImageEncoder
from toolpath_raster.utils import fs

logger = logging.getLogger(__name__)

DEFAULT_NAME_TEMPLATE = "layer_{index}_{z}"


def format_height(z: float) -> str:
    """One-decimal label for a layer height."""
    tenths = math.floor(abs(z) * 10 + 0.5)
    if tenths == 0:
        return "0.0"
    return f"{math.copysign(tenths, z) / 10:.1f}"


@dataclass(frozen=True, slots=True)
class Layer:
    """A written layer artifact.

    Parameters
    ----------
    index : int
        Position in the run, starting at 0.
    z : float
        Z height (mm) that closed the layer.
    name : str
        Artifact name without extension.
    path : Path
        Where the image was written.
    painted : int
        Number of non-background samples in the image.
    """

    index: int
    z: float
    name: str
    path: Path
    painted: int

    def to_dict(self) -> dict:
        return {
            "index": self.index,
            "z": self.z,
            "name": self.name,
            "file": self.path.name,
            "painted_samples": self.painted,
        }


class LayerManager:
    """Flushes the canvas to an image on every layer change.

    Parameters
    ----------
    canvas : Canvas
        Canvas shared with the plotter; cleared after every flush.
    encoder : ImageEncoder
        Persists the samples.
    output_dir : str | Path
        Directory receiving the images; must exist before the first flush.
    name_template : str
        ``str.format`` template with ``{index}`` and ``{z}`` fields.
    skip_empty_layers : bool
        Do not write (nor number) layers without painted samples.
    """

    def __init__(
        self,
        canvas: Canvas,
        encoder: ImageEncoder,
        output_dir: str | Path,
        name_template: str = DEFAULT_NAME_TEMPLATE,
        skip_empty_layers: bool = False,
    ) -> None:
        self.canvas = canvas
        self.encoder = encoder
        self.output_dir = Path(output_dir)
        self.name_template = name_template
        self.skip_empty_layers = skip_empty_layers
        self.next_index = 0
        self.layers: list[Layer] = []

    def layer_name(self, index: int, z: float) -> str:
        return self.name_template.format(index=index, z=format_height(z))

    def on_z_change(self, z: float) -> Layer | None:
        """Persist the current canvas as the next layer, then clear it.

        Parameters
        ----------
        z : float
            Height (mm) carried by the motion command.

        Returns
        -------
        Layer | None
            The written layer, or ``None`` when an empty layer was skipped.

        Raises
        ------
        EncoderError
            If the image cannot be written.  The canvas is left untouched
            and the counter does not advance.
        """
        if self.skip_empty_layers and self.canvas.is_blank():
            logger.debug("Skipping empty layer at Z=%s", format_height(z))
            self.canvas.clear()
            return None

        index = self.next_index
        name = self.layer_name(index, z)
        destination = self.output_dir / f"{name}{self.encoder.extension}"
        painted = self.canvas.count_painted()

        path = self.encoder.encode(
            self.canvas.samples(), self.canvas.width, self.canvas.height, destination
        )
        self.next_index += 1
        self.canvas.clear()

        layer = Layer(index=index, z=z, name=name, path=Path(path), painted=painted)
        self.layers.append(layer)
        logger.info(
            "Layer %d written: %s (Z=%s, %d samples)",
            index, layer.path.name, format_height(z), painted,
        )
        return layer

    def write_manifest(self, path: str | Path, status: str, **extra) -> Path:
        """Write a YAML summary of the layers written so far."""
        path = Path(path)
        manifest = {
            "status": status,
            "canvas": {"width": self.canvas.width, "height": self.canvas.height},
            **extra,
            "layers": [layer.to_dict() for layer in self.layers],
        }
        fs.atomic_yaml_dump(manifest, path)
        logger.debug("Manifest written to %s", path)
        return path

    def reset(self) -> None:
        """Start a new run: counter back to 0, history dropped."""
        self.next_index = 0
        self.layers = []
