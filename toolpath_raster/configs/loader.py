"""Configuration loader for the toolpath renderer.

Loads and validates ``raster.yaml`` into typed, frozen dataclasses.
Canvas geometry, layer naming and interpreter policies all come from the
config -- nothing is hardcoded in the raster or interpreter modules.

Lengths are stored in **millimeters**.  Conversion to raster units
(``round(mm * resolution_px_per_mm)``) happens only in the raster layer.

Usage::

    from toolpath_raster.configs.loader import load_config
    cfg = load_config()                       # default path
    cfg = load_config("/custom/raster.yaml")  # explicit path
"""

from __future__ import annotations

import logging
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from toolpath_raster.errors import ConfigError
from toolpath_raster.utils.fs import load_yaml

logger = logging.getLogger(__name__)

IMAGE_FORMATS = ("jpg", "png")
PARSE_ERROR_POLICIES = ("abort", "skip")


# ---------------------------------------------------------------------------
# Dataclasses -- mirror the YAML structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CanvasConfig:
    """Canvas geometry.

    Parameters
    ----------
    bed_size_mm : float
        Edge length of the square print bed in mm.
    resolution_px_per_mm : int
        Raster units per millimeter.
    foreground : int
        Intensity (1-255) painted by extrusion moves.
    """

    bed_size_mm: float
    resolution_px_per_mm: int
    foreground: int = 255

    @property
    def size_px(self) -> int:
        """Canvas width and height in raster units."""
        return int(round(self.bed_size_mm * self.resolution_px_per_mm))


@dataclass(frozen=True)
class LayerOutputConfig:
    """Where and how layer images are written."""

    output_dir: str
    image_format: str
    jpeg_quality: int
    name_template: str
    skip_empty_layers: bool = False
    flush_final_layer: bool = False
    write_manifest: bool = True


@dataclass(frozen=True)
class InterpreterConfig:
    """Command parsing and dispatch policies."""

    comment_marker: str
    on_parse_error: str


@dataclass(frozen=True)
class LoggingConfig:
    """Defaults for ``utils.logging_config.setup_logging``."""

    level: str
    json: bool = False
    file: str | None = None


@dataclass(frozen=True)
class RasterConfig:
    """Complete renderer configuration loaded from ``raster.yaml``."""

    canvas: CanvasConfig
    layers: LayerOutputConfig
    interpreter: InterpreterConfig
    logging: LoggingConfig


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _validate_config(cfg: RasterConfig) -> None:
    """Validate cross-field consistency.

    Raises
    ------
    ConfigError
        On any invalid combination.
    """
    # -- Canvas geometry ----------------------------------------------------
    c = cfg.canvas
    if c.bed_size_mm <= 0:
        raise ConfigError(f"canvas.bed_size_mm must be > 0, got {c.bed_size_mm}")
    if c.resolution_px_per_mm <= 0:
        raise ConfigError(
            f"canvas.resolution_px_per_mm must be > 0, got {c.resolution_px_per_mm}"
        )
    if c.size_px < 1:
        raise ConfigError(
            f"Canvas would be empty: {c.bed_size_mm} mm * "
            f"{c.resolution_px_per_mm} px/mm = {c.size_px} px"
        )
    if not 1 <= c.foreground <= 255:
        raise ConfigError(
            f"canvas.foreground must be in [1, 255], got {c.foreground}"
        )

    # -- Layer output -------------------------------------------------------
    lo = cfg.layers
    if lo.image_format not in IMAGE_FORMATS:
        raise ConfigError(
            f"layers.image_format must be one of {IMAGE_FORMATS}, "
            f"got '{lo.image_format}'"
        )
    if not 1 <= lo.jpeg_quality <= 100:
        raise ConfigError(
            f"layers.jpeg_quality must be in [1, 100], got {lo.jpeg_quality}"
        )
    try:
        fields = {
            name for _, name, _, _ in string.Formatter().parse(lo.name_template)
            if name is not None
        }
        probe = lo.name_template.format(index=0, z="0.0")
    except (KeyError, IndexError, ValueError) as exc:
        raise ConfigError(
            f"layers.name_template '{lo.name_template}' may only use "
            f"{{index}} and {{z}}: {exc}"
        ) from exc
    if "index" not in fields:
        raise ConfigError(
            f"layers.name_template must contain {{index}} to keep names "
            f"unique, got '{lo.name_template}'"
        )
    if "/" in probe or "\\" in probe:
        raise ConfigError(
            f"layers.name_template must not contain path separators, "
            f"got '{lo.name_template}'"
        )

    # -- Interpreter --------------------------------------------------------
    ic = cfg.interpreter
    if len(ic.comment_marker) != 1 or ic.comment_marker.isalnum():
        raise ConfigError(
            f"interpreter.comment_marker must be one punctuation character, "
            f"got {ic.comment_marker!r}"
        )
    if ic.on_parse_error not in PARSE_ERROR_POLICIES:
        raise ConfigError(
            f"interpreter.on_parse_error must be one of "
            f"{PARSE_ERROR_POLICIES}, got '{ic.on_parse_error}'"
        )

    # -- Logging ------------------------------------------------------------
    if not isinstance(logging.getLevelName(cfg.logging.level.upper()), int):
        raise ConfigError(f"Unknown logging.level '{cfg.logging.level}'")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def config_from_dict(data: dict[str, Any]) -> RasterConfig:
    """Build and validate a configuration from a raw YAML-shaped dict.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    """
    try:
        # -- canvas ---------------------------------------------------------
        cv = data["canvas"]
        canvas = CanvasConfig(
            bed_size_mm=float(cv["bed_size_mm"]),
            resolution_px_per_mm=int(cv["resolution_px_per_mm"]),
            foreground=int(cv.get("foreground", 255)),
        )

        # -- layers ---------------------------------------------------------
        ld = data["layers"]
        layers = LayerOutputConfig(
            output_dir=str(ld["output_dir"]),
            image_format=str(ld.get("image_format", "jpg")).lower().lstrip("."),
            jpeg_quality=int(ld.get("jpeg_quality", 100)),
            name_template=str(ld.get("name_template", "layer_{index}_{z}")),
            skip_empty_layers=bool(ld.get("skip_empty_layers", False)),
            flush_final_layer=bool(ld.get("flush_final_layer", False)),
            write_manifest=bool(ld.get("write_manifest", True)),
        )

        # -- interpreter ----------------------------------------------------
        idata = data.get("interpreter") or {}
        interpreter = InterpreterConfig(
            comment_marker=str(idata.get("comment_marker", ";")),
            on_parse_error=str(idata.get("on_parse_error", "abort")),
        )

        # -- logging --------------------------------------------------------
        lg = data.get("logging") or {}
        log_cfg = LoggingConfig(
            level=str(lg.get("level", "INFO")),
            json=bool(lg.get("json", False)),
            file=str(lg["file"]) if lg.get("file") else None,
        )

        config = RasterConfig(
            canvas=canvas,
            layers=layers,
            interpreter=interpreter,
            logging=log_cfg,
        )

    except KeyError as exc:
        raise ConfigError(
            f"Missing required configuration key: {exc}"
        ) from exc
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid configuration value: {exc}"
        ) from exc

    _validate_config(config)
    return config


def load_config(path: str | Path | None = None) -> RasterConfig:
    """Load and validate renderer configuration from YAML.

    Parameters
    ----------
    path : str | Path | None
        Path to ``raster.yaml``.  ``None`` loads the default shipped
        alongside this module.

    Returns
    -------
    RasterConfig
        Fully validated, frozen configuration object.

    Raises
    ------
    ConfigError
        If any field is missing or fails validation.
    FileNotFoundError
        If *path* does not exist.
    """
    if path is None:
        path = Path(__file__).parent / "raster.yaml"
    else:
        path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    logger.debug("Loading configuration from %s", path)

    data = load_yaml(path)
    if not data:
        raise ConfigError(f"Empty configuration file: {path}")
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    config = config_from_dict(data)
    logger.debug("Configuration loaded successfully")
    return config
