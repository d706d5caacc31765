"""Renderer configuration loading and validation."""

from toolpath_raster.configs.loader import (
    CanvasConfig,
    ConfigError,
    InterpreterConfig,
    LayerOutputConfig,
    LoggingConfig,
    RasterConfig,
    config_from_dict,
    load_config,
)

__all__ = [
    "CanvasConfig",
    "ConfigError",
    "InterpreterConfig",
    "LayerOutputConfig",
    "LoggingConfig",
    "RasterConfig",
    "config_from_dict",
    "load_config",
]
