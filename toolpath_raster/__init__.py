"""Toolpath Raster: render G-code toolpath programs as per-layer images.

Reads a toolpath program line by line, interprets motion and auxiliary
commands, traces every extrusion move onto a fixed-resolution canvas and
writes one grayscale image per layer.  No hardware is driven.

Subpackages (strict one-way dependency):
    scripts/ → interpreter/ → raster/ → controllers/ → gcode/ → configs/ → utils/

    gcode: Comment stripping, command parsing, toolpath line source
    raster: Canvas + rasterizer, cursor state, layer manager, image encoder
    controllers: Motion-controller interface and implementations
    interpreter: Mnemonic dispatch and run state machine
    configs: YAML configuration loading and validation
    utils: Logging and filesystem helpers

Key invariants:
    - Geometry in millimeters until scaled to raster units (round(mm * resolution))
    - Absent axis letters are ``None``, never zero
    - A layer is written to disk before its canvas is cleared
"""

__version__ = "1.0.0"

__all__ = ["configs", "controllers", "gcode", "interpreter", "raster", "utils"]
