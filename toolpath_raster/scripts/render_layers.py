#!/usr/bin/env python3
"""
Render Layers Script.

Interpret a toolpath program and write one grayscale image per layer.

Usage:
    python -m toolpath_raster.scripts.render_layers part.gcode
    python -m toolpath_raster.scripts.render_layers part.gcode --output-dir out --format png
    python -m toolpath_raster.scripts.render_layers part.gcode --config my_raster.yaml --log-level DEBUG

Exit status is 0 when the whole program ran, 1 when it was aborted or
could not be started.
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path

from toolpath_raster.configs.loader import IMAGE_FORMATS, load_config
from toolpath_raster.errors import ConfigError
from toolpath_raster.gcode.source import ToolpathSource
from toolpath_raster.interpreter.dispatcher import Interpreter, RunState
from toolpath_raster.raster.encoder import PillowImageEncoder
from toolpath_raster.utils import fs
from toolpath_raster.utils.logging_config import pop_context, push_context, setup_logging

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.yaml"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toolpath-raster",
        description="Render a G-code toolpath as per-layer raster images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "toolpath",
        type=str,
        help="Toolpath program to render",
    )
    parser.add_argument(
        "--output-dir",
        "-o",
        type=str,
        help="Directory for layer images (default: layers.output_dir from config)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=str,
        help="Configuration file path",
    )
    parser.add_argument(
        "--format",
        "-f",
        choices=IMAGE_FORMATS,
        help="Layer image format override",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Logging level override (DEBUG, INFO, WARNING, ...)",
    )
    parser.add_argument(
        "--log-file",
        type=str,
        help="Also write logs to this file",
    )
    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Write the log file as JSON lines",
    )
    parser.add_argument(
        "--flush-final-layer",
        action="store_true",
        help="Write the in-progress canvas as a last layer at the end",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    # Load config
    try:
        config = load_config(args.config)
    except (ConfigError, FileNotFoundError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    layers_cfg = config.layers
    if args.format:
        layers_cfg = replace(layers_cfg, image_format=args.format)
    if args.flush_final_layer:
        layers_cfg = replace(layers_cfg, flush_final_layer=True)
    config = replace(config, layers=layers_cfg)

    log_cfg = config.logging
    setup_logging(
        log_level=args.log_level or log_cfg.level,
        log_file=args.log_file or log_cfg.file,
        json=args.json_logs or log_cfg.json,
        quiet_libs=["PIL"],
        context={"app": "toolpath-raster"},
    )

    try:
        source = ToolpathSource.from_path(args.toolpath)
    except FileNotFoundError as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        output_dir = fs.ensure_dir(args.output_dir or config.layers.output_dir)
    except OSError as e:
        logger.error("Cannot create output directory: %s", e)
        print(f"Error: cannot create output directory: {e}", file=sys.stderr)
        return 1

    encoder = PillowImageEncoder(config.layers.image_format, config.layers.jpeg_quality)
    interpreter = Interpreter(config, encoder=encoder, output_dir=output_dir)

    push_context(source=Path(args.toolpath).name)
    try:
        result = interpreter.run(source)
    finally:
        pop_context(["source"])

    if config.layers.write_manifest:
        interpreter.layers.write_manifest(
            output_dir / MANIFEST_NAME,
            result.state.name.lower(),
            source=str(args.toolpath),
            progress=result.progress,
            error=str(result.error) if result.error is not None else None,
        )

    print(f"Layers written: {len(result.layers)} to {output_dir}")
    print(f"Lines read: {result.lines_read}, commands: {result.commands_executed}")
    if result.state is RunState.ABORTED:
        print(f"Aborted at {result.progress:.2f} of input: {result.error}")
    return result.exit_code


if __name__ == "__main__":
    sys.exit(main())
