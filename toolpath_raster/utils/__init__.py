"""Cross-cutting utilities (lowest dependency layer).

This package provides shared primitives for:
    - Unified logging (logging_config)
    - Directory creation, YAML loading and atomic image writes (fs)

No module in utils/ may import from upper layers (raster, interpreter, etc.).

Convenience imports:
    from toolpath_raster.utils import fs
    from toolpath_raster.utils.logging_config import setup_logging, push_context
"""

from . import fs
from . import logging_config

from .logging_config import pop_context, push_context, setup_logging

__all__ = [
    'fs',
    'logging_config',
    'setup_logging',
    'pop_context',
    'push_context',
]
