"""
Configuration constants for seam editing sessions.

Exports:
    DEFAULT_OUTPUT_DIR: Directory previews are written to.
    PREVIEW_PREFIX: File name prefix for numbered previews.
    HIGHLIGHT_COLORS: RGB color painted over a highlighted seam, per criterion.
    DEFAULT_LOG_LEVEL: Log level name used when nothing else is configured.

The output directory and log level can be overridden with the
SEAMEDIT_OUTPUT_DIR and SEAMEDIT_LOG_LEVEL environment variables.
"""
import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_OUTPUT_DIR: str = "target"
PREVIEW_PREFIX: str = "previewIMG"
DEFAULT_LOG_LEVEL: str = "INFO"

HIGHLIGHT_COLORS = {
    'min_energy': (255, 0, 0),
    'max_blueness': (0, 0, 255),
}


def get_output_dir(override: Optional[str] = None) -> Path:
    """Resolve the preview directory: explicit argument, then environment, then default."""
    if override:
        return Path(override)
    return Path(os.environ.get("SEAMEDIT_OUTPUT_DIR", DEFAULT_OUTPUT_DIR))


def get_log_level(override: Optional[str] = None) -> int:
    """Resolve a log level name to its numeric value."""
    name = override or os.environ.get("SEAMEDIT_LOG_LEVEL", DEFAULT_LOG_LEVEL)
    level = logging.getLevelName(name.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {name}")
    return level
