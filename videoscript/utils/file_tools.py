"""Filesystem helpers."""

from __future__ import annotations

import logging
import re
import shutil
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

TEMP_PREFIX = "videoscript-render-"


def ensure_directory(path: Path) -> Path:
    """Create a directory if it does not exist."""

    path.mkdir(parents=True, exist_ok=True)
    logger.debug("Ensured directory exists: %s", path)
    return path


def make_temp_directory(prefix: str = TEMP_PREFIX) -> Path:
    """Create a fresh private directory for extracted packages."""

    path = Path(tempfile.mkdtemp(prefix=prefix))
    logger.debug("Temp directory: %s", path)
    return path


def remove_directory(path: Path) -> None:
    """Delete a temp directory tree, logging instead of raising on failure."""

    try:
        shutil.rmtree(path)
    except OSError as exc:
        logger.warning("Failed to clean up temp directory %s: %s", path, exc)


def safe_stem(name: str) -> str:
    """Replace everything except ASCII letters and digits with underscores."""

    return re.sub(r"[^a-zA-Z0-9]", "_", name) or "project"


def format_output_filename(project_name: str, pattern: str | None, timestamp: int | None = None) -> str:
    """Format an output filename using optional pattern with {name}, {ts}."""

    fields = {"name": safe_stem(project_name)}
    if timestamp is not None:
        fields["ts"] = timestamp
    if pattern:
        return pattern.format(**fields)
    if timestamp is not None:
        return f"{fields['name']}_{timestamp}.json"
    return f"{fields['name']}.json"
