"""Validation helpers for user inputs."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from ..core.errors import InvalidPackageError, PackageNotFoundError, ValidationError

ALLOWED_PACKAGE_EXTENSIONS = {".zip", ".json"}


def validate_package_path(path: Path) -> Path:
    """Ensure the input exists and is a ZIP bundle or a bare project JSON."""

    if not path:
        raise InvalidPackageError(Path("<unset>"), reason="No path provided")
    if not path.exists():
        raise PackageNotFoundError(path)
    if path.suffix.lower() not in ALLOWED_PACKAGE_EXTENSIONS:
        raise InvalidPackageError(path, reason="Expected a .zip or .json file")
    return path


def is_archive(path: Path) -> bool:
    return path.suffix.lower() == ".zip"


def validate_positive_int(value: Optional[int], field: str) -> Optional[int]:
    """Reject zero or negative counts such as ``--sample`` and ``--step``."""

    if value is not None and value <= 0:
        raise ValidationError(f"{field} must be greater than zero")
    return value


def parse_optional_non_negative_int(value: str | None, field: str) -> Optional[int]:
    """Parse a non-negative integer (0 allowed) from a string value."""

    if value is None or value == "":
        return None
    try:
        parsed = int(value)
    except ValueError as exc:
        raise ValidationError(f"{field} must be an integer") from exc
    if parsed < 0:
        raise ValidationError(f"{field} must be zero or greater")
    return parsed


def parse_frame_list(value: str | None) -> Optional[list[int]]:
    """Parse ``"0,30,45"`` or ranges like ``"0-10"`` into a sorted frame list."""

    if value is None or value.strip() == "":
        return None
    frames: set[int] = set()
    for part in value.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part[1:]:
            start_text, end_text = part.split("-", 1)
            start = parse_optional_non_negative_int(start_text.strip(), "Frame range start")
            end = parse_optional_non_negative_int(end_text.strip(), "Frame range end")
            if start is None or end is None or end < start:
                raise ValidationError(f"Invalid frame range: {part}")
            frames.update(range(start, end + 1))
        else:
            frame = parse_optional_non_negative_int(part, "Frame")
            if frame is not None:
                frames.add(frame)
    return sorted(frames)


def validate_frame_selection(frames: Optional[list[int]], sample: Optional[int], step: Optional[int]) -> None:
    """Prevent conflicting frame selection strategies."""

    chosen = [option for option in (frames, sample, step) if option is not None]
    if len(chosen) > 1:
        raise ValidationError("Set only one of frames, sample or step")


def validate_frame_range(start: Optional[int], end: Optional[int]) -> None:
    """Ensure start/end make sense."""

    if start is not None and end is not None and end <= start:
        raise ValidationError("End frame must be greater than start frame")


def validate_max_size(megabytes: Optional[int]) -> Optional[int]:
    """Convert a ``--max-size`` value in MB to bytes."""

    if megabytes is None:
        return None
    if megabytes <= 0:
        raise ValidationError("Maximum archive size must be greater than zero")
    return megabytes * 1024 * 1024
