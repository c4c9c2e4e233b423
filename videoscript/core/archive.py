"""Safe extraction of export package archives."""

from __future__ import annotations

import logging
import zipfile
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Iterable

from .. import config
from ..utils import file_tools
from .errors import ArchiveSecurityError, InvalidPackageError, PackageNotFoundError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 1024


def sanitize_entry_name(name: str) -> PurePosixPath:
    """Return a safe relative path for an archive entry or raise ``ArchiveSecurityError``."""

    normalized = name.replace("\\", "/")
    if normalized.startswith("/") or PureWindowsPath(name).drive:
        raise ArchiveSecurityError(name, reason="Absolute paths are not allowed")
    parts = [part for part in PurePosixPath(normalized).parts if part not in ("", ".")]
    if any(part == ".." for part in parts):
        raise ArchiveSecurityError(name, reason="Path traversal detected")
    if not parts:
        raise ArchiveSecurityError(name, reason="Empty entry name")
    return PurePosixPath(*parts)


def _plan_extraction(
    entries: list[zipfile.ZipInfo], max_bytes: int, max_files: int
) -> list[tuple[zipfile.ZipInfo, PurePosixPath]]:
    """Check every entry up front so nothing is written for a rejected archive."""

    if len(entries) > max_files:
        raise ArchiveSecurityError(
            "<archive>", reason=f"Too many entries: {len(entries)} (max: {max_files})"
        )

    planned = []
    total = 0
    for info in entries:
        if info.is_dir():
            continue
        relative = sanitize_entry_name(info.filename)
        total += info.file_size
        if total > max_bytes:
            raise ArchiveSecurityError(
                "<archive>",
                reason=f"Uncompressed size exceeds limit: {total // (1024 * 1024)}MB (max: {max_bytes // (1024 * 1024)}MB)",
            )
        planned.append((info, relative))
    logger.debug("Archive holds %s files, %s bytes uncompressed", len(planned), total)
    return planned


def _copy_entry(archive: zipfile.ZipFile, info: zipfile.ZipInfo, target: Path) -> int:
    """Stream one entry to disk, refusing to write more than its declared size."""

    written = 0
    with archive.open(info) as source, target.open("wb") as handle:
        while True:
            chunk = source.read(CHUNK_SIZE)
            if not chunk:
                break
            written += len(chunk)
            if written > info.file_size:
                handle.close()
                target.unlink(missing_ok=True)
                raise ArchiveSecurityError(info.filename, reason="Entry is larger than its header declares")
            handle.write(chunk)
    return written


def extract_archive(
    archive_path: Path,
    output_dir: Path,
    max_bytes: int = config.MAX_ARCHIVE_BYTES,
    max_files: int = config.MAX_ARCHIVE_FILES,
) -> list[Path]:
    """Extract ``archive_path`` into ``output_dir`` after validating every entry.

    Entries with absolute paths or ``..`` segments, archives with more than
    ``max_files`` entries, and archives whose declared uncompressed size
    exceeds ``max_bytes`` are rejected before any file is written.
    """

    if not archive_path.exists():
        raise PackageNotFoundError(archive_path)

    logger.debug("Extracting %s into %s", archive_path, output_dir)
    try:
        archive = zipfile.ZipFile(archive_path)
    except (zipfile.BadZipFile, OSError) as exc:
        raise InvalidPackageError(archive_path, reason=f"Failed to read ZIP file: {exc}") from exc

    extracted: list[Path] = []
    with archive:
        planned = _plan_extraction(archive.infolist(), max_bytes, max_files)
        root = file_tools.ensure_directory(output_dir).resolve()
        for info, relative in planned:
            target = root.joinpath(*relative.parts)
            if root not in target.resolve().parents:
                raise ArchiveSecurityError(info.filename, reason="Entry resolves outside the destination")
            file_tools.ensure_directory(target.parent)
            try:
                _copy_entry(archive, info, target)
            except (zipfile.BadZipFile, OSError) as exc:
                raise InvalidPackageError(archive_path, reason=f"Failed to extract {info.filename}: {exc}") from exc
            extracted.append(target)
            logger.debug("Extracted %s", relative)

    logger.info("Extracted %s files from %s", len(extracted), archive_path.name)
    return extracted


def validate_extracted_files(extracted_dir: Path, required: Iterable[str] = (config.PROJECT_FILENAME,)) -> None:
    """Ensure the files a package must ship are present after extraction."""

    for name in required:
        if not (extracted_dir / name).is_file():
            raise InvalidPackageError(extracted_dir, reason=f"Required file not found in ZIP: {name}")
