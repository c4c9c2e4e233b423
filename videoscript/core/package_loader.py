"""Loading export packages (ZIP bundles or bare project JSON) into the core model."""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from PIL import Image

from .. import config
from ..utils import file_tools, validators
from . import MediaFile, Project, Prototype
from .archive import extract_archive, validate_extracted_files
from .asset_urls import ASSET_PREFIX, local_assets_base, resolve_asset_urls
from .errors import InvalidPackageError, MissingAssetError
from .schema import (
    build_media_files,
    build_project,
    build_prototype,
    validate_export_package,
    validate_project_bundle,
)

logger = logging.getLogger(__name__)

RASTER_EXTENSIONS = {".png", ".jpg", ".jpeg", ".webp", ".gif", ".bmp"}


@dataclass(frozen=True)
class LoadedPackage:
    """A validated project with prototypes ready for resolution."""

    project: Project
    prototypes: tuple[Prototype, ...]
    media_files: tuple[MediaFile, ...] = ()
    version: Optional[str] = None
    exported_at: Optional[str] = None
    package_dir: Optional[Path] = None


def read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidPackageError(path, reason=f"Could not read project JSON: {exc}") from exc


def build_package(
    data: Any,
    assets_base_url: Optional[str] = None,
    export_package: bool = True,
    package_dir: Optional[Path] = None,
) -> LoadedPackage:
    """Validate raw JSON data and convert it, rewriting bundled asset references.

    ``export_package`` selects the full export schema (with ``exportedAt`` and
    ``version``); otherwise only ``{project, prototypes}`` is required.
    """

    if export_package:
        model = validate_export_package(data)
        media_files = build_media_files(model.media_files)
        version, exported_at = model.version, model.exported_at
    else:
        model = validate_project_bundle(data)
        media_files, version, exported_at = (), None, None

    project = build_project(model.project)
    prototypes = resolve_asset_urls((build_prototype(p) for p in model.prototypes), assets_base_url)
    logger.info(
        "Loaded project %r: %sx%s @ %sfps, %s frames, %s prototypes",
        project.name,
        project.width,
        project.height,
        project.fps,
        project.duration_in_frames,
        len(prototypes),
    )
    return LoadedPackage(
        project=project,
        prototypes=tuple(prototypes),
        media_files=media_files,
        version=version,
        exported_at=exported_at,
        package_dir=package_dir,
    )


def _image_is_readable(path: Path) -> bool:
    if path.suffix.lower() not in RASTER_EXTENSIONS:
        return True
    try:
        with Image.open(path) as img:
            img.verify()
    except Exception as exc:
        logger.debug("Image %s failed verification: %s", path, exc)
        return False
    return True


def ensure_media_files(media_files: Iterable[MediaFile], package_dir: Path) -> None:
    """Check that every declared media file exists under ``assets/`` and images decode."""

    assets_dir = package_dir / config.ASSETS_DIRNAME
    problems: list[str] = []
    count = 0
    for media in media_files:
        count += 1
        name = media.filename.removeprefix(ASSET_PREFIX)
        path = assets_dir / name
        if not path.is_file():
            problems.append(name)
        elif media.type == "image" and not _image_is_readable(path):
            problems.append(f"{name} (unreadable)")
        else:
            logger.debug("Found media file: %s", name)
    if problems:
        raise MissingAssetError(package_dir, problems)
    if count:
        logger.info("All %s media files validated", count)


def load_package_dir(package_dir: Path, assets_base_url: Optional[str] = None) -> LoadedPackage:
    """Load an extracted package directory containing ``project.json`` and ``assets/``."""

    validate_extracted_files(package_dir)
    data = read_json(package_dir / config.PROJECT_FILENAME)
    package = build_package(
        data,
        assets_base_url=assets_base_url or local_assets_base(package_dir),
        package_dir=package_dir,
    )
    ensure_media_files(package.media_files, package_dir)
    return package


def load_project_json(path: Path, assets_base_url: Optional[str] = None) -> LoadedPackage:
    """Load a bare export JSON; a sibling ``assets/`` directory is used when present."""

    package_dir = path.parent
    has_assets = (package_dir / config.ASSETS_DIRNAME).is_dir()
    if assets_base_url is None and has_assets:
        assets_base_url = local_assets_base(package_dir)
    package = build_package(read_json(path), assets_base_url=assets_base_url, package_dir=package_dir)
    if has_assets:
        ensure_media_files(package.media_files, package_dir)
    return package


@contextmanager
def open_package(
    path: Path,
    assets_base_url: Optional[str] = None,
    max_bytes: int = config.MAX_ARCHIVE_BYTES,
    max_files: int = config.MAX_ARCHIVE_FILES,
    keep_temp: bool = False,
) -> Iterator[LoadedPackage]:
    """Yield a loaded package; extracted archives are removed afterwards unless ``keep_temp``."""

    validators.validate_package_path(path)
    if not validators.is_archive(path):
        logger.info("Processing JSON file directly")
        yield load_project_json(path, assets_base_url)
        return

    temp_dir = file_tools.make_temp_directory()
    try:
        extract_archive(path, temp_dir, max_bytes=max_bytes, max_files=max_files)
        yield load_package_dir(temp_dir, assets_base_url)
    finally:
        if keep_temp:
            logger.info("Temporary files kept at: %s", temp_dir)
        else:
            file_tools.remove_directory(temp_dir)
