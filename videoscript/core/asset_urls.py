"""Rewrite bundled asset references against a base location."""

from __future__ import annotations

import dataclasses
import logging
from pathlib import Path
from typing import Iterable, Optional

from .. import config
from . import AudioPrototype, PicturePrototype, Prototype

logger = logging.getLogger(__name__)

ASSET_PREFIX = "assets/"
ABSOLUTE_SCHEMES = ("blob:", "http:", "https:", "data:", "file:")


def is_absolute_reference(url: str) -> bool:
    return url.startswith(ABSOLUTE_SCHEMES)


def resolve_asset_url(url: str, base_url: Optional[str]) -> str:
    """Replace a leading ``assets/`` with ``base_url``; other references are untouched."""

    if not base_url or is_absolute_reference(url) or not url.startswith(ASSET_PREFIX):
        return url
    return f"{base_url.rstrip('/')}/{url[len(ASSET_PREFIX):]}"


def local_assets_base(package_dir: Path) -> str:
    """Base URL for assets extracted next to ``project.json``."""

    return (package_dir.resolve() / config.ASSETS_DIRNAME).as_uri()


def resolve_prototype_assets(prototype: Prototype, base_url: Optional[str]) -> Prototype:
    if isinstance(prototype, PicturePrototype):
        frames = {frame: resolve_asset_url(url, base_url) for frame, url in prototype.picture_frames.items()}
        return dataclasses.replace(prototype, picture_frames=frames)
    if isinstance(prototype, AudioPrototype) and prototype.audio_url:
        return dataclasses.replace(prototype, audio_url=resolve_asset_url(prototype.audio_url, base_url))
    return prototype


def resolve_asset_urls(prototypes: Iterable[Prototype], base_url: Optional[str]) -> list[Prototype]:
    """Return new prototypes whose picture and audio references point at ``base_url``."""

    if not base_url:
        return list(prototypes)
    logger.debug("Resolving asset references against %s", base_url)
    return [resolve_prototype_assets(prototype, base_url) for prototype in prototypes]
