"""Sprite frame selection for picture prototypes."""

from __future__ import annotations

from typing import Mapping, Optional


def select_sprite_frame(picture_frames: Mapping[int, str], frame: int) -> Optional[str]:
    """Return the image active at ``frame`` using a floor lookup.

    The entry with the greatest key not exceeding ``frame`` wins; a frame
    before every key falls back to the smallest key. An empty mapping yields
    ``None`` so the caller can skip the element.
    """

    if not picture_frames:
        return None
    keys = sorted(picture_frames)
    selected = keys[0]
    for key in keys:
        if key > frame:
            break
        selected = key
    return picture_frames[selected] or None
