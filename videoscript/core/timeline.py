"""Selection of the frame composition governing a given frame."""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from . import FrameComposition

logger = logging.getLogger(__name__)


def select_composition(compositions: Sequence[FrameComposition], frame: int) -> Optional[FrameComposition]:
    """Pick the composition active at ``frame``.

    The latest composition starting at or before ``frame`` wins. When several
    compositions share that start frame, the first one in authored order is
    used. Returns ``None`` when no composition has started yet.
    """

    selected: Optional[FrameComposition] = None
    for composition in compositions:
        if composition.frame_number > frame:
            continue
        if selected is None or composition.frame_number > selected.frame_number:
            selected = composition
        elif composition.frame_number == selected.frame_number:
            logger.debug(
                "Duplicate composition at frame %s; keeping the first authored one",
                composition.frame_number,
            )
    return selected


def composition_spans(compositions: Sequence[FrameComposition], duration_in_frames: int) -> list[tuple[int, int]]:
    """Return ``(start, end)`` frame ranges (end exclusive) covered by each distinct composition start."""

    starts = sorted({c.frame_number for c in compositions if c.frame_number < duration_in_frames})
    spans = []
    for index, start in enumerate(starts):
        end = starts[index + 1] if index + 1 < len(starts) else duration_in_frames
        spans.append((start, end))
    return spans
