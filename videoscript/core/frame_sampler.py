"""Choosing which frames to resolve and streaming their states."""

from __future__ import annotations

import logging
from typing import Iterable, Iterator, Optional, TypeVar

import numpy as np

from . import FrameState, Project
from .errors import ValidationError
from .frame_state import PrototypeSource, index_prototypes, resolve_frame

logger = logging.getLogger(__name__)
T = TypeVar("T")
MAX_FRAME_CAP = 100_000


def compute_sample_frames(
    project: Project,
    frames: Optional[Iterable[int]] = None,
    sample_count: Optional[int] = None,
    step: Optional[int] = None,
    start_frame: Optional[int] = None,
    end_frame: Optional[int] = None,
    max_frames: Optional[int] = None,
) -> list[int]:
    """Decide which frames to resolve based on user input.

    Explicit ``frames`` win, then ``step``, then an evenly spaced
    ``sample_count``. With none of them every frame of the selected span is
    used. The span defaults to the whole project (end exclusive).
    """

    duration = project.duration_in_frames
    start = max(0, start_frame or 0)
    if start >= duration:
        raise ValidationError(f"Start frame {start} is outside the project (duration: {duration} frames)")
    if step is not None and step <= 0:
        raise ValidationError("Step must be greater than zero")
    if sample_count is not None and sample_count <= 0:
        raise ValidationError("Sample count must be greater than zero")
    stop = min(end_frame if end_frame is not None else duration, duration)
    if stop <= start:
        stop = duration

    if frames is not None:
        selected = [int(f) for f in frames if 0 <= int(f) < duration]
    elif step is not None:
        selected = np.arange(start, stop, step, dtype=int).tolist()
    elif sample_count is not None:
        samples = np.linspace(start, stop - 1, num=sample_count, dtype=float).round()
        selected = np.clip(samples, start, stop - 1).astype(int).tolist()
    else:
        selected = list(range(start, stop))

    unique = sorted(dict.fromkeys(selected))
    cap = min(max_frames, MAX_FRAME_CAP) if max_frames else MAX_FRAME_CAP
    if len(unique) > cap:
        logger.info("Capping frames to %s (requested %s)", cap, len(unique))
        unique = unique[:cap]
    return unique


def iter_frame_states(
    project: Project, prototypes: PrototypeSource, frames: Iterable[int]
) -> Iterator[FrameState]:
    """Yield frame states one-by-one to keep memory flat for long projects."""

    lookup = index_prototypes(prototypes)
    for frame in frames:
        state = resolve_frame(project, lookup, frame)
        if state.is_empty:
            logger.debug("Frame %s has nothing to paint", frame)
        yield state


def iter_frame_batches(items: Iterable[T], batch_size: int = 50) -> Iterator[list[T]]:
    """Yield frames (or frame states) in batches."""

    batch: list[T] = []
    for item in items:
        batch.append(item)
        if len(batch) >= batch_size:
            yield batch
            batch = []
    if batch:
        yield batch
