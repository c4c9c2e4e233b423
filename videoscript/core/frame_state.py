"""Assemble the ordered render instructions for a frame."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, Mapping, Optional, Sequence, Union

from . import FrameState, Project, Prototype, ResolvedElement
from .element_resolver import ResolutionContext, resolve_element
from .timeline import select_composition

logger = logging.getLogger(__name__)

PrototypeSource = Union[Sequence[Prototype], Mapping[str, Prototype]]


def index_prototypes(prototypes: PrototypeSource) -> dict[str, Prototype]:
    """Build an id lookup; with duplicate ids the last definition wins."""

    if isinstance(prototypes, Mapping):
        return dict(prototypes)
    return {prototype.id: prototype for prototype in prototypes}


def _sort_key(element: ResolvedElement) -> tuple[int, int]:
    return element.layer, element.z_index


def resolve_frame(project: Project, prototypes: PrototypeSource, frame: int) -> FrameState:
    """Resolve the state of every active element at ``frame``.

    This is a pure function of its arguments: it reads no global state and
    mutates nothing, so frames may be resolved in any order or in parallel.
    Scenery layers come first, then everything else by ``z_index``; ties keep
    authored order.
    """

    composition = select_composition(project.frames, frame)
    if composition is None:
        logger.debug("No composition active at frame %s", frame)
        return FrameState(frame=frame, composition_frame=None)

    lookup = index_prototypes(prototypes)
    context = ResolutionContext(
        frame=frame,
        composition_frame=composition.frame_number,
        fps=project.fps,
        width=project.width,
        height=project.height,
    )
    warnings: list[str] = []
    resolved = []
    for element in composition.elements:
        result = resolve_element(element, lookup, context, warnings)
        if result is not None:
            resolved.append(result)

    return FrameState(
        frame=frame,
        composition_frame=composition.frame_number,
        elements=tuple(sorted(resolved, key=_sort_key)),
        warnings=tuple(warnings),
    )


def resolve_frames(
    project: Project,
    prototypes: PrototypeSource,
    frames: Iterable[int],
    workers: Optional[int] = None,
) -> list[FrameState]:
    """Resolve many frames, optionally on a thread pool; results follow ``frames`` order."""

    frame_list = list(frames)
    lookup = index_prototypes(prototypes)
    if not workers or workers <= 1 or len(frame_list) <= 1:
        return [resolve_frame(project, lookup, frame) for frame in frame_list]

    logger.debug("Resolving %s frames on %s workers", len(frame_list), workers)
    with ThreadPoolExecutor(max_workers=workers) as pool:
        return list(pool.map(lambda frame: resolve_frame(project, lookup, frame), frame_list))
