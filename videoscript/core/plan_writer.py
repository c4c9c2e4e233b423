"""Render plan writing: resolved frames serialised for the rendering backend."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Sequence

from . import FrameState
from ..utils import file_tools
from .frame_sampler import iter_frame_batches, iter_frame_states
from .frame_state import index_prototypes, resolve_frames
from .package_loader import LoadedPackage
from .timeline import composition_spans

logger = logging.getLogger(__name__)


@dataclass
class RenderOutcome:
    """Result of writing a render plan."""

    plan_path: Path
    frame_count: int
    warning_count: int


def project_summary(package: LoadedPackage) -> dict[str, Any]:
    project = package.project
    return {
        "id": project.id,
        "name": project.name,
        "fps": project.fps,
        "width": project.width,
        "height": project.height,
        "duration_in_frames": project.duration_in_frames,
        "duration_seconds": round(project.duration_seconds, 3),
        "background": project.background,
        "prototypes": len(package.prototypes),
        "media_files": len(package.media_files),
        "compositions": [list(span) for span in composition_spans(project.frames, project.duration_in_frames)],
    }


def resolve_plan_frames(
    package: LoadedPackage, frames: Sequence[int], workers: Optional[int] = None, batch_size: int = 200
) -> list[FrameState]:
    lookup = index_prototypes(package.prototypes)
    if not workers or workers <= 1:
        return list(iter_frame_states(package.project, lookup, frames))

    states: list[FrameState] = []
    for batch in iter_frame_batches(frames, batch_size):
        states.extend(resolve_frames(package.project, lookup, batch, workers=workers))
        logger.debug("Resolved %s/%s frames", len(states), len(frames))
    return states


def write_plan(
    package: LoadedPackage,
    frames: Sequence[int],
    output_path: Path,
    workers: Optional[int] = None,
) -> RenderOutcome:
    """Resolve ``frames`` and write them, with project metadata, as JSON."""

    file_tools.ensure_directory(output_path.parent)
    states = resolve_plan_frames(package, frames, workers=workers)
    warning_count = sum(len(state.warnings) for state in states)

    plan = {
        "project": project_summary(package),
        "frames": [state.to_dict() for state in states],
        "meta": {
            "frame_count": len(states),
            "warning_count": warning_count,
            "package_version": package.version,
            "exported_at": package.exported_at,
        },
    }
    output_path.write_text(json.dumps(plan, indent=2, sort_keys=True), encoding="utf-8")
    logger.info("Wrote render plan for %s frames to %s", len(states), output_path)
    return RenderOutcome(plan_path=output_path, frame_count=len(states), warning_count=warning_count)
