"""Linear keyframe interpolation for character and prop actions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

from . import IDENTITY_TRANSFORM, Action, Keyframe, Transform

_DEFAULTS = {"x": 0.0, "y": 0.0, "rotation": 0.0, "scale": 1.0}


@dataclass(frozen=True)
class InterpolatedPose:
    """Transform at a local frame plus the sticky content override, if any."""

    transform: Transform
    svg_override: Optional[str] = None
    local_frame: int = 0


def local_frame(raw_frame: int, duration: int, loop: bool) -> int:
    """Map a frame counter onto an action's own timeline."""

    if loop:
        if duration <= 0:
            return 0
        return raw_frame % duration
    return min(raw_frame, duration)


def lerp(start: float, end: float, progress: float) -> float:
    return start + (end - start) * progress


def _bracket(keyframes: Sequence[Keyframe], target: float) -> tuple[int, int]:
    """Return indices of the keyframes surrounding ``target``, clamped to the ends."""

    prev_index = 0
    for index, keyframe in enumerate(keyframes):
        if keyframe.frame <= target:
            prev_index = index
        else:
            break
    if keyframes[prev_index].frame > target:
        # Before the first keyframe: hold the first pose.
        return 0, 0
    next_index = prev_index + 1
    if next_index >= len(keyframes):
        return prev_index, prev_index
    return prev_index, next_index


def _progress(prev: Keyframe, nxt: Keyframe, target: float) -> float:
    span = nxt.frame - prev.frame
    if span == 0:
        return 0.0
    return min(max((target - prev.frame) / span, 0.0), 1.0)


def _field(keyframe: Keyframe, name: str) -> float:
    value = getattr(keyframe.transform, name)
    return _DEFAULTS[name] if value is None else float(value)


def _sticky_override(keyframes: Sequence[Keyframe], upto: int) -> Optional[str]:
    for keyframe in reversed(keyframes[: upto + 1]):
        if keyframe.svg_override:
            return keyframe.svg_override
    return None


def interpolate_keyframes(
    keyframes: Sequence[Keyframe],
    raw_frame: int,
    loop: bool,
    duration: int,
) -> InterpolatedPose:
    """Resolve the pose of a keyframe track at ``raw_frame``.

    Keyframes are re-sorted by frame on every call. Outside the authored range
    the nearest boundary keyframe is held; nothing is extrapolated. A content
    override stays active until a later keyframe supplies another one.
    """

    frame = local_frame(raw_frame, duration, loop)
    if not keyframes:
        return InterpolatedPose(transform=IDENTITY_TRANSFORM, local_frame=frame)

    ordered = sorted(keyframes, key=lambda kf: kf.frame)
    prev_index, next_index = _bracket(ordered, frame)
    prev, nxt = ordered[prev_index], ordered[next_index]
    progress = _progress(prev, nxt, frame)

    transform = Transform(
        **{name: lerp(_field(prev, name), _field(nxt, name), progress) for name in _DEFAULTS}
    )
    return InterpolatedPose(
        transform=transform,
        svg_override=_sticky_override(ordered, prev_index),
        local_frame=frame,
    )


def interpolate_action(action: Optional[Action], raw_frame: int) -> InterpolatedPose:
    """Interpolate an action, treating a missing action as the identity pose."""

    if action is None:
        return InterpolatedPose(transform=IDENTITY_TRANSFORM, local_frame=raw_frame)
    return interpolate_keyframes(action.keyframes, raw_frame, action.loop, action.duration)
