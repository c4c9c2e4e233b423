"""Resolve a single frame element into a render instruction."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence, TypeVar

from . import (
    BACKGROUND_LAYER,
    IDENTITY_TRANSFORM,
    AudioCue,
    AudioPrototype,
    CharacterPrototype,
    FrameElement,
    Modifier,
    PicturePrototype,
    PropPrototype,
    Prototype,
    ResolvedElement,
    SceneryPrototype,
    Transform,
)
from .keyframes import interpolate_action
from .modifiers import Composite, audio_gain, compose, is_known_filter
from .sprites import select_sprite_frame

logger = logging.getLogger(__name__)

A = TypeVar("A")


@dataclass(frozen=True)
class ResolutionContext:
    """Per-frame values shared by every element of a composition."""

    frame: int
    composition_frame: int
    fps: float
    width: int
    height: int


def _warn(warnings: list[str], message: str, *args: Any) -> None:
    text = message % args
    logger.warning(text)
    warnings.append(text)


def _find_action(actions: Sequence[A], element: FrameElement, warnings: list[str]) -> Optional[A]:
    for action in actions:
        if action.id == element.action_id:  # type: ignore[attr-defined]
            return action
    if element.action_id:
        _warn(
            warnings,
            "Action %r not found on prototype %r; using its resting pose",
            element.action_id,
            element.prototype_id,
        )
    return None


def _check_filter(modifier: Optional[Modifier], warnings: list[str]) -> None:
    if modifier is not None and modifier.filter is not None and not is_known_filter(modifier.filter):
        _warn(warnings, "Unknown filter kind %r ignored", modifier.filter.type)


def apply_color_slots(svg: str, declared: Mapping[str, str], requested: Any) -> str:
    """Swap declared slot colours for the ones requested by the element.

    Only ``fill="<colour>"`` attributes matching a declared slot are replaced;
    slots the prototype does not declare are ignored.
    """

    if not isinstance(requested, Mapping):
        return svg
    for slot, color in requested.items():
        original = declared.get(slot)
        if original:
            svg = svg.replace(f'fill="{original}"', f'fill="{color}"')
    return svg


def _visual(element: FrameElement, kind: str, content: Optional[str], composite: Composite, **extra: Any) -> ResolvedElement:
    return ResolvedElement(
        kind=kind,
        prototype_id=element.prototype_id,
        content=content,
        x=composite.x,
        y=composite.y,
        rotation=composite.rotation,
        scale=composite.scale,
        opacity=composite.opacity,
        filter=composite.filter,
        z_index=element.z_index,
        gradient=composite.gradient,
        **extra,
    )


def _resolve_animated(
    element: FrameElement,
    actions: Sequence[Any],
    intrinsic_scale: float,
    context: ResolutionContext,
    warnings: list[str],
) -> tuple[Composite, Optional[str]]:
    action = _find_action(actions, element, warnings)
    pose = interpolate_action(action, context.frame)
    base = Transform(
        x=element.position.x + pose.transform.x,
        y=element.position.y + pose.transform.y,
        rotation=pose.transform.rotation,
        scale=pose.transform.scale * intrinsic_scale,
    )
    _check_filter(element.modifier, warnings)
    return compose(base, element.modifier), pose.svg_override


def resolve_character(
    element: FrameElement, prototype: CharacterPrototype, context: ResolutionContext, warnings: list[str]
) -> ResolvedElement:
    appearance = prototype.appearance
    composite, override = _resolve_animated(element, prototype.actions, appearance.scale, context, warnings)
    svg = apply_color_slots(override or appearance.svg, appearance.colors, element.custom_props.get("colors"))
    return _visual(element, prototype.kind, svg, composite)


def resolve_prop(
    element: FrameElement, prototype: PropPrototype, context: ResolutionContext, warnings: list[str]
) -> ResolvedElement:
    composite, override = _resolve_animated(element, prototype.actions, 1.0, context, warnings)
    return _visual(element, prototype.kind, override or prototype.svg, composite)


def resolve_scenery(
    element: FrameElement, prototype: SceneryPrototype, context: ResolutionContext, warnings: list[str]
) -> ResolvedElement:
    """Scenery fills the frame; an action filter replaces any modifier filter."""

    action = _find_action(prototype.actions, element, warnings)
    composite = compose(IDENTITY_TRANSFORM, element.modifier)
    if action is not None and action.filters:
        css_filter = action.filters
    else:
        _check_filter(element.modifier, warnings)
        css_filter = composite.filter
    return ResolvedElement(
        kind=prototype.kind,
        prototype_id=element.prototype_id,
        content=prototype.svg,
        rotation=composite.rotation,
        scale=composite.scale,
        opacity=composite.opacity,
        filter=css_filter,
        z_index=element.z_index,
        layer=BACKGROUND_LAYER,
        gradient=composite.gradient,
        width=context.width,
        height=context.height,
        overlays=action.overlays if action is not None else (),
    )


def resolve_picture(
    element: FrameElement, prototype: PicturePrototype, context: ResolutionContext, warnings: list[str]
) -> Optional[ResolvedElement]:
    url = select_sprite_frame(prototype.picture_frames, context.frame)
    if url is None:
        _warn(warnings, "Picture %r has no sprite frame for frame %s", prototype.id, context.frame)
        return None
    _check_filter(element.modifier, warnings)
    base = Transform(x=element.position.x, y=element.position.y)
    composite = compose(base, element.modifier)
    return _visual(element, prototype.kind, url, composite, width=prototype.width, height=prototype.height)


def resolve_audio(
    element: FrameElement, prototype: AudioPrototype, context: ResolutionContext, warnings: list[str]
) -> ResolvedElement:
    """Audio starts when its owning composition became active."""

    start_frame = context.composition_frame
    cue = AudioCue(
        start_frame=start_frame,
        start_seconds=start_frame / context.fps,
        gain=audio_gain(element.modifier),
        duration_seconds=prototype.audio_duration,
    )
    return ResolvedElement(
        kind=prototype.kind,
        prototype_id=element.prototype_id,
        content=prototype.audio_url,
        z_index=element.z_index,
        audio=cue,
    )


def resolve_element(
    element: FrameElement,
    prototypes: Mapping[str, Prototype],
    context: ResolutionContext,
    warnings: list[str],
) -> Optional[ResolvedElement]:
    """Dispatch on the prototype kind; recoverable problems only add warnings."""

    prototype = prototypes.get(element.prototype_id)
    if prototype is None:
        _warn(warnings, "Prototype not found: %s", element.prototype_id)
        return None

    match prototype:
        case CharacterPrototype():
            return resolve_character(element, prototype, context, warnings)
        case SceneryPrototype():
            return resolve_scenery(element, prototype, context, warnings)
        case PropPrototype():
            return resolve_prop(element, prototype, context, warnings)
        case PicturePrototype():
            return resolve_picture(element, prototype, context, warnings)
        case AudioPrototype():
            return resolve_audio(element, prototype, context, warnings)
        case _:
            _warn(
                warnings,
                "Unsupported prototype kind %r for %s; element skipped",
                getattr(prototype, "type", prototype.kind),
                prototype.id,
            )
            return None
