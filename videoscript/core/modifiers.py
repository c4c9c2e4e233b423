"""Combine action-driven transforms with author-applied modifiers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from . import FilterSpec, GradientOverlay, GradientSpec, Modifier, Transform

FILTER_TEMPLATES = {
    "blur": "blur({value}px)",
    "grayscale": "grayscale({value})",
    "brightness": "brightness({value})",
    "contrast": "contrast({value})",
    "saturate": "saturate({value})",
    "sepia": "sepia({value})",
    "invert": "invert({value})",
    "hue-rotate": "hue-rotate({value}deg)",
}


@dataclass(frozen=True)
class Composite:
    """Final transform and appearance of an element after modifiers."""

    x: float
    y: float
    rotation: float
    scale: float
    opacity: float = 1.0
    filter: str = ""
    gradient: Optional[GradientOverlay] = None


def format_number(value: float) -> str:
    """Render a number the way CSS authors write it (``5`` not ``5.0``)."""

    number = float(value)
    if number.is_integer():
        return str(int(number))
    return repr(number)


def is_known_filter(filter_: Optional[FilterSpec]) -> bool:
    return filter_ is not None and filter_.type in FILTER_TEMPLATES


def build_css_filter(filter_: Optional[FilterSpec]) -> str:
    """Serialise a filter modifier; unknown kinds become an empty (no-op) filter."""

    if filter_ is None:
        return ""
    template = FILTER_TEMPLATES.get(filter_.type)
    if template is None:
        return ""
    return template.format(value=format_number(filter_.value))


def build_gradient(gradient: Optional[GradientSpec]) -> Optional[GradientOverlay]:
    """Return a gradient overlay when at least two colours are supplied."""

    if gradient is None or len(gradient.colors) < 2:
        return None
    return GradientOverlay(colors=tuple(gradient.colors), loop=gradient.loop)


def audio_gain(modifier: Optional[Modifier]) -> float:
    """Playback gain for audio elements, carried in the modifier's opacity slot."""

    if modifier is None or modifier.opacity is None:
        return 1.0
    return float(modifier.opacity)


def compose(base: Transform, modifier: Optional[Modifier]) -> Composite:
    """Fold a modifier into a base transform.

    Rotation adds and scale multiplies so that animation and styling stay
    independent layers. Opacity, filter and gradient only exist on the
    modifier and pass straight through.
    """

    if modifier is None:
        return Composite(x=base.x, y=base.y, rotation=base.rotation, scale=base.scale)

    rotation = base.rotation + (modifier.rotation if modifier.rotation is not None else 0.0)
    scale = base.scale * (modifier.scale if modifier.scale is not None else 1.0)
    return Composite(
        x=base.x,
        y=base.y,
        rotation=rotation,
        scale=scale,
        opacity=1.0 if modifier.opacity is None else float(modifier.opacity),
        filter=build_css_filter(modifier.filter),
        gradient=build_gradient(modifier.gradient),
    )
