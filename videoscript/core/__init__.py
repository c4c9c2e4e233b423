"""Core data model for frame resolution."""

from __future__ import annotations

__all__ = [
    "Point",
    "Transform",
    "IDENTITY_TRANSFORM",
    "KeyframeTransform",
    "Keyframe",
    "Action",
    "SceneryAction",
    "FilterSpec",
    "GradientSpec",
    "Modifier",
    "CharacterAppearance",
    "CharacterPrototype",
    "SceneryPrototype",
    "PropPrototype",
    "PicturePrototype",
    "AudioPrototype",
    "UnknownPrototype",
    "Prototype",
    "PROTOTYPE_KINDS",
    "FrameElement",
    "FrameComposition",
    "MediaFile",
    "Project",
    "GradientOverlay",
    "AudioCue",
    "ResolvedElement",
    "FrameState",
    "BACKGROUND_LAYER",
    "SCENE_LAYER",
]

from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Optional, Union

PROTOTYPE_KINDS = ("character", "scenery", "prop", "picture", "audio")

# Scenery is always painted beneath everything else in the frame.
BACKGROUND_LAYER = 0
SCENE_LAYER = 1


@dataclass(frozen=True)
class Point:
    """A position in project pixels."""

    x: float = 0.0
    y: float = 0.0


@dataclass(frozen=True)
class Transform:
    """A fully specified 2D transform."""

    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    scale: float = 1.0


IDENTITY_TRANSFORM = Transform()


@dataclass(frozen=True)
class KeyframeTransform:
    """A partial transform; missing fields fall back to the identity."""

    x: Optional[float] = None
    y: Optional[float] = None
    rotation: Optional[float] = None
    scale: Optional[float] = None


@dataclass(frozen=True)
class Keyframe:
    frame: int
    transform: KeyframeTransform = field(default_factory=KeyframeTransform)
    svg_override: Optional[str] = None


@dataclass(frozen=True)
class Action:
    """A keyframed animation owned by a character or prop."""

    id: str
    name: str = ""
    keyframes: tuple[Keyframe, ...] = ()
    duration: int = 0
    loop: bool = False


@dataclass(frozen=True)
class SceneryAction:
    """A static look for a scenery prototype."""

    id: str
    name: str = ""
    filters: Optional[str] = None
    overlays: tuple[str, ...] = ()


@dataclass(frozen=True)
class FilterSpec:
    type: str
    value: float


@dataclass(frozen=True)
class GradientSpec:
    colors: tuple[str, ...]
    loop: bool = False


@dataclass(frozen=True)
class Modifier:
    """Author-applied overlay, independent from action animation."""

    scale: Optional[float] = None
    rotation: Optional[float] = None
    opacity: Optional[float] = None
    filter: Optional[FilterSpec] = None
    gradient: Optional[GradientSpec] = None


@dataclass(frozen=True)
class CharacterAppearance:
    svg: str
    colors: dict[str, str] = field(default_factory=dict)
    scale: float = 1.0


@dataclass(frozen=True)
class CharacterPrototype:
    kind: ClassVar[str] = "character"

    id: str
    name: str
    appearance: CharacterAppearance
    actions: tuple[Action, ...] = ()


@dataclass(frozen=True)
class SceneryPrototype:
    kind: ClassVar[str] = "scenery"

    id: str
    name: str
    svg: str
    actions: tuple[SceneryAction, ...] = ()


@dataclass(frozen=True)
class PropPrototype:
    kind: ClassVar[str] = "prop"

    id: str
    name: str
    svg: str
    actions: tuple[Action, ...] = ()


@dataclass(frozen=True)
class PicturePrototype:
    """A sprite sequence: sparse frame -> image reference."""

    kind: ClassVar[str] = "picture"

    id: str
    name: str
    width: float
    height: float
    picture_frames: dict[int, str] = field(default_factory=dict)


@dataclass(frozen=True)
class AudioPrototype:
    kind: ClassVar[str] = "audio"

    id: str
    name: str
    audio_url: str
    audio_duration: float = 0.0


@dataclass(frozen=True)
class UnknownPrototype:
    """Placeholder for a prototype whose type is not one of the known kinds."""

    kind: ClassVar[str] = "unknown"

    id: str
    name: str
    type: str


Prototype = Union[
    CharacterPrototype,
    SceneryPrototype,
    PropPrototype,
    PicturePrototype,
    AudioPrototype,
    UnknownPrototype,
]


@dataclass(frozen=True)
class FrameElement:
    """One prototype placement inside a frame composition."""

    prototype_id: str
    action_id: str = ""
    position: Point = field(default_factory=Point)
    z_index: int = 0
    custom_props: dict[str, Any] = field(default_factory=dict)
    modifier: Optional[Modifier] = None


@dataclass(frozen=True)
class FrameComposition:
    frame_number: int
    elements: tuple[FrameElement, ...] = ()


@dataclass(frozen=True)
class MediaFile:
    """A bundled asset declared by an export package."""

    filename: str
    type: str
    used_by: tuple[str, ...] = ()


@dataclass(frozen=True)
class Project:
    id: str
    name: str
    fps: float
    width: int
    height: int
    duration_in_frames: int
    frames: tuple[FrameComposition, ...] = ()
    prototypes_used: tuple[str, ...] = ()
    background: Optional[str] = None

    @property
    def duration_seconds(self) -> float:
        return self.duration_in_frames / self.fps


@dataclass(frozen=True)
class GradientOverlay:
    """Colour layer drawn above an element's content."""

    colors: tuple[str, ...]
    loop: bool = False
    angle: float = 45.0
    blend_mode: str = "color"
    opacity: float = 0.8
    pointer_events: bool = False

    @property
    def css(self) -> str:
        return f"linear-gradient({self.angle:g}deg, {self.colors[0]}, {self.colors[1]})"


@dataclass(frozen=True)
class AudioCue:
    """Playback window for an audio element."""

    start_frame: int
    start_seconds: float
    gain: float
    duration_seconds: float


@dataclass(frozen=True)
class ResolvedElement:
    """Everything the rendering backend needs to paint or mix one element."""

    kind: str
    prototype_id: str
    content: Optional[str]
    x: float = 0.0
    y: float = 0.0
    rotation: float = 0.0
    scale: float = 1.0
    opacity: float = 1.0
    filter: str = ""
    z_index: int = 0
    layer: int = SCENE_LAYER
    gradient: Optional[GradientOverlay] = None
    width: Optional[float] = None
    height: Optional[float] = None
    overlays: tuple[str, ...] = ()
    audio: Optional[AudioCue] = None

    @property
    def is_visual(self) -> bool:
        return self.audio is None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        if self.gradient is not None:
            payload["gradient"]["css"] = self.gradient.css
        return payload


@dataclass(frozen=True)
class FrameState:
    """Ordered render instructions for a single frame."""

    frame: int
    composition_frame: Optional[int]
    elements: tuple[ResolvedElement, ...] = ()
    warnings: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.elements

    def to_dict(self) -> dict[str, Any]:
        return {
            "frame": self.frame,
            "composition_frame": self.composition_frame,
            "elements": [element.to_dict() for element in self.elements],
            "warnings": list(self.warnings),
        }
