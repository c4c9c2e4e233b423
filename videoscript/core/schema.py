"""Schema validation for export packages and conversion into the core model."""

from __future__ import annotations

import logging
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from . import (
    PROTOTYPE_KINDS,
    Action,
    AudioPrototype,
    CharacterAppearance,
    CharacterPrototype,
    FilterSpec,
    FrameComposition,
    FrameElement,
    GradientSpec,
    Keyframe,
    KeyframeTransform,
    MediaFile,
    Modifier,
    PicturePrototype,
    Point,
    Project,
    PropPrototype,
    Prototype,
    SceneryAction,
    SceneryPrototype,
    UnknownPrototype,
)
from .errors import SchemaValidationError

logger = logging.getLogger(__name__)

MAX_FPS = 120
MAX_WIDTH = 7680
MAX_HEIGHT = 4320

PrototypeKind = Literal["character", "scenery", "prop", "picture", "audio"]


class _Schema(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class PositionModel(_Schema):
    x: float
    y: float


class FilterModel(_Schema):
    type: str
    value: float


class GradientModel(_Schema):
    loop: bool = False
    colors: list[str]


class ModifierModel(_Schema):
    scale: Optional[float] = None
    rotation: Optional[float] = None
    opacity: Optional[float] = Field(None, ge=0, le=1)
    filter: Optional[FilterModel] = None
    gradient: Optional[GradientModel] = None


class FrameElementModel(_Schema):
    prototype_id: str = Field(alias="prototypeId")
    action_id: str = Field("", alias="actionId")
    position: PositionModel
    z_index: int = Field(alias="zIndex")
    custom_props: Optional[dict[str, Any]] = Field(None, alias="customProps")
    modifiers: Optional[ModifierModel] = None


class FrameModel(_Schema):
    frame_number: int = Field(alias="frameNumber", ge=0)
    elements: list[FrameElementModel]


class ProjectModel(_Schema):
    id: str
    name: str
    fps: float = Field(ge=1, le=MAX_FPS)
    width: int = Field(ge=1, le=MAX_WIDTH)
    height: int = Field(ge=1, le=MAX_HEIGHT)
    duration_in_frames: int = Field(alias="durationInFrames", ge=1)
    background: Optional[str] = None
    frames: list[FrameModel]
    prototypes_used: list[str] = Field(alias="prototypesUsed")


class PrototypeModel(_Schema):
    """Common prototype fields; kind-specific fields pass through untouched."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str
    name: str
    type: PrototypeKind


class MediaFileModel(_Schema):
    filename: str
    type: Literal["image", "audio"]
    used_by: list[str] = Field(alias="usedBy")


class ProjectBundleModel(_Schema):
    """Payload served to remote renderers: a project plus its prototypes."""

    project: ProjectModel
    prototypes: list[PrototypeModel]


class ExportPackageModel(ProjectBundleModel):
    media_files: Optional[list[MediaFileModel]] = Field(None, alias="mediaFiles")
    exported_at: str = Field(alias="exportedAt")
    version: str


def _describe(exc: PydanticValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"]) or "<root>"
        problems.append(f"{location}: {error['msg']}")
    return "; ".join(problems)


def validate_export_package(data: Any) -> ExportPackageModel:
    """Validate a full export package (``project.json`` contents)."""

    try:
        return ExportPackageModel.model_validate(data)
    except PydanticValidationError as exc:
        raise SchemaValidationError(f"Export package failed validation: {_describe(exc)}") from exc


def validate_project_bundle(data: Any) -> ProjectBundleModel:
    """Validate a bare ``{project, prototypes}`` payload."""

    try:
        return ProjectBundleModel.model_validate(data)
    except PydanticValidationError as exc:
        raise SchemaValidationError(f"Project data failed validation: {_describe(exc)}") from exc


def _build_modifier(model: Optional[ModifierModel]) -> Optional[Modifier]:
    if model is None:
        return None
    return Modifier(
        scale=model.scale,
        rotation=model.rotation,
        opacity=model.opacity,
        filter=FilterSpec(type=model.filter.type, value=model.filter.value) if model.filter else None,
        gradient=GradientSpec(colors=tuple(model.gradient.colors), loop=model.gradient.loop) if model.gradient else None,
    )


def _build_element(model: FrameElementModel) -> FrameElement:
    return FrameElement(
        prototype_id=model.prototype_id,
        action_id=model.action_id,
        position=Point(x=model.position.x, y=model.position.y),
        z_index=model.z_index,
        custom_props=dict(model.custom_props or {}),
        modifier=_build_modifier(model.modifiers),
    )


def build_project(model: ProjectModel) -> Project:
    return Project(
        id=model.id,
        name=model.name,
        fps=model.fps,
        width=model.width,
        height=model.height,
        duration_in_frames=model.duration_in_frames,
        frames=tuple(
            FrameComposition(
                frame_number=frame.frame_number,
                elements=tuple(_build_element(element) for element in frame.elements),
            )
            for frame in model.frames
        ),
        prototypes_used=tuple(model.prototypes_used),
        background=model.background,
    )


def build_media_files(models: Optional[list[MediaFileModel]]) -> tuple[MediaFile, ...]:
    return tuple(MediaFile(filename=m.filename, type=m.type, used_by=tuple(m.used_by)) for m in models or [])


def _optional_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _parse_keyframe(data: Mapping[str, Any]) -> Keyframe:
    transform = data.get("transform") or {}
    return Keyframe(
        frame=int(data["frame"]),
        transform=KeyframeTransform(
            x=_optional_float(transform.get("x")),
            y=_optional_float(transform.get("y")),
            rotation=_optional_float(transform.get("rotation")),
            scale=_optional_float(transform.get("scale")),
        ),
        svg_override=data.get("svgOverride") or None,
    )


def _parse_action(data: Mapping[str, Any]) -> Action:
    return Action(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        keyframes=tuple(_parse_keyframe(kf) for kf in data.get("keyframes") or []),
        duration=int(data.get("duration") or 0),
        loop=bool(data.get("loop", False)),
    )


def _parse_scenery_action(data: Mapping[str, Any]) -> SceneryAction:
    return SceneryAction(
        id=str(data["id"]),
        name=str(data.get("name", "")),
        filters=data.get("filters") or None,
        overlays=tuple(str(overlay) for overlay in data.get("overlays") or []),
    )


def _parse_prototype(data: Mapping[str, Any]) -> Prototype:
    kind = data.get("type")
    identifier = str(data["id"])
    name = str(data.get("name", ""))

    if kind == "character":
        appearance = data.get("appearance") or {}
        return CharacterPrototype(
            id=identifier,
            name=name,
            appearance=CharacterAppearance(
                svg=str(appearance.get("svg", "")),
                colors={str(k): str(v) for k, v in (appearance.get("colors") or {}).items()},
                scale=float(appearance.get("scale", 1.0)),
            ),
            actions=tuple(_parse_action(action) for action in data.get("actions") or []),
        )
    if kind == "scenery":
        return SceneryPrototype(
            id=identifier,
            name=name,
            svg=str(data.get("svg", "")),
            actions=tuple(_parse_scenery_action(action) for action in data.get("actions") or []),
        )
    if kind == "prop":
        return PropPrototype(
            id=identifier,
            name=name,
            svg=str(data.get("svg", "")),
            actions=tuple(_parse_action(action) for action in data.get("actions") or []),
        )
    if kind == "picture":
        return PicturePrototype(
            id=identifier,
            name=name,
            width=float(data.get("width", 0)),
            height=float(data.get("height", 0)),
            picture_frames={int(frame): str(url) for frame, url in (data.get("pictureFrames") or {}).items()},
        )
    if kind == "audio":
        return AudioPrototype(
            id=identifier,
            name=name,
            audio_url=str(data.get("audioUrl", "")),
            audio_duration=float(data.get("audioDuration", 0.0)),
        )
    return UnknownPrototype(id=identifier, name=name, type=str(kind))


def build_prototype(data: Mapping[str, Any] | PrototypeModel) -> Prototype:
    """Convert raw or validated prototype data into its tagged core type.

    Types outside the known kinds become :class:`UnknownPrototype` so the
    resolver can report them instead of failing the whole project.
    """

    if isinstance(data, PrototypeModel):
        data = data.model_dump()
    try:
        prototype = _parse_prototype(data)
    except (KeyError, TypeError, ValueError, AttributeError) as exc:
        raise SchemaValidationError(f"Prototype {data.get('id', '<unknown>')!r} is malformed: {exc}") from exc
    if prototype.kind not in PROTOTYPE_KINDS:
        logger.warning("Prototype %s has unsupported type %r", prototype.id, data.get("type"))
    return prototype
