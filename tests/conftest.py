import copy
import json
import zipfile
from pathlib import Path

import pytest
from PIL import Image

from videoscript.core.package_loader import build_package

HERO_SVG = '<svg><circle fill="#ff0000"/><rect fill="#00ff00"/></svg>'

EXPORT_PACKAGE = {
    "project": {
        "id": "proj-1",
        "name": "Demo Short",
        "fps": 30,
        "width": 1920,
        "height": 1080,
        "durationInFrames": 120,
        "frames": [
            {
                "frameNumber": 0,
                "elements": [
                    {
                        "prototypeId": "hero",
                        "actionId": "walk",
                        "position": {"x": 100, "y": 200},
                        "zIndex": 2,
                        "customProps": {"colors": {"body": "#0000ff"}},
                    },
                    {
                        "prototypeId": "sky",
                        "actionId": "dusk",
                        "position": {"x": 0, "y": 0},
                        "zIndex": 5,
                    },
                    {
                        "prototypeId": "ball",
                        "actionId": "bounce",
                        "position": {"x": 10, "y": 10},
                        "zIndex": 1,
                        "modifiers": {"scale": 2, "rotation": 15, "opacity": 0.5},
                    },
                ],
            },
            {
                "frameNumber": 30,
                "elements": [
                    {
                        "prototypeId": "flipbook",
                        "actionId": "",
                        "position": {"x": 50, "y": 60},
                        "zIndex": 3,
                        "modifiers": {"scale": 1, "rotation": 0, "filter": {"type": "blur", "value": 4}},
                    },
                    {
                        "prototypeId": "theme",
                        "actionId": "",
                        "position": {"x": 0, "y": 0},
                        "zIndex": 0,
                        "modifiers": {"scale": 1, "rotation": 0, "opacity": 0.25},
                    },
                ],
            },
        ],
        "prototypesUsed": ["hero", "sky", "ball", "flipbook", "theme"],
    },
    "prototypes": [
        {
            "id": "hero",
            "name": "Hero",
            "type": "character",
            "appearance": {"svg": HERO_SVG, "colors": {"body": "#ff0000", "legs": "#00ff00"}, "scale": 1.5},
            "actions": [
                {
                    "id": "walk",
                    "name": "Walk",
                    "duration": 10,
                    "loop": True,
                    "keyframes": [
                        {"frame": 0, "transform": {"x": 0}},
                        {"frame": 10, "transform": {"x": 100}},
                    ],
                }
            ],
        },
        {
            "id": "sky",
            "name": "Sky",
            "type": "scenery",
            "svg": "<svg>sky</svg>",
            "actions": [
                {"id": "dusk", "name": "Dusk", "filters": "sepia(0.6)", "overlays": ["<svg>stars</svg>", "<svg>moon</svg>"]}
            ],
        },
        {
            "id": "ball",
            "name": "Ball",
            "type": "prop",
            "svg": "<svg>ball</svg>",
            "actions": [
                {
                    "id": "bounce",
                    "name": "Bounce",
                    "duration": 20,
                    "loop": False,
                    "keyframes": [
                        {"frame": 0, "transform": {"y": 0, "rotation": 0}},
                        {"frame": 20, "transform": {"y": -40, "rotation": 90}},
                    ],
                }
            ],
        },
        {
            "id": "flipbook",
            "name": "Flipbook",
            "type": "picture",
            "width": 320,
            "height": 240,
            "pictureFrames": {"30": "assets/frame_a.png", "60": "assets/frame_b.png"},
        },
        {
            "id": "theme",
            "name": "Theme",
            "type": "audio",
            "audioUrl": "assets/theme.mp3",
            "audioDuration": 12.5,
        },
    ],
    "mediaFiles": [
        {"filename": "assets/frame_a.png", "type": "image", "usedBy": ["flipbook"]},
        {"filename": "assets/frame_b.png", "type": "image", "usedBy": ["flipbook"]},
        {"filename": "assets/theme.mp3", "type": "audio", "usedBy": ["theme"]},
    ],
    "exportedAt": "2024-05-01T12:00:00Z",
    "version": "1.0.0",
}


@pytest.fixture
def export_data():
    return copy.deepcopy(EXPORT_PACKAGE)


@pytest.fixture
def package(export_data):
    return build_package(export_data)


def _png_bytes(tmp_path: Path, name: str) -> bytes:
    path = tmp_path / name
    Image.new("RGBA", (4, 4), (255, 0, 0, 255)).save(path)
    return path.read_bytes()


@pytest.fixture
def package_zip(tmp_path, export_data):
    """A valid export archive with project.json and its media files."""

    archive_path = tmp_path / "export.zip"
    with zipfile.ZipFile(archive_path, "w") as archive:
        archive.writestr("project.json", json.dumps(export_data))
        archive.writestr("assets/frame_a.png", _png_bytes(tmp_path, "a.png"))
        archive.writestr("assets/frame_b.png", _png_bytes(tmp_path, "b.png"))
        archive.writestr("assets/theme.mp3", b"ID3fake-audio")
    return archive_path
