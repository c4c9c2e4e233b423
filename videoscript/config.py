"""Runtime limits and defaults, overridable through environment variables."""

from __future__ import annotations

import os

MAX_ARCHIVE_BYTES = int(os.environ.get("VS_MAX_ARCHIVE_MB", "500")) * 1024 * 1024
MAX_ARCHIVE_FILES = int(os.environ.get("VS_MAX_ARCHIVE_FILES", "10000"))
FETCH_TIMEOUT_SECONDS = float(os.environ.get("VS_FETCH_TIMEOUT", "30"))
RENDER_WORKERS = int(os.environ.get("VS_RENDER_WORKERS", "4"))
PACKAGE_TTL_SECONDS = float(os.environ.get("VS_PACKAGE_TTL", "1800"))
MAX_UPLOAD_BYTES = MAX_ARCHIVE_BYTES
PROJECT_FILENAME = "project.json"
ASSETS_DIRNAME = "assets"
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("VS_ALLOWED_ORIGINS", "http://localhost:3000,http://localhost:8000").split(",")
    if origin.strip()
]
LOG_FORMAT = "[%(levelname)s] %(name)s: %(message)s"
