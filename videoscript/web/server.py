"""FastAPI preview surface for resolving project frames on demand."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, AsyncIterator, Optional

from fastapi import FastAPI, File, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field, field_validator
from starlette.concurrency import run_in_threadpool

from .. import config
from ..core.archive import extract_archive
from ..core.errors import InvalidPackageError, ProjectLoadError, SchemaValidationError
from ..core.frame_state import resolve_frame, resolve_frames
from ..core.package_loader import LoadedPackage, build_package, load_package_dir
from ..core.plan_writer import project_summary
from ..core.remote import fetch_project
from ..utils import file_tools

logger = logging.getLogger(__name__)

MAX_FRAMES_PER_REQUEST = 500
UPLOAD_CHUNK_BYTES = 1024 * 1024


class _Request(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    frames: list[int] = Field(default_factory=lambda: [0])
    assets_base_url: Optional[str] = Field(None, alias="assetsBaseUrl")

    @field_validator("frames")
    @classmethod
    def _limit_frames(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("At least one frame is required")
        if len(value) > MAX_FRAMES_PER_REQUEST:
            raise ValueError(f"At most {MAX_FRAMES_PER_REQUEST} frames per request")
        return value


class ResolveRequest(_Request):
    """Inline project data to resolve."""

    project: dict[str, Any]
    prototypes: list[dict[str, Any]] = Field(default_factory=list)


class LoadRequest(_Request):
    """A remotely served project to fetch and resolve."""

    project_json_url: str = Field(alias="projectJsonUrl")
    timeout: float = Field(config.FETCH_TIMEOUT_SECONDS, gt=0, le=300)


class FramesResponse(BaseModel):
    project: dict[str, Any]
    frames: list[dict[str, Any]]


def _frames_response(package: LoadedPackage, frames: list[int]) -> FramesResponse:
    states = resolve_frames(package.project, package.prototypes, frames, workers=config.RENDER_WORKERS)
    return FramesResponse(project=project_summary(package), frames=[state.to_dict() for state in states])


def _write_upload(file: UploadFile, target: Path) -> int:
    written = 0
    with target.open("wb") as handle:
        while True:
            chunk = file.file.read(UPLOAD_CHUNK_BYTES)
            if not chunk:
                break
            written += len(chunk)
            if written > config.MAX_UPLOAD_BYTES:
                handle.close()
                target.unlink(missing_ok=True)
                raise HTTPException(status_code=413, detail="File too large")
            handle.write(chunk)
    return written


def _ingest_archive(file: UploadFile) -> tuple[Path, LoadedPackage]:
    """Persist an uploaded ZIP, extract it safely and load the package."""

    work_dir = file_tools.make_temp_directory()
    try:
        archive_path = work_dir / "upload.zip"
        _write_upload(file, archive_path)
        package_dir = work_dir / "package"
        extract_archive(archive_path, package_dir)
        archive_path.unlink(missing_ok=True)
        return work_dir, load_package_dir(package_dir)
    except BaseException:
        file_tools.remove_directory(work_dir)
        raise


def _discard_package(app: FastAPI, package_id: str) -> None:
    app.state.packages.pop(package_id, None)
    app.state.package_expiry.pop(package_id, None)
    work_dir = app.state.package_dirs.pop(package_id, None)
    if work_dir is not None:
        file_tools.remove_directory(work_dir)


def _prune_expired(app: FastAPI) -> None:
    """Drop uploaded packages whose time to live has passed."""

    now = time.monotonic()
    expired = [package_id for package_id, deadline in app.state.package_expiry.items() if deadline <= now]
    for package_id in expired:
        logger.info("Package %s expired", package_id)
        _discard_package(app, package_id)


@asynccontextmanager
async def _lifespan(app: FastAPI) -> AsyncIterator[None]:
    yield
    for package_id in list(app.state.packages):
        _discard_package(app, package_id)
    logger.info("Removed registered packages on shutdown")


def create_app(package_ttl: float = config.PACKAGE_TTL_SECONDS) -> FastAPI:
    app = FastAPI(title="VideoScript Preview", version="0.1.0", lifespan=_lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.ALLOWED_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.packages = {}
    app.state.package_dirs = {}
    app.state.package_expiry = {}

    def _get_package(request: Request, package_id: str) -> LoadedPackage:
        _prune_expired(request.app)
        package = request.app.state.packages.get(package_id)
        if package is None:
            raise HTTPException(status_code=404, detail="Package not found")
        return package

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.post("/api/resolve", response_model=FramesResponse)
    async def resolve_inline(payload: ResolveRequest) -> FramesResponse:
        try:
            package = build_package(
                {"project": payload.project, "prototypes": payload.prototypes},
                assets_base_url=payload.assets_base_url,
                export_package=False,
            )
        except SchemaValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return await run_in_threadpool(_frames_response, package, payload.frames)

    @app.post("/api/load", response_model=FramesResponse)
    async def load_remote(payload: LoadRequest) -> FramesResponse:
        try:
            package = await run_in_threadpool(
                fetch_project, payload.project_json_url, payload.assets_base_url, payload.timeout
            )
        except ProjectLoadError as exc:
            raise HTTPException(status_code=502, detail=str(exc)) from exc
        except SchemaValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        return await run_in_threadpool(_frames_response, package, payload.frames)

    @app.post("/api/packages")
    async def upload_package(request: Request, file: UploadFile = File(...)) -> dict[str, Any]:
        if Path(file.filename or "").suffix.lower() != ".zip":
            raise HTTPException(status_code=400, detail="Upload a .zip export package")
        try:
            work_dir, package = await run_in_threadpool(_ingest_archive, file)
        except SchemaValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except InvalidPackageError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

        _prune_expired(request.app)
        package_id = uuid.uuid4().hex
        request.app.state.packages[package_id] = package
        request.app.state.package_dirs[package_id] = work_dir
        request.app.state.package_expiry[package_id] = time.monotonic() + package_ttl
        logger.info("Registered package %s (%s)", package_id, package.project.name)
        return {"id": package_id, "project": project_summary(package)}

    @app.get("/api/packages/{package_id}")
    async def get_package(request: Request, package_id: str) -> dict[str, Any]:
        package = _get_package(request, package_id)
        return {"id": package_id, "project": project_summary(package), "version": package.version}

    @app.get("/api/packages/{package_id}/frames/{frame}")
    async def get_frame(request: Request, package_id: str, frame: int) -> dict[str, Any]:
        package = _get_package(request, package_id)
        state = await run_in_threadpool(resolve_frame, package.project, package.prototypes, frame)
        return state.to_dict()

    @app.delete("/api/packages/{package_id}")
    async def delete_package(request: Request, package_id: str) -> dict[str, str]:
        _get_package(request, package_id)
        _discard_package(request.app, package_id)
        return {"status": "deleted"}

    return app


app = create_app()


if __name__ == "__main__":  # pragma: no cover
    import uvicorn

    uvicorn.run("videoscript.web.server:app", host="0.0.0.0", port=8000, reload=True)
