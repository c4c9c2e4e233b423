"""Fetching project data served over HTTP for remote rendering."""

from __future__ import annotations

import logging
from typing import Optional

import requests

from .. import config
from .errors import ProjectLoadError
from .package_loader import LoadedPackage, build_package

logger = logging.getLogger(__name__)


def fetch_project(
    project_json_url: str,
    assets_base_url: Optional[str] = None,
    timeout: float = config.FETCH_TIMEOUT_SECONDS,
    session: Optional[requests.Session] = None,
) -> LoadedPackage:
    """Download ``{project, prototypes}`` and return it fully validated.

    The fetch either completes or raises :class:`ProjectLoadError`; callers
    never see partially loaded data.
    """

    client = session or requests
    logger.info("Fetching project from %s", project_json_url)
    try:
        response = client.get(project_json_url, timeout=timeout)
        response.raise_for_status()
        data = response.json()
    except requests.Timeout as exc:
        raise ProjectLoadError(f"Timed out after {timeout}s fetching project: {project_json_url}") from exc
    except requests.RequestException as exc:
        raise ProjectLoadError(f"Failed to fetch project: {exc}") from exc
    except ValueError as exc:
        raise ProjectLoadError(f"Project response is not valid JSON: {exc}") from exc

    return build_package(data, assets_base_url=assets_base_url, export_package=False)
