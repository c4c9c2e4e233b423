import pytest
import requests

from videoscript.core.errors import ProjectLoadError, SchemaValidationError
from videoscript.core.remote import fetch_project


class FakeResponse:
    def __init__(self, payload=None, status_error=None, json_error=None):
        self.payload = payload
        self.status_error = status_error
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_error:
            raise self.status_error

    def json(self):
        if self.json_error:
            raise self.json_error
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    def get(self, url, timeout=None):
        self.calls.append((url, timeout))
        if self.error:
            raise self.error
        return self.response


def test_fetch_project_builds_package(export_data):
    bundle = {"project": export_data["project"], "prototypes": export_data["prototypes"]}
    session = FakeSession(FakeResponse(bundle))
    package = fetch_project(
        "https://example.com/project.json",
        assets_base_url="https://example.com/assets/",
        timeout=5,
        session=session,
    )
    assert session.calls == [("https://example.com/project.json", 5)]
    audio = next(p for p in package.prototypes if p.id == "theme")
    assert audio.audio_url == "https://example.com/assets/theme.mp3"


def test_fetch_project_uses_requests_by_default(monkeypatch, export_data):
    bundle = {"project": export_data["project"], "prototypes": export_data["prototypes"]}
    monkeypatch.setattr(requests, "get", lambda url, timeout=None: FakeResponse(bundle))
    assert fetch_project("https://example.com/project.json").project.id == "proj-1"


def test_timeout_is_a_load_error():
    session = FakeSession(error=requests.Timeout("slow"))
    with pytest.raises(ProjectLoadError) as excinfo:
        fetch_project("https://example.com/project.json", timeout=1, session=session)
    assert "Timed out" in str(excinfo.value)


def test_http_error_is_a_load_error():
    session = FakeSession(FakeResponse(status_error=requests.HTTPError("404 Client Error")))
    with pytest.raises(ProjectLoadError):
        fetch_project("https://example.com/missing.json", session=session)


def test_non_json_body_is_a_load_error():
    session = FakeSession(FakeResponse(json_error=ValueError("Expecting value")))
    with pytest.raises(ProjectLoadError):
        fetch_project("https://example.com/project.json", session=session)


def test_invalid_project_data_is_a_schema_error():
    session = FakeSession(FakeResponse({"prototypes": []}))
    with pytest.raises(SchemaValidationError):
        fetch_project("https://example.com/project.json", session=session)
