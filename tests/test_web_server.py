import pytest
from fastapi.testclient import TestClient

from videoscript.core.errors import ProjectLoadError
from videoscript.core.package_loader import build_package
from videoscript.web import server


@pytest.fixture
def client():
    return TestClient(server.create_app())


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_resolve_inline_project(client, export_data):
    response = client.post(
        "/api/resolve",
        json={"project": export_data["project"], "prototypes": export_data["prototypes"], "frames": [0, 40]},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["project"]["name"] == "Demo Short"
    first, second = body["frames"]
    assert [e["prototype_id"] for e in first["elements"]] == ["sky", "ball", "hero"]
    assert second["composition_frame"] == 30
    audio = next(e for e in second["elements"] if e["kind"] == "audio")
    assert audio["audio"]["start_frame"] == 30
    assert audio["audio"]["gain"] == 0.25


def test_resolve_rejects_invalid_project(client, export_data):
    export_data["project"]["fps"] = 0
    response = client.post("/api/resolve", json={"project": export_data["project"], "prototypes": []})
    assert response.status_code == 422


def test_resolve_limits_frame_count(client, export_data):
    response = client.post(
        "/api/resolve",
        json={"project": export_data["project"], "frames": list(range(server.MAX_FRAMES_PER_REQUEST + 1))},
    )
    assert response.status_code == 422


def test_load_remote_project(client, monkeypatch, export_data):
    calls = []

    def fake_fetch(url, assets_base_url, timeout):
        calls.append((url, assets_base_url, timeout))
        return build_package(
            {"project": export_data["project"], "prototypes": export_data["prototypes"]},
            assets_base_url=assets_base_url,
            export_package=False,
        )

    monkeypatch.setattr(server, "fetch_project", fake_fetch)
    response = client.post(
        "/api/load",
        json={
            "projectJsonUrl": "https://example.com/project.json",
            "assetsBaseUrl": "https://example.com/assets",
            "frames": [45],
            "timeout": 5,
        },
    )
    assert response.status_code == 200
    assert calls == [("https://example.com/project.json", "https://example.com/assets", 5)]
    picture = next(e for e in response.json()["frames"][0]["elements"] if e["kind"] == "picture")
    assert picture["content"] == "https://example.com/assets/frame_a.png"


def test_load_remote_failure_is_bad_gateway(client, monkeypatch):
    def failing_fetch(url, assets_base_url, timeout):
        raise ProjectLoadError("Timed out")

    monkeypatch.setattr(server, "fetch_project", failing_fetch)
    response = client.post("/api/load", json={"projectJsonUrl": "https://example.com/project.json"})
    assert response.status_code == 502


def test_package_upload_lifecycle(client, package_zip):
    with package_zip.open("rb") as handle:
        response = client.post("/api/packages", files={"file": ("export.zip", handle, "application/zip")})
    assert response.status_code == 200
    package_id = response.json()["id"]

    info = client.get(f"/api/packages/{package_id}").json()
    assert info["version"] == "1.0.0"

    frame = client.get(f"/api/packages/{package_id}/frames/60").json()
    picture = next(e for e in frame["elements"] if e["kind"] == "picture")
    assert picture["content"].endswith("/assets/frame_b.png")

    assert client.delete(f"/api/packages/{package_id}").status_code == 200
    assert client.get(f"/api/packages/{package_id}").status_code == 404


def test_upload_rejects_non_zip(client):
    response = client.post("/api/packages", files={"file": ("project.json", b"{}", "application/json")})
    assert response.status_code == 400


def test_upload_rejects_bad_archive(client):
    response = client.post("/api/packages", files={"file": ("export.zip", b"garbage", "application/zip")})
    assert response.status_code == 400


def test_unknown_package_is_404(client):
    assert client.get("/api/packages/nope/frames/0").status_code == 404


def _upload(client, package_zip):
    with package_zip.open("rb") as handle:
        response = client.post("/api/packages", files={"file": ("export.zip", handle, "application/zip")})
    assert response.status_code == 200
    return response.json()["id"]


def test_expired_packages_are_pruned(package_zip):
    app = server.create_app(package_ttl=0)
    client = TestClient(app)
    package_id = _upload(client, package_zip)
    work_dir = app.state.package_dirs[package_id]
    assert work_dir.exists()

    assert client.get(f"/api/packages/{package_id}").status_code == 404
    assert not work_dir.exists()
    assert app.state.packages == {}


def test_shutdown_removes_registered_packages(package_zip):
    app = server.create_app()
    with TestClient(app) as client:
        package_id = _upload(client, package_zip)
        work_dir = app.state.package_dirs[package_id]
        assert client.get(f"/api/packages/{package_id}").status_code == 200
    assert not work_dir.exists()
    assert app.state.package_dirs == {}
