"""
HTTP surface: JSON API and the projects page, exercised through TestClient.
"""
from __future__ import annotations

import json
import sys
from dataclasses import replace
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

# Make the portfolio package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.app import create_app  # noqa: E402
from portfolio.core.config import get_settings  # noqa: E402
from portfolio.repositories.errors import ProjectFetchError  # noqa: E402
from portfolio.repositories.project_repository import ProjectRepository  # noqa: E402
from portfolio.repositories.storage import PROJECTS_KEY, MemoryStorage  # noqa: E402
from portfolio.services.project_service import ProjectService  # noqa: E402

SEED = [
    {
        "id": 1,
        "title": "Weather App",
        "description": "Forecast dashboard",
        "details": "Long write-up about the weather app.",
        "date": "2024-03-10",
        "technologies": ["React", "Node.js"],
        "images": ["https://img.example/weather.png"],
        "status": "completed",
    },
]

NEW_PROJECT = {
    "title": "Inventory",
    "description": "Stock tracking",
    "date": "2025-01-02",
    "technologies": ["PostgreSQL"],
    "images": ["https://img.example/inventory.png"],
}


@pytest.fixture()
def storage():
    return MemoryStorage({PROJECTS_KEY: json.dumps(SEED)})


@pytest.fixture()
def client(storage):
    service = ProjectService(ProjectRepository(storage))
    settings = replace(get_settings(), storage_backend="memory", app_env="test")
    app = create_app(settings, service, configure_logging=False)
    with TestClient(app) as test_client:
        yield test_client


def test_list_and_filter(client):
    assert [p["id"] for p in client.get("/api/projects").json()] == [1]
    assert client.get("/api/projects", params={"category": "database"}).json() == []
    assert [p["id"] for p in client.get("/api/projects", params={"q": "write-up"}).json()] == [1]


def test_get_project_by_path_id(client):
    resp = client.get("/api/projects/1")
    assert resp.status_code == 200
    assert resp.json()["title"] == "Weather App"
    assert client.get("/api/projects/404").status_code == 404


def test_create_validates_payload(client):
    resp = client.post("/api/projects", json={"title": "Only title"})
    assert resp.status_code == 422
    assert "Description is required" in resp.json()["detail"]["errors"]

    resp = client.post("/api/projects", json=NEW_PROJECT)
    assert resp.status_code == 201
    created = resp.json()
    assert created["createdAt"] == created["updatedAt"]
    assert [p["title"] for p in client.get("/api/projects").json()] == ["Inventory", "Weather App"]

    assert client.post("/api/projects", json={**NEW_PROJECT, "id": 1}).status_code == 409


def test_patch_and_delete(client):
    resp = client.patch("/api/projects/1", json={"status": "in-progress"})
    assert resp.status_code == 200
    assert resp.json()["status"] == "in-progress"
    assert client.patch("/api/projects/99", json={}).status_code == 404

    assert client.delete("/api/projects/1").json() == {"ok": True}
    assert client.delete("/api/projects/1").status_code == 404


def test_stats_and_storage_usage(client):
    client.patch("/api/projects/1", json={"featured": True})
    stats = client.get("/api/projects/stats").json()
    assert stats["total"] == 1
    assert stats["featured"] == 1
    assert stats["technologies"] == ["React", "Node.js"]
    assert stats["last_update_display"]

    usage = client.get("/api/projects/storage").json()
    assert usage["bytes"] > 0
    assert usage["formatted"].endswith(("bytes", "KB", "MB"))


def test_export_download(client):
    resp = client.get("/api/projects/export")
    assert resp.status_code == 200
    assert resp.headers["content-disposition"].startswith('attachment; filename="portfolio-projects-')
    assert json.loads(resp.text) == SEED


def test_import_replaces_collection(client):
    payload = json.dumps([{"id": 7, "title": "X", "description": "Y"}])
    resp = client.post("/api/projects/import", content=payload)
    assert resp.json() == {"ok": True, "imported": 1}
    assert [p["id"] for p in client.get("/api/projects").json()] == [7]


def test_import_errors_leave_collection(client):
    bad_json = client.post("/api/projects/import", content="[{")
    assert bad_json.status_code == 400

    missing = client.post("/api/projects/import", content='[{"title":"X"}]')
    assert missing.status_code == 422
    assert missing.json()["detail"]["errors"] == ["Project 1: description is required"]

    assert [p["id"] for p in client.get("/api/projects").json()] == [1]


def test_reset_then_check_updates(client, storage):
    assert client.post("/api/projects/reset").json() == {"ok": True}
    assert client.get("/api/projects").json() == []
    assert storage.get(PROJECTS_KEY) is None

    result = client.post("/api/projects/check-updates").json()
    assert result["checked"] is True
    assert result["changed"] is False


def test_projects_page_renders_cards_and_modal(client):
    resp = client.get("/projects")
    assert resp.status_code == 200
    body = resp.text
    assert 'class="project-card"' in body
    assert 'id="project-1"' in body
    assert "Long write-up about the weather app." in body
    assert "March 10, 2024" in body
    assert resp.headers["x-frame-options"] == "DENY"


def test_projects_page_empty_state(client):
    client.post("/api/projects/reset")
    body = client.get("/projects").text
    assert "No projects available at the moment." in body


def test_root_redirects_to_projects(client):
    resp = client.get("/", follow_redirects=False)
    assert resp.status_code == 302
    assert resp.headers["location"] == "/projects"


class StubFallback:
    def __init__(self, projects=None, error=None):
        self.projects = projects or []
        self.error = error

    def fetch(self):
        if self.error:
            raise self.error
        return [dict(p) for p in self.projects]


def make_client(fallback) -> TestClient:
    service = ProjectService(ProjectRepository(MemoryStorage(), fallback))
    settings = replace(get_settings(), storage_backend="memory", app_env="test")
    return TestClient(create_app(settings, service, configure_logging=False))


def test_projects_page_gives_each_fallback_record_its_own_modal():
    client = make_client(StubFallback([
        {"title": "A", "description": "a"},
        {"title": "B", "description": "b"},
    ]))
    body = client.get("/projects").text
    assert 'id="project-None"' not in body

    ids = [p["id"] for p in client.get("/api/projects").json()]
    assert len(set(ids)) == 2
    for ident in ids:
        assert f'id="project-{ident}"' in body
    assert client.delete(f"/api/projects/{ids[0]}").status_code == 200


def test_projects_page_reports_load_failure():
    client = make_client(StubFallback(error=ProjectFetchError("404")))
    body = client.get("/projects").text
    assert "Unable to load projects." in body
    assert "No projects available at the moment." not in body


def test_projects_page_tolerates_non_string_dates(client):
    client.patch("/api/projects/1", json={"date": 2024})
    resp = client.get("/projects")
    assert resp.status_code == 200
    assert "2024" in resp.text
