"""
Command line helpers under scripts/, driven through their main(argv).
"""
from __future__ import annotations

import importlib.util
import json
import sys
from pathlib import Path

import pytest

# Make the portfolio package importable for local test runs
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from portfolio.core import config as core_config  # noqa: E402
from portfolio.repositories.storage import PROJECTS_KEY, JsonFileStorage  # noqa: E402

SEED = [{"id": 1, "title": "Seed", "description": "From the fallback file"}]


def _load_script(name: str, monkeypatch):
    spec = importlib.util.spec_from_file_location(f"script_{name}", ROOT / "scripts" / f"{name}.py")
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    # keep pytest's log capture handlers in place
    monkeypatch.setattr(module, "setup_logging", lambda *a, **kw: None)
    return module


@pytest.fixture()
def json_env(tmp_path, monkeypatch):
    """JSON storage + fallback file in tmp_path; settings cache cleared around the test."""
    fallback = tmp_path / "projects.json"
    fallback.write_text(json.dumps(SEED), encoding="utf-8")
    storage_path = tmp_path / "storage.json"
    monkeypatch.setenv("STORAGE_BACKEND", "json")
    monkeypatch.setenv("STORAGE_PATH", str(storage_path))
    monkeypatch.setenv("FALLBACK_SOURCE", str(fallback))
    monkeypatch.delenv("CATEGORIES_FILE", raising=False)
    core_config.get_settings.cache_clear()

    yield storage_path

    core_config.get_settings.cache_clear()


def test_import_writes_storage(json_env, tmp_path, monkeypatch, capsys):
    script = _load_script("import_projects", monkeypatch)
    source = tmp_path / "incoming.json"
    source.write_text(json.dumps([{"id": 9, "title": "New", "description": "n"}]), encoding="utf-8")

    script.main([str(source)])

    stored = json.loads(JsonFileStorage(json_env).get(PROJECTS_KEY))
    assert [p["id"] for p in stored] == [9]
    assert "imported 1 projects" in capsys.readouterr().out


def test_import_dry_run_leaves_storage_alone(json_env, tmp_path, monkeypatch, capsys):
    script = _load_script("import_projects", monkeypatch)
    source = tmp_path / "incoming.json"
    source.write_text(json.dumps([{"id": 9, "title": "New", "description": "n"}]), encoding="utf-8")

    script.main([str(source), "--dry-run"])

    assert JsonFileStorage(json_env).get(PROJECTS_KEY) is None
    assert "would import 1 projects" in capsys.readouterr().out


def test_import_rejects_invalid_file(json_env, tmp_path, monkeypatch):
    script = _load_script("import_projects", monkeypatch)
    source = tmp_path / "incoming.json"
    source.write_text('[{"title": "X"}]', encoding="utf-8")

    with pytest.raises(SystemExit) as excinfo:
        script.main([str(source)])

    assert "description is required" in str(excinfo.value)
    assert JsonFileStorage(json_env).get(PROJECTS_KEY) is None


def test_export_writes_dated_file(json_env, tmp_path, monkeypatch):
    script = _load_script("export_projects", monkeypatch)
    out_dir = tmp_path / "exports"

    script.main(["--out-dir", str(out_dir)])

    files = list(out_dir.glob("portfolio-projects-*.json"))
    assert len(files) == 1
    assert json.loads(files[0].read_text(encoding="utf-8")) == SEED


def test_reset_requires_confirmation(json_env, monkeypatch):
    script = _load_script("reset_projects", monkeypatch)
    JsonFileStorage(json_env).set(PROJECTS_KEY, json.dumps(SEED))

    with pytest.raises(SystemExit):
        script.main([])
    assert JsonFileStorage(json_env).get(PROJECTS_KEY) is not None

    script.main(["--yes"])
    assert JsonFileStorage(json_env).get(PROJECTS_KEY) is None
