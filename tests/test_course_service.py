"""
API tests for the course data provider, backed by a temp data directory.
"""

import json

import pytest
from fastapi.testclient import TestClient

from course_service.crud import build_grouped, merge_course
from course_service.main import create_app
from course_service.pages import DetailPageRenderer, safe_course, title_to_slug
from course_service.settings import Settings
from shared.datastore import BACKUP_PREFIX, BackupError, JsonFileStore
from conftest import make_record


@pytest.fixture
def settings(tmp_path, data_file):
    return Settings(
        data_file=data_file,
        grouped_file=tmp_path / "data" / "grouped_courses.json",
        backups_dir=tmp_path / "backups",
        backup_keep=10,
        pages_dir=tmp_path / "ai",
        pages_base_path="/ai",
    )


@pytest.fixture
def client(settings):
    return TestClient(create_app(settings))


def stored(settings):
    return json.loads(settings.data_file.read_text(encoding="utf-8"))


# ============================================================================
# Reads
# ============================================================================

def test_health(client):
    assert client.get("/health").json()["status"] == "ok"


def test_list_courses(client, records):
    r = client.get("/courses/")
    assert r.status_code == 200
    assert r.json() == records


def test_admin_list_and_get(client):
    r = client.get("/admin/courses")
    assert r.json()[0] == {"id": "AI-1", "title": "Machine Learning Foundations"}
    assert client.get("/admin/course", params={"id": "AI-3"}).json()["title"] == "Robot Motion Planning"
    assert client.get("/admin/course", params={"id": "AI-99"}).status_code == 404


def test_grouped_partitions_industry_tracks(client):
    grouped = client.get("/courses/grouped").json()
    assert [t["track"] for t in grouped["industryTracks"]] == ["Quantum AI & Software Engineering"]
    assert [t["track"] for t in grouped["regularTracks"]] == ["Data Science", "Robotics"]
    assert grouped["totalCourses"] == 4
    assert [c["id"] for c in grouped["tracks"]["Data Science"]] == ["AI-1", "AI-2"]
    assert grouped["regularTracks"][0]["courseCount"] == 2


def test_grouped_uses_placeholder_for_missing_track():
    grouped = build_grouped([{"id": "x", "title": "X"}])
    assert grouped["regularTracks"][0]["track"] == "Uncategorized"
    assert grouped["regularTracks"][0]["domains"][0]["name"] == "Uncategorized"


# ============================================================================
# Generate / preview
# ============================================================================

def test_merge_course_overrides_existing_fields(records):
    updated, merged = merge_course(records, {"id": "AI-2", "title": "Vision Transformers"})
    assert merged["title"] == "Vision Transformers"
    assert merged["tool"] == "PyTorch"
    assert len(updated) == len(records)
    assert records[1]["title"] == "Deep Learning for Vision"


def test_generate_updates_data_page_backup_and_groups(client, settings):
    r = client.post("/admin/generate", json={"id": "AI-2", "title": "Vision Transformers"})
    assert r.status_code == 200
    assert r.json() == {"success": True, "path": "/ai/vision-transformers/"}

    courses = stored(settings)
    assert courses[1]["title"] == "Vision Transformers"
    assert courses[1]["tool"] == "PyTorch"

    page = settings.pages_dir / "vision-transformers" / "index.html"
    assert "Vision Transformers" in page.read_text(encoding="utf-8")

    backups = client.get("/admin/backups").json()
    assert len(backups) == 1 and backups[0]["name"].startswith(BACKUP_PREFIX)
    assert settings.grouped_file.exists()


def test_generate_adds_new_course(client, settings):
    r = client.post("/admin/generate", json=make_record("AI-5", "Speech <Models>", syllabus=["Intro"]))
    assert r.status_code == 200
    assert stored(settings)[-1]["id"] == "AI-5"
    html = (settings.pages_dir / "speech-models" / "index.html").read_text(encoding="utf-8")
    assert "Speech &lt;Models&gt;" in html
    assert "Intro" in html


def test_generate_requires_id(client):
    assert client.post("/admin/generate", json={"title": "No id"}).status_code == 422


def test_backup_failure_leaves_data_untouched(client, settings, monkeypatch):
    before = settings.data_file.read_text(encoding="utf-8")

    def broken(self):
        raise BackupError("Backup failed: disk full")

    monkeypatch.setattr(JsonFileStore, "_backup", broken)
    r = client.post("/admin/generate", json={"id": "AI-1", "title": "Changed"})
    assert r.status_code == 500
    assert r.json() == {"success": False, "error": "Backup failed: disk full"}
    assert settings.data_file.read_text(encoding="utf-8") == before


def test_page_write_failure_reports_error_after_save(client, settings, monkeypatch):
    """The course is already saved when the page write fails; the caller is told."""
    def read_only(self, course, html):
        raise OSError("read-only file system")

    monkeypatch.setattr(DetailPageRenderer, "write", read_only)
    r = client.post("/admin/generate", json={"id": "AI-1", "title": "Changed"})
    assert r.status_code == 500
    body = r.json()
    assert body["success"] is False
    assert "page write failed" in body["error"]
    assert next(c for c in stored(settings) if c["id"] == "AI-1")["title"] == "Changed"


def test_preview_renders_without_writing(client, settings):
    r = client.post("/admin/preview", json={"id": "AI-77"})
    assert r.status_code == 200
    assert "<h1>AI-77</h1>" in r.text
    assert not settings.pages_dir.exists()
    assert len(stored(settings)) == 4


def test_safe_course_defaults():
    course = safe_course({"title": "Edge AI"})
    assert course["mainPageUrl"] == "/ai/courses/edge-ai/"
    assert course["pricing"]["lms"] == {"usd": 0, "inr": 0}
    assert course["faqs"] == []


def test_title_to_slug():
    assert title_to_slug("  AI for Robotics & Intelligent Systems ") == "ai-for-robotics-intelligent-systems"
    assert title_to_slug("C++ -- Basics") == "c-basics"


# ============================================================================
# Backups
# ============================================================================

def test_backups_are_pruned(tmp_path, records):
    store = JsonFileStore(tmp_path / "all_courses.json", tmp_path / "backups", keep=3)
    for n in range(6):
        store.save(records[: n % 4 + 1])
    backups = store.list_backups()
    assert len(backups) == 3
    assert backups == sorted(backups, key=lambda b: (b["mtime"], b["name"]), reverse=True)


def test_restore_backup(client, settings, records):
    client.post("/admin/generate", json={"id": "AI-1", "title": "Changed"})
    name = client.get("/admin/backups").json()[0]["name"]

    content = client.get(f"/admin/backups/{name}")
    assert content.status_code == 200
    assert json.loads(content.text) == records

    r = client.post("/admin/backups/restore", json={"name": name})
    assert r.status_code == 200
    assert stored(settings) == records


def test_backup_names_are_validated(client):
    assert client.get("/admin/backups/..%2Fall_courses.json").status_code == 404
    assert client.get("/admin/backups/other.json").status_code == 404
    assert client.post("/admin/backups/restore", json={"name": "../all_courses.json"}).status_code == 404


def test_restore_rejects_non_array(client, settings):
    settings.backups_dir.mkdir()
    (settings.backups_dir / f"{BACKUP_PREFIX}1").write_text('{"id": 1}', encoding="utf-8")
    r = client.post("/admin/backups/restore", json={"name": f"{BACKUP_PREFIX}1"})
    assert r.status_code == 400


def test_rebuild_groups(client, settings):
    r = client.post("/admin/rebuild-groups")
    assert r.json()["totalCourses"] == 4
    grouped = json.loads(settings.grouped_file.read_text(encoding="utf-8"))
    assert grouped["industryTracks"][0]["isIndustryTrack"] is True
