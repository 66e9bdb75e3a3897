"""Tests for FastAPI REST API."""

from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from credguard.api.app import create_app
from credguard.backup.models import LoginOutcome, LoginResult
from tests.utils import write_target


@pytest.fixture
def client(service):
    """Test client over an app serving the temp-dir service."""
    with TestClient(create_app(service=service)) as client:
        yield client


def create(client: TestClient, label=None):
    body = {"label": label} if label is not None else None
    response = client.post("/api/backups", json=body)
    assert response.status_code == 200, response.text
    return response.json()


def test_root(client: TestClient):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["docs"] == "/api/docs"


def test_health(client: TestClient, target):
    response = client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["index_readable"] is True
    assert data["target_exists"] is False
    assert data["scheduler_running"] is False

    assert client.get("/api/health/live").json() == {"status": "alive"}


def test_health_degraded_on_corrupt_index(client: TestClient, service):
    service.config.index_path.write_text("{broken")

    data = client.get("/api/health").json()

    assert data["status"] == "degraded"
    assert data["index_readable"] is False


def test_scan_reasons(client: TestClient, target):
    missing = client.post("/api/scan")
    assert missing.status_code == 200
    assert missing.json() == {"created": False, "entry": None, "reason": "target-missing"}

    write_target(target, b'{"token":"a"}')
    created = client.post("/api/scan").json()
    assert created["created"] is True
    assert created["entry"]["label"].startswith("manual-")

    unchanged = client.post("/api/scan").json()
    assert unchanged["created"] is False
    assert unchanged["reason"] == "unchanged"


def test_create_list_and_get(client: TestClient, target):
    write_target(target, b"one")
    first = create(client, "first")["entry"]
    write_target(target, b"two")
    second = create(client)["entry"]

    listed = client.get("/api/backups").json()
    assert [b["id"] for b in listed] == [second["id"], first["id"]]

    fetched = client.get(f"/api/backups/{first['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["label"] == "first"
    assert fetched.json()["size"] == 3


def test_create_duplicate_content_is_not_an_error(client: TestClient, target):
    write_target(target, b"same")
    create(client)
    write_target(target, b"same")

    data = create(client)

    assert data["created"] is False
    assert data["reason"] == "duplicate-content"


def test_label_conflict_returns_409(client: TestClient, target):
    write_target(target, b"one")
    create(client, "taken")
    write_target(target, b"two")

    response = client.post("/api/backups", json={"label": "taken"})

    assert response.status_code == 409
    assert response.json()["detail"]["code"] == "label_conflict"
    assert len(client.get("/api/backups").json()) == 1


def test_blank_label_returns_400(client: TestClient, target):
    write_target(target, b"one")

    response = client.post("/api/scan", json={"label": "   "})

    assert response.status_code == 400
    assert response.json()["detail"]["code"] == "invalid_label"


def test_unknown_backup_returns_404(client: TestClient):
    for method, path in [
        ("get", "/api/backups/nope"),
        ("get", "/api/backups/nope/download"),
        ("post", "/api/backups/nope/restore"),
        ("delete", "/api/backups/nope"),
    ]:
        response = getattr(client, method)(path)
        assert response.status_code == 404, path
        assert response.json()["detail"] == {"code": "not_found", "message": "Backup nope not found"}

    response = client.patch("/api/backups/nope/label", json={"label": "x"})
    assert response.status_code == 404


def test_update_label(client: TestClient, target):
    write_target(target, b"one")
    first = create(client, "a")["entry"]
    write_target(target, b"two")
    second = create(client, "b")["entry"]

    response = client.patch(f"/api/backups/{first['id']}/label", json={"label": " renamed "})
    assert response.status_code == 200
    assert response.json()["label"] == "renamed"

    conflict = client.patch(f"/api/backups/{second['id']}/label", json={"label": "renamed"})
    assert conflict.status_code == 409

    cleared = client.patch(f"/api/backups/{first['id']}/label", json={"label": ""})
    assert cleared.json()["label"] == ""


def test_download(client: TestClient, service, target):
    write_target(target, b'{"token":"dl"}')
    entry = create(client)["entry"]

    response = client.get(f"/api/backups/{entry['id']}/download")
    assert response.status_code == 200
    assert response.content == b'{"token":"dl"}'

    (service.config.backups_dir / entry["filename"]).unlink()
    missing = client.get(f"/api/backups/{entry['id']}/download")
    assert missing.status_code == 500
    assert missing.json()["detail"]["code"] == "io_error"


def test_restore_and_delete(client: TestClient, target):
    write_target(target, b"old")
    old = create(client)["entry"]
    write_target(target, b"new")
    new = create(client)["entry"]

    response = client.post(f"/api/backups/{old['id']}/restore")
    assert response.status_code == 200
    assert response.json() == {"restored": old["id"]}
    assert target.read_bytes() == b"old"

    response = client.delete(f"/api/backups/{new['id']}")
    assert response.status_code == 200
    assert response.json() == {"deleted": new["id"]}
    assert [b["id"] for b in client.get("/api/backups").json()] == [old["id"]]


def test_restore_missing_file_returns_500(client: TestClient, service, target):
    write_target(target, b"data")
    entry = create(client)["entry"]
    (service.config.backups_dir / entry["filename"]).unlink()

    response = client.post(f"/api/backups/{entry['id']}/restore")

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "io_error"


def test_status(client: TestClient, target):
    assert client.get("/api/status").json()["exists"] is False

    write_target(target, b"status")
    create(client)
    data = client.get("/api/status").json()

    assert data["exists"] is True
    assert data["size"] == 6
    assert data["signature"] == data["latest_signature"]


def test_login(client: TestClient, service):
    result = LoginResult(outcome=LoginOutcome.FAILED, exit_code=1, message="codex login exited with code 1")

    with patch.object(service, "login", new=AsyncMock(return_value=result)):
        response = client.post("/api/login")

    assert response.status_code == 200
    assert response.json()["outcome"] == "failed"
    assert response.json()["exit_code"] == 1
