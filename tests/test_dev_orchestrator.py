import pytest
from fastapi.testclient import TestClient

from src.dev_orchestrator.app import create_app


@pytest.fixture
def api():
    with TestClient(create_app()) as client:
        yield client


def test_tasks_are_scoped_per_tenant(api):
    created = api.post("/tasks", json={"payload": {"n": 1}}, headers={"X-Tenant-ID": "t1"})
    assert created.status_code == 201
    assert created.json()["status"] == "pending"

    assert len(api.get("/tasks", headers={"X-Tenant-ID": "t1"}).json()) == 1
    assert api.get("/tasks", headers={"X-Tenant-ID": "t2"}).json() == []


def test_default_tenant_when_header_missing(api):
    api.post("/tasks", json={})
    assert len(api.get("/tasks", headers={"X-Tenant-ID": "default-tenant"}).json()) == 1


def test_claim_is_granted_once(api):
    task_id = api.post("/tasks", json={}).json()["id"]

    first = api.post(f"/tasks/{task_id}/claim")
    second = api.post(f"/tasks/{task_id}/claim")

    assert first.status_code == 200
    assert first.json()["task"]["status"] == "claimed"
    assert second.status_code == 409


def test_claim_unknown_task_is_404(api):
    assert api.post("/tasks/999/claim").status_code == 404


def test_claim_from_other_tenant_is_404(api):
    task_id = api.post("/tasks", json={}, headers={"X-Tenant-ID": "t1"}).json()["id"]
    assert api.post(f"/tasks/{task_id}/claim", headers={"X-Tenant-ID": "t2"}).status_code == 404


def test_status_update(api):
    task_id = api.post("/tasks", json={}).json()["id"]
    api.post(f"/tasks/{task_id}/claim")

    resp = api.patch(f"/tasks/{task_id}/status", json={"status": "completed"})
    assert resp.status_code == 200
    assert api.get("/tasks").json()[0]["status"] == "completed"


def test_status_update_rejects_unknown_status(api):
    task_id = api.post("/tasks", json={}).json()["id"]
    assert api.patch(f"/tasks/{task_id}/status", json={"status": "exploded"}).status_code == 422


def test_status_update_unknown_task_is_404(api):
    assert api.patch("/tasks/42/status", json={"status": "failed"}).status_code == 404
