import json
import time
import httpx
import pytest

from src.config import WorkerSettings

def make_settings(**overrides) -> WorkerSettings:
    values = {
        "orch_url": "http://orchestrator.test",
        "tenant_id": "tenant-a",
        "poll_interval_ms": 0,
        "work_delay_ms": 0,
        "request_timeout_sec": 1.0,
        "max_retries": 2,
        "retry_base_delay_sec": 0.0,
        "retry_jitter_sec": 0.0,
    }
    values.update(overrides)
    return WorkerSettings(_env_file=None, **values)

class RecordingOrchestrator:
    """
    httpx.MockTransport handler that serves a fixed task list and records
    every request it sees, with a monotonic timestamp.
    """
    def __init__(self, tasks=None, claim_status=200, status_status=200, list_response=None):
        self.tasks = tasks if tasks is not None else []
        self.claim_status = claim_status
        self.status_status = status_status
        self.list_response = list_response
        self.calls = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.calls.append({
            "method": request.method,
            "path": request.url.path,
            "raw_path": request.url.raw_path,
            "headers": request.headers,
            "json": body,
            "ts": time.monotonic(),
        })
        if request.method == "GET" and request.url.path == "/tasks":
            if self.list_response is not None:
                return self.list_response
            return httpx.Response(200, json=self.tasks)
        if request.method == "POST" and request.url.path.endswith("/claim"):
            status = self.claim_status
            if callable(status):
                status = status(request.url.path.split("/")[2])
            return httpx.Response(status, json={})
        if request.method == "PATCH":
            return httpx.Response(self.status_status, json={})
        return httpx.Response(404)

    def paths(self, method=None):
        return [c["path"] for c in self.calls if method is None or c["method"] == method]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)

@pytest.fixture
def settings():
    return make_settings()
