import asyncio
import random
from urllib.parse import quote
import logging
from typing import List, Optional
import httpx
from pydantic import ValidationError

from src.config import WorkerSettings
from src.executor.schemas import (
    ClaimOutcome,
    FetchOutcome,
    StatusUpdate,
    Task,
    TaskId,
    TaskListing,
    TaskStatus,
)

logger = logging.getLogger(__name__)

TENANT_HEADER = "X-Tenant-ID"
CONTENDED_STATUS_CODES = (404, 409)

def task_path(task_id: TaskId, action: str) -> str:
    return f"/tasks/{quote(str(task_id), safe='')}/{action}"

class OrchestratorUnavailable(Exception):
    pass

class OrchestratorClient:
    """
    Async HTTP wrapper around the orchestrator's task API.
    Every public method fails soft: errors end up in the log, never in the caller.
    """
    def __init__(self, settings: WorkerSettings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.settings = settings
        self.http_client = httpx.AsyncClient(
            base_url=settings.orch_url,
            timeout=settings.request_timeout_sec,
            headers={
                TENANT_HEADER: settings.tenant_id,
                "Content-Type": "application/json",
            },
            transport=transport,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()

    async def aclose(self):
        await self.http_client.aclose()

    def _backoff_delay(self, attempt: int) -> float:
        return (self.settings.retry_base_delay_sec * (2 ** attempt)
                + random.uniform(0, self.settings.retry_jitter_sec))

    async def _make_request(self, method: str, endpoint: str, json_data: dict = None) -> httpx.Response:
        """
        Sends one request with bounded retries.
        Transport errors and 5xx responses are retried with exponential backoff and jitter.
        Any other response, 4xx included, is returned as-is on the first attempt.
        """
        attempts = self.settings.max_retries + 1
        last_error = None

        for attempt in range(attempts):
            try:
                resp = await self.http_client.request(method, endpoint, json=json_data)
                if resp.status_code < 500:
                    return resp
                last_error = f"HTTP {resp.status_code}"
                # Out of retries: hand the 5xx back so the caller can classify it
                if attempt == attempts - 1:
                    return resp
            except httpx.TransportError as e:
                last_error = f"{type(e).__name__}: {e}"
            except httpx.RequestError as e:
                # Not a connectivity problem, so retrying will not help
                raise OrchestratorUnavailable(f"{method} {endpoint} failed: {type(e).__name__}: {e}") from e

            if attempt < attempts - 1:
                delay = self._backoff_delay(attempt)
                logger.warning(f"{method} {endpoint} failed ({last_error}). Retrying in {delay:.3f}s (Attempt {attempt + 1}/{attempts})")
                await asyncio.sleep(delay)

        raise OrchestratorUnavailable(f"{method} {endpoint} failed after {attempts} attempts: {last_error}")

    # --- Task API ---
    async def fetch_tasks(self) -> TaskListing:
        """Lists pending tasks. The listing's outcome tells 'nothing to do' apart from 'fetch failed'."""
        try:
            resp = await self._make_request("GET", "/tasks")
            resp.raise_for_status()
            body = resp.json()
        except ValueError as e:
            logger.warning(f"Received non-JSON response from tasks endpoint: {e}")
            return TaskListing(outcome=FetchOutcome.MALFORMED, error=str(e))
        except (OrchestratorUnavailable, httpx.HTTPError) as e:
            logger.error(f"Error fetching tasks: {e}")
            return TaskListing(outcome=FetchOutcome.ERROR, error=str(e))

        if not isinstance(body, list):
            logger.warning(f"Received non-array response from tasks endpoint: {body!r}")
            return TaskListing(outcome=FetchOutcome.MALFORMED, error=f"expected a JSON array, got {type(body).__name__}")

        pending = []
        for item in body:
            try:
                task = Task.model_validate(item)
            except ValidationError:
                logger.warning(f"Skipping malformed task entry: {item!r}")
                continue
            if task.is_pending:
                pending.append(task)
        return TaskListing(tasks=pending)

    async def list_pending(self) -> List[Task]:
        listing = await self.fetch_tasks()
        return listing.tasks

    async def claim_task(self, task_id: TaskId) -> ClaimOutcome:
        try:
            resp = await self._make_request("POST", task_path(task_id, "claim"))
        except OrchestratorUnavailable as e:
            logger.error(f"Error claiming task {task_id}: {e}")
            return ClaimOutcome.ERROR

        if resp.is_success:
            return ClaimOutcome.CLAIMED
        if resp.status_code in CONTENDED_STATUS_CODES:
            logger.info(f"Task {task_id} not claimable (HTTP {resp.status_code}), skipping")
            return ClaimOutcome.CONTENDED
        if resp.status_code < 500:
            logger.warning(f"Claim for task {task_id} rejected with HTTP {resp.status_code}")
            return ClaimOutcome.REJECTED
        logger.error(f"Claim for task {task_id} failed with HTTP {resp.status_code}")
        return ClaimOutcome.ERROR

    async def claim(self, task_id: TaskId) -> bool:
        return await self.claim_task(task_id) is ClaimOutcome.CLAIMED

    async def set_status(self, task_id: TaskId, status: TaskStatus) -> None:
        """Best-effort status report. Failures are logged and dropped."""
        body = StatusUpdate(status=status).model_dump(mode="json")
        try:
            resp = await self._make_request("PATCH", task_path(task_id, "status"), body)
        except OrchestratorUnavailable as e:
            logger.error(f"Error updating task {task_id} status to {body['status']}: {e}")
            return

        if not resp.is_success:
            logger.error(f"Status update for task {task_id} to {body['status']} returned HTTP {resp.status_code}")
