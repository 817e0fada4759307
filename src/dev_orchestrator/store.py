import time
import threading
import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

class TaskNotFound(Exception):
    pass

class TaskNotPending(Exception):
    pass

class InMemoryTaskStore:
    """
    Tenant-scoped task table for local runs.
    Claim arbitration happens under a single lock, so a pending task is
    handed to at most one claimant.
    """
    def __init__(self):
        self._tasks: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def _get(self, tenant_id: str, task_id: str) -> Dict[str, Any]:
        task = self._tasks.get(tenant_id, {}).get(str(task_id))
        if task is None:
            raise TaskNotFound(f"Task {task_id} not found for tenant {tenant_id}")
        return task

    def create(self, tenant_id: str, payload: Optional[Dict[str, Any]] = None, status: str = "pending") -> Dict[str, Any]:
        with self._lock:
            task_id = self._next_id
            self._next_id += 1
            task = {
                "id": task_id,
                "status": status,
                "payload": payload or {},
                "created_ts": time.time(),
                "updated_ts": time.time(),
            }
            self._tasks.setdefault(tenant_id, {})[str(task_id)] = task
            return dict(task)

    def list(self, tenant_id: str) -> List[Dict[str, Any]]:
        with self._lock:
            return [dict(t) for t in self._tasks.get(tenant_id, {}).values()]

    def claim(self, tenant_id: str, task_id: str) -> Dict[str, Any]:
        with self._lock:
            task = self._get(tenant_id, task_id)
            if task["status"] != "pending":
                raise TaskNotPending(f"Task {task_id} is {task['status']}")
            task["status"] = "claimed"
            task["updated_ts"] = time.time()
            logger.info(f"[{tenant_id}] task {task_id} claimed")
            return dict(task)

    def set_status(self, tenant_id: str, task_id: str, status: str) -> Dict[str, Any]:
        with self._lock:
            task = self._get(tenant_id, task_id)
            task["status"] = status
            task["updated_ts"] = time.time()
            logger.info(f"[{tenant_id}] task {task_id} -> {status}")
            return dict(task)
