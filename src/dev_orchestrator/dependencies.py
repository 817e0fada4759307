from fastapi import Header, Request
from src.dev_orchestrator.store import InMemoryTaskStore

DEFAULT_TENANT_ID = "default-tenant"

def get_task_store(request: Request) -> InMemoryTaskStore:
    """FastAPI Dependency for accessing the app's task store."""
    store = getattr(request.app.state, "task_store", None)
    if store is None:
        raise RuntimeError("Task store is not initialized.")
    return store

def get_tenant_id(x_tenant_id: str = Header(default=DEFAULT_TENANT_ID)) -> str:
    return x_tenant_id
