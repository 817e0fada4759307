from fastapi import APIRouter, HTTPException, Depends
from src.dev_orchestrator.schemas import CreateTaskRequest
from src.dev_orchestrator.dependencies import get_task_store, get_tenant_id
from src.dev_orchestrator.store import InMemoryTaskStore, TaskNotFound, TaskNotPending
from src.executor.schemas import StatusUpdate

router = APIRouter(tags=["Tasks"])

# Routes are plain `def`: the store uses a thread lock, so FastAPI runs
# them in its threadpool instead of on the event loop.

@router.get("/tasks")
def list_tasks(tenant_id: str = Depends(get_tenant_id), store: InMemoryTaskStore = Depends(get_task_store)):
    return store.list(tenant_id)

@router.post("/tasks", status_code=201)
def create_task(req: CreateTaskRequest, tenant_id: str = Depends(get_tenant_id),
                store: InMemoryTaskStore = Depends(get_task_store)):
    return store.create(tenant_id, req.payload)

@router.post("/tasks/{task_id}/claim")
def claim_task(task_id: str, tenant_id: str = Depends(get_tenant_id),
               store: InMemoryTaskStore = Depends(get_task_store)):
    try:
        task = store.claim(tenant_id, task_id)
    except TaskNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TaskNotPending as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {"status": "ok", "task": task}

@router.patch("/tasks/{task_id}/status")
def update_status(task_id: str, req: StatusUpdate, tenant_id: str = Depends(get_tenant_id),
                  store: InMemoryTaskStore = Depends(get_task_store)):
    try:
        task = store.set_status(tenant_id, task_id, req.status.value)
    except TaskNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"status": "ok", "task": task}
