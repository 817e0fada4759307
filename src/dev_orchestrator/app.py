import logging
from typing import Optional
from fastapi import FastAPI
from contextlib import asynccontextmanager

from src.dev_orchestrator.router import router as tasks_router
from src.dev_orchestrator.store import InMemoryTaskStore

logger = logging.getLogger("dev_orchestrator")

def create_app(store: Optional[InMemoryTaskStore] = None) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info({"event": "orchestrator_startup"})
        yield
        logger.info({"event": "orchestrator_shutdown"})

    app = FastAPI(lifespan=lifespan, title="Dev Task Orchestrator")
    app.state.task_store = store or InMemoryTaskStore()
    app.include_router(tasks_router)
    return app

# python -m src.dev_orchestrator.app --port 4000
app = create_app()

if __name__ == "__main__":
    import argparse
    import uvicorn

    logging.basicConfig(level=logging.INFO, format='[%(process)d] %(message)s')
    parser = argparse.ArgumentParser()
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=4000)
    args = parser.parse_args()
    uvicorn.run(app, host=args.host, port=args.port)
