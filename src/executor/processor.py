import asyncio
import logging
from typing import Awaitable, Callable, Optional

from src.client.orchestrator_client import OrchestratorClient
from src.executor.schemas import Task, TaskStatus

logger = logging.getLogger(__name__)

# Work functions signal failure by raising, or by returning False
WorkFn = Callable[[Task], Awaitable[Optional[bool]]]

def simulated_work(delay_sec: float) -> WorkFn:
    """Builds the default work function: a fixed delay per task."""
    async def _work(task: Task):
        logger.info(f"Processing task {task.id}...")
        await asyncio.sleep(delay_sec)
        logger.info(f"Completed task {task.id}")
    return _work

class TaskProcessor:
    def __init__(self, client: OrchestratorClient, work_fn: WorkFn):
        self.client = client
        self.work_fn = work_fn

    async def process(self, task: Task) -> Optional[TaskStatus]:
        """
        Claims the task, runs the work function and reports the result.
        Returns the reported status, or None if the claim was lost.
        """
        if not await self.client.claim(task.id):
            return None

        try:
            result = await self.work_fn(task)
        except Exception:
            logger.exception(f"Work failed for task {task.id}")
            status = TaskStatus.FAILED
        else:
            if result is False:
                logger.warning(f"Work for task {task.id} reported failure")
                status = TaskStatus.FAILED
            else:
                status = TaskStatus.COMPLETED

        await self.client.set_status(task.id, status)
        return status
