import asyncio
import json
import logging
from typing import List, Optional

from src.client.orchestrator_client import OrchestratorClient
from src.executor.processor import TaskProcessor
from src.executor.schemas import Task, TaskStatus
from src.executor.shutdown import ShutdownSignal

logger = logging.getLogger(__name__)

class PollLoop:
    """
    Drives the worker: fetch pending tasks, claim and process each in the
    order the orchestrator returned them, then sleep for the poll interval.
    Runs until the shutdown signal fires or max_cycles is reached.
    """
    def __init__(
        self,
        client: OrchestratorClient,
        processor: TaskProcessor,
        poll_interval_sec: float,
        shutdown: Optional[ShutdownSignal] = None,
        max_concurrency: int = 1,
        max_cycles: Optional[int] = None,
    ):
        self.client = client
        self.processor = processor
        self.poll_interval_sec = poll_interval_sec
        self.shutdown = shutdown or ShutdownSignal()
        self.max_concurrency = max(1, max_concurrency)
        self.max_cycles = max_cycles

        self.metrics = {
            "cycles": 0,
            "fetch_errors": 0,
            "claimed": 0,
            "completed": 0,
            "failed": 0,
            "skipped": 0,
            "errors": 0,
        }

    async def _process_one(self, task: Task):
        try:
            status = await self.processor.process(task)
        except Exception:
            # One bad task must not abort the cycle
            self.metrics["errors"] += 1
            logger.exception(f"Unexpected error while processing task {task.id}")
            return

        if status is None:
            self.metrics["skipped"] += 1
            return
        self.metrics["claimed"] += 1
        if status is TaskStatus.COMPLETED:
            self.metrics["completed"] += 1
        else:
            self.metrics["failed"] += 1

    async def _process_sequential(self, tasks: List[Task]):
        for task in tasks:
            if self.shutdown.is_set():
                break
            await self._process_one(task)

    async def _process_bounded(self, tasks: List[Task]):
        semaphore = asyncio.Semaphore(self.max_concurrency)
        running = []

        async def _run(task: Task):
            try:
                await self._process_one(task)
            finally:
                semaphore.release()

        # Acquire before creating each task so they start in listing order
        for task in tasks:
            await semaphore.acquire()
            if self.shutdown.is_set():
                semaphore.release()
                break
            running.append(asyncio.create_task(_run(task)))

        if running:
            await asyncio.gather(*running)

    async def run_cycle(self):
        listing = await self.client.fetch_tasks()
        if not listing.ok:
            self.metrics["fetch_errors"] += 1
        if self.shutdown.is_set():
            return

        if self.max_concurrency == 1:
            await self._process_sequential(listing.tasks)
        else:
            await self._process_bounded(listing.tasks)

        self.metrics["cycles"] += 1
        logger.debug(json.dumps({
            "event": "poll_cycle",
            "fetch": listing.outcome.value,
            "pending": len(listing.tasks),
            **self.metrics,
        }))

    async def run(self):
        logger.info(json.dumps({
            "event": "poll_loop_start",
            "poll_interval_sec": self.poll_interval_sec,
            "max_concurrency": self.max_concurrency,
        }))

        while not self.shutdown.is_set():
            await self.run_cycle()

            if self.max_cycles is not None and self.metrics["cycles"] >= self.max_cycles:
                break
            if await self.shutdown.wait(self.poll_interval_sec):
                break

        logger.info(json.dumps({"event": "poll_loop_stop", **self.metrics}))
