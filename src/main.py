import asyncio
import sys
import json
import argparse
import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from src.config import WorkerSettings
from src.client.orchestrator_client import OrchestratorClient
from src.executor.poll_loop import PollLoop
from src.executor.processor import TaskProcessor, WorkFn, simulated_work
from src.executor.shutdown import ShutdownSignal

logger = logging.getLogger("executor")

def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Poll an orchestrator for pending tasks and process them.")
    parser.add_argument("--orch-url", help="Orchestrator base URL (env: ORCH_URL)")
    parser.add_argument("--tenant-id", help="Tenant sent as X-Tenant-ID (env: TENANT_ID)")
    parser.add_argument("--poll-interval-ms", type=int, help="Sleep between poll cycles (env: POLL_INTERVAL_MS)")
    parser.add_argument("--work-delay-ms", type=int, help="Simulated work per task (env: WORK_DELAY_MS)")
    parser.add_argument("--max-cycles", type=int, default=None, help="Exit after this many poll cycles")
    parser.add_argument("--log-level", help="Logging level (env: LOG_LEVEL)")
    return parser.parse_args(argv)

def load_settings(args) -> WorkerSettings:
    overrides = {
        "orch_url": args.orch_url,
        "tenant_id": args.tenant_id,
        "poll_interval_ms": args.poll_interval_ms,
        "work_delay_ms": args.work_delay_ms,
        "log_level": args.log_level,
    }
    return WorkerSettings(**{k: v for k, v in overrides.items() if v is not None})

async def run_worker(
    settings: WorkerSettings,
    shutdown: Optional[ShutdownSignal] = None,
    work_fn: Optional[WorkFn] = None,
    max_cycles: Optional[int] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
):
    if shutdown is None:
        shutdown = ShutdownSignal()
        shutdown.install()

    async with OrchestratorClient(settings, transport=transport) as client:
        processor = TaskProcessor(client, work_fn or simulated_work(settings.work_delay_sec))
        loop = PollLoop(
            client,
            processor,
            poll_interval_sec=settings.poll_interval_sec,
            shutdown=shutdown,
            max_concurrency=settings.max_concurrency,
            max_cycles=max_cycles,
        )
        await loop.run()
        return loop.metrics

def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format='[%(process)d] %(levelname)s %(name)s: %(message)s')

    try:
        settings = load_settings(args)
        logging.getLogger().setLevel(settings.log_level.upper())
    except (ValidationError, ValueError) as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    logger.info(json.dumps({"event": "executor_startup", "orch_url": settings.orch_url, "tenant_id": settings.tenant_id}))
    try:
        asyncio.run(run_worker(settings, max_cycles=args.max_cycles))
    except KeyboardInterrupt:
        logger.info(json.dumps({"event": "executor_interrupted"}))
        return 0
    except Exception:
        logger.exception("Fatal error")
        return 1

    logger.info(json.dumps({"event": "executor_shutdown"}))
    return 0

if __name__ == "__main__":
    sys.exit(main())
