#!/usr/bin/env python3
"""
Worker process for plan enrichment jobs
"""
import asyncio
import logging
import signal
import sys

from learnstream.bootstrap import build_pipeline, build_store, configure_logging
from learnstream.jobs.tasks import EnrichmentWorker, make_redis
from learnstream.settings import settings

logger = logging.getLogger("learnstream.worker")


async def main() -> None:
    store = build_store(settings.database_url)
    pipeline = build_pipeline(store, settings)
    redis_client = make_redis(settings.redis_url)
    worker = EnrichmentWorker(redis_client, pipeline.registry, store)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    logger.info("Starting plan enrichment worker...")
    try:
        await worker.run(stop)
    finally:
        logger.info("Worker shutting down...")
        await pipeline.aclose()
        await redis_client.aclose()


if __name__ == "__main__":
    configure_logging(settings.log_level)
    try:
        asyncio.run(main())
    except Exception:
        logger.exception("Worker error")
        sys.exit(1)
