## Where enrichment runs are sent
import logging

from learnstream.jobs.tasks import enqueue_enrichment

logger = logging.getLogger(__name__)


class LocalDispatcher:
    """Runs enrichment inside this process through an EnrichmentRegistry."""

    def __init__(self, registry):
        self.registry = registry

    async def submit(self, plan_id, *, restart: bool = False, reason: str = "trigger") -> None:
        if restart:
            await self.registry.cancel(plan_id)
        self.registry.submit(plan_id)

    async def cancel(self, plan_id) -> bool:
        return await self.registry.cancel(plan_id)


class RedisQueueDispatcher:
    """Hands enrichment to the worker process through the Redis queue."""

    def __init__(self, redis_client):
        self.redis = redis_client

    async def submit(self, plan_id, *, restart: bool = False, reason: str = "trigger") -> None:
        task_id = await enqueue_enrichment(self.redis, plan_id, reason=reason, restart=restart)
        logger.info("queued enrichment of plan %s as task %s (%s)", plan_id, task_id, reason)

    async def cancel(self, plan_id) -> bool:
        # The worker owns the run; a queued restart job cancels it there
        return False
