# learnstream/jobs/tasks.py
"""
Redis-based (reliable) task queue for plan enrichment.

Queue pattern:
- Producer LPUSH -> PENDING_Q
- Worker BRPOPLPUSH pending -> processing (atomic, reliable)
- ACK via LREM on processing once the plan's run has finished
- On startup, anything left in processing by a dead worker goes back to pending

The worker hands each plan id to an EnrichmentRegistry, which runs at most one
enrichment per plan and keeps crashes inside its own error boundary.
"""
import asyncio
import json
import logging
import uuid
from datetime import datetime, timezone

import redis.asyncio as redis
from redis.exceptions import ConnectionError as RedisConnectionError, TimeoutError as RedisTimeoutError

logger = logging.getLogger(__name__)

PENDING_Q = "plan_enrichment_queue"
PROCESSING_Q = "plan_enrichment_processing"
JOB_TYPE = "enrich_plan"


def make_redis(url: str) -> redis.Redis:
    # decode_responses=True returns strings instead of bytes (handy for JSON payloads)
    return redis.Redis.from_url(url, decode_responses=True)


# -------------------------
# Queue API (producer)
# -------------------------
async def enqueue_enrichment(redis_client, plan_id, *, reason: str = "trigger", restart: bool = False) -> str:
    """Enqueue a plan enrichment job and return its task_id."""
    task_id = str(uuid.uuid4())
    task_data = {
        "task_id": task_id,
        "type": JOB_TYPE,
        "plan_id": str(plan_id),
        "reason": reason,
        "restart": bool(restart),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    await redis_client.lpush(PENDING_Q, json.dumps(task_data))
    return task_id


async def requeue_orphans(redis_client) -> int:
    """Move jobs a crashed worker left in processing back to pending."""
    moved = 0
    while await redis_client.rpoplpush(PROCESSING_Q, PENDING_Q) is not None:
        moved += 1
    if moved:
        logger.info("requeued %d orphaned job(s)", moved)
    return moved


# -------------------------
# Worker loop (consumer)
# -------------------------
class EnrichmentWorker:
    def __init__(self, redis_client, registry, store=None, *, poll_timeout: int = 30):
        self.redis = redis_client
        self.registry = registry
        self.store = store
        self.poll_timeout = poll_timeout
        self._acks: set[asyncio.Task] = set()
        self._stopping = False

    async def run(self, stop: asyncio.Event) -> None:
        logger.info("starting loop. pending=%s processing=%s", PENDING_Q, PROCESSING_Q)
        await requeue_orphans(self.redis)
        if self.store is not None:
            await self.registry.recover_stalled(self.store)

        while not stop.is_set():
            try:
                await self.poll_once()
            except (RedisConnectionError, RedisTimeoutError) as e:
                logger.warning("redis unavailable (%s), backing off", e)
                await asyncio.sleep(1)

        self._stopping = True
        await self.registry.shutdown()
        if self._acks:
            await asyncio.wait(list(self._acks))

    async def poll_once(self) -> bool:
        # Atomically move task from pending -> processing and block up to poll_timeout
        task_raw = await self.redis.brpoplpush(PENDING_Q, PROCESSING_Q, timeout=self.poll_timeout)
        if not task_raw:
            logger.debug("idle (no jobs)")
            return False

        try:
            task = json.loads(task_raw)
        except ValueError:
            logger.warning("dropping malformed job payload: %r", task_raw)
            await self.redis.lrem(PROCESSING_Q, 1, task_raw)
            return False

        plan_id = task.get("plan_id") if isinstance(task, dict) else None
        if not plan_id or task.get("type", JOB_TYPE) != JOB_TYPE:
            logger.warning("dropping job without plan_id or with unknown type: %r", task)
            await self.redis.lrem(PROCESSING_Q, 1, task_raw)
            return False

        logger.info("task=%s plan_id=%s reason=%s", task.get("task_id"), plan_id, task.get("reason"))
        if task.get("restart"):
            # Retry/extend supersede whatever run is in flight for this plan
            await self.registry.cancel(plan_id)
        job = self.registry.submit(plan_id)

        ack = asyncio.create_task(self._ack_when_done(job, task_raw))
        self._acks.add(ack)
        ack.add_done_callback(self._acks.discard)
        return True

    async def _ack_when_done(self, job: asyncio.Task, task_raw: str) -> None:
        await asyncio.wait([job])
        if job.cancelled() and self._stopping:
            # Leave it in processing; the next worker start requeues it
            return
        await self.redis.lrem(PROCESSING_Q, 1, task_raw)
