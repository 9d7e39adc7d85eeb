## In-process registry of running plan enrichments
import asyncio
import logging
from typing import Awaitable, Callable, Dict, List

from learnstream.plans.schemas import ResourcesStatus

logger = logging.getLogger(__name__)


class EnrichmentRegistry:
    """
    Owns one asyncio task per plan id.

    Tasks run behind their own error boundary, so a crashing run is logged
    and never reaches whoever submitted it. A semaphore bounds how many
    plans enrich at once. Build one at startup, inject it where needed and
    call shutdown() on the way out.
    """

    def __init__(self, run: Callable[[str], Awaitable[None]], *, max_concurrent_plans: int = 4):
        self._run = run
        self._tasks: Dict[str, asyncio.Task] = {}
        self._limiter = asyncio.Semaphore(max(1, max_concurrent_plans))

    def submit(self, plan_id) -> asyncio.Task:
        key = str(plan_id)
        existing = self._tasks.get(key)
        if existing is not None and not existing.done():
            logger.info("plan %s already enriching, not starting another run", key)
            return existing

        task = asyncio.create_task(self._supervise(key), name=f"enrich-{key}")
        self._tasks[key] = task
        task.add_done_callback(lambda t, key=key: self._forget(key, t))
        return task

    def is_running(self, plan_id) -> bool:
        task = self._tasks.get(str(plan_id))
        return task is not None and not task.done()

    def running(self) -> List[str]:
        return [k for k, t in self._tasks.items() if not t.done()]

    async def join(self, plan_id) -> None:
        task = self._tasks.get(str(plan_id))
        if task is not None:
            await asyncio.wait([task])

    async def cancel(self, plan_id) -> bool:
        task = self._tasks.get(str(plan_id))
        if task is None or task.done():
            return False
        task.cancel()
        await asyncio.wait([task])
        return True

    async def recover_stalled(self, store) -> List[str]:
        """Resubmit plans a previous process left in `loading`."""
        stalled = [str(pid) for pid in await store.plan_ids_with_status(ResourcesStatus.LOADING)]
        for plan_id in stalled:
            logger.info("resuming stalled enrichment for plan %s", plan_id)
            self.submit(plan_id)
        return stalled

    async def shutdown(self) -> None:
        tasks = [t for t in self._tasks.values() if not t.done()]
        for t in tasks:
            t.cancel()
        if tasks:
            await asyncio.wait(tasks)
        self._tasks.clear()

    def _forget(self, key: str, task: asyncio.Task) -> None:
        if self._tasks.get(key) is task:
            del self._tasks[key]

    async def _supervise(self, plan_id: str) -> None:
        async with self._limiter:
            try:
                await self._run(plan_id)
            except asyncio.CancelledError:
                logger.info("enrichment of plan %s cancelled", plan_id)
                raise
            except Exception:
                logger.exception("enrichment of plan %s crashed", plan_id)
