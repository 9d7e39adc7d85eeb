## Resource enrichment for a whole plan
import asyncio
import logging
from collections import Counter

from learnstream.plans.schemas import PlanContext, ResourcesStatus, Step

logger = logging.getLogger(__name__)


class PlanEnrichmentOrchestrator:
    """
    Walks a plan's steps and enriches each one.

    Steps run in plan order by default. With step_concurrency > 1 they run as
    separate tasks, at most step_concurrency at a time, and all of them share
    one limiter for link checks so the run never has more than
    `check_concurrency` checks in flight. The plan ends `ready` once every
    step has been attempted, whatever the individual step outcomes.

    Every write carries the run token read at the start, so a run that was
    superseded by a reset stops touching the plan.
    """

    def __init__(self, store, enricher, *, step_concurrency: int = 1, check_concurrency: int = 5):
        self.store = store
        self.enricher = enricher
        self.step_concurrency = step_concurrency
        self.check_concurrency = check_concurrency

    async def run(self, plan_id) -> None:
        run_token = None
        try:
            plan = await self.store.load_plan(plan_id)
            if plan is None:
                logger.warning("plan %s not found, nothing to enrich", plan_id)
                return

            run_token = plan.run_token
            await self.store.set_plan_status(plan.id, ResourcesStatus.LOADING, run_token=run_token)
            logger.info("enriching plan %s (%s): %d step(s)", plan.id, plan.title, len(plan.steps))

            context = PlanContext.from_plan(plan)
            if self.step_concurrency <= 1:
                outcomes = [await self._enrich_step(plan.id, s, context) for s in plan.steps]
            else:
                steps = asyncio.Semaphore(self.step_concurrency)
                checks = asyncio.Semaphore(max(1, self.check_concurrency))

                async def limited(step: Step) -> ResourcesStatus:
                    async with steps:
                        return await self._enrich_step(plan.id, step, context, check_limiter=checks)

                outcomes = await asyncio.gather(*(limited(s) for s in plan.steps))

            await self.store.set_plan_status(plan.id, ResourcesStatus.READY, run_token=run_token)

            counts = Counter(o.value for o in outcomes)
            logger.info("plan %s ready (steps: %s)", plan.id, dict(counts))

        except Exception:
            logger.error("enrichment of plan %s aborted", plan_id, exc_info=True)
            try:
                await self.store.set_plan_status(plan_id, ResourcesStatus.FAILED, run_token=run_token)
            except Exception:
                logger.error("could not mark plan %s failed", plan_id, exc_info=True)

    async def _enrich_step(self, plan_id, step: Step, context: PlanContext, **kwargs) -> ResourcesStatus:
        try:
            return await self.enricher.enrich(plan_id, step, context, **kwargs)
        except Exception:
            logger.error("step %s raised past its own error handling", step.id, exc_info=True)
            return ResourcesStatus.FAILED
