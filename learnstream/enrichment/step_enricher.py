## Resource enrichment for a single plan step
import logging
from typing import Dict, List

from learnstream.enrichment.curated import curated_resources
from learnstream.enrichment.validator import validate_all
from learnstream.plans.schemas import (
    CandidateResource,
    PlanContext,
    ResourceLink,
    ResourcesStatus,
    Step,
)

logger = logging.getLogger(__name__)

NO_RESOURCES_MESSAGE = "No reachable resources found"


class StepEnricher:
    def __init__(
        self,
        store,
        generator,
        checker,
        *,
        curated_table: Dict[str, List[dict]] | None = None,
        validation_concurrency: int = 5,
        max_resources: int = 5,
        min_resources_before_fallback: int = 3,
        failure_fallback_count: int = 3,
    ):
        self.store = store
        self.generator = generator
        self.checker = checker
        self.curated_table = curated_table
        self.validation_concurrency = validation_concurrency
        self.max_resources = max_resources
        self.min_resources_before_fallback = min_resources_before_fallback
        self.failure_fallback_count = failure_fallback_count

    async def enrich(self, plan_id, step: Step, context: PlanContext, *, check_limiter=None) -> ResourcesStatus:
        """
        Find, validate and persist resources for one step.

        `check_limiter` is an optional semaphore shared with other steps of
        the same run; every link check also holds it.

        Never raises for ordinary errors: anything that goes wrong marks the
        step failed (with a few unvalidated curated links attached) so the
        caller can carry on with the next step.
        """
        try:
            await self.store.set_step_status(plan_id, step.id, ResourcesStatus.LOADING, run_token=context.run_token)

            candidates = await self._candidates(step, context)
            valid = await validate_all(candidates, self.checker, self.validation_concurrency, limiter=check_limiter)

            if len(valid) < self.min_resources_before_fallback:
                needed = self.max_resources - len(valid)
                fallback = self._curated(context.category)[:needed]
                if fallback:
                    valid.extend(await validate_all(fallback, self.checker, self.validation_concurrency, limiter=check_limiter))
                logger.info(
                    "step %s: %d live resource(s), topped up from %d curated",
                    step.id, len(valid), len(fallback),
                )

            resources = valid[: self.max_resources]
            if resources:
                status, message = ResourcesStatus.READY, None
            else:
                status, message = ResourcesStatus.FAILED, NO_RESOURCES_MESSAGE

            await self.store.set_step_resources(
                plan_id, step.id, resources, status=status, message=message, run_token=context.run_token
            )
            return status

        except Exception as e:
            logger.warning("step %s (%s) enrichment failed: %s: %s", step.id, step.title, type(e).__name__, e, exc_info=True)
            await self._mark_failed(plan_id, step, context, e)
            return ResourcesStatus.FAILED

    async def _candidates(self, step: Step, context: PlanContext) -> List[CandidateResource]:
        try:
            candidates = await self.generator.generate_candidates(step, context)
        except Exception as e:
            logger.warning("candidate generation failed for step %s: %s: %s", step.id, type(e).__name__, e)
            return []
        return list(candidates or [])

    def _curated(self, category: str) -> List[CandidateResource]:
        return curated_resources(category, self.curated_table)

    async def _mark_failed(self, plan_id, step: Step, context: PlanContext, error: Exception) -> None:
        fallback = [
            ResourceLink(title=c.title, url=c.url, type=c.type)
            for c in self._curated(context.category)[: self.failure_fallback_count]
        ]
        try:
            await self.store.set_step_resources(
                plan_id,
                step.id,
                fallback,
                status=ResourcesStatus.FAILED,
                message=f"{type(error).__name__}: {error}"[:255],
                run_token=context.run_token,
            )
        except Exception:
            logger.error("could not record failure for step %s", step.id, exc_info=True)
