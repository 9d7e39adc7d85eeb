"""
Plan operations the HTTP layer calls.

Every operation returns as soon as the plan is persisted; enrichment runs
elsewhere and is observed by polling get_status().
"""
import logging
from typing import Optional

from learnstream.agents.workflow import fallback_steps
from learnstream.errors import PlanNotFound
from learnstream.plans.schemas import LearningPlan, PlanSpec, PlanStatus, Step, StepDraft

logger = logging.getLogger(__name__)

# Estimated time for user-written steps that do not give one
DEFAULT_STEP_TIME = "1-2 hours"


class PlanService:
    def __init__(self, store, generator, dispatcher):
        self.store = store
        self.generator = generator
        self.dispatcher = dispatcher

    async def create_plan(self, spec: PlanSpec) -> LearningPlan:
        try:
            drafts = await self.generator.generate_steps(spec)
        except Exception as e:
            logger.warning("step generation for %r failed, using fallback steps: %s: %s", spec.title, type(e).__name__, e)
            drafts = []
        if not drafts:
            drafts = fallback_steps(spec.title)

        plan = await self.store.create_plan(spec, drafts)
        logger.info("created plan %s (%s) with %d step(s)", plan.id, plan.title, len(plan.steps))
        await self.trigger_enrichment(plan.id)
        return plan

    async def trigger_enrichment(self, plan_id, *, restart: bool = False, reason: str = "trigger") -> None:
        await self.dispatcher.submit(str(plan_id), restart=restart, reason=reason)

    async def get_plan(self, plan_id) -> Optional[LearningPlan]:
        return await self.store.load_plan(plan_id)

    async def get_status(self, plan_id) -> Optional[PlanStatus]:
        return await self.store.get_status(plan_id)

    async def retry(self, plan_id) -> None:
        """Throw away all resources and enrich the plan from scratch."""
        await self.dispatcher.cancel(str(plan_id))
        if not await self.store.reset_plan(plan_id):
            raise PlanNotFound(plan_id)
        await self.trigger_enrichment(plan_id, restart=True, reason="retry")

    async def extend(self, plan_id, additional_steps: int = 3) -> int:
        """Append generated steps and re-enrich the whole plan. Returns how many steps were added."""
        plan = await self.store.load_plan(plan_id)
        if plan is None:
            raise PlanNotFound(plan_id)

        spec = PlanSpec(
            title=plan.title,
            category=plan.category,
            description=plan.description,
            current_skill_level=plan.current_skill_level or "beginner",
            learning_goal=plan.learning_goal,
            target_skill_level=plan.target_skill_level or "intermediate",
        )
        try:
            drafts = await self.generator.generate_steps(
                spec, additional_steps, existing_titles=[s.title for s in plan.steps]
            )
        except Exception as e:
            logger.warning("extending plan %s failed: %s: %s", plan.id, type(e).__name__, e)
            return 0

        drafts = list(drafts)[:additional_steps]
        if not drafts:
            return 0

        await self.store.append_steps(plan.id, drafts)
        await self.trigger_enrichment(plan.id, restart=True, reason="extend")
        return len(drafts)

    async def add_step(self, plan_id, draft: StepDraft) -> Step:
        """Append a user-written step. It stays pending until the next enrichment run."""
        if not draft.estimated_time:
            draft = draft.model_copy(update={"estimated_time": DEFAULT_STEP_TIME})
        added = await self.store.append_steps(plan_id, [draft])
        if not added:
            raise PlanNotFound(plan_id)
        return added[0]
