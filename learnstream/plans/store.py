"""
Document-style access to learning plans, keyed by plan id.

Each public coroutine runs one short synchronous SQLAlchemy session on a
worker thread (asyncio.to_thread) so the event loop never blocks on the
database. A caller cancelled mid-call still waits for its thread to finish,
so once a cancelled enrichment task is done none of its writes can land
later.

Writes are field-level updates of a single plan or step. Enrichment writes
may carry the plan's run token; reset_plan() rotates the token, and writes
with a stale token are skipped. Beyond that there is no locking, so
concurrent runs with the same token are last write wins.
"""
import asyncio
import json
import logging
import uuid
from typing import Iterable, List, Optional, Sequence

from sqlalchemy import select

from learnstream.db.base import Base
from learnstream.db.models.plan import Plan
from learnstream.db.models.plan_step import PlanStep
from learnstream.plans.schemas import (
    LearningPlan,
    PlanSpec,
    PlanStatus,
    ResourceLink,
    ResourcesStatus,
    Step,
    StepDraft,
    StepStatus,
)

logger = logging.getLogger(__name__)


async def _in_thread(fn, *args):
    work = asyncio.ensure_future(asyncio.to_thread(fn, *args))
    try:
        return await asyncio.shield(work)
    except asyncio.CancelledError:
        # The thread cannot be interrupted; let it commit before we unwind
        await asyncio.wait([work])
        if not work.cancelled() and work.exception() is not None:
            logger.warning("store call finished with an error after cancellation: %r", work.exception())
        raise


def _to_uuid(v: str | uuid.UUID | None) -> uuid.UUID | None:
    if v is None:
        return None
    if isinstance(v, uuid.UUID):
        return v
    try:
        return uuid.UUID(str(v))
    except ValueError:
        return None


def _step_from_row(row: PlanStep) -> Step:
    resources = [ResourceLink.model_validate(r) for r in json.loads(row.resources_json or "[]")]
    return Step(
        id=row.id,
        position=row.position,
        title=row.title,
        description=row.description or "",
        estimated_time=row.estimated_time or "",
        resources=resources,
        resources_status=ResourcesStatus(row.resources_status),
        resources_message=row.resources_message,
    )


def _plan_from_row(row: Plan) -> LearningPlan:
    return LearningPlan(
        id=row.id,
        title=row.title,
        category=row.category,
        description=row.description,
        current_skill_level=row.current_skill_level,
        learning_goal=row.learning_goal,
        target_skill_level=row.target_skill_level,
        steps=[_step_from_row(s) for s in row.steps],
        resources_status=ResourcesStatus(row.resources_status),
        created_at=row.created_at,
        run_token=row.run_token,
    )


def _dump_resources(resources: Iterable[ResourceLink]) -> str:
    return json.dumps([r.model_dump(mode="json") for r in resources])


class PlanStore:
    def __init__(self, session_factory):
        self.session_factory = session_factory

    def create_schema(self) -> None:
        engine = self.session_factory.kw["bind"]
        Base.metadata.create_all(engine)

    # -------------------------
    # Reads
    # -------------------------
    async def load_plan(self, plan_id) -> Optional[LearningPlan]:
        return await _in_thread(self._load_plan, plan_id)

    def _load_plan(self, plan_id) -> Optional[LearningPlan]:
        plan_uuid = _to_uuid(plan_id)
        if plan_uuid is None:
            return None
        db = self.session_factory()
        try:
            row = db.get(Plan, plan_uuid)
            if not row:
                return None
            return _plan_from_row(row)
        finally:
            db.close()

    async def get_status(self, plan_id) -> Optional[PlanStatus]:
        plan = await self.load_plan(plan_id)
        if plan is None:
            return None
        return PlanStatus(
            plan_id=plan.id,
            plan_status=plan.resources_status,
            steps=[
                StepStatus(step_id=s.id, step_status=s.resources_status, resource_count=len(s.resources))
                for s in plan.steps
            ],
        )

    async def plan_ids_with_status(self, status: ResourcesStatus) -> List[uuid.UUID]:
        return await _in_thread(self._plan_ids_with_status, status)

    def _plan_ids_with_status(self, status: ResourcesStatus) -> List[uuid.UUID]:
        db = self.session_factory()
        try:
            rows = db.execute(
                select(Plan.id).where(Plan.resources_status == ResourcesStatus(status).value)
            ).scalars()
            return list(rows)
        finally:
            db.close()

    # -------------------------
    # Writes
    # -------------------------
    async def create_plan(self, spec: PlanSpec, drafts: Sequence[StepDraft]) -> LearningPlan:
        return await _in_thread(self._create_plan, spec, list(drafts))

    def _create_plan(self, spec: PlanSpec, drafts: List[StepDraft]) -> LearningPlan:
        db = self.session_factory()
        try:
            row = Plan(
                title=spec.title.strip(),
                category=spec.category.strip(),
                description=spec.description,
                current_skill_level=spec.current_skill_level,
                learning_goal=spec.learning_goal or f"Learn {spec.title.strip()}",
                target_skill_level=spec.target_skill_level,
                resources_status=ResourcesStatus.PENDING.value,
            )
            db.add(row)
            db.flush()

            for i, d in enumerate(drafts):
                db.add(
                    PlanStep(
                        plan_id=row.id,
                        position=i,
                        title=d.title,
                        description=d.description,
                        estimated_time=d.estimated_time,
                        resources_json="[]",
                        resources_status=ResourcesStatus.PENDING.value,
                    )
                )
            db.commit()
            db.refresh(row)
            return _plan_from_row(row)
        finally:
            db.close()

    async def append_steps(self, plan_id, drafts: Sequence[StepDraft]) -> List[Step]:
        return await _in_thread(self._append_steps, plan_id, list(drafts))

    def _append_steps(self, plan_id, drafts: List[StepDraft]) -> List[Step]:
        plan_uuid = _to_uuid(plan_id)
        db = self.session_factory()
        try:
            row = db.get(Plan, plan_uuid) if plan_uuid else None
            if not row:
                return []

            start = len(row.steps)
            added = []
            for i, d in enumerate(drafts):
                step = PlanStep(
                    plan_id=row.id,
                    position=start + i,
                    title=d.title,
                    description=d.description,
                    estimated_time=d.estimated_time,
                    resources_json="[]",
                    resources_status=ResourcesStatus.PENDING.value,
                )
                db.add(step)
                added.append(step)
            db.commit()
            return [_step_from_row(s) for s in added]
        finally:
            db.close()

    async def set_plan_status(self, plan_id, status: ResourcesStatus, *, run_token: str | None = None) -> bool:
        return await _in_thread(self._set_plan_status, plan_id, status, run_token)

    def _set_plan_status(self, plan_id, status: ResourcesStatus, run_token: str | None) -> bool:
        plan_uuid = _to_uuid(plan_id)
        db = self.session_factory()
        try:
            row = db.get(Plan, plan_uuid) if plan_uuid else None
            if not row:
                return False
            if run_token is not None and row.run_token != run_token:
                logger.debug("plan %s: skipping status %s from a superseded run", plan_id, status)
                return False
            row.resources_status = ResourcesStatus(status).value
            db.commit()
            return True
        finally:
            db.close()

    async def set_step_status(
        self,
        plan_id,
        step_id,
        status: ResourcesStatus,
        *,
        message: str | None = None,
        run_token: str | None = None,
    ) -> bool:
        return await _in_thread(self._update_step, plan_id, step_id, status, None, message, run_token)

    async def set_step_resources(
        self,
        plan_id,
        step_id,
        resources: Sequence[ResourceLink],
        *,
        status: ResourcesStatus | None = None,
        message: str | None = None,
        run_token: str | None = None,
    ) -> bool:
        """Replace a step's resource list, optionally setting its status in the same write."""
        return await _in_thread(self._update_step, plan_id, step_id, status, list(resources), message, run_token)

    def _update_step(
        self,
        plan_id,
        step_id,
        status: ResourcesStatus | None,
        resources: List[ResourceLink] | None,
        message: str | None,
        run_token: str | None = None,
    ) -> bool:
        plan_uuid = _to_uuid(plan_id)
        step_uuid = _to_uuid(step_id)
        if plan_uuid is None or step_uuid is None:
            return False

        query = select(PlanStep).where(PlanStep.id == step_uuid, PlanStep.plan_id == plan_uuid)
        if run_token is not None:
            query = query.join(Plan, Plan.id == PlanStep.plan_id).where(Plan.run_token == run_token)

        db = self.session_factory()
        try:
            row = db.execute(query).scalar_one_or_none()
            if not row:
                return False

            if status is not None:
                row.resources_status = ResourcesStatus(status).value
                row.resources_message = message
            if resources is not None:
                row.resources_json = _dump_resources(resources)
            db.commit()
            return True
        finally:
            db.close()

    async def reset_plan(self, plan_id) -> bool:
        """
        Put the plan and all of its steps back to pending with no resources.
        Also rotates the run token, so writes from any earlier run are ignored.
        """
        return await _in_thread(self._reset_plan, plan_id)

    def _reset_plan(self, plan_id) -> bool:
        plan_uuid = _to_uuid(plan_id)
        db = self.session_factory()
        try:
            row = db.get(Plan, plan_uuid) if plan_uuid else None
            if not row:
                return False

            row.resources_status = ResourcesStatus.PENDING.value
            row.run_token = uuid.uuid4().hex
            for s in row.steps:
                s.resources_json = "[]"
                s.resources_status = ResourcesStatus.PENDING.value
                s.resources_message = None
            db.commit()
            return True
        finally:
            db.close()
