# learnstream/plans/routes.py
import uuid

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from learnstream.deps import get_plan_service
from learnstream.errors import PlanNotFound
from learnstream.plans.schemas import PlanSpec, StepDraft
from learnstream.plans.service import PlanService

router = APIRouter(prefix="/api/plans")


class ExtendRequest(BaseModel):
    additional_steps: int = Field(default=3, ge=1, le=10)


def _not_found() -> JSONResponse:
    return JSONResponse({"error": "not_found"}, status_code=404)


@router.post("")
async def create_plan(spec: PlanSpec, service: PlanService = Depends(get_plan_service)):
    plan = await service.create_plan(spec)
    return JSONResponse(
        {
            "id": str(plan.id),
            "title": plan.title,
            "resources_status": plan.resources_status.value,
            "step_count": len(plan.steps),
        },
        status_code=201,
    )


@router.get("/{plan_id}")
async def get_plan(plan_id: uuid.UUID, service: PlanService = Depends(get_plan_service)):
    plan = await service.get_plan(plan_id)
    if plan is None:
        return _not_found()
    return JSONResponse(plan.model_dump(mode="json"))


@router.get("/{plan_id}/status")
async def get_plan_status(plan_id: uuid.UUID, service: PlanService = Depends(get_plan_service)):
    status = await service.get_status(plan_id)
    if status is None:
        return _not_found()
    return JSONResponse(status.model_dump(mode="json"))


@router.post("/{plan_id}/retry")
async def retry_plan(plan_id: uuid.UUID, service: PlanService = Depends(get_plan_service)):
    try:
        await service.retry(plan_id)
    except PlanNotFound:
        return _not_found()
    return JSONResponse({"id": str(plan_id), "resources_status": "pending"}, status_code=202)


@router.post("/{plan_id}/extend")
async def extend_plan(
    plan_id: uuid.UUID,
    body: ExtendRequest | None = None,
    service: PlanService = Depends(get_plan_service),
):
    body = body or ExtendRequest()
    try:
        added = await service.extend(plan_id, body.additional_steps)
    except PlanNotFound:
        return _not_found()
    return JSONResponse({"id": str(plan_id), "added_steps": added}, status_code=202 if added else 200)


@router.post("/{plan_id}/steps")
async def add_step(plan_id: uuid.UUID, draft: StepDraft, service: PlanService = Depends(get_plan_service)):
    try:
        step = await service.add_step(plan_id, draft)
    except PlanNotFound:
        return _not_found()
    return JSONResponse(step.model_dump(mode="json"), status_code=201)
