from fastapi import Request

from learnstream.plans.service import PlanService


def get_plan_service(request: Request) -> PlanService:
    return request.app.state.plan_service
