## Domain exceptions


class LearnStreamError(Exception):
    pass


class GenerationFailed(LearnStreamError):
    """The content generator returned something we could not use."""


class PlanNotFound(LearnStreamError):
    def __init__(self, plan_id):
        super().__init__(f"Plan not found: {plan_id}")
        self.plan_id = plan_id
