## Content generation collaborator used by the plan service and the step enricher
from abc import ABC, abstractmethod
from typing import List, Sequence

from learnstream.agents.llm.base import LLMClient
from learnstream.agents.resource_finder import find_resources
from learnstream.agents.workflow import generate_additional_steps, generate_learning_path
from learnstream.plans.schemas import CandidateResource, PlanContext, PlanSpec, Step, StepDraft


class ContentGenerator(ABC):
    @abstractmethod
    async def generate_steps(self, spec: PlanSpec, count: int | None = None,
                             existing_titles: Sequence[str] = ()) -> List[StepDraft]:
        """
        Draft steps for a plan. With existing_titles, draft `count` steps that
        continue an existing plan instead of starting a new one.
        Raises GenerationFailed when the output is unusable.
        """
        raise NotImplementedError

    @abstractmethod
    async def generate_candidates(self, step: Step, context: PlanContext) -> List[CandidateResource]:
        raise NotImplementedError

    async def aclose(self) -> None:
        pass


class LLMContentGenerator(ContentGenerator):
    def __init__(self, llm: LLMClient, *, min_steps: int = 8, max_steps: int = 12,
                 min_candidates: int = 5, max_candidates: int = 7):
        self.llm = llm
        self.min_steps = min_steps
        self.max_steps = max_steps
        self.min_candidates = min_candidates
        self.max_candidates = max_candidates

    async def generate_steps(self, spec: PlanSpec, count: int | None = None,
                             existing_titles: Sequence[str] = ()) -> List[StepDraft]:
        if existing_titles:
            return await generate_additional_steps(self.llm, spec.title, existing_titles, count or 3)
        return await generate_learning_path(self.llm, spec, min_steps=self.min_steps, max_steps=self.max_steps)

    async def generate_candidates(self, step: Step, context: PlanContext) -> List[CandidateResource]:
        return await find_resources(
            self.llm, step, context,
            min_count=self.min_candidates, max_count=self.max_candidates,
        )

    async def aclose(self) -> None:
        await self.llm.aclose()
