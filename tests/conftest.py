"""
Pytest configuration and fixtures
"""
import asyncio
from typing import Dict, Iterable, List

import pytest

from learnstream.bootstrap import build_store
from learnstream.plans.schemas import CandidateResource, PlanSpec, StepDraft


def make_candidates(prefix: str, n: int, type_: str = "article") -> List[CandidateResource]:
    return [
        CandidateResource(title=f"{prefix} {i}", url=f"https://{prefix}.example.com/{i}", type=type_)
        for i in range(n)
    ]


def curated_table(category: str, n: int) -> Dict[str, List[dict]]:
    return {
        category: [
            {"title": f"Curated {i}", "url": f"https://curated.example.com/{i}", "type": "documentation"}
            for i in range(n)
        ]
    }


class FakeChecker:
    """Link checker double: valid iff the url is in `valid_urls` (or `accept_all`)."""

    def __init__(self, valid_urls: Iterable[str] = (), *, accept_all: bool = False, delay: float = 0):
        self.valid_urls = set(valid_urls)
        self.accept_all = accept_all
        self.delay = delay
        self.calls: List[str] = []
        self.events: List[tuple] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def check(self, url, max_retries=None, timeout_ms=None) -> bool:
        self.calls.append(url)
        self.events.append(("start", url))
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            return self.accept_all or url in self.valid_urls
        finally:
            self.in_flight -= 1
            self.events.append(("end", url))

    async def aclose(self):
        pass


class FakeGenerator:
    def __init__(self, candidates_by_title=None, *, steps=None, extra_steps=None,
                 candidate_error=None, steps_error=None):
        self.candidates_by_title = candidates_by_title or {}
        self.steps = steps
        self.extra_steps = extra_steps
        self.candidate_error = candidate_error
        self.steps_error = steps_error
        self.candidate_calls: List[str] = []
        self.step_calls: List[dict] = []
        self.on_candidates = None

    async def generate_steps(self, spec, count=None, existing_titles=()):
        self.step_calls.append({"title": spec.title, "count": count, "existing": list(existing_titles)})
        if self.steps_error:
            raise self.steps_error
        if existing_titles:
            return list(self.extra_steps or [])
        return list(self.steps or [])

    async def generate_candidates(self, step, context):
        self.candidate_calls.append(step.title)
        if self.on_candidates is not None:
            await self.on_candidates(step)
        if self.candidate_error:
            raise self.candidate_error
        return list(self.candidates_by_title.get(step.title, []))

    async def aclose(self):
        pass


class RecordingDispatcher:
    def __init__(self):
        self.submitted: List[tuple] = []
        self.cancelled: List[str] = []

    async def submit(self, plan_id, *, restart=False, reason="trigger"):
        self.submitted.append((str(plan_id), restart, reason))

    async def cancel(self, plan_id):
        self.cancelled.append(str(plan_id))
        return False


@pytest.fixture
def store():
    return build_store("sqlite://")


@pytest.fixture
def plan_spec():
    return PlanSpec(title="Learn X", category="frontend")


@pytest.fixture
def two_step_drafts():
    return [
        StepDraft(title="Step one", description="Basics", estimated_time="2 hours"),
        StepDraft(title="Step two", description="Deeper", estimated_time="3 hours"),
    ]


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def fake_sleep(sleeps):
    async def _sleep(delay):
        sleeps.append(delay)

    return _sleep
