import uuid

import pytest

from conftest import FakeGenerator, RecordingDispatcher
from learnstream.errors import GenerationFailed, PlanNotFound
from learnstream.plans.schemas import ResourceLink, ResourcesStatus, StepDraft
from learnstream.plans.service import PlanService


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.mark.asyncio
async def test_create_plan_persists_and_triggers(store, plan_spec, two_step_drafts, dispatcher):
    service = PlanService(store, FakeGenerator(steps=two_step_drafts), dispatcher)

    plan = await service.create_plan(plan_spec)

    assert [s.title for s in plan.steps] == ["Step one", "Step two"]
    assert dispatcher.submitted == [(str(plan.id), False, "trigger")]
    assert (await service.get_plan(plan.id)).id == plan.id


@pytest.mark.asyncio
async def test_create_plan_falls_back_when_generation_fails(store, plan_spec, dispatcher):
    service = PlanService(store, FakeGenerator(steps_error=GenerationFailed("no json")), dispatcher)

    plan = await service.create_plan(plan_spec)

    assert [s.title for s in plan.steps] == [
        "Introduction to Learn X",
        "Core Concepts",
        "Hands-on Practice",
    ]
    assert len(dispatcher.submitted) == 1


@pytest.mark.asyncio
async def test_retry_resets_and_restarts(store, plan_spec, two_step_drafts, dispatcher):
    service = PlanService(store, FakeGenerator(steps=two_step_drafts), dispatcher)
    plan = await service.create_plan(plan_spec)
    await store.set_step_resources(
        plan.id, plan.steps[0].id, [ResourceLink(title="a", url="https://a.example.com/")],
        status=ResourcesStatus.READY,
    )
    await store.set_plan_status(plan.id, ResourcesStatus.READY)

    await service.retry(plan.id)

    status = await service.get_status(plan.id)
    assert status.plan_status is ResourcesStatus.PENDING
    assert all(s.resource_count == 0 for s in status.steps)
    assert dispatcher.cancelled == [str(plan.id)]
    assert dispatcher.submitted[-1] == (str(plan.id), True, "retry")


@pytest.mark.asyncio
async def test_retry_unknown_plan(store, dispatcher):
    service = PlanService(store, FakeGenerator(), dispatcher)
    with pytest.raises(PlanNotFound):
        await service.retry(uuid.uuid4())
    assert dispatcher.submitted == []


@pytest.mark.asyncio
async def test_extend_appends_and_restarts(store, plan_spec, two_step_drafts, dispatcher):
    extra = [StepDraft(title=f"Extra {i}") for i in range(4)]
    generator = FakeGenerator(steps=two_step_drafts, extra_steps=extra)
    service = PlanService(store, generator, dispatcher)
    plan = await service.create_plan(plan_spec)

    assert await service.extend(plan.id, 2) == 2

    loaded = await service.get_plan(plan.id)
    assert [s.title for s in loaded.steps] == ["Step one", "Step two", "Extra 0", "Extra 1"]
    assert generator.step_calls[-1] == {"title": "Learn X", "count": 2, "existing": ["Step one", "Step two"]}
    assert dispatcher.submitted[-1] == (str(plan.id), True, "extend")


@pytest.mark.asyncio
async def test_extend_generation_failure_adds_nothing(store, plan_spec, two_step_drafts, dispatcher):
    generator = FakeGenerator(steps=two_step_drafts)
    service = PlanService(store, generator, dispatcher)
    plan = await service.create_plan(plan_spec)
    generator.steps_error = GenerationFailed("bad output")

    assert await service.extend(plan.id) == 0
    assert len((await service.get_plan(plan.id)).steps) == 2
    assert len(dispatcher.submitted) == 1


@pytest.mark.asyncio
async def test_extend_unknown_plan(store, dispatcher):
    with pytest.raises(PlanNotFound):
        await PlanService(store, FakeGenerator(), dispatcher).extend(uuid.uuid4())


@pytest.mark.asyncio
async def test_add_step_does_not_trigger(store, plan_spec, two_step_drafts, dispatcher):
    service = PlanService(store, FakeGenerator(steps=two_step_drafts), dispatcher)
    plan = await service.create_plan(plan_spec)

    step = await service.add_step(plan.id, StepDraft(title="My own step", estimatedTime="1 hour"))

    assert step.position == 2
    assert step.estimated_time == "1 hour"
    assert step.resources_status is ResourcesStatus.PENDING
    assert len(dispatcher.submitted) == 1

    with pytest.raises(PlanNotFound):
        await service.add_step(uuid.uuid4(), StepDraft(title="x"))


@pytest.mark.asyncio
async def test_add_step_without_time_gets_default(store, plan_spec, two_step_drafts, dispatcher):
    service = PlanService(store, FakeGenerator(steps=two_step_drafts), dispatcher)
    plan = await service.create_plan(plan_spec)

    step = await service.add_step(plan.id, StepDraft(title="Quick one"))

    assert step.estimated_time == "1-2 hours"
    loaded = await service.get_plan(plan.id)
    assert loaded.steps[-1].estimated_time == "1-2 hours"
