## Main application entry point
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from learnstream.bootstrap import build_pipeline, build_store, configure_logging
from learnstream.jobs.dispatch import LocalDispatcher, RedisQueueDispatcher
from learnstream.jobs.tasks import make_redis
from learnstream.plans.routes import router as plans_router
from learnstream.plans.service import PlanService
from learnstream.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    store = build_store(settings.database_url)
    pipeline = build_pipeline(store, settings)

    redis_client = None
    if settings.enrichment_backend == "redis":
        redis_client = make_redis(settings.redis_url)
        dispatcher = RedisQueueDispatcher(redis_client)
    else:
        dispatcher = LocalDispatcher(pipeline.registry)
        # Plans a previous process left mid-enrichment
        await pipeline.registry.recover_stalled(store)

    app.state.plan_service = PlanService(store, pipeline.generator, dispatcher)
    try:
        yield
    finally:
        await pipeline.aclose()
        if redis_client is not None:
            await redis_client.aclose()


app = FastAPI(title="LearnStream", lifespan=lifespan)


@app.get("/", response_class=PlainTextResponse)
async def home():
    return "LearnStream API is running"

@app.get("/ping", response_class=PlainTextResponse)
async def ping():
    return "pong"

app.include_router(plans_router)
