## Wiring for the API process and the worker
import logging
from dataclasses import dataclass

from learnstream.agents.generator import ContentGenerator, LLMContentGenerator
from learnstream.agents.llm.client import get_llm_client
from learnstream.db.session import make_engine, make_session_factory
from learnstream.enrichment.link_checker import LinkChecker
from learnstream.enrichment.orchestrator import PlanEnrichmentOrchestrator
from learnstream.enrichment.registry import EnrichmentRegistry
from learnstream.enrichment.step_enricher import StepEnricher
from learnstream.plans.store import PlanStore
from learnstream.settings import Settings

LOG_FORMAT = "[%(asctime)s] [%(name)s] %(levelname)s %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    # Per-request lines from httpx drown out the pipeline's own logging
    logging.getLogger("httpx").setLevel(logging.WARNING)


def build_store(database_url: str, *, create_schema: bool = True) -> PlanStore:
    store = PlanStore(make_session_factory(make_engine(database_url)))
    if create_schema:
        store.create_schema()
    return store


@dataclass
class Pipeline:
    store: PlanStore
    generator: ContentGenerator
    checker: LinkChecker
    enricher: StepEnricher
    orchestrator: PlanEnrichmentOrchestrator
    registry: EnrichmentRegistry

    async def aclose(self) -> None:
        await self.registry.shutdown()
        await self.checker.aclose()
        await self.generator.aclose()


def build_pipeline(
    store: PlanStore,
    settings: Settings,
    *,
    generator: ContentGenerator | None = None,
    checker: LinkChecker | None = None,
) -> Pipeline:
    generator = generator or LLMContentGenerator(get_llm_client(settings))
    checker = checker or LinkChecker(
        max_retries=settings.link_check_max_retries,
        timeout_ms=settings.link_check_timeout_ms,
        backoff_base_ms=settings.link_check_backoff_base_ms,
    )
    enricher = StepEnricher(
        store,
        generator,
        checker,
        validation_concurrency=settings.validation_concurrency,
        max_resources=settings.max_resources_per_step,
        min_resources_before_fallback=settings.min_resources_before_fallback,
        failure_fallback_count=settings.failure_fallback_count,
    )
    orchestrator = PlanEnrichmentOrchestrator(
        store,
        enricher,
        step_concurrency=settings.step_concurrency,
        check_concurrency=settings.validation_concurrency,
    )
    registry = EnrichmentRegistry(orchestrator.run, max_concurrent_plans=settings.max_concurrent_plans)
    return Pipeline(store, generator, checker, enricher, orchestrator, registry)
