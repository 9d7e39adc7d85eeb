## Validate candidate resources in bounded batches
import asyncio
import logging
from typing import List, Sequence

from learnstream.plans.schemas import CandidateResource, ResourceLink

logger = logging.getLogger(__name__)


async def validate_all(
    candidates: Sequence[CandidateResource],
    checker,
    concurrency: int = 5,
    *,
    limiter: asyncio.Semaphore | None = None,
) -> List[ResourceLink]:
    """
    Check every candidate and keep the reachable ones.

    Candidates are split into ordered batches of `concurrency`; a batch is
    checked concurrently and the next batch starts only once it is done, so
    no more than `concurrency` checks are ever in flight. Duplicate URLs are
    checked independently.

    A `limiter` shared by several callers caps their combined checks as
    well; each check holds it while in flight.
    """
    size = max(1, int(concurrency))

    async def check(url: str) -> bool:
        if limiter is None:
            return await checker.check(url)
        async with limiter:
            return await checker.check(url)

    valid: List[ResourceLink] = []

    for start in range(0, len(candidates), size):
        batch = candidates[start:start + size]
        results = await asyncio.gather(*(check(c.url) for c in batch), return_exceptions=True)
        for candidate, ok in zip(batch, results):
            if isinstance(ok, BaseException):
                logger.debug("checker raised for %s: %r", candidate.url, ok)
            elif ok:
                valid.append(ResourceLink(title=candidate.title, url=candidate.url, type=candidate.type))
            else:
                logger.debug("dropping unreachable resource %s", candidate.url)

    return valid
