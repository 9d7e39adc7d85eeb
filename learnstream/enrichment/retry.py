## Retry with exponential backoff
import asyncio
import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass
class RetryPolicy:
    """
    Run an attempt up to `max_attempts` times.

    Between attempt n and n+1 (n counted from 0) the policy sleeps
    `base_delay * 2**n` seconds, so the default gives 0.1s, 0.2s, 0.4s, ...
    An attempt fails when it returns a falsy value or raises an ordinary
    exception; the first truthy result short-circuits.
    """

    max_attempts: int = 3
    base_delay: float = 0.1
    sleep: Callable[[float], Awaitable[None]] = field(default=asyncio.sleep, repr=False)

    def delay_for(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)

    async def run(self, attempt_fn: Callable[[int], Awaitable[bool]], *, label: str = "") -> bool:
        attempts = max(1, self.max_attempts)
        for attempt in range(attempts):
            try:
                if await attempt_fn(attempt):
                    return True
            except Exception as e:
                logger.debug("attempt %d/%d failed for %s: %s: %s", attempt + 1, attempts, label, type(e).__name__, e)

            if attempt < attempts - 1:
                await self.sleep(self.delay_for(attempt))
        return False
