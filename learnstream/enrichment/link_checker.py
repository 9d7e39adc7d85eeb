"""
Reachability checks for resource links.

Three kinds of URL are handled differently:
- YouTube channel pages (/@name, /c/, /channel/, /user/) get one HEAD request.
  Channels are stable, so there is no retry.
- YouTube video pages are looked up through the public oEmbed endpoint; the
  video counts as valid only if the JSON body carries both a title and an
  author_name. Retried with backoff.
- Everything else gets a HEAD request, falling back to GET inside the same
  attempt when the server answers 403/405. Retried with backoff.

Every request has its own deadline. A timeout fails that attempt only.
"""
import asyncio
import logging
from enum import Enum
from urllib.parse import urlsplit

import httpx

from learnstream.enrichment.retry import RetryPolicy

logger = logging.getLogger(__name__)

YOUTUBE_HOSTS = {"www.youtube.com", "youtube.com", "youtu.be", "m.youtube.com"}
CHANNEL_PATH_MARKERS = ("/@", "/c/", "/channel/", "/user/")
OEMBED_ENDPOINT = "https://www.youtube.com/oembed"

BROWSER_UA = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
PROBE_HEADERS = {
    "User-Agent": BROWSER_UA,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}
OEMBED_HEADERS = {"Accept": "application/json"}

# Network failures that only fail the current attempt
TRANSIENT_ERRORS = (httpx.HTTPError, asyncio.TimeoutError)


class LinkKind(str, Enum):
    YOUTUBE_CHANNEL = "youtube_channel"
    YOUTUBE_VIDEO = "youtube_video"
    GENERIC = "generic"
    INVALID = "invalid"


def classify_url(url: str) -> LinkKind:
    try:
        parts = urlsplit(url.strip())
    except (AttributeError, ValueError):
        return LinkKind.INVALID

    if parts.scheme not in ("http", "https") or not parts.hostname:
        return LinkKind.INVALID

    if parts.hostname.lower() not in YOUTUBE_HOSTS:
        return LinkKind.GENERIC
    if any(marker in parts.path for marker in CHANNEL_PATH_MARKERS):
        return LinkKind.YOUTUBE_CHANNEL
    return LinkKind.YOUTUBE_VIDEO


def _is_ok(status_code: int) -> bool:
    return 200 <= status_code < 400


class LinkChecker:
    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        max_retries: int = 3,
        timeout_ms: int = 5000,
        backoff_base_ms: int = 100,
        sleep=asyncio.sleep,
    ):
        self._client = client
        self._owns_client = client is None
        self.max_retries = max_retries
        self.timeout_ms = timeout_ms
        self.backoff_base_ms = backoff_base_ms
        self._sleep = sleep

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient()
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.aclose()

    def retry_policy(self, max_retries: int | None = None) -> RetryPolicy:
        return RetryPolicy(
            max_attempts=self.max_retries if max_retries is None else max_retries,
            base_delay=self.backoff_base_ms / 1000,
            sleep=self._sleep,
        )

    async def check(self, url: str, max_retries: int | None = None, timeout_ms: int | None = None) -> bool:
        timeout = (self.timeout_ms if timeout_ms is None else timeout_ms) / 1000
        kind = classify_url(url)

        if kind is LinkKind.INVALID:
            logger.debug("rejecting malformed url %r", url)
            return False
        if kind is LinkKind.YOUTUBE_CHANNEL:
            return await self._check_channel(url, timeout)

        policy = self.retry_policy(max_retries)
        if kind is LinkKind.YOUTUBE_VIDEO:
            return await policy.run(lambda _attempt: self._check_video(url, timeout), label=url)
        return await policy.run(lambda _attempt: self._request(url, timeout), label=url)

    # -------------------------
    # Per-kind attempts
    # -------------------------
    async def _check_channel(self, url: str, timeout: float) -> bool:
        try:
            status = await self._status(
                "HEAD", url, timeout, headers={"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"}
            )
        except TRANSIENT_ERRORS as e:
            logger.debug("channel check failed for %s: %s", url, type(e).__name__)
            return False
        return _is_ok(status)

    async def _check_video(self, url: str, timeout: float) -> bool:
        try:
            response = await asyncio.wait_for(
                self.client.get(
                    OEMBED_ENDPOINT,
                    params={"url": url, "format": "json"},
                    headers=OEMBED_HEADERS,
                    timeout=timeout,
                ),
                timeout,
            )
        except TRANSIENT_ERRORS as e:
            logger.debug("oEmbed lookup failed for %s: %s", url, type(e).__name__)
            return False

        # 401/404 mean private or missing
        if response.status_code != 200:
            return False
        try:
            data = response.json()
        except ValueError:
            return False
        return isinstance(data, dict) and bool(data.get("title")) and bool(data.get("author_name"))

    async def _request(self, url: str, timeout: float) -> bool:
        try:
            status = await self._status("HEAD", url, timeout, headers=PROBE_HEADERS)
            if _is_ok(status):
                return True

            # Some servers refuse HEAD; try a real fetch once
            if status in (403, 405):
                status = await self._status("GET", url, timeout, headers=PROBE_HEADERS)
                return _is_ok(status)
        except TRANSIENT_ERRORS as e:
            logger.debug("link check failed for %s: %s", url, type(e).__name__)
        return False

    async def _status(self, method: str, url: str, timeout: float, *, headers: dict) -> int:
        """Send one request with its own deadline and return the final status, without reading the body."""

        async def send() -> int:
            request = self.client.build_request(method, url, headers=headers, timeout=timeout)
            response = await self.client.send(request, stream=True, follow_redirects=True)
            await response.aclose()
            return response.status_code

        return await asyncio.wait_for(send(), timeout)
