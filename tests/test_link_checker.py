import asyncio

import httpx
import pytest

from learnstream.enrichment.link_checker import (
    OEMBED_ENDPOINT,
    LinkChecker,
    LinkKind,
    classify_url,
)


def make_checker(handler, fake_sleep, **kwargs) -> LinkChecker:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return LinkChecker(client, sleep=fake_sleep, **kwargs)


@pytest.mark.parametrize(
    "url,kind",
    [
        ("https://www.youtube.com/@3blue1brown", LinkKind.YOUTUBE_CHANNEL),
        ("https://youtube.com/c/Fireship", LinkKind.YOUTUBE_CHANNEL),
        ("https://m.youtube.com/channel/UC123", LinkKind.YOUTUBE_CHANNEL),
        ("https://www.youtube.com/user/someone", LinkKind.YOUTUBE_CHANNEL),
        ("https://www.youtube.com/watch?v=dQw4w9WgXcQ", LinkKind.YOUTUBE_VIDEO),
        ("https://youtu.be/dQw4w9WgXcQ", LinkKind.YOUTUBE_VIDEO),
        ("https://developer.mozilla.org/en-US/", LinkKind.GENERIC),
        ("https://notyoutube.com/@someone", LinkKind.GENERIC),
        ("not a url", LinkKind.INVALID),
        ("ftp://example.com/file", LinkKind.INVALID),
        ("", LinkKind.INVALID),
    ],
)
def test_classify_url(url, kind):
    assert classify_url(url) is kind


@pytest.mark.asyncio
async def test_channel_head_ok(fake_sleep):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, str(request.url)))
        assert "Mozilla/5.0" in request.headers["user-agent"]
        return httpx.Response(200)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://www.youtube.com/@3blue1brown") is True
    assert seen == [("HEAD", "https://www.youtube.com/@3blue1brown")]


@pytest.mark.asyncio
async def test_channel_timeout_is_invalid_without_retry(sleeps, fake_sleep):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ConnectTimeout("timed out", request=request)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://www.youtube.com/channel/UC123") is False
    assert len(calls) == 1
    assert sleeps == []


@pytest.mark.asyncio
async def test_video_valid_via_oembed(fake_sleep):
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"title": "Never Gonna Give You Up", "author_name": "Rick Astley"})

    checker = make_checker(handler, fake_sleep)
    url = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert await checker.check(url) is True

    assert len(seen) == 1
    request = seen[0]
    assert request.method == "GET"
    assert str(request.url).startswith(OEMBED_ENDPOINT)
    assert request.url.params["url"] == url
    assert request.url.params["format"] == "json"


@pytest.mark.asyncio
async def test_video_without_author_is_invalid(sleeps, fake_sleep):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"title": "Some video"})

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://youtu.be/abcdefghijk") is False
    assert len(calls) == 3
    assert sleeps == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_video_unparsable_body_is_invalid(fake_sleep):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="<html>not json</html>")

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://youtu.be/abcdefghijk", max_retries=1) is False


@pytest.mark.asyncio
async def test_video_recovers_after_transient_error(sleeps, fake_sleep):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) == 1:
            return httpx.Response(503)
        return httpx.Response(200, json={"title": "t", "author_name": "a"})

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://www.youtube.com/watch?v=abcdefghijk") is True
    assert len(calls) == 2
    assert sleeps == pytest.approx([0.1])


@pytest.mark.asyncio
async def test_generic_head_ok(sleeps, fake_sleep):
    methods = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(204)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://docs.python.org/3/") is True
    assert methods == ["HEAD"]
    assert sleeps == []


@pytest.mark.asyncio
@pytest.mark.parametrize("refused", [403, 405])
async def test_generic_falls_back_to_get_within_attempt(refused, sleeps, fake_sleep):
    methods = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        if request.method == "HEAD":
            return httpx.Response(refused)
        return httpx.Response(200, text="<html></html>")

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://example.com/page") is True
    assert methods == ["HEAD", "GET"]
    assert sleeps == []


@pytest.mark.asyncio
async def test_generic_follows_redirects(fake_sleep):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/old":
            return httpx.Response(301, headers={"location": "https://example.com/new"})
        return httpx.Response(200)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://example.com/old") is True


@pytest.mark.asyncio
async def test_generic_not_found_exhausts_retries(sleeps, fake_sleep):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request.method)
        return httpx.Response(404)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://example.com/missing") is False
    assert calls == ["HEAD", "HEAD", "HEAD"]


@pytest.mark.asyncio
async def test_always_timing_out_url_uses_exact_attempts_and_backoff(sleeps, fake_sleep):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        raise httpx.ReadTimeout("timed out", request=request)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://slow.example.com/", max_retries=4) is False
    assert len(calls) == 4
    assert sleeps == pytest.approx([0.1, 0.2, 0.4])


@pytest.mark.asyncio
async def test_deadline_cancels_a_hanging_request(sleeps, fake_sleep):
    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(5)
        return httpx.Response(200)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://hang.example.com/", max_retries=2, timeout_ms=20) is False
    assert sleeps == pytest.approx([0.1])


@pytest.mark.asyncio
async def test_connection_refused_then_ok(sleeps, fake_sleep):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        if len(calls) < 3:
            raise httpx.ConnectError("refused", request=request)
        return httpx.Response(200)

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("https://flaky.example.com/") is True
    assert sleeps == pytest.approx([0.1, 0.2])


@pytest.mark.asyncio
async def test_malformed_url_makes_no_request(fake_sleep):
    def handler(request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    checker = make_checker(handler, fake_sleep)
    assert await checker.check("javascript:alert(1)") is False


@pytest.mark.asyncio
async def test_owned_client_is_closed():
    checker = LinkChecker()
    client = checker.client
    await checker.aclose()
    assert client.is_closed
