"""
Tests for the page fetcher, using httpx.MockTransport instead of the network.
"""

import httpx
import pytest

from core.net import HTTPClient
from pipeline.errors import FetchError


def client_with(handler, **kwargs):
    return HTTPClient(transport=httpx.MockTransport(handler), **kwargs)


@pytest.mark.asyncio
async def test_fetch_page_returns_body():
    def handler(request):
        assert request.headers["User-Agent"]
        return httpx.Response(200, text="<h1>Hello</h1>")

    html = await client_with(handler).fetch_page("https://jobs.example.com/123")
    assert html == "<h1>Hello</h1>"


@pytest.mark.asyncio
async def test_fetch_page_follows_redirects():
    def handler(request):
        if request.url.path == "/old":
            return httpx.Response(301, headers={"Location": "https://jobs.example.com/new"})
        return httpx.Response(200, text="moved here")

    html = await client_with(handler).fetch_page("https://jobs.example.com/old")
    assert html == "moved here"


@pytest.mark.asyncio
@pytest.mark.parametrize("status", [403, 404, 500, 503])
async def test_non_success_status_is_fetch_error(status):
    def handler(request):
        return httpx.Response(status, text="nope")

    with pytest.raises(FetchError) as exc_info:
        await client_with(handler).fetch_page("https://jobs.example.com/gone")
    assert exc_info.value.status_code == status


@pytest.mark.asyncio
async def test_connect_error_is_fetch_error():
    def handler(request):
        raise httpx.ConnectError("Name or service not known", request=request)

    with pytest.raises(FetchError):
        await client_with(handler).fetch_page("https://unreachable.invalid/job")


@pytest.mark.asyncio
async def test_timeout_is_fetch_error():
    def handler(request):
        raise httpx.ReadTimeout("timed out", request=request)

    with pytest.raises(FetchError):
        await client_with(handler, timeout=0.01).fetch_page("https://slow.example.com/job")


@pytest.mark.asyncio
async def test_invalid_url_from_client_is_fetch_error():
    def handler(request):
        raise httpx.InvalidURL("Invalid non-printable ASCII character in URL")

    with pytest.raises(FetchError):
        await client_with(handler).fetch_page("https://jobs.example.com/job")


@pytest.mark.asyncio
@pytest.mark.parametrize("url", ["", "   ", "not a url", "ftp://example.com/job", "javascript:alert(1)", "http://[::1/job"])
async def test_invalid_url_is_rejected_before_request(url):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, text="")

    with pytest.raises(FetchError):
        await client_with(handler).fetch_page(url)
    assert calls == []


@pytest.mark.asyncio
async def test_large_body_is_truncated():
    def handler(request):
        return httpx.Response(200, content=b"a" * 4096, headers={"Content-Type": "text/html; charset=utf-8"})

    html = await client_with(handler, max_size_kb=1).fetch_page("https://jobs.example.com/big")
    assert len(html) == 1024


def test_timeout_from_environment(monkeypatch):
    monkeypatch.setenv("TRACKER_FETCH_TIMEOUT", "3.5")
    assert HTTPClient().timeout.read == 3.5


def test_invalid_timeout_env_uses_default(monkeypatch):
    monkeypatch.setenv("TRACKER_FETCH_TIMEOUT", "soon")
    assert HTTPClient().timeout.read == 15.0
