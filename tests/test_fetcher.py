"""Tests for the aiohttp based page fetcher."""
from __future__ import annotations

import asyncio
from typing import List, Optional

import aiohttp
import pytest

from cruise_watch.config import WatchConfig
from cruise_watch.fetcher import fetch_html, open_session, session_fetcher


class _StubResponse:
    def __init__(self, status: int, body: str = "") -> None:
        self.status = status
        self._body = body

    async def text(self) -> str:
        return self._body


class _StubRequest:
    def __init__(self, response: Optional[_StubResponse] = None, error: Optional[BaseException] = None) -> None:
        self._response = response
        self._error = error

    async def __aenter__(self) -> _StubResponse:
        if self._error is not None:
            raise self._error
        assert self._response is not None
        return self._response

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        return False


class _StubSession:
    """Imitates ``aiohttp.ClientSession.get`` as used by the fetcher."""

    def __init__(self, request: _StubRequest) -> None:
        self._request = request
        self.urls: List[str] = []

    def get(self, url: str) -> _StubRequest:
        self.urls.append(url)
        return self._request


def test_returns_body_on_success() -> None:
    session = _StubSession(_StubRequest(_StubResponse(200, "<html></html>")))

    assert asyncio.run(fetch_html(session, "https://example.com/a")) == "<html></html>"  # type: ignore[arg-type]
    assert session.urls == ["https://example.com/a"]


@pytest.mark.parametrize(
    "request_stub",
    [
        _StubRequest(_StubResponse(404, "not found")),
        _StubRequest(error=aiohttp.ClientConnectionError("connection reset")),
        _StubRequest(error=asyncio.TimeoutError()),
    ],
)
def test_failures_yield_none(request_stub: _StubRequest, caplog: pytest.LogCaptureFixture) -> None:
    session = _StubSession(request_stub)

    with caplog.at_level("WARNING", logger="cruise_watch.fetcher"):
        assert asyncio.run(fetch_html(session, "https://example.com/b")) is None  # type: ignore[arg-type]

    assert "https://example.com/b" in caplog.text


def test_cancellation_is_not_swallowed() -> None:
    session = _StubSession(_StubRequest(error=asyncio.CancelledError()))

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(fetch_html(session, "https://example.com/c"))  # type: ignore[arg-type]


def test_session_fetcher_binds_session() -> None:
    session = _StubSession(_StubRequest(_StubResponse(200, "page")))
    fetch = session_fetcher(session)  # type: ignore[arg-type]

    assert asyncio.run(fetch("https://example.com/d")) == "page"


def test_open_session_applies_timeout_and_user_agent() -> None:
    config = WatchConfig(request_timeout=12.0, user_agent="CruiseWatch/1.0")

    async def inspect() -> None:
        session = open_session(config)
        try:
            assert session.timeout.total == 12.0
            assert session.headers["User-Agent"] == "CruiseWatch/1.0"
        finally:
            await session.close()

    asyncio.run(inspect())
