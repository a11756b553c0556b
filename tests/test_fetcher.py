"""Tests for the fetch-strategy runner.

Mocking strategy:
- ``respx`` patches ``httpx`` at the transport layer so no real network calls
  are made.  Every URL a strategy may request is routed explicitly; routes
  that must *not* be hit are asserted with ``route.called``.

pytest-asyncio runs with ``asyncio_mode = "auto"``, so ``async def`` tests
are collected directly.
"""

from __future__ import annotations

import httpx
import pytest
import respx

from tagaudit.scraper.fetcher import (
    ERROR_MESSAGES,
    FETCH_STRATEGIES,
    FetchError,
    _downgrade_to_http,
    _with_www,
    classify_fetch_error,
    fetch_page,
    normalize_url,
)
from tagaudit.scraper.models import FetchResult

_PAGE = "<html><head><title>Home</title></head><body>hi</body></html>"


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

class TestNormalizeUrl:
    def test_adds_https_scheme(self) -> None:
        assert normalize_url("example.com") == "https://example.com"

    def test_keeps_existing_scheme(self) -> None:
        assert normalize_url("http://example.com/a") == "http://example.com/a"

    def test_strips_whitespace(self) -> None:
        assert normalize_url("  https://example.com  ") == "https://example.com"


class TestTransforms:
    def test_with_www_inserts_prefix(self) -> None:
        assert _with_www("https://example.com/path?q=1") == "https://www.example.com/path?q=1"

    def test_with_www_keeps_existing_prefix(self) -> None:
        assert _with_www("https://www.example.com/") == "https://www.example.com/"

    def test_downgrade_to_http(self) -> None:
        assert _downgrade_to_http("https://example.com/x") == "http://example.com/x"

    def test_downgrade_leaves_http_alone(self) -> None:
        assert _downgrade_to_http("http://example.com/x") == "http://example.com/x"

    def test_strategy_order(self) -> None:
        assert [s.name for s in FETCH_STRATEGIES] == [
            "high_redirects",
            "with_www",
            "http_fallback",
        ]
        assert [s.max_redirects for s in FETCH_STRATEGIES] == [20, 10, 15]


# ---------------------------------------------------------------------------
# fetch_page
# ---------------------------------------------------------------------------

class TestFetchPage:
    async def test_first_strategy_success_short_circuits(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            first = mock.get("https://example.com/").mock(
                return_value=httpx.Response(200, text=_PAGE)
            )
            www = mock.get("https://www.example.com/")
            http = mock.get("http://example.com/")
            result = await fetch_page("https://example.com/")

        assert isinstance(result, FetchResult)
        assert result.strategy == "high_redirects"
        assert result.final_url == "https://example.com/"
        assert result.status_code == 200
        assert "<title>Home</title>" in result.html
        assert first.call_count == 1
        assert not www.called
        assert not http.called

    async def test_www_fallback_reports_final_url(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            mock.get("https://example.com/").mock(
                side_effect=httpx.ConnectError("name resolution failed")
            )
            mock.get("https://www.example.com/").mock(
                return_value=httpx.Response(
                    301, headers={"Location": "https://www.example.com/home"}
                )
            )
            mock.get("https://www.example.com/home").mock(
                return_value=httpx.Response(200, text=_PAGE)
            )
            http = mock.get("http://example.com/")
            result = await fetch_page("https://example.com/")

        assert result.strategy == "with_www"
        assert result.final_url == "https://www.example.com/home"
        assert not http.called

    async def test_http_fallback_used_last(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(side_effect=httpx.ConnectError("refused"))
            respx.get("https://www.example.com/").mock(side_effect=httpx.ConnectError("refused"))
            respx.get("http://example.com/").mock(return_value=httpx.Response(200, text=_PAGE))
            result = await fetch_page("https://example.com/")

        assert result.strategy == "http_fallback"
        assert result.final_url == "http://example.com/"

    async def test_rejected_status_moves_to_next_strategy(self) -> None:
        with respx.mock(assert_all_called=False) as mock:
            mock.get("https://example.com/").mock(return_value=httpx.Response(403))
            mock.get("https://www.example.com/").mock(
                return_value=httpx.Response(200, text=_PAGE)
            )
            result = await fetch_page("https://example.com/")

        assert result.strategy == "with_www"

    async def test_all_strategies_fail_classifies_last_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(side_effect=httpx.ConnectError("refused"))
            respx.get("https://www.example.com/").mock(return_value=httpx.Response(500))
            respx.get("http://example.com/").mock(side_effect=httpx.ConnectTimeout("timed out"))
            with pytest.raises(FetchError) as excinfo:
                await fetch_page("https://example.com/")

        err = excinfo.value
        assert [a.strategy for a in err.attempts] == [
            "high_redirects",
            "with_www",
            "http_fallback",
        ]
        assert [a.url for a in err.attempts] == [
            "https://example.com/",
            "https://www.example.com/",
            "http://example.com/",
        ]
        assert isinstance(err.last_error, httpx.ConnectTimeout)
        assert err.category == "timeout"
        assert err.user_message == ERROR_MESSAGES["timeout"]

    async def test_http_error_when_last_attempt_rejected(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(side_effect=httpx.ReadTimeout("slow"))
            respx.get("https://www.example.com/").mock(side_effect=httpx.ReadTimeout("slow"))
            respx.get("http://example.com/").mock(return_value=httpx.Response(404))
            with pytest.raises(FetchError) as excinfo:
                await fetch_page("https://example.com/")

        assert excinfo.value.category == "http_error"

    async def test_redirect_loop_is_too_many_redirects(self) -> None:
        with respx.mock:
            for url in (
                "https://loop.test/",
                "https://www.loop.test/",
                "http://loop.test/",
            ):
                respx.get(url).mock(
                    return_value=httpx.Response(302, headers={"Location": url})
                )
            with pytest.raises(FetchError) as excinfo:
                await fetch_page("https://loop.test/")

        assert excinfo.value.category == "too_many_redirects"

    async def test_unencodable_host_becomes_attempts(self) -> None:
        with respx.mock:
            with pytest.raises(FetchError) as excinfo:
                await fetch_page("https://xn--zz.com/")

        err = excinfo.value
        assert [a.strategy for a in err.attempts] == [
            "high_redirects",
            "with_www",
            "http_fallback",
        ]
        assert err.category == "unknown"


# ---------------------------------------------------------------------------
# classify_fetch_error
# ---------------------------------------------------------------------------

class TestClassifyFetchError:
    def test_too_many_redirects(self) -> None:
        assert classify_fetch_error(httpx.TooManyRedirects("loop")) == "too_many_redirects"

    def test_timeout(self) -> None:
        assert classify_fetch_error(httpx.ReadTimeout("slow")) == "timeout"

    def test_connection_error(self) -> None:
        assert classify_fetch_error(httpx.ConnectError("refused")) == "connection_error"

    def test_http_status_error(self) -> None:
        request = httpx.Request("GET", "https://example.com/")
        response = httpx.Response(502, request=request)
        exc = httpx.HTTPStatusError("bad gateway", request=request, response=response)
        assert classify_fetch_error(exc) == "http_error"

    def test_message_fallbacks(self) -> None:
        assert classify_fetch_error(RuntimeError("Maximum redirects exceeded")) == "too_many_redirects"
        assert classify_fetch_error(RuntimeError("operation timed out")) == "timeout"
        assert classify_fetch_error(OSError("getaddrinfo failed")) == "connection_error"

    def test_unknown(self) -> None:
        assert classify_fetch_error(ValueError("weird")) == "unknown"
        assert classify_fetch_error(None) == "unknown"

    def test_every_category_has_a_message(self) -> None:
        assert set(ERROR_MESSAGES) == {
            "too_many_redirects",
            "timeout",
            "connection_error",
            "http_error",
            "unknown",
        }
