"""Tests for HTTP-based adapters."""

import asyncio
import json

import httpx
import openai
import pytest

from pet_food_analyzer.adapters.openai_reasoning_client import OpenAIReasoningClient
from pet_food_analyzer.adapters.page_fetcher import HttpxPageFetcher, browser_headers
from pet_food_analyzer.domain.outcomes import Failure, FailureKind
from pet_food_analyzer.services.analyzer import ReasoningServiceError
from pet_food_analyzer.services.ingredients import ProductScraper


class _FakeResponses:
    def __init__(self, output_text: str = "", error: Exception | None = None) -> None:
        self.output_text = output_text
        self.error = error
        self.last_payload: dict[str, object] | None = None

    async def create(self, **kwargs):  # type: ignore[no-untyped-def]
        self.last_payload = kwargs
        if self.error is not None:
            raise self.error
        return type("Resp", (), {"output_text": self.output_text})()


class _FakeOpenAI:
    def __init__(self, responses: _FakeResponses) -> None:
        self.responses = responses


def _complete(
    client: OpenAIReasoningClient, reasoning_effort: str | None = None
) -> str:
    return asyncio.run(
        client.complete(
            model="gpt-4o",
            reasoning_effort=reasoning_effort,
            store=False,
            instructions="Be a nutritionist",
            prompt="Analyze: chicken",
            schema={"type": "object"},
        )
    )


def test_openai_reasoning_client_returns_raw_text() -> None:
    responses = _FakeResponses(output_text=json.dumps({"isRecommended": True}))
    client = OpenAIReasoningClient(client=_FakeOpenAI(responses))

    result = _complete(client, reasoning_effort="low")

    assert json.loads(result) == {"isRecommended": True}
    assert responses.last_payload is not None
    assert responses.last_payload["input"] == "Analyze: chicken"
    assert responses.last_payload["reasoning"] == {"effort": "low"}
    text_format = responses.last_payload["text"]["format"]  # type: ignore[index]
    assert text_format["strict"] is True


def test_openai_reasoning_client_omits_reasoning_when_unset() -> None:
    responses = _FakeResponses(output_text="{}")
    client = OpenAIReasoningClient(client=_FakeOpenAI(responses))

    _complete(client)

    assert responses.last_payload is not None
    assert "reasoning" not in responses.last_payload


def test_openai_reasoning_client_wraps_api_errors() -> None:
    error = openai.APIConnectionError(
        request=httpx.Request("POST", "https://api.openai.com/v1/responses")
    )
    client = OpenAIReasoningClient(client=_FakeOpenAI(_FakeResponses(error=error)))

    with pytest.raises(ReasoningServiceError):
        _complete(client)


def test_openai_reasoning_client_rejects_empty_output() -> None:
    client = OpenAIReasoningClient(client=_FakeOpenAI(_FakeResponses(output_text="")))

    with pytest.raises(ReasoningServiceError):
        _complete(client)


def test_page_fetcher_sends_browser_headers_and_follows_redirects() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        if request.url.path == "/old":
            return httpx.Response(301, headers={"Location": "https://shop.test/new"})
        return httpx.Response(200, text="<h1>Food</h1>")

    transport = httpx.MockTransport(handler)
    fetcher = HttpxPageFetcher(
        http_client=httpx.AsyncClient(transport=transport),
        headers=browser_headers("TestBrowser/1.0"),
    )

    body = asyncio.run(fetcher.fetch("https://shop.test/old"))

    assert body == "<h1>Food</h1>"
    assert seen[-1].url.path == "/new"
    assert seen[0].headers["User-Agent"] == "TestBrowser/1.0"
    assert "gzip" in seen[0].headers["Accept-Encoding"]


def test_page_fetcher_raises_for_non_success_status() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, text="not found")

    transport = httpx.MockTransport(handler)
    fetcher = HttpxPageFetcher(http_client=httpx.AsyncClient(transport=transport))

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(fetcher.fetch("https://shop.test/missing"))


def test_page_fetcher_propagates_connection_errors() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    transport = httpx.MockTransport(handler)
    fetcher = HttpxPageFetcher(http_client=httpx.AsyncClient(transport=transport))

    with pytest.raises(httpx.HTTPError):
        asyncio.run(fetcher.fetch("https://shop.test/"))


def test_scraper_reports_unusable_url_as_fetch_failure() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, text="<h1>Food</h1>")

    transport = httpx.MockTransport(handler)
    fetcher = HttpxPageFetcher(http_client=httpx.AsyncClient(transport=transport))

    result = asyncio.run(ProductScraper(fetcher).scrape("http://ex\x00ample.com/"))

    assert isinstance(result, Failure)
    assert result.kind is FailureKind.FETCH_FAILED
    assert seen == []
