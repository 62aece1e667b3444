import json

import httpx
import pytest

from ragchat.infrastructure.web_search import TavilySearchClient


def _client(handler, api_key: str = "tvly-key") -> TavilySearchClient:
    return TavilySearchClient(
        api_key=api_key,
        url="https://tavily.test/search",
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
async def test_search_sends_query_and_parses_results() -> None:
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        seen["auth"] = request.headers["Authorization"]
        return httpx.Response(
            200,
            json={
                "answer": "AI is machine intelligence.",
                "results": [
                    {"url": "https://example.com/ai", "title": "AI", "content": "About AI"},
                    {"title": "no url", "content": "dropped"},
                    {"url": "https://example.org/ml", "title": None, "content": None},
                ],
            },
        )

    response = await _client(handler).search("What is AI?", max_results=2)

    assert seen["body"] == {
        "api_key": "tvly-key",
        "query": "What is AI?",
        "max_results": 2,
        "include_answer": True,
        "include_raw_content": False,
    }
    assert seen["auth"] == "Bearer tvly-key"
    assert response.answer == "AI is machine intelligence."
    assert [r.url for r in response.results] == ["https://example.com/ai", "https://example.org/ml"]
    assert response.results[1].title == ""
    assert response.results[1].content == ""


@pytest.mark.asyncio
async def test_http_error_is_raised() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "boom"})

    with pytest.raises(httpx.HTTPStatusError):
        await _client(handler).search("q")


def test_is_configured_follows_api_key() -> None:
    assert TavilySearchClient(api_key="k").is_configured
    assert not TavilySearchClient(api_key="").is_configured
