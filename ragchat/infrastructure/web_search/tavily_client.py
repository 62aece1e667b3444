import logging
from typing import Optional

import httpx

from ragchat.core.protocols.web_search import WebResult, WebSearchResponse

logger = logging.getLogger(__name__)


class TavilySearchClient:
    """Web search via the Tavily REST API."""

    def __init__(
        self,
        api_key: str = "",
        url: str = "https://api.tavily.com/search",
        timeout: float = 20.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Tavily client.

        Args:
            api_key: Tavily API key; empty means unconfigured.
            url: Search endpoint.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests).
        """
        self._api_key = api_key
        self._url = url
        self._timeout = timeout
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    async def search(self, query: str, max_results: int = 3) -> WebSearchResponse:
        """Run one search.

        Raises:
            httpx.HTTPError: On transport errors or non-2xx responses.
        """
        payload = {
            "api_key": self._api_key,
            "query": query,
            "max_results": max_results,
            "include_answer": True,
            "include_raw_content": False,
        }

        async with httpx.AsyncClient(
            timeout=self._timeout, transport=self._transport
        ) as client:
            resp = await client.post(
                self._url,
                json=payload,
                headers={"Authorization": f"Bearer {self._api_key}"},
            )
            resp.raise_for_status()
            data = resp.json()

        results = []
        for item in data.get("results") or []:
            url = item.get("url")
            if not url:
                continue
            results.append(
                WebResult(
                    url=url,
                    title=item.get("title") or "",
                    content=item.get("content") or item.get("raw_content") or "",
                )
            )

        logger.debug(f"Tavily returned {len(results)} results")
        return WebSearchResponse(results=results, answer=data.get("answer") or None)
