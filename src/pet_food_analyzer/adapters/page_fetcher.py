"""HTTPX-backed product page fetcher."""

from dataclasses import dataclass, field

import httpx

from pet_food_analyzer.config import DEFAULT_USER_AGENT
from pet_food_analyzer.services.ingredients import PageFetcher


def browser_headers(user_agent: str) -> dict[str, str]:
    """Request headers mimicking a desktop browser."""
    return {
        "User-Agent": user_agent,
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
        "Accept-Encoding": "gzip, deflate",
    }


@dataclass
class HttpxPageFetcher(PageFetcher):
    """Fetches product pages with a single GET request."""

    http_client: httpx.AsyncClient
    timeout_seconds: float = 10.0
    headers: dict[str, str] = field(
        default_factory=lambda: browser_headers(DEFAULT_USER_AGENT)
    )

    @classmethod
    def create(cls, user_agent: str, timeout_seconds: float) -> "HttpxPageFetcher":
        """Create a fetcher with a managed httpx session."""
        return cls(
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
            headers=browser_headers(user_agent),
        )

    async def fetch(self, url: str) -> str:
        """Fetch a page, raising httpx.HTTPError for any non-2xx status."""
        response = await self.http_client.get(
            url,
            headers=self.headers,
            timeout=self.timeout_seconds,
            follow_redirects=True,
        )
        if not response.is_success:
            raise httpx.HTTPStatusError(
                f"Unexpected status {response.status_code} for {url}",
                request=response.request,
                response=response,
            )
        return response.text

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
