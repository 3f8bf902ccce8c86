import asyncio
import logging

import httpx

from review_collector.config import settings
from review_collector.errors import TransportError
from review_collector.services.crawler.appstore import PageRequest
from review_collector.services.crawler.base import BaseFetcher

logger = logging.getLogger("review_collector.crawler.transport")


class AppStoreFetcher(BaseFetcher):
    """Fetch review pages from the App Store with httpx.

    Requests are serialized through a single-slot semaphore, so at most one
    request is in flight even if several callers share the fetcher.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        timeout: float | None = None,
    ):
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout if timeout is not None else settings.request_timeout_seconds
        self._slot = asyncio.Semaphore(1)

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
            )
        return self._client

    async def fetch(self, request: PageRequest) -> str:
        async with self._slot:
            client = self._get_client()
            logger.debug(
                "GET app=%s page=%d url=%s", request.app_id, request.page_num, request.url
            )
            try:
                resp = await client.get(request.url, headers=request.headers)
                resp.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise TransportError(
                    f"App Store returned HTTP {e.response.status_code} for app "
                    f"{request.app_id} page {request.page_num}"
                ) from e
            except (httpx.HTTPError, OSError) as e:
                raise TransportError(
                    f"Request for app {request.app_id} page {request.page_num} failed: {e!r}"
                ) from e
            return resp.text

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
