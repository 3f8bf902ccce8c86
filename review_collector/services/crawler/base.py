from abc import ABC, abstractmethod

from review_collector.services.crawler.appstore import PageRequest


class BaseFetcher(ABC):
    """Abstract base for the outbound fetch collaborator.

    A fetcher turns one PageRequest into a raw payload. It owns connection
    management and redirects, and must never have more than one request in
    flight. Failures are reported by raising TransportError; the pagination
    controller also treats httpx.HTTPError and OSError as transport failures.
    Any other exception ends the run.
    """

    @abstractmethod
    async def fetch(self, request: PageRequest) -> str:
        """Return the response body for the request or raise TransportError."""
        ...

    async def aclose(self) -> None:
        """Release any connections held by the fetcher."""
        return None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
