import asyncio
import logging
from typing import Any, Mapping

from review_collector.errors import CollectorStateError, ConfigurationError
from review_collector.models.options import CollectorOptions
from review_collector.models.source import SourceOutcome
from review_collector.services.collector.events import EventEmitter, EventType, Handler
from review_collector.services.collector.pagination import PaginationController
from review_collector.services.collector.source_queue import SourceQueue, SourceQueueDriver
from review_collector.services.crawler.base import BaseFetcher
from review_collector.services.crawler.transport import AppStoreFetcher

logger = logging.getLogger("review_collector.collector")


def validate_app_ids(app_ids: Any) -> list[str]:
    """Accept one app id or a list/tuple of them; every id must be a non-empty string."""
    if isinstance(app_ids, str):
        app_ids = [app_ids]
    elif not isinstance(app_ids, (list, tuple)):
        raise ConfigurationError(
            f"app_ids must be a string or a list of strings, not {type(app_ids).__name__}"
        )

    for app_id in app_ids:
        if not isinstance(app_id, str) or not app_id.strip():
            raise ConfigurationError(f"Invalid app id {app_id!r}: expected a non-empty string")
    return [app_id.strip() for app_id in app_ids]


class Collector:
    """Collect App Store reviews for one or more apps.

    Register handlers with ``on()`` before starting; events emitted before a
    handler is registered are not replayed. A Collector runs once.

    Example::

        collector = Collector(["585027354", "316126557"], max_pages=2)
        collector.on("review", lambda e: print(e.review.rating))
        collector.run()
    """

    def __init__(
        self,
        app_ids: str | list[str] | tuple[str, ...],
        options: CollectorOptions | Mapping[str, Any] | None = None,
        *,
        fetcher: BaseFetcher | None = None,
        **overrides: Any,
    ):
        self.app_ids = validate_app_ids(app_ids)
        self.options = CollectorOptions.build(options, **overrides)
        if self.options.caller_driven_pagination and self.options.max_pages_overridden:
            logger.warning(
                "max_pages=%d is ignored because caller_driven_pagination is enabled",
                self.options.max_pages,
            )
        self.emitter = EventEmitter()
        self._fetcher = fetcher
        self._started = False

    def on(self, event: EventType | str, handler: Handler | None = None):
        return self.emitter.on(event, handler)

    def off(self, event: EventType | str, handler: Handler) -> None:
        self.emitter.off(event, handler)

    async def collect(self) -> list[SourceOutcome]:
        """Collect every app in order. Returns one outcome per app."""
        if self._started:
            raise CollectorStateError("This Collector has already been started; create a new one")
        self._started = True

        fetcher = self._fetcher or AppStoreFetcher()
        try:
            controller = PaginationController(self.options, self.emitter, fetcher)
            driver = SourceQueueDriver(SourceQueue(self.app_ids), controller, self.emitter)
            return await driver.run()
        finally:
            if self._fetcher is None:
                await fetcher.aclose()

    def run(self) -> list[SourceOutcome]:
        """Blocking wrapper around collect() for scripts."""
        return asyncio.run(self.collect())
