import asyncio
import logging

import httpx

from review_collector.errors import RetriesExhaustedError, RetryableError, TransportError
from review_collector.models.options import CollectorOptions
from review_collector.models.review import Page
from review_collector.models.source import SourceOutcome, SourceState
from review_collector.services.collector.events import EventEmitter, EventType, SourceDoneEvent
from review_collector.services.collector.retry import RetryPolicy
from review_collector.services.crawler.appstore import build_page_request
from review_collector.services.crawler.base import BaseFetcher
from review_collector.services.parsing.decoder import PageDecoder

logger = logging.getLogger("review_collector.collector.pagination")


class PageDecision:
    """Continue/stop checkpoint for one page under caller-driven pagination.

    The first call to ``continue_`` or ``stop`` settles the decision; any
    later call is ignored. On an empty page ``continue_`` behaves like
    ``stop`` since there is nothing left to page through.
    """

    def __init__(self, app_id: str, page_num: int, has_more: bool):
        self.app_id = app_id
        self.page_num = page_num
        self._has_more = has_more
        self._future: asyncio.Future[bool] = asyncio.get_running_loop().create_future()

    @property
    def decided(self) -> bool:
        return self._future.done()

    def continue_(self) -> None:
        self._resolve(self._has_more, "continue")

    def stop(self) -> None:
        self._resolve(False, "stop")

    def _resolve(self, proceed: bool, action: str) -> None:
        if self._future.done():
            logger.debug(
                "Ignoring %s for app=%s page=%d: already decided",
                action,
                self.app_id,
                self.page_num,
            )
            return
        self._future.set_result(proceed)

    async def wait(self) -> bool:
        return await self._future


class PaginationController:
    """Drive the page loop of one app at a time.

    Every attempt waits the configured delay, fetches, decodes and publishes
    one page. Failed attempts re-fetch the same page until the retry budget is
    spent; successful pages advance according to the pagination policy.
    """

    def __init__(
        self,
        options: CollectorOptions,
        emitter: EventEmitter,
        fetcher: BaseFetcher,
        decoder: PageDecoder | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        self.options = options
        self.emitter = emitter
        self.fetcher = fetcher
        self.decoder = decoder or PageDecoder()
        self.retry_policy = retry_policy or RetryPolicy(options.max_retries)

    async def run(self, state: SourceState, apps_remaining: int) -> SourceOutcome:
        pages_collected = 0
        reviews_collected = 0
        error: Exception | None = None

        while True:
            await asyncio.sleep(self.options.delay_seconds)
            try:
                page = await self._fetch_page(state)
            except RetryableError as e:
                logger.warning(
                    "app=%s page=%d attempt %d failed: %s",
                    state.app_id,
                    state.page_num,
                    state.retries + 1,
                    e,
                )
                self.retry_policy.record_failure(state)
                if not self.retry_policy.exhausted(state):
                    continue
                error = RetriesExhaustedError(state.app_id, state.page_num, state.retries, e)
                logger.error("%s", error)
                break

            self.retry_policy.reset(state)
            pages_collected += 1
            reviews_collected += len(page.reviews)

            if not await self._publish_and_decide(page):
                break
            state.page_num += 1

        logger.info(
            "Finished app %s at page %d: pages=%d reviews=%d%s",
            state.app_id,
            state.page_num,
            pages_collected,
            reviews_collected,
            " (error)" if error else "",
        )
        self.emitter.emit(
            EventType.DONE_COLLECTING,
            SourceDoneEvent(
                app_id=state.app_id,
                page_num=state.page_num,
                apps_remaining=apps_remaining,
                error=error,
            ),
        )
        return SourceOutcome(
            app_id=state.app_id,
            page_num=state.page_num,
            pages_collected=pages_collected,
            reviews_collected=reviews_collected,
            error=error,
        )

    async def _fetch_page(self, state: SourceState) -> Page:
        request = build_page_request(state.app_id, state.page_num, self.options.user_agent)
        try:
            payload = await self.fetcher.fetch(request)
        except (httpx.HTTPError, OSError) as e:
            # Fetchers other than AppStoreFetcher may let raw I/O errors through.
            raise TransportError(
                f"Fetch for app {state.app_id} page {state.page_num} failed: {e!r}"
            ) from e
        return self.decoder.decode(payload, state.app_id, state.page_num)

    async def _publish_and_decide(self, page: Page) -> bool:
        """Publish the page and return whether the next page should be fetched."""
        if not self.options.caller_driven_pagination:
            self.decoder.publish(page, self.emitter)
            return self._within_page_cap(page)

        decision = PageDecision(page.app_id, page.page_num, has_more=not page.is_empty)
        self.decoder.publish(
            page,
            self.emitter,
            continue_=decision.continue_,
            stop=decision.stop,
        )
        if not decision.decided:
            logger.debug(
                "Waiting for continue/stop on app=%s page=%d", page.app_id, page.page_num
            )
        return await decision.wait()

    def _within_page_cap(self, page: Page) -> bool:
        if page.is_empty:
            return False
        max_pages = self.options.max_pages
        return max_pages == 0 or page.page_num + 1 < max_pages
