import logging
from collections import deque
from typing import Iterable

from review_collector.models.source import SourceOutcome, SourceState
from review_collector.services.collector.events import EventEmitter, EventType
from review_collector.services.collector.pagination import PaginationController

logger = logging.getLogger("review_collector.collector.source_queue")


class SourceQueue:
    """Apps still to be collected, consumed front to back.

    Duplicate ids collapse to their first occurrence; a popped id is never
    visited again during the run.
    """

    def __init__(self, app_ids: Iterable[str]):
        self._pending: deque[str] = deque(dict.fromkeys(app_ids))

    def __len__(self) -> int:
        return len(self._pending)

    def __bool__(self) -> bool:
        return bool(self._pending)

    @property
    def remaining(self) -> int:
        return len(self._pending)

    def pop(self) -> SourceState:
        """Take the next app and start its progress at page 0."""
        return SourceState(app_id=self._pending.popleft())


class SourceQueueDriver:
    """Hand apps to the pagination controller one at a time.

    The queue is only touched between apps. ``done_with_apps`` is emitted
    once the queue is empty, however many apps ended in error.
    """

    def __init__(
        self,
        queue: SourceQueue,
        controller: PaginationController,
        emitter: EventEmitter,
    ):
        self.queue = queue
        self.controller = controller
        self.emitter = emitter

    async def run(self) -> list[SourceOutcome]:
        outcomes: list[SourceOutcome] = []
        while self.queue:
            state = self.queue.pop()
            logger.info(
                "Collecting reviews for app %s (%d more queued)",
                state.app_id,
                self.queue.remaining,
            )
            outcomes.append(await self.controller.run(state, self.queue.remaining))

        failed = sum(1 for outcome in outcomes if not outcome.ok)
        logger.info("Done with %d app(s), %d failed", len(outcomes), failed)
        self.emitter.emit(EventType.DONE_WITH_APPS)
        return outcomes
