"""In-process notification surface for collector progress.

Handlers are plain callables invoked synchronously, in registration order,
from the task that drives the collector. ``done_with_apps`` handlers are
called with no arguments; every other event passes one payload object.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from review_collector.models.review import Review

logger = logging.getLogger("review_collector.collector.events")


class EventType(str, Enum):
    REVIEW = "review"
    PAGE_COMPLETE = "page_complete"
    DONE_COLLECTING = "done_collecting"
    DONE_WITH_APPS = "done_with_apps"


@dataclass(frozen=True)
class ReviewEvent:
    app_id: str
    page_num: int
    review: Review


@dataclass(frozen=True)
class PageCompleteEvent:
    """A page has been decoded and all of its review events were emitted.

    ``continue_`` and ``stop`` are only set under caller-driven pagination.
    Exactly one call to either takes effect; later calls do nothing.
    """

    app_id: str
    page_num: int
    reviews: tuple[Review, ...]
    continue_: Callable[[], None] | None = None
    stop: Callable[[], None] | None = None


@dataclass(frozen=True)
class SourceDoneEvent:
    app_id: str
    page_num: int
    apps_remaining: int
    error: Exception | None = None


Handler = Callable[..., Any]


def _coerce_event(event: "EventType | str") -> EventType:
    try:
        return EventType(event)
    except ValueError:
        valid = [e.value for e in EventType]
        raise ValueError(f"Unknown event: {event!r}. Available: {valid}") from None


class EventEmitter:
    """Publish/subscribe channel keyed by EventType."""

    def __init__(self):
        self._handlers: dict[EventType, list[Handler]] = defaultdict(list)

    def on(self, event: "EventType | str", handler: Handler | None = None):
        """Register ``handler`` for ``event``.

        Without a handler, returns a decorator that registers the decorated
        function.
        """
        event_type = _coerce_event(event)
        if handler is None:
            def register(fn: Handler) -> Handler:
                return self.on(event_type, fn)

            return register
        if not callable(handler):
            raise TypeError(f"Handler for {event!r} must be callable")
        self._handlers[event_type].append(handler)
        return handler

    def off(self, event: "EventType | str", handler: Handler) -> None:
        handlers = self._handlers.get(_coerce_event(event), [])
        if handler in handlers:
            handlers.remove(handler)

    def listener_count(self, event: "EventType | str") -> int:
        return len(self._handlers.get(_coerce_event(event), []))

    def emit(self, event: EventType, payload: Any = None) -> None:
        handlers = list(self._handlers.get(event, []))
        logger.debug("emit %s to %d handler(s)", event.value, len(handlers))
        for handler in handlers:
            if event is EventType.DONE_WITH_APPS:
                handler()
            else:
                handler(payload)
