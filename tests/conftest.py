from datetime import datetime, timezone

import pytest

from review_collector.errors import TransportError
from review_collector.models.review import Review
from review_collector.services.collector.events import EventType
from review_collector.services.crawler.base import BaseFetcher
from review_collector.services.parsing.decoder import render_page

APP_ID = "585027354"

# What the store sends for an app id it does not know.
INVALID_APP_PAYLOAD = """<?xml version="1.0" encoding="UTF-8"?>
<Document xmlns="http://www.apple.com/itms/" disableHistory="true">
  <Protocol><plist version="1.0"><dict><key>dialog</key></dict></plist></Protocol>
</Document>
"""

MALFORMED_PAYLOAD = "<Document><View><ScrollView></View>"


class FakeFetcher(BaseFetcher):
    """Scripted fetcher: each app consumes its responses in order, one per attempt.

    A response is either a payload string or an exception to raise.
    """

    def __init__(self, responses: dict[str, list]):
        self.responses = {app_id: list(items) for app_id, items in responses.items()}
        self.requests = []
        self.closed = False

    async def fetch(self, request):
        self.requests.append((request.app_id, request.page_num))
        pending = self.responses.get(request.app_id)
        if not pending:
            raise TransportError(f"No scripted response for app {request.app_id}")
        item = pending.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    async def aclose(self):
        self.closed = True


class EventRecorder:
    """Subscribes to every event and keeps them in emission order."""

    def __init__(self, collector):
        self.events = []
        for event_type in EventType:
            if event_type is EventType.DONE_WITH_APPS:
                collector.on(event_type, lambda: self.events.append((EventType.DONE_WITH_APPS, None)))
            else:
                collector.on(event_type, self._recorder(event_type))

    def _recorder(self, event_type):
        def record(payload):
            self.events.append((event_type, payload))

        return record

    def of(self, event_type):
        return [payload for kind, payload in self.events if kind is event_type]

    @property
    def kinds(self):
        return [kind for kind, _ in self.events]


@pytest.fixture
def make_review():
    def _make(
        review_id="1001",
        rating=4,
        version="2.1",
        date=datetime(2016, 1, 5, tzinfo=timezone.utc),
        title="Great app",
        text="Gets me where I need to go.",
        app_id=APP_ID,
        page_num=0,
    ):
        return Review(
            app_id=app_id,
            page_num=page_num,
            id=review_id,
            rating=rating,
            version=version,
            date=date,
            title=title,
            text=text,
        )

    return _make


@pytest.fixture
def reviews_page(make_review):
    """Render a store document holding ``count`` distinct reviews."""

    def _page(count, app_id=APP_ID, page_num=0):
        reviews = [
            make_review(
                review_id=f"{page_num}{i:04d}",
                rating=i % 6,
                app_id=app_id,
                page_num=page_num,
            )
            for i in range(count)
        ]
        return render_page(reviews)

    return _page


@pytest.fixture
def fake_fetcher():
    return FakeFetcher


@pytest.fixture
def event_recorder():
    return EventRecorder


@pytest.fixture
def invalid_app_payload():
    return INVALID_APP_PAYLOAD


@pytest.fixture
def malformed_payload():
    return MALFORMED_PAYLOAD
