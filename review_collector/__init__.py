from review_collector.errors import (
    CollectorStateError,
    ConfigurationError,
    DecodeError,
    RetriesExhaustedError,
    ReviewCollectorError,
    StructuralError,
    TransportError,
)
from review_collector.models import CollectorOptions, Page, Review, SourceOutcome
from review_collector.services.collector.collector import Collector
from review_collector.services.collector.events import (
    EventType,
    PageCompleteEvent,
    ReviewEvent,
    SourceDoneEvent,
)

__all__ = [
    "Collector",
    "CollectorOptions",
    "CollectorStateError",
    "ConfigurationError",
    "DecodeError",
    "EventType",
    "Page",
    "PageCompleteEvent",
    "RetriesExhaustedError",
    "Review",
    "ReviewCollectorError",
    "ReviewEvent",
    "SourceDoneEvent",
    "SourceOutcome",
    "StructuralError",
    "TransportError",
]
