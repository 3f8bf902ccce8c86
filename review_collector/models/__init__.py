from review_collector.models.options import CollectorOptions
from review_collector.models.review import Page, Review
from review_collector.models.source import SourceOutcome, SourceState

__all__ = [
    "CollectorOptions",
    "Page",
    "Review",
    "SourceOutcome",
    "SourceState",
]
