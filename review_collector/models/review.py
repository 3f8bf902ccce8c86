from dataclasses import dataclass, field
from datetime import datetime

PLATFORM = "iOS"
REVIEW_TYPE = "review"
# Device is not exposed by the store feed.
UNKNOWN_DEVICE = "unknown"


@dataclass(frozen=True)
class Review:
    """A single App Store review harvested from one page of one app."""

    app_id: str
    page_num: int
    id: str
    rating: int
    version: str
    date: datetime
    title: str | None = None
    text: str | None = None
    os: str = PLATFORM
    device: str = UNKNOWN_DEVICE
    type: str = REVIEW_TYPE


@dataclass(frozen=True)
class Page:
    """The decoded reviews of one page, in the order the store listed them."""

    app_id: str
    page_num: int
    reviews: tuple[Review, ...] = field(default_factory=tuple)

    @property
    def is_empty(self) -> bool:
        return not self.reviews
