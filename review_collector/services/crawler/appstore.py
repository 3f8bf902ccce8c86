from dataclasses import dataclass, field
from urllib.parse import urlencode

from review_collector.config import settings

REVIEWS_URL = "https://itunes.apple.com/WebObjects/MZStore.woa/wa/viewContentsUserReviews"

# Newest first, across all app versions.
SORT_ORDERING = "4"
ONLY_LATEST_VERSION = "false"
CONTENT_TYPE = "Purple Software"


@dataclass(frozen=True)
class PageRequest:
    """Everything needed to fetch one page of reviews for one app."""

    app_id: str
    page_num: int
    url: str
    headers: dict[str, str] = field(default_factory=dict)


def build_reviews_url(app_id: str, page_num: int) -> str:
    params = {
        "id": app_id,
        "pageNumber": page_num,
        "sortOrdering": SORT_ORDERING,
        "onlyLatestVersion": ONLY_LATEST_VERSION,
        "type": CONTENT_TYPE,
    }
    return f"{REVIEWS_URL}?{urlencode(params)}"


def build_headers(user_agent: str) -> dict[str, str]:
    """Request headers for the store feed.

    The storefront and timezone markers are fixed to the US store; they
    select both the language of the reviews and the format of their dates.
    """
    return {
        "User-Agent": user_agent,
        "X-Apple-Store-Front": settings.store_front,
        "X-Apple-Tz": settings.apple_tz,
    }


def build_page_request(app_id: str, page_num: int, user_agent: str) -> PageRequest:
    return PageRequest(
        app_id=app_id,
        page_num=page_num,
        url=build_reviews_url(app_id, page_num),
        headers=build_headers(user_agent),
    )
