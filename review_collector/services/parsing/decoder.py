import logging
from typing import Callable, Sequence

from lxml import etree

from review_collector.errors import StructuralError
from review_collector.models.review import Page, Review
from review_collector.services.collector.events import (
    EventEmitter,
    EventType,
    PageCompleteEvent,
    ReviewEvent,
)
from review_collector.services.parsing.extractor import extract_review, render_review
from review_collector.services.parsing.tree import children, find_path, local_name, parse_xml

logger = logging.getLogger("review_collector.parsing.decoder")

ROOT_TAG = "Document"
REVIEW_LIST_PATH = (
    ("View", 0),
    ("ScrollView", 0),
    ("VBoxView", 0),
    ("View", 0),
    ("MatrixView", 0),
    ("VBoxView", 0),
    ("VBoxView", 0),
)
REVIEW_TAG = "VBoxView"
ITMS_NAMESPACE = "http://www.apple.com/itms/"


def locate_review_list(root: etree._Element) -> etree._Element:
    """Find the node whose children are the reviews of a page.

    Raises StructuralError when the document is not a review listing, which
    is what the store sends for unknown apps and for error pages.
    """
    if local_name(root) != ROOT_TAG:
        raise StructuralError(f"Unexpected document root {root.tag!r}; app was not valid")
    return find_path(root, REVIEW_LIST_PATH, "review list")


class PageDecoder:
    """Turn one raw payload into a Page and publish it.

    A malformed review fails the whole page so that a page is either
    delivered complete or retried.
    """

    def decode(self, payload: str | bytes, app_id: str, page_num: int) -> Page:
        root = parse_xml(payload)
        review_list = locate_review_list(root)

        reviews: list[Review] = []
        for position, node in enumerate(children(review_list, REVIEW_TAG)):
            try:
                reviews.append(extract_review(node, app_id, page_num))
            except StructuralError as e:
                raise StructuralError(
                    f"Review {position} on page {page_num} of app {app_id} is malformed: {e}"
                ) from e

        logger.debug("Decoded %d reviews for app=%s page=%d", len(reviews), app_id, page_num)
        return Page(app_id=app_id, page_num=page_num, reviews=tuple(reviews))

    def publish(
        self,
        page: Page,
        emitter: EventEmitter,
        continue_: Callable[[], None] | None = None,
        stop: Callable[[], None] | None = None,
    ) -> None:
        """Emit one review event per review in order, then the page-complete event."""
        for review in page.reviews:
            emitter.emit(
                EventType.REVIEW,
                ReviewEvent(app_id=page.app_id, page_num=page.page_num, review=review),
            )
        emitter.emit(
            EventType.PAGE_COMPLETE,
            PageCompleteEvent(
                app_id=page.app_id,
                page_num=page.page_num,
                reviews=page.reviews,
                continue_=continue_,
                stop=stop,
            ),
        )


def render_page(reviews: Sequence[Review]) -> str:
    """Render reviews into a complete store document that decode() accepts."""
    root = etree.Element(ROOT_TAG, nsmap={None: ITMS_NAMESPACE})
    node = root
    for tag, _ in REVIEW_LIST_PATH:
        node = etree.SubElement(node, tag)
    for review in reviews:
        node.append(render_review(review))
    return etree.tostring(root, encoding="unicode")
