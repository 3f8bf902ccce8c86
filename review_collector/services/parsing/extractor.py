"""Field extraction for a single review node.

Layout of one review, as served by the US storefront::

    VBoxView
      HBoxView[0]                      header
        TextView[0]/SetFontStyle[0]/b[0]     title
        HBoxView[0]/HBoxView[0]@alt          "4 stars"
      HBoxView[1]/TextView[0]/SetFontStyle[0]
        "by <GotoURL url=...?userReviewId=ID>name</GotoURL> - Version 2.1 - Jan 5, 2016"
      TextView[0]/SetFontStyle[0]      body
"""

from urllib.parse import parse_qs, urlparse

from lxml import etree

from review_collector.errors import StructuralError
from review_collector.models.review import Review
from review_collector.services.parsing.dates import format_review_date, parse_review_date
from review_collector.services.parsing.tree import child, find_path, node_text, raw_text

TITLE_PATH = (("HBoxView", 0), ("TextView", 0), ("SetFontStyle", 0), ("b", 0))
RATING_PATH = (("HBoxView", 0), ("HBoxView", 0), ("HBoxView", 0))
META_PATH = (("HBoxView", 1), ("TextView", 0), ("SetFontStyle", 0))
BODY_PATH = (("TextView", 0), ("SetFontStyle", 0))

RATING_ATTR = "alt"
LINK_ATTR = "url"
REVIEW_ID_PARAM = "userReviewId"
VERSION_MARKER = "Version "
DATE_SEPARATOR = " - "

MIN_RATING = 0
MAX_RATING = 5


def _optional_text(node: etree._Element, steps) -> str | None:
    current = node
    for tag, index in steps:
        current = child(current, tag, index)
        if current is None:
            return None
    return raw_text(current)


def parse_rating(alt: str | None) -> int:
    """Leading number before the first space: ``"4 stars"`` -> 4."""
    head = (alt or "").strip().split(" ", 1)[0]
    try:
        rating = int(head)
    except ValueError:
        raise StructuralError(f"Unreadable rating {alt!r}") from None
    if not MIN_RATING <= rating <= MAX_RATING:
        raise StructuralError(f"Rating {rating} outside {MIN_RATING}-{MAX_RATING}")
    return rating


def parse_review_id(url: str | None) -> str:
    try:
        values = parse_qs(urlparse(url or "").query).get(REVIEW_ID_PARAM, [])
    except ValueError as e:
        raise StructuralError(f"Unreadable review link {url!r}: {e}") from e
    review_id = values[0].strip() if values else ""
    if not review_id:
        raise StructuralError(f"No {REVIEW_ID_PARAM} in review link {url!r}")
    return review_id


def parse_version_and_date(meta: str | None):
    """Split ``"... Version <version> - <date>"`` into (version, datetime)."""
    text = meta or ""
    start = text.find(VERSION_MARKER)
    if start == -1:
        raise StructuralError(f"No version in review meta {meta!r}")
    version, sep, date_text = text[start + len(VERSION_MARKER):].partition(DATE_SEPARATOR)
    version = version.strip()
    if not sep or not version or not date_text.strip():
        raise StructuralError(f"Review meta {meta!r} does not match 'Version <v> - <date>'")
    try:
        date = parse_review_date(date_text)
    except ValueError as e:
        raise StructuralError(str(e)) from e
    return version, date


def extract_review(node: etree._Element, app_id: str, page_num: int) -> Review:
    """Build a Review from one review node or raise StructuralError."""
    rating_node = find_path(node, RATING_PATH, "rating")
    rating = parse_rating(rating_node.get(RATING_ATTR))

    meta_node = find_path(node, META_PATH, "review meta")
    link = child(meta_node, "GotoURL", 0)
    if link is None:
        raise StructuralError("Missing GotoURL[0] while locating review link")
    review_id = parse_review_id(link.get(LINK_ATTR))
    version, date = parse_version_and_date(node_text(meta_node))

    return Review(
        app_id=app_id,
        page_num=page_num,
        id=review_id,
        rating=rating,
        version=version,
        date=date,
        title=_optional_text(node, TITLE_PATH),
        text=_optional_text(node, BODY_PATH),
    )


def render_review(review: Review, author: str = "Anonymous") -> etree._Element:
    """Render a Review back into the node layout extract_review reads."""
    node = etree.Element("VBoxView")

    header = etree.SubElement(node, "HBoxView")
    title_style = etree.SubElement(etree.SubElement(header, "TextView"), "SetFontStyle")
    etree.SubElement(title_style, "b").text = review.title or ""
    stars = etree.SubElement(etree.SubElement(header, "HBoxView"), "HBoxView")
    stars.set(RATING_ATTR, f"{review.rating} stars")

    meta = etree.SubElement(node, "HBoxView")
    meta_style = etree.SubElement(etree.SubElement(meta, "TextView"), "SetFontStyle")
    meta_style.text = "by "
    link = etree.SubElement(meta_style, "GotoURL")
    link.set(
        LINK_ATTR,
        f"https://itunes.apple.com/us/app/id{review.app_id}?{REVIEW_ID_PARAM}={review.id}",
    )
    link.text = author
    link.tail = (
        f"{DATE_SEPARATOR}{VERSION_MARKER}{review.version}"
        f"{DATE_SEPARATOR}{format_review_date(review.date)}"
    )

    body_style = etree.SubElement(etree.SubElement(node, "TextView"), "SetFontStyle")
    body_style.text = review.text or ""
    return node
