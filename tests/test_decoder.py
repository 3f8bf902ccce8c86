"""Tests for page decoding and page-level event publishing."""

import pytest
from lxml import etree

from review_collector.errors import DecodeError, StructuralError
from review_collector.services.collector.events import EventEmitter, EventType
from review_collector.services.parsing.decoder import PageDecoder, locate_review_list, render_page
from review_collector.services.parsing.tree import find_path, parse_xml


def test_decode_valid_page(reviews_page):
    page = PageDecoder().decode(reviews_page(25), "585027354", 0)
    assert page.app_id == "585027354"
    assert page.page_num == 0
    assert len(page.reviews) == 25
    assert not page.is_empty


def test_decode_keeps_store_order(reviews_page):
    page = PageDecoder().decode(reviews_page(5, page_num=3), "585027354", 3)
    assert [r.id for r in page.reviews] == ["30000", "30001", "30002", "30003", "30004"]
    assert all(r.page_num == 3 for r in page.reviews)


def test_decode_page_without_reviews(reviews_page):
    page = PageDecoder().decode(reviews_page(0), "585027354", 4)
    assert page.reviews == ()
    assert page.is_empty


def test_decode_invalid_app_is_structural_error(invalid_app_payload):
    with pytest.raises(StructuralError, match="review list"):
        PageDecoder().decode(invalid_app_payload, "0", 0)


def test_decode_unexpected_root_is_structural_error():
    with pytest.raises(StructuralError, match="root"):
        PageDecoder().decode("<html><body>Service unavailable</body></html>", "1", 0)


def test_decode_malformed_payload_is_decode_error(malformed_payload):
    with pytest.raises(DecodeError) as excinfo:
        PageDecoder().decode(malformed_payload, "1", 0)
    assert not isinstance(excinfo.value, StructuralError)


@pytest.mark.parametrize("payload", ["", "   ", b""])
def test_decode_empty_payload(payload):
    with pytest.raises(DecodeError):
        parse_xml(payload)


def test_decode_accepts_bytes_with_declaration(reviews_page):
    payload = ('<?xml version="1.0" encoding="UTF-8"?>\n' + reviews_page(2)).encode("utf-8")
    page = PageDecoder().decode(payload, "585027354", 0)
    assert len(page.reviews) == 2


def test_malformed_review_fails_whole_page(reviews_page):
    root = etree.fromstring(reviews_page(3).encode("utf-8"))
    review_list = locate_review_list(root)
    second = review_list[1]
    second.remove(second[1])  # drop the meta block holding id, version and date

    with pytest.raises(StructuralError, match="Review 1"):
        PageDecoder().decode(etree.tostring(root), "585027354", 0)


def test_find_path_reports_first_missing_step():
    root = etree.fromstring("<a><b><c/></b></a>")
    with pytest.raises(StructuralError, match=r"Missing d\[0\].*b\[0\]/c\[0\]"):
        find_path(root, (("b", 0), ("c", 0), ("d", 0), ("e", 0)), "thing")


def test_publish_emits_reviews_then_page_complete(make_review):
    reviews = [make_review(review_id=str(i)) for i in range(3)]
    page = PageDecoder().decode(render_page(reviews), "585027354", 0)
    emitter = EventEmitter()
    seen = []
    emitter.on(EventType.REVIEW, lambda e: seen.append(("review", e.review.id)))
    emitter.on(EventType.PAGE_COMPLETE, lambda e: seen.append(("page", len(e.reviews))))

    PageDecoder().publish(page, emitter)

    assert seen == [("review", "0"), ("review", "1"), ("review", "2"), ("page", 3)]


def test_publish_without_decision_points(reviews_page):
    page = PageDecoder().decode(reviews_page(1), "585027354", 0)
    emitter = EventEmitter()
    completed = []
    emitter.on(EventType.PAGE_COMPLETE, completed.append)

    PageDecoder().publish(page, emitter)

    assert completed[0].continue_ is None
    assert completed[0].stop is None
    assert completed[0].reviews == page.reviews
