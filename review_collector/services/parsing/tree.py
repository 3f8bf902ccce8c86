"""Decode store payloads into lxml trees and walk them by fixed paths.

The store feed is a deeply nested layout document in which the only stable
handle on a node is its tag and its position among same-tag siblings. Paths
are therefore written as ``(tag, index)`` steps and resolved one lookup at a
time, so a failure names the first step that did not resolve.
"""

import logging
from typing import Iterable, Sequence

from lxml import etree

from review_collector.errors import DecodeError, StructuralError

logger = logging.getLogger("review_collector.parsing.tree")

PathStep = tuple[str, int]


def parse_xml(payload: str | bytes) -> etree._Element:
    """Parse a raw payload into its root element.

    A fresh parser is built per call so no parser state is shared between
    pages.
    """
    if payload is None or not payload.strip():
        raise DecodeError("Empty payload")
    if isinstance(payload, str):
        payload = payload.encode("utf-8")

    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        return etree.fromstring(payload, parser=parser)
    except etree.XMLSyntaxError as e:
        raise DecodeError(f"Payload is not well-formed XML: {e}") from e


def local_name(element: etree._Element) -> str | None:
    """Tag name without its namespace, or None for comments and PIs."""
    if not isinstance(element.tag, str):
        return None
    return etree.QName(element).localname


def children(node: etree._Element, tag: str) -> list[etree._Element]:
    return [el for el in node if local_name(el) == tag]


def child(node: etree._Element, tag: str, index: int = 0) -> etree._Element | None:
    matches = children(node, tag)
    if index < len(matches):
        return matches[index]
    return None


def describe_path(steps: Iterable[PathStep]) -> str:
    return "/".join(f"{tag}[{index}]" for tag, index in steps) or "."


def find_path(node: etree._Element, steps: Sequence[PathStep], what: str = "node") -> etree._Element:
    """Follow ``steps`` from ``node``; raise StructuralError on the first missing step."""
    current = node
    for depth, (tag, index) in enumerate(steps):
        found = child(current, tag, index)
        if found is None:
            raise StructuralError(
                f"Missing {tag}[{index}] while locating {what} "
                f"(resolved {describe_path(steps[:depth])})"
            )
        current = found
    return current


def node_text(element: etree._Element | None) -> str | None:
    """All text under ``element`` with whitespace collapsed; None when blank."""
    if element is None:
        return None
    text = " ".join("".join(element.itertext()).split())
    return text or None


def raw_text(element: etree._Element | None) -> str | None:
    """All text under ``element`` trimmed at both ends; None when blank."""
    if element is None:
        return None
    text = "".join(element.itertext()).strip()
    return text or None
