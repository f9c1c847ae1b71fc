"""Minimal DOM querying interface used by the page extractors.

Extractors only need CSS selection, text and attribute reads, and element
removal, so they are written against the ``Document`` protocol and can be
exercised with synthetic documents. ``SoupDocument`` is the BeautifulSoup
backed implementation used in production.
"""
from typing import List, Optional, Protocol

from bs4 import BeautifulSoup, Tag


class Node(Protocol):
    name: str

    def text(self) -> str: ...

    def attr(self, name: str) -> Optional[str]: ...


class Document(Protocol):
    def select(self, selector: str) -> List[Node]: ...

    def remove(self, selector: str) -> None: ...


class SoupNode:
    def __init__(self, tag: Tag):
        self._tag = tag
        self.name = tag.name

    def text(self) -> str:
        return self._tag.get_text()

    def attr(self, name: str) -> Optional[str]:
        value = self._tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value


class SoupDocument:
    def __init__(self, html: str):
        self._soup = BeautifulSoup(html, "html.parser")

    def select(self, selector: str) -> List[Node]:
        return [SoupNode(tag) for tag in self._soup.select(selector)]

    def remove(self, selector: str) -> None:
        # extract() rather than decompose(): nested matches are already detached
        for tag in self._soup.select(selector):
            tag.extract()


def joined_text(doc: Document, selector: str) -> str:
    """Text of every matching element, concatenated."""
    return "".join(node.text() for node in doc.select(selector))


def first_attr(doc: Document, selector: str, name: str) -> Optional[str]:
    """Attribute of the first matching element only."""
    nodes = doc.select(selector)
    if not nodes:
        return None
    return nodes[0].attr(name)


def first_non_empty(*values: Optional[str]) -> Optional[str]:
    for value in values:
        if value:
            return value
    return None
