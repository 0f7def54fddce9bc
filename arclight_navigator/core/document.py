"""One fetched hierarchy entry.

A :class:`NavigationDocument` wraps an ``<article>`` taken from a context
response. The article holds a single ``li.al-collection-context`` item that
eventually moves into the visible list; until then the wrapper owns it.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from lxml import etree, html
from lxml.html import HtmlElement

from .exceptions import DataIntegrityError, FetchError
from .page import descendants_with_class, first_element_child

logger = logging.getLogger(__name__)

__all__ = [
    "NavigationDocument",
    "parse_documents",
    "HIGHLIGHT_CLASS",
    "COLLAPSIBLE_CLASS",
    "COLLAPSED_CLASS",
]

CONTEXT_ITEM_CLASS = "al-collection-context"
HIGHLIGHT_CLASS = "al-hierarchy-highlight"
COLLAPSIBLE_CLASS = "collapsible"
COLLAPSED_CLASS = "collapsed"


class NavigationDocument:
    """Wraps an ``<article>`` element of a context response."""

    def __init__(self, el: HtmlElement) -> None:
        self.el = el

    @property
    def id(self) -> str:
        """Node identity from the nested ``data-document-id`` attribute."""
        found = self.el.xpath(".//*[@data-document-id]")
        if not found:
            raise DataIntegrityError("Fetched node has no data-document-id attribute")
        return found[0].get("data-document-id")

    @property
    def item(self) -> HtmlElement:
        found = descendants_with_class(self.el, CONTEXT_ITEM_CLASS, tag="li")
        if not found:
            raise DataIntegrityError(f"Fetched node has no li.{CONTEXT_ITEM_CLASS} item")
        return found[0]

    # Rendering state
    @property
    def highlighted(self) -> bool:
        return HIGHLIGHT_CLASS in self.item.classes

    @property
    def collapsible(self) -> bool:
        return COLLAPSIBLE_CLASS in self.item.classes

    @property
    def collapsed(self) -> bool:
        return COLLAPSED_CLASS in self.item.classes

    def set_as_highlighted(self) -> None:
        self.item.classes.add(HIGHLIGHT_CLASS)

    def make_collapsible(self) -> None:
        self.item.classes.add(COLLAPSIBLE_CLASS)

    def collapse(self) -> None:
        # collapsed implies collapsible
        self.make_collapsible()
        self.item.classes.add(COLLAPSED_CLASS)

    def render(self) -> HtmlElement:
        """Detach and return the ``<li>`` so it can be placed in the visible list.

        Single use: after this call the article no longer holds the item.
        """
        child = first_element_child(self.el)
        if child is None:
            raise DataIntegrityError("Fetched node has no renderable child element")
        self.el.remove(child)
        child.tail = None
        return child

    def __repr__(self) -> str:
        ident = self.el.xpath("string(.//*[@data-document-id]/@data-document-id)")
        return f"NavigationDocument({ident!r})"


def parse_documents(response: str) -> List[NavigationDocument]:
    """Parse a context response into documents, preserving server order.

    Nodes are the ``<article>`` elements inside the ``#documents`` container.
    """
    if not response or not response.strip():
        raise FetchError("Empty context response")
    try:
        root = html.document_fromstring(response)
    except (ValueError, etree.ParserError) as exc:
        raise FetchError(f"Context response is not HTML: {exc}", cause=exc) from exc
    articles: Optional[List[HtmlElement]] = root.xpath("//*[@id='documents']//article")
    docs = [NavigationDocument(el) for el in articles or []]
    logger.debug("Parsed %d documents from context response", len(docs))
    return docs
