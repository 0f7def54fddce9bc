from __future__ import annotations

"""Skeleton markup shown while a context request is in flight."""

from lxml import html
from lxml.html import HtmlElement

from .page import descendants_with_class

__all__ = ["Placeholder", "PLACEHOLDER_CLASS"]

PLACEHOLDER_CLASS = "al-hierarchy-placeholder"

_BLOCK_MARKUP = (
    f'<div class="{PLACEHOLDER_CLASS}">'
    '<h3 class="col-md-9"></h3>'
    '<p class="col-md-6"></p>'
    '<p class="col-md-12"></p>'
    '<p class="col-md-3"></p>'
    '</div>'
)


class Placeholder:
    """Stateless insertion and removal of placeholder blocks."""

    @staticmethod
    def after(element: HtmlElement, count: int = 3) -> None:
        """Insert *count* skeleton blocks directly after *element*."""
        anchor = element
        for _ in range(count):
            block = html.fragment_fromstring(_BLOCK_MARKUP)
            anchor.addnext(block)
            anchor = block

    @staticmethod
    def clear(container: HtmlElement) -> int:
        """Remove every skeleton block under *container*; return how many went."""
        blocks = descendants_with_class(container, PLACEHOLDER_CLASS)
        for block in blocks:
            block.drop_tree()
        return len(blocks)
