"""The "Expand"/"Collapse" button governing a group of collapsed nodes."""

from __future__ import annotations

from typing import List

from lxml import html
from lxml.html import HtmlElement

from .page import Page, children_with_class

__all__ = ["ExpandButton", "BUTTON_CLASSES"]

BUTTON_CLASSES = "my-3 btn btn-secondary btn-sm"


class ExpandButton:
    """Models the toggle button and handles clicks on it.

    The button starts without the ``collapsed`` class while the nodes it
    governs start collapsed; each click flips both sides in lockstep. No
    network activity is involved.
    """

    def __init__(self, page: Page, expand_text: str, collapse_text: str) -> None:
        self.expand_text = expand_text
        self.collapse_text = collapse_text

        self.el: HtmlElement = html.Element("button")
        self.el.set("class", BUTTON_CLASSES)
        self.el.text = self.expand_text
        page.add_click_handler(self.el, self.handle_click)

    @property
    def collapsed(self) -> bool:
        return "collapsed" in self.el.classes

    @property
    def label(self) -> str:
        return self.el.text or ""

    def find_collapsible_siblings(self) -> List[HtmlElement]:
        """Return the ``li.collapsible`` elements sharing the button's parent."""
        parent = self.el.getparent()
        if parent is None:
            return []
        return children_with_class(parent, "collapsible", tag="li")

    def handle_click(self, _element: HtmlElement | None = None) -> None:
        for li in self.find_collapsible_siblings():
            li.classes.toggle("collapsed")
        now_collapsed = self.el.classes.toggle("collapsed")
        self.el.text = self.collapse_text if now_collapsed else self.expand_text
