"""Headless host page for the context navigator.

The page wraps an ``lxml.html`` tree and provides the small slice of browser
behaviour the navigator needs: locating mount points, click dispatch and
named custom events. Handlers run synchronously on the caller's thread.
Engines a click starts go through the engine's :class:`NavigationRunner`:
they become tasks when a loop is running, otherwise they are queued until
the runner's next ``wait()``.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Callable, Dict, List, Optional

from lxml import html
from lxml.html import HtmlElement

logger = logging.getLogger(__name__)

__all__ = [
    "Page",
    "CONTROLLER_NAME",
    "CONTAINS_ELEMENTS_EVENT",
    "children_with_class",
    "descendants_with_class",
    "first_element_child",
]

CONTROLLER_NAME = "arclight-context-navigation"
CONTAINS_ELEMENTS_EVENT = "navigation.contains.elements"

ClickHandler = Callable[[HtmlElement], None]
EventListener = Callable[[HtmlElement], None]


# ---------------------------------------------------------------------------
# class queries (single-element edits use HtmlElement.classes)
# ---------------------------------------------------------------------------

def _class_xpath(name: str) -> str:
    return f"contains(concat(' ', normalize-space(@class), ' '), ' {name} ')"


def children_with_class(element: HtmlElement, name: str, tag: str = "*") -> List[HtmlElement]:
    return element.xpath(f"./{tag}[{_class_xpath(name)}]")


def descendants_with_class(element: HtmlElement, name: str, tag: str = "*") -> List[HtmlElement]:
    return element.xpath(f".//{tag}[{_class_xpath(name)}]")


def first_element_child(element: HtmlElement) -> Optional[HtmlElement]:
    """Return the first child that is an element (comments and PIs skipped)."""
    for child in element:
        if isinstance(child.tag, str):
            return child
    return None


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------

class Page:
    """Host document with click dispatch and custom events."""

    def __init__(self, root: HtmlElement) -> None:
        self.root = root
        self._click_handlers: Dict[HtmlElement, List[ClickHandler]] = {}
        self._listeners: Dict[str, List[EventListener]] = defaultdict(list)

    @classmethod
    def from_html(cls, markup: str) -> "Page":
        return cls(html.document_fromstring(markup))

    def to_html(self) -> str:
        return html.tostring(self.root, encoding="unicode")

    # ----------------------------------------------------------------- lookup

    def get_element_by_id(self, element_id: str) -> Optional[HtmlElement]:
        found = self.root.xpath("//*[@id=$element_id]", element_id=element_id)
        return found[0] if found else None

    def mount_points(self, within: Optional[HtmlElement] = None) -> List[HtmlElement]:
        """Return the mount points below *within* (default: whole page), in document order."""
        scope = self.root if within is None else within
        return scope.xpath(".//*[@data-controller=$name]", name=CONTROLLER_NAME)

    # ----------------------------------------------------------------- clicks

    def add_click_handler(self, element: HtmlElement, handler: ClickHandler) -> None:
        self._click_handlers.setdefault(element, []).append(handler)

    def remove_click_handlers(self, subtree: HtmlElement) -> int:
        """Forget handlers bound to *subtree* or anything below it. Return how many elements were dropped."""
        stale = [
            element for element in self._click_handlers
            if element is subtree or any(ancestor is subtree for ancestor in element.iterancestors())
        ]
        for element in stale:
            del self._click_handlers[element]
        return len(stale)

    def click(self, element: HtmlElement) -> bool:
        """Dispatch a click on *element*. Return False if nothing was listening."""
        handlers = list(self._click_handlers.get(element, ()))
        for handler in handlers:
            handler(element)
        return bool(handlers)

    # ----------------------------------------------------------------- events

    def on(self, event_name: str, listener: EventListener) -> None:
        self._listeners[event_name].append(listener)

    def trigger(self, element: HtmlElement, event_name: str) -> None:
        logger.debug("Event %s on <%s>", event_name, element.tag)
        for listener in list(self._listeners.get(event_name, ())):
            listener(element)
