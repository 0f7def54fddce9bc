"""Collection context navigation engine.

One :class:`ContextNavigation` is bound to one mount point. It asks the
server for the slice of the hierarchy around the node being viewed, decides
whether the response holds the viewed node's siblings or its ancestors,
collapses long runs behind an :class:`ExpandButton`, and starts new engines
for mount points revealed by the rendered list.

Lifecycle::

    constructed -> placeholder-shown -> requesting
        -> reconciling-siblings | reconciling-ancestors -> rendered

A failed request leaves the engine in ``requesting`` with its placeholder
still visible. Nothing is retried.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from lxml import html
from lxml.html import HtmlElement

from .document import NavigationDocument, parse_documents
from .exceptions import FetchError, MountPointConfigError, NavigationStateError
from .fetcher import Fetcher
from .models import MountPointConfig, NavigationSettings, NavigationState, RequestContext
from .page import CONTAINS_ELEMENTS_EVENT, Page, descendants_with_class
from .placeholder import Placeholder
from .query import build_query, build_url
from .runner import NavigationRunner
from .toggle import ExpandButton

logger = logging.getLogger(__name__)

__all__ = ["ContextNavigation", "VIEW_CHILDREN_CLASS"]

VIEW_CHILDREN_CLASS = "al-toggle-view-children"


class ContextNavigation:
    """Disclosure engine for a single mount point.

    Parameters
    ----------
    el : HtmlElement
        The mount point (``data-controller="arclight-context-navigation"``).
    page : Page
        Host page used for click wiring and the completion event.
    fetcher : Fetcher
        Transport returning the HTML body of a context request.
    runner : NavigationRunner | None
        Schedules engines spawned by this one. A private runner is created
        when omitted.
    original_parents : sequence of str | None
        Ancestor chain of the viewed node, indexed by level. ``None`` drops
        the chain and scopes the query to the mount point's own node.
    original_document : str | None
        Identity of the viewed node; defaults to the declared one.
    settings : NavigationSettings | None
        Labels and placeholder size.

    Raises
    ------
    MountPointConfigError
        If the mount point's declaration is malformed.
    """

    def __init__(
        self,
        el: HtmlElement,
        page: Page,
        fetcher: Fetcher,
        runner: Optional[NavigationRunner] = None,
        *,
        original_parents: Optional[Sequence[str]] = None,
        original_document: Optional[str] = None,
        settings: Optional[NavigationSettings] = None,
    ) -> None:
        self.el = el
        self.page = page
        self.fetcher = fetcher
        self.settings = settings or NavigationSettings()
        self.runner = runner or NavigationRunner(self.settings.max_concurrent_requests)
        self.config = MountPointConfig.from_element(el, self.settings)
        self.parent_li = el.getparent()
        self.eadid = self.config.eadid
        self.original_parents = tuple(original_parents) if original_parents is not None else None
        self.original_document = original_document or self.config.original_document

        self.ul: HtmlElement = html.Element("ul")
        self.ul.set("class", "al-context-nav-parent")

        self.state = NavigationState.CONSTRUCTED
        self.fetch_error: Optional[FetchError] = None
        self.documents: List[NavigationDocument] = []
        self.buttons: List[ExpandButton] = []
        self.children: List["ContextNavigation"] = []

    @classmethod
    def from_declaration(
        cls,
        el: HtmlElement,
        page: Page,
        fetcher: Fetcher,
        runner: Optional[NavigationRunner] = None,
        *,
        settings: Optional[NavigationSettings] = None,
    ) -> "ContextNavigation":
        """Build an engine seeded with the mount point's own declared ancestry."""
        engine = cls(el, page, fetcher, runner, settings=settings)
        engine.original_parents = engine.config.original_parents
        return engine

    # ------------------------------------------------------------------ state

    @property
    def label(self) -> str:
        return self.el.get("id") or self.original_document

    @property
    def context(self) -> RequestContext:
        return RequestContext(self.config, self.original_parents, self.original_document)

    @property
    def target_id(self) -> str:
        return self.context.target_id

    @property
    def request_parent(self) -> str:
        return self.context.request_parent

    @property
    def stalled(self) -> bool:
        """True when the request failed and the placeholder is left showing."""
        return self.state is NavigationState.REQUESTING and self.fetch_error is not None

    @property
    def url(self) -> str:
        return build_url(self.config.path, build_query(self.context))

    # --------------------------------------------------------------- resolve

    async def resolve(self) -> None:
        """Fetch the context slice for this mount point and render it."""
        if self.state is not NavigationState.CONSTRUCTED:
            raise NavigationStateError(f"Engine already {self.state.value}", self.label)

        # Add a placeholder so flashes of text are not as significant
        Placeholder.after(self.el, self.settings.placeholder_count)
        self.state = NavigationState.PLACEHOLDER_SHOWN

        url = self.url
        self.state = NavigationState.REQUESTING
        logger.debug("Requesting context for %s: %s", self.label, url)
        try:
            async with self.runner.request_slot():
                response = await self.fetcher.fetch(url)
            docs = parse_documents(response)
        except FetchError as exc:
            self.fetch_error = exc
            logger.error("Context request for %s stalled: %s", self.label, exc)
            return

        self.update_view(docs)

    def update_view(self, docs: List[NavigationDocument]) -> None:
        """Reconcile a fetched batch against the viewed node and render it."""
        self.documents = docs
        original_index = self._find_index(docs, self.original_document)
        Placeholder.clear(self.parent_li)

        if original_index != -1:
            self.state = NavigationState.RECONCILING_SIBLINGS
            self.update_siblings(docs, original_index)
        else:
            self.state = NavigationState.RECONCILING_ANCESTORS
            self.update_parents(docs)

        self.parent_li.set("data-resolved", "true")
        self.add_listeners_for_plus_minus()
        self.state = NavigationState.RENDERED
        logger.info(
            "Rendered %d nodes for %s (%d toggles, %d child engines)",
            len(docs), self.label, len(self.buttons), len(self.children),
        )
        self.page.trigger(self.el, CONTAINS_ELEMENTS_EVENT)

    # -------------------------------------------------------- reconciliation

    def build_expand_list(self) -> HtmlElement:
        """Return a ``<ul>`` holding a fresh :class:`ExpandButton`."""
        group = html.Element("ul")
        group.set("class", "pl-0 prev-siblings")
        button = ExpandButton(self.page, self.config.expand_label, self.config.collapse_label)
        group.append(button.el)
        self.buttons.append(button)
        return group

    def update_siblings(self, docs: List[NavigationDocument], original_index: int) -> None:
        """Highlight the viewed node and render it among its siblings.

        When more than one sibling precedes it, all but the immediate
        predecessor are collapsed behind one toggle.
        """
        docs[original_index].set_as_highlighted()

        prev_docs = docs[:original_index]
        if len(prev_docs) > 1 and original_index > 0:
            for doc in prev_docs[:-1]:
                doc.make_collapsible()
                doc.collapse()

            prev_list = self.build_expand_list()
            for doc in prev_docs:
                prev_list.append(doc.render())
            self.ul.append(prev_list)

            next_docs = docs[original_index:]
        else:
            next_docs = docs

        for doc in next_docs:
            self.ul.append(doc.render())
        self._replace_content()

    def update_parents(self, docs: List[NavigationDocument]) -> None:
        """Render a batch of ancestors around the target node.

        Falls back to a flat rendering when the target is not in the batch.
        """
        target_index = self._find_index(docs, self.target_id)

        if target_index == -1:
            for doc in docs:
                self.ul.append(doc.render())
            self._replace_content()
            return

        before_docs = docs[:target_index]
        if len(before_docs) > 1:
            for doc in before_docs:
                doc.make_collapsible()
                doc.collapse()
            prev_list = self.build_expand_list()
            for doc in before_docs:
                prev_list.append(doc.render())
            self.ul.append(prev_list)
        else:
            for doc in before_docs:
                self.ul.append(doc.render())

        rendered_item = docs[target_index].render()
        self.ul.append(rendered_item)

        for doc in docs[target_index + 1:]:
            self.ul.append(doc.render())
        self._replace_content()

        self._spawn_children(rendered_item, self.original_parents)

    # ------------------------------------------------------------- listeners

    def add_listeners_for_plus_minus(self) -> None:
        for link in descendants_with_class(self.ul, VIEW_CHILDREN_CLASS):
            self.page.add_click_handler(link, self._handle_view_children)

    def _handle_view_children(self, link: HtmlElement) -> None:
        href = link.get("href") or ""
        if not href.startswith("#") or len(href) < 2:
            logger.warning("View-children control without a fragment target: %r", href)
            return
        target_area = self.page.get_element_by_id(href[1:])
        if target_area is None:
            logger.warning("View-children target %s not found", href)
            return
        if target_area.get("data-resolved") == "true":
            return
        # Disregard the ancestor trail: the clicked node becomes the query parent
        self._spawn_children(target_area, None)

    # --------------------------------------------------------------- helpers

    def _spawn_children(self, within: HtmlElement, original_parents: Optional[Sequence[str]]) -> None:
        for element in self.page.mount_points(within=within):
            try:
                child = ContextNavigation(
                    element,
                    self.page,
                    self.fetcher,
                    self.runner,
                    original_parents=original_parents,
                    original_document=self.original_document,
                    settings=self.settings,
                )
            except MountPointConfigError as exc:
                logger.error("Skipping nested mount point under %s: %s", self.label, exc)
                continue
            self.children.append(child)
            self.runner.spawn(child)

    def _replace_content(self) -> None:
        for child in list(self.el):
            self.page.remove_click_handlers(child)
            self.el.remove(child)
        self.el.text = None
        self.el.append(self.ul)

    @staticmethod
    def _find_index(docs: List[NavigationDocument], doc_id: str) -> int:
        for index, doc in enumerate(docs):
            if doc.id == doc_id:
                return index
        return -1
