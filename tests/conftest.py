"""Test configuration and fixtures for the context navigator.

Provides markup builders for mount points and context responses, and a
fake fetcher that serves canned responses keyed by the queried parent.
"""

import asyncio
import html
import json
import logging
from typing import Any, Dict, Iterable, List, Optional, Union
from urllib.parse import parse_qsl, urlsplit

import pytest

from arclight_navigator.config import ConfigManager
from arclight_navigator.core import FetchError, NavigationSettings, Page

# Configure test logging
logging.basicConfig(
    level=logging.DEBUG,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)


# ---------------------------------------------------------------------------
# Markup builders
# ---------------------------------------------------------------------------

def article(doc_id: str, inner: str = "") -> str:
    """One search result as rendered by the collection_context view."""
    return (
        f'<article class="document">'
        f'<li class="al-collection-context" id="{doc_id}-hierarchy-item">'
        f'<div class="documentHeader" data-document-id="{doc_id}">{doc_id}</div>'
        f'{inner}'
        f'</li>'
        f'</article>'
    )


def context_response(*articles: str) -> str:
    return (
        '<html><body><div id="sidebar"></div>'
        f'<div id="documents">{"".join(articles)}</div>'
        '</body></html>'
    )


def arclight_data(**overrides: Any) -> Dict[str, Any]:
    data = {
        "eadid": "coll1",
        "level": 1,
        "name": "Collection One",
        "path": "/catalog/hierarchy?per_page=100",
        "originalDocument": "coll1item5",
        "originalParents": None,
    }
    data.update(overrides)
    return {k: v for k, v in data.items() if v is not None}


def mount_point(element_id: str = "nav", expand: Optional[str] = "Expand",
                collapse: Optional[str] = "Collapse", **overrides: Any) -> str:
    attrs = [
        f'id="{element_id}"',
        'data-controller="arclight-context-navigation"',
        f"data-arclight='{html.escape(json.dumps(arclight_data(**overrides)), quote=False)}'",
    ]
    if expand is not None:
        attrs.append(f'data-expand="{expand}"')
    if collapse is not None:
        attrs.append(f'data-collapse="{collapse}"')
    return f'<div {" ".join(attrs)}></div>'


def nested_area(node_id: str, **overrides: Any) -> str:
    """View-children link plus a collapsed area holding a nested mount point."""
    return (
        f'<a class="al-toggle-view-children" href="#collapsible-hierarchy-{node_id}">+</a>'
        f'<div id="collapsible-hierarchy-{node_id}" class="collapse">'
        f'{mount_point(element_id=f"nav-{node_id}", **overrides)}'
        f'</div>'
    )


def host_page(*mount_points: str) -> str:
    items = "".join(f'<li class="container-li">{mp}</li>' for mp in mount_points)
    return f'<html><body><ul id="tree">{items}</ul></body></html>'


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

Response = Union[str, Exception]


class FakeFetcher:
    """Serve canned responses keyed by the ``f[parent_ssi][]`` query value."""

    def __init__(self, responses: Optional[Dict[str, Response]] = None,
                 default: Optional[Response] = None) -> None:
        self.responses = dict(responses or {})
        self.default = default
        self.calls: List[str] = []

    @staticmethod
    def query(url: str) -> List[tuple]:
        return parse_qsl(urlsplit(url).query, keep_blank_values=True)

    def queries(self) -> List[Dict[str, str]]:
        return [dict(self.query(url)) for url in self.calls]

    async def fetch(self, url: str) -> str:
        self.calls.append(url)
        await asyncio.sleep(0)
        parent = dict(self.query(url)).get("f[parent_ssi][]")
        response = self.responses.get(parent, self.default)
        if response is None:
            raise FetchError(f"No canned response for parent {parent!r}", url=url, status_code=404)
        if isinstance(response, Exception):
            raise response
        return response


def ids_in(element) -> List[str]:
    """Document ids in order of appearance below *element*."""
    return element.xpath(".//*[@data-document-id]/@data-document-id")


def run(coro):
    return asyncio.run(coro)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point user overrides at an empty directory and reset the singleton."""
    monkeypatch.setenv("ARCLIGHT_NAVIGATOR_CONFIG_DIR", str(tmp_path / "user-config"))
    ConfigManager.reset()
    yield
    ConfigManager.reset()


@pytest.fixture
def settings():
    return NavigationSettings()


@pytest.fixture
def page_factory():
    def _make(*mount_points: str) -> Page:
        return Page.from_html(host_page(*mount_points))
    return _make
