"""Context disclosure engine for hierarchical collection navigation."""

from .bootstrap import RenderResult, initialize, render_page
from .document import NavigationDocument, parse_documents
from .engine import ContextNavigation
from .exceptions import (
    DataIntegrityError,
    FetchError,
    MountPointConfigError,
    NavigationError,
    NavigationStateError,
)
from .fetcher import Fetcher, RequestsFetcher
from .models import MountPointConfig, NavigationSettings, NavigationState, RequestContext
from .page import Page
from .placeholder import Placeholder
from .query import build_query, build_url
from .runner import NavigationRunner
from .toggle import ExpandButton

__all__: list[str] = [
    "ContextNavigation",
    "DataIntegrityError",
    "ExpandButton",
    "FetchError",
    "Fetcher",
    "MountPointConfig",
    "MountPointConfigError",
    "NavigationDocument",
    "NavigationError",
    "NavigationRunner",
    "NavigationSettings",
    "NavigationState",
    "NavigationStateError",
    "Page",
    "Placeholder",
    "RenderResult",
    "RequestContext",
    "RequestsFetcher",
    "build_query",
    "build_url",
    "initialize",
    "parse_documents",
    "render_page",
]
