"""Query construction for collection context requests."""

from __future__ import annotations

from typing import List, Tuple
from urllib.parse import urlencode

from .models import RequestContext

__all__ = ["CONTEXT_VIEW", "build_query", "build_url"]

CONTEXT_VIEW = "collection_context"

QueryPairs = List[Tuple[str, str]]


def build_query(context: RequestContext) -> QueryPairs:
    """Return the ordered query pairs for one context request.

    The positional ``original_parents[i]`` entries repeat the ancestor chain
    the mount point declared, so the server can rebuild context at any depth.
    """
    config = context.config
    params: QueryPairs = [
        ("f[component_level_isim][]", str(config.level)),
        ("f[collection_sim][]", config.name),
        ("f[parent_ssi][]", context.request_parent),
        ("original_document", context.original_document),
        ("view", CONTEXT_VIEW),
    ]
    if config.access:
        params.append(("f[has_online_content_ssim][]", config.access))
    if config.search_field:
        params.append(("search_field", config.search_field))
    for index, value in enumerate(config.original_parents or ()):
        params.append((f"original_parents[{index}]", value))
    return params


def build_url(path: str, params: QueryPairs) -> str:
    """Append *params* to a declared path that already carries a query string."""
    return f"{path}&{urlencode(params)}"
