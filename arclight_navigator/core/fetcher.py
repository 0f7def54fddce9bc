"""HTTP transport for context requests.

Engines only depend on the :class:`Fetcher` protocol, an awaitable
``fetch(url) -> str``. :class:`RequestsFetcher` is the production
implementation: a ``requests.Session`` whose blocking calls run in a worker
thread so the event loop keeps serving other engines.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Optional, Protocol
from urllib.parse import urljoin

import requests

from .exceptions import FetchError

logger = logging.getLogger(__name__)

__all__ = ["Fetcher", "RequestsFetcher"]


class Fetcher(Protocol):
    async def fetch(self, url: str) -> str:
        ...


class RequestsFetcher:
    """Fetch context fragments over HTTP.

    Parameters
    ----------
    base_url : str
        Joined with relative mount point paths (``/catalog?...``).
    timeout : float | None
        Per-request timeout in seconds. ``None`` waits indefinitely.
    session : requests.Session | None
        Injected for connection pooling or tests.
    """

    def __init__(self, base_url: str = "", timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None) -> None:
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def resolve_url(self, url: str) -> str:
        if self.base_url:
            return urljoin(self.base_url, url)
        return url

    async def fetch(self, url: str) -> str:
        return await asyncio.to_thread(self._fetch_sync, self.resolve_url(url))

    def _fetch_sync(self, url: str) -> str:
        logger.debug("GET %s", url)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as exc:
            raise FetchError(f"Request failed: {exc}", url=url, cause=exc) from exc

        if not response.ok:
            raise FetchError(
                f"Failed to fetch context: HTTP {response.status_code}",
                url=url,
                status_code=response.status_code,
            )
        return response.text

    def close(self) -> None:
        self.session.close()
