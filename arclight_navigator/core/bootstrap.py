"""Page-level entry points.

:func:`initialize` is what a host calls once its content is ready: it binds
one engine to every mount point on the page and starts them.
:func:`render_page` wraps the whole round trip for headless use.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .engine import ContextNavigation
from .exceptions import MountPointConfigError
from .fetcher import Fetcher
from .models import NavigationSettings
from .page import Page
from .runner import NavigationRunner

logger = logging.getLogger(__name__)

__all__ = ["initialize", "render_page", "RenderResult"]


def initialize(
    page: Page,
    fetcher: Fetcher,
    *,
    runner: Optional[NavigationRunner] = None,
    settings: Optional[NavigationSettings] = None,
) -> List[ContextNavigation]:
    """Start one engine per mount point on *page* and return them.

    Each engine is seeded with its mount point's own declared ancestor chain
    and viewed node. Must be called while an event loop is running; use
    ``runner.wait()`` to wait for the disclosure tree to settle. Mount points
    with a malformed declaration are logged and skipped.
    """
    settings = settings or NavigationSettings.load()
    runner = runner or NavigationRunner(settings.max_concurrent_requests)

    engines: List[ContextNavigation] = []
    for element in page.mount_points():
        try:
            engine = ContextNavigation.from_declaration(element, page, fetcher, runner, settings=settings)
        except MountPointConfigError as exc:
            logger.error("Skipping mount point: %s", exc)
            continue
        engines.append(engine)
        runner.spawn(engine)

    logger.info("Initialised %d context navigation engine(s)", len(engines))
    return engines


@dataclass
class RenderResult:
    """Outcome of :func:`render_page`.

    Clicks on :attr:`page` after the loop has finished queue their engines on
    :attr:`runner`; ``asyncio.run(result.runner.wait())`` resolves them.
    """

    page: Page
    engines: List[ContextNavigation] = field(default_factory=list)
    failures: List[Tuple[ContextNavigation, BaseException]] = field(default_factory=list)
    runner: Optional[NavigationRunner] = None

    @property
    def html(self) -> str:
        return self.page.to_html()

    @property
    def stalled(self) -> List[ContextNavigation]:
        return [engine for engine in self.engines if engine.stalled]

    @property
    def ok(self) -> bool:
        return not self.failures and not self.stalled


async def render_page(
    markup: str,
    fetcher: Fetcher,
    *,
    settings: Optional[NavigationSettings] = None,
    runner: Optional[NavigationRunner] = None,
) -> RenderResult:
    """Load *markup*, resolve every mount point recursively, and return the result."""
    settings = settings or NavigationSettings.load()
    runner = runner or NavigationRunner(settings.max_concurrent_requests)
    page = Page.from_html(markup)
    initialize(page, fetcher, runner=runner, settings=settings)
    await runner.wait()
    return RenderResult(
        page=page,
        engines=list(runner.engines),
        failures=list(runner.failures),
        runner=runner,
    )
