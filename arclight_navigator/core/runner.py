"""Task bookkeeping for navigator engines.

Every engine, whether created at page load, by recursion into a surfaced
ancestor or by a "view children" click, is scheduled through one
:class:`NavigationRunner`. Tasks are independent: there is no
cross-cancellation and a failure in one never touches another. The runner
only remembers what it started so callers can wait for the whole tree to
settle and inspect what went wrong.
"""

from __future__ import annotations

import asyncio
import functools
import logging
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, AsyncIterator, List, Optional, Set, Tuple

if TYPE_CHECKING:
    from .engine import ContextNavigation

logger = logging.getLogger(__name__)

__all__ = ["NavigationRunner"]


class NavigationRunner:
    """Schedule engine resolution on the running event loop.

    Engines spawned while no loop is running (for example from a click on a
    page returned by :func:`render_page`) are queued and started by the next
    :meth:`wait`.

    Parameters
    ----------
    max_concurrent_requests : int, default=0
        When positive, at most this many context requests are in flight at
        once across all engines; the rest wait their turn. ``0`` leaves
        requests unbounded.
    """

    def __init__(self, max_concurrent_requests: int = 0) -> None:
        self.max_concurrent_requests = max(0, int(max_concurrent_requests or 0))
        self._semaphore: Optional[asyncio.Semaphore] = None
        self._semaphore_loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: Set[asyncio.Task] = set()
        self._queued: List["ContextNavigation"] = []
        self.engines: List["ContextNavigation"] = []
        self.failures: List[Tuple["ContextNavigation", BaseException]] = []

    # --------------------------------------------------------------------- API

    def spawn(self, engine: "ContextNavigation") -> Optional[asyncio.Task]:
        """Start ``engine.resolve()`` as a task, or queue it if no loop is running."""
        self.engines.append(engine)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running loop; queued %s", engine.label)
            self._queued.append(engine)
            return None
        return self._start(engine)

    @property
    def pending(self) -> int:
        return len(self._tasks) + len(self._queued)

    @property
    def queued(self) -> List["ContextNavigation"]:
        return list(self._queued)

    @property
    def stalled(self) -> List["ContextNavigation"]:
        return [engine for engine in self.engines if engine.stalled]

    async def wait(self) -> None:
        """Start queued engines, then wait until every task, including ones spawned meanwhile, is done."""
        while self._tasks or self._queued:
            queued, self._queued = self._queued, []
            for engine in queued:
                self._start(engine)
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @asynccontextmanager
    async def request_slot(self) -> AsyncIterator[None]:
        semaphore = self._current_semaphore()
        if semaphore is None:
            yield
            return
        async with semaphore:
            yield

    # --------------------------------------------------------------- internals

    def _start(self, engine: "ContextNavigation") -> asyncio.Task:
        loop = asyncio.get_running_loop()
        task = loop.create_task(engine.resolve(), name=f"navigation:{engine.label}")
        self._tasks.add(task)
        task.add_done_callback(functools.partial(self._task_done, engine))
        return task

    def _current_semaphore(self) -> Optional[asyncio.Semaphore]:
        # A semaphore binds to the loop it first waits on; each loop gets its own
        if not self.max_concurrent_requests:
            return None
        loop = asyncio.get_running_loop()
        if self._semaphore is None or self._semaphore_loop is not loop:
            self._semaphore = asyncio.Semaphore(self.max_concurrent_requests)
            self._semaphore_loop = loop
        return self._semaphore

    def _task_done(self, engine: "ContextNavigation", task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Context navigation cancelled for %s", engine.label)
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Context navigation failed for %s: %s", engine.label, exc)
            self.failures.append((engine, exc))
