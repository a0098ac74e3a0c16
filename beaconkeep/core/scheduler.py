"""Control-thread schedulers.

All mutable companion state is owned by one logical control thread.  The
``Scheduler`` Protocol is that thread: external results are marshaled onto
it with ``call_soon`` and timers (retry delay, notification expiry) are
armed with ``call_later``.

Two backends:

1. **AsyncioScheduler** — wraps a running asyncio event loop.  Used by the
   CLI and any embedding application.
2. **ManualScheduler** — a virtual clock that only moves when told to.
   Used by tests and for deterministic stepping.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import logging
import threading
from collections import deque
from collections.abc import Callable
from concurrent.futures import Future
from typing import Any, Protocol, TypeVar, runtime_checkable

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Protocols
# ---------------------------------------------------------------------------


@runtime_checkable
class ScheduledTask(Protocol):
    """Handle to a queued callback.  ``asyncio.Handle`` satisfies this."""

    def cancel(self) -> None:
        ...


@runtime_checkable
class Scheduler(Protocol):
    """The single control thread that owns companion state."""

    def now(self) -> float:
        """Current reading of the scheduler clock, in seconds."""
        ...

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> ScheduledTask:
        """Queue *callback* on the control thread.  Safe from any thread."""
        ...

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> ScheduledTask:
        """Run *callback* no earlier than *delay* seconds from now."""
        ...


def deliver(
    scheduler: Scheduler,
    future: Future[T],
    handler: Callable[[Future[T]], None],
) -> None:
    """Hand the resolved *future* to *handler* on the control thread.

    The future may complete on any thread (or already be complete); the
    handler always runs through ``scheduler.call_soon``.
    """
    future.add_done_callback(lambda done: scheduler.call_soon(handler, done))


# ---------------------------------------------------------------------------
# asyncio backend
# ---------------------------------------------------------------------------


class AsyncioScheduler:
    """Scheduler backed by an asyncio event loop.

    Parameters
    ----------
    loop:
        The loop acting as control thread.  Defaults to the running loop,
        so construct it from inside a coroutine when omitted.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop or asyncio.get_running_loop()

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        return self._loop

    def now(self) -> float:
        return self._loop.time()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> asyncio.Handle:
        return self._loop.call_soon_threadsafe(callback, *args)

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> asyncio.TimerHandle:
        return self._loop.call_later(delay, callback, *args)


# ---------------------------------------------------------------------------
# Virtual-clock backend
# ---------------------------------------------------------------------------


class ManualTask:
    """A callback queued on a ``ManualScheduler``."""

    __slots__ = ("when", "callback", "args", "cancelled")

    def __init__(self, when: float, callback: Callable[..., Any], args: tuple[Any, ...]) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True

    def __repr__(self) -> str:
        name = getattr(self.callback, "__qualname__", repr(self.callback))
        state = " cancelled" if self.cancelled else ""
        return f"<ManualTask {name} when={self.when:.3f}{state}>"


class ManualScheduler:
    """Deterministic scheduler whose clock only moves on ``advance()``.

    ``call_soon`` is thread-safe so futures resolved on worker threads can
    still marshal their results here; everything queued runs on whichever
    thread calls ``run_pending()`` or ``advance()``.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._lock = threading.Lock()
        self._ready: deque[ManualTask] = deque()
        self._timers: list[tuple[float, int, ManualTask]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> ManualTask:
        task = ManualTask(self._now, callback, args)
        with self._lock:
            self._ready.append(task)
        return task

    def call_later(
        self, delay: float, callback: Callable[..., Any], *args: Any
    ) -> ManualTask:
        task = ManualTask(self._now + max(delay, 0.0), callback, args)
        with self._lock:
            heapq.heappush(self._timers, (task.when, next(self._seq), task))
        return task

    @property
    def pending_timers(self) -> list[ManualTask]:
        """Armed, non-cancelled timers in firing order."""
        with self._lock:
            return [task for _, _, task in sorted(self._timers) if not task.cancelled]

    def run_pending(self) -> int:
        """Run every ready callback, including ones queued while draining.

        Returns the number of callbacks executed.
        """
        ran = 0
        while True:
            with self._lock:
                if not self._ready:
                    return ran
                task = self._ready.popleft()
            if task.cancelled:
                continue
            task.callback(*task.args)
            ran += 1

    def advance(self, seconds: float) -> int:
        """Move the clock forward, firing due timers in time order.

        Each timer runs with the clock set to its due time, and ready
        callbacks are drained after every timer.  Returns the number of
        callbacks executed.
        """
        target = self._now + seconds
        ran = self.run_pending()
        while True:
            with self._lock:
                if not self._timers or self._timers[0][0] > target:
                    break
                when, _, task = heapq.heappop(self._timers)
            if task.cancelled:
                continue
            self._now = max(self._now, when)
            task.callback(*task.args)
            ran += 1
            ran += self.run_pending()
        self._now = target
        return ran + self.run_pending()
