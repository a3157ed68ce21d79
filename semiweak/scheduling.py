"""Deferred scheduling: run zero-argument callbacks at the next cooperative step.

The process-wide `scheduler` backs `semiweak_ref`. Nothing runs it on its
own: the host calls `run_pending()` (or `scheduler.step()`) from its main
loop, after each batch of work. Until then every new reference stays
UNINITIALIZED and keeps its target in a strong slot. Hosts running asyncio
can build their own `RefCache` over `AsyncioScheduler().defer` instead.
"""
import asyncio
import logging
from collections import deque

from .config import MAX_SCHEDULER_STEPS

logger = logging.getLogger(__name__)


class DeferredScheduler:
    """Single-threaded FIFO of deferred callbacks.

    `defer()` never runs the callback synchronously. `step()` drains only the
    callbacks queued before it started, so a callback that defers another one
    pushes it to the following step.
    """

    def __init__(self):
        self._queue = deque()

    @property
    def pending(self):
        return len(self._queue)

    def defer(self, callback):
        if not callable(callback):
            raise TypeError(f'deferred callback must be callable, got {callback!r}')
        self._queue.append(callback)

    def step(self):
        """Run the callbacks queued so far. Returns how many ran."""
        n = len(self._queue)
        for _ in range(n):
            callback = self._queue.popleft()
            try:
                callback()
            except Exception:
                logger.exception('deferred callback %r failed', callback)
        return n

    def run_pending(self, max_steps=MAX_SCHEDULER_STEPS):
        """Step until the queue is empty. Returns total callbacks run."""
        total = 0
        for _ in range(max_steps):
            if not self._queue:
                break
            total += self.step()
        else:
            if self._queue:
                logger.warning('scheduler still has %d callbacks after %d steps',
                               len(self._queue), max_steps)
        return total

    def clear(self):
        self._queue.clear()


class AsyncioScheduler:
    """Same `defer` contract on top of an asyncio event loop."""

    def __init__(self, loop=None):
        self._loop = loop

    @property
    def loop(self):
        if self._loop is None:
            return asyncio.get_running_loop()
        return self._loop

    def defer(self, callback):
        if not callable(callback):
            raise TypeError(f'deferred callback must be callable, got {callback!r}')
        self.loop.call_soon(callback)


# Process-wide default
scheduler = DeferredScheduler()
defer = scheduler.defer
run_pending = scheduler.run_pending
