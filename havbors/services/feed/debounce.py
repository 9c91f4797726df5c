"""Quiet-period timer used to coalesce rapid search input."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Debouncer(Generic[T]):
    """Run ``callback`` with the last triggered value once input goes quiet.

    Every :meth:`trigger` cancels the pending timer (and the callback, if it is
    already running) before arming a new one, so a stale value is never
    dispatched after a newer one arrived.  :meth:`cancel` must be called when
    the owner goes away.
    """

    def __init__(self, delay: float, callback: Callable[[T], Awaitable[None]]) -> None:
        if delay < 0:
            raise ValueError("delay must be non-negative")
        self._delay = delay
        self._callback = callback
        self._task: asyncio.Task[None] | None = None

    @property
    def delay(self) -> float:
        return self._delay

    @property
    def pending(self) -> bool:
        return self._task is not None and not self._task.done()

    def trigger(self, value: T) -> None:
        self.cancel()
        self._task = asyncio.get_running_loop().create_task(self._fire(value))

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def wait(self) -> None:
        """Block until the armed timer and its callback have finished."""

        task = self._task
        if task is None:
            return
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    async def _fire(self, value: T) -> None:
        await asyncio.sleep(self._delay)
        logger.debug("Debounce window elapsed; dispatching %r", value)
        await self._callback(value)


__all__ = ["Debouncer"]
