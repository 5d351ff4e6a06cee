"""Trailing-edge debouncing on the asyncio event loop."""

import asyncio
from collections.abc import Callable
from typing import Any


class Debouncer:
    """Delay *callback* until calls to :meth:`trigger` stop for *delay* seconds.

    Each trigger cancels the pending timer and schedules a new one, so
    only the last call of a burst runs.  The debouncer owns its
    ``asyncio.TimerHandle``; :meth:`cancel` releases it.

    Args:
        delay: Quiet period in seconds.
        callback: Called with the arguments of the last trigger.
    """

    def __init__(self, delay: float, callback: Callable[..., Any]) -> None:
        if delay < 0:
            raise ValueError(f"delay must be >= 0, got {delay}")
        self.delay = delay
        self._callback = callback
        self._handle: asyncio.TimerHandle | None = None
        self._future: asyncio.Future[Any] | None = None

    @property
    def pending(self) -> bool:
        """True while a call is scheduled and has not fired yet."""
        return self._handle is not None

    def trigger(self, *args: Any) -> asyncio.Future[Any]:
        """Schedule *callback(*args)*, superseding any pending call.

        Must be called from a running event loop.

        Returns:
            A future resolving to the callback's return value when this
            call fires, or to ``None`` if a later trigger or
            :meth:`cancel` supersedes it.
        """
        loop = asyncio.get_running_loop()
        self.cancel()
        future: asyncio.Future[Any] = loop.create_future()
        self._future = future
        self._handle = loop.call_later(self.delay, self._fire, future, args)
        return future

    def cancel(self) -> None:
        """Drop the pending call, if any."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        if self._future is not None and not self._future.done():
            self._future.set_result(None)
        self._future = None

    def _fire(self, future: asyncio.Future[Any], args: tuple[Any, ...]) -> None:
        self._handle = None
        self._future = None
        if future.done():
            return
        try:
            result = self._callback(*args)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
