"""Scroll-to-load bridge: turns scroll events into debounced ``load_more`` calls."""

import asyncio
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from reflex_user_table.debounce import Debouncer
from reflex_user_table.pagination import PaginationController

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_SECONDS: float = 0.2
DEFAULT_LOAD_THRESHOLD_PX: int = 200


@dataclass(frozen=True)
class ScrollMetrics:
    """Geometry of the scroll container at the time of a scroll event."""

    scroll_top: float
    client_height: float
    scroll_height: float

    @classmethod
    def from_event(cls, payload: Mapping[str, Any]) -> "ScrollMetrics":
        """Build metrics from the browser payload (``scrollTop``, ``clientHeight``, ``scrollHeight``)."""

        def number(key: str) -> float:
            value = payload.get(key, 0)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return 0.0
            return float(value)

        return cls(
            scroll_top=number("scrollTop"),
            client_height=number("clientHeight"),
            scroll_height=number("scrollHeight"),
        )

    def near_bottom(self, threshold: float) -> bool:
        """True when the viewport's bottom edge is within *threshold* px of the end.

        Metrics without a scrollable height (an empty or malformed event)
        are never near the bottom.
        """
        if self.scroll_height <= 0:
            return False
        return self.scroll_top + self.client_height >= self.scroll_height - threshold


class ScrollLoadBridge:
    """Watch scroll positions and load the next page near the bottom.

    Every scroll event restarts a *delay*-second timer; when it expires
    the last event's metrics are checked and, if the container is within
    *threshold* px of its end and the controller can load, the next page
    is requested.

    The bridge ignores events until :meth:`attach` and after
    :meth:`detach`; detaching also cancels a pending timer.
    """

    def __init__(
        self,
        controller: PaginationController,
        *,
        delay: float = DEFAULT_DEBOUNCE_SECONDS,
        threshold: float = DEFAULT_LOAD_THRESHOLD_PX,
    ) -> None:
        self._controller = controller
        self.threshold = threshold
        self._debouncer = Debouncer(delay, self._evaluate)
        self._attached = False
        self._load_task: asyncio.Task[bool] | None = None

    @property
    def attached(self) -> bool:
        return self._attached

    @property
    def pending(self) -> bool:
        return self._debouncer.pending

    def attach(self) -> None:
        self._attached = True

    def detach(self) -> None:
        self._attached = False
        self._debouncer.cancel()

    def on_scroll(self, metrics: ScrollMetrics) -> "asyncio.Future[asyncio.Task[bool] | None]":
        """Record a scroll event.

        Returns:
            A future resolving, once the debounce settles, to the
            ``load_more`` task this event started, or to ``None`` if the
            event was superseded, ignored, or did not qualify.
        """
        if not self._attached:
            ignored: asyncio.Future[asyncio.Task[bool] | None] = asyncio.get_running_loop().create_future()
            ignored.set_result(None)
            return ignored
        return self._debouncer.trigger(metrics)

    def _evaluate(self, metrics: ScrollMetrics) -> "asyncio.Task[bool] | None":
        controller = self._controller
        if not metrics.near_bottom(self.threshold):
            return None
        if not controller.has_more or controller.loading:
            return None
        logger.debug(
            "Near bottom (scroll_top=%.0f, client_height=%.0f, scroll_height=%.0f): loading more",
            metrics.scroll_top,
            metrics.client_height,
            metrics.scroll_height,
        )
        self._load_task = asyncio.get_running_loop().create_task(controller.load_more())
        return self._load_task
