"""One mounted user table: client, controller, scroll bridge and renderer."""

import asyncio
import logging
import time

import httpx

from reflex_user_table.client import UsersClient
from reflex_user_table.config import Settings
from reflex_user_table.pagination import PaginationController
from reflex_user_table.scroll_bridge import ScrollLoadBridge, ScrollMetrics
from reflex_user_table.virtual_table import RenderedTable, VirtualTable

logger = logging.getLogger(__name__)


class UserTableSession:
    """Everything a mounted table owns, created on mount and released on unmount.

    :meth:`open` attaches the scroll listener and loads the first page;
    :meth:`close` detaches it, cancels any pending debounce, discards a
    fetch still in flight and closes the HTTP client.
    """

    def __init__(
        self,
        client: UsersClient,
        *,
        page_size: int = 50,
        row_height: float = 50,
        viewport_height: float = 600,
        overscan: int = 10,
        debounce_seconds: float = 0.2,
        load_threshold: float = 200,
    ) -> None:
        self.client = client
        self.controller = PaginationController(client.fetch_users, page_size=page_size)
        self.table = VirtualTable(
            self.controller,
            row_height=row_height,
            viewport_height=viewport_height,
            overscan=overscan,
        )
        self.bridge = ScrollLoadBridge(
            self.controller,
            delay=debounce_seconds,
            threshold=load_threshold,
        )
        self.scroll_offset = 0.0
        self.viewport_height = viewport_height
        self.last_active = time.monotonic()
        self._closed = False

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> "UserTableSession":
        client = UsersClient(
            settings.backend_url,
            timeout=settings.request_timeout,
            transport=transport,
        )
        return cls(
            client,
            page_size=settings.page_size,
            row_height=settings.row_height,
            viewport_height=settings.viewport_height,
            overscan=settings.overscan,
            debounce_seconds=settings.debounce_seconds,
            load_threshold=settings.load_threshold_px,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def idle_seconds(self) -> float:
        """Seconds since the session was last opened, scrolled or rendered."""
        return time.monotonic() - self.last_active

    def touch(self) -> None:
        self.last_active = time.monotonic()

    async def open(self) -> bool:
        """Attach the scroll listener and load page 1."""
        if self._closed:
            raise RuntimeError("Cannot open a closed UserTableSession")
        self.touch()
        self.bridge.attach()
        return await self.controller.start()

    def on_scroll(self, metrics: ScrollMetrics) -> "asyncio.Future[asyncio.Task[bool] | None]":
        """Move the window to *metrics* and pass the event on to the bridge."""
        self.touch()
        self.scroll_offset = metrics.scroll_top
        if metrics.client_height > 0:
            self.viewport_height = metrics.client_height
        return self.bridge.on_scroll(metrics)

    def render(self) -> RenderedTable:
        self.touch()
        return self.table.render(self.scroll_offset, self.viewport_height)

    async def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self.bridge.detach()
        self.controller.close()
        await self.client.aclose()
        logger.debug("User table session closed with %d records loaded", len(self.controller.records))
