"""Incremental page loading for the user table.

:class:`PaginationController` owns the accumulated records and the page
cursor, and exposes a single action, :meth:`PaginationController.load_more`.
It runs on one asyncio event loop: the guard flags are checked before the
only suspension point (the fetch), so at most one page is ever in flight
and pages are appended in request order.

Conceptual states per controller::

    Idle (loading=False, has_more=True) --load_more--> Fetching
    Fetching --success, pages left--> Idle
    Fetching --success, last page--> Exhausted   (terminal)
    Fetching --failure--> Idle (error recorded, retry allowed)
"""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from typing import Any

from reflex_user_table.client import UsersApiError, UsersPage
from reflex_user_table.models import UserRecord

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE: int = 50

FetchPage = Callable[[int, int], Awaitable[UsersPage]]
Listener = Callable[["PaginationState"], None]


@dataclass(frozen=True)
class PaginationState:
    """Immutable snapshot of the controller's state.

    ``version`` increases by one every time ``records`` grows; derived
    values (validation results, display cells) are cached against it.
    """

    records: tuple[UserRecord, ...] = ()
    next_page: int = 1
    has_more: bool = True
    loading: bool = False
    error: str | None = None
    total: int | None = None
    version: int = 0

    @property
    def phase(self) -> str:
        """``"fetching"``, ``"exhausted"`` or ``"idle"``."""
        if self.loading:
            return "fetching"
        if not self.has_more:
            return "exhausted"
        return "idle"


class PaginationController:
    """Loads pages of users on demand and accumulates them in order.

    Args:
        fetch_page: ``async (page, limit) -> UsersPage``, typically
            :meth:`reflex_user_table.client.UsersClient.fetch_users`.
        page_size: Number of records requested per page.
    """

    def __init__(self, fetch_page: FetchPage, *, page_size: int = DEFAULT_PAGE_SIZE) -> None:
        if page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {page_size}")
        self._fetch_page = fetch_page
        self.page_size = page_size
        self._state = PaginationState()
        self._listeners: list[Listener] = []
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------

    @property
    def state(self) -> PaginationState:
        return self._state

    @property
    def records(self) -> tuple[UserRecord, ...]:
        return self._state.records

    @property
    def has_more(self) -> bool:
        return self._state.has_more

    @property
    def loading(self) -> bool:
        return self._state.loading

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def total(self) -> int | None:
        return self._state.total

    @property
    def version(self) -> int:
        return self._state.version

    @property
    def closed(self) -> bool:
        return self._closed

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> bool:
        """Fetch the first page.  Must be called exactly once per controller."""
        if self._started:
            raise RuntimeError("PaginationController.start() called twice")
        self._started = True
        return await self.load_more()

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call *listener* with the new state after every change.

        Returns:
            A function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def close(self) -> None:
        """Tear down: drop listeners and ignore any fetch still in flight."""
        if self._closed:
            return
        self._closed = True
        self._listeners.clear()
        logger.debug("Pagination controller closed at page %d", self._state.next_page)

    # ------------------------------------------------------------------
    # Action
    # ------------------------------------------------------------------

    async def load_more(self) -> bool:
        """Fetch and append the next page.

        A no-op while a page is loading, after the last page, or after
        :meth:`close`.  A failed fetch records ``error`` and leaves the
        records and cursor untouched, so calling again retries the same
        page.

        Returns:
            ``True`` if a page was appended.
        """
        state = self._state
        if self._closed or state.loading or not state.has_more:
            return False

        page = state.next_page
        self._update(loading=True)
        logger.debug("Loading page %d (limit=%d)", page, self.page_size)

        outcome: dict[str, Any] = {}
        try:
            result = await self._fetch_page(page, self.page_size)
        except UsersApiError as exc:
            logger.warning("Loading page %d failed: %s", page, exc)
            outcome = {"error": str(exc)}
        else:
            records = self._state.records + tuple(result.data)
            outcome = {
                "records": records,
                "has_more": page * self.page_size < result.total,
                "next_page": page + 1,
                "error": None,
                "total": result.total,
                "version": self._state.version + 1,
            }
        finally:
            if self._closed:
                logger.debug("Discarding page %d: controller closed while loading", page)
            else:
                self._update(loading=False, **outcome)

        if self._closed or "records" not in outcome:
            return False
        logger.info(
            "Loaded page %d: +%d users, %d/%s loaded%s",
            page,
            len(outcome["records"]) - len(state.records),
            len(outcome["records"]),
            outcome["total"],
            "" if outcome["has_more"] else " (exhausted)",
        )
        return True

    def _update(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for listener in list(self._listeners):
            listener(self._state)
