"""Reflex state mixin and UI helpers for the scroll-loading user table.

Users inherit from :class:`UserTableMixin` **and** ``rx.State`` and render
with :func:`user_table`::

    from reflex_user_table import UserTableMixin, user_table, user_table_stats_bar

    class UsersState(UserTableMixin, rx.State):
        pass

    def index():
        return rx.box(user_table_stats_bar(UsersState), user_table(UsersState))

The table mounts a :class:`~reflex_user_table.session.UserTableSession`
that loads page 1 immediately.  Scroll events from the container move the
virtual window at once and, after the debounce settles near the bottom,
load the next page.  Only the rows inside the window are sent to the
browser; a spacer of ``len(records) * row_height`` px keeps the scrollbar
geometry.
"""

import dataclasses
import logging
from typing import Any

import reflex as rx
from reflex.components.el import Div

from reflex_user_table.config import get_settings
from reflex_user_table.formatting import COLUMNS
from reflex_user_table.models import ColumnDef
from reflex_user_table.scroll_bridge import ScrollMetrics
from reflex_user_table.session import UserTableSession

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Scroll container
# ---------------------------------------------------------------------------
# React scroll events carry the DOM node; only the three numbers the window
# and the load trigger need are sent to the Python backend.

def _arrow_callback(js_body: str) -> rx.Var:
    """Wrap *js_body* in an immediately-invoked arrow function."""
    return rx.Var(f"(() => {{{js_body}}})()")


def _on_scroll_spec(event: rx.Var) -> list[rx.Var]:
    return [
        _arrow_callback(
            f"const el = {event}.target; "
            "return {scrollTop: el.scrollTop, clientHeight: el.clientHeight, "
            "scrollHeight: el.scrollHeight}"
        )
    ]


class ScrollContainer(Div):
    """A ``<div>`` whose ``on_scroll`` forwards the container's scroll metrics."""

    on_scroll: rx.EventHandler[_on_scroll_spec]


# ---------------------------------------------------------------------------
# Session registry
# ---------------------------------------------------------------------------

@dataclasses.dataclass
class TableRow:
    """One materialised row as sent to the frontend."""

    index: int = 0
    top: float = 0.0
    name: str = ""
    email: str = ""
    phone: str = ""
    company_city: str = ""
    errors: list[str] = dataclasses.field(default_factory=list)
    even: bool = False


# Sessions hold an HTTP client, asyncio timers and tasks, none of which can
# live inside ``rx.State``.  Entries are added on mount and removed on
# unmount, or by ``_evict_idle_sessions`` when a tab never unmounted.
_session_registry: dict[str, UserTableSession] = {}

SESSION_EXPIRED_MESSAGE = "Table session expired. Press Retry to reload."


async def _evict_idle_sessions(max_idle: float) -> int:
    """Close and drop every registered session idle for over *max_idle* seconds."""
    stale = [key for key, session in _session_registry.items() if session.idle_seconds > max_idle]
    for key in stale:
        session = _session_registry.pop(key)
        await session.close()
    if stale:
        logger.info("Evicted %d idle user table session(s)", len(stale))
    return len(stale)


def table_vars(session: UserTableSession) -> dict[str, Any]:
    """The ``table_*`` state var values for *session*'s current window."""
    state = session.controller.state
    rendered = session.render()
    return {
        "table_rows": [TableRow(**row.to_dict()) for row in rendered.rows],
        "table_total_height": rendered.total_height,
        "table_loading": state.loading,
        "table_error": state.error or "",
        "table_has_more": state.has_more,
        "table_loaded_count": len(state.records),
        "table_total_count": state.total or 0,
        "table_warning_count": len(session.table.validation_errors),
    }


# ---------------------------------------------------------------------------
# UserTableMixin
# ---------------------------------------------------------------------------

class UserTableMixin(rx.State, mixin=True):
    """Reflex State mixin for the virtualised, scroll-loading user table.

    This is a Reflex **mixin** (``mixin=True``): every concrete subclass
    gets its own ``table_*`` vars, so several tables can share a page.
    Subclasses **must** also inherit from ``rx.State``::

        class UsersState(UserTableMixin, rx.State):
            ...
    """

    # -- Frontend state vars --
    table_rows: list[TableRow] = []
    table_total_height: float = 0.0
    table_loading: bool = False
    table_error: str = ""
    table_has_more: bool = True
    table_loaded_count: int = 0
    table_total_count: int = 0
    table_warning_count: int = 0

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    async def table_mount(self):
        """Create this client's session and load the first page.

        An async generator, so the loading state reaches the frontend
        before the request is sent.
        """
        settings = get_settings()
        key = self._table_session_key()
        stale = _session_registry.pop(key, None)
        if stale is not None:
            await stale.close()
        await _evict_idle_sessions(settings.session_idle_seconds)

        session = UserTableSession.from_settings(settings)
        _session_registry[key] = session
        self.table_loading = True  # type: ignore[assignment]
        self.table_error = ""  # type: ignore[assignment]
        yield

        await session.open()
        if not session.closed:
            self._sync_table(session)

    async def table_unmount(self) -> None:
        """Release the session: listener, timers, in-flight fetch and client."""
        session = _session_registry.pop(self._table_session_key(), None)
        if session is not None:
            await session.close()
        self.table_rows = []  # type: ignore[assignment]

    @rx.event(background=True)
    async def handle_table_scroll(self, metrics: dict[str, Any]):
        """Re-window immediately, then load more once the debounce settles."""
        async with self:
            session = _session_registry.get(self._table_session_key())
            if session is None or session.closed:
                if self.table_rows:
                    self.table_error = SESSION_EXPIRED_MESSAGE  # type: ignore[assignment]
                return
            pending = session.on_scroll(ScrollMetrics.from_event(metrics))
            self._sync_table(session)

        load = await pending
        if load is None:
            return

        async with self:
            self._sync_table(session)
        await load
        async with self:
            if not session.closed:
                self._sync_table(session)

    async def retry_table_load(self):
        """Explicit retry after a failed page load."""
        if self.table_loading:
            return
        session = _session_registry.get(self._table_session_key())
        if session is None or session.closed:
            yield type(self).table_mount
            return

        self.table_loading = True  # type: ignore[assignment]
        self.table_error = ""  # type: ignore[assignment]
        yield

        await session.controller.load_more()
        if not session.closed:
            self._sync_table(session)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _table_session_key(self) -> str:
        return f"{self.get_full_name()}:{self.router.session.client_token}"

    def _sync_table(self, session: UserTableSession) -> None:
        """Copy the session's pagination state and current window into vars."""
        for name, value in table_vars(session).items():
            setattr(self, name, value)


# ---------------------------------------------------------------------------
# UI helpers
# ---------------------------------------------------------------------------

def _column_props(column: ColumnDef) -> dict[str, Any]:
    return {
        "flex": f"{column.flex or 1} 1 0",
        "min_width": f"{column.min_width or 0}px",
        "padding": "0 0.75em",
        "overflow": "hidden",
    }


def _header_row() -> rx.Component:
    return rx.hstack(
        *[
            rx.box(
                rx.text(column.header_name or column.field, size="2", weight="bold"),
                title=column.description or column.header_name or column.field,
                **_column_props(column),
            )
            for column in COLUMNS
        ],
        align="center",
        spacing="0",
        width="100%",
        padding_y="0.6em",
        background="var(--gray-a3)",
        border_bottom="1px solid var(--gray-a6)",
    )


def _warning_block(row: rx.Var) -> rx.Component:
    return rx.box(
        rx.foreach(
            row.errors,  # type: ignore[attr-defined]
            lambda message: rx.hstack(
                rx.icon("triangle_alert", size=12, color="var(--red-9)"),
                rx.text(message, size="1", color="var(--red-11)"),
                align="center",
                spacing="1",
            ),
        ),
        padding="0.3em 0.75em",
        background="#ffe6e6",
        width="100%",
    )


def _table_row(row: rx.Var, row_height: int) -> rx.Component:
    cells = rx.hstack(
        *[
            rx.box(
                rx.text(getattr(row, column.field), size="2", truncate=True),
                **_column_props(column),
            )
            for column in COLUMNS
        ],
        align="center",
        spacing="0",
        width="100%",
        height=f"{row_height}px",
        background=rx.cond(row.even, "var(--gray-a2)", "transparent"),  # type: ignore[attr-defined]
    )
    return rx.box(
        cells,
        rx.cond(row.errors.length() > 0, _warning_block(row)),  # type: ignore[attr-defined]
        position="absolute",
        top=f"{row.top}px",  # type: ignore[attr-defined]
        left="0",
        width="100%",
    )


def user_table(
    state_cls: type,
    *,
    width: str = "100%",
    show_status: bool = True,
    **extra_props: Any,
) -> rx.Component:
    """Return the virtualised user table bound to a :class:`UserTableMixin` state.

    Row height and viewport height come from
    :class:`~reflex_user_table.config.Settings` so the rendered geometry
    matches the window the backend computes.

    Args:
        state_cls: The ``rx.State`` subclass that also inherits from
            :class:`UserTableMixin`.
        width: CSS width of the table.
        show_status: Show the loading / error / retry line below the table.
        **extra_props: Additional props forwarded to the scroll container.

    Returns:
        A Reflex component.
    """
    settings = get_settings()

    body = ScrollContainer.create(
        rx.box(
            rx.foreach(
                state_cls.table_rows,
                lambda row: _table_row(row, settings.row_height),
            ),
            position="relative",
            width="100%",
            height=f"{state_cls.table_total_height}px",
        ),
        on_scroll=state_cls.handle_table_scroll,
        on_mount=state_cls.table_mount,
        on_unmount=state_cls.table_unmount,
        height=f"{settings.viewport_height}px",
        overflow_y="auto",
        position="relative",
        width="100%",
        **extra_props,
    )

    table = rx.box(
        _header_row(),
        body,
        width=width,
        border="1px solid var(--gray-a6)",
        border_radius="8px",
        overflow="hidden",
    )
    if not show_status:
        return table

    return rx.fragment(table, user_table_status(state_cls))


def user_table_status(state_cls: type) -> rx.Component:
    """Return the loading / error line with a Retry button.

    Args:
        state_cls: The ``rx.State`` subclass that inherits from
            :class:`UserTableMixin`.

    Returns:
        A Reflex component.
    """
    return rx.box(
        rx.cond(
            state_cls.table_loading,
            rx.text("Loading...", text_align="center", color="var(--gray-9)"),
        ),
        rx.cond(
            state_cls.table_error != "",
            rx.hstack(
                rx.text(state_cls.table_error, color="red", size="2"),
                rx.button(
                    rx.icon("rotate_cw", size=14),
                    "Retry",
                    size="1",
                    variant="outline",
                    color_scheme="red",
                    on_click=state_cls.retry_table_load,
                ),
                justify="center",
                align="center",
                spacing="2",
            ),
        ),
        rx.cond(
            state_cls.table_has_more,
            rx.fragment(),
            rx.text("All users loaded.", size="1", text_align="center", color="var(--gray-9)"),
        ),
        margin_top="0.5em",
    )


def user_table_stats_bar(state_cls: type) -> rx.Component:
    """Return a stats bar showing loaded / total users and the warning count.

    Args:
        state_cls: The ``rx.State`` subclass that inherits from
            :class:`UserTableMixin`.

    Returns:
        A Reflex component.
    """
    return rx.box(
        rx.hstack(
            rx.text(
                state_cls.table_loaded_count.to(str),  # type: ignore[union-attr]
                " / ",
                state_cls.table_total_count.to(str),  # type: ignore[union-attr]
                " users loaded",
                size="2",
                weight="medium",
            ),
            rx.text("|", size="2", color="var(--gray-7)"),
            rx.text(
                state_cls.table_warning_count.to(str),  # type: ignore[union-attr]
                " with warnings",
                size="2",
                color="var(--orange-11)",
            ),
            spacing="2",
            align="center",
        ),
        padding="0.4em 0.8em",
        border_radius="6px",
        background="var(--blue-a2)",
        border="1px solid var(--blue-a5)",
        margin_bottom="0.5em",
    )
