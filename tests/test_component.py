"""
Tests for the state var mapping and session registry behind UserTableMixin.
"""

import pytest

from reflex_user_table import component
from reflex_user_table.component import TableRow, _evict_idle_sessions, table_vars
from reflex_user_table.scroll_bridge import ScrollMetrics
from reflex_user_table.validation import INVALID_EMAIL

from conftest import make_session, make_user, make_users


@pytest.fixture
def registry():
    """The module-level session registry, emptied around each test."""
    component._session_registry.clear()
    yield component._session_registry
    component._session_registry.clear()


class TestTableVars:
    """Values copied into the ``table_*`` state vars."""

    @pytest.mark.asyncio
    async def test_after_first_page(self):
        users = make_users(120)
        users[1] = make_user(1, email="broken")
        session = make_session(users, page_size=50, viewport_height=600, overscan=10)
        await session.open()

        values = table_vars(session)
        assert set(values) == {
            "table_rows",
            "table_total_height",
            "table_loading",
            "table_error",
            "table_has_more",
            "table_loaded_count",
            "table_total_count",
            "table_warning_count",
        }
        assert values["table_total_height"] == 50 * 50
        assert values["table_loading"] is False
        assert values["table_error"] == ""
        assert values["table_has_more"] is True
        assert values["table_loaded_count"] == 50
        assert values["table_total_count"] == 120
        assert values["table_warning_count"] == 1

        rows = values["table_rows"]
        assert [row.index for row in rows] == list(range(0, 22))
        assert rows[1] == TableRow(
            index=1,
            top=50,
            name="User 1",
            email="broken",
            phone="+1-177-073-6803",
            company_city="Romaguera-Crona (Gwenborough)",
            errors=[INVALID_EMAIL],
            even=False,
        )
        await session.close()

    @pytest.mark.asyncio
    async def test_follows_scroll_position(self):
        session = make_session(make_users(120), page_size=50)
        await session.open()
        session.on_scroll(ScrollMetrics(scroll_top=1000, client_height=300, scroll_height=2500))
        rows = table_vars(session)["table_rows"]
        assert (rows[0].index, rows[-1].index) == (10, 35)
        await session.close()

    @pytest.mark.asyncio
    async def test_before_any_page(self):
        session = make_session(make_users(3))
        values = table_vars(session)
        assert values["table_rows"] == []
        assert values["table_total_height"] == 0
        assert values["table_total_count"] == 0
        assert values["table_has_more"] is True
        await session.close()


class TestEvictIdleSessions:
    """Sessions of tabs that never unmounted are closed on a later mount."""

    @pytest.mark.asyncio
    async def test_idle_sessions_are_closed_and_removed(self, registry):
        idle = make_session(make_users(3))
        active = make_session(make_users(3))
        idle.last_active -= 3600
        registry["UsersState:gone-tab"] = idle
        registry["UsersState:open-tab"] = active

        assert await _evict_idle_sessions(1800) == 1
        assert list(registry) == ["UsersState:open-tab"]
        assert idle.closed
        assert idle.client.closed
        assert not active.closed
        await active.close()

    @pytest.mark.asyncio
    async def test_nothing_to_evict(self, registry):
        session = make_session(make_users(3))
        registry["UsersState:tab"] = session
        assert await _evict_idle_sessions(1800) == 0
        assert registry["UsersState:tab"] is session
        await session.close()
