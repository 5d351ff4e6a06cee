"""
Tests for incremental page loading.
"""

import asyncio

import pytest

from reflex_user_table.client import UsersApiError
from reflex_user_table.pagination import PaginationController, PaginationState

from conftest import FakeSource, make_users


class TestPaginationState:
    def test_initial(self):
        state = PaginationState()
        assert state.records == ()
        assert state.next_page == 1
        assert state.has_more is True
        assert state.loading is False
        assert state.error is None
        assert state.phase == "idle"

    def test_phases(self):
        assert PaginationState(loading=True).phase == "fetching"
        assert PaginationState(has_more=False).phase == "exhausted"


class TestLoadMore:
    """Pages are appended in order until the dataset is exhausted."""

    def test_page_size_must_be_positive(self, source):
        with pytest.raises(ValueError):
            PaginationController(source, page_size=0)

    @pytest.mark.asyncio
    async def test_full_scroll_of_120_records(self, source, users):
        controller = PaginationController(source, page_size=50)

        assert await controller.start() is True
        assert len(controller.records) == 50
        assert controller.has_more

        assert await controller.load_more() is True
        assert len(controller.records) == 100
        assert controller.has_more

        assert await controller.load_more() is True
        assert len(controller.records) == 120
        assert not controller.has_more
        assert controller.state.phase == "exhausted"

        assert await controller.load_more() is False
        assert source.calls == [(1, 50), (2, 50), (3, 50)]
        assert [r.name for r in controller.records] == [u["name"] for u in users]
        assert controller.total == 120

    @pytest.mark.asyncio
    async def test_exact_multiple_of_page_size(self):
        source = FakeSource(make_users(100))
        controller = PaginationController(source, page_size=50)
        await controller.start()
        await controller.load_more()
        assert len(controller.records) == 100
        assert not controller.has_more
        assert await controller.load_more() is False
        assert len(source.calls) == 2

    @pytest.mark.asyncio
    async def test_empty_dataset(self):
        source = FakeSource([])
        controller = PaginationController(source, page_size=50)
        assert await controller.start() is True
        assert controller.records == ()
        assert not controller.has_more
        assert controller.total == 0

    @pytest.mark.asyncio
    async def test_version_increments_per_page(self, source):
        controller = PaginationController(source, page_size=50)
        assert controller.version == 0
        await controller.start()
        assert controller.version == 1
        await controller.load_more()
        assert controller.version == 2

    @pytest.mark.asyncio
    async def test_concurrent_calls_issue_one_request(self, source):
        source.gate = asyncio.Event()
        controller = PaginationController(source, page_size=50)

        first = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        assert controller.loading
        assert await controller.load_more() is False
        assert await controller.load_more() is False

        source.gate.set()
        assert await first is True
        assert source.calls == [(1, 50)]
        assert len(controller.records) == 50
        assert not controller.loading

    @pytest.mark.asyncio
    async def test_start_twice_raises(self, source):
        controller = PaginationController(source, page_size=50)
        await controller.start()
        with pytest.raises(RuntimeError):
            await controller.start()


class TestErrors:
    """A failed page records the error and can be retried."""

    @pytest.mark.asyncio
    async def test_failure_leaves_records_and_cursor(self, source):
        controller = PaginationController(source, page_size=50)
        await controller.start()
        source.fail_pages.add(2)

        assert await controller.load_more() is False
        assert controller.error == "Failed to fetch users (HTTP 500)"
        assert len(controller.records) == 50
        assert controller.state.next_page == 2
        assert controller.has_more
        assert not controller.loading

    @pytest.mark.asyncio
    async def test_retry_requests_same_page_and_clears_error(self, source):
        controller = PaginationController(source, page_size=50)
        source.fail_pages.add(1)

        assert await controller.start() is False
        assert controller.error is not None
        assert controller.records == ()

        assert await controller.load_more() is True
        assert controller.error is None
        assert len(controller.records) == 50
        assert source.calls == [(1, 50), (1, 50)]

    @pytest.mark.asyncio
    async def test_unexpected_exception_propagates_and_resets_loading(self):
        async def broken(page, limit):
            raise RuntimeError("bug")

        controller = PaginationController(broken, page_size=10)
        with pytest.raises(RuntimeError):
            await controller.load_more()
        assert not controller.loading


class TestLifecycle:
    """Listeners and teardown."""

    @pytest.mark.asyncio
    async def test_listener_sees_loading_transitions(self, source):
        controller = PaginationController(source, page_size=50)
        seen = []
        controller.subscribe(lambda state: seen.append((state.loading, len(state.records))))
        await controller.start()
        assert seen == [(True, 0), (False, 50)]

    @pytest.mark.asyncio
    async def test_unsubscribe(self, source):
        controller = PaginationController(source, page_size=50)
        seen = []
        unsubscribe = controller.subscribe(seen.append)
        unsubscribe()
        unsubscribe()
        await controller.start()
        assert seen == []

    @pytest.mark.asyncio
    async def test_close_discards_in_flight_page(self, source):
        source.gate = asyncio.Event()
        controller = PaginationController(source, page_size=50)
        seen = []
        controller.subscribe(seen.append)

        task = asyncio.create_task(controller.start())
        await asyncio.sleep(0)
        controller.close()
        source.gate.set()

        assert await task is False
        assert controller.records == ()
        assert controller.closed
        assert len(seen) == 1

    @pytest.mark.asyncio
    async def test_closed_controller_does_not_fetch(self, source):
        controller = PaginationController(source, page_size=50)
        controller.close()
        assert await controller.load_more() is False
        assert source.calls == []

    @pytest.mark.asyncio
    async def test_close_discards_failure(self, source):
        source.gate = asyncio.Event()
        source.fail_pages.add(1)
        controller = PaginationController(source, page_size=50)

        task = asyncio.create_task(controller.load_more())
        await asyncio.sleep(0)
        controller.close()
        source.gate.set()

        assert await task is False
        assert controller.error is None


def test_users_api_error_keeps_status():
    assert UsersApiError("x", status_code=503).status_code == 503
