"""
Shared fixtures for reflex-user-table tests.
"""

import asyncio
from typing import Any

import httpx
import pytest
from fastapi.testclient import TestClient

from reflex_user_table.backend import UserStore, create_api
from reflex_user_table.client import UsersApiError, UsersPage
from reflex_user_table.config import Settings
from reflex_user_table.models import UserRecord
from reflex_user_table.session import UserTableSession


def make_user(index: int, **overrides: Any) -> dict[str, Any]:
    """A valid raw user record; *overrides* replace top-level keys."""
    user: dict[str, Any] = {
        "id": index + 1,
        "name": f"User {index}",
        "email": f"user{index}@example.com",
        "phone": "1-770-736-8031",
        "address": {"street": "Kulas Light", "city": "Gwenborough"},
        "company": {"name": "Romaguera-Crona"},
    }
    user.update(overrides)
    return user


def make_users(count: int) -> list[dict[str, Any]]:
    return [make_user(index) for index in range(count)]


def make_session(users: list[Any], **overrides: Any) -> UserTableSession:
    """A session whose client talks to an in-process API serving *users*."""
    settings = Settings(backend_url="http://testserver", debounce_ms=10, **overrides)
    transport = httpx.ASGITransport(app=create_api(UserStore(users)))
    return UserTableSession.from_settings(settings, transport=transport)


class FakeSource:
    """In-memory stand-in for ``UsersClient.fetch_users``.

    Serves slices of *users* and records every request.  Pages listed in
    ``fail_pages`` raise :class:`UsersApiError` once; when ``gate`` is set
    every fetch waits for it before answering.
    """

    def __init__(self, users: list[dict[str, Any]]) -> None:
        self.users = users
        self.calls: list[tuple[int, int]] = []
        self.fail_pages: set[int] = set()
        self.gate: asyncio.Event | None = None

    async def __call__(self, page: int, limit: int) -> UsersPage:
        self.calls.append((page, limit))
        if self.gate is not None:
            await self.gate.wait()
        if page in self.fail_pages:
            self.fail_pages.discard(page)
            raise UsersApiError("Failed to fetch users (HTTP 500)", status_code=500)
        start = (page - 1) * limit
        data = [UserRecord.from_dict(u) for u in self.users[start:start + limit]]
        return UsersPage(data=data, total=len(self.users), page=page, limit=limit)


@pytest.fixture
def users() -> list[dict[str, Any]]:
    return make_users(120)


@pytest.fixture
def store(users: list[dict[str, Any]]) -> UserStore:
    return UserStore(users)


@pytest.fixture
def api_client(store: UserStore) -> TestClient:
    return TestClient(create_api(store))


@pytest.fixture
def source(users: list[dict[str, Any]]) -> FakeSource:
    return FakeSource(users)
