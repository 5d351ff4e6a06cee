"""Async HTTP client for the paginated user endpoint."""

import logging
from dataclasses import dataclass
from typing import Any

import httpx

from reflex_user_table.models import UserRecord

logger = logging.getLogger(__name__)


class UsersApiError(Exception):
    """Raised when a page of users cannot be fetched or understood."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass(frozen=True)
class UsersPage:
    """One page of the ``GET /api/users`` response."""

    data: list[UserRecord]
    total: int
    page: int
    limit: int


class UsersClient:
    """Fetches pages from ``{base_url}/api/users`` with an ``httpx.AsyncClient``.

    The client owns its connection pool; call :meth:`aclose` (or use it
    as an async context manager) when the table is torn down.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def __aenter__(self) -> "UsersClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def closed(self) -> bool:
        return self._client.is_closed

    async def aclose(self) -> None:
        await self._client.aclose()

    async def fetch_users(self, page: int, limit: int) -> UsersPage:
        """Fetch one page of users.

        Raises:
            UsersApiError: On transport failures, non-2xx responses, or a
                body that is not a valid page object.
        """
        try:
            response = await self._client.get("/api/users", params={"page": page, "limit": limit})
        except httpx.HTTPError as exc:
            raise UsersApiError(f"Failed to fetch users: {exc}") from exc

        if not response.is_success:
            raise UsersApiError(
                _error_message(response),
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError as exc:
            raise UsersApiError("Failed to fetch users: response is not JSON") from exc
        return _parse_page(body, page=page, limit=limit)


def _error_message(response: httpx.Response) -> str:
    message = f"Failed to fetch users (HTTP {response.status_code})"
    try:
        body = response.json()
    except ValueError:
        return message
    if isinstance(body, dict) and isinstance(body.get("error"), str):
        return f"{message}: {body['error']}"
    return message


def _parse_page(body: Any, *, page: int, limit: int) -> UsersPage:
    if not isinstance(body, dict):
        raise UsersApiError("Failed to fetch users: response is not a JSON object")

    data = body.get("data")
    total = body.get("total")
    if not isinstance(data, list):
        raise UsersApiError("Failed to fetch users: response has no 'data' array")
    if not isinstance(total, int) or isinstance(total, bool) or total < 0:
        raise UsersApiError("Failed to fetch users: response has no valid 'total'")

    records = [UserRecord.from_dict(item) for item in data]
    logger.debug("Fetched page %d: %d records (total=%d)", page, len(records), total)
    return UsersPage(
        data=records,
        total=total,
        page=body.get("page", page),
        limit=body.get("limit", limit),
    )
