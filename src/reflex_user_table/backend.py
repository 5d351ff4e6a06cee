"""Paginated read-only user endpoint.

The dataset is a JSON array loaded once from disk into a
:class:`UserStore`; :func:`create_api` exposes it as::

    GET /api/users?page=<p>&limit=<l>
    -> {"data": [...], "total": <int>, "page": <p>, "limit": <l>}

Records are served exactly as stored, including malformed ones; the
table flags those with per-row warnings instead of the API rejecting
them.

The returned FastAPI app can be served on its own (``reflex-user-table
serve``) or handed to ``rx.App(api_transformer=...)`` so it shares the
Reflex backend.
"""

import json
import logging
import re
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

logger = logging.getLogger(__name__)

INVALID_PARAMS_MESSAGE = "Invalid page or limit query parameters"
GREETING = "Hello from paginated user API!"

_INTEGER = re.compile(r"[+-]?[0-9]+")


class UserStore:
    """Immutable in-memory list of raw user records."""

    def __init__(self, records: Sequence[Any]) -> None:
        self._records: tuple[Any, ...] = tuple(records)

    @classmethod
    def from_path(cls, path: Path) -> "UserStore":
        """Load a JSON array of user objects from *path*.

        Raises:
            FileNotFoundError: If *path* does not exist.
            ValueError: If the file is not valid JSON or not a JSON array.
        """
        path = Path(path).resolve()
        if not path.exists():
            raise FileNotFoundError(f"Users file not found: {path}")
        try:
            records = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise ValueError(f"Users file is not valid JSON: {path} ({exc})") from exc
        if not isinstance(records, list):
            raise ValueError(
                f"Users file must contain a JSON array, got {type(records).__name__}: {path}"
            )
        logger.info("Loaded %d users from %s", len(records), path)
        return cls(records)

    @property
    def records(self) -> tuple[Any, ...]:
        return self._records

    @property
    def total(self) -> int:
        return len(self._records)

    def __len__(self) -> int:
        return len(self._records)

    def page(self, page: int, limit: int) -> list[Any]:
        """Return the half-open slice ``[(page-1)*limit, (page-1)*limit + limit)``."""
        if page < 1 or limit < 1:
            raise ValueError(f"page and limit must be >= 1, got page={page}, limit={limit}")
        start = (page - 1) * limit
        return list(self._records[start:start + limit])


def parse_positive_int(value: str | None) -> int | None:
    """Parse a query-string integer, returning ``None`` unless it is >= 1."""
    if value is None:
        return None
    text = value.strip()
    if not _INTEGER.fullmatch(text):
        return None
    try:
        number = int(text)
    except ValueError:
        # Beyond the interpreter's int/str digit limit.
        return None
    return number if number >= 1 else None


def create_api(store: UserStore, *, cors_origins: Sequence[str] = ("*",)) -> FastAPI:
    """Build the FastAPI app serving *store*.

    Args:
        store: The dataset to serve.
        cors_origins: Origins allowed to call the API from a browser.

    Returns:
        A FastAPI application with ``GET /`` and ``GET /api/users``.
    """
    api = FastAPI(title="reflex-user-table data source")
    api.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    api.state.user_store = store

    @api.get("/", response_class=PlainTextResponse)
    def root() -> str:
        return GREETING

    @api.get("/api/users", response_model=None)
    def list_users(page: str | None = None, limit: str | None = None) -> dict[str, Any] | JSONResponse:
        page_number = parse_positive_int(page)
        page_size = parse_positive_int(limit)
        if page_number is None or page_size is None:
            logger.info("Rejected /api/users request: page=%r limit=%r", page, limit)
            return JSONResponse(status_code=400, content={"error": INVALID_PARAMS_MESSAGE})

        return {
            "data": store.page(page_number, page_size),
            "total": store.total,
            "page": page_number,
            "limit": page_size,
        }

    return api
