"""Example Reflex app demonstrating the scroll-loading user table.

The paginated ``GET /api/users`` endpoint is mounted on the Reflex
backend itself (``api_transformer``), so one ``reflex run`` serves both
the data and the table.  Generate sample data first::

    uv run demo generate-users
"""

from pathlib import Path

import reflex as rx

from reflex_user_table import (
    UserStore,
    UserTableMixin,
    create_api,
    get_settings,
    user_table,
    user_table_stats_bar,
)

USERS_PATH: Path = Path(__file__).parent / "data" / "users.json"


def _load_store() -> UserStore:
    """Load the sample users, or serve an empty list until they are generated."""
    if USERS_PATH.exists():
        return UserStore.from_path(USERS_PATH)
    return UserStore([])


# ---------------------------------------------------------------------------
# State
# ---------------------------------------------------------------------------

class UsersState(UserTableMixin, rx.State):
    """Application state; all table vars and handlers come from the mixin."""

    users_available: bool = False

    def check_data(self) -> None:
        self.users_available = USERS_PATH.exists()


# ---------------------------------------------------------------------------
# UI components
# ---------------------------------------------------------------------------

def _generate_box() -> rx.Component:
    """Instructions shown when the sample users file is missing."""
    return rx.box(
        rx.text("Sample users not generated yet.", weight="bold"),
        rx.text(
            "Run ",
            rx.code("uv run demo generate-users"),
            " to write ",
            rx.code("data/users.json"),
            ", then restart the app.",
        ),
        padding="1.5em",
        border_radius="8px",
        background="var(--amber-3)",
        border="1px solid var(--amber-7)",
    )


def index() -> rx.Component:
    """Render the main page."""
    settings = get_settings()
    return rx.box(
        rx.heading("User Table -- Reflex Demo", size="6", margin_bottom="0.5em"),
        rx.text(
            f"Users are fetched {settings.page_size} at a time from ",
            rx.code("/api/users"),
            " as you scroll near the bottom. Only the rows around the viewport "
            "are rendered; rows with invalid data show their warnings inline.",
            margin_bottom="1em",
            color="var(--gray-11)",
        ),
        rx.cond(
            UsersState.users_available,
            rx.fragment(
                user_table_stats_bar(UsersState),
                user_table(UsersState),
            ),
            _generate_box(),
        ),
        padding="2em",
        max_width="1200px",
        margin="0 auto",
    )


app = rx.App(api_transformer=create_api(_load_store(), cors_origins=get_settings().cors_origins))
app.add_page(index, on_load=UsersState.check_data)
