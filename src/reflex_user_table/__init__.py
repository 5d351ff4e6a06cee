"""reflex-user-table – infinitely scrolling, virtualised user table for Reflex.

The backend serves a JSON array of users through a paginated endpoint::

    GET /api/users?page=1&limit=50

and the frontend renders it as a windowed table that loads the next page
as the user scrolls near the bottom, showing per-row validation warnings
inline::

    pip install reflex-user-table
    reflex-user-table view users.json
"""

from reflex_user_table.backend import UserStore, create_api
from reflex_user_table.client import UsersApiError, UsersClient, UsersPage
from reflex_user_table.component import (
    ScrollContainer,
    TableRow,
    UserTableMixin,
    user_table,
    user_table_stats_bar,
    user_table_status,
)
from reflex_user_table.config import Settings, get_settings
from reflex_user_table.debounce import Debouncer
from reflex_user_table.formatting import COLUMNS, display_cells, format_phone
from reflex_user_table.models import Address, ColumnDef, Company, UserRecord
from reflex_user_table.pagination import PaginationController, PaginationState
from reflex_user_table.report import error_counts, validation_report, write_report
from reflex_user_table.scroll_bridge import ScrollLoadBridge, ScrollMetrics
from reflex_user_table.session import UserTableSession
from reflex_user_table.validation import validate_user, validate_users
from reflex_user_table.virtual_table import (
    RenderedRow,
    RenderedTable,
    VirtualTable,
    VirtualWindow,
    compute_window,
)
