"""Display helpers: derived cell values and header definitions for the user table."""

import re
from collections.abc import Mapping
from typing import Any

from reflex_user_table.models import ColumnDef, UserRecord
from reflex_user_table.validation import as_record

MISSING = "N/A"
UNKNOWN_COMPANY = "Unknown Company"
UNKNOWN_CITY = "Unknown City"

_NON_DIGITS = re.compile(r"[^0-9]")

COLUMNS: list[ColumnDef] = [
    ColumnDef(field="name", header_name="Name", flex=1, min_width=120),
    ColumnDef(field="email", header_name="Email", flex=1, min_width=160),
    ColumnDef(field="phone", header_name="Phone", flex=1, min_width=130),
    ColumnDef(
        field="company_city",
        header_name="Company (City)",
        flex=2,
        min_width=200,
        description="Company name followed by the city from the address",
    ),
]


def format_phone(phone: str) -> str:
    """Reformat a free-form phone number as ``+1-XXX-XXX-XXXX``.

    Non-digit characters are stripped before grouping, and only the first
    ten digits are used.  Values with fewer than ten digits are returned
    unchanged.

    Examples:
        ``"1234567890"`` -> ``"+1-123-456-7890"``
        ``"(555) 010-9999 x12"`` -> ``"+1-555-010-9999"``
        ``"12345"`` -> ``"12345"``
    """
    digits = _NON_DIGITS.sub("", phone)
    if len(digits) >= 10:
        return f"+1-{digits[0:3]}-{digits[3:6]}-{digits[6:10]}"
    return phone


def _text(value: Any, fallback: str) -> str:
    if value is None:
        return fallback
    return value if isinstance(value, str) else str(value)


def display_cells(record: UserRecord | Mapping[str, Any]) -> dict[str, str]:
    """Derive the four display columns of a row, keyed by ``ColumnDef.field``."""
    user = as_record(record)
    phone = format_phone(_text(user.phone, "")) if user.phone else MISSING
    company = _text(user.company_name, UNKNOWN_COMPANY)
    city = _text(user.city, UNKNOWN_CITY)
    return {
        "name": _text(user.name, MISSING),
        "email": _text(user.email, MISSING),
        "phone": phone,
        "company_city": f"{company} ({city})",
    }
