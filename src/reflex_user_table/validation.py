"""Per-row validation for user records.

Validation problems are never fatal: a record with errors is still
rendered, with its messages shown in a warning block below the row.
"""

import re
from collections.abc import Iterable, Mapping
from typing import Any

from reflex_user_table.models import UserRecord

INVALID_NAME = "Invalid or missing name"
INVALID_EMAIL = "Invalid or missing email"
INVALID_CITY = "Missing or invalid city in address"
INVALID_COMPANY = "Missing or invalid company name"

ValidationResult = dict[int, list[str]]

_ALL_DIGITS = re.compile(r"[0-9]+")


def _is_text(value: Any) -> bool:
    """True for a non-empty ``str``."""
    return isinstance(value, str) and value != ""


def as_record(record: UserRecord | Mapping[str, Any]) -> UserRecord:
    """Accept either a :class:`UserRecord` or its raw JSON mapping."""
    if isinstance(record, UserRecord):
        return record
    return UserRecord.from_dict(record)


def validate_user(record: UserRecord | Mapping[str, Any]) -> list[str]:
    """Return every validation problem of *record*, in rule order.

    All rules are checked independently, so a record can collect up to
    four messages.  An empty list means the record is valid.
    """
    user = as_record(record)
    errors: list[str] = []

    if not _is_text(user.name) or _ALL_DIGITS.fullmatch(user.name.strip()):
        errors.append(INVALID_NAME)

    if not _is_text(user.email) or "@" not in user.email:
        errors.append(INVALID_EMAIL)

    if not _is_text(user.city):
        errors.append(INVALID_CITY)

    if not _is_text(user.company_name):
        errors.append(INVALID_COMPANY)

    return errors


def validate_users(
    records: Iterable[UserRecord | Mapping[str, Any]],
    *,
    start: int = 0,
) -> ValidationResult:
    """Validate a run of records and map each invalid one to its errors.

    Args:
        records: Records in table order.
        start: Table index of the first record, so a freshly appended
            page can be validated on its own.

    Returns:
        ``{index: errors}`` for invalid records only.
    """
    result: ValidationResult = {}
    for index, record in enumerate(records, start=start):
        errors = validate_user(record)
        if errors:
            result[index] = errors
    return result
