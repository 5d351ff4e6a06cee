"""Record models for the user table and column definitions for its header."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Literal

from reflex.components.props import PropsBase


@dataclass(frozen=True)
class Address:
    """The ``address`` block of a user record.

    Only ``city`` is read by the table; every other key is kept in
    ``extra`` so the record can be serialised back unchanged.
    """

    city: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "Address | None":
        """Build an address from a raw JSON value, or ``None`` if it is not an object."""
        if not isinstance(value, Mapping):
            return None
        data = dict(value)
        city = data.pop("city", None)
        return cls(city=city, extra=data)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        if self.city is not None:
            data["city"] = self.city
        return data


@dataclass(frozen=True)
class Company:
    """The ``company`` block of a user record."""

    name: Any = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_value(cls, value: Any) -> "Company | None":
        if not isinstance(value, Mapping):
            return None
        data = dict(value)
        name = data.pop("name", None)
        return cls(name=name, extra=data)

    def to_dict(self) -> dict[str, Any]:
        data = dict(self.extra)
        if self.name is not None:
            data["name"] = self.name
        return data


_RECORD_KEYS: frozenset[str] = frozenset({"name", "email", "phone", "address", "company"})


@dataclass(frozen=True)
class UserRecord:
    """A single user as served by ``GET /api/users``.

    Field values are kept exactly as received (they may be missing,
    empty or of the wrong type).  Deciding whether a value is usable is
    the job of :func:`reflex_user_table.validation.validate_user` and
    the display helpers in :mod:`reflex_user_table.formatting`, never of
    the model itself.
    """

    name: Any = None
    email: Any = None
    phone: Any = None
    address: Address | None = None
    company: Company | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, raw: Any) -> "UserRecord":
        """Build a record from one element of the endpoint's ``data`` array.

        An element that is not a JSON object (``null``, a number, a list)
        becomes an empty record, so it still renders as a row and fails
        every validation rule.
        """
        if not isinstance(raw, Mapping):
            return cls()
        return cls(
            name=raw.get("name"),
            email=raw.get("email"),
            phone=raw.get("phone"),
            address=Address.from_value(raw.get("address")),
            company=Company.from_value(raw.get("company")),
            extra={k: v for k, v in raw.items() if k not in _RECORD_KEYS},
        )

    @property
    def city(self) -> Any:
        return self.address.city if self.address is not None else None

    @property
    def company_name(self) -> Any:
        return self.company.name if self.company is not None else None

    def to_dict(self) -> dict[str, Any]:
        """Serialise back to the JSON shape the endpoint serves."""
        data: dict[str, Any] = dict(self.extra)
        for key in ("name", "email", "phone"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.address is not None:
            data["address"] = self.address.to_dict()
        if self.company is not None:
            data["company"] = self.company.to_dict()
        return data


class ColumnDef(PropsBase):
    """Header definition for one display column of the user table.

    Attributes are automatically converted from snake_case to camelCase
    when serialized to JavaScript props via PropsBase.
    """

    field: str
    header_name: str | None = None
    flex: int | None = None
    min_width: int | None = None
    align: Literal["left", "center", "right"] | None = None
    description: str | None = None
