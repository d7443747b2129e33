"""Product expiry domain dataclasses."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import StrEnum

UNAVAILABLE_EXPIRY_INFO = "Unavailable"

_FIRST_INTEGER = re.compile(r"\d+")


class ExpirySource(StrEnum):
    """Where a resolved answer came from."""

    CACHE = "cache"
    ORACLE = "oracle"
    ERROR = "error"


def parse_expiry_days(text: str | None) -> int | None:
    """Return the first integer found in ``text`` or ``None``."""
    if not text:
        return None
    match = _FIRST_INTEGER.search(text)
    if match is None:
        return None
    return int(match.group(0))


def compute_expiry_date(created: date, days: int | None) -> date | None:
    if days is None:
        return None
    return created + timedelta(days=days)


@dataclass(frozen=True, slots=True)
class ExpiryRecord:
    """Persisted expiry answer for one product name."""

    name: str
    expiry_info: str
    expiry_days: int | None
    expiry_date: date | None
    created_at: datetime | None = None

    @classmethod
    def from_oracle(cls, name: str, expiry_info: str, created_at: datetime) -> "ExpiryRecord":
        """Build a record whose expiry date counts from the day of ``created_at``."""
        days = parse_expiry_days(expiry_info)
        return cls(
            name=name,
            expiry_info=expiry_info,
            expiry_days=days,
            expiry_date=compute_expiry_date(created_at.date(), days),
            created_at=created_at,
        )


@dataclass(frozen=True, slots=True)
class ExpiryResolution:
    """Combined answer returned to HTTP clients."""

    product_name: str
    expiry_info: str
    expiry_days: int | None
    expiry_date: date | None
    image_url: str | None
    source: ExpirySource
