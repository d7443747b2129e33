"""Data structures for the expiry notification sweep."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import StrEnum
from typing import Any


class TargetKind(StrEnum):
    """Delivery channels supported by notification senders."""

    EMAIL = "email"
    PUSH = "push"


@dataclass(frozen=True, slots=True)
class EmailTarget:
    address: str
    kind: TargetKind = TargetKind.EMAIL

    def describe(self) -> str:
        return self.address


@dataclass(frozen=True, slots=True)
class PushTarget:
    """Browser push subscription (endpoint plus encryption keys)."""

    endpoint: str
    p256dh: str
    auth: str
    kind: TargetKind = TargetKind.PUSH

    def describe(self) -> str:
        return self.endpoint

    def subscription_info(self) -> dict[str, Any]:
        return {"endpoint": self.endpoint, "keys": {"p256dh": self.p256dh, "auth": self.auth}}

    @classmethod
    def from_subscription(cls, payload: dict[str, Any]) -> "PushTarget":
        keys = payload.get("keys") or {}
        endpoint = payload.get("endpoint")
        if not endpoint or not keys.get("p256dh") or not keys.get("auth"):
            raise ValueError("push subscription requires endpoint, keys.p256dh and keys.auth")
        return cls(endpoint=str(endpoint), p256dh=str(keys["p256dh"]), auth=str(keys["auth"]))


NotificationTarget = EmailTarget | PushTarget


@dataclass(frozen=True, slots=True)
class ExpiryAlert:
    """Single alert about a product expiring on ``expiry_date``."""

    product_name: str
    expiry_date: date

    @property
    def title(self) -> str:
        return f"{self.product_name} expires tomorrow"

    @property
    def body(self) -> str:
        return (
            f"Reminder: your {self.product_name} is expected to expire on "
            f"{self.expiry_date.isoformat()}."
        )


@dataclass(frozen=True, slots=True)
class DispatchOutcome:
    product_name: str
    target: str
    kind: TargetKind
    delivered: bool
    error: str | None = None


@dataclass(slots=True)
class SweepReport:
    """Transient summary of one sweep run."""

    target_date: date
    products: list[str] = field(default_factory=list)
    outcomes: list[DispatchOutcome] = field(default_factory=list)
    skipped: bool = False

    @property
    def delivered(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.delivered)

    @property
    def failed(self) -> int:
        return sum(1 for outcome in self.outcomes if not outcome.delivered)
