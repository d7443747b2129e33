"""Daily sweep turning stored expiry dates into delivered alerts."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, timedelta

from ..products.products_models import ExpiryRecord
from ..products.products_repository import ProductRepository
from .notifications_models import (
    DispatchOutcome,
    ExpiryAlert,
    NotificationTarget,
    SweepReport,
    TargetKind,
)
from .notifications_senders import NotificationSender

logger = logging.getLogger(__name__)


def sweep_target_date(now: datetime) -> date:
    """Return the calendar day after ``now`` in the local timezone."""
    if now.tzinfo is not None:
        now = now.astimezone()
    return now.date() + timedelta(days=1)


class ExpirySweeper:
    """Notify every configured target about products expiring tomorrow.

    A firing is skipped while a previous one is still running, and a target
    date that was already swept is not swept again by the same instance.
    """

    def __init__(
        self,
        repo: ProductRepository,
        targets: Sequence[NotificationTarget],
        senders: Mapping[TargetKind, NotificationSender],
        *,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self._repo = repo
        self._targets = tuple(targets)
        self._senders = dict(senders)
        self._clock = clock
        self._lock = asyncio.Lock()
        self._last_swept: date | None = None

    @property
    def targets(self) -> tuple[NotificationTarget, ...]:
        return self._targets

    async def run_once(self, now: datetime | None = None) -> SweepReport:
        target_date = sweep_target_date(now or self._clock())
        if self._lock.locked():
            logger.warning(
                "sweep.skipped.running", extra={"target_date": target_date.isoformat()}
            )
            return SweepReport(target_date=target_date, skipped=True)

        async with self._lock:
            if self._last_swept == target_date:
                logger.info(
                    "sweep.skipped.already_done",
                    extra={"target_date": target_date.isoformat()},
                )
                return SweepReport(target_date=target_date, skipped=True)

            report = await self._sweep(target_date)
            self._last_swept = target_date
            return report

    async def _sweep(self, target_date: date) -> SweepReport:
        records = await asyncio.to_thread(self._repo.list_by_expiry_date, target_date)
        report = SweepReport(target_date=target_date, products=[r.name for r in records])
        if not records:
            logger.info("sweep.empty", extra={"target_date": target_date.isoformat()})
            return report

        dispatches = [
            self._dispatch(record, target, target_date)
            for record in records
            for target in self._targets
        ]
        report.outcomes.extend(await asyncio.gather(*dispatches))
        logger.info(
            "sweep.completed",
            extra={
                "target_date": target_date.isoformat(),
                "products": len(records),
                "delivered": report.delivered,
                "failed": report.failed,
            },
        )
        return report

    async def _dispatch(
        self, record: ExpiryRecord, target: NotificationTarget, expiry_date: date
    ) -> DispatchOutcome:
        alert = ExpiryAlert(product_name=record.name, expiry_date=expiry_date)
        sender = self._senders.get(target.kind)
        if sender is None:
            return self._failed(record, target, f"no sender registered for {target.kind}")
        try:
            await sender.send(target, alert)
        except Exception as exc:
            return self._failed(record, target, str(exc))
        return DispatchOutcome(
            product_name=record.name,
            target=target.describe(),
            kind=target.kind,
            delivered=True,
        )

    @staticmethod
    def _failed(
        record: ExpiryRecord, target: NotificationTarget, error: str
    ) -> DispatchOutcome:
        logger.warning(
            "sweep.dispatch.failed",
            extra={"product_name": record.name, "target": target.describe(), "error": error},
        )
        return DispatchOutcome(
            product_name=record.name,
            target=target.describe(),
            kind=target.kind,
            delivered=False,
            error=error,
        )
