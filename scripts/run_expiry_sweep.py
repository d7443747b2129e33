"""Cron entry point for running one expiry notification sweep now.

The "already swept" guard lives in each sweeper instance, so it does not
span processes. Running this script while the API server has its daily
sweep enabled sends a second round of alerts for the same date; set
``SWEEP_ENABLED=false`` on the server when scheduling sweeps from cron.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from dataclasses import dataclass
from datetime import datetime

from src.expiry_tracker.config import load_config
from src.expiry_tracker.dependencies import build_sweeper
from src.expiry_tracker.logging import configure_logging
from src.expiry_tracker.notifications.notifications_service import sweep_target_date
from src.expiry_tracker.products.products_repository import ProductRepository


@dataclass(slots=True)
class SweepSummary:
    target_date: str
    products: list[str]
    delivered: int
    failed: int
    dry_run: bool


def perform_sweep(*, dry_run: bool, reference_time: datetime | None = None) -> SweepSummary:
    """Run the sweep (or only list matching products) and return counters."""
    config = load_config()
    repo = ProductRepository(config.session_factory)
    now = reference_time or datetime.now()

    if dry_run:
        target_date = sweep_target_date(now)
        records = repo.list_by_expiry_date(target_date)
        return SweepSummary(
            target_date=target_date.isoformat(),
            products=[record.name for record in records],
            delivered=0,
            failed=0,
            dry_run=True,
        )

    sweeper = build_sweeper(config, repo)
    report = asyncio.run(sweeper.run_once(now))
    return SweepSummary(
        target_date=report.target_date.isoformat(),
        products=report.products,
        delivered=report.delivered,
        failed=report.failed,
        dry_run=False,
    )


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Send alerts for products expiring tomorrow.",
        epilog=(
            "Not deduplicated against the API server's in-app sweep: disable it "
            "with SWEEP_ENABLED=false when running this from cron."
        ),
    )
    parser.add_argument(
        "--dry-run", action="store_true", help="Only list matching products without sending."
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv or [])
    configure_logging()
    try:
        summary = perform_sweep(dry_run=args.dry_run)
    except Exception as exc:
        print(f"sweep failed: {exc}", file=sys.stderr)
        return 2

    products = ", ".join(summary.products) or "-"
    if summary.dry_run:
        print(f"sweep dry-run, target_date={summary.target_date}, products={products}", file=sys.stdout)
    else:
        print(
            f"sweep done, target_date={summary.target_date}, products={products}, "
            f"delivered={summary.delivered}, failed={summary.failed}",
            file=sys.stdout,
        )
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
