"""Domain service resolving product expiry answers."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..exceptions import DuplicateProductError
from ..providers.providers_base import ExpiryOracle, ImageFinder, ImageLookup
from .products_errors import OracleUnavailableError, ProductNameRequiredError
from .products_models import (
    UNAVAILABLE_EXPIRY_INFO,
    ExpiryRecord,
    ExpiryResolution,
    ExpirySource,
)
from .products_repository import ProductRepository

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ExpiryResolver:
    """Cache-first expiry lookup with oracle fallback and image enrichment.

    Image enrichment starts before the store lookup and is joined last, so the
    browser round-trip overlaps with the store/oracle path. Oracle failures are
    answered with a placeholder and are not persisted, which lets a later
    request try the oracle again. Cached records are served unchanged, even
    when their text carried no day count.
    """

    repo: ProductRepository
    oracle: ExpiryOracle
    image_finder: ImageFinder
    now: Callable[[], datetime] = field(default=datetime.now)
    log: logging.Logger = field(default_factory=lambda: logger)

    async def resolve_expiry(self, product_name: str) -> ExpiryResolution:
        name = (product_name or "").strip()
        if not name:
            raise ProductNameRequiredError("Product name is required")

        image_task = asyncio.create_task(
            self._find_image(name), name=f"image-enrichment:{name}"
        )
        try:
            record, source = await self._lookup_or_infer(name)
        except BaseException:
            image_task.cancel()
            raise

        lookup = await image_task
        if record is None:
            return ExpiryResolution(
                product_name=name,
                expiry_info=UNAVAILABLE_EXPIRY_INFO,
                expiry_days=None,
                expiry_date=None,
                image_url=lookup.image_url,
                source=ExpirySource.ERROR,
            )
        return ExpiryResolution(
            product_name=name,
            expiry_info=record.expiry_info,
            expiry_days=record.expiry_days,
            expiry_date=record.expiry_date,
            image_url=lookup.image_url,
            source=source,
        )

    async def _lookup_or_infer(
        self, name: str
    ) -> tuple[ExpiryRecord | None, ExpirySource]:
        cached = await asyncio.to_thread(self.repo.get, name)
        if cached is not None:
            self.log.info("expiry.resolve.cache_hit", extra={"product_name": name})
            return cached, ExpirySource.CACHE

        try:
            expiry_info = await self.oracle.estimate(name)
        except OracleUnavailableError as exc:
            self.log.warning(
                "expiry.resolve.oracle_unavailable",
                extra={"product_name": name, "error": str(exc)},
            )
            return None, ExpirySource.ERROR

        record = ExpiryRecord.from_oracle(name, expiry_info, self.now())
        if record.expiry_days is None:
            self.log.info(
                "expiry.resolve.unparsed",
                extra={"product_name": name, "expiry_info": expiry_info},
            )

        try:
            stored = await asyncio.to_thread(self.repo.put, record)
        except DuplicateProductError:
            # A concurrent resolution inserted the same name first.
            existing = await asyncio.to_thread(self.repo.get, name)
            if existing is None:
                raise
            self.log.info("expiry.resolve.insert_race", extra={"product_name": name})
            return existing, ExpirySource.CACHE

        self.log.info(
            "expiry.resolve.stored",
            extra={
                "product_name": name,
                "expiry_days": stored.expiry_days,
                "expiry_date": stored.expiry_date.isoformat() if stored.expiry_date else None,
            },
        )
        return stored, ExpirySource.ORACLE

    async def _find_image(self, name: str) -> ImageLookup:
        try:
            return await self.image_finder.find_image(name)
        except Exception as exc:
            self.log.warning(
                "expiry.resolve.image_failed",
                extra={"product_name": name, "error": str(exc)},
            )
            return ImageLookup(failure=type(exc).__name__)
