"""Deterministic oracle and image-finder mocks for resolver tests."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from enum import Enum

from src.expiry_tracker.products.products_errors import OracleUnavailableError
from src.expiry_tracker.providers.providers_base import ExpiryOracle, ImageFinder, ImageLookup

CDN_IMAGE_URL = "https://encrypted-tbn0.gstatic.com/images?q=tbn:milk"


class MockOracleScenario(str, Enum):
    """Available behaviours for the oracle mock."""

    SUCCESS = "success"
    ERROR = "error"


@dataclass(slots=True)
class MockOracle(ExpiryOracle):
    """Oracle returning a canned answer and counting calls."""

    answer: str = "7"
    scenario: MockOracleScenario = MockOracleScenario.SUCCESS
    calls: list[str] = field(default_factory=list)

    async def estimate(self, product_name: str) -> str:
        self.calls.append(product_name)
        await asyncio.sleep(0)
        if self.scenario is MockOracleScenario.ERROR:
            raise OracleUnavailableError("Simulated oracle failure")
        return self.answer


@dataclass(slots=True)
class GatedOracle(ExpiryOracle):
    """Oracle that blocks until ``expected`` callers are waiting at once."""

    answer: str = "7"
    expected: int = 2
    calls: list[str] = field(default_factory=list)
    _all_arrived: asyncio.Event = field(default_factory=asyncio.Event)

    async def estimate(self, product_name: str) -> str:
        self.calls.append(product_name)
        if len(self.calls) >= self.expected:
            self._all_arrived.set()
        await asyncio.wait_for(self._all_arrived.wait(), timeout=2)
        return self.answer


@dataclass(slots=True)
class MockImageFinder(ImageFinder):
    image_url: str | None = CDN_IMAGE_URL
    calls: list[str] = field(default_factory=list)

    async def find_image(self, product_name: str) -> ImageLookup:
        self.calls.append(product_name)
        await asyncio.sleep(0)
        return ImageLookup(image_url=self.image_url)


@dataclass(slots=True)
class RaisingImageFinder(ImageFinder):
    """Finder that breaks its own contract by raising."""

    async def find_image(self, product_name: str) -> ImageLookup:
        raise RuntimeError("browser crashed")


@dataclass(slots=True)
class SignalImageFinder(ImageFinder):
    """Finder that sets ``started`` as soon as enrichment begins."""

    started: asyncio.Event = field(default_factory=asyncio.Event)
    image_url: str | None = CDN_IMAGE_URL

    async def find_image(self, product_name: str) -> ImageLookup:
        self.started.set()
        await asyncio.sleep(0)
        return ImageLookup(image_url=self.image_url)


@dataclass(slots=True)
class WaitForImageOracle(ExpiryOracle):
    """Oracle that only answers once image enrichment is already running."""

    started: asyncio.Event
    answer: str = "5 days"

    async def estimate(self, product_name: str) -> str:
        await asyncio.wait_for(self.started.wait(), timeout=2)
        return self.answer


@dataclass(slots=True)
class HangingImageFinder(ImageFinder):
    """Finder that never answers and records whether it was cancelled."""

    started: asyncio.Event = field(default_factory=asyncio.Event)
    cancelled: bool = False

    async def find_image(self, product_name: str) -> ImageLookup:
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
