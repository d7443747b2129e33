import asyncio
import time

import pytest
from selenium.common.exceptions import WebDriverException

from src.expiry_tracker.providers.providers_images import (
    SeleniumImageFinder,
    select_image_candidate,
)

CDN = "https://encrypted-tbn0.gstatic.com/images?q=tbn:"


def test_select_single_candidate() -> None:
    urls = ["data:image/gif;base64,R0lGOD", f"{CDN}milk", "https://example.com/milk.png"]

    assert select_image_candidate(urls) == f"{CDN}milk"


def test_select_returns_a_filtered_candidate_when_several_survive() -> None:
    urls = [f"{CDN}first", f"{CDN}second", f"{CDN}third"]

    chosen = select_image_candidate(urls)

    assert chosen in urls
    assert chosen == f"{CDN}second"


def test_select_rejects_denylisted_and_foreign_urls() -> None:
    urls = [
        f"{CDN}brand-logo",
        f"{CDN}funny-milk-meme",
        f"{CDN}milk-mascot",
        "http://encrypted-tbn0.gstatic.com/images?q=tbn:plain-http",
        "https://gstatic.com.evil.test/milk.png",
        None,
        "",
    ]

    assert select_image_candidate(urls) is None


class FakeElement:
    def __init__(self, src):
        self._src = src

    def get_attribute(self, name):
        return self._src if name == "src" else None


class FakeDriver:
    def __init__(self, srcs=(), fail_on_get: bool = False, delay: float = 0.0):
        self.srcs = list(srcs)
        self.fail_on_get = fail_on_get
        self.delay = delay
        self.visited: list[str] = []
        self.quit_called = False

    def get(self, url):
        self.visited.append(url)
        if self.delay:
            time.sleep(self.delay)
        if self.fail_on_get:
            raise WebDriverException("page failed to render")

    def find_elements(self, by, value):
        return [FakeElement(src) for src in self.srcs]

    def quit(self):
        self.quit_called = True


@pytest.mark.asyncio
async def test_find_image_returns_candidate_and_releases_browser() -> None:
    driver = FakeDriver(srcs=[f"{CDN}only"])
    finder = SeleniumImageFinder(driver_factory=lambda: driver)

    lookup = await finder.find_image("Milk")

    assert lookup.image_url == f"{CDN}only"
    assert lookup.failure is None
    assert driver.quit_called
    assert "Milk+cartoon" in driver.visited[0]


@pytest.mark.asyncio
async def test_find_image_empty_result_releases_browser() -> None:
    driver = FakeDriver(srcs=["https://example.com/a.png"])
    finder = SeleniumImageFinder(driver_factory=lambda: driver)

    lookup = await finder.find_image("Milk")

    assert lookup.image_url is None
    assert lookup.failure is None
    assert driver.quit_called


@pytest.mark.asyncio
async def test_find_image_render_failure_is_absent_and_releases_browser() -> None:
    driver = FakeDriver(fail_on_get=True)
    finder = SeleniumImageFinder(driver_factory=lambda: driver)

    lookup = await finder.find_image("Milk")

    assert lookup.image_url is None
    assert lookup.failure == "WebDriverException"
    assert driver.quit_called


@pytest.mark.asyncio
async def test_find_image_browser_start_failure_is_absent() -> None:
    def broken_factory():
        raise WebDriverException("chrome not installed")

    lookup = await SeleniumImageFinder(driver_factory=broken_factory).find_image("Milk")

    assert lookup.image_url is None
    assert lookup.failure == "WebDriverException"


@pytest.mark.asyncio
async def test_find_image_timeout_is_absent() -> None:
    driver = FakeDriver(srcs=[f"{CDN}late"], delay=0.5)
    finder = SeleniumImageFinder(timeout_seconds=0.05, driver_factory=lambda: driver)

    lookup = await finder.find_image("Milk")

    assert lookup.image_url is None
    assert lookup.failure == "timeout"
    # the worker thread still finishes and releases the session
    for _ in range(50):
        if driver.quit_called:
            break
        await asyncio.sleep(0.05)
    assert driver.quit_called
