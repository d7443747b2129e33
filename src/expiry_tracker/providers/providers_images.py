"""Headless-browser image search used to illustrate products."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from urllib.parse import urlencode, urlparse

from selenium import webdriver
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.common.by import By
from selenium.webdriver.remote.webdriver import WebDriver

from .providers_base import ImageFinder, ImageLookup

logger = logging.getLogger(__name__)

SEARCH_URL = "https://www.google.com/search"
SEARCH_QUALIFIER = "cartoon"
CDN_HOST_SUFFIX = "gstatic.com"
DENYLIST = ("logo", "funny", "meme", "humor", "joke", "mascot", "character")


def headless_chrome(page_load_timeout: float = 15.0) -> WebDriver:
    """Start a headless Chrome session (driver resolved by Selenium Manager)."""
    options = Options()
    options.add_argument("--headless=new")
    options.add_argument("--window-size=1280,1024")
    options.add_argument("--no-sandbox")
    options.add_argument("--disable-dev-shm-usage")
    options.add_argument("--disable-gpu")
    driver = webdriver.Chrome(options=options)
    driver.set_page_load_timeout(page_load_timeout)
    return driver


@contextmanager
def browser_session(factory: Callable[[], WebDriver]) -> Iterator[WebDriver]:
    """Yield a browser session that is always quit on exit."""
    driver = factory()
    try:
        yield driver
    finally:
        try:
            driver.quit()
        except Exception:  # pragma: no cover - quit failures only leak a process
            logger.warning("image.browser.quit_failed", exc_info=True)


def select_image_candidate(
    urls: Iterable[str | None],
    *,
    cdn_suffix: str = CDN_HOST_SUFFIX,
    denylist: Sequence[str] = DENYLIST,
) -> str | None:
    """Filter scraped image URLs and pick one.

    One survivor is returned as is. With two or more the second is returned,
    the first slot on the results page is usually a banner rather than a
    product picture.
    """
    candidates: list[str] = []
    for url in urls:
        if not url:
            continue
        parsed = urlparse(url)
        host = (parsed.hostname or "").lower()
        if parsed.scheme != "https" or not (host == cdn_suffix or host.endswith("." + cdn_suffix)):
            continue
        lowered = url.lower()
        if any(term in lowered for term in denylist):
            continue
        candidates.append(url)

    if not candidates:
        return None
    if len(candidates) == 1:
        return candidates[0]
    return candidates[1]


@dataclass(slots=True)
class SeleniumImageFinder(ImageFinder):
    """Search an image page for ``"<product> cartoon"`` in a headless browser."""

    timeout_seconds: float = 20.0
    search_url: str = SEARCH_URL
    qualifier: str = SEARCH_QUALIFIER
    driver_factory: Callable[[], WebDriver] = field(default=headless_chrome)
    log: logging.Logger = field(default_factory=lambda: logger)

    async def find_image(self, product_name: str) -> ImageLookup:
        try:
            url = await asyncio.wait_for(
                asyncio.to_thread(self._search, product_name),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            self.log.warning(
                "image.search.timeout",
                extra={"product_name": product_name, "timeout_seconds": self.timeout_seconds},
            )
            return ImageLookup(failure="timeout")
        except Exception as exc:
            self.log.warning(
                "image.search.failed",
                extra={"product_name": product_name, "error": str(exc)},
            )
            return ImageLookup(failure=type(exc).__name__)

        if url is None:
            self.log.info("image.search.empty", extra={"product_name": product_name})
        return ImageLookup(image_url=url)

    def search_page_url(self, product_name: str) -> str:
        query = f"{product_name} {self.qualifier}".strip()
        return f"{self.search_url}?{urlencode({'q': query, 'tbm': 'isch'})}"

    def _search(self, product_name: str) -> str | None:
        with browser_session(self.driver_factory) as driver:
            driver.get(self.search_page_url(product_name))
            elements = driver.find_elements(By.TAG_NAME, "img")
            return select_image_candidate(element.get_attribute("src") for element in elements)
