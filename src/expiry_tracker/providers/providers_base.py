"""Abstract adapters for the external expiry oracle and image source."""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ImageLookup:
    """Outcome of a best-effort image search.

    ``image_url`` is ``None`` when nothing usable was found; ``failure`` carries
    a short reason when the search itself broke.
    """

    image_url: str | None = None
    failure: str | None = None


class ExpiryOracle(ABC):
    """Turns a product name into a free-text expiry estimate."""

    @abstractmethod
    async def estimate(self, product_name: str) -> str:
        """Return raw oracle text or raise ``OracleUnavailableError``."""


class ImageFinder(ABC):
    """Finds an illustrative image for a product name."""

    @abstractmethod
    async def find_image(self, product_name: str) -> ImageLookup:
        """Return a lookup result; never raises."""


class NullImageFinder(ImageFinder):
    """Image finder used when enrichment is switched off."""

    async def find_image(self, product_name: str) -> ImageLookup:
        return ImageLookup()
