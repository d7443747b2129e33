"""Factory for oracle and image adapters."""

from ..config import ImageSearchSettings, OracleSettings
from .providers_base import ExpiryOracle, ImageFinder, NullImageFinder
from .providers_images import SeleniumImageFinder
from .providers_openai import OpenAIExpiryOracle


def create_oracle(settings: OracleSettings) -> ExpiryOracle:
    return OpenAIExpiryOracle(
        api_key=settings.api_key,
        api_url=settings.api_url,
        model=settings.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        timeout_seconds=settings.timeout_seconds,
    )


def create_image_finder(settings: ImageSearchSettings) -> ImageFinder:
    if not settings.enabled:
        return NullImageFinder()
    return SeleniumImageFinder(timeout_seconds=settings.timeout_seconds)
