"""Adapters for the external expiry oracle and image source."""

from .providers_base import ExpiryOracle, ImageFinder, ImageLookup, NullImageFinder
from .providers_images import SeleniumImageFinder
from .providers_openai import OpenAIExpiryOracle

__all__ = [
    "ExpiryOracle",
    "ImageFinder",
    "ImageLookup",
    "NullImageFinder",
    "OpenAIExpiryOracle",
    "SeleniumImageFinder",
]
