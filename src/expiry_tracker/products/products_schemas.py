"""Pydantic schemas for the expiry API."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, ConfigDict, Field

from .products_models import ExpiryResolution


class ExpiryRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_name: str | None = Field(default=None, alias="productName")


class ExpiryResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    product_name: str = Field(alias="productName")
    expiry_info: str = Field(alias="expiryInfo")
    expiry_days: int | None = Field(default=None, alias="expiryDays")
    expiry_date: date | None = Field(default=None, alias="expiryDate")
    image_url: str | None = Field(default=None, alias="imageUrl")
    source: str

    @classmethod
    def from_resolution(cls, resolution: ExpiryResolution) -> "ExpiryResponse":
        return cls(
            product_name=resolution.product_name,
            expiry_info=resolution.expiry_info,
            expiry_days=resolution.expiry_days,
            expiry_date=resolution.expiry_date,
            image_url=resolution.image_url,
            source=resolution.source.value,
        )


class ErrorSchema(BaseModel):
    error: str
