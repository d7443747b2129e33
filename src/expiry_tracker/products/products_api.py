"""HTTP routes for expiry lookups."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from .products_errors import ProductNameRequiredError
from .products_schemas import ErrorSchema, ExpiryRequest, ExpiryResponse
from .products_service import ExpiryResolver

router = APIRouter(prefix="/api", tags=["expiry"])
logger = logging.getLogger(__name__)

PRODUCT_NAME_REQUIRED = "Product name is required"
INTERNAL_SERVER_ERROR = "Internal Server Error"


def get_expiry_resolver(request: Request) -> ExpiryResolver:
    """Fetch expiry resolver from application state."""
    try:
        return request.app.state.expiry_resolver  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover
        raise RuntimeError("ExpiryResolver is not configured") from exc


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorSchema(error=message).model_dump())


async def _read_product_name(request: Request) -> str | None:
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        payload = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    try:
        parsed = ExpiryRequest.model_validate(payload)
    except ValidationError:
        return None
    name = (parsed.product_name or "").strip()
    return name or None


@router.post(
    "/get-expiry",
    response_model=ExpiryResponse,
    responses={400: {"model": ErrorSchema}, 500: {"model": ErrorSchema}},
)
async def get_expiry(
    request: Request,
    resolver: ExpiryResolver = Depends(get_expiry_resolver),
) -> JSONResponse:
    """Return the cached or freshly inferred expiry answer for a product."""
    product_name = await _read_product_name(request)
    if product_name is None:
        logger.warning("expiry.request.invalid", extra={"reason": "missing_product_name"})
        return _error(status.HTTP_400_BAD_REQUEST, PRODUCT_NAME_REQUIRED)

    try:
        resolution = await resolver.resolve_expiry(product_name)
    except ProductNameRequiredError:
        return _error(status.HTTP_400_BAD_REQUEST, PRODUCT_NAME_REQUIRED)
    except Exception:
        logger.exception("expiry.request.unexpected_error", extra={"product_name": product_name})
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, INTERNAL_SERVER_ERROR)

    body = ExpiryResponse.from_resolution(resolution)
    return JSONResponse(content=body.model_dump(by_alias=True, mode="json"))
