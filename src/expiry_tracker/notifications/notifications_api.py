"""Routes exposing push-subscription settings to browser clients."""

from __future__ import annotations

from fastapi import APIRouter, Request

router = APIRouter(prefix="/api/push", tags=["notifications"])


@router.get("/public-key")
def push_public_key(request: Request) -> dict[str, str]:
    """Return the VAPID public key browsers need to subscribe."""
    config = request.app.state.config
    return {"publicKey": config.push.public_key}
