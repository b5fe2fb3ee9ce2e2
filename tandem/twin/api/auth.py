from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import JSONResponse

from tandem.twin.core.auth.errors import TokenRefreshError
from tandem.twin.core.auth.provider import TokenProvider

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/token")
async def get_access_token(request: Request):
    """
    Return a client-credentials access token for the Autodesk APIs.

    Served from the provider's cache while it is more than five minutes
    from expiry, fetched fresh otherwise.
    """
    provider: TokenProvider | None = getattr(request.app.state, "token_provider", None)

    if provider is None:
        logger.error("Token provider not initialized")
        raise HTTPException(
            status_code=500,
            detail="Token provider not initialized",
        )

    try:
        grant = await provider.get_token()
    except TokenRefreshError as exc:
        logger.error("Token error", extra={"details": exc.details})
        return JSONResponse(
            status_code=500,
            content={
                "error": "Failed to obtain access token",
                "details": exc.details,
            },
        )

    return grant.to_dict()
