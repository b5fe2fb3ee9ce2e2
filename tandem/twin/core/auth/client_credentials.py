# tandem/twin/core/auth/client_credentials.py
from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable

import httpx

from tandem.twin.core.auth.errors import TokenRefreshError
from tandem.twin.core.auth.models import AccessToken, TokenGrant
from tandem.twin.core.auth.provider import TokenProvider
from tandem.twin.core.config import AUTODESK_TOKEN_URL

logger = logging.getLogger(__name__)

DEFAULT_SCOPE = "data:read data:write"
REFRESH_BUFFER_SECONDS = 300.0


class ClientCredentialsProvider(TokenProvider):
    """
    Two-legged OAuth token source for the Autodesk identity API.

    The provider owns its cache: one ``AccessToken`` that is replaced in full
    after every successful refresh and never touched on failure. There is no
    lock, so concurrent callers that all see a stale cache each refresh and
    the last response wins.
    """

    def __init__(
        self,
        *,
        client_id: str,
        client_secret: str,
        token_url: str = AUTODESK_TOKEN_URL,
        scope: str = DEFAULT_SCOPE,
        refresh_buffer: float = REFRESH_BUFFER_SECONDS,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self._client_id = client_id
        self._client_secret = client_secret
        self._token_url = token_url
        self._scope = scope
        self._refresh_buffer = refresh_buffer
        self._timeout = timeout
        self._transport = transport
        self._clock = clock

        self._token: AccessToken | None = None

    @property
    def cached(self) -> AccessToken | None:
        return self._token

    async def get_token(self) -> TokenGrant:
        now = self._clock()
        if self._token and self._token.is_valid(self._refresh_buffer, now=now):
            logger.debug("Returning cached token")
            return TokenGrant(
                access_token=self._token.access_token,
                expires_in=self._token.remaining_seconds(now=now),
            )

        logger.info("Fetching new token from %s", self._token_url)
        payload = await self._request_token()
        access_token, expires_in = self._parse_token(payload)

        self._token = AccessToken(
            access_token=access_token,
            expires_at=now + expires_in,
        )
        logger.info(
            "Token obtained successfully",
            extra={"expires_in": expires_in},
        )
        return TokenGrant(access_token=access_token, expires_in=expires_in)

    async def _request_token(self) -> Any:
        data = {
            "grant_type": "client_credentials",
            "scope": self._scope,
        }
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            "Accept": "application/json",
        }

        client_kwargs: dict[str, Any] = {"timeout": self._timeout}
        if self._transport is not None:
            client_kwargs["transport"] = self._transport

        try:
            async with httpx.AsyncClient(**client_kwargs) as client:
                r = await client.post(
                    self._token_url,
                    data=data,
                    headers=headers,
                    auth=(self._client_id, self._client_secret),
                )
                r.raise_for_status()
                return r.json()
        except httpx.HTTPStatusError as exc:
            raise TokenRefreshError(
                f"Identity provider returned HTTP {exc.response.status_code}",
                details=_error_body(exc.response),
            ) from exc
        except httpx.HTTPError as exc:
            raise TokenRefreshError(str(exc) or exc.__class__.__name__) from exc
        except ValueError as exc:
            # r.json() on a non-JSON body
            raise TokenRefreshError(f"Malformed token response: {exc}") from exc

    def _parse_token(self, payload: Any) -> tuple[str, int]:
        if not isinstance(payload, dict):
            raise TokenRefreshError("Malformed token response: expected a JSON object")

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise TokenRefreshError("Malformed token response: missing access_token")

        expires_in = payload.get("expires_in")
        if isinstance(expires_in, bool) or not isinstance(expires_in, (int, float)):
            raise TokenRefreshError("Malformed token response: missing expires_in")
        if not math.isfinite(expires_in) or expires_in <= 0:
            raise TokenRefreshError(
                f"Malformed token response: invalid expires_in {expires_in!r}"
            )

        return access_token, int(expires_in)


def _error_body(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return response.text
