# tests/core/auth/test_client_credentials_provider.py
import asyncio
import base64

import httpx
import pytest

from tandem.twin.core.auth.client_credentials import ClientCredentialsProvider
from tandem.twin.core.auth.errors import TokenRefreshError

TOKEN_URL = "https://developer.api.autodesk.com/authentication/v2/token"


class Clock:
    def __init__(self, now: float = 1_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class FakeIdentityApi:
    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.responses: list[httpx.Response] = []

    def queue(self, status: int = 200, **kw) -> None:
        self.responses.append(httpx.Response(status, **kw))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if not self.responses:
            raise AssertionError(f"Unexpected request {request.url}")
        return self.responses.pop(0)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


def make_provider(api: FakeIdentityApi, clock: Clock) -> ClientCredentialsProvider:
    return ClientCredentialsProvider(
        client_id="cid",
        client_secret="secret",
        transport=api.transport,
        clock=clock,
    )


@pytest.mark.asyncio
async def test_first_call_fetches_then_serves_from_cache():
    api = FakeIdentityApi()
    api.queue(json={"access_token": "token1", "expires_in": 3600})
    clock = Clock()
    provider = make_provider(api, clock)

    first = await provider.get_token()
    assert first.access_token == "token1"
    assert first.expires_in == 3600
    assert len(api.requests) == 1

    clock.now += 600.5
    second = await provider.get_token()
    assert second.access_token == "token1"
    assert second.expires_in == 2999
    assert len(api.requests) == 1


@pytest.mark.asyncio
async def test_upstream_request_shape():
    api = FakeIdentityApi()
    api.queue(json={"access_token": "token1", "expires_in": 3600})
    provider = make_provider(api, Clock())

    await provider.get_token()

    request = api.requests[0]
    assert request.method == "POST"
    assert str(request.url) == TOKEN_URL
    assert request.headers["Content-Type"] == "application/x-www-form-urlencoded"
    assert request.headers["Accept"] == "application/json"
    expected_auth = base64.b64encode(b"cid:secret").decode()
    assert request.headers["Authorization"] == f"Basic {expected_auth}"

    form = httpx.QueryParams(request.content.decode())
    assert form["grant_type"] == "client_credentials"
    assert form["scope"] == "data:read data:write"


@pytest.mark.asyncio
async def test_token_near_expiry_is_refreshed():
    api = FakeIdentityApi()
    api.queue(json={"access_token": "token1", "expires_in": 3600})
    api.queue(json={"access_token": "token2", "expires_in": 3600})
    clock = Clock()
    provider = make_provider(api, clock)

    await provider.get_token()
    clock.now += 3600 - 300  # exactly at the buffer edge
    refreshed = await provider.get_token()

    assert refreshed.access_token == "token2"
    assert refreshed.expires_in == 3600
    assert len(api.requests) == 2
    assert provider.cached.access_token == "token2"
    assert provider.cached.expires_at == clock.now + 3600


@pytest.mark.asyncio
async def test_unauthorized_keeps_previous_cache():
    api = FakeIdentityApi()
    api.queue(json={"access_token": "token1", "expires_in": 3600})
    api.queue(401, json={"developerMessage": "The client_id specified does not have access"})
    clock = Clock()
    provider = make_provider(api, clock)

    await provider.get_token()
    before = provider.cached
    clock.now += 3500

    with pytest.raises(TokenRefreshError) as excinfo:
        await provider.get_token()

    assert excinfo.value.details == {
        "developerMessage": "The client_id specified does not have access"
    }
    assert provider.cached is before


@pytest.mark.asyncio
async def test_non_json_error_body_is_passed_as_text():
    api = FakeIdentityApi()
    api.queue(503, text="upstream unavailable")
    provider = make_provider(api, Clock())

    with pytest.raises(TokenRefreshError) as excinfo:
        await provider.get_token()

    assert excinfo.value.details == "upstream unavailable"
    assert provider.cached is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "kw",
    [
        {"text": "not json"},
        {"json": ["token"]},
        {"json": {"expires_in": 3600}},
        {"json": {"access_token": "token1"}},
        {"json": {"access_token": "token1", "expires_in": "soon"}},
    ],
)
async def test_malformed_response_raises(kw):
    api = FakeIdentityApi()
    api.queue(**kw)
    provider = make_provider(api, Clock())

    with pytest.raises(TokenRefreshError, match="Malformed token response"):
        await provider.get_token()

    assert provider.cached is None


@pytest.mark.asyncio
async def test_network_error_message_is_details():
    async def handler(request: httpx.Request):
        raise httpx.ConnectError("connection refused", request=request)

    provider = ClientCredentialsProvider(
        client_id="cid",
        client_secret="secret",
        transport=httpx.MockTransport(handler),
    )

    with pytest.raises(TokenRefreshError) as excinfo:
        await provider.get_token()

    assert excinfo.value.details == "connection refused"


@pytest.mark.asyncio
async def test_concurrent_callers_each_refresh_and_last_write_wins():
    arrived: list[httpx.Request] = []
    both_in_flight = asyncio.Event()

    async def handler(request: httpx.Request):
        index = len(arrived)
        arrived.append(request)
        if len(arrived) == 2:
            both_in_flight.set()
        await both_in_flight.wait()
        if index == 1:
            # the second caller's response lands after the first one
            await asyncio.sleep(0.01)
        return httpx.Response(
            200, json={"access_token": f"token{index + 1}", "expires_in": 3600}
        )

    provider = ClientCredentialsProvider(
        client_id="cid",
        client_secret="secret",
        transport=httpx.MockTransport(handler),
    )

    first, second = await asyncio.gather(provider.get_token(), provider.get_token())

    assert len(arrived) == 2
    assert {first.access_token, second.access_token} == {"token1", "token2"}
    assert provider.cached.access_token == "token2"
