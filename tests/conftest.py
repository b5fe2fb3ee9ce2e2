# tests/conftest.py
import httpx
import pytest

from tandem.twin.core.auth.client_credentials import ClientCredentialsProvider
from tandem.twin.core.config import Settings


class IdentityApiStub:
    """Records token requests and answers them from a queue."""

    def __init__(self):
        self.calls = 0
        self.responses: list[httpx.Response] = []

    def queue(self, status: int = 200, **kw) -> None:
        self.responses.append(httpx.Response(status, **kw))

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        return self.responses.pop(0)


@pytest.fixture
def identity_api() -> IdentityApiStub:
    return IdentityApiStub()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        forge_client_id="cid",
        forge_client_secret="secret",
        default_facility_urn="urn:adsk.dtt:abc123",
    )


@pytest.fixture
def token_provider(identity_api: IdentityApiStub) -> ClientCredentialsProvider:
    return ClientCredentialsProvider(
        client_id="cid",
        client_secret="secret",
        transport=httpx.MockTransport(identity_api.handler),
    )
