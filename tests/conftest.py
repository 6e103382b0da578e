"""
Shared test fixtures for the MCP test server suite.

Key fixtures:
- config: A Config with a fixed issuer and no API key
- store: The GrantStore backing the app under test (inspectable by tests)
- app: The FastAPI app built by create_app()
- client: A synchronous TestClient that does NOT follow redirects, so
  tests can read the Location header from /oauth/authorize
- async_client: An httpx.AsyncClient wired to the ASGI app, used to fire
  concurrent requests
- oauth_flow: Helpers that drive register -> authorize -> token

None of these start the app lifespan; the OAuth endpoints don't need it.
"""

from urllib.parse import parse_qs, urlsplit

import httpx
import pytest
from fastapi.testclient import TestClient

from config import Config
from main import create_app
from oauth.stores import GrantStore

ISSUER = "http://localhost:3000"
REDIRECT_URI = "http://localhost:8080/cb"


@pytest.fixture
def config():
    return Config({"issuer": ISSUER})


@pytest.fixture
def store():
    return GrantStore()


@pytest.fixture
def app(config, store):
    return create_app(config, store)


@pytest.fixture
def client(app):
    return TestClient(app, follow_redirects=False)


@pytest.fixture
async def async_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=ISSUER) as ac:
        yield ac


def query_params(location: str) -> dict[str, str]:
    """Parse the query string of a redirect Location into single values."""
    return {key: values[0] for key, values in parse_qs(urlsplit(location).query).items()}


class OAuthFlow:
    """Drives the mock OAuth flow through a TestClient."""

    redirect_uri = REDIRECT_URI
    query_params = staticmethod(query_params)

    def __init__(self, client: TestClient):
        self.client = client

    def register(self, client_name="Test Client", redirect_uris=None) -> dict:
        response = self.client.post("/oauth/register", json={
            "client_name": client_name,
            "redirect_uris": redirect_uris if redirect_uris is not None else [REDIRECT_URI],
        })
        assert response.status_code == 201
        return response.json()

    def authorize(self, client_id="test-client-x", redirect_uri=REDIRECT_URI, **params) -> httpx.Response:
        return self.client.get("/oauth/authorize", params={
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            **params,
        })

    def get_code(self, **params) -> str:
        response = self.authorize(**params)
        assert response.status_code == 302
        return query_params(response.headers["location"])["code"]

    def exchange(self, code, **fields) -> httpx.Response:
        return self.client.post("/oauth/token", data={
            "grant_type": "authorization_code",
            "code": code,
            **fields,
        })


@pytest.fixture
def oauth_flow(client):
    return OAuthFlow(client)
