"""
End-to-end tests for the mock OAuth flow, the way an MCP client drives it:

1. Discover the endpoints via /.well-known/oauth-authorization-server
2. Register via the registration endpoint
3. Authorize (auto-approved) and read the code from the Location header
4. Exchange the code at the token endpoint
5. Refresh

The concurrency tests fire simultaneous requests at the ASGI app through
httpx.AsyncClient to check that a code is redeemed at most once.
"""

import asyncio
from urllib.parse import urlsplit

from fastapi.testclient import TestClient

from config import Config
from main import create_app
from oauth.endpoints import CLIENT_ID_PREFIX


def path_of(url: str) -> str:
    return urlsplit(url).path


class TestRoundTrip:

    def test_register_authorize_exchange(self, client, oauth_flow):
        metadata = client.get("/.well-known/oauth-authorization-server").json()

        registration = client.post(path_of(metadata["registration_endpoint"]), json={
            "client_name": "Flow Test",
            "redirect_uris": [oauth_flow.redirect_uri],
        })
        client_id = registration.json()["client_id"]
        assert client_id.startswith(CLIENT_ID_PREFIX)

        authorization = client.get(path_of(metadata["authorization_endpoint"]), params={
            "client_id": client_id,
            "redirect_uri": oauth_flow.redirect_uri,
            "response_type": "code",
            "state": "xyz",
        })
        assert authorization.status_code == 302
        params = oauth_flow.query_params(authorization.headers["location"])
        assert params["state"] == "xyz"

        tokens = client.post(path_of(metadata["token_endpoint"]), data={
            "grant_type": "authorization_code",
            "code": params["code"],
            "redirect_uri": oauth_flow.redirect_uri,
            "client_id": client_id,
        })
        assert tokens.status_code == 200
        body = tokens.json()
        assert body["token_type"] == "Bearer"
        assert body["expires_in"] == 3600
        assert body["access_token"]
        assert body["refresh_token"]

        refreshed = client.post(path_of(metadata["token_endpoint"]), data={
            "grant_type": "refresh_token",
            "refresh_token": body["refresh_token"],
        })
        assert refreshed.status_code == 200
        assert refreshed.json()["refresh_token"] != body["refresh_token"]

    def test_pkce_flow(self, oauth_flow):
        client_id = oauth_flow.register()["client_id"]
        code = oauth_flow.get_code(
            client_id=client_id,
            code_challenge="E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM",
            code_challenge_method="S256",
        )

        response = oauth_flow.exchange(
            code,
            redirect_uri=oauth_flow.redirect_uri,
            code_verifier="dBjftJeZ4CVP-mJ0kzfwhHOcZJzDLHnXDq3hdk8lXvM",
        )

        assert response.status_code == 200

    def test_codes_are_independent(self, oauth_flow):
        first = oauth_flow.get_code()
        second = oauth_flow.get_code()

        assert oauth_flow.exchange(second).status_code == 200
        assert oauth_flow.exchange(first).status_code == 200

    def test_apps_do_not_share_state(self, oauth_flow):
        """Each app instance gets its own grant store."""
        code = oauth_flow.get_code()
        other = TestClient(create_app(Config({"issuer": "http://localhost:4000"})))

        response = other.post("/oauth/token", data={"grant_type": "authorization_code", "code": code})

        assert response.status_code == 400
        assert oauth_flow.exchange(code).status_code == 200


class TestConcurrentRedemption:

    async def test_code_redeemed_at_most_once(self, async_client):
        authorization = await async_client.get("/oauth/authorize", params={
            "client_id": "test-client-concurrent",
            "redirect_uri": "http://localhost:8080/cb",
        })
        code = urlsplit(authorization.headers["location"]).query.split("code=")[1].split("&")[0]

        responses = await asyncio.gather(*[
            async_client.post("/oauth/token", data={
                "grant_type": "authorization_code",
                "code": code,
            })
            for _ in range(20)
        ])

        statuses = sorted(r.status_code for r in responses)
        assert statuses == [200] + [400] * 19
        errors = {r.json()["error"] for r in responses if r.status_code == 400}
        assert errors == {"invalid_grant"}

    async def test_concurrent_registrations_get_unique_ids(self, async_client, store):
        responses = await asyncio.gather(*[
            async_client.post("/oauth/register", json={"client_name": "same"})
            for _ in range(25)
        ])

        client_ids = {r.json()["client_id"] for r in responses}
        assert len(client_ids) == 25
        assert store.client_count() == 25
