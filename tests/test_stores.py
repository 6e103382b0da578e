"""
Unit tests for the in-memory grant store (oauth/stores.py).

take_grant() is the piece the whole flow relies on: it must remove and
return a grant in one step, so that concurrent redemptions of the same
code see exactly one hit.
"""

import threading
from concurrent.futures import ThreadPoolExecutor

from oauth.stores import AuthorizationGrant, GrantStore, RegisteredClient


def make_grant(**overrides) -> AuthorizationGrant:
    fields = {"client_id": "test-client-1", "redirect_uri": "http://localhost:8080/cb"}
    fields.update(overrides)
    return AuthorizationGrant(**fields)


class TestClients:

    def test_put_and_get_client(self):
        store = GrantStore()
        client = RegisteredClient("test-client-1", "Demo", ["http://localhost/cb"])

        store.put_client("test-client-1", client)

        assert store.get_client("test-client-1") == client
        assert store.client_count() == 1

    def test_unknown_client_returns_none(self):
        assert GrantStore().get_client("nope") is None

    def test_put_client_overwrites(self):
        store = GrantStore()
        store.put_client("id", RegisteredClient("id", "first"))
        store.put_client("id", RegisteredClient("id", "second"))

        assert store.get_client("id").client_name == "second"
        assert store.client_count() == 1

    def test_registered_client_defaults(self):
        client = RegisteredClient("id")
        assert client.client_name is None
        assert client.redirect_uris == []


class TestGrants:

    def test_take_returns_stored_grant(self):
        store = GrantStore()
        grant = make_grant(code_challenge="abc", scope="mcp read")
        store.put_grant("code-1", grant)

        assert store.take_grant("code-1") == grant

    def test_take_removes_grant(self):
        store = GrantStore()
        store.put_grant("code-1", make_grant())

        store.take_grant("code-1")

        assert store.take_grant("code-1") is None
        assert store.grant_count() == 0

    def test_take_unknown_code_returns_none(self):
        assert GrantStore().take_grant("never-issued") is None

    def test_put_grant_overwrites(self):
        store = GrantStore()
        store.put_grant("code-1", make_grant(scope="a"))
        store.put_grant("code-1", make_grant(scope="b"))

        assert store.take_grant("code-1").scope == "b"

    def test_grants_do_not_expire(self):
        """Codes have no TTL; an unredeemed code stays until taken."""
        store = GrantStore()
        store.put_grant("code-1", make_grant())
        for i in range(100):
            store.put_grant(f"other-{i}", make_grant())

        assert store.take_grant("code-1") is not None

    def test_clients_and_grants_are_independent(self):
        store = GrantStore()
        store.put_client("shared-key", RegisteredClient("shared-key"))

        assert store.take_grant("shared-key") is None
        assert store.get_client("shared-key") is not None


class TestConcurrentTake:

    def test_exactly_one_taker_wins(self):
        store = GrantStore()
        store.put_grant("hot-code", make_grant())
        workers = 32
        barrier = threading.Barrier(workers)

        def take():
            barrier.wait()
            return store.take_grant("hot-code")

        with ThreadPoolExecutor(max_workers=workers) as pool:
            results = list(pool.map(lambda _: take(), range(workers)))

        hits = [r for r in results if r is not None]
        assert len(hits) == 1
        assert store.grant_count() == 0

    def test_concurrent_puts_are_all_kept(self):
        store = GrantStore()

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda i: store.put_grant(f"code-{i}", make_grant()), range(200)))
            list(pool.map(
                lambda i: store.put_client(f"client-{i}", RegisteredClient(f"client-{i}")),
                range(200),
            ))

        assert store.grant_count() == 200
        assert store.client_count() == 200
