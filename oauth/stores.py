"""In-memory stores for the mock OAuth flow.

Registered clients and pending authorization codes live here for the
lifetime of the process. Access and refresh tokens are opaque test
fixtures and are never stored.

Authorization codes have no expiry: a code that is never redeemed stays
in the store until the process exits.
"""

import threading
from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class RegisteredClient:
    """Client created via dynamic client registration (RFC 7591)."""

    client_id: str
    client_name: Optional[str] = None
    redirect_uris: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AuthorizationGrant:
    """Context bound to an issued authorization code.

    client_id and code_challenge_method are kept for reference only;
    neither is checked when the code is redeemed.
    """

    client_id: str
    redirect_uri: str
    code_challenge: Optional[str] = None
    code_challenge_method: Optional[str] = None
    scope: Optional[str] = None


class GrantStore:
    """Thread-safe storage for registered clients and authorization codes.

    The two mappings have independent locks so registrations and
    authorizations never wait on each other.
    """

    def __init__(self):
        self._clients: dict[str, RegisteredClient] = {}
        self._grants: dict[str, AuthorizationGrant] = {}
        self._clients_lock = threading.Lock()
        self._grants_lock = threading.Lock()

    def put_client(self, client_id: str, client: RegisteredClient) -> None:
        with self._clients_lock:
            self._clients[client_id] = client

    def get_client(self, client_id: str) -> Optional[RegisteredClient]:
        with self._clients_lock:
            return self._clients.get(client_id)

    def put_grant(self, code: str, grant: AuthorizationGrant) -> None:
        with self._grants_lock:
            self._grants[code] = grant

    def take_grant(self, code: str) -> Optional[AuthorizationGrant]:
        """Remove and return the grant for code, or None if absent.

        Look-up and removal happen under one lock acquisition, so a code
        can be redeemed at most once.
        """
        with self._grants_lock:
            return self._grants.pop(code, None)

    def client_count(self) -> int:
        with self._clients_lock:
            return len(self._clients)

    def grant_count(self) -> int:
        with self._grants_lock:
            return len(self._grants)
