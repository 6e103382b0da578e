"""Mock OAuth 2.1 endpoints for testing MCP client authentication flows.

This module contains all OAuth-related endpoints:
- Discovery metadata (/.well-known/*)
- Client registration (/oauth/register)
- Authorization, auto-approved (/oauth/authorize)
- Token endpoint (/oauth/token)

There is no identity provider behind any of this. Authorization is
approved immediately, tokens are opaque strings, and the PKCE verifier
only has to be present, not correct.
"""

import logging
import uuid
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from oauth.errors import (
    INVALID_GRANT,
    INVALID_REQUEST,
    UNSUPPORTED_GRANT_TYPE,
    OAuthError,
)
from oauth.models import (
    DEFAULT_SCOPE,
    AuthorizationServerMetadata,
    ClientRegistrationRequest,
    ClientRegistrationResponse,
    OAuthErrorResponse,
    ProtectedResourceMetadata,
    TokenResponse,
)
from oauth.stores import AuthorizationGrant, GrantStore, RegisteredClient
from oauth.templates import render_authorize_error

logger = logging.getLogger(__name__)

# Router for OAuth endpoints
router = APIRouter(tags=["oauth"])

CLIENT_ID_PREFIX = "test-client-"
CODE_PREFIX = "test-code-"
ACCESS_TOKEN_PREFIX = "test-access-"
REFRESH_TOKEN_PREFIX = "test-refresh-"

# Characters left literal in the echoed state. Anything that would split or
# alter the query value (&, #, +, space, %, non-ASCII) is still escaped.
STATE_SAFE_CHARS = "/:=?@!$'()*,;"


class OAuthState:
    """Issuer URL and grant store shared by the OAuth endpoints of one app."""

    def __init__(self, issuer: str, store: GrantStore = None):
        self.issuer = issuer
        self.store = store or GrantStore()


def init_oauth_routes(app: FastAPI, issuer: str, store: GrantStore = None) -> OAuthState:
    """Attach OAuth state to the app and include the OAuth router.

    Args:
        app: The FastAPI application to serve the endpoints from
        issuer: Externally visible base URL of this server
        store: Grant store to use (a fresh one if omitted)

    Returns:
        The OAuthState the endpoints will use.
    """
    state = OAuthState(issuer, store)
    app.state.oauth = state
    app.include_router(router)
    return state


def get_oauth_state(request: Request) -> OAuthState:
    return request.app.state.oauth


# ============== OAuth 2.1 Discovery Endpoints ==============

def protected_resource_metadata(issuer: str) -> ProtectedResourceMetadata:
    return ProtectedResourceMetadata(resource=issuer, authorization_servers=[issuer])


def authorization_server_metadata(issuer: str) -> AuthorizationServerMetadata:
    # Plain concatenation: the issuer is used exactly as configured.
    return AuthorizationServerMetadata(
        issuer=issuer,
        authorization_endpoint=f"{issuer}/oauth/authorize",
        token_endpoint=f"{issuer}/oauth/token",
        registration_endpoint=f"{issuer}/oauth/register",
    )


@router.get(
    "/.well-known/oauth-protected-resource",
    response_model=ProtectedResourceMetadata,
)
async def oauth_protected_resource(oauth: OAuthState = Depends(get_oauth_state)):
    """OAuth 2.0 Protected Resource Metadata (RFC 9728)."""
    return protected_resource_metadata(oauth.issuer)


@router.get(
    "/.well-known/oauth-authorization-server",
    response_model=AuthorizationServerMetadata,
)
async def oauth_authorization_server(oauth: OAuthState = Depends(get_oauth_state)):
    """OAuth 2.0 Authorization Server Metadata (RFC 8414)."""
    return authorization_server_metadata(oauth.issuer)


# ============== Client Registration ==============

def parse_registration(data) -> ClientRegistrationRequest:
    """Build a registration request from any decoded JSON body.

    Registration never fails: bodies that are not objects, or that do not
    match the schema, register a client with no name and no redirect URIs.
    """
    if not isinstance(data, dict):
        return ClientRegistrationRequest()

    fields = {key: value for key, value in data.items() if value is not None}
    try:
        return ClientRegistrationRequest.model_validate(fields)
    except ValidationError as e:
        logger.warning(f"[REGISTER] Ignoring malformed client metadata ({e.error_count()} errors)")
        return ClientRegistrationRequest()


@router.post(
    "/oauth/register",
    response_model=ClientRegistrationResponse,
    status_code=201,
)
async def register_client(request: Request, oauth: OAuthState = Depends(get_oauth_state)):
    """OAuth 2.0 Dynamic Client Registration (RFC 7591).

    Public registration: every call mints a new client_id, even for
    identical metadata.
    """
    try:
        data = await request.json()
    except ValueError:
        data = {}

    registration = parse_registration(data)
    client_id = f"{CLIENT_ID_PREFIX}{uuid.uuid4()}"

    oauth.store.put_client(client_id, RegisteredClient(
        client_id=client_id,
        client_name=registration.client_name,
        redirect_uris=list(registration.redirect_uris),
    ))
    logger.info(f"[REGISTER] Client registered: {client_id} ({registration.client_name or 'unnamed'})")

    return ClientRegistrationResponse(
        client_id=client_id,
        client_name=registration.client_name,
        redirect_uris=registration.redirect_uris,
    )


# ============== Authorization Flow ==============

def build_redirect_url(redirect_uri: str, code: str, state: Optional[str] = None) -> str:
    """Append code (and state, if given) to the client's redirect URI."""
    separator = "&" if "?" in redirect_uri else "?"
    url = f"{redirect_uri}{separator}code={code}"
    if state is not None:
        url += f"&state={quote(state, safe=STATE_SAFE_CHARS)}"
    return url


@router.get("/oauth/authorize")
async def authorize(
    client_id: str = "",
    redirect_uri: str = "",
    response_type: str = "code",
    state: Optional[str] = None,
    code_challenge: Optional[str] = None,
    code_challenge_method: Optional[str] = None,
    scope: Optional[str] = None,
    oauth: OAuthState = Depends(get_oauth_state),
):
    """OAuth 2.0 Authorization Endpoint - auto-approves and redirects with a code."""
    if response_type != "code":
        logger.info(f"[AUTHORIZE] Unsupported response_type: {response_type}")
        return HTMLResponse(
            render_authorize_error(f"Unsupported response_type: {response_type}"),
            status_code=400,
        )

    if not redirect_uri:
        logger.info("[AUTHORIZE] Request rejected: missing redirect_uri")
        return HTMLResponse(
            render_authorize_error("Missing required parameter: redirect_uri"),
            status_code=400,
        )

    code = f"{CODE_PREFIX}{uuid.uuid4()}"
    oauth.store.put_grant(code, AuthorizationGrant(
        client_id=client_id,
        redirect_uri=redirect_uri,
        code_challenge=code_challenge or None,
        code_challenge_method=code_challenge_method or None,
        scope=scope or None,
    ))
    logger.info(
        f"[AUTHORIZE] Code issued for client: {client_id or 'unknown'} "
        f"(pkce: {bool(code_challenge)}, scope: {scope or DEFAULT_SCOPE})"
    )

    return RedirectResponse(url=build_redirect_url(redirect_uri, code, state), status_code=302)


# ============== Token Endpoint ==============

def issue_token_pair(scope: str = DEFAULT_SCOPE) -> TokenResponse:
    """Mint a fresh opaque access/refresh token pair."""
    return TokenResponse(
        access_token=f"{ACCESS_TOKEN_PREFIX}{uuid.uuid4()}",
        refresh_token=f"{REFRESH_TOKEN_PREFIX}{uuid.uuid4()}",
        scope=scope,
    )


def exchange_authorization_code(
    store: GrantStore,
    code: Optional[str],
    redirect_uri: Optional[str] = None,
    code_verifier: Optional[str] = None,
) -> TokenResponse:
    """Redeem an authorization code.

    The grant is removed before any other check, so a request that fails
    the redirect_uri or PKCE check still uses up the code.

    Raises:
        OAuthError: If the code is missing, unknown, already redeemed, or
            fails the redirect_uri / code_verifier checks.
    """
    if not code:
        raise OAuthError(INVALID_REQUEST, "Missing code parameter")

    grant = store.take_grant(code)
    if grant is None:
        raise OAuthError(INVALID_GRANT, "Invalid or expired authorization code")

    if redirect_uri and redirect_uri != grant.redirect_uri:
        raise OAuthError(INVALID_GRANT, "redirect_uri mismatch")

    # PKCE: the verifier must be present, its value is not checked.
    if grant.code_challenge and not code_verifier:
        raise OAuthError(INVALID_GRANT, "Missing code_verifier for PKCE")

    return issue_token_pair(grant.scope or DEFAULT_SCOPE)


def exchange_refresh_token(refresh_token: Optional[str]) -> TokenResponse:
    """Issue a new token pair for any non-empty refresh token."""
    if not refresh_token:
        raise OAuthError(INVALID_REQUEST, "Missing refresh_token")
    return issue_token_pair(DEFAULT_SCOPE)


def exchange_token(
    store: GrantStore,
    grant_type: Optional[str],
    code: Optional[str] = None,
    redirect_uri: Optional[str] = None,
    code_verifier: Optional[str] = None,
    refresh_token: Optional[str] = None,
) -> TokenResponse:
    """Dispatch a token request on grant_type."""
    if not grant_type:
        raise OAuthError(INVALID_REQUEST, "Missing grant_type parameter")

    if grant_type == "authorization_code":
        return exchange_authorization_code(store, code, redirect_uri, code_verifier)
    if grant_type == "refresh_token":
        return exchange_refresh_token(refresh_token)

    raise OAuthError(UNSUPPORTED_GRANT_TYPE, f"Unsupported grant_type: {grant_type}")


@router.post(
    "/oauth/token",
    response_model=TokenResponse,
    responses={400: {"model": OAuthErrorResponse}},
)
async def token(
    request: Request,
    grant_type: str = Form(None),
    code: str = Form(None),
    redirect_uri: str = Form(None),
    client_id: str = Form(None),
    code_verifier: str = Form(None),
    refresh_token: str = Form(None),
    oauth: OAuthState = Depends(get_oauth_state),
):
    """OAuth 2.0 Token Endpoint."""
    # Handle form data or JSON. A form body has already consumed the stream.
    content_type = request.headers.get("content-type", "")
    if grant_type is None and content_type.startswith("application/json"):
        try:
            data = await request.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            grant_type = data.get("grant_type")
            code = data.get("code")
            redirect_uri = data.get("redirect_uri")
            client_id = data.get("client_id")
            code_verifier = data.get("code_verifier")
            refresh_token = data.get("refresh_token")

    logger.debug(f"[TOKEN] grant_type: {grant_type}, client_id: {client_id}")

    try:
        tokens = exchange_token(
            oauth.store,
            grant_type,
            code=code,
            redirect_uri=redirect_uri,
            code_verifier=code_verifier,
            refresh_token=refresh_token,
        )
    except OAuthError as e:
        logger.info(f"[TOKEN] Request rejected: {e.error} ({e.description})")
        return e.to_response()

    logger.info(f"[TOKEN] Token pair issued (grant_type: {grant_type}, scope: {tokens.scope})")
    return tokens
