"""Response and request schemas for the OAuth endpoints.

Discovery documents and handler replies share these models so field
names stay in one place.
"""

from typing import Optional

from pydantic import BaseModel, Field

DEFAULT_SCOPE = "mcp"
TOKEN_EXPIRES_IN = 3600  # seconds, reported only

GRANT_TYPES = ["authorization_code", "refresh_token"]
RESPONSE_TYPES = ["code"]
TOKEN_ENDPOINT_AUTH_METHOD = "none"
SERVICE_DOCUMENTATION = "https://github.com/nazq/test_mcp_servers"


# ============== Discovery ==============

class ProtectedResourceMetadata(BaseModel):
    """OAuth 2.0 Protected Resource Metadata (RFC 9728)."""

    resource: str
    authorization_servers: list[str]
    bearer_methods_supported: list[str] = ["header"]
    scopes_supported: list[str] = [DEFAULT_SCOPE]


class AuthorizationServerMetadata(BaseModel):
    """OAuth 2.0 Authorization Server Metadata (RFC 8414)."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    registration_endpoint: str
    response_types_supported: list[str] = RESPONSE_TYPES
    grant_types_supported: list[str] = GRANT_TYPES
    code_challenge_methods_supported: list[str] = ["S256", "plain"]
    token_endpoint_auth_methods_supported: list[str] = [TOKEN_ENDPOINT_AUTH_METHOD]
    scopes_supported: list[str] = [DEFAULT_SCOPE]
    service_documentation: str = SERVICE_DOCUMENTATION


# ============== Registration ==============

class ClientRegistrationRequest(BaseModel):
    client_name: Optional[str] = None
    redirect_uris: list[str] = Field(default_factory=list)


class ClientRegistrationResponse(BaseModel):
    client_id: str
    client_name: Optional[str] = None
    redirect_uris: list[str]
    grant_types: list[str] = GRANT_TYPES
    response_types: list[str] = RESPONSE_TYPES
    token_endpoint_auth_method: str = TOKEN_ENDPOINT_AUTH_METHOD


# ============== Token ==============

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = TOKEN_EXPIRES_IN
    refresh_token: str
    scope: str = DEFAULT_SCOPE


class OAuthErrorResponse(BaseModel):
    error: str
    error_description: str
