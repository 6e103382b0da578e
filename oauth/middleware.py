"""Access guard for the MCP endpoint.

Validates the static API key (when one is configured) and the Origin
header. The OAuth endpoints are not behind this guard; the two are
siblings on the same app.
"""

import logging
import secrets

from fastapi import Request
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from config import Config

logger = logging.getLogger(__name__)

ALLOWED_ORIGIN_PREFIXES = (
    "http://localhost",
    "http://127.0.0.1",
    "https://localhost",
    # VS Code / Electron webviews
    "vscode-file://",
    "vscode-webview://",
)


def is_allowed_origin(origin: str) -> bool:
    """Check an Origin header against the localhost / editor allow-list."""
    return origin.startswith(ALLOWED_ORIGIN_PREFIXES)


def forbidden_response(message: str) -> JSONResponse:
    """Return 403 Forbidden with the guard's error body."""
    return JSONResponse({"error": "forbidden", "message": message}, status_code=403)


class MCPAuthMiddleware(BaseHTTPMiddleware):
    """Middleware enforcing the API key and Origin allow-list on /mcp."""

    def __init__(self, app, config: Config):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next):
        if self.config.requires_auth():
            auth_header = request.headers.get("Authorization")
            if auth_header is None:
                logger.info("[AUTH] Request rejected: missing Authorization header")
                return forbidden_response("Missing Authorization header")

            if not auth_header.startswith("Bearer "):
                logger.info("[AUTH] Request rejected: invalid Authorization header format")
                return forbidden_response(
                    "Invalid Authorization header format. Expected: Bearer <token>"
                )

            token = auth_header[7:]
            if not secrets.compare_digest(token.encode(), self.config.api_key.encode()):
                logger.info("[AUTH] Request rejected: invalid API key")
                return forbidden_response("Invalid API key")

        origin = request.headers.get("Origin")
        if origin is not None and not is_allowed_origin(origin):
            logger.warning(f"[AUTH] Request rejected: origin not allowed: {origin}")
            return forbidden_response("Origin not allowed")

        return await call_next(request)
