"""MCP Test Server - application factory.

The app serves:
- Mock OAuth 2.1 flow for MCP clients (discovery, registration,
  authorization, token) via oauth/
- MCP test tools via Streamable HTTP (/mcp), behind the access guard
- Health and server info endpoints

Run with `mcp-test-server` (see cli.py) or
`uvicorn main:create_app --factory`.
"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware import Middleware

from config import Config, load_config
from oauth.endpoints import init_oauth_routes
from oauth.middleware import MCPAuthMiddleware
from oauth.stores import GrantStore
from tools import mcp

logger = logging.getLogger(__name__)

VERSION = "0.1.0"


def create_app(config: Config = None, store: GrantStore = None) -> FastAPI:
    """Build the FastAPI app.

    Args:
        config: Server configuration (read from the environment if omitted)
        store: Grant store for the OAuth endpoints (a fresh one if omitted)
    """
    config = config or load_config()
    issuer = config.issuer

    logger.info(f"[STARTUP] Issuer: {issuer}")
    logger.info(f"[STARTUP] API key required: {config.requires_auth()}")

    # ============== Streamable HTTP MCP App ==============
    # Built before the FastAPI app: FastAPI needs its lifespan to start the
    # session manager's task group.
    mcp_http_app = mcp.http_app(
        path="/",  # Route at root of mounted app
        transport="streamable-http",
        middleware=[Middleware(MCPAuthMiddleware, config=config)],
    )

    app = FastAPI(
        title="MCP Test Server",
        description="MCP conformance test server with a mock OAuth 2.1 flow",
        version=VERSION,
        lifespan=mcp_http_app.lifespan,
    )

    # Add CORS middleware for browser-based MCP client access
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.mount("/mcp", mcp_http_app)

    oauth = init_oauth_routes(app, issuer, store)

    # ============== Server Info Endpoints ==============

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    @app.get("/")
    async def root():
        """Root endpoint with server info."""
        return {
            "name": "MCP Test Server",
            "version": VERSION,
            "endpoints": {
                "streamable_http": "/mcp",
                "health": "/health",
            },
            "auth_required": config.requires_auth(),
            "oauth": {
                "protected_resource": f"{oauth.issuer}/.well-known/oauth-protected-resource",
                "authorization_server": f"{oauth.issuer}/.well-known/oauth-authorization-server",
            },
        }

    return app


# ============== Main Entry Point ==============

if __name__ == "__main__":
    from cli import main
    main()
