"""CLI entry point for mcp-test-server.

Runs the MCP test server (mock OAuth flow + /mcp endpoint) with uvicorn.
Configuration comes from MCP_* environment variables (optionally from a
.env file), with command-line flags taking precedence.
"""
import argparse
import logging
import sys
from pathlib import Path

import uvicorn
from dotenv import load_dotenv

from config import LOG_LEVELS, load_config
from logging_config import setup_logging
from main import VERSION, create_app

logger = logging.getLogger(__name__)


def load_env(env_file: Path = Path(".env")) -> bool:
    """Load environment variables from a .env file if present.

    Variables already set in the environment are not overridden.
    """
    if env_file.exists():
        load_dotenv(env_file)
        return True
    return False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mcp-test-server",
        description="MCP conformance test server with a mock OAuth 2.1 flow.",
        epilog="""
Environment variables:
  MCP_HOST          Bind address (default: 0.0.0.0)
  MCP_PORT          Listen port (default: 3000)
  MCP_API_KEY       Require this Bearer token on /mcp
  MCP_ISSUER        Base URL advertised in OAuth metadata
  MCP_LOG_LEVEL     debug, info, warning, error, critical (default: info)
  MCP_LOG_FORMAT    plain or json (default: plain)
""",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--host", help="Bind address")
    parser.add_argument("--port", type=int, help="Listen port")
    parser.add_argument("--api-key", help="Require this Bearer token on /mcp")
    parser.add_argument("--issuer", help="Base URL advertised in OAuth metadata")
    parser.add_argument("--log-level", type=str.lower, choices=LOG_LEVELS, help="Log level")
    parser.add_argument("--log-format", choices=["plain", "json"], help="Log output format")
    parser.add_argument("--version", "-v", action="store_true", help="Show version and exit")
    return parser


def main(argv: list[str] = None) -> int:
    """Parse arguments and run the server."""
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"mcp-test-server v{VERSION}")
        return 0

    load_env()
    config = load_config().with_overrides(
        host=args.host,
        port=args.port,
        api_key=args.api_key,
        issuer=args.issuer,
        log_level=args.log_level,
        log_format=args.log_format,
    )

    setup_logging(config.log_level, json_format=config.log_format == "json")
    logger.info(f"[STARTUP] Starting MCP test server on {config.host}:{config.port}")

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level)
    return 0


if __name__ == "__main__":
    sys.exit(main())
