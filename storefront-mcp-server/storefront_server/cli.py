"""Command-line interface for Storefront MCP Server."""

import argparse
import asyncio
import os
from typing import Optional, Sequence

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="storefront-mcp-server",
        description="Storefront MCP Server - Browse the catalog, fill the basket and check out",
    )
    parser.add_argument(
        "--mode",
        choices=["stdio", "http"],
        default="stdio",
        help="Server mode: stdio (for MCP clients) or http (REST API)",
    )
    parser.add_argument(
        "--host",
        default="0.0.0.0",
        help="HTTP server host (only for http mode, default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=8000,
        help="HTTP server port (only for http mode, default: 8000)",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        help="Overrides STOREFRONT_LOG_LEVEL",
    )
    parser.add_argument(
        "--api-url",
        help="Shop API base URL, overrides STOREFRONT_API_URL",
    )
    return parser


def apply_overrides(args: argparse.Namespace) -> None:
    """Export command-line overrides so ``Settings.from_env()`` sees them."""
    if args.log_level:
        os.environ["STOREFRONT_LOG_LEVEL"] = args.log_level
    if args.api_url:
        os.environ["STOREFRONT_API_URL"] = args.api_url


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)
    apply_overrides(args)

    if args.mode == "stdio":
        from .server import main as server_main

        asyncio.run(server_main())
    else:
        from . import http_server

        print(f"Starting Storefront HTTP Server on {args.host}:{args.port}")
        print(f"API documentation available at http://{args.host}:{args.port}/docs")
        http_server.run_http_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
