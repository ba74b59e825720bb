"""Calculator MCP Server - command-line entry point.

Serves the calculator tools over HTTP and Server-Sent Events.

Adding a tool
-------------
Tools are registered once, before the server starts. Write a pure handler
that takes the validated ``arguments`` dict and returns a number, describe
its parameters with a ToolDescriptor, and add the pair to CALCULATOR_TOOLS
in mcp_calculator/plugins/calculator.py:

    (
        ToolDescriptor(
            name="cube",
            description="Calculate the cube of a number",
            parameters=(ParameterSpec("number", "The number to cube"),),
            summary="{number}³ = {result}",
        ),
        lambda arguments: arguments["number"] ** 3,
    )

The new tool then shows up in tools/list and is reachable via tools/call;
the dispatcher needs no change. Arguments are checked against the declared
parameters before the handler ever runs.
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

import uvicorn

from mcp_calculator._logging import configure_logging, get_logger
from mcp_calculator.config import LOG_LEVELS, ConfigLoadError, load_config
from mcp_calculator.protocol.lifecycle import SERVER_NAME, SERVER_VERSION
from mcp_calculator.server import create_app


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="mcp-calculator",
        description="Calculator MCP Server (JSON-RPC 2.0 over HTTP and SSE)",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=None,
        help="Path to server config YAML file (default: built-in settings)",
    )
    parser.add_argument("--host", help="Interface to bind (overrides config)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (overrides config)")
    parser.add_argument(
        "--log-level",
        choices=LOG_LEVELS,
        type=str.upper,
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--version",
        "-v",
        action="version",
        version=f"{SERVER_NAME} {SERVER_VERSION}",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the MCP server.

    Returns:
        Exit code (0 for success, non-zero for errors).
    """
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
    except ConfigLoadError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("log_level", args.log_level))
        if value is not None
    }
    config = replace(config, **overrides)

    configure_logging(config.log_level, config.log_format)
    logger = get_logger(__name__)

    app = create_app(config)
    base_url = f"http://{config.host}:{config.port}"
    logger.info(
        "Listening",
        jsonrpc=f"{base_url}/jsonrpc",
        sse=f"{base_url}/sse",
        health=f"{base_url}/health",
    )

    try:
        uvicorn.run(
            app,
            host=config.host,
            port=config.port,
            log_level=config.log_level.lower(),
            log_config=None,
        )
    except KeyboardInterrupt:
        return 130  # Standard exit code for SIGINT

    return 0


if __name__ == "__main__":
    sys.exit(main())
