"""MCP initialize handshake.

The server answers ``initialize`` with a static capability descriptor. No
connection state is kept: every request is answered the same way.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

# Supported MCP protocol versions (oldest first)
SUPPORTED_PROTOCOL_VERSIONS = ("2024-11-05", "2025-03-26", "2025-06-18")
# Default version to advertise
MCP_PROTOCOL_VERSION = "2024-11-05"

SERVER_NAME = "calculator-mcp-server"
SERVER_VERSION = "1.0.0"


def negotiate_version(requested: Any) -> str:
    """Pick the protocol version to advertise.

    Args:
        requested: Version the client asked for, if any.

    Returns:
        The requested version when supported, otherwise the server default.
    """
    if isinstance(requested, str) and requested in SUPPORTED_PROTOCOL_VERSIONS:
        return requested
    return MCP_PROTOCOL_VERSION


@dataclass(frozen=True)
class ServerCapabilities:
    """What the server tells clients about itself."""

    name: str = SERVER_NAME
    version: str = SERVER_VERSION
    capabilities: dict[str, Any] = field(
        default_factory=lambda: {"tools": {"listChanged": False}}
    )

    @property
    def server_info(self) -> dict[str, str]:
        return {"name": self.name, "version": self.version}

    def handle_initialize(self, params: dict[str, Any] | None) -> dict[str, Any]:
        """Handle initialize request.

        Args:
            params: Initialize request parameters.

        Returns:
            Initialize response result.
        """
        requested = (params or {}).get("protocolVersion")
        return {
            "protocolVersion": negotiate_version(requested),
            "capabilities": self.capabilities,
            "serverInfo": self.server_info,
        }
