"""Calculator MCP server: JSON-RPC 2.0 tools over HTTP and Server-Sent Events."""

__version__ = "1.0.0"
