"""MCP protocol layer: JSON-RPC envelopes, dispatch and streaming sessions."""

from mcp_calculator.protocol.dispatcher import Dispatcher
from mcp_calculator.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    INVALID_REQUEST,
    METHOD_NOT_FOUND,
    PARSE_ERROR,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    format_error,
    format_response,
    parse_message,
)
from mcp_calculator.protocol.lifecycle import MCP_PROTOCOL_VERSION, ServerCapabilities
from mcp_calculator.protocol.session import (
    Session,
    SessionManager,
    SessionNotFoundError,
    SessionState,
)
from mcp_calculator.protocol.tools import ToolsCallResult, ToolsHandler, ToolsListResult

__all__ = [
    "Dispatcher",
    "INTERNAL_ERROR",
    "INVALID_PARAMS",
    "INVALID_REQUEST",
    "JsonRpcError",
    "JsonRpcNotification",
    "JsonRpcRequest",
    "MCP_PROTOCOL_VERSION",
    "METHOD_NOT_FOUND",
    "PARSE_ERROR",
    "ServerCapabilities",
    "Session",
    "SessionManager",
    "SessionNotFoundError",
    "SessionState",
    "ToolsCallResult",
    "ToolsHandler",
    "ToolsListResult",
    "format_error",
    "format_response",
    "parse_message",
]
