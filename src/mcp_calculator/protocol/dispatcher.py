"""JSON-RPC dispatcher.

Turns one raw inbound message into at most one outbound envelope. The
dispatcher holds no per-connection state, so the same instance serves
direct HTTP calls and every streaming session.
"""

from __future__ import annotations

import time
from typing import Any

from mcp_calculator._logging import get_logger
from mcp_calculator.audit import AuditLogger
from mcp_calculator.plugins.registry import ToolRegistry
from mcp_calculator.protocol.jsonrpc import (
    INTERNAL_ERROR,
    MAX_MESSAGE_SIZE,
    METHOD_NOT_FOUND,
    JsonRpcError,
    JsonRpcNotification,
    JsonRpcRequest,
    format_error,
    format_exception,
    format_response,
    parse_message,
)
from mcp_calculator.protocol.lifecycle import ServerCapabilities
from mcp_calculator.protocol.tools import ToolsHandler, parse_call_params

logger = get_logger(__name__)


class Dispatcher:
    """Routes JSON-RPC messages to the MCP method handlers.

    Supported methods:
    - initialize: static capability descriptor
    - ping: empty result
    - tools/list: registered tools in registration order
    - tools/call: validated tool invocation
    """

    def __init__(
        self,
        registry: ToolRegistry,
        capabilities: ServerCapabilities | None = None,
        audit: AuditLogger | None = None,
        max_message_size: int = MAX_MESSAGE_SIZE,
    ) -> None:
        """Initialize the dispatcher.

        Args:
            registry: Tools exposed through tools/list and tools/call.
            capabilities: Descriptor returned by initialize.
            audit: Optional audit trail for tool calls.
            max_message_size: Largest accepted message, in bytes.
        """
        self._registry = registry
        self._capabilities = capabilities or ServerCapabilities()
        self._tools_handler = ToolsHandler(registry)
        self._audit = audit
        self._max_message_size = max_message_size

    @property
    def capabilities(self) -> ServerCapabilities:
        return self._capabilities

    def handle(self, raw_message: str | bytes) -> str | None:
        """Handle an incoming JSON-RPC message.

        Never raises: every failure becomes an error envelope.

        Args:
            raw_message: Raw JSON-RPC message.

        Returns:
            Response string, or None for notifications.
        """
        try:
            message = parse_message(raw_message, self._max_message_size)
        except JsonRpcError as e:
            if e.notification:
                logger.debug("Dropped malformed notification", reason=e.message)
                return None
            return format_exception(e.msg_id, e)

        if isinstance(message, JsonRpcNotification):
            self._handle_notification(message)
            return None
        return self._handle_request(message)

    def _handle_notification(self, notification: JsonRpcNotification) -> None:
        """Run a notification for its side effects and discard the outcome."""
        if notification.method.startswith("notifications/"):
            # Client lifecycle notifications carry nothing to act on.
            return
        try:
            self._route(notification.method, notification.params, None)
        except JsonRpcError as e:
            logger.debug(
                "Notification failed", method=notification.method, reason=e.message
            )
        except Exception:
            logger.error(
                "Notification handler crashed", method=notification.method, exc_info=True
            )

    def _handle_request(self, request: JsonRpcRequest) -> str:
        """Handle a request and return response.

        Args:
            request: The request to handle.

        Returns:
            JSON-RPC response string.
        """
        try:
            result = self._route(request.method, request.params, request.id)
            return format_response(request.id, result)
        except JsonRpcError as e:
            return format_exception(request.id, e)
        except Exception:
            logger.error("Request handler crashed", method=request.method, exc_info=True)
            return format_error(request.id, INTERNAL_ERROR, "Internal error")

    def _route(self, method: str, params: Any, msg_id: Any) -> dict[str, Any]:
        """Dispatch on method name and return the result payload."""
        if method == "initialize":
            return self._capabilities.handle_initialize(
                params if isinstance(params, dict) else None
            )

        if method == "ping":
            return {}

        if method == "tools/list":
            return self._tools_handler.handle_list().to_dict()

        if method == "tools/call":
            call = parse_call_params(params)
            return self._call_tool(call.name, call.arguments, msg_id)

        raise JsonRpcError(METHOD_NOT_FOUND, f"Method not found: {method}", {"method": method})

    def _call_tool(self, name: str, arguments: dict[str, Any], msg_id: Any) -> dict[str, Any]:
        """Invoke a tool, recording the call in the audit trail."""
        if self._audit:
            self._audit.log_request(msg_id, name, arguments)
        started = time.perf_counter()
        status = "success"
        try:
            return self._tools_handler.handle_call(name, arguments).to_dict()
        except JsonRpcError as e:
            status = str(e.code)
            raise
        finally:
            if self._audit:
                duration_ms = (time.perf_counter() - started) * 1000
                self._audit.log_response(msg_id, name, status, duration_ms)
