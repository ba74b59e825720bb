"""MCP tools/list and tools/call handlers.

Handles tool-related MCP requests, routing them through the tool registry
and translating registry failures into JSON-RPC errors.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from mcp_calculator._logging import get_logger
from mcp_calculator.plugins.base import (
    Number,
    ToolDomainError,
    ToolNotFoundError,
    ToolValidationError,
)
from mcp_calculator.plugins.registry import ToolRegistry
from mcp_calculator.protocol.jsonrpc import (
    INTERNAL_ERROR,
    INVALID_PARAMS,
    METHOD_NOT_FOUND,
    JsonRpcError,
    Params,
)

logger = get_logger(__name__)


@dataclass
class ToolsListResult:
    """Result of tools/list request."""

    tools: list[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/list result format.
        """
        return {"tools": self.tools}


@dataclass
class ToolsCallResult:
    """Result of a successful tools/call request."""

    text: str
    value: Number

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP result format.

        Returns:
            Dictionary in MCP tools/call result format.
        """
        return {
            "content": [{"type": "text", "text": self.text}],
            "structuredContent": {"result": self.value},
            "isError": False,
        }


@dataclass
class ToolCall:
    """The ``name``/``arguments`` pair extracted from tools/call params."""

    name: str
    arguments: dict[str, Any]


def parse_call_params(params: Params | None) -> ToolCall:
    """Extract the tool name and arguments from tools/call params.

    Raises:
        JsonRpcError: INVALID_PARAMS if the shape is wrong.
    """
    if not isinstance(params, dict):
        raise JsonRpcError(
            INVALID_PARAMS,
            "Invalid params: tools/call expects an object with 'name' and 'arguments'",
            {"field": "params", "constraint": "type"},
        )

    name = params.get("name")
    if not isinstance(name, str) or not name:
        raise JsonRpcError(
            INVALID_PARAMS,
            "Invalid params: 'name' must be a non-empty string",
            {"field": "name", "constraint": "type"},
        )

    arguments = params.get("arguments", {})
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise JsonRpcError(
            INVALID_PARAMS,
            "Invalid params: 'arguments' must be an object",
            {"field": "arguments", "constraint": "type"},
        )

    return ToolCall(name=name, arguments=arguments)


class ToolsHandler:
    """Handles tools/list and tools/call MCP requests.

    Routes requests through the tool registry and formats results
    according to MCP specification.
    """

    def __init__(self, registry: ToolRegistry) -> None:
        """Initialize the handler.

        Args:
            registry: Registry holding the exposed tools.
        """
        self._registry = registry

    def handle_list(self) -> ToolsListResult:
        """Handle tools/list request.

        Returns:
            ToolsListResult with all available tools.
        """
        return ToolsListResult(tools=self._registry.list_tools())

    def handle_call(self, name: str, arguments: dict[str, Any]) -> ToolsCallResult:
        """Handle tools/call request.

        Args:
            name: Name of the tool to call.
            arguments: Tool arguments.

        Returns:
            ToolsCallResult with execution result.

        Raises:
            JsonRpcError: For unknown tools, invalid arguments or failed calls.
        """
        try:
            value = self._registry.invoke(name, arguments)
        except ToolNotFoundError as e:
            raise JsonRpcError(METHOD_NOT_FOUND, str(e), {"tool": name}) from e
        except ToolValidationError as e:
            raise JsonRpcError(INVALID_PARAMS, str(e), e.to_dict()) from e
        except ToolDomainError as e:
            logger.info("Tool rejected its input", tool=name, reason=str(e))
            raise JsonRpcError(
                INTERNAL_ERROR,
                f"Tool '{name}' failed: {e}",
                {"tool": name, "reason": str(e)},
            ) from e
        except Exception as e:
            logger.error("Tool execution crashed", tool=name, exc_info=True)
            raise JsonRpcError(
                INTERNAL_ERROR,
                f"Tool '{name}' execution failed",
                {"tool": name, "reason": type(e).__name__},
            ) from e

        text = self._registry.get(name).describe(arguments, value)
        return ToolsCallResult(text=text, value=value)
