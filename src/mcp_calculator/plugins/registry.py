"""Tool registry - maps tool names to descriptors and handlers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

from mcp_calculator._logging import get_logger
from mcp_calculator.plugins.base import (
    Number,
    ToolDescriptor,
    ToolDomainError,
    ToolHandler,
    ToolNotFoundError,
    ToolRegistrationError,
)
from mcp_calculator.plugins.validator import ArgumentValidator

logger = get_logger(__name__)


@dataclass(frozen=True)
class RegisteredTool:
    """A descriptor together with its handler and compiled validator."""

    descriptor: ToolDescriptor
    handler: ToolHandler
    validator: ArgumentValidator


class ToolRegistry:
    """Holds the tools the server exposes.

    Tools are registered once at start-up. Listing preserves registration
    order, and invocation always validates arguments before the handler
    runs.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._tools: dict[str, RegisteredTool] = {}
        self._frozen = False

    def register(self, descriptor: ToolDescriptor, handler: ToolHandler) -> None:
        """Register a tool.

        Args:
            descriptor: Tool definition.
            handler: Callable run with the validated arguments.

        Raises:
            ToolRegistrationError: If the name is taken or the registry is frozen.
        """
        if self._frozen:
            raise ToolRegistrationError(
                f"Cannot register '{descriptor.name}': registry is frozen"
            )
        if descriptor.name in self._tools:
            raise ToolRegistrationError(f"Tool already registered: {descriptor.name}")

        self._tools[descriptor.name] = RegisteredTool(
            descriptor=descriptor,
            handler=handler,
            validator=ArgumentValidator(descriptor),
        )
        logger.debug("Registered tool", tool=descriptor.name)

    def freeze(self) -> None:
        """Refuse any further registration."""
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def get(self, name: str) -> ToolDescriptor:
        """Look up a tool descriptor.

        Raises:
            ToolNotFoundError: If the tool is not registered.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)
        return tool.descriptor

    def list(self) -> list[ToolDescriptor]:
        """Return all descriptors in registration order."""
        return [tool.descriptor for tool in self._tools.values()]

    def list_tools(self) -> list[dict[str, Any]]:
        """List all available tools in MCP format.

        Returns:
            List of tool definitions in MCP format.
        """
        return [descriptor.to_dict() for descriptor in self.list()]

    def invoke(self, name: str, arguments: Any) -> Number:
        """Validate arguments and call a tool's handler.

        Args:
            name: Name of the tool to call.
            arguments: Arguments to pass to the tool.

        Returns:
            The handler's numeric result.

        Raises:
            ToolNotFoundError: If the tool is not registered.
            ToolValidationError: If the arguments fail schema validation.
            ToolDomainError: If the handler has no result for these inputs.
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolNotFoundError(name)

        validated = tool.validator.validate(arguments)
        result = tool.handler(validated)

        if isinstance(result, bool) or not isinstance(result, int | float):
            raise ToolDomainError(f"Tool '{name}' returned a non-numeric result")
        if isinstance(result, float) and not math.isfinite(result):
            raise ToolDomainError(f"Result of '{name}' is not a finite number")
        return result
