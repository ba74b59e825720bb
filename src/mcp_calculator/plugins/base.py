"""Tool descriptors and the errors raised around tool invocation.

Defines what a tool declares about itself and what a tool handler may raise.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, Literal

Number = int | float
ToolHandler = Callable[[dict[str, Any]], Number]


class ToolError(Exception):
    """Base class for tool registry errors."""

    pass


class ToolRegistrationError(ToolError):
    """Raised when a tool cannot be registered (duplicate name, frozen registry)."""

    pass


class ToolNotFoundError(ToolError):
    """Raised when a tool is not found."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Tool not found: {name}")
        self.name = name


class ToolValidationError(ToolError):
    """Raised when tool arguments do not satisfy the declared schema."""

    def __init__(self, tool: str, field: str, constraint: str, reason: str) -> None:
        """Initialize the error.

        Args:
            tool: Name of the tool being invoked.
            field: Offending argument, or "arguments" for whole-object failures.
            constraint: Violated schema keyword (required, type, minimum, ...).
            reason: Human-readable explanation.
        """
        super().__init__(f"Invalid arguments for '{tool}': {reason}")
        self.tool = tool
        self.field = field
        self.constraint = constraint
        self.reason = reason

    def to_dict(self) -> dict[str, Any]:
        """Return the error detail carried in a JSON-RPC error's data."""
        return {
            "tool": self.tool,
            "field": self.field,
            "constraint": self.constraint,
            "reason": self.reason,
        }


class ToolDomainError(ToolError):
    """Raised by a handler when its inputs have no defined result."""

    pass


@dataclass(frozen=True)
class ParameterSpec:
    """One declared tool parameter."""

    name: str
    description: str
    type: Literal["number", "integer"] = "number"
    required: bool = True
    minimum: Number | None = None

    def to_schema(self) -> dict[str, Any]:
        """Render as a JSON Schema property."""
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        return schema


def format_number(value: Number) -> str:
    """Render a number the way results are shown to clients (4.0 -> "4")."""
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e15:
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class ToolDescriptor:
    """Definition of a tool: name, description and declared parameters.

    ``summary`` is an optional format string used to describe a finished
    call, e.g. ``"{a} + {b} = {result}"``. It is not part of the wire format.
    """

    name: str
    description: str
    parameters: tuple[ParameterSpec, ...] = field(default_factory=tuple)
    summary: str | None = None

    def describe(self, arguments: dict[str, Any], result: Number) -> str:
        """Render a finished call as a one-line text."""
        if self.summary is None:
            return format_number(result)
        values = {key: format_number(value) for key, value in arguments.items()}
        return self.summary.format(**values, result=format_number(result))

    @property
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema for the tool's ``arguments`` object."""
        return {
            "type": "object",
            "properties": {p.name: p.to_schema() for p in self.parameters},
            "required": [p.name for p in self.parameters if p.required],
            "additionalProperties": False,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert to MCP tool format.

        Returns:
            Dictionary in MCP tools/list format.
        """
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }
