"""Tool registry and the baseline calculator tools."""

from mcp_calculator.plugins.base import (
    ParameterSpec,
    ToolDescriptor,
    ToolDomainError,
    ToolError,
    ToolNotFoundError,
    ToolRegistrationError,
    ToolValidationError,
)
from mcp_calculator.plugins.calculator import (
    CALCULATOR_TOOLS,
    create_default_registry,
    register_calculator_tools,
)
from mcp_calculator.plugins.registry import ToolRegistry

__all__ = [
    "CALCULATOR_TOOLS",
    "ParameterSpec",
    "ToolDescriptor",
    "ToolDomainError",
    "ToolError",
    "ToolNotFoundError",
    "ToolRegistrationError",
    "ToolRegistry",
    "ToolValidationError",
    "create_default_registry",
    "register_calculator_tools",
]
