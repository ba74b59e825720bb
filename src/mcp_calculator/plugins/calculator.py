"""Baseline calculator tools: add, multiply, square and sqrt.

Each tool is a descriptor plus a pure handler. Adding a tool means adding
one more entry to CALCULATOR_TOOLS; nothing else needs to change.
"""

from __future__ import annotations

import math
from typing import Any

from mcp_calculator.plugins.base import (
    Number,
    ParameterSpec,
    ToolDescriptor,
    ToolDomainError,
    ToolHandler,
    format_number,
)
from mcp_calculator.plugins.registry import ToolRegistry


def add(arguments: dict[str, Any]) -> Number:
    return arguments["a"] + arguments["b"]


def multiply(arguments: dict[str, Any]) -> Number:
    return arguments["a"] * arguments["b"]


def square(arguments: dict[str, Any]) -> Number:
    return arguments["number"] * arguments["number"]


def sqrt(arguments: dict[str, Any]) -> Number:
    number = arguments["number"]
    if number < 0:
        raise ToolDomainError(
            f"Cannot calculate square root of negative number: {format_number(number)}"
        )
    if isinstance(number, int):
        root = math.isqrt(number)
        if root * root == number:
            return root
    try:
        return math.sqrt(number)
    except OverflowError:
        raise ToolDomainError(
            "Cannot calculate square root: number is too large for floating point"
        ) from None


CALCULATOR_TOOLS: list[tuple[ToolDescriptor, ToolHandler]] = [
    (
        ToolDescriptor(
            name="add",
            description="Add two numbers together",
            parameters=(
                ParameterSpec("a", "The first number to add"),
                ParameterSpec("b", "The second number to add"),
            ),
            summary="{a} + {b} = {result}",
        ),
        add,
    ),
    (
        ToolDescriptor(
            name="multiply",
            description="Multiply two numbers together",
            parameters=(
                ParameterSpec("a", "The first number to multiply"),
                ParameterSpec("b", "The second number to multiply"),
            ),
            summary="{a} × {b} = {result}",
        ),
        multiply,
    ),
    (
        ToolDescriptor(
            name="square",
            description="Calculate the square of a number",
            parameters=(ParameterSpec("number", "The number to square"),),
            summary="{number}² = {result}",
        ),
        square,
    ),
    (
        ToolDescriptor(
            name="sqrt",
            description="Calculate the square root of a number",
            parameters=(
                ParameterSpec(
                    "number",
                    "The number to find square root of (must be non-negative)",
                    minimum=0,
                ),
            ),
            summary="√{number} = {result}",
        ),
        sqrt,
    ),
]


def register_calculator_tools(registry: ToolRegistry) -> ToolRegistry:
    """Register the four baseline tools, in catalog order."""
    for descriptor, handler in CALCULATOR_TOOLS:
        registry.register(descriptor, handler)
    return registry


def create_default_registry() -> ToolRegistry:
    """Build a frozen registry holding the baseline calculator tools."""
    registry = register_calculator_tools(ToolRegistry())
    registry.freeze()
    return registry
