"""Tests for the baseline calculator tools."""

import math

import pytest

from mcp_calculator.plugins.base import ToolDomainError, ToolValidationError, format_number
from mcp_calculator.plugins.calculator import (
    CALCULATOR_TOOLS,
    add,
    create_default_registry,
    multiply,
    sqrt,
    square,
)


@pytest.fixture
def registry():
    return create_default_registry()


class TestHandlers:
    """Tests for the pure handler functions."""

    def test_add(self):
        assert add({"a": 10, "b": 5}) == 15

    def test_multiply(self):
        assert multiply({"a": 10, "b": 5}) == 50

    def test_square(self):
        assert square({"number": 5}) == 25

    def test_sqrt(self):
        assert sqrt({"number": 16}) == 4

    def test_sqrt_rejects_negative(self):
        """Should raise a domain error instead of returning NaN."""
        with pytest.raises(ToolDomainError, match="negative number: -1"):
            sqrt({"number": -1})

    def test_sqrt_of_large_perfect_square(self):
        """Should return the exact root of integers too large for a float."""
        assert sqrt({"number": 10**400}) == 10**200

    def test_sqrt_of_large_non_square(self):
        """Should raise a domain error instead of overflowing."""
        with pytest.raises(ToolDomainError, match="too large"):
            sqrt({"number": 10**400 + 1})

    def test_handles_floats(self):
        assert add({"a": 0.5, "b": 0.25}) == 0.75
        assert math.isclose(sqrt({"number": 2}), math.sqrt(2))


class TestCatalog:
    """Tests for the registered tool catalog."""

    def test_catalog_order(self, registry):
        """Should expose exactly the four tools in a fixed order."""
        assert [t["name"] for t in registry.list_tools()] == ["add", "multiply", "square", "sqrt"]

    def test_catalog_is_frozen(self, registry):
        """The default registry should not accept new tools."""
        assert registry.frozen is True

    def test_binary_tools_require_a_and_b(self, registry):
        for name in ("add", "multiply"):
            schema = registry.get(name).input_schema
            assert schema["required"] == ["a", "b"]
            assert schema["properties"]["a"]["type"] == "number"

    def test_sqrt_declares_non_negative(self, registry):
        schema = registry.get("sqrt").input_schema
        assert schema["properties"]["number"]["minimum"] == 0

    def test_every_tool_has_a_summary(self):
        for descriptor, _handler in CALCULATOR_TOOLS:
            assert descriptor.summary


class TestInvocation:
    """Tests for calling the tools through the registry."""

    @pytest.mark.parametrize(
        ("name", "arguments", "expected"),
        [
            ("add", {"a": 10, "b": 5}, 15),
            ("multiply", {"a": 10, "b": 5}, 50),
            ("square", {"number": 5}, 25),
            ("sqrt", {"number": 16}, 4),
        ],
    )
    def test_baseline_results(self, registry, name, arguments, expected):
        assert registry.invoke(name, arguments) == expected

    def test_sqrt_negative_fails_validation(self, registry):
        """Should stop negative input at the schema, before the handler."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("sqrt", {"number": -1})

        assert exc_info.value.field == "number"
        assert exc_info.value.constraint == "minimum"

    def test_overflow_is_domain_error(self, registry):
        """Should refuse results that overflow to infinity."""
        with pytest.raises(ToolDomainError):
            registry.invoke("square", {"number": 1e200})

    def test_sqrt_of_large_integer(self, registry):
        assert registry.invoke("sqrt", {"number": 10**400}) == 10**200

    def test_summaries(self, registry):
        assert registry.get("add").describe({"a": 10, "b": 5}, 15) == "10 + 5 = 15"
        assert registry.get("multiply").describe({"a": 4, "b": 3}, 12) == "4 × 3 = 12"
        assert registry.get("square").describe({"number": 5}, 25) == "5² = 25"
        assert registry.get("sqrt").describe({"number": 16}, 4.0) == "√16 = 4"


class TestFormatNumber:
    """Tests for number rendering."""

    def test_integral_floats_drop_fraction(self):
        assert format_number(4.0) == "4"

    def test_keeps_fractions(self):
        assert format_number(2.5) == "2.5"

    def test_large_floats_keep_repr(self):
        assert format_number(1e20) == "1e+20"

    def test_ints_unchanged(self):
        assert format_number(-7) == "-7"
