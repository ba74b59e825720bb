"""Tests for the tool registry and argument validation."""

import pytest

from mcp_calculator.plugins.base import (
    ParameterSpec,
    ToolDescriptor,
    ToolDomainError,
    ToolNotFoundError,
    ToolRegistrationError,
    ToolValidationError,
)
from mcp_calculator.plugins.registry import ToolRegistry

HALVE = ToolDescriptor(
    name="halve",
    description="Halves a number",
    parameters=(ParameterSpec("value", "Number to halve"),),
    summary="{value} / 2 = {result}",
)

COUNT = ToolDescriptor(
    name="count",
    description="Counts up to a non-negative integer",
    parameters=(ParameterSpec("n", "Upper bound", type="integer", minimum=0),),
)


def halve(arguments):
    return arguments["value"] / 2


def count(arguments):
    return arguments["n"]


@pytest.fixture
def registry() -> ToolRegistry:
    """Registry holding two simple tools."""
    reg = ToolRegistry()
    reg.register(HALVE, halve)
    reg.register(COUNT, count)
    return reg


class TestToolDescriptor:
    """Tests for descriptor rendering."""

    def test_builds_input_schema(self):
        """Should derive a JSON Schema object from the parameters."""
        schema = COUNT.input_schema

        assert schema["type"] == "object"
        assert schema["properties"]["n"] == {
            "type": "integer",
            "description": "Upper bound",
            "minimum": 0,
        }
        assert schema["required"] == ["n"]
        assert schema["additionalProperties"] is False

    def test_optional_parameters_are_not_required(self):
        """Should leave optional parameters out of 'required'."""
        descriptor = ToolDescriptor(
            name="opt",
            description="Optional arg",
            parameters=(ParameterSpec("x", "maybe", required=False),),
        )

        assert descriptor.input_schema["required"] == []

    def test_to_dict_uses_mcp_field_names(self):
        """Should render name, description and inputSchema only."""
        d = HALVE.to_dict()

        assert set(d) == {"name", "description", "inputSchema"}
        assert d["name"] == "halve"

    def test_describe_uses_summary(self):
        """Should render the summary template with formatted numbers."""
        assert HALVE.describe({"value": 9}, 4.5) == "9 / 2 = 4.5"
        assert HALVE.describe({"value": 8.0}, 4.0) == "8 / 2 = 4"

    def test_describe_without_summary(self):
        """Should fall back to the bare result."""
        assert COUNT.describe({"n": 3}, 3) == "3"


class TestRegistration:
    """Tests for registering tools."""

    def test_lists_in_registration_order(self, registry: ToolRegistry):
        """Should list descriptors in the order they were registered."""
        assert [d.name for d in registry.list()] == ["halve", "count"]
        assert [t["name"] for t in registry.list_tools()] == ["halve", "count"]

    def test_listing_is_stable(self, registry: ToolRegistry):
        """Repeated listings should be identical."""
        assert registry.list_tools() == registry.list_tools()

    def test_rejects_duplicate_name(self, registry: ToolRegistry):
        """Should refuse a second tool with the same name."""
        with pytest.raises(ToolRegistrationError, match="already registered"):
            registry.register(HALVE, halve)

    def test_frozen_registry_rejects_registration(self, registry: ToolRegistry):
        """Should refuse registration once frozen."""
        registry.freeze()
        other = ToolDescriptor(name="other", description="Other")

        with pytest.raises(ToolRegistrationError, match="frozen"):
            registry.register(other, halve)
        assert registry.frozen is True
        assert "other" not in registry

    def test_get_and_contains(self, registry: ToolRegistry):
        """Should look up descriptors by name."""
        assert "halve" in registry
        assert len(registry) == 2
        assert registry.get("count") is COUNT
        with pytest.raises(ToolNotFoundError):
            registry.get("missing")


class TestInvoke:
    """Tests for invoking tools through the registry."""

    def test_invokes_handler(self, registry: ToolRegistry):
        """Should return the handler's result."""
        assert registry.invoke("halve", {"value": 10}) == 5

    def test_unknown_tool(self, registry: ToolRegistry):
        """Should raise ToolNotFoundError for unknown names."""
        with pytest.raises(ToolNotFoundError) as exc_info:
            registry.invoke("nope", {})
        assert exc_info.value.name == "nope"

    def test_missing_argument(self, registry: ToolRegistry):
        """Should name the missing argument and the 'required' constraint."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("halve", {})

        assert exc_info.value.field == "value"
        assert exc_info.value.constraint == "required"
        assert exc_info.value.tool == "halve"

    def test_wrong_type(self, registry: ToolRegistry):
        """Should reject non-numeric arguments."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("halve", {"value": "ten"})

        assert exc_info.value.field == "value"
        assert exc_info.value.constraint == "type"

    def test_boolean_is_not_a_number(self, registry: ToolRegistry):
        """Should reject booleans even though bool subclasses int."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("halve", {"value": True})

        assert exc_info.value.constraint == "type"

    def test_integer_type(self, registry: ToolRegistry):
        """Should reject fractional values for integer parameters."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("count", {"n": 1.5})

        assert exc_info.value.constraint == "type"

    def test_minimum_constraint(self, registry: ToolRegistry):
        """Should reject values below the declared minimum."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("count", {"n": -1})

        assert exc_info.value.field == "n"
        assert exc_info.value.constraint == "minimum"
        assert exc_info.value.to_dict()["tool"] == "count"

    def test_unexpected_argument(self, registry: ToolRegistry):
        """Should reject arguments the tool does not declare."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("halve", {"value": 1, "extra": 2})

        assert exc_info.value.field == "extra"
        assert exc_info.value.constraint == "additionalProperties"

    def test_arguments_must_be_object(self, registry: ToolRegistry):
        """Should reject non-object arguments."""
        with pytest.raises(ToolValidationError) as exc_info:
            registry.invoke("halve", [1])

        assert exc_info.value.field == "arguments"
        assert exc_info.value.constraint == "type"

    def test_handler_not_called_when_invalid(self):
        """Should never run the handler with invalid arguments."""
        calls = []
        reg = ToolRegistry()
        reg.register(HALVE, lambda arguments: calls.append(arguments) or 0)

        with pytest.raises(ToolValidationError):
            reg.invoke("halve", {"value": "x"})
        assert calls == []

    def test_non_finite_result_is_domain_error(self):
        """Should refuse to return NaN or infinity."""
        reg = ToolRegistry()
        reg.register(HALVE, lambda arguments: float("inf"))

        with pytest.raises(ToolDomainError, match="finite"):
            reg.invoke("halve", {"value": 1})

    def test_non_numeric_result_is_domain_error(self):
        """Should refuse results that are not numbers."""
        reg = ToolRegistry()
        reg.register(HALVE, lambda arguments: "half")

        with pytest.raises(ToolDomainError):
            reg.invoke("halve", {"value": 1})
