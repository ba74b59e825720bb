"""Schema-based validation of tool arguments.

Every tool call is checked against the tool's declared JSON Schema before
its handler runs, and failures are reported with the offending field and
the schema keyword that rejected it.
"""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import SchemaError, ValidationError, best_match

from mcp_calculator.plugins.base import ToolDescriptor, ToolRegistrationError, ToolValidationError


def _offending_field(error: ValidationError, schema: dict[str, Any]) -> str:
    """Work out which argument a schema error is about."""
    if error.path:
        return ".".join(str(p) for p in error.path)

    instance = error.instance if isinstance(error.instance, dict) else {}
    if error.validator == "required":
        missing = [name for name in error.validator_value if name not in instance]
        if missing:
            return missing[0]
    elif error.validator == "additionalProperties":
        known = set(schema.get("properties", {}))
        extra = sorted(name for name in instance if name not in known)
        if extra:
            return extra[0]

    return "arguments"


class ArgumentValidator:
    """Validates tool arguments against a descriptor's input schema.

    Validators are compiled once per tool at registration time.
    """

    def __init__(self, descriptor: ToolDescriptor) -> None:
        """Compile the validator.

        Args:
            descriptor: Tool whose schema is enforced.

        Raises:
            ToolRegistrationError: If the derived schema is itself invalid.
        """
        self._tool = descriptor.name
        self._schema = descriptor.input_schema
        try:
            Draft202012Validator.check_schema(self._schema)
        except SchemaError as e:
            raise ToolRegistrationError(f"Invalid schema for tool {self._tool}: {e.message}") from e
        self._validator = Draft202012Validator(self._schema)

    def validate(self, arguments: Any) -> dict[str, Any]:
        """Validate arguments.

        Args:
            arguments: Arguments to validate.

        Returns:
            The validated arguments.

        Raises:
            ToolValidationError: If validation fails.
        """
        error = best_match(self._validator.iter_errors(arguments))
        if error is None:
            return arguments

        field = _offending_field(error, self._schema)
        raise ToolValidationError(
            tool=self._tool,
            field=field,
            constraint=str(error.validator),
            reason=error.message,
        )
