"""JSON-RPC 2.0 message parsing and formatting.

Implements the JSON-RPC 2.0 envelope rules used by every transport the
calculator server speaks: direct HTTP calls and SSE session pushes.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any

JSONRPC_VERSION = "2.0"

# Standard JSON-RPC 2.0 error codes
PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603

# Maximum message size (1 MB)
MAX_MESSAGE_SIZE = 1_048_576

RequestId = int | str
Params = dict[str, Any] | list[Any]


class JsonRpcError(Exception):
    """JSON-RPC error with code and message."""

    def __init__(
        self,
        code: int,
        message: str,
        data: Any | None = None,
        *,
        msg_id: RequestId | None = None,
        notification: bool = False,
    ) -> None:
        """Initialize the error.

        Args:
            code: JSON-RPC error code.
            message: Human-readable error message.
            data: Optional additional error data.
            msg_id: Id of the offending message, when one could be read.
            notification: True when the offending message carried no id.
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.data = data
        self.msg_id = msg_id
        self.notification = notification


@dataclass
class JsonRpcRequest:
    """Represents a JSON-RPC request (has id)."""

    id: RequestId
    method: str
    params: Params | None = None


@dataclass
class JsonRpcNotification:
    """Represents a JSON-RPC notification (no id)."""

    method: str
    params: Params | None = None


def _is_valid_id(value: Any) -> bool:
    # bool is an int subclass but never a valid id
    return isinstance(value, int | str) and not isinstance(value, bool)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def parse_message(
    raw: str | bytes, max_size: int = MAX_MESSAGE_SIZE
) -> JsonRpcRequest | JsonRpcNotification:
    """Parse a JSON-RPC message.

    Args:
        raw: Raw JSON text or bytes.
        max_size: Largest accepted payload, in bytes.

    Returns:
        Parsed request or notification.

    Raises:
        JsonRpcError: If the message is invalid. ``notification`` is set on
            the error when the message had no id, so callers can drop it.
    """
    # Check message size before parsing to prevent DoS
    size = len(raw.encode("utf-8")) if isinstance(raw, str) else len(raw)
    if size > max_size:
        raise JsonRpcError(
            PARSE_ERROR, f"Message too large: {size} bytes exceeds {max_size} limit"
        )

    # Parse JSON. ValueError covers bad syntax, undecodable bytes, NaN/Infinity
    # literals and integers past the digit limit; RecursionError covers nesting.
    try:
        data = json.loads(raw, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        raise JsonRpcError(PARSE_ERROR, f"Parse error: {e}") from e

    # Must be an object
    if not isinstance(data, dict):
        raise JsonRpcError(INVALID_REQUEST, "Invalid Request: message must be an object")

    notification = "id" not in data
    msg_id = data.get("id")
    if not notification and not _is_valid_id(msg_id):
        raise JsonRpcError(
            INVALID_REQUEST,
            "Invalid Request: id must be integer or string",
            {"field": "id"},
        )

    def invalid(reason: str, field: str) -> JsonRpcError:
        return JsonRpcError(
            INVALID_REQUEST,
            f"Invalid Request: {reason}",
            {"field": field},
            msg_id=msg_id,
            notification=notification,
        )

    # Validate jsonrpc version
    if data.get("jsonrpc") != JSONRPC_VERSION:
        raise invalid("jsonrpc must be '2.0'", "jsonrpc")

    # Must have method
    method = data.get("method")
    if not isinstance(method, str) or not method:
        raise invalid("method must be a non-empty string", "method")

    # Get params (optional)
    params = data.get("params")
    if params is not None and not isinstance(params, dict | list):
        raise invalid("params must be an object or an array", "params")

    if notification:
        return JsonRpcNotification(method=method, params=params)
    return JsonRpcRequest(id=msg_id, method=method, params=params)


def format_response(msg_id: RequestId, result: Any) -> str:
    """Format a successful JSON-RPC response.

    Args:
        msg_id: Request ID to echo back.
        result: Result payload.

    Returns:
        JSON string.
    """
    response = {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "result": result,
    }
    return json.dumps(response, ensure_ascii=False, allow_nan=False)


def format_error(
    msg_id: RequestId | None,
    code: int,
    message: str,
    data: Any | None = None,
) -> str:
    """Format a JSON-RPC error response.

    Args:
        msg_id: Request ID (or None for parse errors).
        code: Error code.
        message: Error message.
        data: Optional error data.

    Returns:
        JSON string.
    """
    error_obj: dict[str, Any] = {
        "code": code,
        "message": message,
    }
    if data is not None:
        error_obj["data"] = data

    response = {
        "jsonrpc": JSONRPC_VERSION,
        "id": msg_id,
        "error": error_obj,
    }
    return json.dumps(response, ensure_ascii=False)


def format_exception(msg_id: RequestId | None, error: JsonRpcError) -> str:
    """Format a :class:`JsonRpcError` as an error response."""
    return format_error(msg_id, error.code, error.message, error.data)
