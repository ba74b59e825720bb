"""Audit trail for tool invocations and streaming sessions.

Append-only JSON Lines log: one line per tool request, tool response and
session lifecycle event.
"""

from __future__ import annotations

import json
import re
import threading
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

# Patterns for sensitive argument keys
SENSITIVE_PATTERNS = [
    re.compile(r"password", re.IGNORECASE),
    re.compile(r"secret", re.IGNORECASE),
    re.compile(r"api[_-]?key", re.IGNORECASE),
    re.compile(r"token", re.IGNORECASE),
]


def _is_sensitive_key(key: str) -> bool:
    """Check if a key name indicates sensitive data."""
    return any(pattern.search(key) for pattern in SENSITIVE_PATTERNS)


def _sanitize_arguments(arguments: Any) -> Any:
    """Redact values stored under sensitive-looking keys."""
    if not isinstance(arguments, dict):
        return arguments
    sanitized = {}
    for key, value in arguments.items():
        if _is_sensitive_key(str(key)):
            sanitized[key] = "[REDACTED]"
        elif isinstance(value, dict):
            sanitized[key] = _sanitize_arguments(value)
        else:
            sanitized[key] = value
    return sanitized


def _get_timestamp() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class AuditLogger:
    """Append-only audit logger with JSON Lines format.

    The log file is flushed after each write.
    """

    def __init__(self, log_path: Path) -> None:
        """Initialize the audit logger.

        Args:
            log_path: Path to the audit log file.
        """
        self._log_path = log_path
        self._log_path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(log_path, "a", encoding="utf-8")  # noqa: SIM115
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._log_path

    def _write_line(self, data: dict[str, Any]) -> None:
        """Write a JSON line to the log file and flush."""
        line = json.dumps(data, default=str)
        with self._lock:
            if self._file.closed:
                return
            self._file.write(line + "\n")
            self._file.flush()

    def log_request(self, request_id: Any, tool_name: str, arguments: Any) -> None:
        """Log an incoming tool request.

        Args:
            request_id: JSON-RPC id of the request (None for notifications).
            tool_name: Name of the tool being invoked.
            arguments: Tool arguments (will be sanitized).
        """
        self._write_line(
            {
                "type": "request",
                "timestamp": _get_timestamp(),
                "request_id": request_id,
                "tool_name": tool_name,
                "arguments": _sanitize_arguments(arguments),
            }
        )

    def log_response(
        self, request_id: Any, tool_name: str, status: str, duration_ms: float
    ) -> None:
        """Log a tool response.

        Args:
            request_id: Request identifier to correlate with.
            tool_name: Name of the tool that ran.
            status: "success" or the JSON-RPC error code as text.
            duration_ms: Execution time in milliseconds.
        """
        self._write_line(
            {
                "type": "response",
                "timestamp": _get_timestamp(),
                "request_id": request_id,
                "tool_name": tool_name,
                "result_status": status,
                "execution_time_ms": round(duration_ms, 3),
            }
        )

    def log_session_event(self, session_id: str, event_type: str) -> None:
        """Log a streaming session lifecycle event (opened, closed)."""
        self._write_line(
            {
                "type": "session",
                "timestamp": _get_timestamp(),
                "session_id": session_id,
                "event_type": event_type,
            }
        )

    def close(self) -> None:
        """Close the log file."""
        with self._lock:
            if not self._file.closed:
                self._file.close()

    def __enter__(self) -> AuditLogger:
        """Context manager entry."""
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Context manager exit."""
        self.close()
