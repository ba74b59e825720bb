"""Streaming session manager.

Bridges long-lived SSE connections to the dispatcher. Each session owns an
outbound queue; responses to messages posted for a session are pushed onto
that queue and drained by the connection's stream task.

Session states: CONNECTING -> OPEN -> CLOSING -> CLOSED.
"""

from __future__ import annotations

import asyncio
import time
import uuid
from collections.abc import AsyncIterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from mcp_calculator._logging import get_logger
from mcp_calculator.audit import AuditLogger
from mcp_calculator.protocol.dispatcher import Dispatcher

logger = get_logger(__name__)

DEFAULT_KEEPALIVE_INTERVAL = 30.0
DEFAULT_ENDPOINT_PATH = "/messages"

# Queue marker telling the stream loop the channel is closed
_CLOSED = object()


class SessionState(Enum):
    """Streaming session lifecycle states."""

    CONNECTING = "connecting"
    OPEN = "open"
    CLOSING = "closing"
    CLOSED = "closed"


class SessionNotFoundError(Exception):
    """Raised when a message targets an unknown or closed session."""

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session not found or expired: {session_id}")
        self.session_id = session_id


@dataclass
class Session:
    """One streaming connection and its outbound channel."""

    id: str
    created_at: float = field(default_factory=time.time)
    state: SessionState = SessionState.CONNECTING
    last_activity: float = field(default_factory=time.monotonic)
    channel: asyncio.Queue[Any] = field(default_factory=asyncio.Queue)

    @property
    def is_open(self) -> bool:
        return self.state == SessionState.OPEN

    def deliver(self, event: dict[str, Any]) -> bool:
        """Queue an event for the client.

        Returns:
            False if the session is no longer open and the event was dropped.
        """
        if not self.is_open:
            return False
        self.channel.put_nowait(event)
        return True

    def close_channel(self) -> bool:
        """Close the outbound channel.

        Returns:
            True on the first call only.
        """
        if self.state in (SessionState.CLOSING, SessionState.CLOSED):
            return False
        self.state = SessionState.CLOSING
        self.channel.put_nowait(_CLOSED)
        return True


class SessionManager:
    """Owns the lifecycle of every streaming session.

    The session table is the only state shared between connection tasks,
    and it is guarded by a single asyncio lock.
    """

    def __init__(
        self,
        dispatcher: Dispatcher,
        keepalive_interval: float = DEFAULT_KEEPALIVE_INTERVAL,
        idle_timeout: float = 0,
        audit: AuditLogger | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            dispatcher: Dispatcher used for every session.
            keepalive_interval: Seconds of silence before a keep-alive is sent.
            idle_timeout: Seconds without client messages before a session is
                closed; 0 keeps sessions open until the connection drops.
            audit: Optional audit trail for session events.
        """
        if keepalive_interval <= 0:
            raise ValueError("keepalive_interval must be positive")
        if idle_timeout < 0:
            raise ValueError("idle_timeout must not be negative")

        self._dispatcher = dispatcher
        self._keepalive_interval = keepalive_interval
        self._idle_timeout = idle_timeout
        self._audit = audit
        self._sessions: dict[str, Session] = {}
        self._lock = asyncio.Lock()

    @property
    def keepalive_interval(self) -> float:
        return self._keepalive_interval

    def __len__(self) -> int:
        return len(self._sessions)

    def session_ids(self) -> list[str]:
        """Ids of the sessions currently registered."""
        return list(self._sessions)

    def get(self, session_id: str) -> Session | None:
        """Look up an open session."""
        session = self._sessions.get(session_id)
        if session is None or not session.is_open:
            return None
        return session

    async def open(self, endpoint_path: str = DEFAULT_ENDPOINT_PATH) -> Session:
        """Accept a streaming connection.

        Registers the session and queues the endpoint event that tells the
        client where to post its messages.

        Args:
            endpoint_path: Path clients post session messages to.

        Returns:
            The new, open session.
        """
        session = Session(id=uuid.uuid4().hex)
        async with self._lock:
            self._sessions[session.id] = session

        session.state = SessionState.OPEN
        session.deliver({"event": "endpoint", "data": f"{endpoint_path}?session_id={session.id}"})

        logger.info("Session opened", session_id=session.id)
        if self._audit:
            self._audit.log_session_event(session.id, "opened")
        return session

    async def submit(self, session_id: str, raw_message: str | bytes) -> bool:
        """Dispatch a message posted for a session.

        The response, if any, is pushed onto the session's stream.

        Args:
            session_id: Target session.
            raw_message: Raw JSON-RPC message.

        Returns:
            True if a response was queued, False for notifications or when
            the session closed before the response could be delivered.

        Raises:
            SessionNotFoundError: If the session is unknown or closed.
        """
        async with self._lock:
            session = self._sessions.get(session_id)
        if session is None or not session.is_open:
            raise SessionNotFoundError(session_id)

        session.last_activity = time.monotonic()
        # Handlers never suspend, so responses leave in submission order.
        response = self._dispatcher.handle(raw_message)
        if response is None:
            return False

        delivered = session.deliver({"event": "message", "data": response})
        if not delivered:
            logger.debug("Dropped response for closed session", session_id=session_id)
        return delivered

    async def close(self, session_id: str, reason: str = "closed") -> bool:
        """Close a session and release its table entry.

        Safe to call more than once; only the first call has any effect.

        Returns:
            True if this call closed the session.
        """
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is None or not session.close_channel():
            return False

        session.state = SessionState.CLOSED
        logger.info("Session closed", session_id=session_id, reason=reason)
        if self._audit:
            self._audit.log_session_event(session_id, reason)
        return True

    async def shutdown(self) -> None:
        """Close every session."""
        for session_id in self.session_ids():
            await self.close(session_id, reason="shutdown")

    async def stream(self, session: Session) -> AsyncIterator[dict[str, Any]]:
        """Yield the session's outbound events until it closes.

        Sends a keep-alive comment whenever the channel has been idle for
        ``keepalive_interval`` seconds. The session is closed when the
        iterator finishes for any reason: the client disconnecting, a failed
        write cancelling the task, idle timeout or explicit shutdown.

        Args:
            session: Session returned by :meth:`open`.
        """
        reason = "disconnected"
        try:
            while True:
                try:
                    event = await asyncio.wait_for(
                        session.channel.get(), timeout=self._keepalive_interval
                    )
                except TimeoutError:
                    if self._is_idle(session):
                        reason = "idle_timeout"
                        return
                    yield {"comment": "keepalive"}
                    continue

                if event is _CLOSED:
                    reason = "closed"
                    return
                yield event
        finally:
            await self.close(session.id, reason=reason)

    def _is_idle(self, session: Session) -> bool:
        if not self._idle_timeout:
            return False
        return time.monotonic() - session.last_activity >= self._idle_timeout
