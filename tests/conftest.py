"""Pytest configuration and shared fixtures."""

import pytest
from sse_starlette.sse import AppStatus


@pytest.fixture(autouse=True)
def reset_sse_exit_event(monkeypatch):
    """Give every test a fresh sse-starlette shutdown event.

    The event is created lazily and bound to the loop of the first stream,
    so it cannot be shared between the event loops of separate tests.
    """
    monkeypatch.setattr(AppStatus, "should_exit_event", None, raising=False)
