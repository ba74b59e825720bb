"""HTTP transport for the calculator MCP server.

Creates the FastAPI application that carries JSON-RPC messages over plain
HTTP POST and pushes session responses over Server-Sent Events.

Routes:
- GET  /health                    liveness probe
- GET  /sse, GET /mcp             open a streaming session
- POST /jsonrpc, POST /mcp        one request envelope in, one response out
- POST <endpoint_path>?session_id session message, answered on the stream
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, Response, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sse_starlette.sse import EventSourceResponse

from mcp_calculator._logging import get_logger
from mcp_calculator.audit import AuditLogger
from mcp_calculator.config import ServerConfig
from mcp_calculator.plugins.calculator import create_default_registry
from mcp_calculator.plugins.registry import ToolRegistry
from mcp_calculator.protocol.dispatcher import Dispatcher
from mcp_calculator.protocol.lifecycle import ServerCapabilities
from mcp_calculator.protocol.session import SessionManager, SessionNotFoundError

logger = get_logger(__name__)

JSON_MEDIA_TYPE = "application/json"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def create_app(
    config: ServerConfig | None = None,
    registry: ToolRegistry | None = None,
) -> FastAPI:
    """Build the ASGI application.

    Args:
        config: Server settings; defaults are used when omitted.
        registry: Tools to expose; defaults to the calculator tools.

    Returns:
        FastAPI application with dispatcher and session manager attached
        to ``app.state``.
    """
    config = config or ServerConfig()
    if registry is None:
        registry = create_default_registry()

    audit = AuditLogger(Path(config.audit_log_file)) if config.audit_log_file else None
    dispatcher = Dispatcher(
        registry,
        capabilities=ServerCapabilities(name=config.name, version=config.server_version),
        audit=audit,
        max_message_size=config.max_message_size,
    )
    sessions = SessionManager(
        dispatcher,
        keepalive_interval=config.keepalive_interval,
        idle_timeout=config.idle_timeout,
        audit=audit,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        logger.info(
            "Calculator MCP server started",
            tools=[descriptor.name for descriptor in registry.list()],
        )
        try:
            yield
        finally:
            await sessions.shutdown()
            if audit:
                audit.close()
            logger.info("Calculator MCP server stopped")

    app = FastAPI(title=config.name, version=config.server_version, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.config = config
    app.state.dispatcher = dispatcher
    app.state.sessions = sessions

    @app.get("/health")
    async def health() -> dict[str, object]:
        return {
            "status": "healthy",
            "server": config.name,
            "version": config.server_version,
            "sessions": len(sessions),
        }

    async def open_stream(request: Request) -> EventSourceResponse:
        endpoint = request.scope.get("root_path", "") + config.endpoint_path
        session = await sessions.open(endpoint)
        logger.debug(
            "SSE connection established",
            session_id=session.id,
            client=request.client.host if request.client else None,
        )
        return EventSourceResponse(sessions.stream(session), headers=SSE_HEADERS)

    app.add_api_route("/sse", open_stream, methods=["GET"])
    app.add_api_route("/mcp", open_stream, methods=["GET"])

    async def jsonrpc(request: Request) -> Response:
        body = await request.body()
        response = dispatcher.handle(body)
        if response is None:
            return Response(status_code=status.HTTP_202_ACCEPTED)
        return Response(content=response, media_type=JSON_MEDIA_TYPE)

    app.add_api_route("/jsonrpc", jsonrpc, methods=["POST"])
    app.add_api_route("/mcp", jsonrpc, methods=["POST"])

    @app.post(config.endpoint_path)
    async def session_message(request: Request) -> Response:
        session_id = request.query_params.get("session_id") or request.query_params.get(
            "sessionId"
        )
        if not session_id:
            return JSONResponse(
                {"error": "Missing session_id query parameter"},
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        body = await request.body()
        try:
            await sessions.submit(session_id, body)
        except SessionNotFoundError as e:
            return JSONResponse({"error": str(e)}, status_code=status.HTTP_404_NOT_FOUND)
        return JSONResponse({"ok": True}, status_code=status.HTTP_202_ACCEPTED)

    return app
