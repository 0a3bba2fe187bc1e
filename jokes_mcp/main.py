"""FastAPI MCP Server - Main application entrypoint."""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from jokes_mcp.config.loader import get_settings, load_provider_config, get_enabled_providers
from jokes_mcp.mcp.discovery import build_swagger_document
from jokes_mcp.mcp.errors import INVALID_REQUEST, make_error_data
from jokes_mcp.mcp.handlers import PROTOCOL_VERSION
from jokes_mcp.mcp.registry import get_registry
from jokes_mcp.mcp.transport_sse import (
    SESSION_HEADER,
    create_sse_response,
    get_processor,
    get_session_manager,
)
from jokes_mcp.utils.http import close_shared_client
from jokes_mcp.utils.logging import bind_session, get_logger, set_request_id, setup_logging

MCP_ENDPOINT = "/mcp"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    # Startup
    setup_logging()
    log = get_logger("startup")

    settings = get_settings()
    log.info(
        "Starting MCP server",
        server_name=settings.server_name,
        version=settings.server_version,
        streaming_enabled=settings.streaming_enabled,
    )

    config = load_provider_config()
    enabled_providers = get_enabled_providers(config)
    log.info("Loading providers", providers=enabled_providers)

    registry = get_registry()
    results = registry.load_providers(enabled_providers)

    for provider, success in results.items():
        if success:
            log.info("Loaded provider", provider=provider)
        else:
            log.warning("Failed to load provider", provider=provider)

    log.info(
        "Tool registry ready",
        tool_count=registry.tool_count,
        provider_count=registry.provider_count,
    )

    session_manager = get_session_manager()
    await session_manager.start_cleanup_task()

    yield

    # Shutdown
    log.info("Shutting down MCP server", open_sessions=session_manager.session_count)
    session_manager.stop_cleanup_task()
    session_manager.close_all()
    await close_shared_client()


app = FastAPI(
    title="Jokes MCP Server",
    description="Chuck Norris & Dad jokes exposed as MCP tools",
    version="2.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=[SESSION_HEADER, "X-Request-ID"],
)


@app.middleware("http")
async def add_request_id_middleware(request: Request, call_next):
    """Add request ID to all requests."""
    request_id = set_request_id(request.headers.get("X-Request-ID"))
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


def _session_id(request: Request) -> str | None:
    return request.headers.get(SESSION_HEADER) or request.query_params.get("session_id")


def _invalid_request(message: str, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "jsonrpc": "2.0",
            "id": None,
            "error": make_error_data(INVALID_REQUEST, message),
        },
    )


# =============================================================================
# Health and Info Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/")
async def root() -> dict:
    """Root endpoint with server info."""
    settings = get_settings()
    registry = get_registry()

    return {
        "name": settings.server_name,
        "version": settings.server_version,
        "description": settings.server_description,
        "endpoints": {
            "health": "/health",
            "mcp": MCP_ENDPOINT,
            "swagger": "/api/swagger.json",
        },
        "tools_available": registry.tool_count,
        "streaming_enabled": settings.streaming_enabled,
        "mcp_protocol_version": PROTOCOL_VERSION,
    }


@app.get("/api/swagger.json")
async def swagger() -> dict:
    """Swagger 2.0 document used by API-management tooling."""
    return build_swagger_document(get_registry(), get_settings())


# =============================================================================
# MCP Endpoint
# =============================================================================


@app.get(MCP_ENDPOINT)
async def open_stream(request: Request):
    """
    Open a streaming session.

    The SSE stream starts with an 'endpoint' event naming the URL to POST
    messages to; responses follow as 'message' events in request order.
    """
    settings = get_settings()
    if not settings.streaming_enabled:
        return JSONResponse(
            status_code=405,
            content={"error": "Streaming transport is disabled"},
        )

    session_manager = get_session_manager()
    session = session_manager.create_session()

    log = get_logger("sse")
    log.info("SSE session created", session_id=session.session_id)

    return await create_sse_response(session, session_manager, MCP_ENDPOINT)


@app.post(MCP_ENDPOINT)
async def post_message(request: Request) -> Response:
    """
    Accept JSON-RPC 2.0 messages.

    Without a session id the response is returned synchronously. With one,
    the message is queued on that session and answered over its stream.
    """
    try:
        body = await request.body()
    except Exception as e:
        return _invalid_request(f"Could not read request body: {e}")

    session_id = _session_id(request)
    if session_id:
        session = get_session_manager().get_session(session_id)
        if session is None:
            return _invalid_request(f"Unknown session: {session_id}", status_code=404)
        bind_session(session_id)
        await session.submit(body)
        return Response(status_code=202, headers={SESSION_HEADER: session_id})

    processor = get_processor()
    reply = await processor.handle_message(body)

    if reply is None:
        # Notifications only - no response body
        return Response(status_code=202)

    return JSONResponse(content=processor.serialize_response(reply))


@app.delete(MCP_ENDPOINT)
async def close_session(request: Request) -> Response:
    """Tear down a streaming session."""
    session_id = _session_id(request)
    if not session_id:
        return _invalid_request("Missing session id", status_code=400)

    session_manager = get_session_manager()
    if session_manager.get_session(session_id) is None:
        return _invalid_request(f"Unknown session: {session_id}", status_code=404)

    session_manager.remove_session(session_id)
    get_logger("sse").info("SSE session closed by client", session_id=session_id)
    return Response(status_code=204)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    """Run the server with uvicorn."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "jokes_mcp.main:app",
        host=settings.host,
        port=settings.port,
    )


if __name__ == "__main__":
    main()
