"""SSE (Server-Sent Events) transport for MCP."""

import asyncio
import json
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, AsyncGenerator

from sse_starlette.sse import EventSourceResponse

from jokes_mcp.config.loader import get_settings
from jokes_mcp.mcp.handlers import ClientState, MCPHandlers
from jokes_mcp.mcp.jsonrpc import JsonRpcProcessor
from jokes_mcp.mcp.registry import get_registry
from jokes_mcp.utils.logging import bind_session

logger = logging.getLogger(__name__)

SESSION_HEADER = "Mcp-Session-Id"

# Queue marker that wakes up and stops the worker / event stream
_CLOSE = object()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Session:
    """
    An MCP streaming session.

    Inbound messages are handled one at a time by a dedicated worker so
    responses leave in the order the requests arrived. Responses are queued
    as SSE events for the stream generator.
    """

    def __init__(
        self,
        session_id: str,
        processor: JsonRpcProcessor,
        keepalive_interval: float = 30.0,
        timeout: timedelta = timedelta(minutes=30),
    ):
        self.session_id = session_id
        self.processor = processor
        self.keepalive_interval = keepalive_interval
        self.timeout = timeout
        self.state = ClientState()
        self.created_at = _utcnow()
        self.last_activity = _utcnow()
        self.inbox: asyncio.Queue[Any] = asyncio.Queue()
        self.queue: asyncio.Queue[Any] = asyncio.Queue()
        self._closed = False
        self._worker: asyncio.Task | None = None

    @property
    def closed(self) -> bool:
        return self._closed

    def start(self) -> None:
        """Start the worker; must be called from a running event loop."""
        if self._worker is None:
            self._worker = asyncio.create_task(self._run())

    def touch(self) -> None:
        """Update last activity timestamp."""
        self.last_activity = _utcnow()

    def is_expired(self) -> bool:
        """Check if the session has been idle for too long."""
        return _utcnow() - self.last_activity > self.timeout

    async def submit(self, raw_data: str | bytes) -> None:
        """Queue an inbound message for sequential processing."""
        if self._closed:
            raise RuntimeError(f"Session {self.session_id} is closed")
        self.touch()
        await self.inbox.put(raw_data)

    async def send_event(self, event_type: str, data: Any) -> None:
        """Queue an event to be sent to the client."""
        if not self._closed:
            await self.queue.put({"event": event_type, "data": data})

    async def _run(self) -> None:
        bind_session(self.session_id)
        while True:
            raw_data = await self.inbox.get()
            if raw_data is _CLOSE or self._closed:
                # Messages still queued behind a disconnect are dropped unprocessed
                break
            try:
                reply = await self.processor.handle_message(raw_data, self.state)
            except Exception:
                # handle_message converts failures itself; this is a last resort
                logger.exception(f"Session {self.session_id} failed to process a message")
                continue
            if reply is None:
                continue
            if self._closed:
                logger.debug(f"Discarding response for closed session {self.session_id}")
                continue
            payload = self.processor.serialize_response(reply)
            await self.send_event("message", json.dumps(payload))
        logger.debug(f"Worker for session {self.session_id} stopped")

    async def events(self, message_endpoint: str = "/mcp") -> AsyncGenerator[dict[str, Any], None]:
        """
        Yield SSE events: the endpoint announcement, then responses until the
        session closes. Keep-alive pings are written by the SSE response.
        """
        yield {
            "event": "endpoint",
            "data": f"{message_endpoint}?session_id={self.session_id}",
        }
        while not self._closed:
            event = await self.queue.get()
            if event is _CLOSE:
                break
            yield event

    def close(self) -> None:
        """
        Mark the session as closed and stop its worker and stream.

        A handler already running is left to finish; its response is dropped.
        """
        if self._closed:
            return
        self._closed = True
        self.inbox.put_nowait(_CLOSE)
        self.queue.put_nowait(_CLOSE)

    async def wait_closed(self) -> None:
        """Wait for the worker to drain after close()."""
        if self._worker is not None:
            await self._worker


class SessionManager:
    """Manages MCP sessions."""

    def __init__(
        self,
        processor: JsonRpcProcessor,
        keepalive_interval: float = 30.0,
        session_timeout: timedelta = timedelta(minutes=30),
        cleanup_interval: float = 60.0,
    ):
        self.processor = processor
        self.keepalive_interval = keepalive_interval
        self.session_timeout = session_timeout
        self.cleanup_interval = cleanup_interval
        self._sessions: dict[str, Session] = {}
        self._cleanup_task: asyncio.Task | None = None

    def create_session(self) -> Session:
        """Create and start a new session."""
        session_id = str(uuid.uuid4())
        session = Session(
            session_id,
            self.processor,
            keepalive_interval=self.keepalive_interval,
            timeout=self.session_timeout,
        )
        session.start()
        self._sessions[session_id] = session
        logger.info(f"Created session: {session_id}")
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a live session by ID."""
        session = self._sessions.get(session_id)
        if session is not None:
            if session.is_expired() or session.closed:
                self.remove_session(session_id)
                return None
            session.touch()
        return session

    def remove_session(self, session_id: str) -> None:
        """Remove and close a session."""
        session = self._sessions.pop(session_id, None)
        if session:
            session.close()
            logger.info(f"Removed session: {session_id}")

    async def cleanup_expired(self) -> None:
        """Remove expired sessions."""
        expired = [
            sid for sid, session in self._sessions.items() if session.is_expired()
        ]
        for sid in expired:
            self.remove_session(sid)
        if expired:
            logger.info(f"Cleaned up {len(expired)} expired sessions")

    async def start_cleanup_task(self) -> None:
        """Start background task to clean up expired sessions."""
        async def cleanup_loop():
            while True:
                await asyncio.sleep(self.cleanup_interval)
                await self.cleanup_expired()

        self._cleanup_task = asyncio.create_task(cleanup_loop())

    def stop_cleanup_task(self) -> None:
        """Stop the cleanup background task."""
        if self._cleanup_task:
            self._cleanup_task.cancel()
            self._cleanup_task = None

    def close_all(self) -> None:
        """Close every session (used on shutdown)."""
        for sid in list(self._sessions):
            self.remove_session(sid)

    @property
    def session_count(self) -> int:
        """Return the number of active sessions."""
        return len(self._sessions)


async def create_sse_response(
    session: Session, manager: SessionManager, message_endpoint: str
) -> EventSourceResponse:
    """Create an SSE response for a session; the session ends with the stream."""

    async def event_generator() -> AsyncGenerator[dict[str, Any], None]:
        try:
            async for event in session.events(message_endpoint):
                yield event
        except asyncio.CancelledError:
            logger.info(f"SSE stream cancelled for session {session.session_id}")
            raise
        finally:
            manager.remove_session(session.session_id)

    # sse-starlette writes the keep-alive comments; its interval follows the session
    return EventSourceResponse(
        event_generator(),
        headers={SESSION_HEADER: session.session_id},
        ping=session.keepalive_interval,
    )


# Shared JSON-RPC processor; per-client state lives in ClientState
_processor: JsonRpcProcessor | None = None

# Global session manager
_session_manager: SessionManager | None = None


def get_processor() -> JsonRpcProcessor:
    """Get the shared JSON-RPC processor, bound to the global tool registry."""
    global _processor
    if _processor is None:
        _processor = JsonRpcProcessor(MCPHandlers(get_registry()))
    return _processor


def get_session_manager() -> SessionManager:
    """Get the global session manager, sharing the global processor."""
    global _session_manager
    if _session_manager is None:
        settings = get_settings()
        _session_manager = SessionManager(
            get_processor(),
            keepalive_interval=settings.keepalive_interval,
            session_timeout=timedelta(seconds=settings.session_timeout),
            cleanup_interval=settings.session_cleanup_interval,
        )
    return _session_manager


def reset_session_manager() -> None:
    """Drop the global session manager and processor, closing sessions (useful for testing)."""
    global _session_manager, _processor
    if _session_manager is not None:
        _session_manager.stop_cleanup_task()
        _session_manager.close_all()
    _session_manager = None
    _processor = None
