"""JSON-RPC 2.0 message processing."""

import asyncio
import json
import logging
import re
from typing import Any

from pydantic import ValidationError

from jokes_mcp.mcp.errors import (
    INTERNAL_ERROR,
    INVALID_REQUEST,
    JsonRpcError,
    make_error_data,
)
from jokes_mcp.mcp.handlers import ClientState, MCPHandlers
from jokes_mcp.mcp.models import JsonRpcErrorObject, JsonRpcRequest, JsonRpcResponse

logger = logging.getLogger(__name__)

# Best-effort id recovery from payloads that are not valid JSON
_STRING = re.compile(r'"(?:[^"\\]|\\.)*"')
_ID_VALUE = re.compile(r'\s*:\s*(?:"((?:[^"\\]|\\.)*)"|(-?\d+)(?![\d.eE]))')

Reply = JsonRpcResponse | list[JsonRpcResponse] | None


def _scan_top_level_id(text: str) -> int | str | None:
    """Find the value of an "id" key of the outermost object, skipping nested ones."""
    depth = 0
    pos = 0
    while pos < len(text):
        char = text[pos]
        if char == '"':
            token = _STRING.match(text, pos)
            if token is None:
                return None
            if depth == 1 and token.group() == '"id"':
                value = _ID_VALUE.match(text, token.end())
                if value:
                    string_id, int_id = value.groups()
                    return string_id if string_id is not None else int(int_id)
            pos = token.end()
            continue
        if char in "{[":
            depth += 1
        elif char in "}]":
            depth -= 1
        pos += 1
    return None


def extract_id(payload: Any) -> int | str | None:
    """Recover a usable request id from a decoded or raw payload, if any."""
    if isinstance(payload, dict):
        value = payload.get("id")
        if isinstance(value, (int, str)) and not isinstance(value, bool):
            return value
        return None

    if isinstance(payload, bytes):
        payload = payload.decode("utf-8", errors="replace")
    if isinstance(payload, str):
        return _scan_top_level_id(payload)
    return None


def error_response(request_id: int | str | None, error: dict[str, Any]) -> JsonRpcResponse:
    return JsonRpcResponse(id=request_id, error=JsonRpcErrorObject(**error))


class JsonRpcProcessor:
    """Process JSON-RPC 2.0 messages, single or batched."""

    def __init__(self, handlers: MCPHandlers):
        self.handlers = handlers

    def decode(self, raw_data: str | bytes) -> tuple[Any, dict | None]:
        """
        Decode raw wire data into a Python object.

        Returns (payload, error) tuple. One will be None.
        """
        try:
            if isinstance(raw_data, bytes):
                raw_data = raw_data.decode("utf-8")
            return json.loads(raw_data), None
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            return None, make_error_data(INVALID_REQUEST, f"Invalid JSON: {e}")

    def validate(self, payload: Any) -> tuple[JsonRpcRequest | None, dict | None]:
        """
        Validate one decoded payload against the JSON-RPC 2.0 envelope.

        Returns (request, error) tuple. One will be None. The error's data
        lists every failing field.
        """
        if not isinstance(payload, dict):
            return None, make_error_data(
                INVALID_REQUEST,
                "Invalid JSON-RPC request: expected an object",
                [{"field": "", "message": f"got {type(payload).__name__}"}],
            )

        try:
            return JsonRpcRequest.model_validate(payload), None
        except ValidationError as e:
            diagnostics = [
                {
                    "field": ".".join(str(part) for part in err["loc"]),
                    "message": err["msg"],
                }
                for err in e.errors(include_url=False, include_context=False, include_input=False)
            ]
            fields = sorted({d["field"] for d in diagnostics})
            return None, make_error_data(
                INVALID_REQUEST,
                f"Invalid JSON-RPC request: {', '.join(fields)}",
                diagnostics,
            )

    async def process_request(
        self, request: JsonRpcRequest, state: ClientState
    ) -> JsonRpcResponse | None:
        """
        Process a validated JSON-RPC request.

        Returns None for notifications (requests without id). Every failure
        is converted into an error response here.
        """
        try:
            result = await self.handlers.dispatch(request.method, request.params, state)
        except JsonRpcError as e:
            error = e.to_error_data()
        except Exception as e:
            logger.exception(f"Unhandled error processing method {request.method}")
            error = make_error_data(INTERNAL_ERROR, f"Internal error: {e}")
        else:
            error = None

        if request.is_notification:
            if error is not None:
                logger.warning(f"Notification {request.method} failed: {error['message']}")
            return None

        if error is not None:
            return error_response(request.id, error)
        return JsonRpcResponse(id=request.id, result=result)

    async def process_payload(self, payload: Any, state: ClientState) -> JsonRpcResponse | None:
        """Validate and process a single decoded payload."""
        request, error = self.validate(payload)
        if error is not None:
            return error_response(extract_id(payload), error)
        return await self.process_request(request, state)  # type: ignore[arg-type]

    async def process_batch(self, payloads: list[Any], state: ClientState) -> Reply:
        """
        Process a batch; elements run concurrently but responses keep the
        order of the requests. Notifications contribute no entry, and an
        empty batch is answered with a single error.
        """
        if not payloads:
            return error_response(
                None, make_error_data(INVALID_REQUEST, "Invalid JSON-RPC request: empty batch")
            )

        replies = await asyncio.gather(
            *(self.process_payload(payload, state) for payload in payloads)
        )
        responses = [reply for reply in replies if reply is not None]
        return responses or None

    async def handle_message(self, raw_data: str | bytes, state: ClientState | None = None) -> Reply:
        """
        Handle a raw JSON-RPC message end-to-end.

        Returns a response, a list of responses for a batch, or None when
        nothing needs to be sent back.
        """
        if state is None:
            state = ClientState()

        payload, decode_error = self.decode(raw_data)
        if decode_error is not None:
            return error_response(extract_id(raw_data), decode_error)

        if isinstance(payload, list):
            return await self.process_batch(payload, state)
        return await self.process_payload(payload, state)

    def serialize_response(self, reply: Reply) -> Any:
        """Convert a reply into JSON-compatible data."""
        if reply is None:
            return None
        if isinstance(reply, list):
            return [response.model_dump() for response in reply]
        return reply.model_dump()
