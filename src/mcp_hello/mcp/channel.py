"""Streaming channel abstraction and its Server-Sent Events implementation."""

import asyncio
import json
import uuid
from abc import ABC, abstractmethod
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from fastapi import Request
from fastapi.responses import PlainTextResponse, Response

from .protocol import MCPResponse, ErrorCode, create_error_response, parse_message
from ..core.exceptions import ChannelClosedError
from ..utils.logger import get_logger

logger = get_logger(__name__)

CHANNEL_API_VERSION = 1

CloseCallback = Callable[["StreamingChannel"], None]
MessageHandler = Callable[[Any], Awaitable[Optional[MCPResponse]]]

# Wakes the event stream so it can finish after close()
_CLOSED = object()


class StreamingChannel(ABC):
    """Long-lived duplex connection to one client.

    Implementations announce the interface revision they satisfy through
    ``api_version``; callers rely on this interface only.
    """

    api_version: int = CHANNEL_API_VERSION

    @property
    @abstractmethod
    def session_id(self) -> str:
        """Identifier announced to the client inside the stream."""

    @property
    @abstractmethod
    def closed(self) -> bool:
        """Whether the underlying connection has gone away."""

    @abstractmethod
    def events(self) -> AsyncIterator[str]:
        """Outbound stream of encoded events."""

    @abstractmethod
    def send(self, message: Dict[str, Any]) -> None:
        """Queue a message for the client. Raises ChannelClosedError once closed."""

    @abstractmethod
    async def handle_post_message(self, request: Request) -> Response:
        """Deliver an inbound request body and produce its HTTP response."""

    @abstractmethod
    def on_close(self, callback: CloseCallback) -> None:
        """Register a callback run once, synchronously, when the channel closes."""

    @abstractmethod
    def close(self) -> None:
        """Close the channel. Idempotent."""


def format_sse(event: str, data: str) -> str:
    """Encode one Server-Sent Events frame."""
    return f"event: {event}\ndata: {data}\n\n"


class SSEChannel(StreamingChannel):
    """Channel carrying MCP messages to the client as Server-Sent Events.

    The session identifier is minted at construction and sent as the first
    ``endpoint`` event, telling the client where to POST its messages.
    """

    def __init__(self, endpoint: str, message_handler: MessageHandler):
        self.endpoint = endpoint
        self._message_handler = message_handler
        self._session_id = uuid.uuid4().hex
        self._queue: asyncio.Queue = asyncio.Queue()
        self._closed = False
        self._close_callbacks: List[CloseCallback] = []

    @property
    def session_id(self) -> str:
        return self._session_id

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def endpoint_url(self) -> str:
        return f"{self.endpoint}?sessionId={self._session_id}"

    async def events(self) -> AsyncIterator[str]:
        try:
            yield format_sse("endpoint", self.endpoint_url)
            while True:
                message = await self._queue.get()
                if message is _CLOSED:
                    break
                yield format_sse("message", json.dumps(message))
        finally:
            # Runs on client disconnect too: the stream task is cancelled
            self.close()

    def send(self, message: Dict[str, Any]) -> None:
        if self._closed:
            raise ChannelClosedError(f"Channel {self._session_id} is closed")
        self._queue.put_nowait(message)

    async def handle_post_message(self, request: Request) -> Response:
        if self._closed:
            raise ChannelClosedError(f"Channel {self._session_id} is closed")

        body = await request.body()
        try:
            data = parse_message(body)
        except ValueError as e:
            self.send(
                create_error_response(None, ErrorCode.PARSE_ERROR, str(e)).to_wire()
            )
            return PlainTextResponse("Could not parse message", status_code=400)

        response = await self._message_handler(data)
        if response is not None:
            self.send(response.to_wire())

        return PlainTextResponse("Accepted", status_code=200)

    def on_close(self, callback: CloseCallback) -> None:
        self._close_callbacks.append(callback)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._queue.put_nowait(_CLOSED)

        callbacks, self._close_callbacks = self._close_callbacks, []
        for callback in callbacks:
            try:
                callback(self)
            except Exception as e:
                logger.exception(
                    f"Close callback failed: {e}", extra={"session_id": self._session_id}
                )

        logger.info("Channel closed", extra={"session_id": self._session_id})
