"""HTTP front door for the MCP Server-Sent Events transport."""

from typing import Callable, Optional

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse, Response, StreamingResponse
from starlette.background import BackgroundTask
from starlette.exceptions import HTTPException as StarletteHTTPException

from .broker import SessionBroker, NoChannelAvailable
from .channel import SSEChannel, StreamingChannel
from .dispatcher import ToolDispatcher
from .session import MCPSessionHandler
from ..utils.logger import get_logger

logger = get_logger(__name__)

NO_TRANSPORT_MESSAGE = "No active transport. Open GET /sse first."

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS,HEAD",
    "Access-Control-Allow-Headers": "content-type, authorization",
    "Access-Control-Max-Age": "86400",
}

STREAM_HEADERS = {
    "Content-Type": "text/event-stream",
    "Cache-Control": "no-cache, no-transform",
    "Connection": "keep-alive",
}

ChannelFactory = Callable[[], StreamingChannel]


class MCPSSEServer:
    """Routes HTTP requests to the broker and the streaming channels."""

    def __init__(
        self,
        app: FastAPI,
        broker: SessionBroker,
        dispatcher: ToolDispatcher,
        sse_path: str = "/sse",
        channel_factory: Optional[ChannelFactory] = None,
    ):
        """Initialize the front door and register its endpoints on app."""
        self.app = app
        self.broker = broker
        self.dispatcher = dispatcher
        self.sse_path = sse_path
        self.channel_factory = channel_factory or self._create_channel

        self._register_endpoints()

    def _create_channel(self) -> StreamingChannel:
        session = MCPSessionHandler(self.dispatcher)
        return SSEChannel(self.sse_path, session.handle_message)

    def _register_endpoints(self):
        """Register endpoints. HEAD and OPTIONS go first so GET cannot claim them."""
        stream_path = self.sse_path + "{suffix:path}"

        self.app.head(stream_path)(self.stream_head)
        self.app.options(stream_path)(self.stream_options)

        self.app.get("/")(self.health_check)
        self.app.get("/health{suffix:path}")(self.health_check)

        self.app.get(stream_path)(self.open_stream)
        self.app.post(stream_path)(self.post_message)

        self.app.add_exception_handler(StarletteHTTPException, self.http_error)

    async def health_check(self) -> PlainTextResponse:
        return PlainTextResponse("ok")

    async def stream_options(self) -> Response:
        return Response(status_code=204, headers=CORS_HEADERS)

    async def stream_head(self) -> Response:
        return Response(status_code=200, headers=STREAM_HEADERS)

    async def open_stream(self, request: Request) -> Response:
        """Open an event stream and stage its channel until a POST claims it."""
        try:
            channel = self.channel_factory()
        except Exception as e:
            logger.exception(f"GET {self.sse_path} error: {e}")
            return PlainTextResponse("SSE init error", status_code=500)

        self.broker.register_staged(channel)
        channel.on_close(self.broker.unregister)

        headers = {k: v for k, v in STREAM_HEADERS.items() if k != "Content-Type"}
        headers["X-Accel-Buffering"] = "no"

        # The background close covers disconnects before the stream starts
        return StreamingResponse(
            channel.events(),
            media_type="text/event-stream",
            headers=headers,
            background=BackgroundTask(channel.close),
        )

    async def post_message(self, request: Request) -> Response:
        """Deliver a client message to the channel its session resolves to."""
        session_id = request.query_params.get("sessionId") or None

        channel = self.broker.resolve(session_id)
        if isinstance(channel, NoChannelAvailable):
            logger.warning(
                "No channel for message",
                extra={"session_id": session_id, "status_code": 409},
            )
            return PlainTextResponse(NO_TRANSPORT_MESSAGE, status_code=409)

        try:
            return await channel.handle_post_message(request)
        except Exception as e:
            logger.exception(
                f"POST {self.sse_path} error: {e}",
                extra={"session_id": session_id, "status_code": 500},
            )
            return PlainTextResponse("POST handler error", status_code=500)

    async def http_error(
        self, request: Request, exc: StarletteHTTPException
    ) -> Response:
        """Plain-text errors; method mismatches are reported as not found."""
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not found", status_code=404)
        return PlainTextResponse(str(exc.detail), status_code=exc.status_code)


def create_mcp_server(app: FastAPI, **kwargs) -> MCPSSEServer:
    """Factory function to create the front door."""
    return MCPSSEServer(app, **kwargs)
