"""Main entry point for the MCP SSE server."""

from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI
import uvicorn

from .broker import SessionBroker
from .dispatcher import ToolDispatcher
from .server import create_mcp_server
from .tools import ToolRegistry, create_default_registry
from .protocol import SERVER_INFO
from ..utils.config import load_config
from ..utils.logger import get_logger

logger = get_logger(__name__)


def create_mcp_app(
    config: Optional[Dict[str, Any]] = None,
    tool_registry: Optional[ToolRegistry] = None,
) -> FastAPI:
    """Create and configure the MCP FastAPI app."""
    if config is None:
        config = load_config()
    server_config = config.get("server", {})

    broker = SessionBroker()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("MCP server starting...")
        yield
        snapshot = broker.snapshot()
        logger.info(
            "MCP server shutting down",
            extra={"staged": snapshot.staged, "bound": len(snapshot.bound)},
        )

    app = FastAPI(
        title="mcp-hello",
        description="MCP tools over a Server-Sent Events transport",
        version=SERVER_INFO["version"],
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
    )

    dispatcher = ToolDispatcher(tool_registry or create_default_registry())
    server = create_mcp_server(
        app,
        broker=broker,
        dispatcher=dispatcher,
        sse_path=server_config.get("sse_path", "/sse"),
    )

    app.state.broker = broker
    app.state.dispatcher = dispatcher
    app.state.mcp_server = server

    return app


def main(host: Optional[str] = None, port: Optional[int] = None) -> None:
    """Run the MCP server."""
    config = load_config()
    server_config = config.get("server", {})

    host = host or server_config.get("host", "0.0.0.0")
    port = port or server_config.get("port", 8787)

    logger.info(f"MCP SSE server listening on {host}:{port}")

    # Sessions live in process memory, so a single worker serves them all
    uvicorn.run(
        "mcp_hello.mcp.main:create_mcp_app",
        factory=True,
        host=host,
        port=port,
        workers=1,
        log_config=None,
    )


if __name__ == "__main__":
    main()
