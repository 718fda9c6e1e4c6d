"""MCP (Model Context Protocol) server over Server-Sent Events."""

from .broker import SessionBroker, NoChannelAvailable, BrokerSnapshot
from .channel import StreamingChannel, SSEChannel, CHANNEL_API_VERSION
from .dispatcher import ToolDispatcher, ToolOk, ToolErr, ToolErrorKind
from .server import MCPSSEServer, create_mcp_server
from .session import MCPSessionHandler
from .tools import ToolRegistry, Tool, EchoTool, EchoRepeatTool, create_default_registry

__all__ = [
    "SessionBroker",
    "NoChannelAvailable",
    "BrokerSnapshot",
    "StreamingChannel",
    "SSEChannel",
    "CHANNEL_API_VERSION",
    "ToolDispatcher",
    "ToolOk",
    "ToolErr",
    "ToolErrorKind",
    "MCPSSEServer",
    "create_mcp_server",
    "MCPSessionHandler",
    "ToolRegistry",
    "Tool",
    "EchoTool",
    "EchoRepeatTool",
    "create_default_registry",
]
