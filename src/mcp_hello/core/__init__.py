"""Core domain errors for mcp-hello."""

from .exceptions import (
    MCPHelloError,
    ConfigurationError,
    TransportError,
    ChannelClosedError,
)

__all__ = [
    "MCPHelloError",
    "ConfigurationError",
    "TransportError",
    "ChannelClosedError",
]
