"""Custom exceptions for mcp-hello."""

class MCPHelloError(Exception):
    """Base exception for mcp-hello."""
    pass

class ConfigurationError(MCPHelloError):
    """Configuration related errors."""
    pass

class TransportError(MCPHelloError):
    """Streaming transport related errors."""
    pass

class ChannelClosedError(TransportError):
    """Message sent to a channel whose connection already closed."""
    pass
