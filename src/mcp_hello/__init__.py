"""mcp-hello: MCP tools served over a Server-Sent Events transport."""

__version__ = "0.0.1"
