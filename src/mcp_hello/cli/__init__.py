"""Command line interface for mcp-hello."""
