#!/usr/bin/env python3
"""
mcp-hello - MCP tools over Server-Sent Events
Command line entry point
"""

import os
import sys
from typing import Optional

import click
from rich.console import Console

from ..mcp.main import main as run_server
from ..utils.config import load_config
from ..utils.logger import setup_logging
from ..core.exceptions import ConfigurationError

console = Console()


@click.command()
@click.option('--host', help='Interface to bind (default from config, 0.0.0.0)')
@click.option('--port', '-p', type=int, help='Port to listen on (default from config or PORT, 8787)')
@click.option('--config', 'config_path', type=click.Path(exists=True, dir_okay=False),
              help='Path to a settings.yaml file')
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                                               case_sensitive=False))
@click.option('--json-logs', is_flag=True, help='Emit structured JSON logs')
@click.version_option(version='0.0.1')
def main(host: Optional[str], port: Optional[int], config_path: Optional[str],
         log_level: Optional[str], json_logs: bool):
    """
    Serve the MCP tools over an SSE transport.

    Examples:
        mcp-hello
        mcp-hello --port 9000 --log-level debug
        PORT=9000 mcp-hello --json-logs
    """
    # Settings are read through load_config(), so route CLI choices via env
    if config_path:
        os.environ['MCP_HELLO_CONFIG'] = config_path
    if log_level:
        os.environ['MCP_HELLO_LOG_LEVEL'] = log_level.upper()
    if json_logs:
        os.environ['MCP_HELLO_LOG_FORMAT'] = 'json'
    load_config.cache_clear()

    try:
        config = load_config()
    except ConfigurationError as e:
        console.print(f"❌ Error: {e}", style="red")
        sys.exit(1)

    setup_logging()

    server_config = config.get('server', {})
    bind_host = host or server_config.get('host', '0.0.0.0')
    bind_port = port or server_config.get('port', 8787)
    sse_path = server_config.get('sse_path', '/sse')

    console.print(f"✅ MCP SSE server on http://{bind_host}:{bind_port}{sse_path}")
    run_server(host=bind_host, port=bind_port)


if __name__ == '__main__':
    main()
