"""MCP protocol models following JSON-RPC 2.0."""

import json
from typing import Dict, Any, Optional, List, Union
from enum import Enum
from pydantic import BaseModel, Field


# MCP Protocol Version
MCP_VERSION = "2024-11-05"

SERVER_INFO = {"name": "mcp-hello", "version": "0.0.1"}


class JSONRPCError(BaseModel):
    """JSON-RPC 2.0 error object."""

    code: int
    message: str
    data: Optional[Any] = None


class ErrorCode(Enum):
    """Standard JSON-RPC error codes."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603


class MCPRequest(BaseModel):
    """MCP request or notification in JSON-RPC 2.0 format."""

    jsonrpc: str = "2.0"
    id: Union[str, int, None] = None
    method: str
    params: Optional[Dict[str, Any]] = None

    @property
    def is_notification(self) -> bool:
        return self.id is None


class MCPResponse(BaseModel):
    """MCP response following JSON-RPC 2.0 format."""

    jsonrpc: str = "2.0"
    id: Union[str, int, None]
    result: Optional[Any] = None
    error: Optional[JSONRPCError] = None

    def to_wire(self) -> Dict[str, Any]:
        """Serialize for the stream, keeping a null id on errors."""
        data = self.model_dump(exclude_none=True)
        data.setdefault("id", None)
        return data


class MCPMethod(str, Enum):
    """MCP methods understood by this server."""

    INITIALIZE = "initialize"
    INITIALIZED = "notifications/initialized"
    PING = "ping"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"


class MCPToolInfo(BaseModel):
    """Tool information in MCP format."""

    name: str
    description: Optional[str] = None
    inputSchema: Dict[str, Any]


class MCPToolCall(BaseModel):
    """Tool call parameters."""

    name: str
    # Left untyped so loosely-typed callers reach the dispatcher
    arguments: Optional[Any] = None


class MCPToolResult(BaseModel):
    """Tool execution result."""

    content: List[Dict[str, Any]]
    isError: bool = False


class MCPInitializeParams(BaseModel):
    """Initialize request parameters."""

    protocolVersion: str = MCP_VERSION
    capabilities: Dict[str, Any] = Field(default_factory=dict)
    clientInfo: Dict[str, Any] = Field(default_factory=dict)


class MCPServerCapabilities(BaseModel):
    """Server capabilities."""

    tools: Optional[Dict[str, Any]] = None


class MCPInitializeResult(BaseModel):
    """Initialize response result."""

    protocolVersion: str = MCP_VERSION
    capabilities: MCPServerCapabilities
    serverInfo: Dict[str, Any]


def create_error_response(
    request_id: Union[str, int, None],
    code: ErrorCode,
    message: str,
    data: Optional[Any] = None,
) -> MCPResponse:
    """Create an error response."""
    return MCPResponse(
        id=request_id, error=JSONRPCError(code=code.value, message=message, data=data)
    )


def create_success_response(
    request_id: Union[str, int, None], result: Any
) -> MCPResponse:
    """Create a success response."""
    return MCPResponse(id=request_id, result=result)


def validate_mcp_request(data: Any) -> Optional[str]:
    """Validate MCP request format, returning an error message or None."""
    if not isinstance(data, dict):
        return "Request must be a JSON object"

    if data.get("jsonrpc") != "2.0":
        return "Missing or invalid jsonrpc version"

    if not isinstance(data.get("method"), str):
        return "Missing method field"

    return None


def parse_message(body: bytes) -> Any:
    """Decode a raw POST body into JSON, raising ValueError when unparsable."""
    try:
        return json.loads(body)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise ValueError(f"Invalid JSON: {e}") from e


def text_content(text: str) -> Dict[str, Any]:
    """Build a single text content item."""
    return {"type": "text", "text": text}
