"""JSON-RPC message handling for a single MCP session."""

from typing import Dict, Any, Optional, Union

from pydantic import ValidationError

from .dispatcher import ToolDispatcher
from .protocol import (
    MCPRequest,
    MCPResponse,
    MCPMethod,
    ErrorCode,
    MCPInitializeParams,
    MCPInitializeResult,
    MCPServerCapabilities,
    MCPToolCall,
    MCPToolInfo,
    create_error_response,
    create_success_response,
    validate_mcp_request,
    MCP_VERSION,
    SERVER_INFO,
)
from ..utils.logger import get_logger

logger = get_logger(__name__)


def _request_id(data: Any) -> Union[str, int, None]:
    """Id to echo back on an error reply; ids of any other type become null."""
    if not isinstance(data, dict):
        return None
    request_id = data.get("id")
    if isinstance(request_id, bool) or not isinstance(request_id, (str, int)):
        return None
    return request_id


class MCPSessionHandler:
    """Handles the JSON-RPC messages of one streaming session."""

    def __init__(self, dispatcher: ToolDispatcher):
        self.dispatcher = dispatcher
        self.initialized = False
        self.client_info: Dict[str, Any] = {}

    async def handle_message(self, data: Any) -> Optional[MCPResponse]:
        """Handle one decoded message; returns None for notifications."""
        validation_error = validate_mcp_request(data)
        if validation_error:
            return create_error_response(
                _request_id(data), ErrorCode.INVALID_REQUEST, validation_error
            )

        try:
            request = MCPRequest(**data)
        except ValidationError as e:
            return create_error_response(
                _request_id(data), ErrorCode.INVALID_REQUEST, str(e)
            )

        if request.is_notification:
            if request.method == MCPMethod.INITIALIZED:
                self.initialized = True
            else:
                logger.debug(f"Ignoring notification {request.method}")
            return None

        return await self._route_request(request)

    async def _route_request(self, request: MCPRequest) -> MCPResponse:
        """Route MCP request to appropriate handler."""
        if request.method == MCPMethod.INITIALIZE:
            return self._handle_initialize(request)
        elif request.method == MCPMethod.PING:
            return create_success_response(request.id, {})
        elif request.method == MCPMethod.TOOLS_LIST:
            return self._handle_tools_list(request)
        elif request.method == MCPMethod.TOOLS_CALL:
            return await self._handle_tools_call(request)

        return create_error_response(
            request.id,
            ErrorCode.METHOD_NOT_FOUND,
            f"Method '{request.method}' not found",
        )

    def _handle_initialize(self, request: MCPRequest) -> MCPResponse:
        """Handle initialize request."""
        try:
            params = MCPInitializeParams(**(request.params or {}))
        except ValidationError as e:
            return create_error_response(request.id, ErrorCode.INVALID_PARAMS, str(e))

        if params.protocolVersion != MCP_VERSION:
            logger.warning(
                f"Client requested version {params.protocolVersion}, server supports {MCP_VERSION}"
            )

        self.client_info = params.clientInfo

        result = MCPInitializeResult(
            protocolVersion=MCP_VERSION,
            capabilities=MCPServerCapabilities(tools={}),
            serverInfo=SERVER_INFO,
        )
        return create_success_response(
            request.id, result.model_dump(exclude_none=True)
        )

    def _handle_tools_list(self, request: MCPRequest) -> MCPResponse:
        """Handle tools/list request."""
        tools = self.dispatcher.tool_registry.list_tools()
        tool_infos = [
            MCPToolInfo(
                name=tool.name,
                description=tool.description,
                inputSchema=tool.input_schema,
            ).model_dump()
            for tool in tools
        ]
        return create_success_response(request.id, {"tools": tool_infos})

    async def _handle_tools_call(self, request: MCPRequest) -> MCPResponse:
        """Handle tools/call request."""
        try:
            tool_call = MCPToolCall(**(request.params or {}))
        except ValidationError as e:
            return create_error_response(request.id, ErrorCode.INVALID_PARAMS, str(e))

        outcome = await self.dispatcher.dispatch(
            tool_call.name,
            tool_call.arguments,
            context={"mcp_request_id": request.id},
        )
        return create_success_response(
            request.id, outcome.to_tool_result().model_dump()
        )
