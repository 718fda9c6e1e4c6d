"""Tool invocation dispatcher."""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Any, List, Optional, Union

from pydantic import ValidationError

from .protocol import MCPToolResult, text_content
from .tools import ToolRegistry
from ..utils.logger import get_logger

logger = get_logger(__name__)


class ToolErrorKind(str, Enum):
    """Failure categories reported inside a tool result."""

    UNKNOWN_TOOL = "unknown_tool"
    INVALID_ARGUMENTS = "invalid_arguments"
    EXECUTION_ERROR = "execution_error"


@dataclass(frozen=True)
class ToolOk:
    """Successful tool invocation."""

    content: List[Dict[str, Any]]

    def to_tool_result(self) -> MCPToolResult:
        return MCPToolResult(content=list(self.content), isError=False)


@dataclass(frozen=True)
class ToolErr:
    """Failed tool invocation."""

    kind: ToolErrorKind
    message: str

    def to_tool_result(self) -> MCPToolResult:
        return MCPToolResult(content=[text_content(self.message)], isError=True)


ToolOutcome = Union[ToolOk, ToolErr]


class ToolDispatcher:
    """Looks up tools by name, coerces their arguments and runs them.

    Never raises: every failure comes back as a ToolErr.
    """

    def __init__(self, tool_registry: ToolRegistry):
        self.tool_registry = tool_registry

    async def dispatch(
        self,
        name: str,
        arguments: Any = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> ToolOutcome:
        tool = self.tool_registry.get_tool(name)
        if tool is None:
            logger.warning(f"Unknown tool requested: {name}", extra={"tool": name})
            return ToolErr(ToolErrorKind.UNKNOWN_TOOL, f"Unknown tool: {name}")

        try:
            params = tool.coerce_arguments(arguments)
        except ValidationError as e:
            return ToolErr(
                ToolErrorKind.INVALID_ARGUMENTS,
                f"Invalid arguments for {name}: {e.error_count()} error(s)",
            )

        try:
            content = await tool.execute(params, context or {})
        except Exception as e:
            logger.exception(f"Tool execution error: {e}", extra={"tool": name})
            return ToolErr(
                ToolErrorKind.EXECUTION_ERROR, f"Tool execution failed: {e}"
            )

        return ToolOk(content)
