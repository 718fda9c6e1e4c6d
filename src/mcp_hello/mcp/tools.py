"""Tool registry and built-in tool definitions."""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional, Type

from pydantic import BaseModel, ValidationError

from .protocol import text_content
from ..utils.logger import get_logger

logger = get_logger(__name__)

MIN_REPEAT = 1
MAX_REPEAT = 5


class Tool(ABC):
    """Base class for MCP tools."""

    def __init__(
        self,
        name: str,
        description: str,
        input_schema: Dict[str, Any],
        input_model: Type[BaseModel],
    ):
        """Initialize tool."""
        self.name = name
        self.description = description
        self.input_schema = input_schema
        self.input_model = input_model

    @abstractmethod
    async def execute(
        self, params: BaseModel, context: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        """Execute the tool, returning a list of content items."""
        pass

    def coerce_arguments(self, arguments: Any) -> BaseModel:
        """
        Validate arguments against the input model, permissively.

        Unknown fields are dropped and fields that fail validation fall back
        to their declared defaults. Raises ValidationError only when a field
        without a default is missing.
        """
        if not isinstance(arguments, dict):
            arguments = {}

        known = self.input_model.model_fields
        candidate = {k: v for k, v in arguments.items() if k in known}

        while True:
            try:
                return self.input_model.model_validate(candidate)
            except ValidationError as e:
                invalid = {err["loc"][0] for err in e.errors() if err["loc"]}
                invalid &= set(candidate)
                if not invalid:
                    raise
                logger.debug(
                    f"Dropping invalid arguments {sorted(invalid)} for tool {self.name}"
                )
                for key in invalid:
                    candidate.pop(key)


class ToolRegistry:
    """Registry mapping tool names to their contracts and handlers."""

    def __init__(self):
        """Initialize tool registry."""
        self._tools: Dict[str, Tool] = {}

    def register_tool(self, tool: Tool) -> None:
        """Register a new tool."""
        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' already registered, overwriting")

        self._tools[tool.name] = tool

        logger.info(f"Registered tool: {tool.name}")

    def unregister_tool(self, name: str) -> None:
        """Unregister a tool."""
        tool = self._tools.pop(name, None)
        if tool is None:
            return

        logger.info(f"Unregistered tool: {name}")

    def get_tool(self, name: str) -> Optional[Tool]:
        """Get a tool by name."""
        return self._tools.get(name)

    def list_tools(self) -> List[Tool]:
        """List all tools in registration order."""
        return list(self._tools.values())

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)


# Built-in tools


class EchoInput(BaseModel):
    text: str = ""


class EchoRepeatInput(BaseModel):
    text: str = ""
    count: int = MIN_REPEAT


class EchoTool(Tool):
    """Return the provided text."""

    def __init__(self):
        super().__init__(
            name="echo",
            description="Return the provided text",
            input_schema={
                "type": "object",
                "properties": {"text": {"type": "string"}},
                "required": ["text"],
            },
            input_model=EchoInput,
        )

    async def execute(
        self, params: EchoInput, context: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        return [text_content(f"echo: {params.text}")]


class EchoRepeatTool(Tool):
    """Return the provided text several times, one content item each."""

    def __init__(self):
        super().__init__(
            name="echo_repeat",
            description=(
                f"Return the provided text repeated {MIN_REPEAT} to {MAX_REPEAT} times"
            ),
            input_schema={
                "type": "object",
                "properties": {
                    "text": {"type": "string"},
                    "count": {
                        "type": "integer",
                        "minimum": MIN_REPEAT,
                        "maximum": MAX_REPEAT,
                        "default": MIN_REPEAT,
                    },
                },
                "required": ["text"],
            },
            input_model=EchoRepeatInput,
        )

    async def execute(
        self, params: EchoRepeatInput, context: Optional[Dict[str, Any]] = None
    ) -> List[Dict[str, Any]]:
        count = clamp_repeat(params.count)
        return [text_content(f"echo: {params.text}") for _ in range(count)]


def clamp_repeat(count: int) -> int:
    """Clamp a requested repeat count into the supported range."""
    return max(MIN_REPEAT, min(MAX_REPEAT, count))


def create_default_registry() -> ToolRegistry:
    """Build the registry holding the built-in tools."""
    registry = ToolRegistry()
    registry.register_tool(EchoTool())
    registry.register_tool(EchoRepeatTool())
    return registry
