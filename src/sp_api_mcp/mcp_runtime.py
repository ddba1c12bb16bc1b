"""MCP runtime adapter backed by FastMCP."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import cast

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from fastmcp.resources import TextResource
from fastmcp.tools import FunctionTool
from fastmcp.tools.tool import ToolResult as FastToolResult
from mcp.types import ToolAnnotations
from pydantic import BaseModel

logger = logging.getLogger(__name__)


@dataclass
class ToolSpec:
    name: str
    description: str
    input_schema: dict[str, object]
    handler: Callable[[dict[str, object]], "ToolResult | Awaitable[ToolResult]"]
    title: str | None = None
    annotations: dict[str, bool] = field(default_factory=dict)


@dataclass(frozen=True)
class ResourceSpec:
    uri: str
    name: str
    description: str
    text: str
    mime_type: str = "text/markdown"


class ToolResult(BaseModel):
    content: list[dict[str, object]]
    structured_content: dict[str, object] | None = None
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n".join(
            str(block.get("text", "")) for block in self.content if block.get("type") == "text"
        )


async def invoke_tool(tool: ToolSpec, arguments: dict[str, object]) -> ToolResult:
    """Run a tool handler, awaiting it when it is a coroutine."""
    raw_result = tool.handler(arguments)
    if _is_awaitable(raw_result):
        result = await cast(Awaitable[ToolResult], raw_result)
    else:
        result = cast(ToolResult, raw_result)
    if not isinstance(result, ToolResult):
        raise TypeError("Tool handler did not return ToolResult")
    return result


class MCPServer:
    """Registers tool and resource specs on a FastMCP server."""

    def __init__(self, name: str, version: str, instructions: str) -> None:
        self._server = FastMCP(name=name, version=version, instructions=instructions)

    @property
    def fastmcp(self) -> FastMCP:
        return self._server

    def add_tool(self, tool: ToolSpec) -> None:
        # Build a closure-based handler with a synthetic signature so FastMCP
        # sees named parameters without resorting to exec()/eval().
        raw_properties = tool.input_schema.get("properties", {})
        properties = raw_properties if isinstance(raw_properties, dict) else {}
        prop_names = [name for name in properties.keys() if isinstance(name, str)]

        async def _handler(**kwargs: object) -> object:
            filtered = {k: v for k, v in kwargs.items() if v is not None}
            result = await invoke_tool(tool, filtered)
            if result.is_error:
                raise ToolError(result.text)
            return FastToolResult(
                content=result.content,
                structured_content=result.structured_content,
            )

        params = [
            inspect.Parameter(name, inspect.Parameter.KEYWORD_ONLY, default=None, annotation=object)
            for name in prop_names
        ]
        _handler.__signature__ = inspect.Signature(params)  # type: ignore[attr-defined]
        safe_name = tool.name.replace("-", "_").replace(".", "_")
        _handler.__name__ = f"_handler_{safe_name}"

        fast_tool = FunctionTool.from_function(
            _handler,
            name=tool.name,
            description=tool.description,
            annotations=ToolAnnotations(title=tool.title, **tool.annotations),
        )
        # Advertise the declared schema instead of the synthetic signature's.
        fast_tool = fast_tool.model_copy(update={"parameters": tool.input_schema})
        self._server.add_tool(fast_tool)

    def add_resource(self, resource: ResourceSpec) -> None:
        self._server.add_resource(
            TextResource(
                uri=resource.uri,
                name=resource.name,
                description=resource.description,
                mime_type=resource.mime_type,
                text=resource.text,
            )
        )

    def run(self, transport: str = "stdio", host: str | None = None, port: int | None = None) -> None:
        if transport == "stdio":
            self._server.run()
            return
        logger.info("Starting FastMCP %s transport on %s:%s", transport, host, port)
        self._server.run(transport=transport, host=host, port=port)


def _is_awaitable(value: object) -> bool:
    try:
        return inspect.isawaitable(value)
    except TypeError:
        return False
