import inspect

import pytest
from fastmcp import Client

from sp_api_mcp.mcp_runtime import (
    MCPServer,
    ResourceSpec,
    ToolResult,
    ToolSpec,
    _is_awaitable,
    invoke_tool,
)

SCHEMA = {
    "type": "object",
    "properties": {"name": {"type": "string"}, "count": {"type": "integer"}},
    "required": ["name"],
}


def _echo(arguments):
    return ToolResult(
        content=[{"type": "text", "text": f"hello {arguments['name']}"}],
        structured_content={"received": arguments},
    )


def _failing(arguments):
    return ToolResult(content=[{"type": "text", "text": "nope"}], is_error=True)


def _server() -> MCPServer:
    server = MCPServer("test", "1.0", "inst")
    server.add_tool(
        ToolSpec(
            "demo.echo",
            "Echo",
            SCHEMA,
            _echo,
            title="Demo",
            annotations={"readOnlyHint": True, "openWorldHint": False},
        )
    )
    server.add_tool(ToolSpec("demo.fail", "Fail", {"type": "object", "properties": {}}, _failing))
    server.add_resource(
        ResourceSpec(uri="amazon-sp-api://demo", name="Demo", description="d", text="# Demo\n")
    )
    return server


def test_tool_result_text_joins_text_blocks() -> None:
    result = ToolResult(
        content=[{"type": "text", "text": "a"}, {"type": "image", "data": "x"}, {"type": "text", "text": "b"}]
    )
    assert result.text == "a\nb"


@pytest.mark.asyncio
async def test_invoke_tool_awaits_coroutines() -> None:
    async def handler(arguments):
        return _echo(arguments)

    result = await invoke_tool(ToolSpec("t", "d", SCHEMA, handler), {"name": "x"})
    assert result.text == "hello x"


@pytest.mark.asyncio
async def test_invoke_tool_rejects_wrong_return_type() -> None:
    with pytest.raises(TypeError, match="did not return ToolResult"):
        await invoke_tool(ToolSpec("t", "d", SCHEMA, lambda arguments: "oops"), {})


@pytest.mark.asyncio
async def test_fastmcp_advertises_declared_schema_and_annotations() -> None:
    async with Client(_server().fastmcp) as client:
        tools = {tool.name: tool for tool in await client.list_tools()}

    echo = tools["demo.echo"]
    assert echo.inputSchema == SCHEMA
    assert echo.annotations.title == "Demo"
    assert echo.annotations.readOnlyHint is True
    assert echo.annotations.openWorldHint is False


@pytest.mark.asyncio
async def test_fastmcp_call_drops_unset_arguments() -> None:
    async with Client(_server().fastmcp) as client:
        result = await client.call_tool("demo.echo", {"name": "sam"})

    assert result.is_error is False
    assert result.content[0].text == "hello sam"
    assert result.structured_content == {"received": {"name": "sam"}}


@pytest.mark.asyncio
async def test_fastmcp_declared_error_is_error_result() -> None:
    async with Client(_server().fastmcp) as client:
        result = await client.call_tool("demo.fail", {}, raise_on_error=False)

    assert result.is_error is True
    assert "nope" in result.content[0].text


@pytest.mark.asyncio
async def test_fastmcp_serves_text_resources() -> None:
    async with Client(_server().fastmcp) as client:
        contents = await client.read_resource("amazon-sp-api://demo")

    assert contents[0].text == "# Demo\n"


def test_is_awaitable() -> None:
    async def coroutine_fn():
        return None

    coroutine = coroutine_fn()
    try:
        assert _is_awaitable(coroutine) is True
    finally:
        coroutine.close()
    assert _is_awaitable(42) is False
    assert inspect.isawaitable(42) is False
