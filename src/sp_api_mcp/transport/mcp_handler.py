"""HTTP JSON-RPC handler for MCP tools and resources."""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping

from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from sp_api_mcp import __version__
from sp_api_mcp.mcp_runtime import ResourceSpec, ToolSpec, invoke_tool
from sp_api_mcp.utils.serialization import json_default

logger = logging.getLogger(__name__)

SUPPORTED_PROTOCOL_VERSIONS = ("2025-03-26", "2025-06-18", "2025-11-25")
DEFAULT_PROTOCOL_VERSION = "2025-03-26"
MAX_BATCH_REQUESTS = 50


async def handle_mcp_request(request: Request) -> Response:
    origin_error = _validate_origin(request)
    if origin_error is not None:
        return origin_error

    if request.method == "OPTIONS":
        return Response(status_code=204)

    if request.method != "POST":
        return _error_response(
            None,
            "Method not allowed",
            status_code=405,
            code="method_not_allowed",
            protocol_version=_protocol_version(request),
        )

    try:
        payload = await request.json()
    except (json.JSONDecodeError, ValueError, UnicodeDecodeError):
        return _error_response(
            None,
            "Invalid JSON",
            code=-32700,
            protocol_version=_protocol_version(request),
        )

    if isinstance(payload, list):
        return await _handle_batch(payload, request)
    if not isinstance(payload, dict):
        return _error_response(
            None,
            "Invalid JSON-RPC request",
            code="invalid_request",
            protocol_version=_protocol_version(request),
        )

    result = await _handle_single(payload, request)
    headers = {"MCP-Protocol-Version": _protocol_version(request)}
    if result is None:
        return Response(status_code=202, headers=headers)
    return _json_response(result, headers=headers)


async def _handle_batch(payloads: list[object], request: Request) -> Response:
    if len(payloads) > MAX_BATCH_REQUESTS:
        return _error_response(
            None,
            f"Batch request too large (max {MAX_BATCH_REQUESTS})",
            code="batch_too_large",
            protocol_version=_protocol_version(request),
        )
    if not payloads:
        return _error_response(
            None,
            "Invalid JSON-RPC batch request",
            code="invalid_request",
            protocol_version=_protocol_version(request),
        )

    responses: list[dict[str, object]] = []
    for item in payloads:
        if not isinstance(item, dict):
            responses.append(
                _error_body(None, "Invalid JSON-RPC batch entry", code="invalid_request")
            )
            continue
        response = await _handle_single(item, request)
        if response is not None:
            responses.append(response)

    headers = {"MCP-Protocol-Version": _protocol_version(request)}
    if not responses:
        return Response(status_code=202, headers=headers)
    return _json_response(responses, headers=headers)


async def _handle_single(
    payload: dict[str, object],
    request: Request,
) -> dict[str, object] | None:
    request_id = payload.get("id")
    method = payload.get("method")
    params = payload.get("params", {})
    params_dict = params if isinstance(params, dict) else {}

    # Notifications and client responses carry no id and get no reply.
    if request_id is None:
        return None

    if not isinstance(method, str):
        return _error_body(request_id, "Invalid JSON-RPC method", code="invalid_request")

    state = request.app.state
    if method == "initialize":
        requested_version = params_dict.get("protocolVersion")
        if isinstance(requested_version, str) and requested_version in SUPPORTED_PROTOCOL_VERSIONS:
            negotiated = requested_version
        else:
            negotiated = SUPPORTED_PROTOCOL_VERSIONS[-1]
        return _result_body(
            request_id,
            {
                "protocolVersion": negotiated,
                "serverInfo": {"name": state.server_name, "version": __version__},
                "instructions": state.instructions,
                "capabilities": {
                    "tools": {"listChanged": False},
                    "resources": {"listChanged": False, "subscribe": False},
                },
            },
        )

    if method == "ping":
        return _result_body(request_id, {})

    if method == "tools/list":
        registry: Mapping[str, ToolSpec] = state.tool_registry
        return _result_body(request_id, {"tools": [_describe_tool(tool) for tool in registry.values()]})

    if method == "tools/call":
        return await _call_tool(request_id, params_dict, state.tool_registry)

    if method == "resources/list":
        resources: Mapping[str, ResourceSpec] = state.resources
        listed = [
            {
                "uri": resource.uri,
                "name": resource.name,
                "description": resource.description,
                "mimeType": resource.mime_type,
            }
            for resource in resources.values()
        ]
        return _result_body(request_id, {"resources": listed})

    if method == "resources/read":
        uri = params_dict.get("uri")
        if not isinstance(uri, str):
            return _error_body(request_id, "Invalid resource URI", code="invalid_params")
        resource = state.resources.get(uri)
        if resource is None:
            return _error_body(request_id, f"Unknown resource: {uri[:256]}", code="invalid_params")
        return _result_body(
            request_id,
            {
                "contents": [
                    {"uri": resource.uri, "mimeType": resource.mime_type, "text": resource.text}
                ]
            },
        )

    return _error_body(request_id, f"Unsupported method: {method[:256]}", code=-32601)


async def _call_tool(
    request_id: object,
    params: dict[str, object],
    registry: Mapping[str, ToolSpec],
) -> dict[str, object]:
    name = params.get("name")
    if not isinstance(name, str):
        return _error_body(request_id, "Invalid tool name", code="invalid_params")
    arguments = params.get("arguments", {})
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        return _error_body(request_id, "Invalid tool arguments", code="invalid_params")
    tool = registry.get(name)
    if tool is None:
        return _error_body(request_id, f"Unknown tool: {name[:256]}", code="invalid_params")

    try:
        result = await invoke_tool(tool, arguments)
    except (KeyboardInterrupt, SystemExit):
        raise
    except Exception:
        logger.exception("Tool handler error: %s", name)
        return _error_body(request_id, "Internal tool error", code="internal_error")

    body: dict[str, object] = {"content": result.content, "isError": result.is_error}
    if result.structured_content is not None:
        body["structuredContent"] = result.structured_content
    return _result_body(request_id, body)


def _describe_tool(tool: ToolSpec) -> dict[str, object]:
    described: dict[str, object] = {
        "name": tool.name,
        "description": tool.description,
        "inputSchema": tool.input_schema,
    }
    if tool.title:
        described["title"] = tool.title
    if tool.annotations:
        described["annotations"] = {"title": tool.title, **tool.annotations}
    return described


def _result_body(request_id: object, result: dict[str, object]) -> dict[str, object]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error_response(
    request_id: object,
    message: str,
    status_code: int = 400,
    code: str | int = -32000,
    protocol_version: str | None = None,
) -> JSONResponse:
    return JSONResponse(
        _error_body(request_id, message, code=code),
        status_code=status_code,
        headers={"MCP-Protocol-Version": protocol_version or DEFAULT_PROTOCOL_VERSION},
    )


def _error_body(
    request_id: object,
    message: str,
    code: str | int = -32000,
) -> dict[str, object]:
    return {
        "jsonrpc": "2.0",
        "id": request_id,
        "error": {"code": code, "message": message},
    }


def _json_response(
    payload: object,
    status_code: int = 200,
    headers: dict[str, str] | None = None,
) -> Response:
    body = json.dumps(payload, default=json_default, ensure_ascii=False)
    return Response(
        content=body,
        status_code=status_code,
        media_type="application/json",
        headers=headers,
    )


def _protocol_version(request: Request) -> str:
    version = request.headers.get("MCP-Protocol-Version")
    if version in SUPPORTED_PROTOCOL_VERSIONS:
        return version
    return DEFAULT_PROTOCOL_VERSION


def _validate_origin(request: Request) -> JSONResponse | None:
    allowed = tuple(getattr(request.app.state, "http_allowed_origins", ()))
    allow_missing = bool(getattr(request.app.state, "http_allow_missing_origin", True))
    origin = request.headers.get("origin")
    if not origin:
        if allowed and not allow_missing:
            return _error_response(
                None,
                "Missing Origin header",
                status_code=403,
                code="origin_required",
                protocol_version=_protocol_version(request),
            )
        return None
    if not allowed or "*" in allowed:
        return None
    if origin not in allowed:
        return _error_response(
            None,
            "Origin not allowed",
            status_code=403,
            code="origin_not_allowed",
            protocol_version=_protocol_version(request),
        )
    return None
