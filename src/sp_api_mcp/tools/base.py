"""Tool helpers."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from sp_api_mcp.errors import ArgumentError, ToolFailure
from sp_api_mcp.mcp_runtime import ToolResult
from sp_api_mcp.utils.jsonschema import validate_payload
from sp_api_mcp.utils.serialization import to_jsonable


class ResultModel(BaseModel):
    """Projected tool result; serialized with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def validate_or_raise(schema: dict[str, object], payload: dict[str, object]) -> None:
    errors = validate_payload(schema, payload)
    if errors:
        raise ArgumentError("Input validation failed: " + "; ".join(errors))


def result_from_model(data: BaseModel, summary: str) -> ToolResult:
    structured = to_jsonable(data.model_dump(by_alias=True, exclude_none=True))
    content = [{"type": "text", "text": summary}]
    return ToolResult(
        content=content,
        structured_content=structured if isinstance(structured, dict) else {"result": structured},
    )


def error_result(exc: ToolFailure) -> ToolResult:
    """Create a declared error result from a tool failure."""
    error: dict[str, object] = {
        "type": exc.code,
        "message": exc.message,
    }
    return ToolResult(
        content=[{"type": "text", "text": exc.message}],
        structured_content={"error": error},
        is_error=True,
    )


def text_result(text: str) -> ToolResult:
    return ToolResult(content=[{"type": "text", "text": text}])
