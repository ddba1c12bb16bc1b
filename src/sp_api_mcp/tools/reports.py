"""Reports API 2021-06-30 tools.

This API version returns its result objects bare, without a ``payload``
wrapper, so every schema here uses the ``bare`` layout.
"""

from __future__ import annotations

from typing import Any
from urllib.parse import quote

from pydantic import Field

from sp_api_mcp.envelope.decoder import EnvelopeSchema
from sp_api_mcp.envelope.models import CamelModel
from sp_api_mcp.errors import ArgumentError
from sp_api_mcp.execution.http_client import UpstreamRequest
from sp_api_mcp.tools._dispatch import OperationInvoker, Projection, ToolDefinition
from sp_api_mcp.tools._helpers import (
    is_rfc3339,
    optional_string,
    optional_timestamp,
    sanitize_page_size,
    trim_string,
    trim_string_list,
    with_next_token,
)
from sp_api_mcp.tools.base import ResultModel
from sp_api_mcp.utils.time import utc_now_iso

TITLE = "Reports"
REPORTS_PATH = "/reports/2021-06-30/reports"
DOCUMENTS_PATH = "/reports/2021-06-30/documents"

NEXT_TOKEN_EXCLUSIVE_MESSAGE = "when nextToken is provided, omit additional filters"


class Report(CamelModel):
    report_id: str = ""
    report_type: str = ""
    processing_status: str = ""
    created_time: str | None = None
    processing_start_time: str | None = None
    processing_end_time: str | None = None
    report_document_id: str | None = None
    marketplace_ids: list[str] | None = None
    data_start_time: str | None = None
    data_end_time: str | None = None


class ReportsList(CamelModel):
    reports: list[Report] = Field(default_factory=list)
    next_token: str | None = None


class CreateReportResponse(CamelModel):
    report_id: str = ""


class ReportDocument(CamelModel):
    report_document_id: str = ""
    url: str = ""
    compression_algorithm: str | None = None


REPORTS_LIST_SCHEMA = EnvelopeSchema.of(ReportsList, layout="bare")
CREATE_REPORT_SCHEMA = EnvelopeSchema.of(CreateReportResponse, layout="bare")
REPORT_SCHEMA = EnvelopeSchema.of(Report, layout="bare")
REPORT_DOCUMENT_SCHEMA = EnvelopeSchema.of(ReportDocument, layout="bare")


class GetReportsResult(ResultModel):
    reports: list[Report] = Field(default_factory=list)
    next_token: str | None = None
    retrieved_at: str


class CreateReportResult(ResultModel):
    report_id: str
    report_type: str
    retrieved_at: str


class GetReportResult(ResultModel):
    report_id: str
    report_type: str
    processing_status: str
    created_time: str
    processing_start_time: str | None = None
    processing_end_time: str | None = None
    report_document_id: str | None = None
    report: Report
    retrieved_at: str


class GetReportDocumentResult(ResultModel):
    report_document_id: str
    url: str
    compression_algorithm: str | None = None
    retrieved_at: str


_GET_REPORTS_LIST_FILTERS = {
    "reportTypes": "reportTypes",
    "processingStatuses": "processingStatuses",
    "marketplaceIds": "marketplaceIds",
}


def has_get_reports_filters(args: dict[str, Any]) -> bool:
    if any(trim_string_list(args.get(key)) for key in _GET_REPORTS_LIST_FILTERS):
        return True
    if optional_string(args, "createdSince") or optional_string(args, "createdUntil"):
        return True
    return args.get("pageSize") is not None


def prepare_get_reports(args: dict[str, Any]) -> UpstreamRequest:
    next_token = optional_string(args, "nextToken")
    if next_token:
        if has_get_reports_filters(args):
            raise ArgumentError(NEXT_TOKEN_EXCLUSIVE_MESSAGE)
        return UpstreamRequest("GET", REPORTS_PATH, params={"nextToken": next_token})

    params: dict[str, object] = {
        param_name: trim_string_list(args.get(arg_name))
        for arg_name, param_name in _GET_REPORTS_LIST_FILTERS.items()
    }
    params["pageSize"] = sanitize_page_size(args.get("pageSize"))
    params["createdSince"] = optional_timestamp(args, "createdSince")
    params["createdUntil"] = optional_timestamp(args, "createdUntil")
    return UpstreamRequest("GET", REPORTS_PATH, params=params)


def prepare_create_report(args: dict[str, Any]) -> UpstreamRequest:
    report_type = optional_string(args, "reportType")
    if report_type is None:
        raise ArgumentError("reportType is required")
    marketplaces = trim_string_list(args.get("marketplaceIds"))
    if not marketplaces:
        raise ArgumentError("marketplaceIds is required")

    body: dict[str, object] = {"reportType": report_type, "marketplaceIds": marketplaces}
    for key in ("dataStartTime", "dataEndTime"):
        value = optional_string(args, key)
        if value is None:
            continue
        if not is_rfc3339(value):
            raise ArgumentError(f"{key} must be in ISO 8601 format")
        body[key] = value

    options = args.get("reportOptions")
    if isinstance(options, dict) and options:
        body["reportOptions"] = {str(key): str(value) for key, value in options.items()}
    return UpstreamRequest("POST", REPORTS_PATH, json_body=body)


def _require(args: dict[str, Any], key: str) -> str:
    value = trim_string(args.get(key))
    if not value:
        raise ArgumentError(f"{key} is required")
    return value


async def get_reports(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    request = prepare_get_reports(args)
    envelope = await invoker.fetch("reports.getReports", "getReports", REPORTS_LIST_SCHEMA, request)
    result = GetReportsResult(
        reports=envelope.payload.reports,
        next_token=envelope.next_token,
        retrieved_at=utc_now_iso(),
    )
    summary = with_next_token(f"Retrieved {len(result.reports)} reports", result.next_token)
    return Projection(result, summary)


async def create_report(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    request = prepare_create_report(args)
    envelope = await invoker.fetch(
        "reports.createReport", "createReport", CREATE_REPORT_SCHEMA, request
    )
    report_type = str(request.json_body["reportType"])
    result = CreateReportResult(
        report_id=envelope.payload.report_id,
        report_type=report_type,
        retrieved_at=utc_now_iso(),
    )
    return Projection(result, f"Created {report_type} report with ID {result.report_id}")


async def get_report(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    report_id = _require(args, "reportId")
    envelope = await invoker.fetch(
        "reports.getReport",
        "getReport",
        REPORT_SCHEMA,
        UpstreamRequest("GET", f"{REPORTS_PATH}/{quote(report_id, safe='')}"),
    )
    report = envelope.payload
    result = GetReportResult(
        report_id=report.report_id,
        report_type=report.report_type,
        processing_status=report.processing_status,
        created_time=report.created_time or "",
        processing_start_time=report.processing_start_time or None,
        processing_end_time=report.processing_end_time or None,
        report_document_id=report.report_document_id or None,
        report=report,
        retrieved_at=utc_now_iso(),
    )
    summary = f"Report {result.report_id} ({result.report_type}) - Status: {result.processing_status}"
    return Projection(result, summary)


async def get_report_document(invoker: OperationInvoker, args: dict[str, Any]) -> Projection:
    document_id = _require(args, "reportDocumentId")
    envelope = await invoker.fetch(
        "reports.getReportDocument",
        "getReportDocument",
        REPORT_DOCUMENT_SCHEMA,
        UpstreamRequest("GET", f"{DOCUMENTS_PATH}/{quote(document_id, safe='')}"),
    )
    document = envelope.payload
    result = GetReportDocumentResult(
        report_document_id=document.report_document_id,
        url=document.url,
        compression_algorithm=document.compression_algorithm or None,
        retrieved_at=utc_now_iso(),
    )
    summary = f"Retrieved download URL for report document {result.report_document_id}"
    return Projection(result, summary)


def _string_array(description: str) -> dict[str, object]:
    return {"type": "array", "items": {"type": "string"}, "description": description}


GET_REPORTS_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "reportTypes": _string_array("Report types to include, e.g. GET_MERCHANT_LISTINGS_ALL_DATA."),
        "processingStatuses": _string_array(
            "Processing statuses to include (CANCELLED, DONE, FATAL, IN_PROGRESS, IN_QUEUE)."
        ),
        "marketplaceIds": _string_array("Marketplace identifiers to include."),
        "pageSize": {
            "type": "integer",
            "description": "Optional page size between 1 and 100.",
        },
        "createdSince": {
            "type": "string",
            "description": "ISO 8601 timestamp; only reports created at or after it.",
        },
        "createdUntil": {
            "type": "string",
            "description": "ISO 8601 timestamp; only reports created before it.",
        },
        "nextToken": {
            "type": "string",
            "description": "Pagination token returned from a previous getReports call.",
        },
    },
    "additionalProperties": False,
}

CREATE_REPORT_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "reportType": {
            "type": "string",
            "description": (
                "Report type identifier, e.g. GET_FLAT_FILE_ALL_ORDERS_DATA_BY_LAST_UPDATE."
            ),
        },
        "marketplaceIds": _string_array("Marketplaces the report covers."),
        "dataStartTime": {
            "type": "string",
            "description": "ISO 8601 start of the reporting window.",
        },
        "dataEndTime": {
            "type": "string",
            "description": "ISO 8601 end of the reporting window.",
        },
        "reportOptions": {
            "type": "object",
            "additionalProperties": {"type": "string"},
            "description": "Additional report-type specific options.",
        },
    },
    "required": ["reportType", "marketplaceIds"],
    "additionalProperties": False,
}

GET_REPORT_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "reportId": {"type": "string", "description": "Identifier returned by createReport."},
    },
    "required": ["reportId"],
    "additionalProperties": False,
}

GET_REPORT_DOCUMENT_INPUT_SCHEMA: dict[str, object] = {
    "type": "object",
    "properties": {
        "reportDocumentId": {
            "type": "string",
            "description": "Document identifier from a completed report.",
        },
    },
    "required": ["reportDocumentId"],
    "additionalProperties": False,
}

DEFINITIONS: tuple[ToolDefinition, ...] = (
    ToolDefinition(
        name="reports.getReports",
        title=TITLE,
        description=(
            "List reports filtered by type, processing status, marketplace and creation "
            "time. When supplying a next token, omit other filters."
        ),
        input_schema=GET_REPORTS_INPUT_SCHEMA,
        execute=get_reports,
    ),
    ToolDefinition(
        name="reports.createReport",
        title=TITLE,
        description=(
            "Submit an asynchronous report creation request. Poll reports.getReport until the "
            "report is DONE, then fetch its document."
        ),
        input_schema=CREATE_REPORT_INPUT_SCHEMA,
        execute=create_report,
        read_only=False,
        idempotent=False,
    ),
    ToolDefinition(
        name="reports.getReport",
        title=TITLE,
        description="Return the processing status and metadata of a report.",
        input_schema=GET_REPORT_INPUT_SCHEMA,
        execute=get_report,
    ),
    ToolDefinition(
        name="reports.getReportDocument",
        title=TITLE,
        description="Return the download URL and compression algorithm for a report document.",
        input_schema=GET_REPORT_DOCUMENT_INPUT_SCHEMA,
        execute=get_report_document,
    ),
)
