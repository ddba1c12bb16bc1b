from __future__ import annotations

import datetime
from decimal import Decimal

import pytest

from sp_api_mcp.tools._helpers import (
    optional_timestamp,
    sanitize_page_size,
    trim_string_list,
    with_next_token,
)
from sp_api_mcp.utils.jsonschema import validate_payload
from sp_api_mcp.utils.serialization import json_default, to_jsonable
from sp_api_mcp.utils.time import parse_rfc3339, utc_now_iso


def test_json_default_decimals() -> None:
    assert json_default(Decimal("3")) == 3
    assert json_default(Decimal("19.90")) == 19.9
    assert json_default(Decimal("0.1000000000000000055")) == "0.1000000000000000055"


def test_json_default_other_types() -> None:
    moment = datetime.datetime(2024, 1, 2, 3, 4, 5, tzinfo=datetime.timezone.utc)
    assert json_default(moment) == "2024-01-02T03:04:05+00:00"
    assert json_default(b"abc") == "abc"
    assert json_default(b"\xff") == "/w=="
    assert json_default((1, 2)) == [1, 2]


def test_to_jsonable_normalizes_nested_values() -> None:
    assert to_jsonable({"a": [Decimal("1.5")], "b": None}) == {"a": [1.5], "b": None}


def test_parse_rfc3339_requires_offset() -> None:
    assert parse_rfc3339("2024-01-01T00:00:00Z").tzinfo is not None
    assert parse_rfc3339("2024-01-01T00:00:00+09:00").utcoffset() == datetime.timedelta(hours=9)
    with pytest.raises(ValueError):
        parse_rfc3339("2024-01-01T00:00:00")


def test_utc_now_iso_uses_z_suffix() -> None:
    assert utc_now_iso().endswith("Z")


@pytest.mark.parametrize(
    "value, expected",
    [(1, 1), (100, 100), (0, None), (101, None), (-5, None), (True, None), (20.0, 20), ("5", None)],
)
def test_sanitize_page_size(value, expected) -> None:
    assert sanitize_page_size(value) == expected


def test_optional_timestamp_drops_invalid() -> None:
    assert optional_timestamp({"t": " 2024-01-01T00:00:00Z "}, "t") == "2024-01-01T00:00:00Z"
    assert optional_timestamp({"t": "soon"}, "t") is None
    assert optional_timestamp({}, "t") is None


def test_trim_string_list() -> None:
    assert trim_string_list([" a ", "", 3, "b"]) == ["a", "b"]
    assert trim_string_list("a") == []


def test_with_next_token() -> None:
    assert with_next_token("Retrieved 1 orders", None) == "Retrieved 1 orders"
    assert with_next_token("Retrieved 1 orders", "t").endswith("more available via nextToken")


def test_validate_payload_reports_paths() -> None:
    schema = {
        "type": "object",
        "properties": {"pageSize": {"type": "integer"}},
        "required": ["reportType"],
    }
    messages = validate_payload(schema, {"pageSize": "ten"})
    assert "'reportType' is a required property" in messages
    assert any(message.startswith("pageSize: ") for message in messages)
