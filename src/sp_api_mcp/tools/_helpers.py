"""Argument normalization shared by the resource tools."""

from __future__ import annotations

from collections.abc import Mapping

from sp_api_mcp.utils.time import parse_rfc3339

MIN_PAGE_SIZE = 1
MAX_PAGE_SIZE = 100


def trim_string(value: object) -> str:
    if not isinstance(value, str):
        return ""
    return value.strip()


def optional_string(args: Mapping[str, object], key: str) -> str | None:
    return trim_string(args.get(key)) or None


def trim_string_list(value: object) -> list[str]:
    """Trim every entry and drop the blank ones."""
    if not isinstance(value, (list, tuple)):
        return []
    return [item.strip() for item in value if isinstance(item, str) and item.strip()]


def sanitize_page_size(value: object) -> int | None:
    """Return the page size when it lies within 1-100, otherwise ``None``.

    Out-of-range values are dropped rather than rejected; the request then
    goes out without a page size and the upstream default applies.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float):
        if not value.is_integer():
            return None
        value = int(value)
    if not isinstance(value, int):
        return None
    if value < MIN_PAGE_SIZE or value > MAX_PAGE_SIZE:
        return None
    return value


def optional_timestamp(args: Mapping[str, object], key: str) -> str | None:
    """Return the trimmed timestamp when it parses as RFC 3339, else ``None``."""
    text = optional_string(args, key)
    if text is None:
        return None
    try:
        parse_rfc3339(text)
    except ValueError:
        return None
    return text


def is_rfc3339(text: str) -> bool:
    try:
        parse_rfc3339(text)
    except ValueError:
        return False
    return True


def with_next_token(summary: str, next_token: str | None) -> str:
    if next_token:
        return summary + ", more available via nextToken"
    return summary
