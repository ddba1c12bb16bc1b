"""JSON Schema validation wrapper."""

from __future__ import annotations

from jsonschema import Draft202012Validator


def validate_payload(schema: dict[str, object], payload: dict[str, object]) -> list[str]:
    """Validate payload against schema and return error messages.

    Messages are prefixed with the JSON path of the offending field when the
    error is not at the document root, and are ordered by that path so the
    output is stable across runs.
    """
    validator = Draft202012Validator(schema)
    errors = sorted(
        validator.iter_errors(payload),
        key=lambda error: [str(part) for part in error.absolute_path],
    )
    messages: list[str] = []
    for error in errors:
        path = ".".join(str(part) for part in error.absolute_path)
        messages.append(f"{path}: {error.message}" if path else error.message)
    return messages
