from __future__ import annotations

from sp_api_mcp.resources.documentation import (
    DOCUMENTATION_ENTRIES,
    STATUS_NOTE,
    documentation_resources,
)


def test_every_category_has_a_resource() -> None:
    resources = documentation_resources()
    uris = [resource.uri for resource in resources]

    assert len(resources) == len(DOCUMENTATION_ENTRIES) == 12
    assert len(set(uris)) == len(uris)
    assert "amazon-sp-api://orders" in uris
    assert all(resource.mime_type == "text/markdown" for resource in resources)


def test_rendered_markdown_layout() -> None:
    orders = next(entry for entry in DOCUMENTATION_ENTRIES if entry.category == "orders")
    text = orders.render()

    assert text.startswith("# Orders\n\n")
    assert "## Implementation Notes\n- Cover the Orders API" in text
    assert text.endswith(f"## Status\n{STATUS_NOTE}\n")
