"""HTTP transport for the MCP server."""
