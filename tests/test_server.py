import sys
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

from sp_api_mcp.server import _run_http, build_server, get_server, run_entrypoint


@patch("sp_api_mcp.server.MCPServer")
@patch("sp_api_mcp.server.configure_logging")
def test_build_server_registers_tools_and_resources(mock_log, mock_server_cls, app_context):
    mock_instance = MagicMock()
    mock_server_cls.return_value = mock_instance

    server = build_server(app_context)

    assert server is mock_instance
    assert mock_server_cls.call_args.kwargs["name"] == "Selling Partner MCP Server"
    mock_log.assert_called_once()
    registered = [call.args[0].name for call in mock_instance.add_tool.call_args_list]
    assert "orders.getOrder" in registered
    assert "catalog.lookupItem" in registered
    assert mock_instance.add_resource.call_count == 12


@patch("sp_api_mcp.server.MCPServer")
@patch("sp_api_mcp.server.configure_logging")
@patch("sp_api_mcp.server.logger")
def test_build_server_warns_when_client_unready(mock_logger, _mock_log, _mock_cls, app_context):
    app_context.selling_partner.ready = False
    app_context.selling_partner.detail = "missing credentials"

    build_server(app_context)

    mock_logger.warning.assert_called_once()
    assert mock_logger.warning.call_args.args[1] == "missing credentials"


@patch("sp_api_mcp.server.load_settings")
@patch("sp_api_mcp.server.configure_logging")
@patch("sp_api_mcp.transport.http_server.create_http_app")
def test_run_http_serves_app_with_uvicorn(mock_create_http_app, mock_log, mock_settings):
    settings = MagicMock()
    settings.server.host = "0.0.0.0"
    settings.server.port = 8000
    mock_settings.return_value = settings

    uvicorn_run = MagicMock()
    with patch.dict(sys.modules, {"uvicorn": SimpleNamespace(run=uvicorn_run)}):
        _run_http()

    mock_log.assert_called_once()
    mock_create_http_app.assert_called_once_with()
    uvicorn_run.assert_called_once_with(
        mock_create_http_app.return_value,
        host="0.0.0.0",
        port=8000,
        ws="none",
        log_config=None,
    )


@patch("sp_api_mcp.server.load_settings")
@patch("sp_api_mcp.server._run_http")
def test_run_entrypoint_http_branch(mock_run_http, mock_load_settings):
    mock_load_settings.return_value = MagicMock(server=MagicMock(transport_mode="http"))

    run_entrypoint()

    mock_run_http.assert_called_once_with()


@patch("sp_api_mcp.server.load_settings")
@patch("sp_api_mcp.server.get_server")
def test_run_entrypoint_sse_branch(mock_get_server, mock_load_settings):
    mock_load_settings.return_value = MagicMock(
        server=MagicMock(transport_mode="sse", host="127.0.0.1", port=9000)
    )

    run_entrypoint()

    mock_get_server.return_value.run.assert_called_once_with("sse", host="127.0.0.1", port=9000)


@patch("sp_api_mcp.server.load_settings")
@patch("sp_api_mcp.server.get_server")
def test_run_entrypoint_stdio_branch(mock_get_server, mock_load_settings):
    mock_load_settings.return_value = MagicMock(server=MagicMock(transport_mode="stdio"))

    run_entrypoint()

    mock_get_server.return_value.run.assert_called_once_with()


@patch("sp_api_mcp.server.build_server")
def test_get_server_lazy_initializes_once(mock_build_server):
    import sp_api_mcp.server as server_module

    old_server = server_module._server
    server_module._server = None
    try:
        sentinel = MagicMock()
        mock_build_server.return_value = sentinel

        assert get_server() is sentinel
        assert get_server() is sentinel
        mock_build_server.assert_called_once_with()
    finally:
        server_module._server = old_server
