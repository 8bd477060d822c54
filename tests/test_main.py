"""Tests for main entry point."""

from unittest.mock import MagicMock, patch


class TestMain:
    """Tests for __main__ module."""

    def test_runs_with_http_transport_by_default(self) -> None:
        """Server runs with HTTP transport by default."""
        mock_mcp = MagicMock()
        mock_mcp.deps.config.transport = "http"
        mock_mcp.deps.config.http_host = "127.0.0.1"
        mock_mcp.deps.config.http_port = 8000

        with patch("sshdesk.__main__.mcp", mock_mcp):
            from sshdesk.__main__ import run_server

            run_server()

        mock_mcp.run.assert_called_once_with(
            transport="http",
            host="127.0.0.1",
            port=8000,
        )

    def test_runs_with_stdio_when_configured(self) -> None:
        """Server runs with STDIO transport when configured."""
        mock_mcp = MagicMock()
        mock_mcp.deps.config.transport = "stdio"

        with patch("sshdesk.__main__.mcp", mock_mcp):
            from sshdesk.__main__ import run_server

            run_server()

        mock_mcp.run.assert_called_once_with(transport="stdio")
