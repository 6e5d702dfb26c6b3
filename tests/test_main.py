# Tests for the jiraproxy CLI.
# Created: 2026-10-18

from unittest.mock import patch

import pytest

from jiraproxy.__main__ import build_parser, main
from jiraproxy.config import Settings


class TestParser:
    def test_defaults(self):
        args = build_parser().parse_args([])
        assert args.command == "serve"
        assert args.host is None
        assert args.port is None
        assert args.dev is False

    def test_rejects_unknown_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["dance"])


class TestMain:
    @patch("jiraproxy.__main__.setup_logging")
    @patch("jiraproxy.__main__.get_settings")
    @patch("jiraproxy.api.serve.run_api_server")
    def test_uses_settings_defaults(self, mock_run, mock_settings, mock_logging):
        mock_settings.return_value = Settings(web_host="0.0.0.0", web_port=9001, log_level="DEBUG")

        main([])

        mock_run.assert_called_once_with(host="0.0.0.0", port=9001, dev=False)
        mock_logging.assert_called_once_with(level="DEBUG")

    @patch("jiraproxy.__main__.setup_logging")
    @patch("jiraproxy.__main__.get_settings")
    @patch("jiraproxy.api.serve.run_api_server")
    def test_flags_override_settings(self, mock_run, mock_settings, _mock_logging):
        mock_settings.return_value = Settings()

        main(["serve", "--host", "127.0.0.2", "--port", "7000", "--dev"])

        mock_run.assert_called_once_with(host="127.0.0.2", port=7000, dev=True)
