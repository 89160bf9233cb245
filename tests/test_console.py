"""Tests for the console request logger."""

from io import StringIO

import pytest
from rich.console import Console

from core.config import Settings
from ui.console import ConsoleLogger, status_style


def make_logger(tmp_path, level="INFO"):
    output = StringIO()
    console = Console(file=output, width=200, color_system=None)
    config = Settings(log_dir=str(tmp_path), log_level=level)
    return ConsoleLogger(config, console), output


class TestConsoleLogger:
    """Tests for ConsoleLogger."""

    def test_request_and_response_lines(self, tmp_path):
        logger, output = make_logger(tmp_path)

        logger.log_request("GET", "https://api.apify.com/v2/users/me")
        logger.log_response("GET", "https://api.apify.com/v2/users/me", 200)

        text = output.getvalue()
        assert "Proxying: GET https://api.apify.com/v2/users/me" in text
        assert "Response: 200" in text
        log = (tmp_path / "proxy.log").read_text()
        assert "PROXY: GET https://api.apify.com/v2/users/me" in log
        assert "status=200" in log

    def test_token_hidden_below_debug(self, tmp_path):
        logger, output = make_logger(tmp_path)

        logger.log_token("abc123")

        assert "abc123" not in output.getvalue()
        assert "TOKEN: abc123" in (tmp_path / "proxy.log").read_text()

    def test_token_shown_at_debug(self, tmp_path):
        logger, output = make_logger(tmp_path, level="DEBUG")

        logger.log_token("abc123")

        assert "Using token: abc123" in output.getvalue()

    def test_markup_in_paths_is_escaped(self, tmp_path):
        logger, output = make_logger(tmp_path)

        logger.log_not_found("GET", "/[bold]x")

        assert "/[bold]x" in output.getvalue()

    def test_errors_shown_at_error_level(self, tmp_path):
        logger, output = make_logger(tmp_path, level="ERROR")

        logger.log_request("GET", "/x")
        logger.log_error("upstream", 500, "Connection refused")

        text = output.getvalue()
        assert "Proxying" not in text
        assert "upstream 500: Connection refused" in text


@pytest.mark.parametrize(
    ("status", "style"),
    [(200, "green"), (204, "green"), (302, "cyan"), (404, "yellow"), (500, "red")],
)
def test_status_style(status, style):
    assert status_style(status) == style
