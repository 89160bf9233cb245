"""Tests for the CLI entry point."""

import pytest

import cli


class FakeServer:
    """Stands in for uvicorn.Server."""

    outcome: BaseException | None = None
    instances: list["FakeServer"] = []

    def __init__(self, config):
        self.config = config
        self.should_exit = False
        FakeServer.instances.append(self)

    def run(self):
        if self.outcome is not None:
            raise self.outcome


@pytest.fixture
def fake_server(monkeypatch):
    FakeServer.outcome = None
    FakeServer.instances = []
    monkeypatch.setattr(cli.uvicorn, "Server", FakeServer)
    return FakeServer


class TestMain:
    """Tests for cli.main."""

    def test_help(self, capsys):
        assert cli.main(["--help"]) == 0
        assert "apify-proxy --dashboard" in capsys.readouterr().out

    def test_config(self, capsys, monkeypatch):
        monkeypatch.setenv("PORT", "4100")

        assert cli.main(["--config"]) == 0

        out = capsys.readouterr().out
        assert "port: 4100" in out
        assert "upstream_base_url: https://api.apify.com/v2" in out

    def test_invalid_config_exits_with_error(self, capsys, monkeypatch):
        monkeypatch.setenv("APIFY_API_BASE_URL", "api.apify.com")

        assert cli.main([]) == 1
        assert "Invalid configuration" in capsys.readouterr().out

    def test_interrupt_exits_cleanly(self, fake_server, capsys, tmp_path):
        fake_server.outcome = KeyboardInterrupt()

        assert cli.main([]) == 0

        out = capsys.readouterr().out
        assert "Starting Apify Proxy Server" in out
        assert "Shutting down proxy server gracefully" in out
        log = (tmp_path / "logs" / "proxy.log").read_text()
        assert "STARTUP" in log
        assert "SHUTDOWN" in log

    def test_server_binds_configured_port(self, fake_server, monkeypatch):
        monkeypatch.setenv("PORT", "4200")

        assert cli.main([]) == 0
        assert fake_server.instances[0].config.port == 4200

    def test_unhandled_fault_exits_with_failure(self, fake_server, capsys):
        fake_server.outcome = RuntimeError("loop died")

        assert cli.main([]) == 1
        assert "RuntimeError: loop died" in capsys.readouterr().out


class TestFatalState:
    """Tests for FatalState."""

    def test_records_first_error_and_stops_server(self):
        state = cli.FatalState()
        server = FakeServer(config=None)
        state.server = server
        first = RuntimeError("first")

        state(first)
        state(ValueError("second"))

        assert state.error is first
        assert server.should_exit is True

    def test_without_server(self):
        state = cli.FatalState()

        state(RuntimeError("early"))

        assert state.error is not None
