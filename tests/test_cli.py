"""Tests for the command-line entry point."""

from pathlib import Path

import pytest

from mcp_calculator import cli


@pytest.fixture
def captured_run(monkeypatch):
    """Replace uvicorn.run and record its arguments."""
    calls = []
    monkeypatch.setattr(cli.uvicorn, "run", lambda app, **kwargs: calls.append((app, kwargs)))
    return calls


class TestParser:
    """Tests for argument parsing."""

    def test_defaults(self):
        args = cli.build_parser().parse_args([])

        assert args.config is None
        assert args.host is None
        assert args.port is None

    def test_overrides(self):
        args = cli.build_parser().parse_args(["-c", "x.yaml", "--port", "8000", "--log-level", "debug"])

        assert args.config == Path("x.yaml")
        assert args.port == 8000
        assert args.log_level == "DEBUG"

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            cli.build_parser().parse_args(["--version"])

        assert exc_info.value.code == 0
        assert "1.0.0" in capsys.readouterr().out


class TestMain:
    """Tests for main()."""

    def test_missing_config_returns_error(self, tmp_path: Path, captured_run, capsys):
        assert cli.main(["--config", str(tmp_path / "missing.yaml")]) == 1
        assert "Error loading config" in capsys.readouterr().err
        assert captured_run == []

    def test_runs_with_overrides(self, tmp_path: Path, captured_run):
        config = tmp_path / "server.yaml"
        config.write_text('version: "1.0"\nserver:\n  port: 9000\n')

        assert cli.main(["--config", str(config), "--host", "0.0.0.0", "--port", "9100"]) == 0

        (app, kwargs) = captured_run[0]
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9100
        assert kwargs["log_config"] is None
        assert app.state.config.port == 9100

    def test_keyboard_interrupt(self, monkeypatch):
        def interrupted(app, **kwargs):
            raise KeyboardInterrupt

        monkeypatch.setattr(cli.uvicorn, "run", interrupted)

        assert cli.main([]) == 130
