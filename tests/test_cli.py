"""Tests for the command line interface."""

import json
import logging
from argparse import Namespace
from unittest.mock import patch

import pytest

from fibertel_exporter.cli import logging_setup
from fibertel_exporter.cli.args import create_parser, parse_args, validate_args
from fibertel_exporter.cli.formatters import format_json_output, print_summary_to_stderr
from fibertel_exporter.cli.main import main
from fibertel_exporter.exceptions import FibertelConfigurationError
from fibertel_exporter.models import (
    CycleResult,
    DownstreamChannel,
    LoginInfo,
    MetricObservation,
    ModemStatus,
)

from .conftest import make_response

ENV_VARS = [
    "FIBERTEL_URL",
    "FIBERTEL_USERNAME",
    "FIBERTEL_PASSWORD",
    "FIBERTEL_LISTEN_ADDRESS",
    "FIBERTEL_LISTEN_PORT",
    "FIBERTEL_TIMEOUT",
    "FIBERTEL_LOG_FILE",
]


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def make_args(**overrides):
    defaults = {
        "url": "https://192.168.0.1",
        "username": "admin",
        "password": "secret",
        "timeout": 20,
        "listen_address": "0.0.0.0",
        "listen_port": 9420,
        "once": False,
        "debug": False,
        "quiet": False,
        "log_file": None,
    }
    defaults.update(overrides)
    return Namespace(**defaults)


@pytest.mark.cli
class TestArgumentParsing:
    """Test CLI argument parsing."""

    def test_defaults(self):
        args = create_parser().parse_args([])

        assert args.url == "https://192.168.0.1"
        assert args.username == "admin"
        assert args.password is None
        assert args.timeout == 20
        assert args.listen_address == "0.0.0.0"
        assert args.listen_port == 9420
        assert args.once is False

    def test_flags(self):
        args = parse_args(
            [
                "--password",
                "pw",
                "--url",
                "http://10.0.0.1",
                "--username",
                "user",
                "--timeout",
                "45",
                "--listen-port",
                "9000",
                "--once",
                "--debug",
            ]
        )

        assert args.password == "pw"
        assert args.url == "http://10.0.0.1"
        assert args.username == "user"
        assert args.timeout == 45
        assert args.listen_port == 9000
        assert args.once is True
        assert args.debug is True

    def test_environment_defaults(self, monkeypatch):
        monkeypatch.setenv("FIBERTEL_PASSWORD", "from-env")
        monkeypatch.setenv("FIBERTEL_URL", "https://10.1.1.1")
        monkeypatch.setenv("FIBERTEL_LISTEN_PORT", "9500")
        monkeypatch.setenv("FIBERTEL_TIMEOUT", "30")

        args = parse_args([])

        assert args.password == "from-env"
        assert args.url == "https://10.1.1.1"
        assert args.listen_port == 9500
        assert args.timeout == 30

    def test_flags_override_environment(self, monkeypatch):
        monkeypatch.setenv("FIBERTEL_PASSWORD", "from-env")

        args = parse_args(["--password", "from-flag"])

        assert args.password == "from-flag"

    def test_invalid_integer_environment(self, monkeypatch):
        monkeypatch.setenv("FIBERTEL_LISTEN_PORT", "ninety")

        with pytest.raises(SystemExit) as exc_info:
            parse_args(["--password", "pw"])

        assert exc_info.value.code == 2

    def test_flag_overrides_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("FIBERTEL_LISTEN_PORT", "ninety")
        monkeypatch.setenv("FIBERTEL_TIMEOUT", "soon")

        args = parse_args(["--password", "pw", "--listen-port", "9421", "--timeout", "5"])

        assert args.listen_port == 9421
        assert args.timeout == 5

    def test_log_file(self, monkeypatch):
        assert parse_args(["--password", "pw"]).log_file is None
        assert parse_args(["--password", "pw", "--log-file", "/tmp/a.log"]).log_file == "/tmp/a.log"

        monkeypatch.setenv("FIBERTEL_LOG_FILE", "/tmp/b.log")
        assert parse_args(["--password", "pw"]).log_file == "/tmp/b.log"


@pytest.mark.cli
class TestArgumentValidation:
    """Test validation of parsed arguments."""

    def test_valid(self):
        validate_args(make_args())

    @pytest.mark.parametrize(
        "overrides,parameter",
        [
            ({"password": None}, "password"),
            ({"password": ""}, "password"),
            ({"url": "192.168.0.1"}, "url"),
            ({"url": "ftp://192.168.0.1"}, "url"),
            ({"timeout": 0}, "timeout"),
            ({"listen_port": 0}, "listen_port"),
            ({"listen_port": 70000}, "listen_port"),
        ],
    )
    def test_invalid(self, overrides, parameter):
        with pytest.raises(FibertelConfigurationError) as exc_info:
            validate_args(make_args(**overrides))

        assert exc_info.value.details["parameter"] == parameter


@pytest.mark.cli
class TestFormatters:
    """Test --once output formatting."""

    def test_json_output(self):
        result = CycleResult(
            login=LoginInfo(error="ok", user="admin", uid="1"),
            login_ok=True,
            status=ModemStatus(error="ok", downstream=[DownstreamChannel(id="1")]),
            logout_ok=True,
        )
        observations = [MetricObservation("fibertel_login_success_bool", 1.0)]

        output = format_json_output(result, observations, make_args(), 1.5, performance={"x": 1})

        assert output["station_url"] == "https://192.168.0.1"
        assert output["login_ok"] is True
        assert output["channel_counts"] == {
            "downstream": 1,
            "upstream": 0,
            "ofdm_downstream": 0,
            "ofdm_upstream": 0,
        }
        assert output["observations"] == [{"name": "fibertel_login_success_bool", "labels": {}, "value": 1.0}]
        assert output["performance"] == {"x": 1}
        json.dumps(output)

    def test_json_output_without_status(self):
        output = format_json_output(CycleResult(errors=["login: rejected"]), [], make_args(), 0.1)

        assert output["channel_counts"]["downstream"] == 0
        assert output["errors"] == ["login: rejected"]
        assert "performance" not in output

    def test_summary(self, capsys):
        result = CycleResult(
            login=LoginInfo(error="ok", user="admin", uid="1", default_password="Yes"),
            login_ok=True,
            status=ModemStatus(error="ok", downstream=[DownstreamChannel(channel_id="5", frequency="550.0")]),
            logout_ok=False,
            errors=["logout: rejected"],
        )

        print_summary_to_stderr(result)

        captured = capsys.readouterr()
        assert captured.out == ""
        assert "Downstream Channels: 1" in captured.err
        assert "default password" in captured.err
        assert "Logout: FAILED" in captured.err
        assert "Error: logout: rejected" in captured.err


@pytest.mark.cli
class TestMain:
    """Test the entry point."""

    def test_missing_password(self, capsys):
        assert main([]) == 2
        assert "password is required" in capsys.readouterr().err

    def test_once_success(self, capsys, mock_station_request, login_flow, station_responses):
        mock_station_request.side_effect = login_flow + [
            make_response(station_responses["modem_status_single"]),
            make_response(station_responses["logout_success"]),
        ]

        exit_code = main(["--password", "pw", "--once", "--quiet"])

        assert exit_code == 0
        output = json.loads(capsys.readouterr().out)
        assert output["login_ok"] is True
        assert output["logout_ok"] is True
        assert output["channel_counts"]["downstream"] == 1
        names = [o["name"] for o in output["observations"]]
        assert "fibertel_downstream_power_dBmV" in names
        assert output["performance"]["session_metrics"]["total_operations"] == 6

    def test_once_login_failure(self, capsys, mock_station_request, station_responses):
        mock_station_request.side_effect = [
            make_response(station_responses["bootstrap"]),
            make_response(station_responses["salts"]),
            make_response(station_responses["login_failure"]),
        ]

        exit_code = main(["--password", "wrong", "--once"])

        captured = capsys.readouterr()
        assert exit_code == 1
        output = json.loads(captured.out)
        assert [o["value"] for o in output["observations"]] == [0.0, 0.0]
        assert "Login: FAILED" in captured.err

    def test_serve_registers_collector(self):
        with patch("fibertel_exporter.cli.main.REGISTRY") as registry, patch(
            "fibertel_exporter.cli.main.start_http_server"
        ) as start_server, patch("fibertel_exporter.cli.main.time.sleep", side_effect=KeyboardInterrupt):
            exit_code = main(["--password", "pw", "--listen-port", "9555", "--listen-address", "127.0.0.1"])

        assert exit_code == 0
        registry.register.assert_called_once()
        start_server.assert_called_once_with(9555, addr="127.0.0.1")

    def test_unexpected_error(self, capsys):
        with patch("fibertel_exporter.cli.main.REGISTRY") as registry:
            registry.register.side_effect = ValueError("Duplicated timeseries")

            exit_code = main(["--password", "pw"])

        assert exit_code == 1
        err = capsys.readouterr().err
        assert "Duplicated timeseries" in err
        assert "Troubleshooting suggestions" in err

    def test_log_file_passed_to_logging(self):
        with patch("fibertel_exporter.cli.main.setup_logging") as setup, patch(
            "fibertel_exporter.cli.main.REGISTRY"
        ), patch("fibertel_exporter.cli.main.start_http_server"), patch(
            "fibertel_exporter.cli.main.time.sleep", side_effect=KeyboardInterrupt
        ):
            main(["--password", "pw", "--quiet", "--log-file", "/tmp/fibertel.log"])

        setup.assert_called_once_with(debug=False, quiet=True, log_file="/tmp/fibertel.log")


@pytest.mark.cli
class TestLoggingSetup:
    """Test logging configuration."""

    def test_log_file_receives_records(self, monkeypatch, tmp_path):
        monkeypatch.setattr(logging_setup, "_logging_configured", False)
        root = logging.getLogger()
        previous_handlers = list(root.handlers)
        previous_level = root.level
        log_path = tmp_path / "exporter.log"

        try:
            logging_setup.setup_logging(log_file=str(log_path))
            logging.getLogger("fibertel-exporter").info("Retrieved 5 channels")
        finally:
            for handler in list(root.handlers):
                root.removeHandler(handler)
                handler.close()
            for handler in previous_handlers:
                root.addHandler(handler)
            root.setLevel(previous_level)

        contents = log_path.read_text(encoding="utf-8")
        assert "INFO - fibertel-exporter - Retrieved 5 channels" in contents

    def test_configured_only_once(self, monkeypatch, tmp_path):
        monkeypatch.setattr(logging_setup, "_logging_configured", True)
        log_path = tmp_path / "never.log"

        logging_setup.setup_logging(log_file=str(log_path))

        assert not log_path.exists()
