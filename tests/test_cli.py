__license__ = "GNU Affero General Public License http://www.gnu.org/licenses/agpl.html"
__copyright__ = "Copyright (C) 2024 The Printerface Project - Released under terms of the AGPLv3 License"

from unittest import mock

import pytest
from click.testing import CliRunner

from printerface.cli import cli
from printerface.exceptions import ProtocolError
from printerface.job import FilamentInfo, FileInfo, JobInfo, JobProgress


@pytest.fixture
def tracker():
    tracker = mock.Mock()
    with mock.patch(
        "printerface.cli.create_tracker", return_value=(mock.Mock(), tracker)
    ):
        yield tracker


@pytest.fixture
def runner(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("apikey: ABCDEF\n", encoding="utf-8")

    runner = CliRunner()

    def invoke(*args):
        return runner.invoke(cli, ["--config", str(config)] + list(args))

    return invoke


def test_info(runner, tracker):
    tracker.get_info.return_value = JobInfo(
        file=FileInfo(name="a.gcode", origin="local", size=100, date=111),
        estimated_print_time=120,
        filament=FilamentInfo(length=810, volume=5.5),
    )

    result = runner("info")

    assert result.exit_code == 0
    assert "File: a.gcode" in result.output
    assert "EstimatedPrintTime: 120" in result.output
    assert "FilamentVolume: 5.5" in result.output


def test_progress_without_job(runner, tracker):
    tracker.get_progress.return_value = JobProgress()

    result = runner("progress")

    assert result.exit_code == 0
    assert result.output == "No Job found running\n"


def test_protocol_error(runner, tracker):
    tracker.get_info.side_effect = ProtocolError("Server response is not valid JSON")

    result = runner("info")

    assert result.exit_code == 1


@pytest.mark.parametrize(
    "command, method",
    (
        ("start", "start_job"),
        ("cancel", "cancel_job"),
        ("restart", "restart_job"),
        ("pause", "pause_job"),
        ("resume", "resume_job"),
        ("toggle", "toggle_job"),
    ),
)
def test_job_commands(runner, tracker, command, method):
    getattr(tracker, method).return_value = (
        "409 Current jobstate is incompatible with this type of interaction"
    )

    result = runner(command)

    assert result.exit_code == 0
    getattr(tracker, method).assert_called_once_with()
    assert "409 Current jobstate" in result.output


def test_invalid_config(tmp_path, tracker):
    config = tmp_path / "config.yaml"
    config.write_text("port: nope\n", encoding="utf-8")

    result = CliRunner().invoke(cli, ["--config", str(config), "info"])

    assert result.exit_code == 1
    tracker.get_info.assert_not_called()


def test_options_override_config(tmp_path):
    config = tmp_path / "config.yaml"
    config.write_text("host: octopi.local\n", encoding="utf-8")

    with mock.patch("printerface.cli.create_tracker") as create_tracker:
        tracker = mock.Mock()
        tracker.start_job.return_value = ""
        create_tracker.return_value = (mock.Mock(), tracker)

        result = CliRunner().invoke(
            cli, ["--config", str(config), "--port", "8080", "start"]
        )

    assert result.exit_code == 0
    settings = create_tracker.call_args[0][0]
    assert settings.host == "octopi.local"
    assert settings.port == 8080
