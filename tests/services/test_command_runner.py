import subprocess
import sys

import pytest

from ranchermigrator.errors import MigratorError
from ranchermigrator.services.command_runner import CommandRunner, failure_message


class DummyLogger:
    def __init__(self):
        self.messages = []

    def debug(self, message, *args, **_kwargs):
        self.messages.append(message % args)


def test_command_runner_captures_stdout_stderr_and_returncode():
    runner = CommandRunner(logger=DummyLogger())

    result = runner.run(
        [
            sys.executable,
            "-c",
            "import sys; sys.stdout.write('out'); sys.stderr.write('err'); sys.exit(3)",
        ]
    )

    assert result.returncode == 3
    assert result.stdout == "out"
    assert result.stderr == "err"


def test_command_runner_raises_with_stderr_when_checked():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(MigratorError, match="boom"):
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write('boom'); sys.exit(1)"],
            check=True,
        )


def test_command_runner_reports_missing_command():
    runner = CommandRunner(logger=DummyLogger())

    with pytest.raises(MigratorError, match="Required command not found: definitely-not-a-cli"):
        runner.run(["definitely-not-a-cli", "version"])


def test_command_runner_masks_sensitive_values_in_logs_and_errors():
    logger = DummyLogger()
    runner = CommandRunner(logger=logger, sensitive_values=["s3cr3t"])

    with pytest.raises(MigratorError) as error:
        runner.run(
            [sys.executable, "-c", "import sys; sys.stderr.write(sys.argv[1]); sys.exit(1)", "s3cr3t"],
            check=True,
        )

    assert "s3cr3t" not in str(error.value)
    assert "***" in str(error.value)
    assert all("s3cr3t" not in message for message in logger.messages)


def test_failure_message_appends_stderr_only_when_present():
    with_stderr = subprocess.CompletedProcess(["x"], 1, stdout="", stderr="denied\n")
    without_stderr = subprocess.CompletedProcess(["x"], 1, stdout="", stderr="")

    assert failure_message("cannot list", with_stderr) == "cannot list: denied"
    assert failure_message("cannot list", without_stderr) == "cannot list"
