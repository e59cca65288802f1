"""Subprocess execution service for ranchermigrator."""

import subprocess
from typing import Iterable, List, Set

from ranchermigrator.constants import MASK
from ranchermigrator.errors import MigratorError
from ranchermigrator.errors_catalog import actionable_error


class CommandRunner:
    """Runs external commands and captures their text output."""

    def __init__(self, logger, sensitive_values: Iterable[str] = ()):
        self.logger = logger
        self.sensitive_values: Set[str] = {value for value in sensitive_values if value}

    def mask(self, text: str) -> str:
        for value in self.sensitive_values:
            text = text.replace(value, MASK)
        return text

    def format_command(self, cmd: List[str]) -> str:
        return self.mask(" ".join(cmd))

    def run(self, cmd: List[str], check: bool = False) -> subprocess.CompletedProcess:
        cmd_str = self.format_command(cmd)
        self.logger.debug("Executing: %s", cmd_str)

        try:
            result = subprocess.run(cmd, text=True, capture_output=True)
        except FileNotFoundError as exc:
            raise MigratorError(actionable_error("command_not_found", command=cmd[0])) from exc
        except OSError as exc:
            raise MigratorError(f"Failed to execute command: {cmd_str}. {exc}") from exc

        if result.stdout:
            self.logger.debug("Command output: %s", self.mask(result.stdout.strip()))
        if result.stderr:
            self.logger.debug("Command error output: %s", self.mask(result.stderr.strip()))

        if result.returncode == 0 or not check:
            return result

        message = f"Command failed ({result.returncode}): {cmd_str}"
        stderr = (result.stderr or "").strip()
        if stderr:
            message = f"{message}\n{self.mask(stderr)}"
        raise MigratorError(message)


def failure_message(message: str, result: subprocess.CompletedProcess) -> str:
    stderr = (result.stderr or "").strip()
    if stderr:
        return f"{message}: {stderr}"
    return message
