"""Rancher CLI checks and deletions for ranchermigrator."""

from typing import Callable, List

from rich.markup import escape

from ranchermigrator.errors import MigratorError
from ranchermigrator.errors_catalog import actionable_error
from ranchermigrator.services.command_runner import failure_message
from ranchermigrator.services.output_matching import rancher_app_present


class RancherService:
    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    @staticmethod
    def login_command(token: str, context: str, url: str) -> List[str]:
        return ["rancher", "login", "-t", token, "--context", context, url]

    @staticmethod
    def list_command() -> List[str]:
        return ["rancher", "apps", "ls"]

    @staticmethod
    def delete_command(name: str) -> List[str]:
        return ["rancher", "app", "delete", name]

    def login(self, token: str, context: str, url: str):
        result = self.run_cmd(self.login_command(token, context, url))
        if result.returncode != 0:
            raise MigratorError(actionable_error("rancher_login_failed", context=context))

    def check_app_present(self, application: str, namespace: str, prefix: str = ""):
        result = self.run_cmd(self.list_command())
        if result.returncode != 0:
            raise MigratorError(
                failure_message(f"{prefix} cannot list rancher applications", result)
            )

        if not rancher_app_present(result.stdout, application, namespace):
            raise MigratorError(f"{prefix} cannot find rancher application")

    def delete_app(self, application: str, namespace: str, prefix: str = "") -> str:
        """Deletes ``<app>-<namespace>``, falling back to ``<app>``. Returns the deleted name."""
        namespaced_name = f"{application}-{namespace}"
        result = self.run_cmd(self.delete_command(namespaced_name))
        if result.returncode == 0:
            return namespaced_name

        message = f"{prefix} cannot delete rancher application; trying without namespace"
        self.console.print(f"[yellow]{escape(message)}[/yellow]")
        self.logger.debug("rancher app delete %s failed: %s", namespaced_name, result.stderr)

        result = self.run_cmd(self.delete_command(application))
        if result.returncode == 0:
            return application

        raise MigratorError(
            failure_message(f"{prefix} cannot delete rancher application; giving up", result)
        )
