"""Argo CD CLI checks for ranchermigrator."""

import time
from typing import Callable, List

from ranchermigrator.constants import ARGOCD_LOGIN_WAIT_SECONDS
from ranchermigrator.errors import MigratorError
from ranchermigrator.errors_catalog import actionable_error
from ranchermigrator.services.command_runner import failure_message
from ranchermigrator.services.output_matching import argocd_app_synced, argocd_selector


class ArgoCDService:
    """Authenticates against Argo CD and checks application sync/health."""

    def __init__(self, logger, console, run_cmd: Callable):
        self.logger = logger
        self.console = console
        self.run_cmd = run_cmd

    @staticmethod
    def login_command(server: str) -> List[str]:
        return ["argocd", "login", server, "--sso", "--grpc-web-root-path", "/"]

    def ensure_authenticated(self, server: str):
        result = self.run_cmd(["argocd", "app", "list"])
        if result.returncode == 0:
            return

        self.console.print("[yellow]trying to log into argo cd[/yellow]")
        self.logger.info("argocd app list failed, logging into %s", server)
        login = self.run_cmd(self.login_command(server))
        time.sleep(ARGOCD_LOGIN_WAIT_SECONDS)
        if login.returncode != 0:
            raise MigratorError(actionable_error("argocd_login_failed", server=server))

    @staticmethod
    def list_command(application: str, namespace: str, region: str) -> List[str]:
        return ["argocd", "app", "list", "-l", argocd_selector(application, namespace, region)]

    def check_app_synced(self, application: str, namespace: str, region: str):
        prefix = f"[{application}-{namespace}-{region}]"
        result = self.run_cmd(self.list_command(application, namespace, region))
        if result.returncode != 0:
            raise MigratorError(
                failure_message(f"{prefix} cannot list argo cd applications", result)
            )

        if not argocd_app_synced(result.stdout, application, namespace, region):
            raise MigratorError(f"{prefix} not synced in argo cd")
