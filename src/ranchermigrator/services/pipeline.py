"""Per-application validation and deletion pipeline."""

import time
from typing import Callable, List, Tuple

from rich.markup import escape

from ranchermigrator.constants import (
    CHECK_MARK,
    CONFIG_MAPS_SETTLE_SECONDS,
    CROSS_MARK,
    RANCHER_APP_SETTLE_SECONDS,
)
from ranchermigrator.errors import MigratorError
from ranchermigrator.models import ApplicationOutcome, ApplicationState, MigrationOptions, StepResult


class ApplicationPipeline:
    """Runs the fail-fast sequence of checks and deletions for one application.

    Steps run in order and each successful step advances the outcome's state:

    - ``argocd_sync``: Argo CD reports the application Synced and Healthy
      (skipped with ``--force``)
    - ``rancher_app``: the Rancher app is listed as active or installing
    - ``config_maps``: the release config maps are deleted
    - ``rancher_delete``: the Rancher app is deleted
    - ``argocd_post_sync``: Argo CD is Synced and Healthy again

    The first failing step marks the outcome as failed and the rest are skipped.
    """

    def __init__(
        self,
        options: MigrationOptions,
        argocd_service,
        rancher_service,
        kubernetes_service,
        logger,
        console,
    ):
        self.options = options
        self.argocd_service = argocd_service
        self.rancher_service = rancher_service
        self.kubernetes_service = kubernetes_service
        self.logger = logger
        self.console = console

    def _steps(self, application: str) -> List[Tuple[str, ApplicationState, Callable[[], str]]]:
        return [
            ("argocd_sync", ApplicationState.SYNC_CHECKED, lambda: self.check_sync(application)),
            (
                "rancher_app",
                ApplicationState.RANCHER_CHECKED,
                lambda: self.check_rancher_app(application),
            ),
            (
                "config_maps",
                ApplicationState.CONFIG_MAPS_DELETED,
                lambda: self.delete_config_maps(application),
            ),
            (
                "rancher_delete",
                ApplicationState.RANCHER_APP_DELETED,
                lambda: self.delete_rancher_app(application),
            ),
            (
                "argocd_post_sync",
                ApplicationState.POST_SYNC_CHECKED,
                lambda: self.check_sync(application, after_deletion=True),
            ),
        ]

    def _prefix(self, application: str) -> str:
        return f"[{self.options.qualified_name(application)}]"

    def check_sync(self, application: str, after_deletion: bool = False) -> str:
        self.argocd_service.check_app_synced(
            application, self.options.namespace, self.options.region
        )
        if after_deletion:
            return f"{self._prefix(application)} still synced in argo cd"
        return f"{self._prefix(application)} synced in argo cd"

    def check_rancher_app(self, application: str) -> str:
        prefix = self._prefix(application)
        self.rancher_service.check_app_present(application, self.options.namespace, prefix=prefix)
        return f"{prefix} found rancher application"

    def delete_config_maps(self, application: str) -> str:
        prefix = self._prefix(application)
        label = self.kubernetes_service.delete_config_maps(
            application, self.options.namespace, prefix=prefix
        )
        time.sleep(CONFIG_MAPS_SETTLE_SECONDS)
        return f"{prefix} successfully deleted configmaps (NAME={label})"

    def delete_rancher_app(self, application: str) -> str:
        prefix = self._prefix(application)
        name = self.rancher_service.delete_app(application, self.options.namespace, prefix=prefix)
        time.sleep(RANCHER_APP_SETTLE_SECONDS)
        return f"{prefix} successfully deleted rancher application {name}"

    def run(self, application: str) -> ApplicationOutcome:
        outcome = ApplicationOutcome(application=application)
        self.logger.debug("Starting pipeline for %s", application)

        for name, next_state, step in self._steps(application):
            if name == "argocd_sync" and self.options.force:
                message = f"{self._prefix(application)} skipped argo cd sync check (--force)"
                self.console.print(f"[yellow]-[/yellow] {escape(message)}")
                outcome.record(StepResult(name, True, message, skipped=True), next_state)
                continue

            try:
                message = step()
            except MigratorError as exc:
                self._report_failure(outcome, name, str(exc))
                break
            except Exception as exc:
                self.logger.exception("Unexpected error in %s for %s", name, application)
                self._report_failure(
                    outcome, name, f"{self._prefix(application)} unexpected error: {exc}"
                )
                break

            self.console.print(f"[green]{CHECK_MARK}[/green] {escape(message)}")
            self.logger.debug("%s: %s -> %s", application, name, next_state.value)
            outcome.record(StepResult(name, True, message), next_state)

        return outcome

    def _report_failure(self, outcome: ApplicationOutcome, step_name: str, error: str):
        self.console.print(f"[red]{CROSS_MARK}[/red] {escape(error)}")
        self.logger.debug("%s failed at %s", outcome.application, step_name)
        outcome.fail(step_name, error)
